from fastapi import APIRouter, Depends, Query
from adstudio.database.supabase_client import get_service_supabase
from adstudio.modules.admin.schemas import AdminCreate, RoleUpdate
from adstudio.modules.admin.service import AdminService
from adstudio.core.dependencies import require_admin, require_superadmin
from adstudio.core.responses import success
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/users")
async def list_users(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return success(service.list_users(limit=limit, offset=offset))


@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    role_data: RoleUpdate,
    user_data: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Change a user's role (superadmin only)"""
    profile = service.update_user_role(user_data["id"], user_id, role_data.role)
    return success(profile, message="User role updated successfully")


@router.post("/admins", status_code=201)
async def create_admin(
    admin_data: AdminCreate,
    user_data: Dict = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Create an admin account (superadmin only)"""
    return success(service.create_admin(admin_data), message="Admin account created successfully")


@router.get("/stats")
async def get_system_stats(
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return success(service.get_stats())
