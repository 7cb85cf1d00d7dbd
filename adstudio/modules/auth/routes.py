from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from adstudio.database.supabase_client import get_service_supabase, get_supabase
from adstudio.modules.auth.schemas import ApiKeyCreate, LoginRequest, RegisterRequest
from adstudio.modules.auth.service import ApiKeyService, AuthService
from adstudio.core.dependencies import get_auth_service, get_current_user, require_admin, resolve_role, security
from adstudio.core.responses import success
from supabase import Client
from datetime import datetime, timezone
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_api_key_service(supabase: Client = Depends(get_service_supabase)) -> ApiKeyService:
    return ApiKeyService(supabase)


@router.post("/register", status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    result = service.register(register_data)
    return success(result, message=result.message)


@router.post("/login")
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange email and password for a Supabase access token"""
    return success(service.login(login_data))


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Security(security),
    service: AuthService = Depends(get_auth_service)
):
    service.logout(credentials.credentials)
    return success(message="Logged out successfully")


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase),
):
    """Current user with resolved role, for the dashboard"""
    return success({**current_user, "role": resolve_role(current_user, supabase)})


@router.get("/api-keys")
async def list_api_keys(
    user_data: Dict = Depends(require_admin),
    service: ApiKeyService = Depends(get_api_key_service),
):
    return success(service.list_api_keys())


@router.post("/api-keys", status_code=201)
async def create_api_key(
    key_data: ApiKeyCreate,
    user_data: Dict = Depends(require_admin),
    service: ApiKeyService = Depends(get_api_key_service),
):
    return success(service.create_api_key(key_data), message="API key created successfully")


@router.get("/api-keys/provider/{provider}")
async def get_api_key_for_provider(
    provider: str,
    user_data: Dict = Depends(require_admin),
    service: ApiKeyService = Depends(get_api_key_service),
):
    return success(service.get_api_key_for_provider(provider))


@router.delete("/api-keys/{key_id}")
async def delete_api_key(
    key_id: str,
    user_data: Dict = Depends(require_admin),
    service: ApiKeyService = Depends(get_api_key_service),
):
    service.delete_api_key(key_id)
    return success(message="API key deleted successfully")


@router.get("/health")
async def auth_health():
    return success(
        message="Auth service is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
