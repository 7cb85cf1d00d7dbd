from fastapi import APIRouter, Depends, HTTPException
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.settings.schemas import SettingCreate, SettingUpdate
from adstudio.modules.settings.service import SettingsService
from adstudio.core.dependencies import require_user, require_admin
from adstudio.core.responses import success
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/settings", tags=["settings"])


def get_settings_service(supabase: Client = Depends(get_supabase)) -> SettingsService:
    return SettingsService(supabase)


@router.get("")
async def list_settings(
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    """All system settings, ordered by category then key."""
    return success(service.list_settings())


@router.get("/public")
async def list_public_settings(
    user_data: Dict = Depends(require_user),
    service: SettingsService = Depends(get_settings_service),
):
    return success(service.list_settings(public_only=True))


@router.get("/{key}")
async def get_setting(
    key: str,
    user_data: Dict = Depends(require_user),
    service: SettingsService = Depends(get_settings_service),
):
    setting = service.get_setting(key)
    if not setting.is_public and user_data["role"] not in ("admin", "superadmin"):
        raise HTTPException(status_code=403, detail="Access denied")
    return success(setting)


@router.post("", status_code=201)
async def create_setting(
    setting_data: SettingCreate,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    return success(service.create_setting(setting_data), message="Setting created successfully")


@router.put("/{key}")
async def update_setting(
    key: str,
    setting_data: SettingUpdate,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    return success(service.update_setting(key, setting_data), message="Setting updated successfully")


@router.delete("/{key}")
async def delete_setting(
    key: str,
    user_data: Dict = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
):
    service.delete_setting(key)
    return success(message="Setting deleted successfully")
