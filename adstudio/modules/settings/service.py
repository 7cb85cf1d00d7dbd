from supabase import Client
from adstudio.modules.settings.schemas import SettingCreate, SettingUpdate, SettingResponse
from typing import List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_settings(self, public_only: bool = False) -> List[SettingResponse]:
        query = self.supabase.table("system_settings").select("*")
        if public_only:
            query = query.eq("is_public", True)
        result = query.order("category").order("key").execute()
        return [SettingResponse(**row) for row in (result.data or [])]

    def find_setting(self, key: str) -> Optional[SettingResponse]:
        result = self.supabase.table("system_settings")\
            .select("*")\
            .eq("key", key)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return SettingResponse(**result.data)

    def get_setting(self, key: str) -> SettingResponse:
        setting = self.find_setting(key)
        if setting is None:
            raise HTTPException(status_code=404, detail="Setting not found")
        return setting

    def create_setting(self, data: SettingCreate) -> SettingResponse:
        if self.find_setting(data.key) is not None:
            raise HTTPException(status_code=400, detail="Setting with this key already exists")
        result = self.supabase.table("system_settings").insert(data.model_dump()).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create setting")
        logger.info(f"Created system setting {data.key}")
        return SettingResponse(**result.data[0])

    def update_setting(self, key: str, data: SettingUpdate) -> SettingResponse:
        self.get_setting(key)
        update_data = data.model_dump(exclude_none=True)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = self.supabase.table("system_settings").update(update_data).eq("key", key).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to update setting")
        return SettingResponse(**result.data[0])

    def delete_setting(self, key: str) -> None:
        self.get_setting(key)
        self.supabase.table("system_settings").delete().eq("key", key).execute()
        logger.info(f"Deleted system setting {key}")
