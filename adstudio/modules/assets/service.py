from supabase import Client
from adstudio.modules.assets.schemas import AssetCreate, AssetUpdate, GeneratedAssetCreate
from typing import List, Optional, Dict, Any, Tuple
from collections import Counter
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


SEARCH_COLUMNS = ("title", "description", "content")


def ilike_any(columns, term: str) -> str:
    """PostgREST `or` filter matching term anywhere in any column.
    The pattern is double-quoted so commas, dots and parentheses in term stay literal.
    """
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return ",".join(f'{column}.ilike."%{escaped}%"' for column in columns)


def _row_from_model(model, exclude_unset: bool = False) -> Dict[str, Any]:
    """Column dict from a request model; URLs become plain strings."""
    data = model.model_dump(exclude_unset=exclude_unset)
    return {k: str(v) if k.endswith("_url") and v is not None else v for k, v in data.items()}


class AssetService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_assets(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        asset_type: Optional[str] = None,
        source_system: Optional[str] = None,
        favorited: Optional[bool] = None,
        search: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """One page of the user's asset library, newest first, with the total match count."""
        query = self.supabase.table("asset_library")\
            .select("*", count="exact")\
            .eq("user_id", user_id)
        if asset_type:
            query = query.eq("asset_type", asset_type)
        if source_system:
            query = query.eq("source_system", source_system)
        if favorited is not None:
            query = query.eq("favorited", favorited)
        if search:
            query = query.or_(ilike_any(SEARCH_COLUMNS, search))
        if tags:
            tag_list = [t.strip() for t in tags.split(",") if t.strip()]
            if tag_list:
                query = query.overlaps("tags", tag_list)

        start = (page - 1) * limit
        result = query.order("created_at", desc=True).range(start, start + limit - 1).execute()
        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        return rows, total

    def get_asset(self, user_id: str, asset_id: str) -> Dict[str, Any]:
        result = self.supabase.table("asset_library")\
            .select("*")\
            .eq("id", asset_id)\
            .eq("user_id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Asset not found")
        return result.data

    def create_asset(self, user_id: str, data: AssetCreate) -> Dict[str, Any]:
        result = self.supabase.table("asset_library").insert({
            **_row_from_model(data),
            "user_id": user_id,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create asset")
        logger.info(f"Created library asset {result.data[0]['id']} for user {user_id}")
        return result.data[0]

    def update_asset(self, user_id: str, asset_id: str, data: AssetUpdate) -> Dict[str, Any]:
        update_data = _row_from_model(data, exclude_unset=True)
        if not update_data:
            return self.get_asset(user_id, asset_id)
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = self.supabase.table("asset_library")\
            .update(update_data)\
            .eq("id", asset_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Asset not found")
        return result.data[0]

    def delete_asset(self, user_id: str, asset_id: str) -> None:
        result = self.supabase.table("asset_library")\
            .delete()\
            .eq("id", asset_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Asset not found")

    def toggle_favorite(self, user_id: str, asset_id: str) -> Dict[str, Any]:
        current = self.get_asset(user_id, asset_id)
        result = self.supabase.table("asset_library")\
            .update({"favorited": not current.get("favorited", False)})\
            .eq("id", asset_id)\
            .execute()
        return result.data[0]

    def list_generated_assets(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        asset_type: Optional[str] = None,
        source_system: Optional[str] = None,
        channel: Optional[str] = None,
        approved: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self.supabase.table("generated_assets")\
            .select("*", count="exact")\
            .eq("user_id", user_id)
        if asset_type:
            query = query.eq("asset_type", asset_type)
        if source_system:
            query = query.eq("source_system", source_system)
        if channel:
            query = query.eq("channel", channel)
        if approved is not None:
            query = query.eq("approved", approved)

        start = (page - 1) * limit
        result = query.order("created_at", desc=True).range(start, start + limit - 1).execute()
        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        return rows, total

    def create_generated_asset(self, user_id: str, data: GeneratedAssetCreate) -> Dict[str, Any]:
        result = self.supabase.table("generated_assets").insert({
            **_row_from_model(data),
            "user_id": user_id,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create generated asset")
        return result.data[0]

    def set_approval(self, user_id: str, asset_id: str, approved: bool) -> Dict[str, Any]:
        result = self.supabase.table("generated_assets")\
            .update({"approved": approved})\
            .eq("id", asset_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Generated asset not found")
        return result.data[0]

    def get_overview(self, user_id: str) -> Dict[str, Any]:
        library = self.supabase.table("asset_library")\
            .select("asset_type, source_system, favorited")\
            .eq("user_id", user_id)\
            .execute()
        generated = self.supabase.table("generated_assets")\
            .select("id")\
            .eq("user_id", user_id)\
            .execute()
        rows = library.data or []
        return {
            "totalAssets": len(rows),
            "totalGenerated": len(generated.data or []),
            "favoritedCount": sum(1 for r in rows if r.get("favorited")),
            "assetsByType": dict(Counter(r.get("asset_type") for r in rows)),
            "assetsBySource": dict(Counter(r.get("source_system") for r in rows)),
        }
