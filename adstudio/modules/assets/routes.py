from fastapi import APIRouter, Depends, Query
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.assets.schemas import AssetCreate, AssetUpdate, GeneratedAssetCreate, ApprovalUpdate
from adstudio.modules.assets.service import AssetService
from adstudio.core.dependencies import require_user
from adstudio.core.responses import success, pagination
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/assets", tags=["assets"])


def get_asset_service(supabase: Client = Depends(get_supabase)) -> AssetService:
    return AssetService(supabase)


@router.get("")
async def list_assets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    asset_type: Optional[str] = Query(None, alias="assetType"),
    source_system: Optional[str] = Query(None, alias="sourceSystem"),
    favorited: Optional[bool] = None,
    search: Optional[str] = None,
    tags: Optional[str] = None,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    """List the user's asset library. `tags` is a comma-separated list; any match counts."""
    assets, total = service.list_assets(
        user_data["id"], page=page, limit=limit, asset_type=asset_type,
        source_system=source_system, favorited=favorited, search=search, tags=tags,
    )
    return success(assets, pagination=pagination(page, limit, total))


@router.post("", status_code=201)
async def create_asset(
    asset_data: AssetCreate,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    return success(service.create_asset(user_data["id"], asset_data), message="Asset created successfully")


@router.get("/generated/all")
async def list_generated_assets(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    asset_type: Optional[str] = Query(None, alias="assetType"),
    source_system: Optional[str] = Query(None, alias="sourceSystem"),
    channel: Optional[str] = None,
    approved: Optional[bool] = None,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    assets, total = service.list_generated_assets(
        user_data["id"], page=page, limit=limit, asset_type=asset_type,
        source_system=source_system, channel=channel, approved=approved,
    )
    return success(assets, pagination=pagination(page, limit, total))


@router.post("/generated", status_code=201)
async def create_generated_asset(
    asset_data: GeneratedAssetCreate,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    return success(
        service.create_generated_asset(user_data["id"], asset_data),
        message="Generated asset created successfully",
    )


@router.patch("/generated/{asset_id}/approve")
async def approve_generated_asset(
    asset_id: str,
    approval: ApprovalUpdate,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    asset = service.set_approval(user_data["id"], asset_id, approval.approved)
    state = "approved" if approval.approved else "unapproved"
    return success(asset, message=f"Asset {state} successfully")


@router.get("/stats/overview")
async def get_asset_overview(
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    return success(service.get_overview(user_data["id"]))


@router.get("/{asset_id}")
async def get_asset(
    asset_id: str,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    return success(service.get_asset(user_data["id"], asset_id))


@router.put("/{asset_id}")
async def update_asset(
    asset_id: str,
    asset_data: AssetUpdate,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    return success(
        service.update_asset(user_data["id"], asset_id, asset_data),
        message="Asset updated successfully",
    )


@router.delete("/{asset_id}")
async def delete_asset(
    asset_id: str,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    service.delete_asset(user_data["id"], asset_id)
    return success(message="Asset deleted successfully")


@router.patch("/{asset_id}/favorite")
async def toggle_favorite(
    asset_id: str,
    user_data: Dict = Depends(require_user),
    service: AssetService = Depends(get_asset_service),
):
    asset = service.toggle_favorite(user_data["id"], asset_id)
    state = "favorited" if asset.get("favorited") else "unfavorited"
    return success(asset, message=f"Asset {state} successfully")
