from fastapi import APIRouter, Depends, HTTPException, Query
from adstudio.config import settings
from adstudio.modules.cloudinary.schemas import UploadAssetRequest, UploadBase64Request, UploadResult
from adstudio.modules.cloudinary.storage import CloudinaryStorage
from adstudio.core.dependencies import require_user
from adstudio.core.responses import success
from typing import Dict, Iterator, Literal
import logging
import time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cloudinary", tags=["cloudinary"])


def get_cloudinary_storage() -> Iterator[CloudinaryStorage]:
    if not settings.cloudinary_configured:
        raise HTTPException(status_code=501, detail="Cloudinary not configured")
    storage = CloudinaryStorage(settings)
    try:
        yield storage
    finally:
        storage.close()


def _upload_defaults(request, user_id: str) -> Dict:
    return {
        "file_name": request.file_name or f"{request.asset_type}_{int(time.time() * 1000)}",
        "folder": request.folder or f"users/{user_id}/assets",
        "tags": [request.asset_type, "generated", *request.tags],
    }


@router.post("/upload")
def upload_asset(
    request: UploadAssetRequest,
    user_data: Dict = Depends(require_user),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    """Copy a generated asset from its provider URL into the user's Cloudinary folder."""
    try:
        result = storage.upload_from_url(
            str(request.url),
            request.asset_type,
            **_upload_defaults(request, user_data["id"]),
        )
    except Exception as e:
        logger.error(f"Error uploading asset to Cloudinary: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to upload asset to Cloudinary: {e}")
    return success(UploadResult(**result), message="Asset uploaded to Cloudinary successfully")


@router.post("/upload-base64")
def upload_base64_asset(
    request: UploadBase64Request,
    user_data: Dict = Depends(require_user),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    try:
        result = storage.upload_base64(request.data, request.asset_type, **_upload_defaults(request, user_data["id"]))
    except Exception as e:
        logger.error(f"Error uploading base64 asset to Cloudinary: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to upload asset to Cloudinary: {e}")
    return success(UploadResult(**result), message="Asset uploaded to Cloudinary successfully")


@router.delete("/{public_id:path}")
def delete_asset(
    public_id: str,
    resource_type: Literal["image", "video"] = Query("image", alias="resourceType"),
    user_data: Dict = Depends(require_user),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    try:
        storage.delete_asset(public_id, resource_type)
    except Exception as e:
        logger.error(f"Error deleting asset {public_id} from Cloudinary: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to delete asset from Cloudinary: {e}")
    return success(
        {"publicId": public_id, "resourceType": resource_type},
        message="Asset deleted from Cloudinary successfully",
    )


@router.get("/{public_id:path}/info")
def get_asset_info(
    public_id: str,
    resource_type: Literal["image", "video"] = Query("image", alias="resourceType"),
    user_data: Dict = Depends(require_user),
    storage: CloudinaryStorage = Depends(get_cloudinary_storage),
):
    try:
        info = storage.get_asset_info(public_id, resource_type)
    except Exception as e:
        logger.error(f"Error getting asset info for {public_id}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to get asset info from Cloudinary: {e}")
    return success(info)
