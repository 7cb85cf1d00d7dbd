import io
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import cloudinary
import cloudinary.api
import cloudinary.uploader
import httpx

from adstudio.config import Settings, settings as default_settings
from adstudio.core.retry import retry_with_backoff

logger = logging.getLogger(__name__)

DOWNLOAD_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

RESULT_FIELDS = ("public_id", "secure_url", "format", "width", "height", "bytes", "resource_type")


def resource_type_for(asset_type: str) -> str:
    return "video" if asset_type == "video" else "image"


def _result(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {field: raw.get(field) for field in RESULT_FIELDS}


class CloudinaryStorage:
    def __init__(
        self,
        config: Settings = default_settings,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not config.cloudinary_configured:
            raise ValueError("Cloudinary cloud name, API key and API secret must be configured")

        cloudinary.config(
            cloud_name=config.cloudinary_cloud_name,
            api_key=config.cloudinary_api_key,
            api_secret=config.cloudinary_api_secret,
            secure=True,
        )
        self.default_folder = config.cloudinary_default_folder
        self.max_attempts = config.upload_max_attempts
        self.base_delay = config.upload_base_delay
        self.max_delay = config.upload_max_delay
        self.http_client = http_client or httpx.Client(
            timeout=config.download_timeout,
            headers={"User-Agent": DOWNLOAD_USER_AGENT},
            follow_redirects=True,
        )
        self._sleep = sleep

    def _upload_options(
        self,
        asset_type: str,
        file_name: Optional[str],
        folder: Optional[str],
        tags: Optional[List[str]],
    ) -> Dict[str, Any]:
        return {
            "folder": folder or self.default_folder,
            "tags": tags or ["generated", asset_type],
            "resource_type": resource_type_for(asset_type),
            "public_id": file_name or f"asset_{int(time.time() * 1000)}",
            "overwrite": False,
            "unique_filename": True,
        }

    def _download(self, url: str) -> bytes:
        logger.info(f"Downloading asset from: {url}")
        response = self.http_client.get(url)
        response.raise_for_status()
        if not response.content:
            raise ValueError("Failed to download asset")
        return response.content

    def upload_from_url(
        self,
        url: str,
        asset_type: str,
        file_name: Optional[str] = None,
        folder: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Download an asset and upload it to Cloudinary, retrying the whole operation with backoff."""
        options = self._upload_options(asset_type, file_name, folder, tags)

        def attempt() -> Dict[str, Any]:
            content = self._download(url)
            logger.info(f"Uploading to Cloudinary with options: {options}")
            return cloudinary.uploader.upload(io.BytesIO(content), **options)

        raw = retry_with_backoff(
            attempt,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            sleep=self._sleep,
            label="Cloudinary upload",
        )
        logger.info(f"Cloudinary upload successful: {raw.get('public_id')}")
        return _result(raw)

    def upload_base64(
        self,
        data_uri: str,
        asset_type: str,
        file_name: Optional[str] = None,
        folder: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        options = self._upload_options(asset_type, file_name, folder, tags)
        raw = cloudinary.uploader.upload(data_uri, **options)
        logger.info(f"Cloudinary base64 upload successful: {raw.get('public_id')}")
        return _result(raw)

    def delete_asset(self, public_id: str, resource_type: str = "image") -> Dict[str, Any]:
        result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
        logger.info(f"Asset deleted from Cloudinary: {public_id}")
        return result

    def get_asset_info(self, public_id: str, resource_type: str = "image") -> Dict[str, Any]:
        return cloudinary.api.resource(public_id, resource_type=resource_type)

    def close(self) -> None:
        self.http_client.close()
