import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx

from adstudio.config import settings
from adstudio.core.exceptions import ExternalServiceError
from adstudio.modules.templates.schemas import TemplateSummary

logger = logging.getLogger(__name__)

PLACEHOLDER_THUMBNAIL = "https://images.unsplash.com/photo-1649972904349-6e44c42644a7?w=400&h=200&fit=crop"


class HeyGenClient:
    """Thin wrapper over the HeyGen REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.heygen.com",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ExternalServiceError("HeyGen API key not configured", status_code=500, service="heygen")
        self._client = httpx.Client(
            base_url=base_url,
            headers={"X-Api-Key": api_key, "accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"HeyGen request {method} {path} failed: {e}")
            raise ExternalServiceError(f"HeyGen request failed: {e}", service="heygen")
        if response.status_code >= 400:
            logger.error(f"HeyGen API error {response.status_code} on {path}: {response.text[:500]}")
            raise ExternalServiceError(
                f"HeyGen API error: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
                service="heygen",
            )
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError("Invalid JSON response from HeyGen", service="heygen")

    def list_templates(self) -> List[Dict[str, Any]]:
        body = self._request("GET", "/v2/templates")
        templates = (body.get("data") or {}).get("templates") or []
        logger.info(f"Fetched {len(templates)} templates from HeyGen")
        return templates

    def get_template(self, template_id: str) -> Dict[str, Any]:
        body = self._request("GET", f"/v2/template/{template_id}")
        data = body.get("data")
        return data if isinstance(data, dict) else body

    def generate_from_template(
        self,
        template_id: str,
        variables: Dict[str, Dict[str, Any]],
        title: str,
        caption: bool = False,
        test: bool = False,
        include_gif: bool = True,
        callback_id: Optional[str] = None,
    ) -> str:
        payload = {
            "caption": caption,
            "title": title,
            "variables": variables,
            "include_gif": include_gif,
            "test": test,
        }
        if callback_id:
            payload["callback_id"] = callback_id
        body = self._request("POST", f"/v2/template/{template_id}/generate", json=payload)
        video_id = (body.get("data") or {}).get("video_id")
        if not video_id:
            raise ExternalServiceError("HeyGen did not return a video_id", service="heygen")
        return video_id

    def get_video_status(self, video_id: str) -> Dict[str, Any]:
        body = self._request("GET", "/v1/video_status.get", params={"video_id": video_id})
        data = body.get("data") or {}
        return {
            "status": data.get("status"),
            "video_url": data.get("video_url"),
            "thumbnail_url": data.get("thumbnail_url"),
            "gif_url": data.get("gif_url"),
            "error": data.get("error"),
        }

    def close(self) -> None:
        self._client.close()


def get_heygen_client() -> HeyGenClient:
    return HeyGenClient(
        api_key=settings.heygen_api_key or "",
        base_url=settings.heygen_base_url,
        timeout=settings.http_timeout,
    )


def get_heygen_client_factory() -> Callable[[], HeyGenClient]:
    return get_heygen_client


@contextmanager
def heygen_session(factory: Callable[[], HeyGenClient]) -> Iterator[HeyGenClient]:
    client = factory()
    try:
        yield client
    finally:
        client.close()


def transform_template(raw: Dict[str, Any]) -> TemplateSummary:
    """List-view summary of a HeyGen template record."""
    template_id = raw.get("template_id") or raw.get("id") or ""
    return TemplateSummary(
        id=template_id,
        name=raw.get("name") or f"Template {template_id[-8:] or 'Unknown'}",
        description=raw.get("description") or "HeyGen video template",
        thumbnail=raw.get("thumbnail_image_url") or raw.get("thumbnail") or raw.get("preview_url") or PLACEHOLDER_THUMBNAIL,
        category=raw.get("category") or "Custom",
        duration=raw.get("duration") or "30s",
        status="active",
        heygen_template_id=template_id,
        variables=raw.get("variables") or [],
    )
