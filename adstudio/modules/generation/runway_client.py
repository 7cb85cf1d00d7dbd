import logging
from typing import Any, Dict, Optional

import httpx

from adstudio.config import settings
from adstudio.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

RUNWAY_MODEL = "gen3a_turbo"
RUNWAY_ASPECT_RATIO = "16:9"
RUNWAY_VIDEO_DURATION = 5


class RunwayClient:
    """Task-based RunwayML generation API: submit once, then poll by task id."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.runwayml.com",
        api_version: str = "2024-11-06",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ExternalServiceError("RunwayML API key not configured", status_code=500, service="runway")
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "X-Runway-Version": api_version,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"RunwayML request {method} {path} failed: {e}")
            raise ExternalServiceError(f"RunwayML request failed: {e}", service="runway")
        if response.status_code >= 400:
            logger.error(f"RunwayML API error {response.status_code} on {path}: {response.text[:500]}")
            raise ExternalServiceError(
                f"RunwayML API error: {response.status_code} - {response.text[:500]}",
                status_code=response.status_code,
                service="runway",
            )
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError("Invalid JSON response from RunwayML", service="runway")

    def submit(self, kind: str, prompt: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Start an image or video generation task and return its id."""
        options = options or {}
        payload: Dict[str, Any] = {
            "model": options.get("model", RUNWAY_MODEL),
            "prompt": prompt,
            "aspect_ratio": options.get("aspectRatio", RUNWAY_ASPECT_RATIO),
            "watermark": False,
        }
        if kind == "video":
            payload["duration"] = options.get("duration", RUNWAY_VIDEO_DURATION)
        body = self._request("POST", f"/v1/{kind}/generations", json=payload)
        task_id = (body.get("data") or {}).get("id") or body.get("id")
        if not task_id:
            raise ExternalServiceError("RunwayML did not return a task id", service="runway")
        logger.info(f"Submitted RunwayML {kind} task {task_id}")
        return task_id

    def get_task(self, kind: str, task_id: str) -> Dict[str, Any]:
        body = self._request("GET", f"/v1/{kind}/generations/{task_id}")
        data = body.get("data") or body
        output = data.get("output") or []
        return {
            "status": data.get("status"),
            "output_url": output[0] if output else None,
            "error": data.get("failure") or data.get("error"),
        }

    def close(self) -> None:
        self._client.close()


def get_runway_client() -> RunwayClient:
    return RunwayClient(
        api_key=settings.runwayml_api_key or "",
        base_url=settings.runwayml_base_url,
        api_version=settings.runwayml_api_version,
        timeout=settings.http_timeout,
    )
