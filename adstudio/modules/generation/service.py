"""
AI generation against OpenAI, HeyGen and RunwayML.

Every generation is recorded in `generated_assets`. Video renders are
asynchronous: the row is stored with a `pending_<id>` placeholder URL which
the status endpoints swap for the final URL once the provider reports success.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import openai
from fastapi import HTTPException
from supabase import Client

from adstudio.config import settings
from adstudio.core.exceptions import ExternalServiceError
from adstudio.modules.generation.runway_client import RunwayClient
from adstudio.modules.generation.schemas import (
    HeyGenGenerateRequest, OpenAIGenerateRequest, RunwayGenerateRequest,
)
from adstudio.modules.templates.heygen_client import HeyGenClient
from adstudio.modules.templates.schemas import TemplateDetail

logger = logging.getLogger(__name__)

SOURCE_SYSTEMS = ("openai", "heygen", "runway")
IMAGE_VARIABLE_TYPES = ("image", "image_url")


def _option(options: Dict[str, Any], key: str, default: Any) -> Any:
    """Option value, keeping falsy values such as temperature 0."""
    value = options.get(key)
    return default if value is None else value


def get_openai_client() -> openai.OpenAI:
    if not settings.openai_api_key:
        raise ExternalServiceError("OpenAI API key not configured", status_code=500, service="openai")
    return openai.OpenAI(api_key=settings.openai_api_key, timeout=settings.http_timeout)


def build_heygen_variables(detail: TemplateDetail, values: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    """
    Shape user-supplied values into the HeyGen template payload.
    Image variables carry a URL, everything else carries text content.
    Raises 400 listing every missing required variable or over-long text value.
    """
    payload: Dict[str, Dict[str, Any]] = {}
    missing: List[str] = []
    too_long: List[str] = []
    for name in detail.variables:
        spec = detail.variable_types.get(name)
        value = (values.get(name) or "").strip()
        if not value:
            if spec is None or spec.required:
                missing.append(name)
            continue
        if spec is not None and spec.type in IMAGE_VARIABLE_TYPES:
            payload[name] = {"name": name, "type": "image", "properties": {"url": value}}
        else:
            if spec is not None and len(value) > spec.char_limit:
                too_long.append(f"{name} (max {spec.char_limit})")
            payload[name] = {"name": name, "type": "text", "properties": {"content": value}}
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required variables: {', '.join(missing)}")
    if too_long:
        raise HTTPException(status_code=400, detail=f"Variables exceed character limit: {', '.join(too_long)}")
    return payload


class GenerationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def store_generated_asset(
        self,
        user_id: str,
        source_system: str,
        asset_type: str,
        url: str,
        instruction: str,
        channel: str = "social_media",
        format: Optional[str] = None,
        inventory_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        result = self.supabase.table("generated_assets").insert({
            "user_id": user_id,
            "inventory_id": inventory_id,
            "channel": channel,
            "format": format,
            "source_system": source_system,
            "asset_type": asset_type,
            "url": url,
            "instruction": instruction,
            "approved": False,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to store generated asset")
        return result.data[0]

    def swap_pending_url(self, pending_url: str, final_url: str) -> None:
        self.supabase.table("generated_assets").update({"url": final_url}).eq("url", pending_url).execute()
        self.supabase.table("asset_library").update({"asset_url": final_url}).eq("asset_url", pending_url).execute()
        logger.info(f"Replaced {pending_url} with final asset URL")

    def generate_openai(self, client: openai.OpenAI, request: OpenAIGenerateRequest, user_id: str) -> Dict[str, Any]:
        if request.type == "video":
            raise HTTPException(status_code=400, detail="OpenAI does not support video generation")
        options = request.options
        try:
            if request.type == "text":
                completion = client.chat.completions.create(
                    model=settings.openai_text_model,
                    messages=[{"role": "user", "content": request.prompt}],
                    max_tokens=_option(options, "maxTokens", 1000),
                    temperature=_option(options, "temperature", 0.7),
                )
                result = completion.choices[0].message.content
            else:
                image = client.images.generate(
                    prompt=request.prompt,
                    n=1,
                    size=options.get("size") or settings.openai_image_size,
                )
                result = image.data[0].url
        except openai.OpenAIError as e:
            logger.error(f"OpenAI {request.type} generation failed: {e}")
            raise ExternalServiceError(f"OpenAI generation failed: {e}", service="openai")

        asset = self.store_generated_asset(
            user_id,
            source_system="openai",
            asset_type="image" if request.type == "image" else "content",
            url=result or "",
            instruction=request.prompt,
            format="png" if request.type == "image" else "text",
        )
        return {"result": result, "assetId": asset["id"]}

    def start_heygen_video(
        self,
        client: HeyGenClient,
        detail: TemplateDetail,
        request: HeyGenGenerateRequest,
        user_id: str,
    ) -> Dict[str, Any]:
        variables = build_heygen_variables(detail, request.variables)
        product_label = request.product_id or "Product"
        callback_id = f"feedgen_{request.template_id}_{request.product_id or 'noproduct'}_{int(time.time() * 1000)}"
        video_id = client.generate_from_template(
            request.template_id,
            variables,
            title=f"Video for {product_label}",
            test=request.test,
            callback_id=callback_id,
        )
        pending_url = f"pending_{video_id}"
        instruction = request.instruction or "HeyGen template video generation"
        specs = request.format_specs
        asset = self.store_generated_asset(
            user_id,
            source_system="heygen",
            asset_type="video",
            url=pending_url,
            instruction=instruction,
            channel=(specs.channel if specs else None) or "social_media",
            format=(specs.format if specs else None) or "mp4",
            inventory_id=request.product_id,
        )
        self.supabase.table("asset_library").insert({
            "user_id": user_id,
            "title": f"HeyGen Video - {product_label}",
            "asset_type": "video",
            "asset_url": pending_url,
            "instruction": instruction,
            "source_system": "heygen",
            "description": f"Generated using HeyGen template {request.template_id} for product: {product_label}",
            "original_asset_id": asset["id"],
        }).execute()
        logger.info(f"Started HeyGen video {video_id} from template {request.template_id} ({callback_id})")
        return {"videoId": video_id, "assetId": asset["id"], "callbackId": callback_id, "status": "processing"}

    def refresh_heygen_status(self, client: HeyGenClient, video_id: str) -> Dict[str, Any]:
        status = client.get_video_status(video_id)
        completed = status["status"] == "completed" and bool(status["video_url"])
        if completed:
            self.swap_pending_url(f"pending_{video_id}", status["video_url"])
        return {
            "status": status["status"],
            "videoUrl": status["video_url"] if completed else None,
            "thumbnailUrl": status["thumbnail_url"] if completed else None,
            "error": status["error"],
        }

    def start_runway(self, client: RunwayClient, request: RunwayGenerateRequest, user_id: str) -> Dict[str, Any]:
        task_id = client.submit(request.type, request.prompt, request.options)
        asset = self.store_generated_asset(
            user_id,
            source_system="runway",
            asset_type=request.type,
            url=f"pending_runway_{task_id}",
            instruction=request.prompt,
            format="mp4" if request.type == "video" else "png",
        )
        return {"taskId": task_id, "assetId": asset["id"], "status": "processing"}

    def refresh_runway_status(self, client: RunwayClient, task_id: str, kind: str) -> Dict[str, Any]:
        task = client.get_task(kind, task_id)
        succeeded = task["status"] == "SUCCEEDED" and bool(task["output_url"])
        if succeeded:
            self.swap_pending_url(f"pending_runway_{task_id}", task["output_url"])
        return {
            "status": task["status"],
            "outputUrl": task["output_url"] if succeeded else None,
            "error": task["error"],
        }

    def get_stats(self, user_id: str) -> Dict[str, int]:
        result = self.supabase.table("generated_assets")\
            .select("source_system")\
            .eq("user_id", user_id)\
            .execute()
        rows = result.data or []
        stats = {source: sum(1 for r in rows if r.get("source_system") == source) for source in SOURCE_SYSTEMS}
        stats["total"] = sum(stats.values())
        return stats
