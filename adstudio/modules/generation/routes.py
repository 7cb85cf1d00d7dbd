from fastapi import APIRouter, Depends, HTTPException, Query
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.generation.schemas import (
    OpenAIGenerateRequest, HeyGenGenerateRequest, RunwayGenerateRequest,
)
from adstudio.modules.generation.service import GenerationService, get_openai_client
from adstudio.modules.generation.runway_client import RunwayClient, get_runway_client
from adstudio.modules.templates.heygen_client import HeyGenClient, get_heygen_client_factory, heygen_session
from adstudio.modules.templates.manager import TemplateManager, get_template_manager
from adstudio.core.dependencies import require_user, ensure_template_access
from adstudio.core.responses import success
from supabase import Client
from typing import Callable, Dict, Literal
import openai

router = APIRouter(prefix="/ai", tags=["generation"])


def get_generation_service(supabase: Client = Depends(get_supabase)) -> GenerationService:
    return GenerationService(supabase)


def get_runway_client_factory() -> Callable[[], RunwayClient]:
    return get_runway_client


@router.post("/openai/generate")
async def generate_with_openai(
    request: OpenAIGenerateRequest,
    user_data: Dict = Depends(require_user),
    client: openai.OpenAI = Depends(get_openai_client),
    service: GenerationService = Depends(get_generation_service),
):
    result = service.generate_openai(client, request, user_data["id"])
    return success(result, message="Content generated successfully")


@router.post("/heygen/generate")
async def generate_heygen_video(
    request: HeyGenGenerateRequest,
    user_data: Dict = Depends(require_user),
    supabase: Client = Depends(get_supabase),
    manager: TemplateManager = Depends(get_template_manager),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
    service: GenerationService = Depends(get_generation_service),
):
    """Render a HeyGen template video from the caller's variable values."""
    ensure_template_access(user_data, "heygen", request.template_id, supabase)
    detail = manager.get_template_detail(request.template_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Template not found")
    with heygen_session(factory) as client:
        result = service.start_heygen_video(client, detail, request, user_data["id"])
    return success(result, message="Video generation started successfully")


@router.get("/heygen/status/{video_id}")
async def get_heygen_status(
    video_id: str,
    user_data: Dict = Depends(require_user),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
    service: GenerationService = Depends(get_generation_service),
):
    with heygen_session(factory) as client:
        return success(service.refresh_heygen_status(client, video_id))


@router.post("/runwayml/generate")
async def generate_with_runway(
    request: RunwayGenerateRequest,
    user_data: Dict = Depends(require_user),
    factory: Callable[[], RunwayClient] = Depends(get_runway_client_factory),
    service: GenerationService = Depends(get_generation_service),
):
    client = factory()
    try:
        result = service.start_runway(client, request, user_data["id"])
    finally:
        client.close()
    return success(result, message="RunwayML generation started successfully")


@router.get("/runwayml/status/{task_id}")
async def get_runway_status(
    task_id: str,
    kind: Literal["image", "video"] = Query("video", alias="type"),
    user_data: Dict = Depends(require_user),
    factory: Callable[[], RunwayClient] = Depends(get_runway_client_factory),
    service: GenerationService = Depends(get_generation_service),
):
    client = factory()
    try:
        result = service.refresh_runway_status(client, task_id, kind)
    finally:
        client.close()
    return success(result)


@router.get("/stats")
async def get_generation_stats(
    user_data: Dict = Depends(require_user),
    service: GenerationService = Depends(get_generation_service),
):
    return success(service.get_stats(user_data["id"]))
