from fastapi import APIRouter, Depends, HTTPException, Query
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.templates.schemas import (
    AssignTemplateRequest, AssignmentCreate, ClientConfigCreate, FallbackVariablesRequest,
    RevokeTemplateRequest, TemplateAccessCreate, TemplateDetail, TemplateSummary, UpdateTemplateRequest,
)
from adstudio.modules.templates.service import TemplateService
from adstudio.modules.templates.manager import TemplateManager, get_template_manager
from adstudio.modules.templates.fallbacks import DEFAULT_CLIENT_ID, DEFAULT_TEMPLATE_IDS
from adstudio.modules.templates.heygen_client import (
    HeyGenClient, get_heygen_client_factory, heygen_session, transform_template,
)
from adstudio.modules.templates.variables import build_variable_types, normalize_variables
from adstudio.core.dependencies import require_user, require_admin
from adstudio.core.exceptions import ExternalServiceError
from adstudio.core.responses import success
from supabase import Client
from typing import Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])

EXTERNAL_SOURCES = ("heygen", "runway")


def get_template_service(supabase: Client = Depends(get_supabase)) -> TemplateService:
    return TemplateService(supabase)


def summary_from_detail(detail: TemplateDetail) -> TemplateSummary:
    return TemplateSummary(
        id=detail.id,
        name=detail.name,
        description=detail.description,
        thumbnail=detail.thumbnail,
        category=detail.category,
        duration=detail.duration,
        heygen_template_id=detail.id,
        variables=detail.variables,
    )


def _fetch_heygen_templates(factory: Callable[[], HeyGenClient]) -> List[TemplateSummary]:
    with heygen_session(factory) as client:
        return [transform_template(t) for t in client.list_templates()]


@router.get("")
async def list_user_templates(
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    """Templates the current user has been granted."""
    return success(service.get_user_templates(user_data["id"]))


@router.get("/client/default/templates")
async def list_default_client_templates(
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    return success(service.get_user_templates(user_data["id"]))


@router.get("/client/{client_id}/templates")
async def list_client_templates(
    client_id: str,
    user_data: Dict = Depends(require_user),
    manager: TemplateManager = Depends(get_template_manager),
):
    """Resolved template details for every template assigned to a client."""
    templates = manager.get_client_templates(client_id)
    return success(templates, total=len(templates))


@router.post("/client/{client_id}/initialize")
async def initialize_client_templates(
    client_id: str,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
    manager: TemplateManager = Depends(get_template_manager),
):
    result = service.initialize_default_templates(client_id)
    manager.invalidate_client(client_id)
    for template_id in DEFAULT_TEMPLATE_IDS:
        manager.clear_cache(template_id)
    return success(result, message=f"Default templates initialized for client {client_id}")


@router.get("/detail/{template_id}")
async def get_template_detail(
    template_id: str,
    refresh: bool = False,
    user_data: Dict = Depends(require_user),
    manager: TemplateManager = Depends(get_template_manager),
):
    """Variable schema for a template, resolved through cache, database, HeyGen and built-in fallbacks."""
    detail = manager.get_template_detail(template_id, use_cache=not refresh)
    if detail is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return success(detail)


@router.get("/heygen/list")
async def list_heygen_templates(
    user_data: Dict = Depends(require_admin),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    templates = _fetch_heygen_templates(factory)
    return success({"source": "heygen", "templates": templates, "total": len(templates)})


@router.get("/heygen/detail/{template_id}")
async def get_heygen_template(
    template_id: str,
    user_data: Dict = Depends(require_user),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    with heygen_session(factory) as client:
        raw = client.get_template(template_id)
    return success(transform_template({"template_id": template_id, **raw}))


@router.get("/heygen/variables/{template_id}")
async def get_heygen_template_variables(
    template_id: str,
    user_data: Dict = Depends(require_user),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    with heygen_session(factory) as client:
        raw = client.get_template(template_id)
    variables = normalize_variables(raw.get("variables"))
    return success({
        "templateId": template_id,
        "variables": variables,
        "variableTypes": build_variable_types(variables),
    })


@router.get("/list")
async def list_template_summaries(
    user_data: Dict = Depends(require_user),
    manager: TemplateManager = Depends(get_template_manager),
):
    templates = [summary_from_detail(d) for d in manager.get_client_templates(DEFAULT_CLIENT_ID)]
    return success(templates, total=len(templates))


@router.get("/available")
async def list_available_templates(
    user_data: Dict = Depends(require_user),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    """Templates offered by the configured external providers, tagged with their source."""
    templates = []
    try:
        templates = [
            {**t.model_dump(by_alias=True), "source": "heygen"}
            for t in _fetch_heygen_templates(factory)
        ]
    except ExternalServiceError as e:
        logger.warning(f"HeyGen templates unavailable: {e}")
    return success(templates, total=len(templates))


@router.get("/admin/all-available")
async def list_all_available_templates(
    user_data: Dict = Depends(require_admin),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    templates = []
    sources = []
    try:
        templates = [
            {**t.model_dump(by_alias=True), "source": "heygen"}
            for t in _fetch_heygen_templates(factory)
        ]
        sources.append("heygen")
    except ExternalServiceError as e:
        logger.warning(f"HeyGen templates unavailable: {e}")
    return success({"templates": templates, "total": len(templates), "sources": sources})


@router.get("/admin/fetch-external")
async def fetch_external_templates(
    source: str = Query("heygen"),
    user_data: Dict = Depends(require_admin),
    factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
):
    if source not in EXTERNAL_SOURCES:
        raise HTTPException(status_code=400, detail=f"Unsupported template source: {source}")
    # RunwayML has no template catalogue
    templates = _fetch_heygen_templates(factory) if source == "heygen" else []
    return success({"source": source, "templates": templates, "total": len(templates)})


@router.post("/admin/assign", status_code=201)
async def assign_template_to_user(
    request: AssignTemplateRequest,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    """Grant a user access to an external template and store its variable schema."""
    access = service.grant_template_access(TemplateAccessCreate(
        user_id=request.user_id,
        external_id=request.template_id,
        template_name=request.template_name,
        template_description=request.template_description,
        thumbnail_url=str(request.thumbnail_url) if request.thumbnail_url else None,
        category=request.category,
        aspect_ratio=request.aspect_ratio,
        expires_at=request.expires_at,
    ))
    if request.variables is not None:
        service.replace_template_variables(access.id, request.variables)
        access = service.get_template_access(access.id)
    return success(access, message="Template assigned successfully")


@router.post("/admin/revoke")
async def revoke_user_template(
    request: RevokeTemplateRequest,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    if not service.revoke_template_access(request.user_id, request.source_system, request.template_id):
        raise HTTPException(status_code=404, detail="Template access not found")
    return success(message="Template access revoked successfully")


@router.post("/admin/cleanup-expired")
async def cleanup_expired_grants(
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    """Disable grants whose expires_at has passed."""
    count = service.cleanup_expired_templates()
    return success({"disabled": count}, message=f"Disabled {count} expired template grants")


@router.get("/admin/all")
async def list_all_assignments(
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    assignments = service.list_all_assignments()
    return success(assignments, total=len(assignments))


@router.get("/clients")
async def list_clients(
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    return success(service.list_client_configs())


@router.post("/clients", status_code=201)
async def create_client(
    request: ClientConfigCreate,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
    manager: TemplateManager = Depends(get_template_manager),
):
    config = service.create_client_config(request.client_id, request.client_name)
    manager.invalidate_client(request.client_id)
    return success(config, message="Client configuration created")


@router.get("/clients/{client_id}/assignments")
async def list_client_assignments(
    client_id: str,
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    return success(service.list_client_assignments(client_id))


@router.post("/clients/{client_id}/assignments", status_code=201)
async def assign_client_template(
    client_id: str,
    request: AssignmentCreate,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
    manager: TemplateManager = Depends(get_template_manager),
):
    assignment = service.assign_template(
        client_id, request.template_id, request.template_name, request.is_active
    )
    manager.invalidate_client(client_id)
    return success(assignment, message="Template assigned to client")


@router.delete("/clients/{client_id}/assignments/{template_id}")
async def remove_client_template(
    client_id: str,
    template_id: str,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
    manager: TemplateManager = Depends(get_template_manager),
):
    service.remove_template_assignment(client_id, template_id)
    manager.invalidate_client(client_id)
    return success(message="Template assignment removed")


@router.post("/fallback-variables", status_code=201)
async def store_fallback_variables(
    request: FallbackVariablesRequest,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
    manager: TemplateManager = Depends(get_template_manager),
):
    rows = service.create_fallback_variables(request.template_id, request.variable_names())
    manager.clear_cache(request.template_id)
    return success(rows, message="Fallback variables saved")


@router.get("/stats")
async def get_template_stats(
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    data = {"user": service.get_user_template_stats(user_data["id"])}
    if user_data["role"] in ("admin", "superadmin"):
        data["system"] = service.get_template_stats()
    return success(data)


@router.delete("/cache")
async def clear_template_cache(
    template_id: Optional[str] = Query(None, alias="templateId"),
    user_data: Dict = Depends(require_admin),
    manager: TemplateManager = Depends(get_template_manager),
):
    manager.clear_cache(template_id)
    message = f"Cache cleared for template {template_id}" if template_id else "All template caches cleared"
    return success(message=message)


@router.get("/{access_id}/variables")
async def get_template_variables(
    access_id: str,
    user_data: Dict = Depends(require_user),
    service: TemplateService = Depends(get_template_service),
):
    """Variables stored for one of the caller's own template grants."""
    access = service.get_template_access(access_id)
    if access is None:
        raise HTTPException(status_code=404, detail="Template not found")
    if access.user_id != user_data["id"]:
        raise HTTPException(status_code=403, detail="You don't have access to this template")
    return success(service.list_template_variables(access_id))


@router.put("/{access_id}")
async def update_template(
    access_id: str,
    request: UpdateTemplateRequest,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    return success(service.update_template_access(access_id, request), message="Template updated")


@router.delete("/{access_id}")
async def revoke_template(
    access_id: str,
    user_data: Dict = Depends(require_admin),
    service: TemplateService = Depends(get_template_service),
):
    service.revoke_access_by_id(access_id)
    return success(message="Template access revoked")
