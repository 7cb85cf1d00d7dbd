"""
Template detail resolution.

A template's variable schema is resolved from the first source that answers:
the process-local cache, the `template_fallback_variables` table, the HeyGen
template API, and finally the built-in table in `fallbacks.py`. Each failure is
logged and falls through to the next source; when nothing answers the result
is None.
"""
import logging
from typing import Callable, Dict, List, Optional

from fastapi import Depends, HTTPException
from supabase import Client

from adstudio.config import settings
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.templates.cache import TTLCache
from adstudio.modules.templates.fallbacks import (
    DEFAULT_CLIENT_ID, default_client_config, fallback_variables_for,
)
from adstudio.modules.templates.heygen_client import (
    HeyGenClient, get_heygen_client, get_heygen_client_factory, heygen_session,
)
from adstudio.modules.templates.schemas import ClientTemplateConfig, TemplateDetail, TemplateVariable
from adstudio.modules.templates.variables import (
    build_variable_types, infer_variable, normalize_variables,
)

logger = logging.getLogger(__name__)

# Shared by every request in this process
_TEMPLATE_CACHE = TTLCache(settings.template_cache_ttl_seconds)
_CLIENT_CONFIG_CACHE = TTLCache(settings.template_cache_ttl_seconds)


def default_template_name(template_id: str) -> str:
    return f"Template {template_id[-8:]}"


def default_thumbnail(template_id: str) -> str:
    return f"https://img.heygen.com/template/{template_id}/thumbnail.jpg"


class TemplateManager:
    def __init__(
        self,
        supabase: Client,
        heygen_client_factory: Callable[[], HeyGenClient] = get_heygen_client,
        template_cache: Optional[TTLCache] = None,
        config_cache: Optional[TTLCache] = None,
    ):
        self.supabase = supabase
        self.heygen_client_factory = heygen_client_factory
        self.template_cache = template_cache if template_cache is not None else _TEMPLATE_CACHE
        self.config_cache = config_cache if config_cache is not None else _CLIENT_CONFIG_CACHE

    def get_template_detail(self, template_id: str, use_cache: bool = True) -> Optional[TemplateDetail]:
        if use_cache:
            cached = self.template_cache.get(template_id)
            if cached is not None:
                logger.info(f"Using cached template detail for {template_id}")
                return cached

        detail = self._detail_from_database(template_id)
        if detail is None:
            detail = self._detail_from_api(template_id)
        if detail is None:
            detail = self._detail_from_builtin(template_id)
        if detail is None:
            logger.warning(f"No template detail available for {template_id}")
            return None

        self.template_cache.set(template_id, detail)
        return detail

    def _fetch_fallback_variable_names(self, template_id: str) -> List[str]:
        result = self.supabase.table("template_fallback_variables")\
            .select("variable_name")\
            .eq("template_id", template_id)\
            .order("variable_order")\
            .execute()
        return [row["variable_name"] for row in (result.data or [])]

    def _detail_from_database(self, template_id: str) -> Optional[TemplateDetail]:
        try:
            names = self._fetch_fallback_variable_names(template_id)
        except Exception as e:
            logger.warning(f"Error fetching fallback variables for {template_id}, falling back to API: {e}")
            return None
        if not names:
            return None
        logger.info(f"Using database template variables for {template_id}: {names}")
        return self._build_detail(
            template_id,
            [infer_variable(n) for n in names],
            source="database",
            description="HeyGen video template (from database)",
        )

    def _detail_from_api(self, template_id: str) -> Optional[TemplateDetail]:
        try:
            with heygen_session(self.heygen_client_factory) as client:
                data = client.get_template(template_id)
        except Exception as e:
            logger.error(f"Error fetching template detail for {template_id} from HeyGen: {e}")
            return None

        variables = normalize_variables(data.get("variables"))
        if not variables:
            names = fallback_variables_for(template_id)
            logger.info(f"HeyGen returned no variables for {template_id}, using built-in variables: {names}")
            variables = [infer_variable(n) for n in names]

        return self._build_detail(
            data.get("template_id") or data.get("id") or template_id,
            variables,
            source="api",
            description=data.get("description") or "HeyGen video template",
            name=data.get("name"),
            thumbnail=data.get("thumbnail_image_url") or data.get("thumbnail") or data.get("preview_url"),
            category=data.get("category"),
            duration=data.get("duration"),
            aspect_ratio=data.get("aspect_ratio") or data.get("aspectRatio"),
        )

    def _detail_from_builtin(self, template_id: str) -> Optional[TemplateDetail]:
        names = fallback_variables_for(template_id)
        if not names:
            return None
        logger.info(f"Using built-in fallback variables for {template_id}: {names}")
        return self._build_detail(
            template_id,
            [infer_variable(n) for n in names],
            source="fallback",
            description="HeyGen video template (fallback)",
        )

    def _build_detail(
        self,
        template_id: str,
        variables: List[TemplateVariable],
        source: str,
        description: str,
        name: Optional[str] = None,
        thumbnail: Optional[str] = None,
        category: Optional[str] = None,
        duration: Optional[str] = None,
        aspect_ratio: Optional[str] = None,
    ) -> TemplateDetail:
        return TemplateDetail(
            id=template_id,
            name=name or default_template_name(template_id),
            description=description,
            thumbnail=thumbnail or default_thumbnail(template_id),
            category=category or "Custom",
            duration=duration or "30s",
            aspect_ratio=aspect_ratio or "landscape",
            variables=[v.name for v in variables],
            variable_types=build_variable_types(variables),
            source=source,
        )

    def get_client_config(self, client_id: Optional[str] = None) -> ClientTemplateConfig:
        client_id = client_id or settings.default_client_id
        cached = self.config_cache.get(client_id)
        if cached is not None:
            logger.info(f"Using cached client config for {client_id}")
            return cached

        try:
            config = self._load_client_config(client_id)
        except Exception as e:
            logger.error(f"Error fetching client config for {client_id} from database: {e}")
            config = None

        if config is None:
            if client_id == DEFAULT_CLIENT_ID:
                logger.info("Using built-in configuration for the default client")
                return default_client_config()
            raise HTTPException(status_code=404, detail=f"Client configuration '{client_id}' not found")

        self.config_cache.set(client_id, config)
        return config

    def _load_client_config(self, client_id: str) -> Optional[ClientTemplateConfig]:
        config_result = self.supabase.table("client_configs")\
            .select("*")\
            .eq("client_id", client_id)\
            .maybe_single()\
            .execute()
        if not config_result or not config_result.data:
            return None
        config_row = config_result.data

        assignments = self.supabase.table("client_template_assignments")\
            .select("template_id, template_name, is_active")\
            .eq("client_config_id", config_row["id"])\
            .eq("is_active", True)\
            .execute()
        template_ids = [a["template_id"] for a in (assignments.data or [])]

        fallback_variables: Dict[str, List[str]] = {}
        if template_ids:
            vars_result = self.supabase.table("template_fallback_variables")\
                .select("template_id, variable_name")\
                .in_("template_id", template_ids)\
                .order("variable_order")\
                .execute()
            for row in vars_result.data or []:
                fallback_variables.setdefault(row["template_id"], []).append(row["variable_name"])

        return ClientTemplateConfig(
            client_id=config_row["client_id"],
            assigned_template_ids=template_ids,
            fallback_variables=fallback_variables,
        )

    def get_client_templates(self, client_id: Optional[str] = None) -> List[TemplateDetail]:
        config = self.get_client_config(client_id)
        templates = []
        for template_id in config.assigned_template_ids:
            detail = self.get_template_detail(template_id)
            if detail is not None:
                templates.append(detail)
        return templates

    def add_client_config(self, config: ClientTemplateConfig) -> None:
        client_row = self.supabase.table("client_configs").insert({
            "client_id": config.client_id,
            "client_name": f"{config.client_id[:1].upper()}{config.client_id[1:]} Client",
        }).execute()
        if not client_row.data:
            raise HTTPException(status_code=500, detail="Failed to create client configuration")
        config_id = client_row.data[0]["id"]

        if config.assigned_template_ids:
            self.supabase.table("client_template_assignments").insert([
                {
                    "client_config_id": config_id,
                    "template_id": template_id,
                    "template_name": default_template_name(template_id),
                    "is_active": True,
                }
                for template_id in config.assigned_template_ids
            ]).execute()

        fallback_rows = [
            {"template_id": template_id, "variable_name": name, "variable_order": index}
            for template_id, names in config.fallback_variables.items()
            for index, name in enumerate(names, start=1)
        ]
        if fallback_rows:
            self.supabase.table("template_fallback_variables").insert(fallback_rows).execute()

        self.config_cache.clear(config.client_id)
        self.template_cache.clear()
        logger.info(f"Added client configuration for {config.client_id}")

    def invalidate_client(self, client_id: str) -> None:
        self.config_cache.clear(client_id)

    def clear_cache(self, template_id: Optional[str] = None) -> None:
        if template_id:
            self.template_cache.clear(template_id)
            logger.info(f"Cleared cache for template {template_id}")
        else:
            self.template_cache.clear()
            self.config_cache.clear()
            logger.info("Cleared all template caches")


def get_template_manager(
    supabase: Client = Depends(get_supabase),
    heygen_client_factory: Callable[[], HeyGenClient] = Depends(get_heygen_client_factory),
) -> TemplateManager:
    return TemplateManager(supabase, heygen_client_factory)
