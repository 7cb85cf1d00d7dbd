from supabase import Client
from adstudio.modules.templates.schemas import (
    AccessVariableIn, TemplateAccessCreate, TemplateAccessResponse, UpdateTemplateRequest,
)
from adstudio.modules.templates.fallbacks import DEFAULT_FALLBACK_VARIABLES, DEFAULT_TEMPLATE_IDS
from adstudio.modules.templates.manager import default_template_name
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TemplateService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # ---- user template access ----

    def _attach_variables(self, rows: List[Dict[str, Any]]) -> List[TemplateAccessResponse]:
        """Batch-load template_variables for the given access rows."""
        if not rows:
            return []
        ids = [r["id"] for r in rows]
        result = self.supabase.table("template_variables")\
            .select("*")\
            .in_("template_access_id", ids)\
            .order("variable_name")\
            .execute()
        by_access: Dict[str, List[Dict[str, Any]]] = {}
        for v in result.data or []:
            by_access.setdefault(v["template_access_id"], []).append(v)
        return [TemplateAccessResponse(**r, variables=by_access.get(r["id"], [])) for r in rows]

    def get_user_templates(self, user_id: str) -> List[TemplateAccessResponse]:
        """Active template grants for a user, most recently selected first."""
        try:
            result = self.supabase.table("user_template_access")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("can_use", True)\
                .order("selected_at", desc=True)\
                .execute()
            return self._attach_variables(result.data or [])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching templates for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user templates")

    def get_template_access(self, access_id: str) -> Optional[TemplateAccessResponse]:
        result = self.supabase.table("user_template_access")\
            .select("*")\
            .eq("id", access_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return self._attach_variables([result.data])[0]

    def _find_access_row(self, user_id: str, source_system: str, external_id: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("user_template_access")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("source_system", source_system)\
            .eq("external_id", external_id)\
            .maybe_single()\
            .execute()
        return result.data if result and result.data else None

    def has_template_access(self, user_id: str, source_system: str, external_id: str) -> bool:
        try:
            row = self._find_access_row(user_id, source_system, external_id)
        except Exception as e:
            logger.error(f"Error checking template access for user {user_id}: {e}")
            return False
        return bool(row and row.get("can_use"))

    def grant_template_access(self, data: TemplateAccessCreate) -> TemplateAccessResponse:
        """Insert a grant, or re-enable and refresh the existing one for the same template."""
        payload = {
            "template_name": data.template_name,
            "template_description": data.template_description,
            "thumbnail_url": data.thumbnail_url,
            "category": data.category,
            "aspect_ratio": data.aspect_ratio,
            "expires_at": data.expires_at.isoformat() if data.expires_at else None,
            "can_use": True,
            "selected_at": _now(),
        }
        try:
            existing = self._find_access_row(data.user_id, data.source_system, data.external_id)
            if existing:
                result = self.supabase.table("user_template_access")\
                    .update({**payload, "updated_at": _now()})\
                    .eq("id", existing["id"])\
                    .execute()
            else:
                result = self.supabase.table("user_template_access").insert({
                    **payload,
                    "user_id": data.user_id,
                    "source_system": data.source_system,
                    "external_id": data.external_id,
                }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to grant template access")
            logger.info(f"Granted {data.source_system} template {data.external_id} to user {data.user_id}")
            return self._attach_variables([result.data[0]])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error granting template access: {e}")
            raise HTTPException(status_code=500, detail="Failed to grant template access")

    def revoke_template_access(self, user_id: str, source_system: str, external_id: str) -> bool:
        result = self.supabase.table("user_template_access")\
            .update({"can_use": False, "updated_at": _now()})\
            .eq("user_id", user_id)\
            .eq("source_system", source_system)\
            .eq("external_id", external_id)\
            .execute()
        return bool(result.data)

    def revoke_access_by_id(self, access_id: str) -> None:
        result = self.supabase.table("user_template_access")\
            .update({"can_use": False, "updated_at": _now()})\
            .eq("id", access_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Template not found")

    def update_template_access(self, access_id: str, data: UpdateTemplateRequest) -> TemplateAccessResponse:
        update_data: Dict[str, Any] = {}
        if data.template_name is not None:
            update_data["template_name"] = data.template_name
        if data.template_description is not None:
            update_data["template_description"] = data.template_description
        if data.thumbnail_url is not None:
            update_data["thumbnail_url"] = str(data.thumbnail_url)
        if data.category is not None:
            update_data["category"] = data.category
        if data.aspect_ratio is not None:
            update_data["aspect_ratio"] = data.aspect_ratio
        if data.can_use is not None:
            update_data["can_use"] = data.can_use
        if data.expires_at is not None:
            update_data["expires_at"] = data.expires_at.isoformat()

        if update_data:
            update_data["updated_at"] = _now()
            result = self.supabase.table("user_template_access")\
                .update(update_data)\
                .eq("id", access_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Template not found")
        elif self.get_template_access(access_id) is None:
            raise HTTPException(status_code=404, detail="Template not found")

        if data.variables is not None:
            self.replace_template_variables(access_id, data.variables)

        return self.get_template_access(access_id)

    def replace_template_variables(self, access_id: str, variables: List[AccessVariableIn]) -> None:
        self.supabase.table("template_variables").delete().eq("template_access_id", access_id).execute()
        if variables:
            self.supabase.table("template_variables").insert([
                {
                    "template_access_id": access_id,
                    "variable_name": v.name,
                    "variable_type": v.type,
                    "is_required": v.required,
                    "default_value": v.default_value,
                }
                for v in variables
            ]).execute()

    def list_template_variables(self, access_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("template_variables")\
            .select("*")\
            .eq("template_access_id", access_id)\
            .order("variable_name")\
            .execute()
        return result.data or []

    def record_template_usage(self, access_id: str) -> None:
        try:
            result = self.supabase.table("user_template_access")\
                .select("usage_count")\
                .eq("id", access_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return
            self.supabase.table("user_template_access").update({
                "usage_count": (result.data.get("usage_count") or 0) + 1,
                "last_used_at": _now(),
            }).eq("id", access_id).execute()
        except Exception as e:
            # usage tracking must not block generation
            logger.error(f"Error recording usage for template access {access_id}: {e}")

    def record_usage_for(self, user_id: str, source_system: str, external_id: str) -> None:
        row = self._find_access_row(user_id, source_system, external_id)
        if row:
            self.record_template_usage(row["id"])

    def get_user_template_stats(self, user_id: str) -> Dict[str, Any]:
        result = self.supabase.table("user_template_access")\
            .select("id, template_name, can_use, usage_count")\
            .eq("user_id", user_id)\
            .execute()
        rows = result.data or []
        most_used = max(rows, key=lambda r: r.get("usage_count") or 0, default=None)
        return {
            "total_templates": len(rows),
            "active_templates": sum(1 for r in rows if r.get("can_use")),
            "total_usage": sum(r.get("usage_count") or 0 for r in rows),
            "most_used_template": most_used["template_name"] if most_used and most_used.get("usage_count") else None,
        }

    def cleanup_expired_templates(self) -> int:
        result = self.supabase.table("user_template_access")\
            .update({"can_use": False, "updated_at": _now()})\
            .eq("can_use", True)\
            .lt("expires_at", _now())\
            .execute()
        count = len(result.data or [])
        if count:
            logger.info(f"Disabled {count} expired template grants")
        return count

    def list_all_assignments(self) -> List[TemplateAccessResponse]:
        result = self.supabase.table("user_template_access")\
            .select("*")\
            .order("created_at", desc=True)\
            .execute()
        return self._attach_variables(result.data or [])

    # ---- client configs and assignments ----

    def list_client_configs(self) -> List[Dict[str, Any]]:
        result = self.supabase.table("client_configs").select("*").order("client_id").execute()
        return result.data or []

    def get_client_config_row(self, client_id: str) -> Dict[str, Any]:
        result = self.supabase.table("client_configs")\
            .select("*")\
            .eq("client_id", client_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            raise HTTPException(status_code=404, detail=f"Client configuration '{client_id}' not found")
        return result.data

    def create_client_config(self, client_id: str, client_name: str) -> Dict[str, Any]:
        existing = self.supabase.table("client_configs")\
            .select("id")\
            .eq("client_id", client_id)\
            .maybe_single()\
            .execute()
        if existing and existing.data:
            raise HTTPException(status_code=400, detail=f"Client configuration '{client_id}' already exists")
        result = self.supabase.table("client_configs").insert({
            "client_id": client_id,
            "client_name": client_name,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create client configuration")
        logger.info(f"Created client configuration {client_id}")
        return result.data[0]

    def list_client_assignments(self, client_id: str) -> List[Dict[str, Any]]:
        config = self.get_client_config_row(client_id)
        result = self.supabase.table("client_template_assignments")\
            .select("*")\
            .eq("client_config_id", config["id"])\
            .order("created_at")\
            .execute()
        return result.data or []

    def assign_template(
        self,
        client_id: str,
        template_id: str,
        template_name: Optional[str] = None,
        is_active: bool = True,
    ) -> Dict[str, Any]:
        config = self.get_client_config_row(client_id)
        result = self.supabase.table("client_template_assignments").upsert(
            {
                "client_config_id": config["id"],
                "template_id": template_id,
                "template_name": template_name or default_template_name(template_id),
                "is_active": is_active,
            },
            on_conflict="client_config_id,template_id",
        ).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to assign template")
        logger.info(f"Assigned template {template_id} to client {client_id}")
        return result.data[0]

    def remove_template_assignment(self, client_id: str, template_id: str) -> None:
        config = self.get_client_config_row(client_id)
        result = self.supabase.table("client_template_assignments")\
            .delete()\
            .eq("client_config_id", config["id"])\
            .eq("template_id", template_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Template assignment not found")
        logger.info(f"Removed template {template_id} from client {client_id}")

    def create_fallback_variables(self, template_id: str, variables: List[str]) -> List[Dict[str, Any]]:
        """Replace the ordered fallback variable list for a template."""
        self.supabase.table("template_fallback_variables").delete().eq("template_id", template_id).execute()
        result = self.supabase.table("template_fallback_variables").insert([
            {"template_id": template_id, "variable_name": name, "variable_order": index}
            for index, name in enumerate(variables, start=1)
        ]).execute()
        logger.info(f"Stored {len(variables)} fallback variables for template {template_id}")
        return result.data or []

    def initialize_default_templates(self, client_id: str) -> Dict[str, Any]:
        """
        Seed a client with the built-in templates.
        Creates the client config when missing, assigns every default template
        and stores fallback variables for templates that have none yet.
        """
        existing = self.supabase.table("client_configs")\
            .select("*")\
            .eq("client_id", client_id)\
            .maybe_single()\
            .execute()
        if existing and existing.data:
            created = False
        else:
            self.create_client_config(client_id, f"{client_id[:1].upper()}{client_id[1:]} Client")
            created = True

        for template_id in DEFAULT_TEMPLATE_IDS:
            self.assign_template(client_id, template_id)

        seeded = 0
        stored = self.supabase.table("template_fallback_variables")\
            .select("template_id")\
            .in_("template_id", DEFAULT_TEMPLATE_IDS)\
            .execute()
        have_variables = {r["template_id"] for r in (stored.data or [])}
        for template_id, names in DEFAULT_FALLBACK_VARIABLES.items():
            if template_id not in have_variables:
                self.create_fallback_variables(template_id, names)
                seeded += 1

        return {
            "client_id": client_id,
            "config_created": created,
            "templates_assigned": len(DEFAULT_TEMPLATE_IDS),
            "fallback_templates_seeded": seeded,
        }

    def get_template_stats(self) -> Dict[str, Any]:
        clients = self.supabase.table("client_configs").select("id").execute()
        assignments = self.supabase.table("client_template_assignments")\
            .select("id")\
            .eq("is_active", True)\
            .execute()
        fallback = self.supabase.table("template_fallback_variables").select("template_id").execute()
        access = self.supabase.table("user_template_access").select("can_use, usage_count").execute()
        access_rows = access.data or []
        return {
            "total_clients": len(clients.data or []),
            "active_assignments": len(assignments.data or []),
            "templates_with_fallback_variables": len({r["template_id"] for r in (fallback.data or [])}),
            "total_user_grants": len(access_rows),
            "active_user_grants": sum(1 for r in access_rows if r.get("can_use")),
            "total_usage": sum(r.get("usage_count") or 0 for r in access_rows),
        }
