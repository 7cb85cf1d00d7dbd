"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from adstudio.database.supabase_client import get_supabase
from adstudio.modules.auth.service import AuthService
from adstudio.modules.templates.service import TemplateService
from supabase import Client
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

ROLES = ("user", "admin", "superadmin")


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache so the role lookup runs once per request."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def resolve_role(user_data: dict, supabase: Client) -> str:
    """Role from app_metadata (set server-side), else the profiles row, else 'user'."""
    role = (user_data.get("app_metadata") or {}).get("role")
    if role in ROLES:
        return role
    try:
        result = supabase.table("profiles")\
            .select("role")\
            .eq("id", user_data["id"])\
            .maybe_single()\
            .execute()
        if result and result.data and result.data.get("role") in ROLES:
            return result.data["role"]
    except Exception as e:
        logger.error(f"Error resolving role for user {user_data.get('id')}: {e}")
    return "user"


def is_admin(user_data: dict, supabase: Client) -> bool:
    return resolve_role(user_data, supabase) in ("admin", "superadmin")


def require_role(*roles: str):
    """Factory function to create a role check dependency"""
    def check_role(
        request: Request,
        user_data: dict = Depends(get_current_user),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        cache = _get_request_cache(request)
        if "role" not in cache:
            cache["role"] = resolve_role(user_data, supabase)
        if cache["role"] not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return {**user_data, "role": cache["role"]}
    return check_role


require_user = require_role("user", "admin", "superadmin")
require_admin = require_role("admin", "superadmin")
require_superadmin = require_role("superadmin")


def ensure_template_access(user_data: dict, source_system: str, external_id: str, supabase: Client) -> None:
    """
    Gate a generation request on the caller's template grant.
    Admins bypass the check; for everyone else usage is recorded once access is confirmed.
    """
    if not external_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Template ID is required")
    if is_admin(user_data, supabase):
        return
    service = TemplateService(supabase)
    if not service.has_template_access(user_data["id"], source_system, external_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this template"
        )
    service.record_usage_for(user_data["id"], source_system, external_id)
