from supabase import Client
from adstudio.modules.admin.schemas import AdminAccountResponse, AdminCreate, UserProfileResponse
from adstudio.modules.auth.service import initials_for
from typing import Any, Dict, List
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_users(self, limit: int = 50, offset: int = 0) -> List[UserProfileResponse]:
        """Profiles, newest first"""
        result = self.supabase.table("profiles")\
            .select("*")\
            .order("created_at", desc=True)\
            .range(offset, offset + limit - 1)\
            .execute()
        return [UserProfileResponse(**row) for row in (result.data or [])]

    def update_user_role(self, acting_user_id: str, user_id: str, role: str) -> UserProfileResponse:
        """
        Change a user's role in both the auth app_metadata and the profiles row.
        A superadmin may not demote themselves, and the last superadmin may not be demoted.
        """
        if acting_user_id == user_id and role != "superadmin":
            raise HTTPException(status_code=400, detail="Cannot demote yourself from superadmin role")

        target = self.supabase.table("profiles")\
            .select("id, role")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not target or not target.data:
            raise HTTPException(status_code=404, detail="User not found")

        if target.data.get("role") == "superadmin" and role != "superadmin":
            superadmins = self.supabase.table("profiles").select("id").eq("role", "superadmin").execute()
            if len(superadmins.data or []) <= 1:
                raise HTTPException(
                    status_code=400,
                    detail="Cannot demote the last superadmin. At least one superadmin must remain in the system."
                )

        try:
            self.supabase.auth.admin.update_user_by_id(user_id, {"app_metadata": {"role": role}})
        except Exception as e:
            logger.error(f"Error updating auth role for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update user role")

        result = self.supabase.table("profiles")\
            .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})\
            .eq("id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to update user role")
        logger.info(f"User {acting_user_id} set role of {user_id} to {role}")
        return UserProfileResponse(**result.data[0])

    def create_admin(self, admin_data: AdminCreate) -> AdminAccountResponse:
        """Create a verified admin account: Supabase Auth user plus profile row."""
        existing = self.supabase.table("profiles")\
            .select("id")\
            .eq("email", admin_data.email)\
            .maybe_single()\
            .execute()
        if existing and existing.data:
            raise HTTPException(status_code=400, detail="User with this email already exists")

        try:
            auth_response = self.supabase.auth.admin.create_user({
                "email": admin_data.email,
                "password": admin_data.password,
                "email_confirm": True,
                "user_metadata": {"first_name": admin_data.first_name, "last_name": admin_data.last_name},
                "app_metadata": {"role": "admin"},
            })
            if not auth_response.user:
                raise HTTPException(status_code=500, detail="Failed to create admin account")

            result = self.supabase.table("profiles").upsert({
                "id": auth_response.user.id,
                "email": admin_data.email,
                "first_name": admin_data.first_name,
                "last_name": admin_data.last_name,
                "display_name": f"{admin_data.first_name} {admin_data.last_name}",
                "initials": initials_for(admin_data.first_name, admin_data.last_name, admin_data.email),
                "role": "admin",
                "status": "verified",
                "email_verified": True,
            }).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating admin account for {admin_data.email}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create admin account")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create admin account")

        logger.info(f"Created admin account {auth_response.user.id}")
        return AdminAccountResponse(**result.data[0])

    def get_stats(self) -> Dict[str, Any]:
        profiles = self.supabase.table("profiles").select("id, email_verified").execute()
        assets = self.supabase.table("asset_library").select("asset_type").execute()
        users = profiles.data or []
        asset_rows = assets.data or []
        verified = sum(1 for u in users if u.get("email_verified"))
        return {
            "totalUsers": len(users),
            "verifiedUsers": verified,
            "pendingUsers": len(users) - verified,
            "totalAssets": len(asset_rows),
            "totalVideos": sum(1 for a in asset_rows if a.get("asset_type") == "video"),
            "totalImages": sum(1 for a in asset_rows if a.get("asset_type") == "image"),
        }
