import pytest
from fastapi import HTTPException

from adstudio.core.dependencies import ensure_template_access, resolve_role


def user(role=None):
    return {"id": "user-1", "app_metadata": {"role": role} if role else {}}


def test_role_from_app_metadata_skips_profiles(fake_supabase):
    assert resolve_role(user("admin"), fake_supabase) == "admin"
    assert not fake_supabase.touched("profiles")


def test_role_falls_back_to_profile(fake_supabase):
    fake_supabase.seed("profiles", {"id": "user-1", "role": "superadmin"})
    assert resolve_role(user(), fake_supabase) == "superadmin"


def test_unknown_role_defaults_to_user(fake_supabase):
    fake_supabase.seed("profiles", {"id": "user-1", "role": "owner"})
    assert resolve_role(user("owner"), fake_supabase) == "user"


def test_profile_lookup_failure_defaults_to_user(fake_supabase):
    fake_supabase.fail_tables.add("profiles")
    assert resolve_role(user(), fake_supabase) == "user"


def test_template_id_is_required(fake_supabase):
    with pytest.raises(HTTPException) as exc_info:
        ensure_template_access(user(), "heygen", "", fake_supabase)
    assert exc_info.value.status_code == 400


def test_admin_bypasses_grant_check(fake_supabase):
    ensure_template_access(user("admin"), "heygen", "tpl-1", fake_supabase)
    assert not fake_supabase.touched("user_template_access")


def test_user_without_grant_is_forbidden(fake_supabase):
    fake_supabase.seed("user_template_access", {
        "user_id": "user-1", "source_system": "heygen", "external_id": "tpl-1", "can_use": False,
    })
    with pytest.raises(HTTPException) as exc_info:
        ensure_template_access(user(), "heygen", "tpl-1", fake_supabase)
    assert exc_info.value.status_code == 403


def test_granted_access_records_usage(fake_supabase):
    fake_supabase.seed("user_template_access", {
        "user_id": "user-1", "source_system": "heygen", "external_id": "tpl-1",
        "can_use": True, "usage_count": 4,
    })
    ensure_template_access(user(), "heygen", "tpl-1", fake_supabase)
    row = fake_supabase.rows("user_template_access")[0]
    assert row["usage_count"] == 5
    assert row["last_used_at"]
