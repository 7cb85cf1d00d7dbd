def seed_profiles(fake_supabase, *roles):
    return fake_supabase.seed("profiles", *[
        {"id": f"user-{i}", "email": f"user{i}@example.com", "role": role, "email_verified": i % 2 == 1}
        for i, role in enumerate(roles, start=1)
    ])


def test_role_change_requires_superadmin(client, as_admin, fake_supabase):
    seed_profiles(fake_supabase, "admin", "user")
    response = client.patch("/api/admin/users/user-2/role", json={"role": "admin"})
    assert response.status_code == 403
    assert fake_supabase.auth.admin.updates == []


def test_superadmin_promotes_user(client, as_superadmin, fake_supabase):
    seed_profiles(fake_supabase, "superadmin", "user")

    response = client.patch("/api/admin/users/user-2/role", json={"role": "admin"})

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"
    assert fake_supabase.auth.admin.updates == [("user-2", {"app_metadata": {"role": "admin"}})]
    assert fake_supabase.rows("profiles")[1]["role"] == "admin"


def test_superadmin_cannot_demote_self(client, as_superadmin, fake_supabase):
    seed_profiles(fake_supabase, "superadmin", "superadmin")
    response = client.patch("/api/admin/users/user-1/role", json={"role": "admin"})
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot demote yourself from superadmin role"


def test_last_superadmin_cannot_be_demoted(client, as_superadmin, fake_supabase):
    fake_supabase.seed("profiles", {"id": "user-1", "email": "me@example.com", "role": "admin"})
    fake_supabase.seed("profiles", {"id": "user-9", "email": "root@example.com", "role": "superadmin"})

    response = client.patch("/api/admin/users/user-9/role", json={"role": "user"})

    assert response.status_code == 400
    assert "last superadmin" in response.json()["error"]
    assert fake_supabase.auth.admin.updates == []


def test_role_change_for_missing_user(client, as_superadmin, fake_supabase):
    seed_profiles(fake_supabase, "superadmin")
    assert client.patch("/api/admin/users/ghost/role", json={"role": "admin"}).status_code == 404


def test_invalid_role_is_validation_error(client, as_superadmin):
    response = client.patch("/api/admin/users/user-2/role", json={"role": "owner"})
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_auth_failure_leaves_profile_untouched(client, as_superadmin, fake_supabase):
    seed_profiles(fake_supabase, "superadmin", "user")
    fake_supabase.auth.admin.fail = True

    response = client.patch("/api/admin/users/user-2/role", json={"role": "admin"})

    assert response.status_code == 500
    assert fake_supabase.rows("profiles")[1]["role"] == "user"


def test_list_users_is_paginated(client, as_admin, fake_supabase):
    seed_profiles(fake_supabase, "admin", "user", "user")
    data = client.get("/api/admin/users?limit=2").json()["data"]
    assert [u["id"] for u in data] == ["user-3", "user-2"]


def test_system_stats(client, as_admin, fake_supabase):
    seed_profiles(fake_supabase, "admin", "user", "user")
    fake_supabase.seed(
        "asset_library",
        {"user_id": "user-1", "asset_type": "video"},
        {"user_id": "user-2", "asset_type": "image"},
        {"user_id": "user-2", "asset_type": "image"},
    )
    data = client.get("/api/admin/stats").json()["data"]
    assert data == {
        "totalUsers": 3, "verifiedUsers": 2, "pendingUsers": 1,
        "totalAssets": 3, "totalVideos": 1, "totalImages": 2,
    }


def test_stats_require_admin(client):
    assert client.get("/api/admin/stats").status_code == 403


def admin_payload(**overrides):
    payload = {"email": "new.admin@example.com", "firstName": "Grace", "lastName": "Hopper", "password": "s3cretpass"}
    payload.update(overrides)
    return payload


def test_superadmin_creates_verified_admin(client, as_superadmin, fake_supabase):
    response = client.post("/api/admin/admins", json=admin_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Admin account created successfully"
    assert body["data"]["id"] == "auth-1"
    assert body["data"]["role"] == "admin"
    created = fake_supabase.auth.admin.created[0]
    assert created["email_confirm"] is True
    assert created["app_metadata"] == {"role": "admin"}
    profile = fake_supabase.rows("profiles")[0]
    assert profile["display_name"] == "Grace Hopper"
    assert profile["initials"] == "GH"
    assert profile["status"] == "verified"
    assert profile["email_verified"] is True


def test_create_admin_rejects_existing_email(client, as_superadmin, fake_supabase):
    fake_supabase.seed("profiles", {"id": "user-9", "email": "new.admin@example.com", "role": "user"})

    response = client.post("/api/admin/admins", json=admin_payload())

    assert response.status_code == 400
    assert response.json()["error"] == "User with this email already exists"
    assert fake_supabase.auth.admin.created == []


def test_create_admin_requires_superadmin(client, as_admin, fake_supabase):
    assert client.post("/api/admin/admins", json=admin_payload()).status_code == 403
    assert fake_supabase.auth.admin.created == []


def test_create_admin_validates_payload(client, as_superadmin):
    response = client.post("/api/admin/admins", json=admin_payload(firstName="G", password="short"))
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_create_admin_auth_failure_is_500(client, as_superadmin, fake_supabase):
    fake_supabase.auth.admin.fail = True
    response = client.post("/api/admin/admins", json=admin_payload())
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to create admin account"
    assert fake_supabase.rows("profiles") == []
