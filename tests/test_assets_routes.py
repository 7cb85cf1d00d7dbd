from adstudio.modules.assets.service import ilike_any


def asset_payload(**overrides):
    payload = {
        "title": "Summer banner",
        "assetType": "image",
        "assetUrl": "https://res.cloudinary.com/demo/banner.png",
        "instruction": "A bright summer banner",
        "sourceSystem": "openai",
        "tags": ["summer", "banner"],
    }
    payload.update(overrides)
    return payload


def test_create_and_get_asset(client, fake_supabase):
    response = client.post("/api/assets", json=asset_payload())

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["user_id"] == "user-1"
    assert created["asset_url"] == "https://res.cloudinary.com/demo/banner.png"

    fetched = client.get(f"/api/assets/{created['id']}").json()["data"]
    assert fetched["title"] == "Summer banner"


def test_create_asset_validation(client):
    response = client.post("/api/assets", json=asset_payload(
        title="", instruction="", assetType="gif", sourceSystem="midjourney", assetUrl="nope",
    ))
    assert response.status_code == 400
    fields = {tuple(error["loc"])[-1] for error in response.json()["details"]}
    assert {"title", "instruction", "assetType", "sourceSystem", "assetUrl"} <= fields


def test_get_missing_asset_is_404(client):
    response = client.get("/api/assets/missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Asset not found"}


def test_list_assets_filters_and_paginates(client, fake_supabase):
    for i in range(3):
        client.post("/api/assets", json=asset_payload(title=f"Image {i}"))
    client.post("/api/assets", json=asset_payload(title="Clip", assetType="video", sourceSystem="heygen",
                                                  tags=["launch"], description="launch clip"))
    fake_supabase.seed("asset_library", {"user_id": "user-2", "title": "Not mine", "asset_type": "image"})

    body = client.get("/api/assets?assetType=image&page=1&limit=2").json()
    assert [a["title"] for a in body["data"]] == ["Image 2", "Image 1"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    assert [a["title"] for a in client.get("/api/assets?search=LAUNCH").json()["data"]] == ["Clip"]
    assert [a["title"] for a in client.get("/api/assets?tags=launch,other").json()["data"]] == ["Clip"]
    assert client.get("/api/assets?sourceSystem=heygen").json()["pagination"]["total"] == 1


def test_update_toggle_and_delete(client):
    asset_id = client.post("/api/assets", json=asset_payload()).json()["data"]["id"]

    updated = client.put(f"/api/assets/{asset_id}", json={"title": "Renamed"}).json()["data"]
    assert updated["title"] == "Renamed"
    assert updated["instruction"] == "A bright summer banner"

    toggled = client.patch(f"/api/assets/{asset_id}/favorite").json()
    assert toggled["data"]["favorited"] is True
    assert toggled["message"] == "Asset favorited successfully"

    assert client.delete(f"/api/assets/{asset_id}").status_code == 200
    assert client.delete(f"/api/assets/{asset_id}").status_code == 404


def test_generated_assets_and_approval(client):
    created = client.post("/api/assets/generated", json={
        "sourceSystem": "runway", "assetType": "video", "url": "https://cdn.test/v.mp4", "channel": "tiktok",
    })
    assert created.status_code == 201
    asset_id = created.json()["data"]["id"]

    approved = client.patch(f"/api/assets/generated/{asset_id}/approve", json={"approved": True}).json()
    assert approved["data"]["approved"] is True

    listing = client.get("/api/assets/generated/all?approved=true&channel=tiktok").json()
    assert listing["pagination"]["total"] == 1
    assert client.get("/api/assets/generated/all?approved=false").json()["data"] == []


def test_overview_counts(client):
    client.post("/api/assets", json=asset_payload(favorited=True))
    client.post("/api/assets", json=asset_payload(assetType="video", sourceSystem="heygen"))

    data = client.get("/api/assets/stats/overview").json()["data"]

    assert data["totalAssets"] == 2
    assert data["favoritedCount"] == 1
    assert data["assetsByType"] == {"image": 1, "video": 1}
    assert data["assetsBySource"] == {"openai": 1, "heygen": 1}


def test_search_treats_filter_syntax_as_literal_text(client):
    client.post("/api/assets", json=asset_payload(title="Red, blue sneakers"))
    client.post("/api/assets", json=asset_payload(title="Red boots", description="blue laces"))

    titles = [a["title"] for a in client.get("/api/assets", params={"search": "red, blue"}).json()["data"]]
    assert titles == ["Red, blue sneakers"]
    assert client.get("/api/assets", params={"search": "x.ilike.%"}).json()["data"] == []


def test_ilike_any_quotes_and_escapes_term():
    expression = ilike_any(("title", "content"), 'say "hi"\\')
    assert expression == 'title.ilike."%say \\"hi\\"\\\\%",content.ilike."%say \\"hi\\"\\\\%"'
