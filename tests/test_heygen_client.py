import json

import httpx
import pytest

from adstudio.core.exceptions import ExternalServiceError
from adstudio.modules.templates.heygen_client import PLACEHOLDER_THUMBNAIL, HeyGenClient, transform_template


def make_client(handler):
    return HeyGenClient(api_key="test-key", base_url="https://heygen.test", transport=httpx.MockTransport(handler))


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ExternalServiceError) as exc_info:
        HeyGenClient(api_key="")
    assert exc_info.value.status_code == 500


def test_list_templates_sends_api_key():
    def handler(request):
        assert request.headers["X-Api-Key"] == "test-key"
        assert request.url.path == "/v2/templates"
        return httpx.Response(200, json={"data": {"templates": [{"template_id": "t1"}]}})

    assert make_client(handler).list_templates() == [{"template_id": "t1"}]


def test_get_template_unwraps_data():
    def handler(request):
        assert request.url.path == "/v2/template/t1"
        return httpx.Response(200, json={"data": {"template_id": "t1", "variables": {}}})

    assert make_client(handler).get_template("t1") == {"template_id": "t1", "variables": {}}


def test_error_status_is_propagated():
    client = make_client(lambda request: httpx.Response(404, text="template not found"))
    with pytest.raises(ExternalServiceError) as exc_info:
        client.get_template("missing")
    assert exc_info.value.status_code == 404
    assert "template not found" in exc_info.value.message


def test_transport_error_maps_to_bad_gateway():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ExternalServiceError) as exc_info:
        make_client(handler).list_templates()
    assert exc_info.value.status_code == 502


def test_generate_from_template_posts_payload():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"video_id": "vid_1"}})

    variables = {"headline": {"name": "headline", "type": "text", "properties": {"content": "Hi"}}}
    video_id = make_client(handler).generate_from_template("t1", variables, title="Video", callback_id="cb")

    assert video_id == "vid_1"
    assert seen["path"] == "/v2/template/t1/generate"
    assert seen["body"]["variables"] == variables
    assert seen["body"]["callback_id"] == "cb"
    assert seen["body"]["include_gif"] is True


def test_generate_without_video_id_fails():
    client = make_client(lambda request: httpx.Response(200, json={"data": {}}))
    with pytest.raises(ExternalServiceError):
        client.generate_from_template("t1", {}, title="Video")


def test_video_status_flattens_response():
    def handler(request):
        assert request.url.params["video_id"] == "vid_1"
        return httpx.Response(200, json={"data": {"status": "completed", "video_url": "https://v.mp4"}})

    status = make_client(handler).get_video_status("vid_1")
    assert status["status"] == "completed"
    assert status["video_url"] == "https://v.mp4"
    assert status["error"] is None


def test_transform_template_defaults():
    summary = transform_template({"template_id": "abcdef0123456789"})
    assert summary.name == "Template 23456789"
    assert summary.thumbnail == PLACEHOLDER_THUMBNAIL
    assert summary.heygen_template_id == "abcdef0123456789"
    assert summary.category == "Custom"
