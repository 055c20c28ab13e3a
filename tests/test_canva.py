import asyncio
import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from design_center.api.dependencies import get_canva_client
from design_center.domain.canva import ExportFormat
from design_center.services.canva import (
    OAUTH_SCOPES,
    CanvaAPIError,
    CanvaClient,
    CanvaConfigError,
)


class FakeCanva:
    """Records requests and answers like the Canva Connect API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"error": "upstream"})
        path = request.url.path
        if path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "at", "refresh_token": "rt", "expires_in": 3600})
        if path == "/v1/designs":
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json={"id": "D1", "status": "draft", "edit_url": f"https://canva.test/edit/{body['template_id']}"},
            )
        if path.endswith("/export"):
            return httpx.Response(
                200,
                json={"id": "E1", "status": "success", "download_url": "https://canva.test/e1"},
            )
        if path.endswith("/brand-kit"):
            return httpx.Response(200, json={})
        if path == "/v1/templates":
            return httpx.Response(
                200,
                json={
                    "templates": [
                        {"id": "T1", "name": "Open House", "thumbnail_url": "https://canva.test/t1.png"}
                    ]
                },
            )
        if path == "/v1/brand-kits":
            return httpx.Response(
                200,
                json={"brand_kits": [{"id": "B1", "name": "Agency", "logo_url": "https://canva.test/b1.png"}]},
            )
        return httpx.Response(404)


def make_client(fake: FakeCanva, **overrides) -> CanvaClient:
    options = {
        "base_url": "https://canva.test",
        "client_id": "canva-client",
        "client_secret": "canva-secret",
        "redirect_uri": "http://localhost:3000/canva/callback",
        "transport": httpx.MockTransport(fake),
    }
    options.update(overrides)
    return CanvaClient(**options)


@pytest.fixture
def fake_canva(app):
    fake = FakeCanva()
    client = make_client(fake)

    async def _override() -> CanvaClient:
        return client

    app.dependency_overrides[get_canva_client] = _override
    return fake


def test_free_plan_is_blocked(client, headers, fake_canva):
    for method, path in (
        ("GET", "/api/canva/auth/url"),
        ("GET", "/api/canva/templates"),
        ("GET", "/api/canva/brand-kits"),
    ):
        assert client.request(method, path, headers=headers).status_code == 403
    blocked = client.post("/api/canva/designs/create", headers=headers, json={"template_id": "T1"})
    assert blocked.status_code == 403
    assert fake_canva.requests == []


def test_canva_requires_auth(client, fake_canva):
    assert client.get("/api/canva/templates").status_code == 401


def test_auth_url_for_premium_user(client, premium_headers, fake_canva):
    me = client.get("/api/auth/me", headers=premium_headers).json()["data"]

    response = client.get("/api/canva/auth/url", headers=premium_headers)

    assert response.status_code == 200
    url = urlparse(response.json()["auth_url"])
    query = parse_qs(url.query)
    assert url.path == "/oauth/authorize"
    assert query["client_id"] == ["canva-client"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == [OAUTH_SCOPES]
    assert query["state"] == [me["id"]]


def test_oauth_callback_exchanges_code(client, fake_canva):
    response = client.post("/api/canva/auth/callback", json={"code": "abc", "state": "s"})

    assert response.status_code == 200
    assert response.json() == {"access_token": "at", "refresh_token": "rt", "expires_in": 3600}
    sent = json.loads(fake_canva.requests[0].content)
    assert sent["grant_type"] == "authorization_code"
    assert sent["code"] == "abc"


def test_create_design_uses_per_user_token(client, premium_headers, fake_canva):
    me = client.get("/api/auth/me", headers=premium_headers).json()["data"]

    response = client.post("/api/canva/designs/create", headers=premium_headers, json={"template_id": "T1"})

    assert response.status_code == 200
    design = response.json()["design"]
    assert design["id"] == "D1"
    assert design["template_id"] == "T1"
    assert design["edit_url"] == "https://canva.test/edit/T1"
    request = fake_canva.requests[-1]
    assert request.headers["Authorization"] == f"Bearer mock_canva_token_{me['id']}"


def test_pdf_export_requires_ultra_premium(client, premium_headers, fake_canva):
    pdf = client.post(
        "/api/canva/designs/export", headers=premium_headers, json={"design_id": "D1", "format": "PDF"}
    )
    png = client.post(
        "/api/canva/designs/export", headers=premium_headers, json={"design_id": "D1", "format": "PNG"}
    )

    assert pdf.status_code == 403
    assert png.status_code == 200
    assert json.loads(fake_canva.requests[-1].content) == {
        "format": "png",
        "quality": "high",
        "size": "original",
    }


def test_ultra_premium_can_export_pdf(client, ultra_headers, fake_canva):
    response = client.post(
        "/api/canva/designs/export", headers=ultra_headers, json={"design_id": "D1", "format": "PDF"}
    )

    assert response.status_code == 200
    assert response.json()["export"]["download_url"] == "https://canva.test/e1"
    assert fake_canva.requests[-1].url.path == "/v1/designs/D1/export"


def test_export_rejects_unknown_format(client, ultra_headers, fake_canva):
    response = client.post(
        "/api/canva/designs/export", headers=ultra_headers, json={"design_id": "D1", "format": "GIF"}
    )

    assert response.status_code == 400


def test_apply_brand_kit(client, premium_headers, fake_canva):
    response = client.post(
        "/api/canva/designs/brand-kit",
        headers=premium_headers,
        json={"design_id": "D1", "brand_kit_id": "B1"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "message": "Brand kit applied successfully",
        "design_id": "D1",
        "brand_kit_id": "B1",
    }


def test_list_templates_and_brand_kits(client, premium_headers, fake_canva):
    templates = client.get("/api/canva/templates", headers=premium_headers).json()["data"]
    brand_kits = client.get("/api/canva/brand-kits", headers=premium_headers).json()["data"]

    assert templates[0]["thumbnail"] == "https://canva.test/t1.png"
    assert templates[0]["canva_template_id"] == "T1"
    template_request = fake_canva.requests[0]
    assert template_request.url.params["category"] == "real-estate"
    assert template_request.url.params["limit"] == "50"
    assert brand_kits == [
        {"id": "B1", "name": "Agency", "logo": "https://canva.test/b1.png", "colors": [], "fonts": []}
    ]


def test_upstream_failure_maps_to_500(client, premium_headers, fake_canva):
    fake_canva.fail_with = 502

    response = client.post("/api/canva/designs/create", headers=premium_headers, json={"template_id": "T1"})

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to create design")


def test_client_requires_credentials_for_code_exchange():
    client = make_client(FakeCanva(), client_id="", client_secret="")

    with pytest.raises(CanvaConfigError):
        asyncio.run(client.exchange_code("abc"))


def test_client_wraps_transport_errors():
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = CanvaClient(
        base_url="https://canva.test",
        client_id="id",
        client_secret="secret",
        redirect_uri="http://localhost/cb",
        transport=httpx.MockTransport(broken),
    )

    with pytest.raises(CanvaAPIError) as excinfo:
        asyncio.run(client.export_design("token", "D1", ExportFormat.JPG))
    assert excinfo.value.status_code is None


def test_client_reports_status_code():
    fake = FakeCanva()
    fake.fail_with = 401

    with pytest.raises(CanvaAPIError) as excinfo:
        asyncio.run(make_client(fake).list_brand_kits("token"))
    assert excinfo.value.status_code == 401


def test_client_requires_base_url():
    with pytest.raises(CanvaConfigError):
        make_client(FakeCanva(), base_url="")


def test_design_ids_are_escaped_in_paths():
    fake = FakeCanva()
    client = make_client(fake)

    asyncio.run(client.export_design("token", "a/b c", ExportFormat.PNG))
    asyncio.run(client.apply_brand_kit("token", "x?y", "B1"))

    export_request, brand_kit_request = fake.requests
    assert export_request.url.raw_path == b"/v1/designs/a%2Fb%20c/export"
    assert brand_kit_request.url.raw_path == b"/v1/designs/x%3Fy/brand-kit"
