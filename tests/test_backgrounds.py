from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy import update

from conftest import auth_headers, signin, signup
from design_center.db import get_sessionmaker
from design_center.models import TemplateBackgroundModel

IMAGE = "data:image/png;base64,iVBORw0KGgo="


def save_background(client, headers, user_id, template_id="sample-listing-1", **extra):
    payload = {
        "template_id": template_id,
        "user_id": user_id,
        "image_data": IMAGE,
        "image_type": "image/png",
        **extra,
    }
    return client.post("/api/templates/backgrounds", headers=headers, json=payload)


def test_save_background_for_sample_template(client, user, headers):
    response = save_background(client, headers, user["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["background_id"]
    expires_at = datetime.fromisoformat(body["expires_at"])
    assert timedelta(hours=23) < expires_at - datetime.utcnow() <= timedelta(hours=24)


def test_get_background_returns_latest(client, user, headers):
    save_background(client, headers, user["id"], file_name="first.png")
    save_background(client, headers, user["id"], file_name="second.png", image_data="data:image/png;base64,AAAA")

    response = client.get(f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["file_name"] == "second.png"
    assert data["image_data"] == "data:image/png;base64,AAAA"
    assert data["user_id"] == user["id"]


def test_default_file_name(client, user, headers):
    save_background(client, headers, user["id"], template_id="tpl-7")

    data = client.get(f"/api/templates/backgrounds/tpl-7/{user['id']}", headers=headers).json()["data"]

    assert data["file_name"].startswith("background_tpl-7_")


def test_saving_again_replaces_previous_background(client, user, headers):
    save_background(client, headers, user["id"])
    save_background(client, headers, user["id"])

    response = client.delete(f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1
    missing = client.get(f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=headers)
    assert missing.status_code == 404


def test_background_for_stored_template(client, user, headers):
    template = client.post("/api/templates", headers=headers, json={"type": "story"}).json()["data"]

    stored = save_background(client, headers, user["id"], template_id=template["id"])
    unknown = save_background(client, headers, user["id"], template_id=str(uuid4()))

    assert stored.status_code == 201
    assert unknown.status_code == 404


def test_backgrounds_are_private_to_owner(client, user, headers):
    signup(client, email="mallory@example.com")
    other_headers = auth_headers(signin(client, email="mallory@example.com"))
    save_background(client, headers, user["id"])

    assert save_background(client, other_headers, user["id"]).status_code == 403
    assert (
        client.get(f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=other_headers).status_code
        == 403
    )
    assert (
        client.delete(
            f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=other_headers
        ).status_code
        == 403
    )


def test_backgrounds_require_auth(client, user):
    assert save_background(client, {}, user["id"]).status_code == 401


def test_delete_background_by_id(client, user, headers):
    background_id = save_background(client, headers, user["id"]).json()["background_id"]

    first = client.delete(f"/api/templates/backgrounds/{background_id}", headers=headers)
    second = client.delete(f"/api/templates/backgrounds/{background_id}", headers=headers)

    assert first.status_code == 200
    assert first.json()["deleted_count"] == 1
    assert second.status_code == 404


def test_delete_by_id_ignores_other_users_backgrounds(client, user, headers):
    background_id = save_background(client, headers, user["id"]).json()["background_id"]
    signup(client, email="mallory@example.com")
    other_headers = auth_headers(signin(client, email="mallory@example.com"))

    response = client.delete(f"/api/templates/backgrounds/{background_id}", headers=other_headers)

    assert response.status_code == 404


def test_expired_background_is_not_returned(client, user, headers):
    save_background(client, headers, user["id"])

    async def expire_all() -> None:
        async with get_sessionmaker()() as session:
            await session.execute(
                update(TemplateBackgroundModel).values(
                    expires_at=datetime.utcnow() - timedelta(minutes=1)
                )
            )
            await session.commit()

    client.portal.call(expire_all)

    response = client.get(f"/api/templates/backgrounds/sample-listing-1/{user['id']}", headers=headers)
    assert response.status_code == 404


def test_invalid_payload_is_rejected(client, user, headers):
    response = client.post(
        "/api/templates/backgrounds",
        headers=headers,
        json={"template_id": "x", "user_id": "not-a-uuid", "image_data": IMAGE, "image_type": "image/png"},
    )

    assert response.status_code == 400
