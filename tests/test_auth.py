from datetime import timedelta

from conftest import auth_headers, signin, signup
from design_center.core.security import create_access_token


def test_signup_creates_user_with_generated_username(client):
    user = signup(client, email="Jane@Example.com", first_name="Jane")

    assert user["username"] == "jane"
    assert user["email"] == "jane@example.com"
    assert user["plan"] == "Free"
    assert user["first_name"] == "Jane"
    assert user["last_name"] == ""
    assert user["preferences"] == {
        "notifications": True,
        "marketing": False,
        "language": "es",
        "timezone": "Europe/Madrid",
    }
    assert "password" not in user
    assert "password_hash" not in user


def test_signup_suffixes_username_on_collision(client):
    signup(client, email="jane@example.com")
    second = signup(client, email="jane@another.org")
    third = signup(client, email="jane@third.net")

    assert second["username"] == "jane1"
    assert third["username"] == "jane2"


def test_signup_rejects_existing_email(client):
    signup(client)

    response = client.post(
        "/api/auth/signup", json={"email": "jane@example.com", "password": "another1"}
    )

    assert response.status_code == 409


def test_signup_validates_payload(client):
    short = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "123"})
    bad_email = client.post("/api/auth/signup", json={"email": "nope", "password": "secret123"})
    missing = client.post("/api/auth/signup", json={"email": "a@example.com"})

    assert short.status_code == 400
    assert bad_email.status_code == 400
    assert missing.status_code == 400
    assert "detail" in missing.json()


def test_signin_returns_token_and_user(client):
    signup(client, plan="Premium")

    response = client.post(
        "/api/auth/signin", json={"email": "jane@example.com", "password": "secret123"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 60 * 24 * 7 * 60
    assert body["user"]["plan"] == "Premium"


def test_signin_rejects_bad_credentials(client):
    signup(client)

    wrong_password = client.post(
        "/api/auth/signin", json={"email": "jane@example.com", "password": "wrong-password"}
    )
    unknown_email = client.post(
        "/api/auth/signin", json={"email": "ghost@example.com", "password": "secret123"}
    )

    assert wrong_password.status_code == 401
    assert wrong_password.json()["detail"] == "Invalid credentials"
    assert unknown_email.status_code == 401


def test_validate_token_returns_claims(client, user, headers):
    response = client.post("/api/auth/validate", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"id": user["id"], "email": "jane@example.com", "plan": "Free"}


def test_validate_token_requires_valid_token(client):
    missing = client.post("/api/auth/validate")
    garbage = client.post("/api/auth/validate", headers=auth_headers("not-a-jwt"))

    assert missing.status_code == 401
    assert garbage.status_code == 401


def test_me_returns_current_user(client, user, headers):
    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"]["id"] == user["id"]


def test_me_rejects_expired_and_missing_tokens(client, user):
    expired = create_access_token(
        {"sub": user["id"], "email": user["email"], "plan": user["plan"]},
        expires_delta=timedelta(minutes=-5),
    )

    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers=auth_headers(expired)).status_code == 401


def test_update_profile_only_touches_supplied_fields(client, headers):
    signup_response = client.get("/api/auth/me", headers=headers).json()["data"]

    response = client.put(
        "/api/auth/update-profile",
        headers=headers,
        json={
            "first_name": "  Janet ",
            "company": "Acme Realty",
            "preferences": {"notifications": False, "language": "en"},
        },
    )

    assert response.status_code == 200
    updated = response.json()["user"]
    assert updated["first_name"] == "Janet"
    assert updated["company"] == "Acme Realty"
    assert updated["email"] == signup_response["email"]
    assert updated["preferences"]["notifications"] is False
    assert updated["preferences"]["language"] == "en"
    assert updated["preferences"]["timezone"] == "Europe/Madrid"


def test_update_profile_plan_and_email(client, headers):
    response = client.put(
        "/api/auth/update-profile",
        headers=headers,
        json={"plan": "Ultra-Premium", "email": "JANE.NEW@example.com"},
    )

    assert response.status_code == 200
    assert response.json()["user"]["plan"] == "Ultra-Premium"
    assert response.json()["user"]["email"] == "jane.new@example.com"
    assert signin(client, email="jane.new@example.com")


def test_update_profile_rejects_taken_email(client, headers):
    signup(client, email="other@example.com")

    response = client.put(
        "/api/auth/update-profile", headers=headers, json={"email": "other@example.com"}
    )

    assert response.status_code == 409


def test_update_profile_requires_auth(client):
    response = client.put("/api/auth/update-profile", json={"first_name": "x"})

    assert response.status_code == 401
