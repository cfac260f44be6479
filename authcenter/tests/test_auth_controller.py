from __future__ import annotations

import pytest
from flask import Blueprint, Flask, g, jsonify

from authcenter.app import create_app
from authcenter.infrastructure.container import Container
from authcenter.interfaces.http.session import optional_session, require_role, require_session
from authcenter.shared.config import AppConfig, DatabaseConfig, PasswordConfig, RedisConfig

ANN = {
    "email": "ann@example.com",
    "password": "secret123",
    "first_name": "Ann",
    "last_name": "Lee",
    "role": "staff",
}


@pytest.fixture()
def container(tmp_path) -> Container:
    config = AppConfig(
        database=DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'auth.db'}"),
        redis=RedisConfig(SESSION_BACKEND="memory"),
        password=PasswordConfig(PASSWORD_HASH_METHOD="pbkdf2:sha256:1000"),
    )
    container = Container(config)
    yield container
    container.engine.dispose()


@pytest.fixture()
def flask_app(container: Container) -> Flask:
    return create_app(container=container)


def _register(client, **overrides):
    return client.post("/api/auth/register", json={**ANN, **overrides})


def test_register_endpoint_sets_cookie(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = _register(client)

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["message"] == "User registered successfully"
    data = payload["data"]
    assert data["user"]["email"] == "ann@example.com"
    assert "password_hash" not in data["user"]
    assert data["token"]
    cookie = response.headers["Set-Cookie"]
    assert cookie.startswith(f"session_id={data['session_id']}")
    assert "HttpOnly" in cookie


def test_register_duplicate_returns_409(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        _register(client)
        response = _register(client, first_name="Other")

    assert response.status_code == 409
    assert response.get_json() == {"error": "email_taken"}


def test_register_invalid_role_returns_400(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = _register(client, role="superuser")

    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"] == "invalid_role"
    assert sorted(payload["context"]["allowed"]) == ["admin", "staff", "therapist"]


def test_register_weak_password_returns_422(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = _register(client, password="short")

    assert response.status_code == 422
    assert response.get_json()["error"] == "weak_password"


@pytest.mark.parametrize("email", ["a@b..com", "no-at-sign", "ann@", "ann lee@example.com"])
def test_register_malformed_email_returns_422(flask_app: Flask, email: str) -> None:
    with flask_app.test_client() as client:
        response = _register(client, email=email)

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "email" in payload["context"]["fields"]


def test_login_invalid_payload_returns_422(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = client.post("/api/auth/login", json={"email": "a"})

    assert response.status_code == 422
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "email" in payload["context"]["fields"]


def test_login_failures_are_indistinguishable(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        _register(client)
        wrong_password = client.post(
            "/api/auth/login", json={"email": ANN["email"], "password": "nope"}
        )
        unknown_email = client.post(
            "/api/auth/login", json={"email": "who@example.com", "password": "nope"}
        )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.get_json() == unknown_email.get_json() == {"error": "invalid_credentials"}


def test_session_requires_an_id(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = client.get("/api/auth/session")

    assert response.status_code == 401
    assert response.get_json() == {"error": "unauthorized"}


@pytest.mark.parametrize("carrier", ["header", "bearer", "cookie", "query"])
def test_session_id_carriers(flask_app: Flask, carrier: str) -> None:
    with flask_app.test_client() as client:
        session_id = _register(client).get_json()["data"]["session_id"]

    with flask_app.test_client() as client:
        if carrier == "header":
            response = client.get("/api/auth/session", headers={"X-Session-ID": session_id})
        elif carrier == "bearer":
            response = client.get(
                "/api/auth/session", headers={"Authorization": f"Bearer {session_id}"}
            )
        elif carrier == "cookie":
            client.set_cookie("session_id", session_id)
            response = client.get("/api/auth/session")
        else:
            response = client.get(f"/api/auth/session?session_id={session_id}")

    assert response.status_code == 200
    session = response.get_json()["data"]["session"]
    assert session["id"] == session_id
    assert session["email"] == "ann@example.com"
    assert session["role"] == "staff"
    assert session["expires_at"] - session["created_at"] == 7200


def test_header_wins_over_query(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        session_id = _register(client).get_json()["data"]["session_id"]

    with flask_app.test_client() as client:
        response = client.get(
            "/api/auth/session?session_id=bogus", headers={"X-Session-ID": session_id}
        )

    assert response.status_code == 200


def test_logout_revokes_session(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        session_id = _register(client).get_json()["data"]["session_id"]
        response = client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.get_json()["message"] == "Logged out successfully"
        assert "session_id=;" in response.headers["Set-Cookie"]

    with flask_app.test_client() as client:
        response = client.get("/api/auth/session", headers={"X-Session-ID": session_id})

    assert response.status_code == 401
    assert response.get_json() == {"error": "session_not_found"}


def test_refresh_session(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        _register(client)
        response = client.post("/api/auth/session/refresh")

    assert response.status_code == 200
    assert response.get_json()["data"]["session"]["role"] == "staff"


def test_password_reset_response_does_not_reveal_accounts(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        _register(client)
        known = client.post("/api/auth/request-password-reset", json={"email": ANN["email"]})
        unknown = client.post(
            "/api/auth/request-password-reset", json={"email": "who@example.com"}
        )

    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()


def test_password_reset_flow(flask_app: Flask, container: Container) -> None:
    with flask_app.test_client() as client:
        session_id = _register(client).get_json()["data"]["session_id"]
        client.post("/api/auth/request-password-reset", json={"email": ANN["email"]})
        token = container.user_repository.get_by_email(ANN["email"]).password_reset_token

        response = client.post(
            "/api/auth/reset-password", json={"token": token, "new_password": "brand-new-pw"}
        )
        assert response.status_code == 200

        stale = client.get("/api/auth/session", headers={"X-Session-ID": session_id})
        assert stale.status_code == 401

        login = client.post(
            "/api/auth/login", json={"email": ANN["email"], "password": "brand-new-pw"}
        )
        assert login.status_code == 200


def test_reset_password_bad_token(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = client.post(
            "/api/auth/reset-password", json={"token": "nope", "new_password": "brand-new-pw"}
        )

    assert response.status_code == 400
    assert response.get_json() == {"error": "invalid_or_expired_token"}


def test_require_role(flask_app: Flask, container: Container) -> None:
    bp = Blueprint("admin_only", __name__)

    @bp.get("/api/admin/ping")
    @require_session(container.validate_session_use_case)
    @require_role("admin")
    def ping():
        return jsonify({"user_id": g.user_id})

    flask_app.register_blueprint(bp)

    with flask_app.test_client() as client:
        _register(client)
        denied = client.get("/api/admin/ping")

    with flask_app.test_client() as client:
        _register(client, email="root@example.com", role="admin")
        allowed = client.get("/api/admin/ping")

    assert denied.status_code == 403
    assert denied.get_json() == {"error": "forbidden"}
    assert allowed.status_code == 200


def test_optional_session(flask_app: Flask, container: Container) -> None:
    bp = Blueprint("greeting", __name__)

    @bp.get("/api/greeting")
    @optional_session(container.validate_session_use_case)
    def greeting():
        return jsonify({"user_id": g.user.id if g.user else None})

    flask_app.register_blueprint(bp)

    with flask_app.test_client() as client:
        anonymous = client.get("/api/greeting")
        stale = client.get("/api/greeting", headers={"X-Session-ID": "bogus"})
        user_id = _register(client).get_json()["data"]["user"]["id"]
        signed_in = client.get("/api/greeting")

    assert anonymous.status_code == stale.status_code == signed_in.status_code == 200
    assert anonymous.get_json() == stale.get_json() == {"user_id": None}
    assert signed_in.get_json() == {"user_id": user_id}


def test_health(flask_app: Flask) -> None:
    with flask_app.test_client() as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"
