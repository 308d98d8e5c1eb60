"""
Auth API tests.

Verifies status codes and bodies of /api/auth/* and the bearer-token gates.
"""

from datetime import timedelta

import pytest
from flask import Blueprint, g, jsonify

from dulzura.decorators import optional_auth, require_admin, require_auth
from dulzura.services.token_service import AccessTokenClaims, issue_access_token


def _register(client, email="a@x.com", password="secret1", nombre="A"):
    return client.post("/api/auth/register", json={"email": email, "password": password, "nombre": nombre})


# =============================================================================
# REGISTER / LOGIN
# =============================================================================


class TestRegisterAndLogin:
    def test_register_then_wrong_password(self, client, db_session):
        resp = _register(client)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["usuario"]["email"] == "a@x.com"
        assert body["tokens"]["accessToken"]

        resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "wrong12"})
        assert resp.status_code == 401
        assert resp.get_json() == {"success": False, "message": "Credenciales inválidas"}

    def test_login_success(self, client, db_session):
        _register(client)
        resp = client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["usuario"]["rol"] == "usuario"
        assert set(body["tokens"]) == {"accessToken", "refreshToken"}

    def test_duplicate_registration_is_400(self, client, db_session):
        _register(client)
        resp = _register(client)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "El email ya está registrado"

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"email": "a@x.com", "password": "secret1"}, "Email, contraseña y nombre son requeridos"),
            ({"email": "not-an-email", "password": "secret1", "nombre": "A"}, "Formato de email inválido"),
            ({"email": "a@x.com", "password": "123", "nombre": "A"}, "La contraseña debe tener al menos 6 caracteres"),
        ],
    )
    def test_register_validation(self, client, db_session, payload, message):
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"success": False, "message": message}

    def test_login_requires_both_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Email y contraseña son requeridos"

    @pytest.mark.parametrize("path", ["/api/auth/register", "/api/auth/login", "/api/auth/refresh", "/api/auth/logout"])
    def test_non_object_body_is_400(self, client, db_session, path):
        resp = client.post(path, json=["a@x.com", "secreto"])
        assert resp.status_code == 400
        assert resp.get_json() == {"success": False, "message": "Cuerpo JSON inválido"}


# =============================================================================
# REFRESH / LOGOUT / ME
# =============================================================================


class TestTokenEndpoints:
    def test_refresh(self, client, db_session):
        tokens = _register(client).get_json()["tokens"]
        resp = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 200
        assert resp.get_json()["accessToken"]

    def test_refresh_invalid(self, client, db_session):
        resp = client.post("/api/auth/refresh", json={"refreshToken": "bogus"})
        assert resp.status_code == 401

    def test_refresh_missing_token(self, client, db_session):
        resp = client.post("/api/auth/refresh", json={})
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Refresh token es requerido"

    def test_logout_invalidates_refresh_token(self, client, db_session):
        tokens = _register(client).get_json()["tokens"]
        resp = client.post("/api/auth/logout", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 200
        resp = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert resp.status_code == 401

    def test_logout_missing_token(self, client, db_session):
        assert client.post("/api/auth/logout", json={}).status_code == 400

    def test_me(self, client, db_session):
        tokens = _register(client).get_json()["tokens"]
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['accessToken']}"})
        assert resp.status_code == 200
        assert resp.get_json()["usuario"]["email"] == "a@x.com"

    def test_me_for_deleted_user_is_404(self, client, db_session):
        token = issue_access_token(AccessTokenClaims(user_id=999, email="gone@x.com", rol="usuario"))
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Usuario no encontrado"


# =============================================================================
# MIDDLEWARE GATES
# =============================================================================


@pytest.fixture
def gated_client(app):
    bp = Blueprint("gates", __name__, url_prefix="/_test")

    @bp.get("/optional")
    @optional_auth
    def optional_view():
        claims = g.current_user
        return jsonify({"email": claims.email if claims else None})

    @bp.get("/admin")
    @require_auth
    @require_admin
    def admin_view():
        return jsonify({"ok": True})

    @bp.get("/admin-only")
    @require_admin
    def admin_without_auth_view():
        return jsonify({"ok": True})

    app.register_blueprint(bp)
    return app.test_client()


class TestAuthGates:
    def test_missing_token_is_401(self, client, db_session):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Token no proporcionado"

    def test_non_bearer_header_is_401(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401

    def test_invalid_token_is_403(self, client, db_session):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Token inválido o expirado"

    def test_expired_token_is_403(self, client, db_session):
        token = issue_access_token(
            AccessTokenClaims(user_id=1, email="a@x.com", rol="usuario"),
            expires_in=timedelta(seconds=-1),
        )
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 403

    def test_optional_auth_anonymous(self, gated_client):
        assert gated_client.get("/_test/optional").get_json() == {"email": None}

    def test_optional_auth_with_invalid_token_proceeds(self, gated_client):
        resp = gated_client.get("/_test/optional", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 200
        assert resp.get_json() == {"email": None}

    def test_optional_auth_with_valid_token(self, gated_client, user_headers):
        resp = gated_client.get("/_test/optional", headers=user_headers)
        assert resp.get_json() == {"email": "cliente@dulzura.test"}

    def test_admin_gate_rejects_regular_user(self, gated_client, user_headers):
        resp = gated_client.get("/_test/admin", headers=user_headers)
        assert resp.status_code == 403
        assert resp.get_json()["message"] == "Acceso denegado. Se requiere rol de administrador"

    def test_admin_gate_accepts_admin(self, gated_client, admin_headers):
        assert gated_client.get("/_test/admin", headers=admin_headers).status_code == 200

    def test_admin_gate_without_claims_is_401(self, gated_client):
        resp = gated_client.get("/_test/admin-only")
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "No autenticado"
