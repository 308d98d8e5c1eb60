# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /register, /login   -> {success, message, usuario, tokens}
- POST /refresh            -> {success, message, accessToken}
- POST /logout             -> {success, message}
- GET  /me (bearer)        -> {success, usuario}

Refresh tokens travel in the JSON body as "refreshToken".
"""

import re

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..decorators import require_auth

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def _server_error():
    return _fail("Error interno del servidor", 500)


def _json_body():
    """Request body as a dict; a missing body counts as empty, None if it is not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


@auth_bp.post("/register")
def register_route():
    """Self-registration; new accounts get the non-privileged role."""
    try:
        data = _json_body()
        if data is None:
            return _fail("Cuerpo JSON inválido", 400)
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""
        nombre = (data.get("nombre") or "").strip()

        if not all([email, password, nombre]):
            return _fail("Email, contraseña y nombre son requeridos", 400)
        if not EMAIL_RE.match(email):
            return _fail("Formato de email inválido", 400)
        if len(password) < MIN_PASSWORD_LENGTH:
            return _fail("La contraseña debe tener al menos 6 caracteres", 400)

        result = auth_service.register(email, password, nombre)
        return jsonify(result.to_dict()), 201 if result.success else 400

    except Exception:
        current_app.logger.exception("Failed to register user")
        return _server_error()


@auth_bp.post("/login")
def login_route():
    try:
        data = _json_body()
        if data is None:
            return _fail("Cuerpo JSON inválido", 400)
        email = (data.get("email") or "").strip()
        password = data.get("password") or ""

        if not all([email, password]):
            return _fail("Email y contraseña son requeridos", 400)

        result = auth_service.login(email, password)
        return jsonify(result.to_dict()), 200 if result.success else 401

    except Exception:
        current_app.logger.exception("Failed to login user")
        return _server_error()


@auth_bp.post("/refresh")
def refresh_route():
    try:
        data = _json_body()
        if data is None:
            return _fail("Cuerpo JSON inválido", 400)
        refresh_token = data.get("refreshToken")
        if not refresh_token:
            return _fail("Refresh token es requerido", 400)

        result = auth_service.refresh_access_token(refresh_token)
        return jsonify(result.to_dict()), 200 if result.success else 401

    except Exception:
        current_app.logger.exception("Failed to refresh access token")
        return _server_error()


@auth_bp.post("/logout")
def logout_route():
    try:
        data = _json_body()
        if data is None:
            return _fail("Cuerpo JSON inválido", 400)
        refresh_token = data.get("refreshToken")
        if not refresh_token:
            return _fail("Refresh token es requerido", 400)

        result = auth_service.logout(refresh_token)
        return jsonify(result.to_dict()), 200 if result.success else 400

    except Exception:
        current_app.logger.exception("Failed to logout")
        return _server_error()


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user, re-read from the database."""
    try:
        user = auth_service.get_user_by_id(g.current_user.user_id)
        if not user:
            return _fail("Usuario no encontrado", 404)
        return jsonify({"success": True, "usuario": user.to_dict()}), 200

    except Exception:
        current_app.logger.exception("Failed to load current user")
        return _server_error()
