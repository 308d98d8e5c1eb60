# Overview: Request decorators for API routes (bearer-token auth gates).

from functools import wraps
from flask import request, g

from .errors import AuthenticationError
from .models import ROLE_ADMIN
from .services import auth_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require a valid access token.

    Sets g.current_user to the token's AccessTokenClaims.

    Raises AuthenticationError, answered as:
    - 401 when the Authorization header carries no bearer token
    - 403 when the token is malformed, badly signed or expired
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise AuthenticationError("Token no proporcionado")

        claims = auth_service.verify_access_token(token)
        if not claims:
            raise AuthenticationError("Token inválido o expirado", status_code=403)

        g.current_user = claims
        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """Like require_auth, but anonymous callers pass through with g.current_user = None."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        g.current_user = auth_service.verify_access_token(token) if token else None
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """
    Require the admin role. Must be stacked below @require_auth.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = getattr(g, "current_user", None)
        if not claims:
            raise AuthenticationError("No autenticado")

        if claims.rol != ROLE_ADMIN:
            raise AuthenticationError(
                "Acceso denegado. Se requiere rol de administrador",
                status_code=403,
            )

        return f(*args, **kwargs)

    return decorated_function


def current_user_is_admin() -> bool:
    claims = getattr(g, "current_user", None)
    return bool(claims and claims.rol == ROLE_ADMIN)
