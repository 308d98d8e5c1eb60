# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

Users register or log in with email + password and receive a token pair:
- accessToken: signed JWT, 15 minutes
- refreshToken: opaque random string stored in refresh_tokens, 7 days

Every login/registration inserts a NEW refresh token row (one per device).
Refreshing mints a new access token only; the refresh token keeps its
original expiry. Expired rows are removed by sweep_expired_tokens(), exposed
as `flask auth sweep-tokens` for cron.

Public operations never raise: failures come back as AuthResult(success=False)
with a user-facing message. verify_access_token() returns None instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import User, RefreshToken, ROLE_ADMIN, ROLE_USER
from .token_service import (
    AccessTokenClaims,
    decode_access_token,
    generate_refresh_token,
    hash_password,
    issue_access_token,
    verify_password,
)
from dulzura.time_utils import utcnow

MSG_DUPLICATE_EMAIL = "El email ya está registrado"
MSG_INVALID_CREDENTIALS = "Credenciales inválidas"
MSG_INVALID_REFRESH = "Refresh token inválido o expirado"


@dataclass
class AuthResult:
    success: bool
    message: str
    user: User | None = None
    tokens: dict | None = None
    access_token: str | None = None

    def to_dict(self) -> dict:
        data = {"success": self.success, "message": self.message}
        if self.user is not None:
            data["usuario"] = self.user.to_dict()
        if self.tokens is not None:
            data["tokens"] = self.tokens
        if self.access_token is not None:
            data["accessToken"] = self.access_token
        return data


def _failure(operation: str, exc: Exception) -> AuthResult:
    db.session.rollback()
    current_app.logger.exception("Auth operation %s failed", operation)
    return AuthResult(success=False, message=f"Error: {exc}")


def claims_for(user: User) -> AccessTokenClaims:
    return AccessTokenClaims(user_id=user.id, email=user.email, rol=user.rol)


def issue_token_pair(user: User) -> dict:
    """
    Create an access token plus a fresh refresh-token row for user.

    Commits the new refresh token.
    """
    access_token = issue_access_token(claims_for(user))
    refresh_token = generate_refresh_token()

    db.session.add(RefreshToken(
        usuario_id=user.id,
        token=refresh_token,
        expires_at=utcnow() + timedelta(days=current_app.config["REFRESH_TOKEN_DAYS"]),
    ))
    db.session.commit()

    return {"accessToken": access_token, "refreshToken": refresh_token}


def register(email: str, password: str, nombre: str) -> AuthResult:
    """Create a non-privileged user and log them in."""
    try:
        existing = db.session.query(User.id).filter_by(email=email).first()
        if existing:
            return AuthResult(success=False, message=MSG_DUPLICATE_EMAIL)

        user = User(
            email=email,
            password_hash=hash_password(password),
            nombre=nombre,
            rol=ROLE_USER,
            activo=True,
        )
        db.session.add(user)
        try:
            db.session.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email
            db.session.rollback()
            return AuthResult(success=False, message=MSG_DUPLICATE_EMAIL)

        tokens = issue_token_pair(user)
        return AuthResult(
            success=True,
            message="Usuario registrado exitosamente",
            user=user,
            tokens=tokens,
        )
    except SQLAlchemyError as exc:
        return _failure("register", exc)


def login(email: str, password: str) -> AuthResult:
    """
    Authenticate an active user.

    Unknown email and wrong password produce the same message so accounts
    cannot be enumerated.
    """
    try:
        user = db.session.query(User).filter(
            User.email == email,
            User.activo.is_(True),
        ).first()

        if not user or not verify_password(password, user.password_hash):
            return AuthResult(success=False, message=MSG_INVALID_CREDENTIALS)

        user.ultimo_login = utcnow()
        tokens = issue_token_pair(user)
        return AuthResult(success=True, message="Login exitoso", user=user, tokens=tokens)
    except SQLAlchemyError as exc:
        return _failure("login", exc)


def refresh_access_token(refresh_token: str) -> AuthResult:
    """Exchange a stored, unexpired refresh token (of an active user) for a new access token."""
    try:
        user = (
            db.session.query(User)
            .join(RefreshToken, RefreshToken.usuario_id == User.id)
            .filter(
                RefreshToken.token == refresh_token,
                RefreshToken.expires_at > utcnow(),
                User.activo.is_(True),
            )
            .first()
        )
        if not user:
            return AuthResult(success=False, message=MSG_INVALID_REFRESH)

        return AuthResult(
            success=True,
            message="Token refrescado exitosamente",
            access_token=issue_access_token(claims_for(user)),
        )
    except SQLAlchemyError as exc:
        return _failure("refresh", exc)


def logout(refresh_token: str) -> AuthResult:
    """Delete the refresh token row. Unknown tokens are not an error."""
    try:
        db.session.query(RefreshToken).filter_by(token=refresh_token).delete()
        db.session.commit()
        return AuthResult(success=True, message="Logout exitoso")
    except SQLAlchemyError as exc:
        return _failure("logout", exc)


def verify_access_token(token: str) -> AccessTokenClaims | None:
    return decode_access_token(token)


def get_user_by_id(user_id: int) -> User | None:
    return db.session.get(User, user_id)


def sweep_expired_tokens() -> int:
    """
    Delete refresh tokens past expiry.

    Returns count of rows deleted. Run periodically (`flask auth sweep-tokens`).
    """
    deleted = db.session.query(RefreshToken).filter(
        RefreshToken.expires_at <= utcnow()
    ).delete()
    db.session.commit()
    return deleted


def create_admin(email: str, password: str, nombre: str) -> tuple[User, bool]:
    """
    Create an admin account, or promote the existing user with that email.

    Returns (user, created). An existing user's password is left untouched.
    """
    user = db.session.query(User).filter_by(email=email).first()
    if user:
        user.rol = ROLE_ADMIN
        user.activo = True
        db.session.commit()
        return user, False

    user = User(
        email=email,
        password_hash=hash_password(password),
        nombre=nombre,
        rol=ROLE_ADMIN,
        activo=True,
    )
    db.session.add(user)
    db.session.commit()
    return user, True


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id.asc()).all()
