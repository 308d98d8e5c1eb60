# Overview: Password hashing and access/refresh token primitives.

"""
Password/Token codec.

- Passwords: bcrypt, cost factor from BCRYPT_ROUNDS (10 in production).
- Access tokens: HS256 JWT carrying userId, email and rol. Short-lived and never
  stored server-side.
- Refresh tokens: 64 random bytes, hex encoded (128 chars). These are opaque; the
  database row is what makes them valid.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from flask import current_app

JWT_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 64


@dataclass(frozen=True)
class AccessTokenClaims:
    """Identity carried by a verified access token."""
    user_id: int
    email: str
    rol: str

    def to_payload(self) -> dict:
        return {"userId": self.user_id, "email": self.email, "rol": self.rol}


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 10))
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time. A corrupt hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_access_token(claims: AccessTokenClaims, expires_in: timedelta | None = None) -> str:
    if expires_in is None:
        expires_in = timedelta(minutes=current_app.config["ACCESS_TOKEN_MINUTES"])

    now = datetime.now(timezone.utc)
    payload = claims.to_payload()
    payload["iat"] = now
    payload["exp"] = now + expires_in
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> AccessTokenClaims | None:
    """
    Return the claims of a valid token, or None.

    Malformed, expired and badly signed tokens are deliberately indistinguishable.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("userId")
    email = payload.get("email")
    rol = payload.get("rol")
    if not isinstance(user_id, int) or not email or not rol:
        return None
    return AccessTokenClaims(user_id=user_id, email=email, rol=rol)


def generate_refresh_token() -> str:
    return secrets.token_hex(REFRESH_TOKEN_BYTES)
