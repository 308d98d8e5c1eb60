from __future__ import annotations

from ..extensions import db
from dulzura.time_utils import to_utc_z

ROLE_ADMIN = "admin"
ROLE_USER = "usuario"


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Users are never hard-deleted; `activo=False` blocks login and refresh.
    """
    __tablename__ = "usuarios"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_usuarios_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    nombre = db.Column(db.String(120), nullable=False)
    rol = db.Column(db.String(16), nullable=False, default=ROLE_USER)
    activo = db.Column(db.Boolean, nullable=False, default=True)
    ultimo_login = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        # password_hash never leaves the service layer
        return {
            "id": self.id,
            "email": self.email,
            "nombre": self.nombre,
            "rol": self.rol,
            "activo": self.activo,
            "ultimo_login": to_utc_z(self.ultimo_login),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RefreshToken(db.Model):
    """
    Long-lived opaque refresh credential.

    A user may hold many rows at once (one per login/registration), which is
    what allows concurrent sessions on several devices. Rows are removed on
    logout or by the expiry sweep.
    """
    __tablename__ = "refresh_tokens"
    __table_args__ = (
        db.UniqueConstraint("token", name="uq_refresh_tokens_token"),
        db.Index("ix_refresh_tokens_expires_at", "expires_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    usuario_id = db.Column(
        db.Integer, db.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token = db.Column(db.String(255), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    usuario = db.relationship("User", backref=db.backref("refresh_tokens", lazy=True, passive_deletes=True))
