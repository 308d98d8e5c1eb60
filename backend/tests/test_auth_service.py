"""
Auth service tests.

Verifies:
- Registration issues a token pair whose access token verifies to the same email
- Duplicate email, invalid credentials (non-enumerable), inactive users
- Refresh without rotation, logout idempotency, expiry sweep
"""

from datetime import timedelta

import pytest

from dulzura.extensions import db
from dulzura.models import RefreshToken, User, ROLE_ADMIN, ROLE_USER
from dulzura.services import auth_service
from dulzura.time_utils import utcnow


# =============================================================================
# REGISTER
# =============================================================================


class TestRegister:
    def test_fresh_email_succeeds(self, db_session):
        result = auth_service.register("a@x.com", "secret1", "A")

        assert result.success is True
        assert result.user.email == "a@x.com"
        assert result.user.rol == ROLE_USER
        claims = auth_service.verify_access_token(result.tokens["accessToken"])
        assert claims.email == "a@x.com"
        assert claims.user_id == result.user.id

    def test_password_is_hashed(self, db_session):
        result = auth_service.register("a@x.com", "secret1", "A")
        assert result.user.password_hash != "secret1"
        assert "password_hash" not in result.to_dict()["usuario"]

    def test_duplicate_email_fails_without_second_row(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")
        second = auth_service.register("a@x.com", "other12", "B")

        assert second.success is False
        assert second.message == "El email ya está registrado"
        assert db_session.query(User).filter_by(email="a@x.com").count() == 1

    def test_each_registration_stores_refresh_token(self, db_session):
        result = auth_service.register("a@x.com", "secret1", "A")
        row = db_session.query(RefreshToken).filter_by(token=result.tokens["refreshToken"]).one()
        assert row.usuario_id == result.user.id
        assert row.expires_at > utcnow() + timedelta(days=6)


# =============================================================================
# LOGIN
# =============================================================================


class TestLogin:
    def test_correct_credentials(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")
        result = auth_service.login("a@x.com", "secret1")

        assert result.success is True
        assert result.tokens["accessToken"]
        assert result.tokens["refreshToken"]
        assert result.user.ultimo_login is not None

    def test_wrong_password_and_unknown_email_look_the_same(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")

        wrong_password = auth_service.login("a@x.com", "nope123")
        unknown_email = auth_service.login("ghost@x.com", "secret1")

        assert wrong_password.success is False
        assert unknown_email.success is False
        assert wrong_password.message == unknown_email.message == "Credenciales inválidas"

    def test_inactive_user_cannot_login(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        reg.user.activo = False
        db_session.commit()

        assert auth_service.login("a@x.com", "secret1").success is False

    def test_every_login_creates_new_refresh_token(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")
        first = auth_service.login("a@x.com", "secret1")
        second = auth_service.login("a@x.com", "secret1")

        assert first.tokens["refreshToken"] != second.tokens["refreshToken"]
        assert db_session.query(RefreshToken).count() == 3


# =============================================================================
# REFRESH / LOGOUT / SWEEP
# =============================================================================


class TestRefreshLifecycle:
    def test_refresh_mints_access_token_and_keeps_refresh_token(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        refresh_token = reg.tokens["refreshToken"]

        result = auth_service.refresh_access_token(refresh_token)

        assert result.success is True
        assert auth_service.verify_access_token(result.access_token).email == "a@x.com"
        # No rotation: the same refresh token keeps working
        assert auth_service.refresh_access_token(refresh_token).success is True

    def test_unknown_refresh_token_fails(self, db_session):
        result = auth_service.refresh_access_token("deadbeef")
        assert result.success is False
        assert result.message == "Refresh token inválido o expirado"

    def test_expired_refresh_token_fails(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        row = db_session.query(RefreshToken).filter_by(token=reg.tokens["refreshToken"]).one()
        row.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert auth_service.refresh_access_token(reg.tokens["refreshToken"]).success is False

    def test_refresh_for_inactive_user_fails(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        reg.user.activo = False
        db_session.commit()

        assert auth_service.refresh_access_token(reg.tokens["refreshToken"]).success is False

    def test_logout_deletes_token_and_is_idempotent(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        token = reg.tokens["refreshToken"]

        assert auth_service.logout(token).success is True
        assert auth_service.logout(token).success is True
        assert auth_service.refresh_access_token(token).success is False

    def test_sweep_removes_only_expired_rows(self, db_session):
        reg = auth_service.register("a@x.com", "secret1", "A")
        auth_service.login("a@x.com", "secret1")
        stale = db_session.query(RefreshToken).filter_by(token=reg.tokens["refreshToken"]).one()
        stale.expires_at = utcnow() - timedelta(days=1)
        db_session.commit()

        assert auth_service.sweep_expired_tokens() == 1
        assert db_session.query(RefreshToken).count() == 1


# =============================================================================
# ADMIN BOOTSTRAP
# =============================================================================


class TestCreateAdmin:
    def test_creates_admin(self, db_session):
        user, created = auth_service.create_admin("boss@x.com", "secret1", "Boss")
        assert created is True
        assert user.rol == ROLE_ADMIN
        assert auth_service.login("boss@x.com", "secret1").success is True

    def test_promotes_existing_user_without_touching_password(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")
        user, created = auth_service.create_admin("a@x.com", "different", "A")

        assert created is False
        assert user.rol == ROLE_ADMIN
        assert auth_service.login("a@x.com", "secret1").success is True

    def test_list_users_ordered_by_id(self, db_session):
        auth_service.register("a@x.com", "secret1", "A")
        auth_service.register("b@x.com", "secret1", "B")
        assert [u.email for u in auth_service.list_users()] == ["a@x.com", "b@x.com"]


def test_database_failure_becomes_result(db_session, monkeypatch):
    from sqlalchemy.exc import OperationalError

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "query", broken_query)
    result = auth_service.login("a@x.com", "secret1")

    assert result.success is False
    assert "database is locked" in result.message
