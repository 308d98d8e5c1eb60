"""
Pytest fixtures for the Inquieta Dulzura backend tests.

Provides an app bound to in-memory SQLite with a temporary upload directory,
auth header helpers and a few catalog fixtures.
"""

import io
from decimal import Decimal

import pytest
from PIL import Image

from dulzura import create_app
from dulzura.extensions import db
from dulzura.models import Category, Product
from dulzura.services import auth_service
from dulzura.services.token_service import issue_access_token


def make_app(tmp_path, **overrides):
    config = {
        'TESTING': True,
        'APP_ENV': 'testing',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'JWT_SECRET': 'test-secret',
        'BASE_URL': 'http://testserver',
        'UPLOAD_DIR': str(tmp_path / 'uploads'),
        'PHOTO_STORAGE': 'local',
        'DIGITAL_CONTENT_REPOSITORY': 'sql',
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing with a fresh schema."""
    app = make_app(tmp_path)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    yield db.session
    db.session.rollback()


@pytest.fixture(scope='function')
def admin_user(db_session):
    user, _ = auth_service.create_admin("admin@dulzura.test", "secret1", "Admin")
    return user


@pytest.fixture(scope='function')
def regular_user(db_session):
    result = auth_service.register("cliente@dulzura.test", "secret1", "Cliente")
    assert result.success
    return result.user


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return auth_headers(issue_access_token(auth_service.claims_for(admin_user)))


@pytest.fixture(scope='function')
def user_headers(regular_user):
    return auth_headers(issue_access_token(auth_service.claims_for(regular_user)))


@pytest.fixture(scope='function')
def category(db_session):
    c = Category(nombre="Tortas", descripcion="Tortas de celebración", activo=True)
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture(scope='function')
def product(db_session, category):
    p = Product(categoria_id=category.id, nombre="Torta de chocolate", precio=Decimal("12.50"), activo=True)
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture(scope='function')
def png_bytes():
    return image_bytes("PNG", size=(4, 3))


@pytest.fixture(scope='function')
def photo_service(app):
    return app.extensions["photo_service"]


def image_bytes(fmt: str = "PNG", size=(4, 3)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 80)).save(buf, format=fmt)
    return buf.getvalue()


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def make_image():
    return image_bytes
