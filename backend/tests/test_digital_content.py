"""
Digital content tests.

Every test runs against both repositories (in-memory and SQL) to show they are
interchangeable behind the service.
"""

import pytest

from conftest import make_app
from dulzura.extensions import db
from dulzura.services.digital_content_service import (
    InMemoryDigitalContentRepository,
    SqlDigitalContentRepository,
    build_repository,
)


@pytest.fixture(params=["memory", "sql"])
def app(request, tmp_path):
    app = make_app(tmp_path, DIGITAL_CONTENT_REPOSITORY=request.param)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def content(client, user_headers, product):
    resp = client.post(
        "/api/contenido-digital",
        json={
            "producto_id": product.id,
            "url": "https://cdn.example.com/torta.mp4",
            "titulo": "Decorado de torta",
            "etiquetas": ["Chocolate", "tutorial", "chocolate", " "],
            "tipo": "video",
            "tamano": 2048,
        },
        headers=user_headers,
    )
    assert resp.status_code == 201
    return resp.get_json()


class TestRepositorySelection:
    def test_build_repository(self):
        assert isinstance(build_repository({"DIGITAL_CONTENT_REPOSITORY": "memory"}), InMemoryDigitalContentRepository)
        assert isinstance(build_repository({"DIGITAL_CONTENT_REPOSITORY": "SQL"}), SqlDigitalContentRepository)
        with pytest.raises(RuntimeError):
            build_repository({"DIGITAL_CONTENT_REPOSITORY": "redis"})

    def test_app_uses_configured_repository(self, app):
        repo = app.extensions["digital_content_repository"]
        assert repo.name == app.config["DIGITAL_CONTENT_REPOSITORY"]


# =============================================================================
# CRUD
# =============================================================================


class TestContentCrud:
    def test_create_normalizes_tags(self, content, product):
        assert content["producto_id"] == product.id
        assert content["etiquetas"] == ["Chocolate", "tutorial", "chocolate"]
        assert content["tipo"] == "video"
        assert content["fecha_subida"].endswith("Z")

    def test_create_requires_token(self, client, product):
        resp = client.post(
            "/api/contenido-digital",
            json={"producto_id": product.id, "url": "https://x/y.jpg", "titulo": "Foto"},
        )
        assert resp.status_code == 401

    @pytest.mark.parametrize(
        "payload",
        [
            {"url": "https://x/y.jpg", "titulo": "Foto"},
            {"producto_id": 999, "url": "https://x/y.jpg", "titulo": "Foto"},
            {"producto_id": 1, "url": "https://x/y.jpg", "titulo": "Foto", "tipo": "audio"},
            {"producto_id": 1, "url": "https://x/y.jpg", "titulo": "Foto", "etiquetas": "dulce"},
            {"producto_id": 1, "url": "https://x/y.jpg", "titulo": "Foto", "tamano": -5},
        ],
    )
    def test_create_validation(self, client, user_headers, product, payload):
        assert client.post("/api/contenido-digital", json=payload, headers=user_headers).status_code == 400

    def test_default_type_is_image(self, client, user_headers, product):
        resp = client.post(
            "/api/contenido-digital",
            json={"producto_id": product.id, "url": "https://x/y.jpg", "titulo": "Foto"},
            headers=user_headers,
        )
        assert resp.get_json()["tipo"] == "imagen"
        assert resp.get_json()["etiquetas"] == []

    def test_reads(self, client, content, product):
        assert client.get(f"/api/contenido-digital/{content['id']}").get_json() == content
        assert client.get("/api/contenido-digital").get_json() == [content]
        assert client.get(f"/api/contenido-digital/producto/{product.id}").get_json() == [content]
        assert client.get("/api/contenido-digital/producto/999").get_json() == []

    def test_get_unknown_is_404(self, client, db_session):
        resp = client.get("/api/contenido-digital/999")
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Contenido no encontrado"

    def test_update(self, client, user_headers, content):
        resp = client.put(
            f"/api/contenido-digital/{content['id']}",
            json={"titulo": "Nuevo título", "etiquetas": ["receta"]},
            headers=user_headers,
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["titulo"] == "Nuevo título"
        assert body["etiquetas"] == ["receta"]
        assert body["url"] == content["url"]

    def test_update_unknown_is_404(self, client, user_headers, db_session):
        resp = client.put("/api/contenido-digital/999", json={"titulo": "x"}, headers=user_headers)
        assert resp.status_code == 404

    def test_delete(self, client, user_headers, content):
        assert client.delete(f"/api/contenido-digital/{content['id']}", headers=user_headers).status_code == 200
        assert client.get(f"/api/contenido-digital/{content['id']}").status_code == 404
        assert client.delete(f"/api/contenido-digital/{content['id']}", headers=user_headers).status_code == 404


# =============================================================================
# TAGS
# =============================================================================


class TestTags:
    def test_search_is_case_insensitive_substring(self, client, content):
        for query in ("choco", "CHOCOLATE", "Tuto"):
            body = client.get(f"/api/contenido-digital/etiqueta/{query}").get_json()
            assert [c["id"] for c in body] == [content["id"]], query

        assert client.get("/api/contenido-digital/etiqueta/vainilla").get_json() == []

    def test_search_via_query_string(self, client, content):
        assert len(client.get("/api/contenido-digital?etiqueta=tutorial").get_json()) == 1
        assert client.get("/api/contenido-digital?etiqueta=").status_code == 400

    def test_add_tag(self, client, user_headers, content):
        resp = client.post(
            f"/api/contenido-digital/{content['id']}/etiquetas",
            json={"etiqueta": "sin gluten"},
            headers=user_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["etiquetas"][-1] == "sin gluten"

    def test_add_existing_tag_is_noop(self, client, user_headers, content):
        resp = client.post(
            f"/api/contenido-digital/{content['id']}/etiquetas",
            json={"etiqueta": "tutorial"},
            headers=user_headers,
        )
        assert resp.get_json()["etiquetas"] == content["etiquetas"]

    def test_add_tag_validation(self, client, user_headers, content):
        url = f"/api/contenido-digital/{content['id']}/etiquetas"
        assert client.post(url, json={}, headers=user_headers).status_code == 400
        assert client.post(url, json={"etiqueta": "  "}, headers=user_headers).status_code == 400
        assert client.post(url, json=["sin gluten"], headers=user_headers).status_code == 400
        assert client.post("/api/contenido-digital/999/etiquetas", json={"etiqueta": "x"}, headers=user_headers).status_code == 404

    def test_remove_tag_is_exact(self, client, user_headers, content):
        resp = client.delete(f"/api/contenido-digital/{content['id']}/etiquetas/chocolate", headers=user_headers)
        assert resp.status_code == 200
        assert resp.get_json()["etiquetas"] == ["Chocolate", "tutorial"]

    def test_remove_missing_tag_is_noop(self, client, user_headers, content):
        resp = client.delete(f"/api/contenido-digital/{content['id']}/etiquetas/vainilla", headers=user_headers)
        assert resp.status_code == 200
        assert resp.get_json()["etiquetas"] == content["etiquetas"]


# =============================================================================
# PRODUCT DELETION
# =============================================================================


class TestProductDeletion:
    def test_hard_product_delete_drops_its_content(self, client, admin_headers, content, product, db_session):
        assert client.delete(f"/api/productos/{product.id}", headers=admin_headers).status_code == 200

        assert client.get(f"/api/contenido-digital/producto/{product.id}").get_json() == []
        assert client.get(f"/api/contenido-digital/{content['id']}").status_code == 404

    def test_other_products_keep_their_content(self, app, client, admin_headers, user_headers, content, product, db_session):
        from decimal import Decimal

        from dulzura.models import Product

        other = Product(categoria_id=product.categoria_id, nombre="Alfajor", precio=Decimal("5.00"), activo=True)
        db_session.add(other)
        db_session.commit()
        kept = client.post(
            "/api/contenido-digital",
            json={"producto_id": other.id, "url": "https://cdn.example.com/alfajor.jpg", "titulo": "Alfajor"},
            headers=user_headers,
        ).get_json()

        client.delete(f"/api/productos/{product.id}", headers=admin_headers)

        assert [c["id"] for c in client.get("/api/contenido-digital").get_json()] == [kept["id"]]
