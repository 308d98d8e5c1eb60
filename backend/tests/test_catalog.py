"""
Category and product tests.

Verifies public reads, admin-only writes, validation, duplicate handling and
the configurable delete policy.
"""

import io
from pathlib import Path

import pytest

from dulzura.models import Category, DigitalContent, Photo, Product


# =============================================================================
# CATEGORIES
# =============================================================================


class TestCategories:
    def test_list_is_public_and_sorted(self, client, db_session):
        db_session.add_all([Category(nombre="Panes"), Category(nombre="Galletas")])
        db_session.commit()

        resp = client.get("/api/categorias")
        assert resp.status_code == 200
        assert [c["nombre"] for c in resp.get_json()] == ["Galletas", "Panes"]

    def test_create_requires_admin(self, client, user_headers):
        assert client.post("/api/categorias", json={"nombre": "Panes"}, headers=user_headers).status_code == 403
        assert client.post("/api/categorias", json={"nombre": "Panes"}).status_code == 401

    def test_create(self, client, admin_headers):
        resp = client.post("/api/categorias", json={"nombre": "Panes", "descripcion": "Del día"}, headers=admin_headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["nombre"] == "Panes"
        assert body["activo"] is True

    def test_duplicate_name_is_409(self, client, admin_headers, category):
        resp = client.post("/api/categorias", json={"nombre": category.nombre}, headers=admin_headers)
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "Ya existe una categoría con ese nombre"

    def test_missing_name_is_400(self, client, admin_headers):
        resp = client.post("/api/categorias", json={"descripcion": "x"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_unknown_field_is_400(self, client, admin_headers):
        resp = client.post("/api/categorias", json={"nombre": "x", "id": 5}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Campo no permitido: id"

    def test_update(self, client, admin_headers, category):
        resp = client.put(f"/api/categorias/{category.id}", json={"descripcion": "Nueva"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["descripcion"] == "Nueva"
        assert resp.get_json()["nombre"] == category.nombre

    def test_get_unknown_is_404(self, client, db_session):
        assert client.get("/api/categorias/99").status_code == 404

    def test_hard_delete(self, client, admin_headers, category, db_session):
        resp = client.delete(f"/api/categorias/{category.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert db_session.query(Category).count() == 0

    def test_hard_delete_refused_while_products_exist(self, client, admin_headers, category, product):
        resp = client.delete(f"/api/categorias/{category.id}", headers=admin_headers)
        assert resp.status_code == 409

    def test_soft_delete_policy(self, app, client, admin_headers, category, product, db_session):
        app.config["DELETE_MODES"] = {**app.config["DELETE_MODES"], "categoria": "soft"}

        resp = client.delete(f"/api/categorias/{category.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert db_session.get(Category, category.id).activo is False
        assert client.get("/api/categorias").get_json() == []


# =============================================================================
# PRODUCTS
# =============================================================================


class TestProducts:
    def test_public_list_hides_inactive(self, client, category, product, db_session):
        db_session.add(Product(categoria_id=category.id, nombre="Viejo", precio=1, activo=False))
        db_session.commit()

        names = [p["nombre"] for p in client.get("/api/productos").get_json()]
        assert names == [product.nombre]

    def test_admin_listing_includes_inactive(self, client, admin_headers, user_headers, category, product, db_session):
        db_session.add(Product(categoria_id=category.id, nombre="Viejo", precio=1, activo=False))
        db_session.commit()

        assert client.get("/api/productos?admin=true", headers=user_headers).status_code == 403
        resp = client.get("/api/productos?admin=true", headers=admin_headers)
        assert len(resp.get_json()) == 2

    def test_list_by_category(self, client, category, product, db_session):
        other = Category(nombre="Panes")
        db_session.add(other)
        db_session.commit()

        assert len(client.get(f"/api/productos/categoria/{category.id}").get_json()) == 1
        assert client.get(f"/api/productos/categoria/{other.id}").get_json() == []

    def test_get(self, client, product):
        body = client.get(f"/api/productos/{product.id}").get_json()
        assert body["precio"] == 12.5
        assert body["nombre"] == "Torta de chocolate"

    def test_create(self, client, admin_headers, category):
        resp = client.post(
            "/api/productos",
            json={"nombre": "Kuchen", "categoria_id": category.id, "precio": "9.90", "sku": "KU-1"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["precio"] == 9.9

    @pytest.mark.parametrize(
        "payload",
        [
            {"nombre": "Kuchen", "precio": 1},
            {"nombre": "Kuchen", "categoria_id": 1, "precio": -1},
            {"nombre": "Kuchen", "categoria_id": 1, "precio": "abc"},
            {"nombre": "Kuchen", "categoria_id": 999, "precio": 1},
        ],
    )
    def test_create_validation(self, client, admin_headers, category, payload):
        assert client.post("/api/productos", json=payload, headers=admin_headers).status_code == 400

    def test_duplicate_sku_is_409(self, client, admin_headers, category):
        payload = {"nombre": "Kuchen", "categoria_id": category.id, "precio": 1, "sku": "SKU-1"}
        assert client.post("/api/productos", json=payload, headers=admin_headers).status_code == 201
        payload["nombre"] = "Otro"
        assert client.post("/api/productos", json=payload, headers=admin_headers).status_code == 409

    def test_update(self, client, admin_headers, product):
        resp = client.put(f"/api/productos/{product.id}", json={"precio": 15}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["precio"] == 15.0

    def test_update_unknown_is_404(self, client, admin_headers):
        assert client.put("/api/productos/999", json={"precio": 1}, headers=admin_headers).status_code == 404

    def test_hard_delete_removes_photos_and_content(
        self, client, admin_headers, product, png_bytes, photo_service, db_session
    ):
        upload = client.post(
            "/api/fotos/upload",
            data={"foto": (io.BytesIO(png_bytes), "a.png", "image/png"), "producto_id": str(product.id)},
            headers=admin_headers,
            content_type="multipart/form-data",
        ).get_json()["data"]
        db_session.add(DigitalContent(producto_id=product.id, url="http://x/v.mp4", titulo="Video", etiquetas=[]))
        db_session.commit()

        resp = client.delete(f"/api/productos/{product.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert db_session.query(Product).count() == 0
        assert db_session.query(Photo).count() == 0
        assert db_session.query(DigitalContent).count() == 0
        assert not Path(upload["ruta_completa"]).exists()

    def test_failed_hard_delete_keeps_photo_files(
        self, app, client, admin_headers, product, png_bytes, db_session, monkeypatch
    ):
        from sqlalchemy.exc import OperationalError

        from dulzura.services.product_service import delete_product

        upload = client.post(
            "/api/fotos/upload",
            data={"foto": (io.BytesIO(png_bytes), "a.png", "image/png"), "producto_id": str(product.id)},
            headers=admin_headers,
            content_type="multipart/form-data",
        ).get_json()["data"]

        def broken_commit():
            raise OperationalError("DELETE", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "commit", broken_commit)
        with pytest.raises(OperationalError):
            delete_product(product_id=product.id)
        monkeypatch.undo()
        db_session.rollback()

        assert Path(upload["ruta_completa"]).exists()
        assert db_session.query(Photo).count() == 1
        assert db_session.get(Product, product.id) is not None

    def test_soft_delete_policy(self, app, client, admin_headers, product, db_session):
        app.config["DELETE_MODES"] = {**app.config["DELETE_MODES"], "producto": "soft"}

        assert client.delete(f"/api/productos/{product.id}", headers=admin_headers).status_code == 200
        assert db_session.get(Product, product.id).activo is False
        assert client.get("/api/productos").get_json() == []
