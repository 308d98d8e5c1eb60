# Overview: Service-layer operations for products; encapsulates business logic and database work.

"""
Products Service

Public listings only show active products; admins can list everything.
Deleting follows DELETE_MODES["producto"]. A hard delete also removes the
product's photos (rows and stored files) and its digital content entries.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Category, Product, SaleLineItem
from ..validation import ConflictError, ValidationError
from . import digital_content_service
from .deletion_policy import HARD, delete_mode, remove

MSG_DUPLICATE = "Ya existe un producto con este nombre o SKU."
PRODUCT_MUTABLE_FIELDS = {"categoria_id", "nombre", "descripcion", "precio", "costo", "sku", "activo"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(*, include_inactive: bool = False, categoria_id: int | None = None) -> list[Product]:
    q = db.session.query(Product)
    if not include_inactive:
        q = q.filter(Product.activo.is_(True))
    if categoria_id is not None:
        q = q.filter(Product.categoria_id == categoria_id)
    return q.order_by(Product.nombre.asc(), Product.id.asc()).all()


def get_product(product_id: int) -> Product | None:
    return db.session.get(Product, product_id)


def _require_category(categoria_id: int) -> None:
    if db.session.get(Category, categoria_id) is None:
        raise ValidationError("La categoría indicada no existe")


def _ensure_unique_sku(sku: str | None, exclude_id: int | None = None) -> None:
    if not sku:
        return
    q = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first():
        raise ConflictError(MSG_DUPLICATE)


def _commit_or_conflict() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(MSG_DUPLICATE)


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: unknown categoria_id
        ConflictError: SKU already exists
    """
    _require_category(patch["categoria_id"])
    if patch.get("sku") == "":
        patch["sku"] = None
    _ensure_unique_sku(patch.get("sku"))

    p = Product(activo=True)
    apply_product_patch(p, patch)

    db.session.add(p)
    _commit_or_conflict()
    return p


def update_product(*, product_id: int, patch: dict) -> Product | None:
    p = db.session.get(Product, product_id)
    if not p:
        return None

    if "categoria_id" in patch:
        _require_category(patch["categoria_id"])
    if patch.get("sku") == "":
        patch["sku"] = None
    if "sku" in patch:
        _ensure_unique_sku(patch["sku"], exclude_id=p.id)

    apply_product_patch(p, patch)
    _commit_or_conflict()
    return p


def delete_product(*, product_id: int) -> bool:
    """
    Delete a product per policy.

    Returns:
        True if deleted, False if not found

    Raises:
        ConflictError: hard delete of a product that appears in recorded sales
    """
    p = db.session.get(Product, product_id)
    if not p:
        return False

    photo_service = current_app.extensions["photo_service"]
    photo_locators = []
    if delete_mode("producto") == HARD:
        sold = db.session.query(SaleLineItem.id).filter(SaleLineItem.producto_id == p.id).first()
        if sold:
            raise ConflictError("No se puede eliminar un producto con ventas registradas")

        photo_locators = photo_service.delete_for_product(p.id)
        digital_content_service.delete_content_for_product(p.id)

    remove(p, "producto")
    db.session.commit()

    # Stored files go only once the rows are gone for good
    if photo_locators:
        removed = photo_service.remove_assets(photo_locators)
        current_app.logger.info("Removed %d photos of product %s", removed, p.id)
    return True
