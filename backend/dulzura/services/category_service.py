# Overview: Service-layer operations for categories; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Category, Product
from ..validation import ConflictError
from .deletion_policy import HARD, delete_mode, remove

MSG_DUPLICATE_NAME = "Ya existe una categoría con ese nombre"
CATEGORY_MUTABLE_FIELDS = {"nombre", "descripcion", "activo"}


def list_categories(include_inactive: bool = False) -> list[Category]:
    q = db.session.query(Category)
    if not include_inactive:
        q = q.filter(Category.activo.is_(True))
    return q.order_by(Category.nombre.asc()).all()


def get_category(category_id: int) -> Category | None:
    return db.session.get(Category, category_id)


def _ensure_unique_name(nombre: str, exclude_id: int | None = None) -> None:
    q = db.session.query(Category.id).filter(Category.nombre == nombre)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise ConflictError(MSG_DUPLICATE_NAME)


def _commit_or_conflict() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(MSG_DUPLICATE_NAME)


def create_category(*, patch: dict) -> Category:
    _ensure_unique_name(patch["nombre"])

    c = Category(activo=True)
    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(c, k, v)

    db.session.add(c)
    _commit_or_conflict()
    return c


def update_category(*, category_id: int, patch: dict) -> Category | None:
    c = db.session.get(Category, category_id)
    if not c:
        return None

    if "nombre" in patch:
        _ensure_unique_name(patch["nombre"], exclude_id=c.id)

    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(c, k, v)

    _commit_or_conflict()
    return c


def delete_category(*, category_id: int) -> bool:
    """
    Delete per policy. A hard delete is refused while products still
    reference the category.
    """
    c = db.session.get(Category, category_id)
    if not c:
        return False

    if delete_mode("categoria") == HARD:
        in_use = db.session.query(Product.id).filter(Product.categoria_id == c.id).first()
        if in_use:
            raise ConflictError("No se puede eliminar una categoría con productos asociados")

    remove(c, "categoria")
    db.session.commit()
    return True
