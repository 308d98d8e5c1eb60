# Overview: Service-layer operations for ingredients; encapsulates business logic and database work.

"""
Ingredients Service

Only active ingredients are visible. Creating an ingredient whose name already
exists (active or not) updates and reactivates that row instead of failing,
which is how a soft-deleted ingredient comes back.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Ingredient, RecipeIngredient
from ..validation import ConflictError
from .deletion_policy import HARD, delete_mode, remove

INGREDIENT_MUTABLE_FIELDS = {"nombre", "descripcion", "unidad_medida", "costo_unitario"}


def list_ingredients() -> list[Ingredient]:
    return (
        db.session.query(Ingredient)
        .filter(Ingredient.activo.is_(True))
        .order_by(Ingredient.nombre.asc())
        .all()
    )


def get_ingredient(ingredient_id: int) -> Ingredient | None:
    return (
        db.session.query(Ingredient)
        .filter(Ingredient.id == ingredient_id, Ingredient.activo.is_(True))
        .first()
    )


def create_ingredient(*, patch: dict) -> tuple[Ingredient, bool]:
    """
    Upsert by name.

    Returns (ingredient, created). created is False when an existing row
    (possibly inactive) was updated and reactivated.
    """
    existing = db.session.query(Ingredient).filter(Ingredient.nombre == patch["nombre"]).first()
    if existing:
        for k, v in patch.items():
            if k in INGREDIENT_MUTABLE_FIELDS:
                setattr(existing, k, v)
        existing.activo = True
        db.session.commit()
        return existing, False

    ing = Ingredient(activo=True)
    for k, v in patch.items():
        if k in INGREDIENT_MUTABLE_FIELDS:
            setattr(ing, k, v)
    db.session.add(ing)
    db.session.commit()
    return ing, True


def update_ingredient(*, ingredient_id: int, patch: dict) -> Ingredient | None:
    ing = get_ingredient(ingredient_id)
    if not ing:
        return None

    if "nombre" in patch:
        clash = (
            db.session.query(Ingredient.id)
            .filter(Ingredient.nombre == patch["nombre"], Ingredient.id != ing.id)
            .first()
        )
        if clash:
            raise ConflictError("Ya existe un ingrediente con ese nombre")

    for k, v in patch.items():
        if k in INGREDIENT_MUTABLE_FIELDS:
            setattr(ing, k, v)
    db.session.commit()
    return ing


def delete_ingredient(*, ingredient_id: int) -> bool:
    ing = get_ingredient(ingredient_id)
    if not ing:
        return False

    if delete_mode("ingrediente") == HARD:
        used = (
            db.session.query(RecipeIngredient.id)
            .filter(RecipeIngredient.ingrediente_id == ing.id)
            .first()
        )
        if used:
            raise ConflictError("El ingrediente se usa en una o más recetas")

    remove(ing, "ingrediente")
    db.session.commit()
    return True
