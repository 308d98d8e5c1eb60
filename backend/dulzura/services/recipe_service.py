# Overview: Service-layer operations for recipes; encapsulates business logic and database work.

"""
Recipes Service

A recipe and its ingredient links are written in one transaction: the
parent row is inserted/updated, all existing receta_ingrediente rows are
deleted and the new list is inserted. Any failure rolls back everything.
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Ingredient, Recipe, RecipeIngredient
from ..validation import ValidationError
from .deletion_policy import remove

RECIPE_MUTABLE_FIELDS = {"nombre", "descripcion", "instrucciones", "tiempo_preparacion", "porciones", "activo"}


def _with_ingredients(q):
    return q.options(selectinload(Recipe.ingredientes).selectinload(RecipeIngredient.ingrediente))


def list_recipes() -> list[Recipe]:
    return (
        _with_ingredients(db.session.query(Recipe))
        .filter(Recipe.activo.is_(True))
        .order_by(Recipe.nombre.asc())
        .all()
    )


def get_recipe(recipe_id: int) -> Recipe | None:
    """Active recipes only; a soft-deleted recipe reads as missing."""
    return (
        _with_ingredients(db.session.query(Recipe))
        .filter(Recipe.id == recipe_id, Recipe.activo.is_(True))
        .first()
    )


def _replace_ingredients(recipe: Recipe, lines: list[dict]) -> None:
    ids = {line["ingrediente_id"] for line in lines}
    if ids:
        found = {
            i for (i,) in db.session.query(Ingredient.id).filter(
                Ingredient.id.in_(ids), Ingredient.activo.is_(True)
            )
        }
        missing = sorted(ids - found)
        if missing:
            raise ValidationError(f"Ingredientes inexistentes: {', '.join(str(i) for i in missing)}")

    # Delete-all-then-insert; flush so the unique (receta_id, ingrediente_id) pair is free again
    recipe.ingredientes.clear()
    db.session.flush()
    for line in lines:
        recipe.ingredientes.append(RecipeIngredient(**line))


def create_recipe(*, patch: dict, lines: list[dict] | None) -> Recipe:
    recipe = Recipe(activo=True)
    for k, v in patch.items():
        if k in RECIPE_MUTABLE_FIELDS:
            setattr(recipe, k, v)

    try:
        db.session.add(recipe)
        db.session.flush()
        _replace_ingredients(recipe, lines or [])
        db.session.commit()
    except (SQLAlchemyError, ValidationError):
        db.session.rollback()
        raise
    return recipe


def update_recipe(*, recipe_id: int, patch: dict, lines: list[dict] | None) -> Recipe | None:
    """
    Patch the recipe. lines=None leaves the ingredient links untouched; a list
    (even empty) replaces them.
    """
    recipe = get_recipe(recipe_id)
    if not recipe:
        return None

    try:
        for k, v in patch.items():
            if k in RECIPE_MUTABLE_FIELDS:
                setattr(recipe, k, v)
        if lines is not None:
            _replace_ingredients(recipe, lines)
        db.session.commit()
    except (SQLAlchemyError, ValidationError):
        db.session.rollback()
        raise
    return recipe


def delete_recipe(*, recipe_id: int) -> bool:
    recipe = get_recipe(recipe_id)
    if not recipe:
        return False
    remove(recipe, "receta")
    db.session.commit()
    return True
