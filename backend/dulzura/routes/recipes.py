# Overview: Flask API routes for recipes; parses input and returns JSON responses.

"""
Recipe routes.

Payloads carry the ingredient list inline:
    {"nombre": "...", "ingredientes": [{"ingrediente_id": 1, "cantidad": 0.5, "unidad_medida": "kg"}]}
On update, omitting "ingredientes" keeps the current list.
"""
from flask import Blueprint, request, jsonify

from ..services import recipe_service
from ..models import Recipe
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    validate_recipe_lines,
    enforce_rules_recipe,
    ValidationError,
)
from ..decorators import require_auth

RECIPE_POLICY = ModelValidationPolicy(
    writable_fields={"nombre", "descripcion", "instrucciones", "tiempo_preparacion", "porciones", "activo"},
    required_on_create={"nombre"},
    ignored_fields={"ingredientes"},
)

recipes_bp = Blueprint("recipes", __name__, url_prefix="/api/recetas")


def _not_found():
    return jsonify({"success": False, "message": "Receta no encontrada"}), 404


def _parse(payload: dict, partial: bool) -> tuple[dict, list[dict] | None]:
    patch = validate_payload(model=Recipe, payload=payload, policy=RECIPE_POLICY, partial=partial)
    enforce_rules_recipe(patch)
    lines = None
    if "ingredientes" in payload:
        lines = validate_recipe_lines(payload["ingredientes"])
    return patch, lines


@recipes_bp.get("")
def list_recipes():
    return jsonify([r.to_dict() for r in recipe_service.list_recipes()]), 200


@recipes_bp.get("/<int:recipe_id>")
def get_recipe(recipe_id: int):
    recipe = recipe_service.get_recipe(recipe_id)
    if not recipe:
        return _not_found()
    return jsonify(recipe.to_dict()), 200


@recipes_bp.post("")
@require_auth
def create_recipe_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch, lines = _parse(payload, partial=False)
        created = recipe_service.create_recipe(patch=patch, lines=lines)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(created.to_dict()), 201


@recipes_bp.put("/<int:recipe_id>")
@require_auth
def update_recipe_route(recipe_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch, lines = _parse(payload, partial=True)
        updated = recipe_service.update_recipe(recipe_id=recipe_id, patch=patch, lines=lines)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not updated:
        return _not_found()
    return jsonify(updated.to_dict()), 200


@recipes_bp.delete("/<int:recipe_id>")
@require_auth
def delete_recipe_route(recipe_id: int):
    if not recipe_service.delete_recipe(recipe_id=recipe_id):
        return _not_found()
    return jsonify({"success": True, "message": "Receta eliminada"}), 200
