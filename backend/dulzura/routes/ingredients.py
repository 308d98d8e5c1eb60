# Overview: Flask API routes for ingredients; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import ingredient_service
from ..models import Ingredient
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_ingredient,
    ValidationError,
    ConflictError,
)
from ..decorators import require_auth

INGREDIENT_POLICY = ModelValidationPolicy(
    writable_fields={"nombre", "descripcion", "unidad_medida", "costo_unitario"},
    required_on_create={"nombre", "unidad_medida"},
)

ingredients_bp = Blueprint("ingredients", __name__, url_prefix="/api/ingredientes")


def _not_found():
    return jsonify({"success": False, "message": "Ingrediente no encontrado"}), 404


@ingredients_bp.get("")
def list_ingredients():
    return jsonify([i.to_dict() for i in ingredient_service.list_ingredients()]), 200


@ingredients_bp.get("/<int:ingredient_id>")
def get_ingredient(ingredient_id: int):
    ing = ingredient_service.get_ingredient(ingredient_id)
    if not ing:
        return _not_found()
    return jsonify(ing.to_dict()), 200


@ingredients_bp.post("")
@require_auth
def create_ingredient_route():
    """Creates, or updates and reactivates an ingredient with the same name (200)."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Ingredient, payload=payload, policy=INGREDIENT_POLICY, partial=False)
        enforce_rules_ingredient(patch)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    ing, created = ingredient_service.create_ingredient(patch=patch)
    return jsonify(ing.to_dict()), 201 if created else 200


@ingredients_bp.put("/<int:ingredient_id>")
@require_auth
def update_ingredient_route(ingredient_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Ingredient, payload=payload, policy=INGREDIENT_POLICY, partial=True)
        enforce_rules_ingredient(patch)
        updated = ingredient_service.update_ingredient(ingredient_id=ingredient_id, patch=patch)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not updated:
        return _not_found()
    return jsonify(updated.to_dict()), 200


@ingredients_bp.delete("/<int:ingredient_id>")
@require_auth
def delete_ingredient_route(ingredient_id: int):
    try:
        deleted = ingredient_service.delete_ingredient(ingredient_id=ingredient_id)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409

    if not deleted:
        return _not_found()
    return jsonify({"success": True, "message": "Ingrediente eliminado"}), 200
