# Overview: Flask API routes for categories; parses input and returns JSON responses.

"""
Category routes.

Reads are public (active categories only; admins may pass ?admin=true to see
inactive ones too). Writes require an admin token.
"""
from flask import Blueprint, request, jsonify

from ..services import category_service
from ..models import Category
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    ConflictError,
)
from ..decorators import optional_auth, require_auth, require_admin, current_user_is_admin

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"nombre", "descripcion", "activo"},
    required_on_create={"nombre"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categorias")


def _not_found():
    return jsonify({"success": False, "message": "Categoría no encontrada"}), 404


@categories_bp.get("")
@optional_auth
def list_categories():
    include_inactive = request.args.get("admin") == "true" and current_user_is_admin()
    items = category_service.list_categories(include_inactive=include_inactive)
    return jsonify([c.to_dict() for c in items]), 200


@categories_bp.get("/<int:category_id>")
def get_category(category_id: int):
    c = category_service.get_category(category_id)
    if not c:
        return _not_found()
    return jsonify(c.to_dict()), 200


@categories_bp.post("")
@require_auth
@require_admin
def create_category_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        created = category_service.create_category(patch=patch)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(created.to_dict()), 201


@categories_bp.put("/<int:category_id>")
@require_auth
@require_admin
def update_category_route(category_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
        updated = category_service.update_category(category_id=category_id, patch=patch)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not updated:
        return _not_found()
    return jsonify(updated.to_dict()), 200


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_admin
def delete_category_route(category_id: int):
    try:
        deleted = category_service.delete_category(category_id=category_id)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409

    if not deleted:
        return _not_found()
    return jsonify({"success": True, "message": "Categoría eliminada"}), 200
