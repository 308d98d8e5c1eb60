# Overview: Flask API routes for products; parses input and returns JSON responses.

"""
Product routes.

Public reads list active products only. `?admin=true` lists every product
and requires an admin token. Writes require an admin token.
"""
from flask import Blueprint, request, jsonify

from ..services import product_service
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)
from ..decorators import optional_auth, require_auth, require_admin, current_user_is_admin

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"categoria_id", "nombre", "descripcion", "precio", "costo", "sku", "activo"},
    required_on_create={"nombre", "categoria_id", "precio"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/productos")


def _not_found():
    return jsonify({"success": False, "message": "Producto no encontrado"}), 404


@products_bp.get("")
@optional_auth
def list_products():
    """
    Query params:
    - admin: "true" to include inactive products (admin token required)
    """
    include_inactive = request.args.get("admin") == "true"
    if include_inactive and not current_user_is_admin():
        return jsonify({
            "success": False,
            "message": "Acceso denegado. Se requiere rol de administrador",
        }), 403

    items = product_service.list_products(include_inactive=include_inactive)
    return jsonify([p.to_dict() for p in items]), 200


@products_bp.get("/categoria/<int:categoria_id>")
def list_products_by_category(categoria_id: int):
    items = product_service.list_products(categoria_id=categoria_id)
    return jsonify([p.to_dict() for p in items]), 200


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    p = product_service.get_product(product_id)
    if not p:
        return _not_found()
    return jsonify(p.to_dict()), 200


@products_bp.post("")
@require_auth
@require_admin
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        created = product_service.create_product(patch=patch)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(created.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_admin
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        updated = product_service.update_product(product_id=product_id, patch=patch)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not updated:
        return _not_found()
    return jsonify(updated.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_admin
def delete_product_route(product_id: int):
    try:
        deleted = product_service.delete_product(product_id=product_id)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409

    if not deleted:
        return _not_found()
    return jsonify({"success": True, "message": "Producto eliminado"}), 200
