# Overview: Flask API routes for digital content; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import digital_content_service as content_service
from ..models import DigitalContent
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_content,
    ValidationError,
)
from ..decorators import require_auth

CONTENT_POLICY = ModelValidationPolicy(
    writable_fields={"producto_id", "url", "titulo", "descripcion", "etiquetas", "tipo", "tamano"},
    required_on_create={"producto_id", "url", "titulo"},
)

content_bp = Blueprint("digital_content", __name__, url_prefix="/api/contenido-digital")


def _not_found():
    return jsonify({"success": False, "message": content_service.MSG_NOT_FOUND}), 404


@content_bp.get("")
def list_content():
    """Optional ?etiqueta= filters by tag (case-insensitive substring)."""
    tag = request.args.get("etiqueta")
    if tag is not None:
        try:
            return jsonify(content_service.search_by_tag(tag)), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
    return jsonify(content_service.list_content()), 200


@content_bp.get("/<int:content_id>")
def get_content(content_id: int):
    item = content_service.get_content(content_id)
    if not item:
        return _not_found()
    return jsonify(item), 200


@content_bp.get("/producto/<int:producto_id>")
def list_content_for_product(producto_id: int):
    return jsonify(content_service.list_content_for_product(producto_id)), 200


@content_bp.get("/etiqueta/<string:tag>")
def list_content_by_tag(tag: str):
    try:
        return jsonify(content_service.search_by_tag(tag)), 200
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@content_bp.post("")
@require_auth
def create_content_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=DigitalContent, payload=payload, policy=CONTENT_POLICY, partial=False)
        enforce_rules_content(patch)
        created = content_service.create_content(patch=patch)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(created), 201


@content_bp.put("/<int:content_id>")
@require_auth
def update_content_route(content_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=DigitalContent, payload=payload, policy=CONTENT_POLICY, partial=True)
        enforce_rules_content(patch)
        updated = content_service.update_content(content_id=content_id, patch=patch)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not updated:
        return _not_found()
    return jsonify(updated), 200


@content_bp.delete("/<int:content_id>")
@require_auth
def delete_content_route(content_id: int):
    if not content_service.delete_content(content_id=content_id):
        return _not_found()
    return jsonify({"success": True, "message": "Contenido eliminado"}), 200


@content_bp.post("/<int:content_id>/etiquetas")
@require_auth
def add_tag_route(content_id: int):
    """Body: {"etiqueta": "..."}"""
    payload = request.get_json(silent=True)
    tag = payload.get("etiqueta") if isinstance(payload, dict) else None
    if not isinstance(tag, str):
        return jsonify({"success": False, "message": "Etiqueta requerida"}), 400

    try:
        item = content_service.add_tag(content_id=content_id, tag=tag)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    if not item:
        return _not_found()
    return jsonify(item), 200


@content_bp.delete("/<int:content_id>/etiquetas/<string:tag>")
@require_auth
def remove_tag_route(content_id: int, tag: str):
    item = content_service.remove_tag(content_id=content_id, tag=tag)
    if not item:
        return _not_found()
    return jsonify(item), 200
