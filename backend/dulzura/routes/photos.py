# Overview: Flask API routes for product photos; parses multipart input and returns JSON responses.

"""
Photo gallery routes.

Upload is multipart/form-data:
- foto: the file (jpeg/png/webp/gif, max 5 MiB)
- producto_id: target product
- es_principal: "true"/"1" to make it the product's principal photo

Reads are public; every write and the statistics endpoint need an admin token.
"""
from flask import Blueprint, request, jsonify

from ..errors import AppError
from ..services.photo_service import get_photo_service
from ..services.photo_storage import UploadedPhoto
from ..decorators import require_auth, require_admin

photos_bp = Blueprint("photos", __name__, url_prefix="/api/fotos")


def _fail(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


@photos_bp.post("/upload")
@require_auth
@require_admin
def upload_photo():
    file = request.files.get("foto")
    if file is None or not file.filename:
        return _fail("No se proporcionó ningún archivo", 400)

    raw_product_id = (request.form.get("producto_id") or "").strip()
    if not raw_product_id:
        return _fail("Falta el ID del producto", 400)
    if not raw_product_id.isdigit():
        return _fail("producto_id debe ser un entero", 400)

    es_principal = request.form.get("es_principal") in ("true", "1")
    photo = UploadedPhoto(
        filename=file.filename,
        content_type=file.mimetype,
        data=file.read(),
    )

    try:
        row = get_photo_service().upload(int(raw_product_id), photo, es_principal=es_principal)
    except AppError as e:
        return _fail(e.message, e.status_code)

    return jsonify({
        "success": True,
        "message": "Foto subida correctamente",
        "data": row.to_dict(),
    }), 200


@photos_bp.get("/producto/<int:producto_id>")
def list_product_photos(producto_id: int):
    photos = get_photo_service().list_for_product(producto_id)
    return jsonify([p.to_dict() for p in photos]), 200


@photos_bp.get("/producto/<int:producto_id>/principal")
def get_principal_photo(producto_id: int):
    photo = get_photo_service().get_principal(producto_id)
    if not photo:
        return _fail("No se encontró foto principal", 404)
    return jsonify(photo.to_dict()), 200


@photos_bp.get("/<int:photo_id>")
def get_photo(photo_id: int):
    try:
        photo = get_photo_service().get_photo(photo_id)
    except AppError as e:
        return _fail(e.message, e.status_code)
    return jsonify(photo.to_dict()), 200


@photos_bp.put("/<int:photo_id>/principal")
@require_auth
@require_admin
def set_principal_photo(photo_id: int):
    try:
        get_photo_service().set_principal(photo_id)
    except AppError as e:
        return _fail(e.message, e.status_code)
    return jsonify({"success": True, "message": "Foto principal actualizada"}), 200


@photos_bp.delete("/<int:photo_id>")
@require_auth
@require_admin
def delete_photo(photo_id: int):
    try:
        get_photo_service().delete(photo_id)
    except AppError as e:
        return _fail(e.message, e.status_code)
    return jsonify({"success": True, "message": "Foto eliminada correctamente"}), 200


@photos_bp.put("/producto/<int:producto_id>/reordenar")
@require_auth
@require_admin
def reorder_photos(producto_id: int):
    """Body: {"orden": [photo_id, ...]} (first id gets orden 1)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _fail("Parámetros inválidos", 400)
    try:
        photos = get_photo_service().reorder(producto_id, payload.get("orden"))
    except AppError as e:
        return _fail(e.message, e.status_code)
    return jsonify({
        "success": True,
        "message": "Orden actualizado",
        "data": [p.to_dict() for p in photos],
    }), 200


@photos_bp.get("/estadisticas")
@require_auth
@require_admin
def photo_statistics():
    return jsonify(get_photo_service().statistics()), 200


@photos_bp.post("/limpiar-huerfanos")
@require_auth
@require_admin
def prune_orphans():
    try:
        result = get_photo_service().prune_orphans()
    except AppError as e:
        return _fail(e.message, e.status_code, eliminados=0)

    return jsonify(result), 200
