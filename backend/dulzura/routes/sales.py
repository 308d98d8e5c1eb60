# Overview: Flask API routes for sales; parses input and returns JSON responses.

"""
Sales routes. Every endpoint requires a bearer token; cancelling needs admin.

POST body:
    {"cliente": "...", "metodo_pago": "efectivo", "descuento": 0, "impuestos": 0,
     "productos": [{"producto_id": 1, "cantidad": 2, "precio_unitario": 3.5}]}
Totals are computed server-side.

Date filters (?desde=YYYY-MM-DD&hasta=YYYY-MM-DD) are inclusive.
"""
from flask import Blueprint, request, jsonify, g

from ..services import sale_service
from ..models import Sale
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    validate_sale_lines,
    enforce_rules_sale,
    ValidationError,
    ConflictError,
)
from ..decorators import require_auth, require_admin
from dulzura.time_utils import parse_iso_date

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"fecha_venta", "cliente", "descuento", "impuestos", "metodo_pago"},
    ignored_fields={"productos"},
)

sales_bp = Blueprint("sales", __name__, url_prefix="/api/ventas")


def _not_found():
    return jsonify({"success": False, "message": "Venta no encontrada"}), 404


def _date_range():
    try:
        start = parse_iso_date(request.args.get("desde"))
        end = parse_iso_date(request.args.get("hasta"))
    except ValueError:
        raise ValidationError("Fecha inválida, use YYYY-MM-DD")
    if start and end and start > end:
        raise ValidationError("'desde' no puede ser posterior a 'hasta'")
    return start, end


@sales_bp.get("")
@require_auth
def list_sales():
    try:
        start, end = _date_range()
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    items = sale_service.list_sales(start=start, end=end, estado=request.args.get("estado"))
    return jsonify([s.to_dict() for s in items]), 200


@sales_bp.get("/resumen")
@require_auth
def sales_summary():
    """Number of completed sales and their total within the date range."""
    try:
        start, end = _date_range()
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(sale_service.period_total(start=start, end=end)), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale(sale_id: int):
    sale = sale_service.get_sale(sale_id)
    if not sale:
        return _not_found()
    return jsonify(sale.to_dict()), 200


@sales_bp.post("")
@require_auth
def create_sale_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY, partial=False)
        enforce_rules_sale(patch)
        lines = validate_sale_lines(payload.get("productos"))
        sale = sale_service.record_sale(patch=patch, lines=lines, usuario_id=g.current_user.user_id)
    except ValidationError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(sale.to_dict()), 201


@sales_bp.post("/<int:sale_id>/cancelar")
@require_auth
@require_admin
def cancel_sale_route(sale_id: int):
    try:
        sale = sale_service.cancel_sale(sale_id=sale_id)
    except ConflictError as e:
        return jsonify({"success": False, "message": str(e)}), 409

    if not sale:
        return _not_found()
    return jsonify(sale.to_dict()), 200
