from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Integer, JSON, Numeric, String, Text, DateTime

from dulzura.errors import ValidationError, ConflictError  # noqa: F401  (re-exported for routes)
from dulzura.models.media import CONTENT_TYPES
from dulzura.time_utils import parse_iso_datetime


# Prices and costs are DECIMAL(10,2) in the schema
MAX_AMOUNT = Decimal("99999999.99")

INGREDIENT_UNITS = {"kg", "litros", "unidades", "gramos", "ml"}
PAYMENT_METHODS = {"efectivo", "tarjeta", "transferencia"}


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - ignored_fields: keys tolerated in payloads but dropped (e.g. nested lists handled elsewhere)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    ignored_fields: set[str] | None = None


def _columns_by_key(model) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_decimal(key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{key} debe ser un número")
    if isinstance(value, (int, Decimal)):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{key} debe ser un número")
    else:
        raise ValidationError(f"{key} debe ser un número")

    if not amount.is_finite():
        raise ValidationError(f"{key} debe ser un número")
    return amount


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or not stripped.lstrip("-").isdigit():
                raise ValidationError(f"{col.key} debe ser un entero")
            return int(stripped)
        raise ValidationError(f"{col.key} debe ser un entero")

    if isinstance(coltype, Numeric):
        return _coerce_decimal(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in {"true", "1", "si", "sí"}
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} debe ser una fecha ISO-8601")
            if dt is None:
                raise ValidationError(f"{col.key} debe ser una fecha ISO-8601")
            return dt
        raise ValidationError(f"{col.key} debe ser una fecha")

    if isinstance(coltype, JSON):
        return value

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Cuerpo JSON inválido")

    ignored = policy.ignored_fields or set()
    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Campos requeridos: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k in ignored:
            continue
        if k not in policy.writable_fields or k not in cols:
            raise ValidationError(f"Campo no permitido: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k in ignored:
            continue
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} no puede ser nulo")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} no puede estar vacío")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} excede el largo máximo {col.type.length}")

        patch[k] = val

    return patch


def _enforce_amount(patch: dict, key: str) -> None:
    if key in patch and patch[key] is not None:
        amount = patch[key]
        if amount < 0:
            raise ValidationError(f"{key} debe ser >= 0")
        if amount > MAX_AMOUNT:
            raise ValidationError(f"{key} no puede exceder {MAX_AMOUNT}")


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    _enforce_amount(patch, "precio")
    _enforce_amount(patch, "costo")


def enforce_rules_ingredient(patch: dict) -> None:
    if "unidad_medida" in patch and patch["unidad_medida"] not in INGREDIENT_UNITS:
        raise ValidationError(
            f"unidad_medida debe ser una de: {', '.join(sorted(INGREDIENT_UNITS))}"
        )
    _enforce_amount(patch, "costo_unitario")


def enforce_rules_recipe(patch: dict) -> None:
    for key in ("tiempo_preparacion", "porciones"):
        if patch.get(key) is not None and patch[key] <= 0:
            raise ValidationError(f"{key} debe ser > 0")


def validate_recipe_lines(raw: Any) -> list[dict]:
    """Normalize the `ingredientes` list of a recipe payload."""
    if not isinstance(raw, list):
        raise ValidationError("ingredientes debe ser una lista")

    lines: list[dict] = []
    seen: set[int] = set()
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Cada ingrediente debe ser un objeto")

        ingrediente_id = item.get("ingrediente_id")
        if isinstance(ingrediente_id, bool) or not isinstance(ingrediente_id, int):
            raise ValidationError("ingrediente_id debe ser un entero")
        if ingrediente_id in seen:
            raise ValidationError(f"Ingrediente repetido: {ingrediente_id}")
        seen.add(ingrediente_id)

        cantidad = _coerce_decimal("cantidad", item.get("cantidad"))
        if cantidad <= 0:
            raise ValidationError("cantidad debe ser > 0")

        unidad = item.get("unidad_medida")
        if unidad not in INGREDIENT_UNITS:
            raise ValidationError(
                f"unidad_medida debe ser una de: {', '.join(sorted(INGREDIENT_UNITS))}"
            )

        notas = item.get("notas")
        lines.append({
            "ingrediente_id": ingrediente_id,
            "cantidad": cantidad,
            "unidad_medida": unidad,
            "notas": str(notas).strip() if notas else None,
        })
    return lines


def validate_sale_lines(raw: Any) -> list[dict]:
    """Normalize the `productos` list of a sale payload."""
    if not isinstance(raw, list) or not raw:
        raise ValidationError("La venta debe incluir al menos un producto")

    lines: list[dict] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Cada producto debe ser un objeto")

        producto_id = item.get("producto_id")
        if isinstance(producto_id, bool) or not isinstance(producto_id, int):
            raise ValidationError("producto_id debe ser un entero")

        cantidad = item.get("cantidad")
        if isinstance(cantidad, bool) or not isinstance(cantidad, int) or cantidad <= 0:
            raise ValidationError("cantidad debe ser un entero > 0")

        precio = item.get("precio_unitario")
        if precio is not None:
            precio = _coerce_decimal("precio_unitario", precio)
            if precio < 0:
                raise ValidationError("precio_unitario debe ser >= 0")

        lines.append({"producto_id": producto_id, "cantidad": cantidad, "precio_unitario": precio})
    return lines


def enforce_rules_sale(patch: dict) -> None:
    _enforce_amount(patch, "descuento")
    _enforce_amount(patch, "impuestos")
    if "metodo_pago" in patch and patch["metodo_pago"] not in PAYMENT_METHODS:
        raise ValidationError(
            f"metodo_pago debe ser uno de: {', '.join(sorted(PAYMENT_METHODS))}"
        )


def normalize_tags(raw: Any) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise ValidationError("etiquetas debe ser una lista de textos")
    tags: list[str] = []
    for t in raw:
        t = t.strip()
        if t and t not in tags:
            tags.append(t)
    return tags


def enforce_rules_content(patch: dict) -> None:
    if "tipo" in patch and patch["tipo"] not in CONTENT_TYPES:
        raise ValidationError(f"tipo debe ser uno de: {', '.join(CONTENT_TYPES)}")
    if patch.get("tamano") is not None and patch["tamano"] < 0:
        raise ValidationError("tamano debe ser >= 0")
    if "etiquetas" in patch:
        patch["etiquetas"] = normalize_tags(patch["etiquetas"])
