# Overview: Service-layer operations for sales; encapsulates business logic and database work.

"""
Sales Service

Totals are always computed server-side:
- line subtotal = cantidad * precio_unitario (unit price defaults to the product price)
- subtotal = sum of line subtotals
- total = subtotal - descuento + impuestos

Line items snapshot the product name and unit price so later catalog edits do
not rewrite history. Cancelling a sale keeps the row (estado = cancelada) and
drops it from period totals.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Product, Sale, SaleLineItem, SALE_CANCELLED, SALE_COMPLETED
from ..validation import ConflictError, ValidationError
from dulzura.time_utils import day_bounds, utcnow

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _build_lines(lines: list[dict]) -> list[SaleLineItem]:
    ids = {line["producto_id"] for line in lines}
    products = {
        p.id: p for p in db.session.query(Product).filter(Product.id.in_(ids)).all()
    }

    missing = sorted(ids - products.keys())
    if missing:
        raise ValidationError(f"Productos inexistentes: {', '.join(str(i) for i in missing)}")

    items: list[SaleLineItem] = []
    for line in lines:
        product = products[line["producto_id"]]
        if not product.activo:
            raise ValidationError(f"Producto inactivo: {product.nombre}")

        unit_price = line["precio_unitario"]
        if unit_price is None:
            unit_price = product.precio
        unit_price = _money(unit_price)

        items.append(SaleLineItem(
            producto_id=product.id,
            nombre=product.nombre,
            cantidad=line["cantidad"],
            precio_unitario=unit_price,
            subtotal=_money(unit_price * line["cantidad"]),
        ))
    return items


def record_sale(*, patch: dict, lines: list[dict], usuario_id: int | None = None) -> Sale:
    """
    Persist a completed sale with its line items in one transaction.

    Raises:
        ValidationError: unknown/inactive products, or a negative total
    """
    items = _build_lines(lines)

    subtotal = _money(sum((i.subtotal for i in items), Decimal("0")))
    descuento = _money(patch.get("descuento") or 0)
    impuestos = _money(patch.get("impuestos") or 0)
    total = subtotal - descuento + impuestos
    if total < 0:
        raise ValidationError("El descuento no puede superar el subtotal más impuestos")

    sale = Sale(
        fecha_venta=patch.get("fecha_venta") or utcnow(),
        cliente=patch.get("cliente") or None,
        subtotal=subtotal,
        descuento=descuento,
        impuestos=impuestos,
        total=total,
        metodo_pago=patch.get("metodo_pago") or "efectivo",
        estado=SALE_COMPLETED,
        usuario_id=usuario_id,
    )
    sale.productos.extend(items)

    db.session.add(sale)
    db.session.commit()
    return sale


def _in_range(q, start: date | None, end: date | None):
    lower, upper = day_bounds(start, end)
    if lower is not None:
        q = q.filter(Sale.fecha_venta >= lower)
    if upper is not None:
        q = q.filter(Sale.fecha_venta < upper)
    return q


def list_sales(*, start: date | None = None, end: date | None = None, estado: str | None = None) -> list[Sale]:
    q = db.session.query(Sale).options(selectinload(Sale.productos))
    q = _in_range(q, start, end)
    if estado:
        q = q.filter(Sale.estado == estado)
    return q.order_by(Sale.fecha_venta.desc(), Sale.id.desc()).all()


def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def period_total(*, start: date | None = None, end: date | None = None) -> dict:
    """Sum of completed sales in an inclusive date range."""
    q = db.session.query(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.total), 0),
    ).filter(Sale.estado == SALE_COMPLETED)
    count, total = _in_range(q, start, end).one()

    return {
        "desde": start.isoformat() if start else None,
        "hasta": end.isoformat() if end else None,
        "cantidad_ventas": int(count or 0),
        "total": float(_money(Decimal(str(total or 0)))),
    }


def cancel_sale(*, sale_id: int) -> Sale | None:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        return None
    if sale.estado == SALE_CANCELLED:
        raise ConflictError("La venta ya está cancelada")

    sale.estado = SALE_CANCELLED
    db.session.commit()
    return sale
