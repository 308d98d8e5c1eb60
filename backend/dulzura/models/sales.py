from __future__ import annotations

from ..extensions import db
from dulzura.time_utils import to_utc_z
from .common import as_float

SALE_COMPLETED = "completada"
SALE_CANCELLED = "cancelada"


class Sale(db.Model):
    """
    Sale header. Totals are computed server-side from the line items:
    total = subtotal - descuento + impuestos.
    """
    __tablename__ = "ventas"
    __table_args__ = (
        db.Index("ix_ventas_fecha_estado", "fecha_venta", "estado"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    fecha_venta = db.Column(db.DateTime(timezone=True), nullable=False)
    cliente = db.Column(db.String(150), nullable=True)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    descuento = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    impuestos = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    metodo_pago = db.Column(db.String(32), nullable=False, default="efectivo")
    estado = db.Column(db.String(16), nullable=False, default=SALE_COMPLETED, index=True)

    # User attribution
    usuario_id = db.Column(db.Integer, db.ForeignKey("usuarios.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    productos = db.relationship(
        "SaleLineItem",
        back_populates="venta",
        cascade="all, delete-orphan",
        order_by="SaleLineItem.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fecha_venta": to_utc_z(self.fecha_venta),
            "cliente": self.cliente,
            "subtotal": as_float(self.subtotal),
            "descuento": as_float(self.descuento),
            "impuestos": as_float(self.impuestos),
            "total": as_float(self.total),
            "metodo_pago": self.metodo_pago,
            "estado": self.estado,
            "usuario_id": self.usuario_id,
            "productos": [line.to_dict() for line in self.productos],
        }


class SaleLineItem(db.Model):
    """Individual line items on a sale. Name and unit price are snapshots."""
    __tablename__ = "venta_detalles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    venta_id = db.Column(
        db.Integer, db.ForeignKey("ventas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    producto_id = db.Column(db.Integer, db.ForeignKey("productos.id"), nullable=False, index=True)
    nombre = db.Column(db.String(150), nullable=False)
    cantidad = db.Column(db.Integer, nullable=False)
    precio_unitario = db.Column(db.Numeric(10, 2), nullable=False)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)

    venta = db.relationship("Sale", back_populates="productos")

    def to_dict(self) -> dict:
        return {
            "producto_id": self.producto_id,
            "nombre": self.nombre,
            "cantidad": self.cantidad,
            "precio_unitario": as_float(self.precio_unitario),
            "subtotal": as_float(self.subtotal),
        }
