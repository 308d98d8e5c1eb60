from __future__ import annotations

from ..extensions import db
from dulzura.time_utils import to_utc_z
from .common import as_float


class Category(db.Model):
    __tablename__ = "categorias"
    __table_args__ = (
        db.UniqueConstraint("nombre", name="uq_categorias_nombre"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(100), nullable=False)
    descripcion = db.Column(db.Text, nullable=True)
    activo = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "descripcion": self.descripcion,
            "activo": self.activo,
        }


class Product(db.Model):
    """
    Product master data.

    SKU is optional but unique when present.
    """
    __tablename__ = "productos"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_productos_sku"),
        db.Index("ix_productos_categoria_activo", "categoria_id", "activo"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    categoria_id = db.Column(db.Integer, db.ForeignKey("categorias.id"), nullable=False, index=True)
    nombre = db.Column(db.String(150), nullable=False)
    descripcion = db.Column(db.Text, nullable=True)
    precio = db.Column(db.Numeric(10, 2), nullable=False)
    costo = db.Column(db.Numeric(10, 2), nullable=True)
    sku = db.Column(db.String(64), nullable=True)
    activo = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    categoria = db.relationship("Category", backref=db.backref("productos", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} nombre={self.nombre!r} categoria_id={self.categoria_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "categoria_id": self.categoria_id,
            "nombre": self.nombre,
            "descripcion": self.descripcion,
            "precio": as_float(self.precio),
            "costo": as_float(self.costo),
            "sku": self.sku,
            "activo": self.activo,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Photo(db.Model):
    """
    Product gallery photo.

    Storage locator is either a local path (ruta_relativa/ruta_completa) or a
    remote object key (public_id); url_publica is always set.
    At most one row per producto_id has es_principal = True.
    """
    __tablename__ = "fotos_productos"
    __table_args__ = (
        db.Index("ix_fotos_productos_producto_orden", "producto_id", "orden"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    producto_id = db.Column(
        db.Integer, db.ForeignKey("productos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nombre_archivo = db.Column(db.String(255), nullable=False)
    ruta_relativa = db.Column(db.String(500), nullable=True)
    ruta_completa = db.Column(db.String(1000), nullable=True)
    url_publica = db.Column(db.String(1000), nullable=False)
    public_id = db.Column(db.String(500), nullable=True)
    tamano_bytes = db.Column(db.Integer, nullable=False)
    mimetype = db.Column(db.String(100), nullable=False)
    ancho_px = db.Column(db.Integer, nullable=True)
    alto_px = db.Column(db.Integer, nullable=True)
    es_principal = db.Column(db.Boolean, nullable=False, default=False)
    orden = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    producto = db.relationship("Product", backref=db.backref("fotos", lazy=True, passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "producto_id": self.producto_id,
            "nombre_archivo": self.nombre_archivo,
            "ruta_relativa": self.ruta_relativa,
            "ruta_completa": self.ruta_completa,
            "url_publica": self.url_publica,
            "public_id": self.public_id,
            "tamano_bytes": self.tamano_bytes,
            "mimetype": self.mimetype,
            "ancho_px": self.ancho_px,
            "alto_px": self.alto_px,
            "es_principal": self.es_principal,
            "orden": self.orden,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
