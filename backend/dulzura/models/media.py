from __future__ import annotations

from ..extensions import db
from dulzura.time_utils import to_utc_z

CONTENT_TYPES = ("imagen", "video")


class DigitalContent(db.Model):
    """Tagged image/video metadata attached to a product (URL only, no bytes)."""
    __tablename__ = "contenido_digital"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    producto_id = db.Column(db.Integer, db.ForeignKey("productos.id"), nullable=False, index=True)
    url = db.Column(db.String(1000), nullable=False)
    titulo = db.Column(db.String(200), nullable=False)
    descripcion = db.Column(db.Text, nullable=True)
    etiquetas = db.Column(db.JSON, nullable=False, default=list)
    tipo = db.Column(db.String(16), nullable=False, default="imagen")
    tamano = db.Column(db.Integer, nullable=True)
    fecha_subida = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "producto_id": self.producto_id,
            "url": self.url,
            "titulo": self.titulo,
            "descripcion": self.descripcion,
            "etiquetas": list(self.etiquetas or []),
            "tipo": self.tipo,
            "tamano": self.tamano,
            "fecha_subida": to_utc_z(self.fecha_subida),
        }
