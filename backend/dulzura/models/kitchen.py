from __future__ import annotations

from ..extensions import db
from dulzura.time_utils import to_utc_z
from .common import as_float


class Ingredient(db.Model):
    """Ingredient catalog. Soft-deleted by default (activo=False)."""
    __tablename__ = "ingredientes"
    __table_args__ = (
        db.UniqueConstraint("nombre", name="uq_ingredientes_nombre"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(150), nullable=False)
    descripcion = db.Column(db.Text, nullable=True)
    unidad_medida = db.Column(db.String(16), nullable=False)
    costo_unitario = db.Column(db.Numeric(10, 2), nullable=True)
    activo = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "descripcion": self.descripcion,
            "unidad_medida": self.unidad_medida,
            "costo_unitario": as_float(self.costo_unitario),
            "activo": self.activo,
        }


class Recipe(db.Model):
    __tablename__ = "recetas"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(150), nullable=False)
    descripcion = db.Column(db.Text, nullable=True)
    instrucciones = db.Column(db.Text, nullable=True)
    tiempo_preparacion = db.Column(db.Integer, nullable=True)  # minutes
    porciones = db.Column(db.Integer, nullable=True)
    activo = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    ingredientes = db.relationship(
        "RecipeIngredient",
        back_populates="receta",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.id",
    )

    def to_dict(self, include_ingredients: bool = True) -> dict:
        data = {
            "id": self.id,
            "nombre": self.nombre,
            "descripcion": self.descripcion,
            "instrucciones": self.instrucciones,
            "tiempo_preparacion": self.tiempo_preparacion,
            "porciones": self.porciones,
            "activo": self.activo,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_ingredients:
            data["ingredientes"] = [line.to_dict() for line in self.ingredientes]
        return data


class RecipeIngredient(db.Model):
    """Link row: quantity of one ingredient in one recipe."""
    __tablename__ = "receta_ingrediente"
    __table_args__ = (
        db.UniqueConstraint("receta_id", "ingrediente_id", name="uq_receta_ingrediente"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    receta_id = db.Column(
        db.Integer, db.ForeignKey("recetas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingrediente_id = db.Column(db.Integer, db.ForeignKey("ingredientes.id"), nullable=False, index=True)
    cantidad = db.Column(db.Numeric(10, 3), nullable=False)
    unidad_medida = db.Column(db.String(16), nullable=False)
    notas = db.Column(db.Text, nullable=True)

    receta = db.relationship("Recipe", back_populates="ingredientes")
    ingrediente = db.relationship("Ingredient")

    def to_dict(self) -> dict:
        return {
            "ingrediente_id": self.ingrediente_id,
            "cantidad": as_float(self.cantidad),
            "unidad_medida": self.unidad_medida,
            "notas": self.notas,
            "ingrediente": self.ingrediente.to_dict() if self.ingrediente else None,
        }
