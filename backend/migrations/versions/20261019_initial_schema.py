"""Initial bakery schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("nombre", sa.String(length=120), nullable=False),
        sa.Column("rol", sa.String(length=16), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.Column("ultimo_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_usuarios_email"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("usuario_id", sa.Integer(), sa.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("token", name="uq_refresh_tokens_token"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_refresh_tokens_usuario_id", "refresh_tokens", ["usuario_id"])
    op.create_index("ix_refresh_tokens_expires_at", "refresh_tokens", ["expires_at"])

    op.create_table(
        "categorias",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nombre", sa.String(length=100), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("nombre", name="uq_categorias_nombre"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "productos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("categoria_id", sa.Integer(), sa.ForeignKey("categorias.id"), nullable=False),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("precio", sa.Numeric(10, 2), nullable=False),
        sa.Column("costo", sa.Numeric(10, 2), nullable=True),
        sa.Column("sku", sa.String(length=64), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("sku", name="uq_productos_sku"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_productos_categoria_id", "productos", ["categoria_id"])
    op.create_index("ix_productos_categoria_activo", "productos", ["categoria_id", "activo"])

    op.create_table(
        "fotos_productos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("producto_id", sa.Integer(), sa.ForeignKey("productos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("nombre_archivo", sa.String(length=255), nullable=False),
        sa.Column("ruta_relativa", sa.String(length=500), nullable=True),
        sa.Column("ruta_completa", sa.String(length=1000), nullable=True),
        sa.Column("url_publica", sa.String(length=1000), nullable=False),
        sa.Column("public_id", sa.String(length=500), nullable=True),
        sa.Column("tamano_bytes", sa.Integer(), nullable=False),
        sa.Column("mimetype", sa.String(length=100), nullable=False),
        sa.Column("ancho_px", sa.Integer(), nullable=True),
        sa.Column("alto_px", sa.Integer(), nullable=True),
        sa.Column("es_principal", sa.Boolean(), nullable=False),
        sa.Column("orden", sa.Integer(), nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_fotos_productos_producto_id", "fotos_productos", ["producto_id"])
    op.create_index("ix_fotos_productos_producto_orden", "fotos_productos", ["producto_id", "orden"])

    op.create_table(
        "ingredientes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("unidad_medida", sa.String(length=16), nullable=False),
        sa.Column("costo_unitario", sa.Numeric(10, 2), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("nombre", name="uq_ingredientes_nombre"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "recetas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("instrucciones", sa.Text(), nullable=True),
        sa.Column("tiempo_preparacion", sa.Integer(), nullable=True),
        sa.Column("porciones", sa.Integer(), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "receta_ingrediente",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("receta_id", sa.Integer(), sa.ForeignKey("recetas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("ingrediente_id", sa.Integer(), sa.ForeignKey("ingredientes.id"), nullable=False),
        sa.Column("cantidad", sa.Numeric(10, 3), nullable=False),
        sa.Column("unidad_medida", sa.String(length=16), nullable=False),
        sa.Column("notas", sa.Text(), nullable=True),
        sa.UniqueConstraint("receta_id", "ingrediente_id", name="uq_receta_ingrediente"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_receta_ingrediente_receta_id", "receta_ingrediente", ["receta_id"])
    op.create_index("ix_receta_ingrediente_ingrediente_id", "receta_ingrediente", ["ingrediente_id"])

    op.create_table(
        "ventas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("fecha_venta", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cliente", sa.String(length=150), nullable=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("descuento", sa.Numeric(10, 2), nullable=False),
        sa.Column("impuestos", sa.Numeric(10, 2), nullable=False),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("metodo_pago", sa.String(length=32), nullable=False),
        sa.Column("estado", sa.String(length=16), nullable=False),
        sa.Column("usuario_id", sa.Integer(), sa.ForeignKey("usuarios.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_ventas_estado", "ventas", ["estado"])
    op.create_index("ix_ventas_fecha_estado", "ventas", ["fecha_venta", "estado"])

    op.create_table(
        "venta_detalles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("venta_id", sa.Integer(), sa.ForeignKey("ventas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("producto_id", sa.Integer(), sa.ForeignKey("productos.id"), nullable=False),
        sa.Column("nombre", sa.String(length=150), nullable=False),
        sa.Column("cantidad", sa.Integer(), nullable=False),
        sa.Column("precio_unitario", sa.Numeric(10, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_venta_detalles_venta_id", "venta_detalles", ["venta_id"])
    op.create_index("ix_venta_detalles_producto_id", "venta_detalles", ["producto_id"])

    op.create_table(
        "contenido_digital",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("producto_id", sa.Integer(), sa.ForeignKey("productos.id"), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=False),
        sa.Column("titulo", sa.String(length=200), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("etiquetas", sa.JSON(), nullable=False),
        sa.Column("tipo", sa.String(length=16), nullable=False),
        sa.Column("tamano", sa.Integer(), nullable=True),
        sa.Column("fecha_subida", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_contenido_digital_producto_id", "contenido_digital", ["producto_id"])


def downgrade():
    op.drop_table("contenido_digital")
    op.drop_table("venta_detalles")
    op.drop_table("ventas")
    op.drop_table("receta_ingrediente")
    op.drop_table("recetas")
    op.drop_table("ingredientes")
    op.drop_table("fotos_productos")
    op.drop_table("productos")
    op.drop_table("categorias")
    op.drop_table("refresh_tokens")
    op.drop_table("usuarios")
