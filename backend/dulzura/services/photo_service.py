# Overview: Service-layer operations for product photos; encapsulates business logic and database work.

"""
Photo Service

Manages the per-product gallery on top of a PhotoStorage backend:
- validation (MIME allow-list, 5 MiB ceiling) before any I/O
- upload: store bytes, insert row at the next order index
- principal flag: at most one photo per product. Changed with a single
  conditional UPDATE (es_principal = (id = :target)) in the same transaction
  as any insert, so readers never observe zero-or-two principals.
- reorder / delete / statistics / orphan pruning (local storage only)
"""

from __future__ import annotations

import io

from flask import current_app
from PIL import Image, UnidentifiedImageError
from sqlalchemy import case, func, update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import InternalError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Photo, Product
from .photo_storage import PhotoStorage, UploadedPhoto


class UnsupportedPhotoType(ValidationError):
    pass


class PhotoTooLarge(ValidationError):
    pass


class ProductNotFound(NotFoundError):
    def __init__(self, message: str = "Producto no encontrado"):
        super().__init__(message)


class PhotoNotFound(NotFoundError):
    def __init__(self, message: str = "Foto no encontrada"):
        super().__init__(message)


class PruningNotSupported(ValidationError):
    pass


def read_dimensions(data: bytes) -> tuple[int | None, int | None]:
    """Width/height in pixels, or (None, None) when the bytes do not decode."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError, ValueError):
        return None, None


class PhotoService:
    ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
    MAX_BYTES = 5 * 1024 * 1024

    def __init__(self, storage: PhotoStorage):
        self.storage = storage

    # ---- validation ----

    def validate(self, photo: UploadedPhoto) -> None:
        if photo.content_type not in self.ALLOWED_TYPES:
            raise UnsupportedPhotoType(f"Tipo no permitido: {photo.content_type}")
        if photo.size > self.MAX_BYTES:
            raise PhotoTooLarge(f"Máximo {self.MAX_BYTES // (1024 * 1024)}MB")
        if photo.size == 0:
            raise ValidationError("El archivo está vacío")

    # ---- reads ----

    def list_for_product(self, producto_id: int) -> list[Photo]:
        return (
            db.session.query(Photo)
            .filter(Photo.producto_id == producto_id)
            .order_by(Photo.orden.asc(), Photo.id.asc())
            .all()
        )

    def get_photo(self, photo_id: int) -> Photo:
        photo = db.session.get(Photo, photo_id)
        if not photo:
            raise PhotoNotFound()
        return photo

    def get_principal(self, producto_id: int) -> Photo | None:
        return (
            db.session.query(Photo)
            .filter(Photo.producto_id == producto_id, Photo.es_principal.is_(True))
            .first()
        )

    # ---- writes ----

    def _next_order(self, producto_id: int) -> int:
        current_max = (
            db.session.query(func.max(Photo.orden))
            .filter(Photo.producto_id == producto_id)
            .scalar()
        )
        return (current_max or 0) + 1

    def _mark_principal(self, producto_id: int, photo_id: int) -> None:
        db.session.execute(
            update(Photo)
            .where(Photo.producto_id == producto_id)
            .values(es_principal=case((Photo.id == photo_id, True), else_=False))
            .execution_options(synchronize_session=False)
        )

    def upload(self, producto_id: int, photo: UploadedPhoto, es_principal: bool = False) -> Photo:
        """
        Validate, store and register a photo.

        If the database write fails the stored asset is removed again and
        InternalError is raised.
        """
        self.validate(photo)

        if db.session.get(Product, producto_id) is None:
            raise ProductNotFound()

        stored = self.storage.save(photo)
        ancho, alto = read_dimensions(photo.data)

        try:
            row = Photo(
                producto_id=producto_id,
                nombre_archivo=photo.filename or "foto",
                ruta_relativa=stored.ruta_relativa,
                ruta_completa=stored.ruta_completa,
                url_publica=stored.url_publica,
                public_id=stored.public_id,
                tamano_bytes=photo.size,
                mimetype=photo.content_type,
                ancho_px=ancho,
                alto_px=alto,
                es_principal=False,
                orden=self._next_order(producto_id),
            )
            db.session.add(row)
            db.session.flush()

            if es_principal:
                self._mark_principal(producto_id, row.id)

            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.storage.delete(ruta_completa=stored.ruta_completa, public_id=stored.public_id)
            current_app.logger.exception("Could not register photo for product %s", producto_id)
            raise InternalError("No se pudo registrar la foto") from exc

        current_app.logger.info("Photo %s uploaded for product %s", row.id, producto_id)
        return row

    def set_principal(self, photo_id: int) -> Photo:
        photo = self.get_photo(photo_id)
        self._mark_principal(photo.producto_id, photo.id)
        db.session.commit()
        return photo

    def delete(self, photo_id: int) -> None:
        """Remove the stored asset (best-effort), then the row."""
        photo = self.get_photo(photo_id)
        self.storage.delete(ruta_completa=photo.ruta_completa, public_id=photo.public_id)
        db.session.delete(photo)
        db.session.commit()

    def delete_for_product(self, producto_id: int) -> list[tuple[str | None, str | None]]:
        """
        Delete every photo row of a product. Does not commit; the caller owns the
        transaction that deletes the product itself.

        Returns the (ruta_completa, public_id) locators of the removed rows.
        Pass them to remove_assets() once that transaction has committed, so a
        failed commit never leaves rows pointing at deleted files.
        """
        photos = self.list_for_product(producto_id)
        locators = [(photo.ruta_completa, photo.public_id) for photo in photos]
        for photo in photos:
            db.session.delete(photo)
        return locators

    def remove_assets(self, locators: list[tuple[str | None, str | None]]) -> int:
        """Best-effort removal of stored files. Returns how many were deleted."""
        removed = 0
        for ruta_completa, public_id in locators:
            if self.storage.delete(ruta_completa=ruta_completa, public_id=public_id):
                removed += 1
        return removed

    def reorder(self, producto_id: int, ordered_ids: list[int]) -> list[Photo]:
        """
        orden = position + 1 for each id. Ids not belonging to the product are
        skipped without error.
        """
        if not isinstance(ordered_ids, list) or any(
            isinstance(i, bool) or not isinstance(i, int) for i in ordered_ids
        ):
            raise ValidationError("orden debe ser una lista de IDs")

        for position, photo_id in enumerate(ordered_ids):
            db.session.execute(
                update(Photo)
                .where(Photo.id == photo_id, Photo.producto_id == producto_id)
                .values(orden=position + 1)
                .execution_options(synchronize_session=False)
            )
        db.session.commit()
        return self.list_for_product(producto_id)

    # ---- maintenance ----

    def statistics(self) -> dict:
        total, total_bytes, avg_bytes, max_bytes, min_bytes = db.session.query(
            func.count(Photo.id),
            func.coalesce(func.sum(Photo.tamano_bytes), 0),
            func.avg(Photo.tamano_bytes),
            func.max(Photo.tamano_bytes),
            func.min(Photo.tamano_bytes),
        ).one()

        total_bytes = int(total_bytes or 0)
        return {
            "total_fotos": int(total or 0),
            "tamano_total_bytes": total_bytes,
            "tamano_total_mb": round(total_bytes / (1024 * 1024), 2),
            "promedio_kb": round(float(avg_bytes) / 1024, 2) if avg_bytes is not None else 0,
            "foto_mas_grande_bytes": int(max_bytes) if max_bytes is not None else 0,
            "foto_mas_pequena_bytes": int(min_bytes) if min_bytes is not None else 0,
        }

    def prune_orphans(self) -> dict:
        """Delete stored files that no photo row points to."""
        if not self.storage.supports_pruning:
            raise PruningNotSupported(f"No disponible con almacenamiento {self.storage.name}")

        known = {
            path
            for (path,) in db.session.query(Photo.ruta_completa)
            .filter(Photo.ruta_completa.isnot(None))
            .all()
        }

        eliminados = 0
        for path in self.storage.list_files():
            if path in known:
                continue
            if self.storage.delete(ruta_completa=path):
                eliminados += 1

        if eliminados:
            current_app.logger.info("Pruned %d orphan photo files", eliminados)
        return {
            "success": True,
            "message": f"Eliminados {eliminados} archivos",
            "eliminados": eliminados,
        }


def get_photo_service() -> PhotoService:
    return current_app.extensions["photo_service"]
