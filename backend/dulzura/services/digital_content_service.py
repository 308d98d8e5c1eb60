# Overview: Service-layer operations for digital content (tagged image/video metadata).

"""
Digital Content Service

Metadata only (URL, title, tags); the media itself lives elsewhere.
Storage sits behind DigitalContentRepository so the process-local list
(handy for tests and demos) and the contenido_digital table are
interchangeable. DIGITAL_CONTENT_REPOSITORY picks one at startup.

Repositories exchange plain dicts shaped like DigitalContent.to_dict().
"""
from __future__ import annotations

import threading
from copy import deepcopy

from flask import current_app

from ..extensions import db
from ..models import DigitalContent, Product
from ..validation import ValidationError
from dulzura.time_utils import to_utc_z, utcnow

MSG_NOT_FOUND = "Contenido no encontrado"
CONTENT_FIELDS = ("producto_id", "url", "titulo", "descripcion", "etiquetas", "tipo", "tamano")


def _tag_matches(tags: list[str], needle: str) -> bool:
    needle = needle.lower()
    return any(needle in t.lower() for t in tags)


class DigitalContentRepository:
    name = "abstract"

    def list_all(self) -> list[dict]:
        raise NotImplementedError

    def get(self, content_id: int) -> dict | None:
        raise NotImplementedError

    def list_by_product(self, producto_id: int) -> list[dict]:
        raise NotImplementedError

    def list_by_tag(self, tag: str) -> list[dict]:
        raise NotImplementedError

    def create(self, data: dict) -> dict:
        raise NotImplementedError

    def update(self, content_id: int, patch: dict) -> dict | None:
        raise NotImplementedError

    def delete(self, content_id: int) -> bool:
        raise NotImplementedError

    def delete_by_product(self, producto_id: int) -> int:
        raise NotImplementedError


class InMemoryDigitalContentRepository(DigitalContentRepository):
    """Process-local store. State is lost on restart."""
    name = "memory"

    def __init__(self):
        self._items: dict[int, dict] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_all(self) -> list[dict]:
        with self._lock:
            return [deepcopy(i) for i in self._items.values()]

    def get(self, content_id: int) -> dict | None:
        with self._lock:
            item = self._items.get(content_id)
            return deepcopy(item) if item else None

    def list_by_product(self, producto_id: int) -> list[dict]:
        return [i for i in self.list_all() if i["producto_id"] == producto_id]

    def list_by_tag(self, tag: str) -> list[dict]:
        return [i for i in self.list_all() if _tag_matches(i["etiquetas"], tag)]

    def create(self, data: dict) -> dict:
        with self._lock:
            item = {
                "id": self._next_id,
                "producto_id": data["producto_id"],
                "url": data["url"],
                "titulo": data["titulo"],
                "descripcion": data.get("descripcion"),
                "etiquetas": list(data.get("etiquetas") or []),
                "tipo": data.get("tipo") or "imagen",
                "tamano": data.get("tamano"),
                "fecha_subida": to_utc_z(utcnow()),
            }
            self._items[item["id"]] = item
            self._next_id += 1
            return deepcopy(item)

    def update(self, content_id: int, patch: dict) -> dict | None:
        with self._lock:
            item = self._items.get(content_id)
            if item is None:
                return None
            for k, v in patch.items():
                if k in CONTENT_FIELDS:
                    item[k] = list(v) if k == "etiquetas" else v
            return deepcopy(item)

    def delete(self, content_id: int) -> bool:
        with self._lock:
            return self._items.pop(content_id, None) is not None

    def delete_by_product(self, producto_id: int) -> int:
        with self._lock:
            doomed = [k for k, i in self._items.items() if i["producto_id"] == producto_id]
            for k in doomed:
                del self._items[k]
            return len(doomed)


class SqlDigitalContentRepository(DigitalContentRepository):
    """Backed by the contenido_digital table."""
    name = "sql"

    def list_all(self) -> list[dict]:
        rows = db.session.query(DigitalContent).order_by(DigitalContent.id.asc()).all()
        return [r.to_dict() for r in rows]

    def get(self, content_id: int) -> dict | None:
        row = db.session.get(DigitalContent, content_id)
        return row.to_dict() if row else None

    def list_by_product(self, producto_id: int) -> list[dict]:
        rows = (
            db.session.query(DigitalContent)
            .filter(DigitalContent.producto_id == producto_id)
            .order_by(DigitalContent.id.asc())
            .all()
        )
        return [r.to_dict() for r in rows]

    def list_by_tag(self, tag: str) -> list[dict]:
        # Tags are a JSON list; filter in Python so SQLite and MySQL behave the same
        return [i for i in self.list_all() if _tag_matches(i["etiquetas"], tag)]

    def create(self, data: dict) -> dict:
        row = DigitalContent(
            producto_id=data["producto_id"],
            url=data["url"],
            titulo=data["titulo"],
            descripcion=data.get("descripcion"),
            etiquetas=list(data.get("etiquetas") or []),
            tipo=data.get("tipo") or "imagen",
            tamano=data.get("tamano"),
            fecha_subida=utcnow(),
        )
        db.session.add(row)
        db.session.commit()
        return row.to_dict()

    def update(self, content_id: int, patch: dict) -> dict | None:
        row = db.session.get(DigitalContent, content_id)
        if not row:
            return None
        for k, v in patch.items():
            if k in CONTENT_FIELDS:
                # JSON columns only notice reassignment, not in-place mutation
                setattr(row, k, list(v) if k == "etiquetas" else v)
        db.session.commit()
        return row.to_dict()

    def delete(self, content_id: int) -> bool:
        row = db.session.get(DigitalContent, content_id)
        if not row:
            return False
        db.session.delete(row)
        db.session.commit()
        return True

    def delete_by_product(self, producto_id: int) -> int:
        """
        Does not commit: runs inside the transaction that deletes the product,
        ahead of the product row because of the foreign key.
        """
        return (
            db.session.query(DigitalContent)
            .filter(DigitalContent.producto_id == producto_id)
            .delete(synchronize_session=False)
        )


def build_repository(config) -> DigitalContentRepository:
    kind = (config.get("DIGITAL_CONTENT_REPOSITORY") or "sql").lower()
    if kind == "memory":
        return InMemoryDigitalContentRepository()
    if kind == "sql":
        return SqlDigitalContentRepository()
    raise RuntimeError(f"Unknown DIGITAL_CONTENT_REPOSITORY: {kind}")


def get_repository() -> DigitalContentRepository:
    return current_app.extensions["digital_content_repository"]


def _require_product(producto_id: int) -> None:
    if db.session.get(Product, producto_id) is None:
        raise ValidationError("El producto indicado no existe")


def list_content() -> list[dict]:
    return get_repository().list_all()


def get_content(content_id: int) -> dict | None:
    return get_repository().get(content_id)


def list_content_for_product(producto_id: int) -> list[dict]:
    return get_repository().list_by_product(producto_id)


def search_by_tag(tag: str) -> list[dict]:
    """Case-insensitive substring match against any tag."""
    tag = (tag or "").strip()
    if not tag:
        raise ValidationError("Etiqueta requerida")
    return get_repository().list_by_tag(tag)


def create_content(*, patch: dict) -> dict:
    _require_product(patch["producto_id"])
    return get_repository().create(patch)


def update_content(*, content_id: int, patch: dict) -> dict | None:
    if "producto_id" in patch:
        _require_product(patch["producto_id"])
    return get_repository().update(content_id, patch)


def delete_content(*, content_id: int) -> bool:
    return get_repository().delete(content_id)


def delete_content_for_product(producto_id: int) -> int:
    """Drop every content entry attached to a product. Used by hard product deletes."""
    return get_repository().delete_by_product(producto_id)


def add_tag(*, content_id: int, tag: str) -> dict | None:
    """Append tag unless already present (exact match)."""
    tag = (tag or "").strip()
    if not tag:
        raise ValidationError("Etiqueta requerida")

    repo = get_repository()
    item = repo.get(content_id)
    if item is None:
        return None
    if tag in item["etiquetas"]:
        return item
    return repo.update(content_id, {"etiquetas": item["etiquetas"] + [tag]})


def remove_tag(*, content_id: int, tag: str) -> dict | None:
    repo = get_repository()
    item = repo.get(content_id)
    if item is None:
        return None
    return repo.update(content_id, {"etiquetas": [t for t in item["etiquetas"] if t != tag]})
