# Overview: Per-entity soft/hard delete policy read from configuration.

"""
Deletion policy

Whether deleting an entity flips `activo` (soft) or issues a DELETE (hard) is
configured per entity in DELETE_MODES, e.g. {"ingrediente": "soft"}.
Unknown entities default to hard.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db

SOFT = "soft"
HARD = "hard"


def delete_mode(entity: str) -> str:
    mode = current_app.config.get("DELETE_MODES", {}).get(entity, HARD)
    if mode not in (SOFT, HARD):
        raise RuntimeError(f"Invalid delete mode for {entity}: {mode}")
    return mode


def remove(instance, entity: str) -> str:
    """
    Apply the configured policy to instance. Does not commit.

    Returns the mode that was applied.
    """
    mode = delete_mode(entity)
    if mode == SOFT:
        instance.activo = False
    else:
        db.session.delete(instance)
    return mode
