# Overview: Health check and local upload serving.

"""
System endpoints.

- GET /health: database reachability, active photo storage, uptime
- GET /uploads/<path>: serves locally stored photos (local storage only)
"""

import time
from flask import Blueprint, current_app, send_from_directory, abort
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from dulzura.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)

STARTED_AT = time.monotonic()


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    database_health = check_database_health()
    storage = current_app.extensions["photo_service"].storage

    healthy = database_health["status"] == "healthy"
    response = {
        "status": "OK" if healthy else "ERROR",
        "timestamp": to_utc_z(utcnow()),
        "uptime": round(time.monotonic() - STARTED_AT, 2),
        "checks": {
            "database": database_health,
            "photo_storage": {"backend": storage.name},
        },
    }
    return response, 200 if healthy else 503


@system_bp.get("/uploads/<path:filename>")
def serve_upload(filename: str):
    if current_app.config.get("PHOTO_STORAGE", "local") != "local":
        abort(404)
    return send_from_directory(current_app.config["UPLOAD_DIR"], filename)
