# backend/dulzura/config.py
from __future__ import annotations
import os
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parent.parent

# .env lives at the repository root, next to backend/
load_dotenv(BACKEND_DIR.parent / ".env")


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _delete_modes() -> dict[str, str]:
    defaults = {
        "categoria": "hard",
        "producto": "hard",
        "ingrediente": "soft",
        "receta": "hard",
    }
    return {
        entity: os.environ.get(f"DELETE_MODE_{entity.upper()}", mode).strip().lower()
        for entity, mode in defaults.items()
    }


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")
    APP_ENV = os.environ.get("APP_ENV", "development")

    # SQLite DB stored in backend/instance/dulzura.sqlite3 unless DATABASE_URL is set
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///dulzura.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Auth
    JWT_SECRET = os.environ.get("JWT_SECRET", "secret-key-change-in-production")
    ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "15"))
    REFRESH_TOKEN_DAYS = int(os.environ.get("REFRESH_TOKEN_DAYS", "7"))
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

    CORS_ORIGINS = _csv(os.environ.get("CORS_ORIGINS", "http://localhost:5173"))

    # Photos: "local" writes under UPLOAD_DIR/productos, "s3" uses the S3_* settings
    BASE_URL = os.environ.get("BASE_URL", "http://localhost:3000")
    UPLOAD_DIR = os.environ.get("UPLOAD_DIR", str(BACKEND_DIR.parent / "uploads"))
    PHOTO_STORAGE = os.environ.get("PHOTO_STORAGE", "local").strip().lower()
    S3_BUCKET = os.environ.get("S3_BUCKET")
    S3_REGION = os.environ.get("S3_REGION")
    S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL")
    S3_ACCESS_KEY_ID = os.environ.get("S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY = os.environ.get("S3_SECRET_ACCESS_KEY")
    S3_PUBLIC_BASE_URL = os.environ.get("S3_PUBLIC_BASE_URL")
    S3_PREFIX = os.environ.get("S3_PREFIX", "inquieta-dulzura/productos")

    # Request ceiling; the 5 MiB per-photo limit is checked by the photo service
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    # "soft" flips activo=False, "hard" issues a DELETE
    DELETE_MODES = _delete_modes()

    # "sql" or "memory"
    DIGITAL_CONTENT_REPOSITORY = os.environ.get("DIGITAL_CONTENT_REPOSITORY", "sql").strip().lower()
