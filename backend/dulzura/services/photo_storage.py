# Overview: Interchangeable byte stores for product photos (local disk or S3-compatible bucket).

from __future__ import annotations

import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import InternalError

logger = logging.getLogger("dulzura.storage")


@dataclass(frozen=True)
class UploadedPhoto:
    """An incoming file, already read into memory."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return PurePosixPath(self.filename or "").suffix.lower()


@dataclass(frozen=True)
class StoredPhoto:
    """Where a backend put the bytes."""
    url_publica: str
    ruta_relativa: str | None = None
    ruta_completa: str | None = None
    public_id: str | None = None


class PhotoStorage:
    """
    Capability interface shared by the storage backends.

    supports_pruning tells callers whether list_files() can enumerate what is
    physically stored (needed to find orphans).
    """
    name = "abstract"
    supports_pruning = False

    def save(self, photo: UploadedPhoto) -> StoredPhoto:
        raise NotImplementedError

    def delete(self, *, ruta_completa: str | None = None, public_id: str | None = None) -> bool:
        raise NotImplementedError

    def list_files(self) -> list[str]:
        raise NotImplementedError(f"{self.name} storage cannot list files")


class LocalPhotoStorage(PhotoStorage):
    """
    Save bytes under <upload_dir>/productos with a random name.

    The directory is created on first write, not at construction.
    """
    name = "local"
    supports_pruning = True

    def __init__(self, upload_dir: str | Path, base_url: str, subdir: str = "productos"):
        self.upload_root = Path(upload_dir)
        self.subdir = subdir
        self.base_dir = self.upload_root / subdir
        self.base_url = base_url.rstrip("/")

    def _ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(self, photo: UploadedPhoto) -> StoredPhoto:
        self._ensure_dir()
        unique_name = f"{uuid.uuid4().hex}{photo.extension}"
        file_path = self.base_dir / unique_name

        try:
            with open(file_path, "wb") as destination:
                destination.write(photo.data)
        except OSError as exc:
            logger.error("Failed to write %s: %s", file_path, exc)
            raise InternalError("No se pudo guardar la foto") from exc
        logger.info("Saved %d bytes to %s", photo.size, file_path)

        relative = f"uploads/{self.subdir}/{unique_name}"
        return StoredPhoto(
            url_publica=f"{self.base_url}/{relative}",
            ruta_relativa=relative,
            ruta_completa=str(file_path),
        )

    def delete(self, *, ruta_completa: str | None = None, public_id: str | None = None) -> bool:
        """
        Best-effort removal. Returns False (and logs) when the file could not be
        removed; a file that is already gone counts as deleted.
        """
        if not ruta_completa:
            return False

        file_path = Path(ruta_completa)
        if self.base_dir.resolve() not in file_path.resolve().parents:
            logger.warning("Refusing to delete outside %s: %s", self.base_dir, file_path)
            return False

        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", file_path, exc)
            return False
        return True

    def list_files(self) -> list[str]:
        if not self.base_dir.exists():
            return []
        return sorted(str(p) for p in self.base_dir.iterdir() if p.is_file())


class S3PhotoStorage(PhotoStorage):
    """
    Upload to an S3-compatible bucket (AWS, R2, MinIO).

    public_id holds the object key; url_publica is built from public_base_url
    (or the bucket's virtual-host URL when none is configured).
    """
    name = "s3"
    supports_pruning = False

    def __init__(
        self,
        *,
        bucket: str,
        prefix: str = "",
        public_base_url: str | None = None,
        region_name: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client=None,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.public_base_url = (public_base_url or f"https://{bucket}.s3.amazonaws.com").rstrip("/")

        if client is None:
            kwargs = {"service_name": "s3", "region_name": region_name}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            if access_key_id and secret_access_key:
                kwargs.update(
                    aws_access_key_id=access_key_id,
                    aws_secret_access_key=secret_access_key,
                )
            client = boto3.client(**kwargs)
        self.s3 = client

    def _key_for(self, photo: UploadedPhoto) -> str:
        name = f"{uuid.uuid4().hex}{photo.extension}"
        return f"{self.prefix}/{name}" if self.prefix else name

    def save(self, photo: UploadedPhoto) -> StoredPhoto:
        key = self._key_for(photo)
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=io.BytesIO(photo.data),
                ContentType=photo.content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Failed to upload s3://%s/%s: %s", self.bucket, key, exc)
            raise InternalError("No se pudo subir la foto") from exc
        logger.info("Uploaded %d bytes to s3://%s/%s", photo.size, self.bucket, key)
        return StoredPhoto(url_publica=f"{self.public_base_url}/{key}", public_id=key)

    def delete(self, *, ruta_completa: str | None = None, public_id: str | None = None) -> bool:
        if not public_id:
            return False
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Failed to delete s3://%s/%s: %s", self.bucket, public_id, exc)
            return False
        return True


def build_photo_storage(config) -> PhotoStorage:
    """Pick the backend named by PHOTO_STORAGE ("local" or "s3")."""
    backend = (config.get("PHOTO_STORAGE") or "local").lower()

    if backend == "local":
        return LocalPhotoStorage(config["UPLOAD_DIR"], config["BASE_URL"])

    if backend == "s3":
        if not config.get("S3_BUCKET"):
            raise RuntimeError("PHOTO_STORAGE=s3 requires S3_BUCKET")
        return S3PhotoStorage(
            bucket=config["S3_BUCKET"],
            prefix=config.get("S3_PREFIX") or "",
            public_base_url=config.get("S3_PUBLIC_BASE_URL"),
            region_name=config.get("S3_REGION"),
            endpoint_url=config.get("S3_ENDPOINT_URL"),
            access_key_id=config.get("S3_ACCESS_KEY_ID"),
            secret_access_key=config.get("S3_SECRET_ACCESS_KEY"),
        )

    raise RuntimeError(f"Unknown PHOTO_STORAGE backend: {backend}")
