"""Upload policies for geofiles and custodial photos.

A policy checks the extension of the client filename, streams the body to
the upload directory under a random name and enforces the size limit while
writing.
"""
from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from fastapi import UploadFile

from app.core.config import Settings
from app.core.exceptions import UploadRejectedError
from app.core.logging_config import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024

GEOFILE_EXTENSIONS = (".shp", ".kml", ".geojson", ".csv", ".gpx", ".kmz", ".gml")
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


@dataclass(frozen=True)
class StoredUpload:
    original_name: str
    stored_name: str
    path: Path
    size: int
    extension: str
    content_type: str | None

    @property
    def file_type(self) -> str:
        return self.extension.lstrip(".")


@dataclass(frozen=True)
class UploadPolicy:
    max_bytes: int
    allowed_extensions: Tuple[str, ...]
    invalid_type_message: str

    def check_extension(self, filename: str | None) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in self.allowed_extensions:
            raise UploadRejectedError(self.invalid_type_message)
        return ext

    async def save(self, upload: UploadFile, directory: Path) -> StoredUpload:
        ext = self.check_extension(upload.filename)
        directory.mkdir(parents=True, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}{ext}"
        target = directory / stored_name
        size = 0
        try:
            with open(target, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise UploadRejectedError(
                            f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB",
                            status_code=413,
                        )
                    out.write(chunk)
        except Exception:
            target.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()

        logger.info(f"Stored upload {upload.filename!r} as {stored_name} ({size} bytes)")
        return StoredUpload(
            original_name=upload.filename or stored_name,
            stored_name=stored_name,
            path=target,
            size=size,
            extension=ext,
            content_type=upload.content_type,
        )


GEOFILE_POLICY = UploadPolicy(
    max_bytes=50 * 1024 * 1024,
    allowed_extensions=GEOFILE_EXTENSIONS,
    invalid_type_message="Invalid file type",
)

PHOTO_POLICY = UploadPolicy(
    max_bytes=5 * 1024 * 1024,
    allowed_extensions=IMAGE_EXTENSIONS,
    invalid_type_message="Invalid image file type. Only JPG, PNG, JPEG allowed",
)


@dataclass(frozen=True)
class UploadPolicies:
    """Everything a route registrar needs to accept files."""

    directory: Path
    geofiles: UploadPolicy = GEOFILE_POLICY
    photos: UploadPolicy = PHOTO_POLICY

    def url_for(self, stored_name: str) -> str:
        return f"/uploads/{stored_name}"

    def path_for(self, stored_name: str) -> Path:
        return self.directory / stored_name


def build_upload_policies(config: Settings) -> UploadPolicies:
    return UploadPolicies(directory=Path(config.UPLOAD_DIR))
