"""Thumbnail storage.

Uses local disk for now. Designed to swap for S3/MinIO later via the FileManager interface.
Thumbnails land in uploads/thumbnails/{uuid}{ext}.
"""
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from uboard.core.config import settings


@dataclass
class UploadedFile:
    """A file already written to disk by the HTTP layer."""

    path: str
    filename: str


class FileManager(Protocol):
    def status(self) -> bool:
        """Whether uploads are currently accepted."""
        ...

    def upload(self, path: str, filename: str) -> str:
        """Store the file at ``path`` and return its public URL."""
        ...


class LocalFileManager:
    """Store thumbnails on local disk and serve them from /uploads."""

    def __init__(self, base_dir: str | None = None, base_url: str | None = None, enabled: bool | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")
        self.enabled = settings.UPLOADS_ENABLED if enabled is None else enabled

    def status(self) -> bool:
        return self.enabled

    def upload(self, path: str, filename: str) -> str:
        target_dir = self.base_dir / "thumbnails"
        target_dir.mkdir(parents=True, exist_ok=True)
        name = f"{uuid.uuid4().hex}{Path(filename).suffix.lower()}"
        shutil.copy2(path, target_dir / name)
        return f"{self.base_url}/uploads/thumbnails/{name}"


# Singleton - swap implementation here when moving to S3
_file_manager: FileManager | None = None


def get_file_manager() -> FileManager:
    global _file_manager
    if _file_manager is None:
        _file_manager = LocalFileManager()
    return _file_manager
