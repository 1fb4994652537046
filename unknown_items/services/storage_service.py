"""Where evidence files land after an upload is accepted.

Files are written under UPLOAD_DIR and served back by the /uploads static mount,
so a stored URL maps one-to-one onto a path. Deleting a post hands its media URLs
here; URLs outside UPLOAD_DIR are ignored.
"""
import logging
import uuid
from pathlib import Path
from typing import Protocol

from unknown_items.core.config import settings

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """What the upload and post-delete paths need from a file store."""

    def save(self, user_id: str, media_type: str, data: bytes, ext: str) -> str:
        """Write the bytes and return the URL the /uploads mount serves them at."""
        ...

    def delete(self, url: str) -> bool:
        """Remove the file behind a stored URL. False when nothing was removed."""
        ...


class LocalStorage:
    """Disk store laid out as users/{uploader_id}/{image|video}/{random hex}{ext}."""

    def __init__(self, base_dir: str | None = None, base_url: str | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.base_url = (base_url or settings.MEDIA_BASE_URL).rstrip("/")

    def _user_path(self, user_id: str, media_type: str) -> Path:
        path = self.base_dir / "users" / str(user_id) / media_type
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save(self, user_id: str, media_type: str, data: bytes, ext: str) -> str:
        path = self._user_path(user_id, media_type)
        filename = f"{uuid.uuid4().hex}{ext}"
        (path / filename).write_bytes(data)
        rel = f"users/{user_id}/{media_type}/{filename}"
        return f"{self.base_url}/uploads/{rel}"

    def delete(self, url: str) -> bool:
        if "/uploads/" not in url:
            return False
        rel = url.split("/uploads/", 1)[1]
        filepath = (self.base_dir / rel).resolve()
        if self.base_dir not in filepath.parents:
            return False
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("Could not delete media file %s", filepath)
            return False
        return True


# Process-wide store; tests replace it with one rooted in a temp dir
_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage
