"""
Storage for article photos.

Uploads are validated on their actual content (magic bytes), never on the
client-supplied name or content type, and written under a generated name:
``{slugified-original-name}_{token}{extension}``.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import magic
from slugify import slugify

from gazette.core.config import settings
from gazette.core.errors import MediaError

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

DEFAULT_BASENAME = "photo"


@dataclass(frozen=True)
class UploadedPhoto:
    """A photo received from a form: client filename and raw bytes."""

    filename: str
    content: bytes


class MediaStore:
    def __init__(
        self,
        upload_dir: str,
        allowed_types: Iterable[str] = tuple(EXTENSIONS),
        max_size: int = 5 * 1024 * 1024,
    ):
        self.upload_dir = Path(upload_dir)
        self.allowed_types = set(allowed_types) & set(EXTENSIONS)
        self.max_size = max_size

    def path_for(self, filename: str) -> Path:
        if not filename or os.path.basename(filename) != filename or filename in (".", ".."):
            raise MediaError(f"Invalid media filename: {filename!r}")
        return self.upload_dir / filename

    def store(self, original_name: str, content: bytes) -> str:
        """Validate and write an upload, returning the stored filename.

        Raises:
            MediaError: empty or oversized upload, unsupported type, or I/O failure
        """
        if not content:
            raise MediaError("The uploaded file is empty")
        if len(content) > self.max_size:
            raise MediaError(
                f"The uploaded file is too large (max {self.max_size} bytes)"
            )

        mime_type = magic.from_buffer(content[:2048], mime=True)
        if mime_type not in self.allowed_types:
            logger.warning(f"Rejected upload {original_name!r} of type {mime_type}")
            raise MediaError(f"Unsupported file type: {mime_type}")

        filename = self.make_filename(original_name, EXTENSIONS[mime_type])
        target = self.path_for(filename)

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write upload {target}: {e}")
            raise MediaError(f"Could not store {original_name!r}") from e

        logger.info(
            f"Stored photo {filename} ({len(content)} bytes, type: {mime_type})"
        )
        return filename

    def delete(self, filename: Optional[str]) -> bool:
        """Remove a stored file. A missing file is not an error.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        if not filename:
            return False

        target = self.path_for(filename)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug(f"Photo {filename} already absent")
            return False
        except OSError as e:
            logger.error(f"Failed to delete photo {target}: {e}")
            raise MediaError(f"Could not delete {filename!r}") from e

        logger.info(f"Deleted photo {filename}")
        return True

    @staticmethod
    def make_filename(original_name: str, extension: str) -> str:
        stem = Path(original_name or "").stem
        safe_name = slugify(stem, max_length=80) or DEFAULT_BASENAME
        # 13 hex characters, the length of a time-based uniqid
        token = uuid.uuid4().hex[:13]
        return f"{safe_name}_{token}{extension}"


def get_media_store() -> MediaStore:
    """FastAPI dependency returning the configured store."""
    return MediaStore(
        settings.UPLOAD_DIR,
        allowed_types=settings.ALLOWED_IMAGE_TYPES,
        max_size=settings.MAX_IMAGE_SIZE,
    )


def media_url(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    return f"{settings.MEDIA_URL.rstrip('/')}/{filename}"
