import logging
import os
import uuid
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
PUBLIC_PREFIX = "/uploads/"


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_allowed_image(filename: Optional[str]) -> bool:
    return file_extension(filename) in ALLOWED_EXTENSIONS


class UploadStorage:
    """Stores uploaded images on local disk under random names."""

    def __init__(self, upload_dir: str, max_bytes: int):
        self.upload_dir = upload_dir
        self.max_bytes = max_bytes
        os.makedirs(self.upload_dir, exist_ok=True)

    def validate(self, upload: UploadFile) -> None:
        if not is_allowed_image(upload.filename):
            raise ValidationError(
                f"Only {', '.join(sorted(ALLOWED_EXTENSIONS))} images are allowed"
            )

    async def save(self, upload: UploadFile) -> str:
        """
        Write the upload to disk and return its public path, e.g.
        ``/uploads/3f2a...e1.png``.
        """
        self.validate(upload)
        content = await upload.read()
        if not content:
            raise ValidationError("Image required")
        if len(content) > self.max_bytes:
            raise ValidationError("Image is too large")

        name = f"{uuid.uuid4().hex}.{file_extension(upload.filename)}"
        path = os.path.join(self.upload_dir, name)
        await run_in_threadpool(self._write, path, content)
        logger.info(f"Stored upload {name} ({len(content)} bytes)")
        return PUBLIC_PREFIX + name

    @staticmethod
    def _write(path: str, content: bytes) -> None:
        with open(path, "wb") as fh:
            fh.write(content)

    def local_path(self, public_path: str) -> Optional[str]:
        if not public_path or not public_path.startswith(PUBLIC_PREFIX):
            return None
        name = os.path.basename(public_path)
        return os.path.join(self.upload_dir, name)

    async def delete(self, public_path: str) -> None:
        path = self.local_path(public_path)
        if path is None:
            return
        try:
            await run_in_threadpool(os.remove, path)
        except FileNotFoundError:
            logger.warning(f"Upload {path} already missing from disk")
        except OSError as e:
            logger.warning(f"Failed to remove upload {path}: {e}")
