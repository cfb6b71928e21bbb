import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from PIL import UnidentifiedImageError
from fastapi import UploadFile

from collecta.config import config
from collecta.errors import InvalidInput, StorageFailure
from collecta.utils.files import (
    FileTooLargeError,
    read_file_from_upload_file,
    verify_image_bytes,
    write_file_bytes,
    delete_files,
)

logger = logging.getLogger(__name__)

UPLOADS_DIR = "uploads"
IMAGE_KINDS = ("users", "collections", "items", "events")

# Extensions each Pillow format may be stored under.
FORMAT_EXTENSIONS = {
    "JPEG": ("jpg", "jpeg"),
    "PNG": ("png",),
    "WEBP": ("webp",),
}


class UploadService:
    @staticmethod
    def absolute_path(relative_path: str) -> Path:
        return config.STORAGE_PATH / PurePosixPath(relative_path)

    @staticmethod
    def validate_name(filename: str, content_type: Optional[str]) -> str:
        suffix = Path(filename).suffix.lower().lstrip(".")
        if suffix not in config.ALLOWED_EXTENSIONS:
            allowed = ", ".join(ext.upper() for ext in config.ALLOWED_EXTENSIONS)
            raise InvalidInput(f"Unsupported file type: '{suffix}'. Use {allowed}.")

        if content_type and content_type not in config.ALLOWED_MIME_TYPES:
            raise InvalidInput(f"File '{filename}' has unsupported type '{content_type}'.")

        return suffix

    @classmethod
    async def save_image(cls, file: UploadFile, kind: str) -> str:
        """Validate ``file`` and store it under ``uploads/<kind>/``.

        Returns the path relative to the storage root, which is what rows keep.
        """
        if kind not in IMAGE_KINDS:
            raise ValueError(f"Unknown image kind: {kind!r}")

        suffix = cls.validate_name(file.filename or "", file.content_type)

        try:
            content = await read_file_from_upload_file(file, config.MAX_FILE_SIZE)
        except FileTooLargeError as e:
            raise InvalidInput("File too large.") from e

        if not content:
            raise InvalidInput("Uploaded file is empty.")

        try:
            detected = await verify_image_bytes(content)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise InvalidInput(f"Failed to read image '{file.filename}'. The file may be corrupted.") from e

        if suffix not in FORMAT_EXTENSIONS.get(detected, ()):
            raise InvalidInput(f"File '{file.filename}' is not a {suffix.upper()} image.")

        relative = str(PurePosixPath(UPLOADS_DIR, kind, f"{uuid.uuid4().hex}.{suffix}"))
        try:
            await write_file_bytes(content, cls.absolute_path(relative))
        except OSError as e:
            logger.exception("Failed to write upload %s", relative)
            await delete_files([cls.absolute_path(relative)])
            raise StorageFailure("Could not save the image.") from e

        logger.info("Stored %s image %s (%d bytes)", kind[:-1], relative, len(content))
        return relative

    @classmethod
    async def discard(cls, relative_paths: Iterable[Optional[str]]) -> None:
        paths: List[Path] = [cls.absolute_path(p) for p in relative_paths if p]
        if not paths:
            return

        results = await delete_files(paths)
        for path, deleted in zip(paths, results):
            if not deleted:
                logger.warning("Could not delete stored image %s", path)
