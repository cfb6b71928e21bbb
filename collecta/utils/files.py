import asyncio
import io
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os
from PIL import Image
from fastapi import UploadFile

from collecta.config import config


class FileTooLargeError(Exception):
    pass


SEM = asyncio.Semaphore(config.MAX_CONCURRENT_IO)


async def read_file_from_upload_file(file: UploadFile, max_file_size: int) -> bytes:
    data = bytearray()
    while chunk := await file.read(1024 * 1024):
        data.extend(chunk)
        if len(data) > max_file_size:
            raise FileTooLargeError(f"File exceeds max file size: '{file.filename}'")

    return bytes(data)


async def write_file_bytes(data: bytes, path: Path) -> None:
    async with SEM:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)


async def delete_file(path: Path) -> bool:
    async with SEM:
        try:
            await aiofiles.os.remove(path)
            return True
        except FileNotFoundError:
            return True
        except OSError:
            return False


async def delete_files(paths: List[Path]) -> List[bool]:
    return await asyncio.gather(*(delete_file(p) for p in paths))


def _open_verified(b: bytes) -> str:
    with Image.open(io.BytesIO(b)) as image:
        image.verify()
        return image.format


async def verify_image_bytes(b: bytes) -> str:
    """Decode ``b`` with Pillow and return the detected format name.

    Raises ``PIL.UnidentifiedImageError`` (or another Pillow error) when the
    bytes are not a readable image.
    """
    async with SEM:
        return await asyncio.to_thread(_open_verified, b)
