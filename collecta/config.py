from pathlib import Path

import humanfriendly
from pydantic import BaseModel
from typing import List
from dotenv import load_dotenv
import os

load_dotenv()


class Config(BaseModel):
    # Database
    DATABASE_URL: str

    # JWT & Security
    JWT_SECRET: str
    JWT_ALG: str
    ACCESS_TTL_MIN: int
    REFRESH_TTL_DAYS: int

    # Uploads
    ALLOWED_EXTENSIONS: List[str]
    ALLOWED_MIME_TYPES: List[str]
    MAX_FILE_SIZE: int
    STORAGE_PATH: Path

    # Listing
    DEFAULT_PAGE_SIZE: int
    HIGH_IMPORTANCE_THRESHOLD: int

    # Logging
    LOG_LEVEL: str

    # FastAPI
    FASTAPI_HOST: str
    FASTAPI_PORT: int

    # Async I/O
    MAX_CONCURRENT_IO: int


config = Config(
    DATABASE_URL=os.environ["DATABASE_URL"],

    JWT_SECRET=os.environ["JWT_SECRET"],
    JWT_ALG=os.getenv("JWT_ALG", "HS256"),
    ACCESS_TTL_MIN=int(os.getenv("ACCESS_TTL_MIN", "15")),
    REFRESH_TTL_DAYS=int(os.getenv("REFRESH_TTL_DAYS", "30")),

    ALLOWED_EXTENSIONS=os.getenv("ALLOWED_EXTENSIONS", "jpg,jpeg,png,webp").split(","),
    ALLOWED_MIME_TYPES=os.getenv("ALLOWED_MIME_TYPES", "image/jpeg,image/png,image/webp").split(","),
    MAX_FILE_SIZE=humanfriendly.parse_size(os.getenv("MAX_FILE_SIZE", "5MB")),
    STORAGE_PATH=Path(os.getenv("STORAGE_PATH", "storage")),

    DEFAULT_PAGE_SIZE=int(os.getenv("DEFAULT_PAGE_SIZE", "9")),
    HIGH_IMPORTANCE_THRESHOLD=int(os.getenv("HIGH_IMPORTANCE_THRESHOLD", "8")),

    LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

    FASTAPI_HOST=os.getenv("FASTAPI_HOST", "127.0.0.1"),
    FASTAPI_PORT=int(os.getenv("FASTAPI_PORT", "8000")),

    MAX_CONCURRENT_IO=int(os.getenv("MAX_CONCURRENT_IO", "8")),
)

__all__ = ["config"]
