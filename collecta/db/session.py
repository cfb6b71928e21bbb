from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from collecta.config import config

DATABASE_URL = config.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


def engine_options(url: str) -> dict:
    # SQLite (tests, local runs) has no server connection to ping.
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True}


engine = create_async_engine(DATABASE_URL, future=True, **engine_options(DATABASE_URL))
SESSION_OPTIONS = dict(autoflush=False, expire_on_commit=False, class_=AsyncSession)
SessionLocal = async_sessionmaker(bind=engine, **SESSION_OPTIONS)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
