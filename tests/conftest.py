import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MAX_CONCURRENT_IO", "4")

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from collecta.config import config
from collecta.db import Base
from collecta.db.session import SESSION_OPTIONS, get_db
from tests.helpers import register_and_login

# Test database setup
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_db_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine):
    return async_sessionmaker(test_db_engine, **SESSION_OPTIONS)


@pytest.fixture
def override_get_db(session_factory):
    """Override FastAPI dependency"""
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def storage_path(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "STORAGE_PATH", tmp_path)
    return tmp_path


@pytest.fixture
async def client(override_get_db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def alice(client):
    return await register_and_login(client, "alice")


@pytest.fixture
async def bob(client):
    return await register_and_login(client, "bob")
