import pytest

from collecta.db.models.user import User
from collecta.db.session import SessionLocal, engine_options


def test_session_factories_share_options(session_factory):
    assert SessionLocal.kw["expire_on_commit"] is False
    assert {k: v for k, v in session_factory.kw.items() if k != "bind"} == {
        k: v for k, v in SessionLocal.kw.items() if k != "bind"
    }
    assert session_factory.class_ is SessionLocal.class_


@pytest.mark.asyncio
async def test_rows_stay_readable_after_commit(session_factory):
    async with session_factory() as session:
        user = User(name="Hal", username="hal", email="hal@example.com", hashed_password="x")
        session.add(user)
        await session.commit()

        assert user.id is not None
        assert user.username == "hal"


def test_engine_options():
    assert engine_options("sqlite+aiosqlite:///:memory:") == {}
    assert engine_options("postgresql+asyncpg://u:p@db/collecta") == {"pool_pre_ping": True}
