import os
import sqlite3
import sys
from uuid import UUID

import pytest_asyncio
from sqlalchemy import types
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

sqlite3.register_adapter(UUID, lambda value: str(value))
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from codeplay.db.postgres.base import Base
from codeplay.db.postgres.session import get_db


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class SQLiteUUID(types.TypeDecorator):
    impl = types.String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return UUID(value)


def _normalize_sqlite_metadata_types() -> None:
    """Make SQLAlchemy metadata SQLite-friendly before tests build ORM expressions."""
    for table in Base.metadata.tables.values():
        for column in table.columns:
            if isinstance(column.type, (postgresql.ENUM, types.Enum)):
                column.type = types.String(50)
            elif isinstance(column.type, postgresql.UUID):
                column.type = SQLiteUUID()
            elif isinstance(column.type, postgresql.JSONB):
                column.type = types.JSON()


# Load all model tables and coerce types eagerly so ORM expressions built at
# import time already use SQLite-safe types.
import codeplay.db.postgres.models  # noqa: E402,F401

_normalize_sqlite_metadata_types()


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    import codeplay.db.postgres.engine as engine_module
    import codeplay.db.postgres.session as session_module

    session_factory = async_sessionmaker(test_engine, expire_on_commit=False, autoflush=False, class_=AsyncSession)

    original_factory = engine_module.sessionmaker
    original_session_factory = session_module.sessionmaker
    engine_module.sessionmaker = session_factory
    session_module.sessionmaker = session_factory

    async with session_factory() as session:
        yield session
        await session.rollback()

    engine_module.sessionmaker = original_factory
    session_module.sessionmaker = original_session_factory


@pytest_asyncio.fixture
async def client(db_session):
    from main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    from httpx import AsyncClient, ASGITransport
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
