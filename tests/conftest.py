import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from capacity_ledger.database import (
    build_session_factory,
    create_schema,
    enable_sqlite_foreign_keys,
    get_db,
)
from capacity_ledger.main import app


def make_sqlite_engine(db_file):
    # NullPool: connections must not outlive the event loop that opened them.
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    enable_sqlite_foreign_keys(engine)
    return engine


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    engine = make_sqlite_engine(tmp_path / "capacity.db")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
def client(tmp_path):
    engine = make_sqlite_engine(tmp_path / "api.db")
    asyncio.run(create_schema(engine))
    factory = build_session_factory(engine)

    async def _override_get_db():
        async with factory() as db:
            yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())
