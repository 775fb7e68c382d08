"""Shared fixtures: pools and stores backed by a temporary SQLite file."""

import pytest
import pytest_asyncio

from todo_service.pool import ConnectionPool
from todo_service.store import TodoStore


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "todos.db")


@pytest_asyncio.fixture
async def pool(db_path):
    pool = ConnectionPool(db_path, size=4, timeout=10.0)
    await pool.open()
    yield pool
    await pool.close()


@pytest_asyncio.fixture
async def store(pool):
    store = TodoStore(pool)
    await store.init_schema()
    return store
