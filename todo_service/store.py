"""SQLite-backed todo store.

Each operation borrows one connection from the pool, runs a single
statement on it in a worker thread and releases it.
"""

import logging
import sqlite3
from typing import Optional

from .errors import DecodeError, StoreInvariantError, StoreReadError, StoreWriteError
from .models import Todo, decode_row, encode_task
from .pool import ConnectionPool

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS todos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task TEXT NOT NULL,
    done BOOLEAN NOT NULL DEFAULT 0
)
"""

INSERT_TODO = "INSERT INTO todos (task, done) VALUES (?, ?)"
SELECT_TODO = "SELECT id, task, done FROM todos WHERE id = ?"
SELECT_TODOS = "SELECT id, task, done FROM todos ORDER BY id"

# SQLite INTEGER range
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1


def _create_schema(conn: sqlite3.Connection) -> None:
    with conn:
        conn.execute(SCHEMA)


def _insert_todo(conn: sqlite3.Connection, task: str) -> Todo:
    try:
        with conn:
            cursor = conn.execute(INSERT_TODO, encode_task(task))
    except sqlite3.Error as e:
        raise StoreWriteError(f"Failed to insert todo: {e}") from e
    return Todo(id=cursor.lastrowid, task=task, done=False)


def _select_todo(conn: sqlite3.Connection, todo_id: int) -> Optional[Todo]:
    try:
        rows = conn.execute(SELECT_TODO, (todo_id,)).fetchmany(2)
    except sqlite3.Error as e:
        raise StoreReadError(f"Failed to load todo {todo_id}: {e}") from e

    if not rows:
        return None
    if len(rows) > 1:
        raise StoreInvariantError(f"More than one todo stored with id {todo_id}")

    try:
        return decode_row(rows[0])
    except DecodeError as e:
        raise StoreReadError(f"Corrupt row for todo {todo_id}: {e}") from e


def _select_todos(conn: sqlite3.Connection) -> list[Todo]:
    try:
        rows = conn.execute(SELECT_TODOS).fetchall()
    except sqlite3.Error as e:
        raise StoreReadError(f"Failed to list todos: {e}") from e

    todos = []
    for row in rows:
        try:
            todos.append(decode_row(row))
        except DecodeError as e:
            raise StoreReadError(f"Corrupt row in todos table {row!r}: {e}") from e
    return todos


class TodoStore:
    """Create, fetch and list todos through a connection pool."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def init_schema(self) -> None:
        """Create the todos table if it does not exist yet."""
        async with self.pool.connection() as conn:
            try:
                await conn.run(_create_schema)
            except sqlite3.Error as e:
                raise StoreWriteError(f"Failed to create schema: {e}") from e

    async def create(self, task: str) -> Todo:
        """Create a new todo.

        Args:
            task: Description of the task. Not validated here.

        Returns:
            The created todo, with the id assigned by SQLite and done=False.

        Raises:
            StoreWriteError: The insert failed.
            PoolError: No connection could be acquired.
        """
        async with self.pool.connection() as conn:
            todo = await conn.run(_insert_todo, task)
        logger.debug(f"Created todo {todo.id}")
        return todo

    async def get(self, todo_id: int) -> Optional[Todo]:
        """Get a todo by ID.

        Returns:
            The todo if found, None otherwise.

        Raises:
            StoreReadError: The query failed or the row is corrupt.
            StoreInvariantError: Several rows share the id.
            PoolError: No connection could be acquired.
        """
        if not MIN_ID <= todo_id <= MAX_ID:
            logger.debug(f"Todo id {todo_id} is out of range")
            return None

        async with self.pool.connection() as conn:
            todo = await conn.run(_select_todo, todo_id)
        if todo is None:
            logger.debug(f"Todo {todo_id} not found")
        return todo

    async def list_all(self) -> list[Todo]:
        """List every todo, ordered by ascending id.

        Raises:
            StoreReadError: The query failed or any row is corrupt. No
                partial list is returned.
            PoolError: No connection could be acquired.
        """
        async with self.pool.connection() as conn:
            return await conn.run(_select_todos)
