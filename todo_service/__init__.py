"""Todo Service - SQLite-backed todo list with a pooled data-access layer."""

from .errors import (
    DecodeError,
    PoolError,
    StoreError,
    StoreInvariantError,
    StoreReadError,
    StoreWriteError,
    TodoServiceError,
)
from .models import Todo, decode_row, encode_task
from .pool import ConnectionPool, PooledConnection
from .store import TodoStore

__all__ = [
    "ConnectionPool",
    "PooledConnection",
    "TodoStore",
    "Todo",
    "decode_row",
    "encode_task",
    "TodoServiceError",
    "PoolError",
    "DecodeError",
    "StoreError",
    "StoreWriteError",
    "StoreReadError",
    "StoreInvariantError",
]


def main():
    """Entry point for the todo service."""
    from .__main__ import main as run

    run()
