"""Bounded pool of SQLite connections shared by concurrent request handlers.

A connection is only ever used by one operation at a time. Callers borrow
one with ``acquire``/``release`` (or the ``connection`` context manager) and
run blocking work on it through ``PooledConnection.run``, which moves the
call off the event loop.
"""

import asyncio
import logging
import sqlite3
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, Optional, TypeVar

from .errors import PoolError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MEMORY_DB = ":memory:"


class PooledConnection:
    """Exclusive handle on one pooled connection until it is released."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self._pending: Optional[asyncio.Future] = None
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def run(self, fn: Callable[..., T], *args: Any) -> T:
        """Run ``fn(connection, *args)`` in a worker thread.

        If the caller is cancelled, the worker keeps going until ``fn``
        returns; the pool holds the connection back until then.
        """
        if self._released:
            raise PoolError("Connection handle used after release")
        if self._pending is not None and not self._pending.done():
            raise PoolError("Connection handle is already running a call")

        self._pending = asyncio.ensure_future(asyncio.to_thread(fn, self._conn, *args))
        return await asyncio.shield(self._pending)


class ConnectionPool:
    """A fixed-size pool of SQLite connections."""

    def __init__(
        self,
        db_path: str,
        size: int = 4,
        timeout: float = 5.0,
        busy_timeout: float = 5.0,
    ):
        """Configure the pool. Connections are created by ``open``.

        Args:
            db_path: Path to SQLite database file, or ':memory:' for in-memory DB.
            size: Maximum number of connections.
            timeout: Seconds to wait in ``acquire`` before giving up.
            busy_timeout: Seconds SQLite waits on a locked database.
        """
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")
        if timeout <= 0:
            raise ValueError(f"Pool timeout must be positive, got {timeout}")

        self.db_path = db_path
        self.timeout = timeout
        self.busy_timeout = busy_timeout
        self._is_memory = db_path == MEMORY_DB
        if self._is_memory and size > 1:
            # Every connection to ':memory:' gets its own private database
            logger.info("In-memory database: limiting pool to a single connection")
            size = 1
        self.size = size

        self._connections: list[sqlite3.Connection] = []
        self._idle: Optional[asyncio.Queue] = None
        self._closed = False

    @property
    def idle(self) -> int:
        """Number of connections available right now."""
        return self._idle.qsize() if self._idle is not None else 0

    @property
    def is_open(self) -> bool:
        return self._idle is not None and not self._closed

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.busy_timeout,
            check_same_thread=False,
        )
        if not self._is_memory:
            conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def _connect_all(self) -> list[sqlite3.Connection]:
        connections: list[sqlite3.Connection] = []
        try:
            for _ in range(self.size):
                connections.append(self._create_connection())
        except sqlite3.Error as e:
            for conn in connections:
                conn.close()
            raise PoolError(f"Cannot open database {self.db_path!r}: {e}") from e
        return connections

    async def open(self) -> None:
        """Create all connections. Raises PoolError if the database can't be opened."""
        if self._idle is not None:
            raise PoolError("Pool is already open")

        self._connections = await asyncio.to_thread(self._connect_all)
        self._idle = asyncio.Queue(maxsize=self.size)
        for conn in self._connections:
            self._idle.put_nowait(conn)
        logger.info(f"Opened {self.size} connection(s) to {self.db_path}")

    async def close(self) -> None:
        """Close the pool. Connections still in use are closed on release."""
        if self._closed:
            return
        self._closed = True
        if self._idle is None:
            return

        while not self._idle.empty():
            conn = self._idle.get_nowait()
            conn.close()
            self._connections.remove(conn)
        logger.info(f"Closed connection pool for {self.db_path}")

    async def acquire(self) -> PooledConnection:
        """Wait for an idle connection and take it.

        Raises:
            PoolError: The pool is not open, or no connection became
                available within ``timeout`` seconds.
        """
        if not self.is_open:
            raise PoolError("Connection pool is not open")

        try:
            conn = self._idle.get_nowait()
        except asyncio.QueueEmpty:
            try:
                conn = await asyncio.wait_for(self._idle.get(), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise PoolError(
                    f"No database connection available after {self.timeout}s"
                ) from None
        return PooledConnection(conn)

    def release(self, handle: PooledConnection) -> None:
        """Give a connection back. Safe to call more than once."""
        if handle._released:
            return
        handle._released = True

        pending = handle._pending
        if pending is not None and not pending.done():
            logger.debug("Connection still busy; returning it when the call finishes")
            pending.add_done_callback(lambda fut: self._return(handle._conn, fut))
        else:
            self._return(handle._conn, pending)

    def _return(self, conn: sqlite3.Connection, finished: Optional[asyncio.Future]) -> None:
        if finished is not None and not finished.cancelled():
            # Mark the result as retrieved; the caller may be gone.
            finished.exception()

        if self._closed:
            conn.close()
            self._connections.remove(conn)
            return
        self._idle.put_nowait(conn)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[PooledConnection]:
        """Borrow a connection for the body of an ``async with`` block."""
        handle = await self.acquire()
        try:
            yield handle
        finally:
            self.release(handle)
