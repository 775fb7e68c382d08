"""Exception types raised by the todo data-access layer.

A lookup that finds nothing is not an error: ``TodoStore.get`` returns
``None`` for it. Everything below signals that the store itself failed.
"""


class TodoServiceError(Exception):
    """Base class for all todo service errors."""


class PoolError(TodoServiceError):
    """The connection pool could not hand out a connection."""


class DecodeError(TodoServiceError):
    """A storage row does not have the expected (id, task, done) shape."""


class StoreError(TodoServiceError):
    """A store operation failed."""


class StoreWriteError(StoreError):
    """An insert statement failed."""


class StoreReadError(StoreError):
    """A query failed or returned a row that could not be decoded."""


class StoreInvariantError(StoreError):
    """Storage returned data that breaks the id uniqueness guarantee."""
