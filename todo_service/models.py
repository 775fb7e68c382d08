"""Pydantic models and row mapping for todo records."""

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import DecodeError

COLUMNS = ("id", "task", "done")


class Todo(BaseModel):
    """A todo item."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Unique todo identifier, assigned on creation")
    task: str = Field(description="What needs to be done")
    done: bool = Field(default=False, description="Whether the task is finished")


def _describe(value: Any) -> str:
    return "NULL" if value is None else type(value).__name__


def decode_row(row: Sequence[Any]) -> Todo:
    """Convert an ``(id, task, done)`` row into a Todo.

    SQLite has no boolean storage class, so ``done`` must be the integer
    0 or 1. Values are never coerced; any mismatch raises DecodeError.
    """
    if len(row) != len(COLUMNS):
        raise DecodeError(
            f"Expected {len(COLUMNS)} columns {COLUMNS}, got {len(row)}"
        )

    todo_id, task, done = row

    # bool is a subclass of int
    if type(todo_id) is not int:
        raise DecodeError(f"Column 'id': expected integer, got {_describe(todo_id)}")
    if not isinstance(task, str):
        raise DecodeError(f"Column 'task': expected text, got {_describe(task)}")
    if type(done) is not int or done not in (0, 1):
        raise DecodeError(f"Column 'done': expected 0 or 1, got {done!r}")

    return Todo(id=todo_id, task=task, done=bool(done))


def encode_task(task: str) -> tuple[str, int]:
    """Build the parameters for inserting a new, not-yet-done todo."""
    return (task, 0)
