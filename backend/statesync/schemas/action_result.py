"""ActionResult: the result envelope for every server action.

Actions never raise across the client/server boundary. A rejected collection,
a missing principal and an internal failure all come back as
``success=False`` with a short, client-safe ``error`` string.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    """Standard result type for server actions."""

    success: bool
    data: T | None = None
    error: str | None = None


def success_result(data: T | None = None) -> ActionResult[T]:
    """Create a successful action result."""
    return ActionResult(success=True, data=data)


def error_result(error: str) -> ActionResult:
    """Create a failed action result."""
    return ActionResult(success=False, error=error)
