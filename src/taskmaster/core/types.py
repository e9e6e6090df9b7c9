"""Shared type definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Result(Protocol):
    """Outcome of a single I/O operation.

    Every concrete result kind carries at least a success flag and an
    optional error message. Kind-specific payload (response body, rows)
    lives on the concrete class.
    """

    @property
    def success(self) -> bool: ...

    @property
    def error_message(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class IoResult:
    """Plain result with no payload.

    Attributes:
        success: Whether the operation completed successfully.
        error_message: Description of the fault when success is False.
    """

    success: bool
    error_message: str | None = None

    @classmethod
    def failed(cls, error_message: str) -> IoResult:
        """Create a failed result."""
        return cls(success=False, error_message=error_message)
