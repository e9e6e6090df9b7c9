"""Simulated I/O operation.

Sleeps for a fixed delay instead of touching the network. Used by the CLI
demo and for exercising the engine without external services.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from taskmaster.core.errors import OperationCancelledError
from taskmaster.core.types import IoResult
from taskmaster.execution.base import log_failure, run_cancellable, timed_execution

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


class SimulatedOperation:
    """Operation that waits `delay` seconds, then succeeds or fails."""

    def __init__(
        self,
        kind: str,
        delay: float,
        fail: bool = False,
        error_message: str = "simulated failure",
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._kind = kind
        self.delay = delay
        self.fail = fail
        self.error_message = error_message

    @property
    def kind(self) -> str:
        return self._kind

    @timed_execution
    async def execute(
        self,
        cancel_event: asyncio.Event | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> IoResult:
        try:
            await run_cancellable(asyncio.sleep(self.delay), cancel_event)
        except OperationCancelledError as e:
            return IoResult.failed(e.message)

        if self.fail:
            await log_failure(logger, self.kind, self.error_message)
            return IoResult.failed(self.error_message)
        return IoResult(success=True)

    @classmethod
    def parse(cls, spec: str) -> SimulatedOperation:
        """Create from a "KIND:SECONDS[:fail]" string.

        Raises:
            ValueError: If the string is malformed.
        """
        parts = spec.split(":")
        if len(parts) not in (2, 3) or not parts[0]:
            raise ValueError(f"Expected KIND:SECONDS[:fail], got {spec!r}")
        try:
            delay = float(parts[1])
        except ValueError:
            raise ValueError(f"Invalid delay in {spec!r}") from None
        if len(parts) == 3 and parts[2] != "fail":
            raise ValueError(f"Unknown flag {parts[2]!r} in {spec!r}")
        return cls(kind=parts[0], delay=delay, fail=len(parts) == 3)
