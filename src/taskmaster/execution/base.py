"""Operation contract and timing envelope.

Every operation kind exposes:
- kind: A reporting label (not required to be unique)
- execute(): An async call returning a Timed envelope

Operations never raise from execute(). Faults are converted into a failed
Result and the timing is captured by the operation itself, so the engine
never reads or writes timestamps on an operation instance.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Concatenate, Generic, ParamSpec, Protocol, TypeVar

from taskmaster.core.errors import OperationCancelledError
from taskmaster.core.types import Result

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

R = TypeVar("R", bound=Result)
R_co = TypeVar("R_co", bound=Result, covariant=True)
T = TypeVar("T")
P = ParamSpec("P")

# Reported in place of a missing start or end instant.
UNSET_INSTANT = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def elapsed_between(start: datetime | None, end: datetime | None) -> timedelta:
    """Return end - start, or zero if either instant is missing."""
    if start is None or end is None:
        return timedelta(0)
    return end - start


@dataclass(frozen=True)
class Timed(Generic[R_co]):
    """Result of one execution together with its own timing.

    Attributes:
        kind: Kind of the operation that produced the result.
        result: The operation's Result.
        start: Instant the execution started.
        end: Instant the execution finished.
    """

    kind: str
    result: R_co
    start: datetime | None = None
    end: datetime | None = None

    @property
    def elapsed(self) -> timedelta:
        """Time spent executing."""
        return elapsed_between(self.start, self.end)


class Operation(Protocol[R_co]):
    """Capability contract for a unit of I/O work.

    An operation generic over its concrete Result type lets homogeneous
    collections keep that type all the way to the reducer. Heterogeneous
    collections are simply Operation[Result].
    """

    @property
    def kind(self) -> str:
        """Reporting label for this operation."""
        ...

    async def execute(
        self,
        cancel_event: asyncio.Event | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> Timed[R_co]:
        """Run the operation and return its timed result. Never raises."""
        ...


class _HasKind(Protocol):
    @property
    def kind(self) -> str: ...


S = TypeVar("S", bound=_HasKind)


def timed_execution(
    execute: Callable[Concatenate[S, P], Awaitable[R]],
) -> Callable[Concatenate[S, P], Coroutine[Any, Any, Timed[R]]]:
    """Wrap an async execute method so it returns a Timed envelope.

    Example:
        >>> class Ping:
        ...     kind = "ping"
        ...
        ...     @timed_execution
        ...     async def execute(self, cancel_event=None, logger=None) -> IoResult:
        ...         return IoResult(success=True)

    Args:
        execute: Async method returning a Result.

    Returns:
        Async method returning Timed[Result] stamped with start and end.
    """

    @functools.wraps(execute)
    async def wrapper(self: S, *args: P.args, **kwargs: P.kwargs) -> Timed[R]:
        start = utcnow()
        result = await execute(self, *args, **kwargs)
        return Timed(kind=self.kind, result=result, start=start, end=utcnow())

    return wrapper


async def log_failure(
    logger: FilteringBoundLogger | None,
    kind: str,
    message: str,
    fault: BaseException | None = None,
) -> None:
    """Record an absorbed operation fault, if a logger was supplied."""
    if logger is None:
        return
    await logger.awarning(
        "operation_failed",
        kind=kind,
        error=message,
        error_type=type(fault).__name__ if fault is not None else None,
    )


async def run_cancellable(
    work: Coroutine[Any, Any, T],
    cancel_event: asyncio.Event | None,
) -> T:
    """Await work unless cancel_event is set first.

    Args:
        work: Coroutine doing the actual I/O.
        cancel_event: Advisory cancellation signal, may be None.

    Returns:
        The coroutine's return value.

    Raises:
        OperationCancelledError: If the event was set before the work finished.
    """
    if cancel_event is None:
        return await work
    if cancel_event.is_set():
        work.close()
        raise OperationCancelledError

    work_task = asyncio.ensure_future(work)
    cancel_task = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (work_task, cancel_task):
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    if work_task.cancelled():
        raise OperationCancelledError
    return work_task.result()
