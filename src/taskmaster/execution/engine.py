"""Fan-out/fan-in execution engine.

Runs a collection of operations concurrently, waits for all of them, reduces
their results and reports timings:

    summary, stats = await run_with_stats(operations, summarize_results)

The engine suspends exactly once, while waiting for every operation. The
reducer and the statistics builder run synchronously afterwards.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

import structlog

from taskmaster.core.errors import OperationContractError
from taskmaster.core.types import Result
from taskmaster.execution.base import Operation, Timed, utcnow
from taskmaster.execution.stats import StatisticsTable, build_statistics_table

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

logger = structlog.get_logger(__name__)

R = TypeVar("R", bound=Result)
T = TypeVar("T")


async def run_with_stats(
    operations: Sequence[Operation[R]],
    reducer: Callable[[list[R]], T],
    cancel_event: asyncio.Event | None = None,
    op_logger: FilteringBoundLogger | None = None,
) -> tuple[T, StatisticsTable]:
    """Execute operations concurrently and collect statistics.

    A homogeneous sequence (e.g. list[HttpOperation]) keeps its concrete
    result type for the reducer; a mixed sequence hands the reducer the
    base Result type.

    Args:
        operations: Operations to run. All are started at once.
        reducer: Called once with every Result, in input order.
        cancel_event: Advisory cancellation signal forwarded to every
            operation. The engine still waits for all of them.
        op_logger: Logger forwarded to operations for fault diagnostics.

    Returns:
        Tuple of (reducer output, statistics table).

    Raises:
        OperationContractError: If an operation raised or did not return a
            Timed envelope. No statistics are produced.
        Exception: Anything raised by the reducer, unchanged.
    """
    overall_start = utcnow()
    logger.debug("run_started", operations=len(operations))

    outcomes = await asyncio.gather(
        *(_execute(operation, cancel_event, op_logger) for operation in operations),
        return_exceptions=True,
    )
    tasks_end = utcnow()

    timings = _check_outcomes(operations, outcomes)
    results = [timed.result for timed in timings]

    aggregation_start = utcnow()
    reduced = reducer(results)
    aggregation_end = utcnow()

    overall_end = utcnow()
    table = build_statistics_table(
        timings,
        overall_start=overall_start,
        tasks_end=tasks_end,
        overall_end=overall_end,
        aggregation_start=aggregation_start,
        aggregation_end=aggregation_end,
    )

    failures = sum(1 for result in results if not result.success)
    logger.info(
        "run_completed",
        total=len(results),
        succeeded=len(results) - failures,
        failed=failures,
        tasks_seconds=round((tasks_end - overall_start).total_seconds(), 4),
        overall_seconds=round((overall_end - overall_start).total_seconds(), 4),
    )
    return reduced, table


async def _execute(
    operation: Operation[R],
    cancel_event: asyncio.Event | None,
    op_logger: FilteringBoundLogger | None,
) -> Timed[R]:
    # Faults raised while calling execute, before it returns an awaitable,
    # surface through gather like any other raised outcome.
    return await operation.execute(cancel_event, op_logger)


def _check_outcomes(
    operations: Sequence[Operation[R]],
    outcomes: Sequence[object],
) -> list[Timed[R]]:
    """Validate gathered outcomes against the operation contract.

    Raises:
        OperationContractError: For the first operation, in input order, that
            raised or returned something other than a Timed envelope.
    """
    timings: list[Timed[R]] = []
    for operation, outcome in zip(operations, outcomes, strict=True):
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, Exception):
            logger.error(
                "contract_violation",
                kind=operation.kind,
                error=str(outcome),
                error_type=type(outcome).__name__,
            )
            raise OperationContractError(operation.kind, f"raised {outcome!r}") from outcome
        if not isinstance(outcome, Timed):
            logger.error("contract_violation", kind=operation.kind, returned=type(outcome).__name__)
            raise OperationContractError(
                operation.kind,
                f"returned {type(outcome).__name__} instead of a timed result",
            )
        timings.append(outcome)
    return timings


def summarize_results(results: Sequence[Result]) -> str:
    """Count successes and failures.

    Returns:
        Summary such as "Total=3, Success=2, Failures=1".
    """
    total = len(results)
    succeeded = sum(1 for result in results if result.success)
    return f"Total={total}, Success={succeeded}, Failures={total - succeeded}"
