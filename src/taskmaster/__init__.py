"""Concurrent fan-out/fan-in executor for I/O-bound operations."""

from __future__ import annotations

from taskmaster.core.errors import OperationContractError, TaskMasterError
from taskmaster.core.types import IoResult, Result
from taskmaster.execution import (
    Operation,
    StatisticsRow,
    StatisticsTable,
    Timed,
    build_statistics_table,
    format_statistics,
    run_with_stats,
    summarize_results,
    timed_execution,
)

__version__ = "0.1.0"

__all__ = [
    "IoResult",
    "Operation",
    "OperationContractError",
    "Result",
    "StatisticsRow",
    "StatisticsTable",
    "TaskMasterError",
    "Timed",
    "build_statistics_table",
    "format_statistics",
    "run_with_stats",
    "summarize_results",
    "timed_execution",
]
