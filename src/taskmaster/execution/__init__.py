"""Execution engine and statistics.

Operations are started together, awaited together, and reported as:
1. One row per operation, in input order
2. Overall Tasks Execution
3. Aggregation Processing
4. Overall Execution
"""

from __future__ import annotations

from taskmaster.execution.base import (
    UNSET_INSTANT,
    Operation,
    Timed,
    run_cancellable,
    timed_execution,
)
from taskmaster.execution.engine import run_with_stats, summarize_results
from taskmaster.execution.stats import (
    COLUMNS,
    PHASE_LABELS,
    StatisticsRow,
    StatisticsTable,
    build_statistics_table,
    format_statistics,
)

__all__ = [
    "COLUMNS",
    "PHASE_LABELS",
    "UNSET_INSTANT",
    "Operation",
    "StatisticsRow",
    "StatisticsTable",
    "Timed",
    "build_statistics_table",
    "format_statistics",
    "run_cancellable",
    "run_with_stats",
    "summarize_results",
    "timed_execution",
]
