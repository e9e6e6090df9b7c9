"""Execution statistics table.

Turns per-operation timings and the run's phase boundaries into a fixed
schema table: one row per operation, in input order, followed by three
phase rows.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from taskmaster.execution.base import UNSET_INSTANT, Timed, elapsed_between

COLUMNS = ("TaskType", "StartTime", "EndTime", "ElapsedTime")

OVERALL_TASKS_LABEL = "Overall Tasks Execution"
AGGREGATION_LABEL = "Aggregation Processing"
OVERALL_LABEL = "Overall Execution"
PHASE_LABELS = (OVERALL_TASKS_LABEL, AGGREGATION_LABEL, OVERALL_LABEL)

_WIDTH = 81


@dataclass(frozen=True, slots=True)
class StatisticsRow:
    """One row of the statistics table.

    Attributes:
        label: Operation kind or phase name.
        start: Start instant, UNSET_INSTANT if unknown.
        end: End instant, UNSET_INSTANT if unknown.
        elapsed: end - start, or zero if either instant is unknown.
    """

    label: str
    start: datetime
    end: datetime
    elapsed: timedelta

    @classmethod
    def from_instants(
        cls,
        label: str,
        start: datetime | None,
        end: datetime | None,
    ) -> StatisticsRow:
        """Build a row, substituting the sentinel for missing instants."""
        return cls(
            label=label,
            start=start if start is not None else UNSET_INSTANT,
            end=end if end is not None else UNSET_INSTANT,
            elapsed=elapsed_between(start, end),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary keyed by column name."""
        return {
            "TaskType": self.label,
            "StartTime": self.start,
            "EndTime": self.end,
            "ElapsedTime": self.elapsed,
        }


@dataclass(frozen=True)
class StatisticsTable:
    """Ordered statistics rows for one run."""

    rows: tuple[StatisticsRow, ...] = field(default_factory=tuple)
    columns: tuple[str, ...] = COLUMNS

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[StatisticsRow]:
        return iter(self.rows)

    @property
    def operation_rows(self) -> tuple[StatisticsRow, ...]:
        """Rows for the individual operations."""
        return self.rows[: len(self.rows) - len(PHASE_LABELS)]

    @property
    def phase_rows(self) -> tuple[StatisticsRow, ...]:
        """The three trailing phase rows."""
        return self.rows[len(self.rows) - len(PHASE_LABELS) :]

    def row(self, label: str) -> StatisticsRow:
        """Get the first row with the given label.

        Raises:
            KeyError: If no row has that label.
        """
        for row in self.rows:
            if row.label == label:
                return row
        raise KeyError(label)

    def to_records(self) -> list[dict[str, Any]]:
        """Convert rows to a list of dictionaries."""
        return [row.to_dict() for row in self.rows]


def build_statistics_table(
    timings: Sequence[Timed[Any]],
    overall_start: datetime,
    tasks_end: datetime,
    overall_end: datetime,
    aggregation_start: datetime,
    aggregation_end: datetime,
) -> StatisticsTable:
    """Build the statistics table for a completed run.

    Args:
        timings: Timed envelopes in input operation order.
        overall_start: Instant the run started.
        tasks_end: Instant every operation had finished.
        overall_end: Instant the run finished.
        aggregation_start: Instant the reducer was invoked.
        aggregation_end: Instant the reducer returned.

    Returns:
        StatisticsTable with len(timings) + 3 rows.
    """
    rows = [StatisticsRow.from_instants(t.kind, t.start, t.end) for t in timings]
    rows.append(StatisticsRow.from_instants(OVERALL_TASKS_LABEL, overall_start, tasks_end))
    rows.append(StatisticsRow.from_instants(AGGREGATION_LABEL, aggregation_start, aggregation_end))
    rows.append(StatisticsRow.from_instants(OVERALL_LABEL, overall_start, overall_end))
    return StatisticsTable(rows=tuple(rows))


def _format_instant(instant: datetime) -> str:
    if instant == UNSET_INSTANT:
        return "-"
    return instant.strftime("%H:%M:%S.%f")[:-3]


def format_statistics(table: StatisticsTable) -> str:
    """Format a statistics table for display.

    Args:
        table: Statistics table.

    Returns:
        Formatted table string.
    """
    lines = [
        "=" * _WIDTH,
        f"{'Task':<40} {'Start':<14} {'End':<14} {'Elapsed':>10}",
        "-" * _WIDTH,
    ]
    for row in table.operation_rows:
        lines.append(_format_row(row))
    lines.append("-" * _WIDTH)
    for row in table.phase_rows:
        lines.append(_format_row(row))
    lines.append("=" * _WIDTH)
    return "\n".join(lines)


def _format_row(row: StatisticsRow) -> str:
    label = row.label if len(row.label) <= 40 else row.label[:37] + "..."
    return (
        f"{label:<40} {_format_instant(row.start):<14} {_format_instant(row.end):<14} "
        f"{row.elapsed.total_seconds():>9.3f}s"
    )
