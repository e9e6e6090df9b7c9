"""SQL query operation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskmaster.core.errors import OperationCancelledError
from taskmaster.execution.base import log_failure, run_cancellable, timed_execution

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine
    from structlog.typing import FilteringBoundLogger


@dataclass(frozen=True, slots=True)
class SqlResult:
    """Result of a SQL statement.

    Attributes:
        success: Whether the statement executed without error.
        error_message: Database error description on failure.
        rows: Returned rows as column -> value mappings.
        rowcount: Rows affected, as reported by the driver.
    """

    success: bool
    error_message: str | None = None
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0


class SqlOperation:
    """Single SQL statement executed on its own connection.

    Each execution checks a connection out of the engine's pool, so many
    SqlOperations on one engine run concurrently.

    Example:
        engine = create_async_engine("postgresql+asyncpg://localhost/app")
        op = SqlOperation(engine, "SELECT * FROM users WHERE id = :id", {"id": 1})
        timed = await op.execute()
    """

    def __init__(
        self,
        engine: AsyncEngine,
        statement: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Initialize SQL operation.

        Args:
            engine: Async SQLAlchemy engine, owned by the caller.
            statement: SQL text with optional :name bind parameters.
            params: Bind parameter values.
        """
        self._engine = engine
        self.statement = statement
        self.params = params or {}

    @property
    def kind(self) -> str:
        """Reporting label, e.g. "SQL: SELECT * FROM users"."""
        return f"SQL: {self.statement}"

    async def _run(self) -> SqlResult:
        async with self._engine.connect() as conn:
            result = await conn.execute(text(self.statement), self.params)
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
            rowcount = result.rowcount
            await conn.commit()
        return SqlResult(success=True, rows=rows, rowcount=rowcount)

    @timed_execution
    async def execute(
        self,
        cancel_event: asyncio.Event | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> SqlResult:
        """Execute the statement.

        Args:
            cancel_event: Abandons the statement when set.
            logger: Optional logger for failures.

        Returns:
            SqlResult with rows for row-returning statements.
        """
        try:
            return await run_cancellable(self._run(), cancel_event)
        except OperationCancelledError as e:
            return SqlResult(success=False, error_message=e.message)
        except (SQLAlchemyError, OSError) as e:
            message = f"{type(e).__name__}: {e}"
            await log_failure(logger, self.kind, message, e)
            return SqlResult(success=False, error_message=message)
