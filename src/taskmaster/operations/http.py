"""HTTP request operation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from taskmaster.core.errors import OperationCancelledError
from taskmaster.execution.base import log_failure, run_cancellable, timed_execution

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


@dataclass(frozen=True, slots=True)
class HttpResult:
    """Result of an HTTP request.

    Attributes:
        success: Whether the request returned a non-error status.
        error_message: Transport error or HTTP status description on failure.
        status_code: HTTP status code, None if no response was received.
        body: Response body text, None if no response was received.
    """

    success: bool
    error_message: str | None = None
    status_code: int | None = None
    body: str | None = None


class HttpOperation:
    """Single HTTP request sent through a shared async client.

    Example:
        async with httpx.AsyncClient(timeout=30.0) as client:
            op = HttpOperation(client, "https://api.example.com/health")
            timed = await op.execute()
            print(timed.result.status_code, timed.elapsed)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        method: str = "GET",
    ) -> None:
        """Initialize HTTP operation.

        Args:
            client: Async HTTP client, owned by the caller.
            url: Absolute URL to request.
            method: HTTP method (GET, POST, etc.).
        """
        self._client = client
        self.url = url
        self.method = method.upper()

    @property
    def kind(self) -> str:
        """Reporting label, e.g. "HTTP GET https://host/path"."""
        return f"HTTP {self.method} {self.url}"

    @timed_execution
    async def execute(
        self,
        cancel_event: asyncio.Event | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> HttpResult:
        """Send the request.

        Args:
            cancel_event: Abandons the request when set.
            logger: Optional logger for failures.

        Returns:
            HttpResult. Status codes >= 400, transport errors and malformed
            URLs are reported as failures.
        """
        try:
            response = await run_cancellable(
                self._client.request(self.method, self.url),
                cancel_event,
            )
        except OperationCancelledError as e:
            return HttpResult(success=False, error_message=e.message)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            await log_failure(logger, self.kind, message, e)
            return HttpResult(success=False, error_message=message)

        if response.status_code >= 400:
            message = f"HTTP {response.status_code}: {response.reason_phrase}"
            await log_failure(logger, self.kind, message)
            return HttpResult(
                success=False,
                error_message=message,
                status_code=response.status_code,
                body=response.text,
            )

        return HttpResult(success=True, status_code=response.status_code, body=response.text)
