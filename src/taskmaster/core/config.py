"""Configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

_TRUTHY = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Config:
    """Application configuration."""

    database_url: str | None = None
    http_timeout: float = 30.0
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Config:
        """Load configuration from environment and .env file.

        Args:
            env_file: Path to .env file. Ignored if it does not exist.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If HTTP_TIMEOUT is not a positive number.
        """
        config: dict[str, Any] = {}
        if env_file and env_file.exists():
            config = dict(dotenv_values(env_file))

        # Environment variables override .env file
        def get(name: str) -> str | None:
            value = os.environ.get(name) or config.get(name)
            return str(value) if value else None

        timeout_str = get("HTTP_TIMEOUT")
        http_timeout = 30.0
        if timeout_str is not None:
            try:
                http_timeout = float(timeout_str)
            except ValueError:
                raise ValueError(f"HTTP_TIMEOUT must be a number, got {timeout_str!r}") from None
            if http_timeout <= 0:
                raise ValueError("HTTP_TIMEOUT must be positive")

        return cls(
            database_url=get("DATABASE_URL"),
            http_timeout=http_timeout,
            log_level=(get("LOG_LEVEL") or "INFO").upper(),
            log_json=(get("LOG_JSON") or "").lower() in _TRUTHY,
        )

    def validate(self) -> list[str]:
        """Validate configuration.

        Returns:
            List of problems found (empty if valid).
        """
        problems = []
        if self.log_level not in _LOG_LEVELS:
            problems.append(f"LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}")
        if self.http_timeout <= 0:
            problems.append("HTTP_TIMEOUT must be positive")
        return problems

    def has_database(self) -> bool:
        """Check if a database URL is configured."""
        return bool(self.database_url)

    @property
    def async_database_url(self) -> str | None:
        """Database URL rewritten for an async driver."""
        db_url = self.database_url
        if db_url and db_url.startswith("postgresql://"):
            db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return db_url
