"""CLI entry point for taskmaster.

Usage:
    taskmaster --url https://api.example.com/a --url https://api.example.com/b
    taskmaster --query "SELECT * FROM users"      # needs DATABASE_URL
    taskmaster --simulate fetch:2 --simulate load:3:fail
    taskmaster --help                               # Show all options
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import httpx
import structlog
from sqlalchemy.exc import SQLAlchemyError

from taskmaster.core.config import Config
from taskmaster.core.errors import OperationContractError
from taskmaster.core.logging import configure_logging
from taskmaster.core.types import Result
from taskmaster.execution import (
    Operation,
    StatisticsTable,
    format_statistics,
    run_with_stats,
    summarize_results,
)
from taskmaster.operations import HttpOperation, SimulatedOperation, SqlOperation


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run I/O operations concurrently and report timing statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in current directory)",
    )
    parser.add_argument(
        "--url",
        action="append",
        default=[],
        metavar="URL",
        help="URL to GET (repeatable)",
    )
    parser.add_argument(
        "--query",
        action="append",
        default=[],
        metavar="SQL",
        help="SQL statement to run against DATABASE_URL (repeatable)",
    )
    parser.add_argument(
        "--simulate",
        action="append",
        default=[],
        metavar="KIND:SECONDS[:fail]",
        help="Simulated operation sleeping SECONDS, optionally failing (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    return parser.parse_args(argv)


def get_env_file(args: argparse.Namespace) -> Path | None:
    """Get the .env file path from args or default location."""
    env_file: Path = args.env_file if args.env_file is not None else Path.cwd() / ".env"
    return env_file if env_file.exists() else None


async def run_operations(
    args: argparse.Namespace,
    config: Config,
) -> tuple[str, StatisticsTable]:
    """Build the requested operations and run them.

    Args:
        args: Parsed arguments.
        config: Application configuration.

    Returns:
        Tuple of (summary, statistics table).
    """
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine(config.async_database_url) if args.query else None
    try:
        async with httpx.AsyncClient(timeout=config.http_timeout) as client:
            operations: list[Operation[Result]] = []
            operations.extend(HttpOperation(client, url) for url in args.url)
            if engine is not None:
                operations.extend(SqlOperation(engine, query) for query in args.query)
            operations.extend(SimulatedOperation.parse(spec) for spec in args.simulate)

            return await run_with_stats(
                operations,
                summarize_results,
                op_logger=structlog.get_logger("taskmaster.operations"),
            )
    finally:
        if engine is not None:
            await engine.dispose()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = parse_args(argv)

    try:
        config = Config.from_env(get_env_file(args))
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.log_level:
        config.log_level = args.log_level.upper()
    if args.json_logs:
        config.log_json = True

    errors = config.validate()
    if args.query and not config.has_database():
        errors.append("DATABASE_URL not configured (required for --query)")
    for spec in args.simulate:
        try:
            SimulatedOperation.parse(spec)
        except ValueError as e:
            errors.append(str(e))
    if not (args.url or args.query or args.simulate):
        errors.append("No operations given (use --url, --query or --simulate)")

    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level, json_output=config.log_json)

    try:
        summary, stats = asyncio.run(run_operations(args, config))
    except SQLAlchemyError as e:
        print(f"Database error: {e}", file=sys.stderr)
        sys.exit(1)
    except OperationContractError as e:
        print(f"Execution error: {e}", file=sys.stderr)
        sys.exit(1)

    print("Summary:")
    print(summary)
    print()
    print("Execution Statistics:")
    print(format_statistics(stats))


if __name__ == "__main__":
    main()
