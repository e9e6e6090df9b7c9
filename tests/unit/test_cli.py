"""Tests for taskmaster.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from taskmaster import cli
from taskmaster.core.config import Config
from taskmaster.core.errors import OperationContractError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove config variables from the environment."""
    for name in ("DATABASE_URL", "HTTP_TIMEOUT", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def no_env_file(tmp_path: Path) -> list[str]:
    """Arguments pointing at a .env file that does not exist."""
    return ["--env-file", str(tmp_path / "missing.env")]


class TestParseArgs:
    """Tests for parse_args function."""

    def test_defaults(self) -> None:
        """Test default argument values."""
        args = cli.parse_args([])

        assert args.url == []
        assert args.query == []
        assert args.simulate == []
        assert args.env_file is None
        assert args.log_level is None
        assert args.json_logs is False

    def test_repeatable_options(self) -> None:
        """Test --url, --query and --simulate accumulate."""
        args = cli.parse_args(
            [
                "--url", "https://a.test/",
                "--url", "https://b.test/",
                "--query", "SELECT 1",
                "--simulate", "x:1",
            ]
        )

        assert args.url == ["https://a.test/", "https://b.test/"]
        assert args.query == ["SELECT 1"]
        assert args.simulate == ["x:1"]


class TestGetEnvFile:
    """Tests for get_env_file."""

    def test_existing_file(self, tmp_path: Path) -> None:
        """Test an existing file is returned."""
        env_file = tmp_path / ".env"
        env_file.write_text("LOG_LEVEL=DEBUG\n")

        args = cli.parse_args(["--env-file", str(env_file)])

        assert cli.get_env_file(args) == env_file

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file yields None."""
        args = cli.parse_args(["--env-file", str(tmp_path / "nope.env")])
        assert cli.get_env_file(args) is None


class TestMain:
    """Tests for main function."""

    def test_no_operations(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test running with nothing to do exits with an error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(no_env_file)

        assert exc_info.value.code == 1
        assert "No operations given" in capsys.readouterr().err

    def test_query_without_database(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test --query requires DATABASE_URL."""
        with pytest.raises(SystemExit):
            cli.main([*no_env_file, "--query", "SELECT 1"])

        assert "DATABASE_URL not configured" in capsys.readouterr().err

    def test_bad_simulate_spec(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test malformed --simulate values are reported."""
        with pytest.raises(SystemExit):
            cli.main([*no_env_file, "--simulate", "oops"])

        assert "KIND:SECONDS" in capsys.readouterr().err

    def test_bad_config(
        self,
        no_env_file: list[str],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test configuration errors exit with status 1."""
        monkeypatch.setenv("HTTP_TIMEOUT", "never")

        with pytest.raises(SystemExit) as exc_info:
            cli.main([*no_env_file, "--simulate", "a:0"])

        assert exc_info.value.code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_runs_simulated_operations(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a full run prints the summary and statistics."""
        with patch.object(cli, "configure_logging") as mock_configure:
            cli.main([*no_env_file, "--simulate", "fetch:0", "--simulate", "load:0:fail"])

        mock_configure.assert_called_once_with("INFO", json_output=False)
        out = capsys.readouterr().out
        assert "Total=2, Success=1, Failures=1" in out
        assert "fetch" in out
        assert "load" in out
        assert "Overall Execution" in out

    def test_sync_database_driver(
        self,
        no_env_file: list[str],
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test a DATABASE_URL without an async driver is reported, not raised."""
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'sync.db'}")

        with patch.object(cli, "configure_logging"), pytest.raises(SystemExit) as exc_info:
            cli.main([*no_env_file, "--query", "SELECT 1"])

        assert exc_info.value.code == 1
        assert "Database error" in capsys.readouterr().err

    def test_contract_violation(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a broken operation exits with status 1 and a message."""
        failing_run = AsyncMock(
            side_effect=OperationContractError("fetch", "raised RuntimeError()")
        )

        with (
            patch.object(cli, "configure_logging"),
            patch.object(cli, "run_with_stats", failing_run),
            pytest.raises(SystemExit) as exc_info,
        ):
            cli.main([*no_env_file, "--simulate", "fetch:0"])

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Execution error" in err
        assert "Operation 'fetch' violated its contract" in err

    def test_log_options_override_config(
        self, no_env_file: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test --log-level and --json-logs are applied."""
        with patch.object(cli, "configure_logging") as mock_configure:
            cli.main([*no_env_file, "--simulate", "a:0", "--log-level", "debug", "--json-logs"])

        mock_configure.assert_called_once_with("DEBUG", json_output=True)


class TestRunOperations:
    """Tests for run_operations."""

    @pytest.mark.asyncio
    async def test_builds_each_kind(self, tmp_path: Path) -> None:
        """Test URLs, queries and simulations all become operations."""
        config = Config(database_url=f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
        args = cli.parse_args(
            ["--url", "https://a.test/", "--query", "SELECT 1 AS one", "--simulate", "s:0"]
        )

        with patch("httpx.AsyncClient.request") as mock_request:
            mock_request.side_effect = httpx.ConnectError("offline")
            summary, stats = await cli.run_operations(args, config)

        assert summary == "Total=3, Success=2, Failures=1"
        assert [row.label for row in stats.operation_rows] == [
            "HTTP GET https://a.test/",
            "SQL: SELECT 1 AS one",
            "s",
        ]
