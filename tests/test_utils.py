"""Unit tests for utility functions (absolute_create.utils).

Tests cover:
- run_command (success, failure, cwd, env vars, timeout)
- require_tool
- to_docker_project_name
- ensure_dir / write_text_file
- format_duration
- check_port_available / find_available_port
- Rich output helpers
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from absolute_create.errors import ExternalToolError, NoAvailablePortError
from absolute_create.utils import (
    check_port_available,
    create_progress,
    ensure_dir,
    find_available_port,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    require_tool,
    run_command,
    to_docker_project_name,
    write_text_file,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command(["echo", "hello"])
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.exit(3)"]
        )
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, stderr = await run_command(["pwd"], cwd=tmp_path)
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_env_is_merged(self):
        returncode, stdout, stderr = await run_command(
            ["sh", "-c", "echo $ABSOLUTE_TEST_VAR"], env={"ABSOLUTE_TEST_VAR": "merged"}
        )
        assert returncode == 0
        assert stdout == "merged"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        returncode, stdout, stderr = await run_command(["sleep", "5"], timeout=1)
        assert returncode == -1
        assert "timed out" in stderr


# ---------------------------------------------------------------------------
# require_tool
# ---------------------------------------------------------------------------


class TestRequireTool:
    @pytest.mark.unit
    def test_found(self):
        with patch("absolute_create.utils.shutil.which", return_value="/usr/bin/docker"):
            assert require_tool("docker", "install docker") == "/usr/bin/docker"

    @pytest.mark.unit
    def test_missing_raises_with_guidance(self):
        with patch("absolute_create.utils.shutil.which", return_value=None):
            with pytest.raises(ExternalToolError) as exc_info:
                require_tool("docker", "install docker")
        assert exc_info.value.tool == "docker"
        assert exc_info.value.guidance == "install docker"


# ---------------------------------------------------------------------------
# to_docker_project_name
# ---------------------------------------------------------------------------


class TestToDockerProjectName:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("my-app", "my-app"),
            ("My App", "my-app"),
            ("__demo__", "demo"),
            ("a!!b", "a-b"),
            ("   ", "absolutejs"),
            ("Proj_1", "proj_1"),
        ],
    )
    def test_names(self, name: str, expected: str):
        assert to_docker_project_name(name) == expected


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    def test_ensure_dir_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c"
        result = ensure_dir(target)
        assert target.is_dir()
        assert result == target.resolve()

    @pytest.mark.unit
    def test_ensure_dir_existing(self, tmp_path: Path):
        assert ensure_dir(tmp_path) == tmp_path.resolve()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_write_text_file_creates_parents(self, tmp_path: Path):
        path = await write_text_file(tmp_path / "src" / "backend" / "server.ts", "new Elysia()\n")
        assert path.read_text(encoding="utf-8") == "new Elysia()\n"


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0.5, "0.5s"), (42, "42.0s"), (125, "2m 5s"), (3725, "62m 5s"), (-1, "0.0s")],
    )
    def test_format(self, seconds: float, expected: str):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------


class TestPorts:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_check_port_available_when_bindable(self):
        with patch("absolute_create.utils.socket.socket") as mock_socket:
            mock_socket.return_value.__enter__.return_value.bind.return_value = None
            assert await check_port_available(5432) is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_check_port_in_use(self):
        with patch("absolute_create.utils.socket.socket") as mock_socket:
            mock_socket.return_value.__enter__.return_value.bind.side_effect = OSError("in use")
            assert await check_port_available(5432) is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_find_available_port_skips_bound_ports(self):
        probe = AsyncMock(side_effect=[False, False, True])
        with patch("absolute_create.utils.check_port_available", probe):
            port = await find_available_port(5432, max_attempts=10)
        assert port == 5434
        assert [call.args[0] for call in probe.await_args_list] == [5432, 5433, 5434]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_find_available_port_gives_up(self):
        probe = AsyncMock(return_value=False)
        with patch("absolute_create.utils.check_port_available", probe):
            with pytest.raises(NoAvailablePortError) as exc_info:
                await find_available_port(3306, max_attempts=3)
        assert probe.await_count == 3
        assert exc_info.value.start == 3306
        assert exc_info.value.attempts == 3


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_print_helpers_do_not_raise(self):
        print_success("done")
        print_warning("careful")
        print_error("broken")
        print_summary_table({"Files": "12", "Location": "/tmp/demo"}, title="demo")

    @pytest.mark.unit
    def test_create_progress(self):
        with create_progress() as progress:
            task = progress.add_task("Generating", total=None)
            assert task is not None
