"""Shared helpers for absolute-create.

Subprocess execution for the external tools the scaffolder drives (docker,
sqlite3, git, bun), file writes, Rich console output and host port
probing for local database containers.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
import socket
from collections.abc import Mapping, Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .errors import ExternalToolError, NoAvailablePortError

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# External tools
# ---------------------------------------------------------------------------


async def run_command(
    cmd: Sequence[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    env: Mapping[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run *cmd* without a shell and collect its output.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Seconds to wait before the child is killed.
        env: Variables layered over the current environment.

    Returns:
        ``(returncode, stdout, stderr)`` with both streams decoded and
        stripped.  A timed-out command reports returncode ``-1``.
    """
    argv = list(cmd)
    process = await asyncio.create_subprocess_exec(
        *argv,
        cwd=None if cwd is None else str(cwd),
        env=None if not env else {**os.environ, **env},
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"Command timed out after {timeout}s: {' '.join(argv)}"

    def _text(data: bytes | None) -> str:
        return (data or b"").decode("utf-8", errors="replace").strip()

    return process.returncode or 0, _text(out), _text(err)


def require_tool(tool: str, guidance: str) -> str:
    """Return the absolute path of *tool* on ``PATH``.

    Raises:
        ExternalToolError: If the executable cannot be found.
    """
    path = shutil.which(tool)
    if path is None:
        raise ExternalToolError(tool, guidance)
    return path


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def to_docker_project_name(name: str) -> str:
    """Convert a project name to a valid Docker Compose project name.

    Compose project names may only contain lowercase letters, digits,
    hyphens and underscores, and must start with a letter or digit.

    Examples::

        to_docker_project_name("My App") -> "my-app"
        to_docker_project_name("__demo__") -> "demo"
    """
    result = re.sub(r"[^a-z0-9_-]", "-", name.strip().lower())
    result = re.sub(r"-+", "-", result)
    result = result.strip("-_")
    return result or "absolutejs"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create *path* and any missing parents; return it resolved."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory.resolve()


async def write_text_file(path: str | Path, content: str) -> Path:
    """Write *content* as UTF-8 from a worker thread, creating parent directories."""
    target = Path(path)

    def _write() -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)
    return target


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Render an elapsed time for the summary table.

    Under a minute this is tenths of a second (``"3.7s"``); from a minute
    on it is whole minutes and seconds (``"1m 5s"``).
    """
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes}m {remainder}s"


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print *data* as a borderless two-column table."""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column()
    for label, value in data.items():
        table.add_row(label, str(value))
    console.print()
    console.print(table)


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Errors go to stderr so they survive ``> /dev/null``.

    *message* is printed literally; it often echoes user input.
    """
    err_console.print(f"[bold red]error:[/bold red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    console.print(f"[yellow]warning:[/yellow] {message}", highlight=False)


def create_progress() -> Progress:
    """A transient spinner shown while the project is generated."""
    return Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


# ---------------------------------------------------------------------------
# Host ports
# ---------------------------------------------------------------------------


async def check_port_available(port: int, host: str = "127.0.0.1") -> bool:
    """Return whether *port* on *host* can be bound right now.

    The probe socket is closed immediately; nothing keeps the port
    reserved for the container that will later publish it.
    """

    def _bind() -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
            except OSError:
                return False
        return True

    return await asyncio.to_thread(_bind)


async def find_available_port(
    start: int,
    max_attempts: int = 100,
    host: str = "127.0.0.1",
) -> int:
    """Return the first free port at or above *start*.

    Ports are probed one at a time, in order, so the lowest free port wins.

    Raises:
        NoAvailablePortError: If ``max_attempts`` consecutive ports are bound.
    """
    for port in range(start, start + max_attempts):
        if await check_port_available(port, host):
            return port
    raise NoAvailablePortError(start, max_attempts)
