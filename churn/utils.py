"""Shared utility functions for churn.

Provides async command execution, Rich-based console reporting and a small
start/stop spinner handle used while external installers run.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from types import TracebackType

from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: int | None = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for as long as the process runs.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        OSError: If the executable cannot be started (e.g. not installed).
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {cmd if isinstance(cmd, str) else ' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Spinner handle
# ---------------------------------------------------------------------------


class Spinner:
    """A start/stop handle around a Rich status spinner.

    The caller owns the handle and decides when it runs; nothing is shared
    between handles.  ``stop`` is safe to call more than once.

    Usage::

        spinner = Spinner("Installing dependencies...")
        spinner.start()
        try:
            await run_command(...)
        finally:
            spinner.stop()
    """

    def __init__(self, message: str) -> None:
        self.message = message
        self._status: Status | None = None

    @property
    def active(self) -> bool:
        return self._status is not None

    def start(self) -> None:
        if self._status is not None:
            return
        self._status = console.status(f"[cyan]{self.message}[/cyan]", spinner="dots")
        self._status.start()

    def stop(self) -> None:
        if self._status is None:
            return
        self._status.stop()
        self._status = None

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(version: str) -> None:
    """Print the welcome panel shown before interactive questions."""
    console.print(
        Panel.fit(
            "[bold blue]churn[/bold blue] [dim]v" + version + "[/dim]\n"
            "Scaffold a backend or smart-contract project in seconds.",
            border_style="blue",
        )
    )
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_file_written(relative_path: str) -> None:
    """Print the dim one-line notice emitted for every generated file."""
    console.print(f"[dim]  created {relative_path}[/dim]")


def print_info(message: str) -> None:
    """Print a blue informational message."""
    console.print(f"[bold blue]{message}[/bold blue]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
