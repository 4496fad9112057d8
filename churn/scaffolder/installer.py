"""Dependency installation for freshly generated projects.

Every step runs the external tool with inherited stdio and no timeout.  A
failure is never fatal: the step's warning is printed together with the
command to run by hand, and returned to the caller.
"""

from __future__ import annotations

from pathlib import Path

from churn.config import Configuration
from churn.utils import Spinner, print_info, print_success, print_warning, run_command


# Libraries fetched with ``forge install``, in order.  The upgradeable
# contracts are only needed behind a proxy.
FOUNDRY_LIBRARIES: tuple[tuple[str, bool], ...] = (
    ("OpenZeppelin/openzeppelin-contracts", False),
    ("OpenZeppelin/openzeppelin-contracts-upgradeable", True),
    ("foundry-rs/forge-std", False),
)


def foundry_install_commands(config: Configuration) -> list[list[str]]:
    """``forge install`` argv lists for *config*'s libraries."""
    upgradeable = config.proxy not in (None, "none")
    return [
        ["forge", "install", library, "--no-git"]
        for library, proxy_only in FOUNDRY_LIBRARIES
        if upgradeable or not proxy_only
    ]


async def run_install(config: Configuration, cwd: Path) -> list[str]:
    """Install Node dependencies with the configured package manager.

    Returns:
        Warnings for a failed install; empty on success.
    """
    pm = config.pm
    warning = await _run_step(list(pm.install), cwd, f"Installing dependencies with {pm.name}...")
    if warning:
        return [warning]
    print_success(f"Dependencies installed with {pm.name}")
    return []


async def fetch_contract_dependencies(config: Configuration, cwd: Path) -> list[str]:
    """Fetch Foundry libraries; each fetch succeeds or fails on its own."""
    warnings: list[str] = []
    for command in foundry_install_commands(config):
        warning = await _run_step(command, cwd, f"Fetching {command[2]}...")
        if warning:
            warnings.append(warning)
    if not warnings:
        print_success("Contract dependencies installed")
    return warnings


async def _run_step(command: list[str], cwd: Path, message: str) -> str | None:
    """Run one install command; return a warning instead of raising."""
    display = " ".join(command)
    print_info(message)
    spinner = Spinner(message)
    spinner.start()
    try:
        returncode, _stdout, _stderr = await run_command(
            command, cwd=cwd, timeout=None, capture=False
        )
    except OSError as exc:
        warning = f"Could not run `{display}`: {exc}"
    else:
        warning = None if returncode == 0 else f"`{display}` exited with code {returncode}"
    finally:
        spinner.stop()

    if warning:
        print_warning(warning)
        print_info(f"You can run `{display}` manually later.")
    return warning
