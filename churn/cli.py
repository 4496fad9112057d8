"""Command-line entry point.

``churn [project-name] [flags]``: any ``--`` flag makes the run
non-interactive; otherwise the choices are asked for interactively.
"""

from __future__ import annotations

import asyncio
import sys

from pydantic import ValidationError

from churn import __version__
from churn.config import Configuration, resolve_configuration
from churn.errors import ChurnError
from churn.flags import has_flags, parse_flags, show_help
from churn.prompts import collect_configuration
from churn.scaffolder import ProjectGenerator, ScaffoldResult
from churn.utils import console, print_banner, print_success, print_summary_table, print_warning


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``churn`` and ``python -m churn``."""
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        config = _configure(args)
        if config is None:
            sys.exit(0)
        result = asyncio.run(ProjectGenerator(config).generate())
    except ChurnError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)
    except ValidationError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid configuration\n{exc}")
        sys.exit(1)

    print_next_steps(config, result)


def _configure(args: list[str]) -> Configuration | None:
    """Build the configuration from flags, or interactively without them.

    Returns ``None`` after ``--help`` or when the user cancels.
    """
    if any(arg in ("--help", "-h") for arg in args) or has_flags(args):
        parsed = parse_flags(args)
        if parsed.help_requested:
            show_help()
            return None
        raw = dict(parsed.values)
        if parsed.project_name:
            raw["project_name"] = parsed.project_name
        return resolve_configuration(raw)

    print_banner(__version__)
    project_name = args[0] if args else None
    return collect_configuration(project_name)


def print_next_steps(config: Configuration, result: ScaffoldResult) -> None:
    """Summarise the generated project and what to run next."""
    console.print()
    print_success(f"Project {config.project_name} created in {result.root}")

    if config.is_solidity:
        summary = {
            "Language": "Solidity",
            "Framework": config.evm_framework or "",
            "Contracts": config.contract_type or "",
            "Standard": config.token_standard or "-",
            "Proxy": config.proxy or "",
        }
    else:
        summary = {
            "Language": "TypeScript" if config.is_typescript else "JavaScript",
            "Package manager": config.package_manager,
            "Protocol": config.protocol,
            "ORM": config.orm if config.database is None else f"{config.orm} ({config.database})",
            "Auth": config.auth,
            "Testing": config.testing,
            "Linting": "yes" if config.linting else "no",
            "Docker": "yes" if config.docker else "no",
            "CI/CD": config.cicd,
        }
    summary["Files"] = str(len(result.files))
    print_summary_table(summary, title="Project")

    for warning in result.warnings:
        print_warning(warning)

    console.print("[bold]Next steps:[/bold]")
    console.print(f"  cd {result.root}")
    if config.is_solidity and config.evm_framework == "foundry":
        console.print("  forge build")
        console.print("  forge test")
    elif config.is_solidity:
        if not result.installed:
            console.print(f"  {config.pm.install_command}")
        console.print(f"  {config.pm.run} test")
    else:
        if not result.installed:
            console.print(f"  {config.pm.install_command}")
        console.print(f"  {config.pm.run} dev")
    console.print()
