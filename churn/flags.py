"""Non-interactive flag parsing.

Every flag maps to exactly one ``(field, value)`` pair on the configuration.
The argparse parser, the lookup table and the help screen are all built from
``FLAG_GROUPS`` so the three never disagree.  Later flags override earlier
ones on the same axis.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field
from rich.panel import Panel
from rich.table import Table

from churn.errors import UnknownFlagError
from churn.utils import console


@dataclass(frozen=True)
class FlagSpec:
    """One flag (with aliases) and the configuration value it sets."""

    names: tuple[str, ...]
    field: str
    value: Any
    help: str


# ---------------------------------------------------------------------------
# Flag table
# ---------------------------------------------------------------------------

FLAG_GROUPS: list[tuple[str, list[FlagSpec]]] = [
    ("Language", [
        FlagSpec(("--ts", "--typescript"), "language", "ts", "Use TypeScript (default)"),
        FlagSpec(("--js", "--javascript"), "language", "js", "Use JavaScript"),
        FlagSpec(("--solidity", "--sol"), "language", "solidity", "Use Solidity (smart contracts)"),
    ]),
    ("Package Manager", [
        FlagSpec(("--bun",), "package_manager", "bun", "Use Bun (default)"),
        FlagSpec(("--npm",), "package_manager", "npm", "Use npm"),
        FlagSpec(("--yarn",), "package_manager", "yarn", "Use Yarn"),
        FlagSpec(("--pnpm",), "package_manager", "pnpm", "Use pnpm"),
    ]),
    ("Protocol", [
        FlagSpec(("--http",), "protocol", "http", "HTTP/REST API (default)"),
        FlagSpec(("--ws", "--websocket"), "protocol", "ws", "WebSocket server"),
        FlagSpec(("--cors",), "cors", True, "Enable CORS (default for HTTP)"),
        FlagSpec(("--no-cors",), "cors", False, "Disable CORS"),
    ]),
    ("ORM/ODM", [
        FlagSpec(("--prisma",), "orm", "prisma", "Use Prisma (default)"),
        FlagSpec(("--drizzle",), "orm", "drizzle", "Use Drizzle"),
        FlagSpec(("--typeorm",), "orm", "typeorm", "Use TypeORM"),
        FlagSpec(("--sequelize",), "orm", "sequelize", "Use Sequelize"),
        FlagSpec(("--mongoose",), "orm", "mongoose", "Use Mongoose"),
        FlagSpec(("--no-orm",), "orm", "none", "Skip ORM setup"),
    ]),
    ("Database", [
        FlagSpec(("--postgresql", "--postgres"), "database", "postgresql", "PostgreSQL (default)"),
        FlagSpec(("--mysql",), "database", "mysql", "MySQL"),
        FlagSpec(("--sqlite",), "database", "sqlite", "SQLite"),
        FlagSpec(("--mongodb",), "database", "mongodb", "MongoDB (automatic with Mongoose)"),
    ]),
    ("EVM Framework (with --solidity)", [
        FlagSpec(("--hardhat",), "evm_framework", "hardhat", "Hardhat (default)"),
        FlagSpec(("--foundry",), "evm_framework", "foundry", "Foundry"),
        FlagSpec(("--no-framework",), "evm_framework", "none", "Plain solc + ethers scripts"),
    ]),
    ("Contract Type (with --solidity)", [
        FlagSpec(("--token",), "contract_type", "token", "ERC20 token contract (default)"),
        FlagSpec(("--nft",), "contract_type", "nft", "NFT contract (ERC721/ERC1155)"),
        FlagSpec(("--both-contracts",), "contract_type", "both", "Token and NFT contracts"),
        FlagSpec(("--no-contracts",), "contract_type", "none", "Skip contract generation"),
    ]),
    ("Token Standard (with --solidity)", [
        FlagSpec(("--erc20",), "token_standard", "erc20", "ERC20 (always used with --token)"),
        FlagSpec(("--erc721",), "token_standard", "erc721", "ERC721 (default for --nft)"),
        FlagSpec(("--erc1155",), "token_standard", "erc1155", "ERC1155 multi-token"),
    ]),
    ("Proxy Pattern (with --solidity)", [
        FlagSpec(("--uups",), "proxy", "uups", "UUPS upgradeable proxy"),
        FlagSpec(("--transparent",), "proxy", "transparent", "Transparent upgradeable proxy"),
        FlagSpec(("--no-proxy",), "proxy", "none", "Non-upgradeable contracts (default)"),
    ]),
    ("TypeScript", [
        FlagSpec(("--aliases",), "aliases", True, "Enable path aliases (default)"),
        FlagSpec(("--no-aliases",), "aliases", False, "Disable path aliases"),
    ]),
    ("Authentication", [
        FlagSpec(("--jwt",), "auth", "jwt", "JWT authentication"),
        FlagSpec(("--oauth",), "auth", "oauth", "OAuth (Google, GitHub)"),
        FlagSpec(("--session",), "auth", "session", "Session-based auth"),
        FlagSpec(("--no-auth",), "auth", "none", "Skip authentication (default)"),
    ]),
    ("Testing", [
        FlagSpec(("--jest",), "testing", "jest", "Jest"),
        FlagSpec(("--vitest",), "testing", "vitest", "Vitest"),
        FlagSpec(("--no-testing",), "testing", "none", "Skip testing setup (default)"),
    ]),
    ("Code Quality", [
        FlagSpec(("--linting",), "linting", True, "ESLint + Prettier + lint-staged (default)"),
        FlagSpec(("--no-linting",), "linting", False, "Skip linting setup"),
    ]),
    ("DevOps", [
        FlagSpec(("--docker",), "docker", True, "Add Docker support"),
        FlagSpec(("--no-docker",), "docker", False, "Skip Docker (default)"),
        FlagSpec(("--github",), "cicd", "github", "GitHub Actions"),
        FlagSpec(("--gitlab",), "cicd", "gitlab", "GitLab CI"),
        FlagSpec(("--circleci",), "cicd", "circleci", "CircleCI"),
        FlagSpec(("--no-cicd",), "cicd", "none", "Skip CI/CD setup (default)"),
    ]),
]

FLAG_TABLE: dict[str, tuple[str, Any]] = {
    name: (spec.field, spec.value)
    for _group, specs in FLAG_GROUPS
    for spec in specs
    for name in spec.names
}

HELP_FLAGS = ("--help", "-h")

EXAMPLES: list[tuple[str, str]] = [
    ("Full-stack TypeScript API", "churn my-api --ts --bun --drizzle --postgresql --jwt --jest --docker"),
    ("Minimal JavaScript API", "churn simple-api --js --npm --no-orm --no-auth --no-testing"),
    ("WebSocket server with MongoDB", "churn realtime-app --ws --mongoose --session --vitest"),
    ("Solidity contracts with Hardhat", "churn my-contracts --solidity --hardhat --token --uups"),
    ("NFT project with Foundry", "churn nft-project --solidity --foundry --nft --erc721 --no-proxy"),
]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParsedFlags(BaseModel):
    """Raw result of reading argv; not yet a Configuration."""

    project_name: str | None = Field(default=None, description="First non-flag token")
    values: dict[str, Any] = Field(default_factory=dict, description="field -> value from flags")
    help_requested: bool = False


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="churn", add_help=False, allow_abbrev=False, exit_on_error=False
    )
    parser.add_argument(*HELP_FLAGS, dest="help", action="store_true")
    for name, (field, value) in FLAG_TABLE.items():
        parser.add_argument(name, dest=field, action="store_const", const=value)
    return parser


def parse_flags(argv: list[str]) -> ParsedFlags:
    """Read a project name and flag values from *argv* (program name excluded).

    Raises:
        UnknownFlagError: For the first flag that is not in ``FLAG_TABLE``.
    """
    project_name = argv[0] if argv and not argv[0].startswith("-") else None
    flag_tokens = [token for token in argv if token.startswith("-")]

    try:
        namespace, unknown = _build_parser().parse_known_args(flag_tokens)
    except argparse.ArgumentError as exc:
        # e.g. "--ts=foo": a known flag given a value it does not take
        known = set(FLAG_TABLE) | set(HELP_FLAGS)
        bad = next((token for token in flag_tokens if token not in known), str(exc))
        raise UnknownFlagError(bad) from exc
    if namespace.help:
        return ParsedFlags(project_name=project_name, help_requested=True)
    if unknown:
        raise UnknownFlagError(unknown[0])

    values = {
        field: value
        for field, value in vars(namespace).items()
        if field != "help" and value is not None
    }
    return ParsedFlags(project_name=project_name, values=values)


def has_flags(argv: list[str]) -> bool:
    """Any ``--`` token switches the whole run to non-interactive mode."""
    return any(token.startswith("--") for token in argv)


def show_help() -> None:
    """Print usage, every flag group and a few examples."""
    console.print(Panel.fit("[bold blue]churn[/bold blue] -- backend and smart-contract scaffolding"))
    console.print("\n[bold]USAGE:[/bold]\n  [cyan]churn[/cyan] [dim]\\[project-name] \\[options][/dim]\n")
    console.print("  Run without flags for interactive mode.\n")

    for title, specs in FLAG_GROUPS:
        table = Table(title=f"[yellow]{title}[/yellow]", title_justify="left", show_header=False, box=None)
        table.add_column("Flags", style="cyan", min_width=26)
        table.add_column("Description")
        for spec in specs:
            table.add_row(", ".join(spec.names), spec.help)
        console.print(table)

    console.print("\n[bold]EXAMPLES:[/bold]")
    for description, command in EXAMPLES:
        console.print(f"  [dim]# {description}[/dim]\n  [cyan]{command}[/cyan]\n")
