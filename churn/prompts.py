"""Interactive configuration.

Asks the same questions the flags answer, in the order the choices depend on
each other, and feeds the answers through ``resolve_configuration`` so that
both front-ends share one defaulting policy.  Prompt defaults are the
canonical defaults from ``churn.config.default_values``.
"""

from __future__ import annotations

from typing import Any

from rich.prompt import Confirm, Prompt

from churn.config import Configuration, default_values, is_valid_project_name, resolve_configuration
from churn.utils import console, print_error, print_warning


def collect_configuration(project_name: str | None = None) -> Configuration | None:
    """Ask for every choice and return the resolved ``Configuration``.

    Args:
        project_name: Name already given on the command line; it is still
            validated and re-asked if invalid.

    Returns:
        ``None`` when the user cancels (blank project name or Ctrl-C).
    """
    try:
        answers = ask_answers(project_name)
    except (KeyboardInterrupt, EOFError):
        console.print()
        answers = None

    if answers is None:
        print_warning("Project creation cancelled.")
        return None
    return resolve_configuration(answers)


def ask_answers(project_name: str | None = None) -> dict[str, Any] | None:
    name = ask_project_name(project_name)
    if name is None:
        return None

    defaults = default_values()
    answers: dict[str, Any] = {"project_name": name}
    answers["language"] = _choose("Language", ["ts", "js", "solidity"], defaults["language"])
    if answers["language"] == "solidity":
        answers.update(_ask_solidity())
    else:
        answers.update(_ask_backend(answers["language"], defaults))
    return answers


def ask_project_name(initial: str | None = None) -> str | None:
    """Return a valid project name, or ``None`` if the user leaves it blank."""
    name = (initial or "").strip()
    while True:
        if not name:
            name = Prompt.ask("[bold]Project name[/bold]", default="", show_default=False).strip()
            if not name:
                return None
        if is_valid_project_name(name):
            return name
        print_error("Use lowercase letters, numbers and hyphens only.")
        name = ""


def _ask_solidity() -> dict[str, Any]:
    answers: dict[str, Any] = {
        "evm_framework": _choose("EVM framework", ["hardhat", "foundry", "none"], "hardhat"),
        "contract_type": _choose("Contract type", ["token", "nft", "both", "none"], "token"),
    }
    if answers["contract_type"] in ("nft", "both"):
        answers["token_standard"] = _choose("NFT standard", ["erc721", "erc1155"], "erc721")
    answers["proxy"] = _choose("Proxy pattern", ["none", "uups", "transparent"], "none")
    return answers


def _ask_backend(language: str, defaults: dict[str, Any]) -> dict[str, Any]:
    answers: dict[str, Any] = {
        "package_manager": _choose(
            "Package manager", ["bun", "npm", "yarn", "pnpm"], defaults["package_manager"]
        ),
        "protocol": _choose("Protocol", ["http", "ws"], defaults["protocol"]),
    }
    if answers["protocol"] == "http":
        answers["cors"] = Confirm.ask("Enable CORS?", default=True)

    orm = _choose(
        "ORM/ODM",
        ["prisma", "drizzle", "typeorm", "sequelize", "mongoose", "none"],
        defaults["orm"],
    )
    answers["orm"] = orm
    if orm not in ("none", "mongoose"):
        databases = ["postgresql", "mysql", "sqlite"]
        if orm in ("prisma", "typeorm"):
            databases.append("mongodb")
        answers["database"] = _choose("Database", databases, "postgresql")

    if language == "ts":
        answers["aliases"] = Confirm.ask("Use path aliases (@/...)?", default=defaults["aliases"])

    answers["auth"] = _choose("Authentication", ["none", "jwt", "oauth", "session"], defaults["auth"])
    answers["testing"] = _choose("Testing", ["none", "jest", "vitest"], defaults["testing"])
    answers["linting"] = Confirm.ask(
        "Set up ESLint + Prettier + lint-staged?", default=defaults["linting"]
    )
    answers["docker"] = Confirm.ask("Add Docker support?", default=defaults["docker"])
    answers["cicd"] = _choose("CI/CD", ["none", "github", "gitlab", "circleci"], defaults["cicd"])
    return answers


def _choose(label: str, choices: list[str], default: str) -> str:
    return Prompt.ask(f"[bold]{label}[/bold]", choices=choices, default=default)
