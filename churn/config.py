"""churn configuration.

A ``Configuration`` is the single value object threaded through every
generator.  It is built once per invocation (from flags or from interactive
answers), is frozen afterwards, and is always internally consistent: every
construction path runs the same ordered resolution pipeline, so derived fields
(``cors``, ``database``, the Solidity axes, ``target_dir``) never depend on
which front-end produced the raw input.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from churn.errors import ConfigurationError


Language = Literal["js", "ts", "solidity"]
PackageManagerName = Literal["bun", "yarn", "pnpm", "npm"]
Protocol = Literal["http", "ws"]
Orm = Literal["none", "prisma", "drizzle", "typeorm", "sequelize", "mongoose"]
Database = Literal["postgresql", "mysql", "sqlite", "mongodb"]
Auth = Literal["none", "jwt", "oauth", "session"]
Testing = Literal["none", "jest", "vitest"]
CiCd = Literal["none", "github", "gitlab", "circleci"]
EvmFramework = Literal["hardhat", "foundry", "none"]
ContractType = Literal["token", "nft", "both", "none"]
TokenStandard = Literal["erc20", "erc721", "erc1155"]
Proxy = Literal["none", "uups", "transparent"]

PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")


# ---------------------------------------------------------------------------
# Package manager command table
# ---------------------------------------------------------------------------


class PackageManager(BaseModel):
    """Commands and file names that vary per package manager."""

    model_config = ConfigDict(frozen=True)

    name: PackageManagerName
    install: tuple[str, ...] = Field(description="argv for a plain dependency install")
    frozen_install: str = Field(description="Lockfile-respecting install used in CI")
    prod_install: str = Field(description="Production-only install used in the Dockerfile")
    run: str = Field(description="Prefix for running a package.json script")
    exec: str = Field(description="Prefix for running a package binary")
    lockfile: str
    docker_image: str
    runtime: Literal["bun", "node"]

    @property
    def install_command(self) -> str:
        return " ".join(self.install)


PACKAGE_MANAGERS: dict[str, PackageManager] = {
    "bun": PackageManager(
        name="bun",
        install=("bun", "install"),
        frozen_install="bun install --frozen-lockfile",
        prod_install="bun install --production --frozen-lockfile",
        run="bun run",
        exec="bunx",
        lockfile="bun.lockb",
        docker_image="oven/bun:1",
        runtime="bun",
    ),
    "yarn": PackageManager(
        name="yarn",
        install=("yarn", "install"),
        frozen_install="yarn install --frozen-lockfile",
        prod_install="yarn install --production --frozen-lockfile",
        run="yarn",
        exec="yarn",
        lockfile="yarn.lock",
        docker_image="node:20-alpine",
        runtime="node",
    ),
    "pnpm": PackageManager(
        name="pnpm",
        install=("pnpm", "install"),
        frozen_install="pnpm install --frozen-lockfile",
        prod_install="pnpm install --prod --frozen-lockfile",
        run="pnpm",
        exec="pnpm",
        lockfile="pnpm-lock.yaml",
        docker_image="node:20-alpine",
        runtime="node",
    ),
    "npm": PackageManager(
        name="npm",
        install=("npm", "install"),
        frozen_install="npm ci",
        prod_install="npm ci --omit=dev",
        run="npm run",
        exec="npx",
        lockfile="package-lock.json",
        docker_image="node:20-alpine",
        runtime="node",
    ),
}


# ---------------------------------------------------------------------------
# Resolution pipeline
# ---------------------------------------------------------------------------

# Canonical defaults shared by the flag-driven and interactive front-ends.
BASE_DEFAULTS: dict[str, Any] = {
    "project_name": "my-churn-app",
    "language": "ts",
    "package_manager": "bun",
    "protocol": "http",
    "orm": "prisma",
    "aliases": True,
    "auth": "none",
    "testing": "none",
    "linting": True,
    "docker": False,
    "cicd": "none",
}

SOLIDITY_FIELDS = ("evm_framework", "contract_type", "token_standard", "proxy")

# ORMs with no MongoDB dialect.
_RELATIONAL_ONLY_ORMS = frozenset({"drizzle", "sequelize"})


# Environment variables that replace a canonical default.
ENV_DEFAULTS: dict[str, str] = {
    "language": "CHURN_LANGUAGE",
    "package_manager": "CHURN_PACKAGE_MANAGER",
}


def default_values() -> dict[str, Any]:
    """Return ``BASE_DEFAULTS`` with any ``CHURN_*`` environment overrides applied."""
    defaults = dict(BASE_DEFAULTS)
    for key, variable in ENV_DEFAULTS.items():
        if os.environ.get(variable):
            defaults[key] = os.environ[variable]
    return defaults


def fill_base_defaults(data: dict[str, Any]) -> None:
    """Fill every axis that has a fixed default and no dependency on other axes."""
    for key, value in default_values().items():
        if data.get(key) is None or data.get(key) == "":
            data[key] = value


def derive_cors(data: dict[str, Any]) -> None:
    """CORS is meaningful only for HTTP servers and defaults on there."""
    if data["protocol"] == "http":
        cors = data.get("cors")
        data["cors"] = True if cors is None else bool(cors)
    else:
        data["cors"] = None


def derive_database(data: dict[str, Any]) -> None:
    """Pick the database after the ORM has been settled."""
    orm = data["orm"]
    if data["language"] == "solidity" or orm == "none":
        data["database"] = None
        return
    if orm == "mongoose":
        data["database"] = "mongodb"
        return

    database = data.get("database") or "postgresql"
    if database == "mongodb" and orm in _RELATIONAL_ONLY_ORMS:
        raise ConfigurationError(
            f"{orm} does not support MongoDB; choose postgresql, mysql or sqlite"
        )
    data["database"] = database


def derive_solidity(data: dict[str, Any]) -> None:
    """Fill the contract axes for Solidity projects and clear them otherwise."""
    if data["language"] != "solidity":
        for key in SOLIDITY_FIELDS:
            data[key] = None
        return

    data["evm_framework"] = data.get("evm_framework") or "hardhat"
    contract_type = data.get("contract_type") or "token"
    data["contract_type"] = contract_type

    if contract_type == "token":
        data["token_standard"] = "erc20"
    elif contract_type in ("nft", "both"):
        data["token_standard"] = (
            "erc1155" if data.get("token_standard") == "erc1155" else "erc721"
        )
    else:
        data["token_standard"] = None

    data["proxy"] = data.get("proxy") or "none"


def derive_target_dir(data: dict[str, Any]) -> None:
    """The write root defaults to ``./<project_name>``."""
    target = data.get("target_dir")
    data["target_dir"] = Path(target) if target else Path(".") / data["project_name"]


RESOLUTION_STAGES: tuple[tuple[str, Callable[[dict[str, Any]], None]], ...] = (
    ("base_defaults", fill_base_defaults),
    ("cors", derive_cors),
    ("database", derive_database),
    ("solidity", derive_solidity),
    ("target_dir", derive_target_dir),
)


def run_resolution(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Apply every resolution stage, in order, to a copy of *raw*."""
    data = dict(raw)
    for _name, stage in RESOLUTION_STAGES:
        stage(data)
    return data


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class Configuration(BaseModel):
    """A complete, consistent scaffold request."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(description="Project name, used for the directory and package name")
    language: Language
    package_manager: PackageManagerName
    protocol: Protocol
    cors: bool | None = Field(default=None, description="Only set for HTTP servers")
    orm: Orm
    database: Database | None = Field(default=None, description="None when orm is 'none'")
    aliases: bool = Field(description="TypeScript path aliases; ignored for JavaScript")
    auth: Auth
    testing: Testing
    linting: bool
    docker: bool
    cicd: CiCd
    target_dir: Path

    evm_framework: EvmFramework | None = None
    contract_type: ContractType | None = None
    token_standard: TokenStandard | None = None
    proxy: Proxy | None = None

    @model_validator(mode="before")
    @classmethod
    def _resolve(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return run_resolution(data)
        return data

    # ------------------------------------------------------------------
    # Derived values (read-only properties)
    # ------------------------------------------------------------------

    @property
    def is_solidity(self) -> bool:
        return self.language == "solidity"

    @property
    def is_typescript(self) -> bool:
        return self.language == "ts"

    @property
    def source_ext(self) -> str:
        """File extension for generated backend sources."""
        return "ts" if self.is_typescript else "js"

    @property
    def entry_path(self) -> str:
        """Entrypoint location relative to the project root."""
        return "src/index.ts" if self.is_typescript else "index.js"

    @property
    def pm(self) -> PackageManager:
        """The command record for the selected package manager."""
        return PACKAGE_MANAGERS[self.package_manager]

    @property
    def contract_name(self) -> str:
        """PascalCase contract name derived from the project name."""
        return to_pascal(self.project_name)

    @property
    def nft_contract_name(self) -> str:
        """NFT contracts get an ``NFT`` suffix when a token contract sits beside them."""
        if self.contract_type == "both":
            return f"{self.contract_name}NFT"
        return self.contract_name

    @property
    def has_token_contract(self) -> bool:
        return self.contract_type in ("token", "both")

    @property
    def has_nft_contract(self) -> bool:
        return self.contract_type in ("nft", "both")


def resolve_configuration(raw: Mapping[str, Any]) -> Configuration:
    """Turn partial user input into a complete ``Configuration``.

    Raises:
        ConfigurationError: If the input combines incompatible choices.
        pydantic.ValidationError: If a value is outside its axis.
    """
    return Configuration.model_validate(dict(raw))


def is_valid_project_name(name: str) -> bool:
    """Project names are lowercase letters, digits and hyphens."""
    return bool(PROJECT_NAME_PATTERN.match(name))


def to_pascal(name: str) -> str:
    """Convert ``my-token_app`` or ``my token app`` to ``MyTokenApp``."""
    parts = re.split(r"[-_\s]+", name)
    return "".join(word.capitalize() for word in parts if word)
