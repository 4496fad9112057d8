"""package.json and tsconfig.json generation.

The manifest is assembled from fixed contribution rows.  Each active concern
(runtime, protocol, ORM, auth, testing, linting, aliases, ...) selects one row
from ``CONTRIBUTIONS``; rows are merged without overwriting keys written by an
earlier row.  Solidity projects use the disjoint ``SOLIDITY_CONTRIBUTIONS``
table and never consult the backend rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from churn.config import Configuration


@dataclass(frozen=True)
class Contribution:
    """What one active concern adds to ``package.json``."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    # Applied only for TypeScript projects (type packages, ts-jest, ...).
    ts_dev_dependencies: dict[str, str] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Backend contribution table
# ---------------------------------------------------------------------------

CONTRIBUTIONS: dict[tuple[str, Any], Contribution] = {
    # Runtime / language
    ("typescript", "bun"): Contribution(
        dev_dependencies={"typescript": "^5.0.0", "bun-types": "latest"},
    ),
    ("typescript", "node"): Contribution(
        dev_dependencies={"typescript": "^5.0.0", "tsx": "^4.0.0", "@types/node": "^20.10.0"},
    ),
    # Protocol
    ("protocol", "http"): Contribution(
        dependencies={"express": "^4.18.0"},
        ts_dev_dependencies={"@types/express": "^4.17.21"},
    ),
    ("protocol", "ws"): Contribution(
        dependencies={"ws": "^8.0.0"},
        ts_dev_dependencies={"@types/ws": "^8.5.10"},
    ),
    ("cors", True): Contribution(
        dependencies={"cors": "^2.8.5"},
        ts_dev_dependencies={"@types/cors": "^2.8.17"},
    ),
    # ORM / ODM
    ("orm", "prisma"): Contribution(
        dependencies={"@prisma/client": "^5.0.0"},
        dev_dependencies={"prisma": "^5.0.0"},
        scripts={
            "db:generate": "prisma generate",
            "db:push": "prisma db push",
            "db:migrate": "prisma migrate dev",
            "db:studio": "prisma studio",
        },
    ),
    ("orm", "drizzle"): Contribution(
        dependencies={"drizzle-orm": "^0.29.0"},
        dev_dependencies={"drizzle-kit": "^0.20.0"},
        scripts={"db:studio": "drizzle-kit studio"},
    ),
    ("orm", "typeorm"): Contribution(
        dependencies={"typeorm": "^0.3.17", "reflect-metadata": "^0.1.13"},
        scripts={
            "db:migration:generate": "typeorm migration:generate",
            "db:migration:run": "typeorm migration:run",
            "db:migration:revert": "typeorm migration:revert",
        },
    ),
    ("orm", "sequelize"): Contribution(
        dependencies={"sequelize": "^6.35.0"},
        dev_dependencies={"sequelize-cli": "^6.6.2"},
        scripts={"db:migrate": "sequelize db:migrate", "db:seed": "sequelize db:seed:all"},
    ),
    ("orm", "mongoose"): Contribution(
        dependencies={"mongoose": "^8.0.0"},
    ),
    # Database drivers, keyed by (orm, database)
    ("driver", ("drizzle", "postgresql")): Contribution(
        dependencies={"pg": "^8.11.0"}, ts_dev_dependencies={"@types/pg": "^8.10.9"},
    ),
    ("driver", ("drizzle", "mysql")): Contribution(dependencies={"mysql2": "^3.6.0"}),
    ("driver", ("drizzle", "sqlite")): Contribution(
        dependencies={"better-sqlite3": "^9.2.0"},
        ts_dev_dependencies={"@types/better-sqlite3": "^7.6.8"},
    ),
    ("driver", ("typeorm", "postgresql")): Contribution(dependencies={"pg": "^8.11.0"}),
    ("driver", ("typeorm", "mysql")): Contribution(dependencies={"mysql2": "^3.6.0"}),
    ("driver", ("typeorm", "sqlite")): Contribution(dependencies={"better-sqlite3": "^9.2.0"}),
    ("driver", ("typeorm", "mongodb")): Contribution(dependencies={"mongodb": "^6.3.0"}),
    ("driver", ("sequelize", "postgresql")): Contribution(
        dependencies={"pg": "^8.11.0", "pg-hstore": "^2.3.4"},
    ),
    ("driver", ("sequelize", "mysql")): Contribution(dependencies={"mysql2": "^3.6.0"}),
    ("driver", ("sequelize", "sqlite")): Contribution(dependencies={"sqlite3": "^5.1.6"}),
    # drizzle-kit commands are dialect specific
    ("drizzle_dialect", "postgresql"): Contribution(
        scripts={"db:generate": "drizzle-kit generate:pg", "db:push": "drizzle-kit push:pg"},
    ),
    ("drizzle_dialect", "mysql"): Contribution(
        scripts={"db:generate": "drizzle-kit generate:mysql", "db:push": "drizzle-kit push:mysql"},
    ),
    ("drizzle_dialect", "sqlite"): Contribution(
        scripts={"db:generate": "drizzle-kit generate:sqlite", "db:push": "drizzle-kit push:sqlite"},
    ),
    # Auth
    ("auth", "jwt"): Contribution(
        dependencies={"jsonwebtoken": "^9.0.2"},
        ts_dev_dependencies={"@types/jsonwebtoken": "^9.0.5"},
    ),
    ("auth", "session"): Contribution(
        dependencies={"express-session": "^1.17.3"},
        ts_dev_dependencies={"@types/express-session": "^1.17.10"},
    ),
    ("auth", "oauth"): Contribution(
        dependencies={"axios": "^1.6.0"},
    ),
    # Testing
    ("testing", "jest"): Contribution(
        dev_dependencies={"jest": "^29.7.0"},
        ts_dev_dependencies={"@types/jest": "^29.5.0", "ts-jest": "^29.1.0"},
        scripts={"test:coverage": "jest --coverage"},
    ),
    ("testing", "vitest"): Contribution(
        dev_dependencies={"vitest": "^1.0.0", "@vitest/coverage-v8": "^1.0.0"},
        scripts={"test:coverage": "vitest run --coverage"},
    ),
    ("http_testing", True): Contribution(
        dev_dependencies={"supertest": "^6.3.3"},
        ts_dev_dependencies={"@types/supertest": "^6.0.0"},
    ),
    # Linting
    ("linting", "ts"): Contribution(
        dev_dependencies={
            "eslint": "^8.55.0",
            "prettier": "^3.1.0",
            "eslint-plugin-prettier": "^5.0.1",
            "eslint-config-prettier": "^9.1.0",
            "lint-staged": "^15.2.0",
            "husky": "^8.0.3",
            "@typescript-eslint/parser": "^6.15.0",
            "@typescript-eslint/eslint-plugin": "^6.15.0",
        },
        scripts={"lint": "eslint src/**/*.ts --fix", "format": "prettier --write .", "prepare": "husky install"},
    ),
    ("linting", "js"): Contribution(
        dev_dependencies={
            "eslint": "^8.55.0",
            "prettier": "^3.1.0",
            "eslint-plugin-prettier": "^5.0.1",
            "eslint-config-prettier": "^9.1.0",
            "lint-staged": "^15.2.0",
            "husky": "^8.0.3",
        },
        scripts={"lint": "eslint **/*.js --fix", "format": "prettier --write .", "prepare": "husky install"},
    ),
    # Path aliases (tsc output needs rewriting; Bun resolves them natively)
    ("aliases", "node"): Contribution(
        dev_dependencies={"tsc-alias": "^1.8.0"},
    ),
}


# ---------------------------------------------------------------------------
# Solidity contribution table
# ---------------------------------------------------------------------------

SOLIDITY_CONTRIBUTIONS: dict[tuple[str, str], Contribution] = {
    ("framework", "hardhat"): Contribution(
        dependencies={"@openzeppelin/contracts": "^5.0.0"},
        dev_dependencies={
            "hardhat": "^2.19.0",
            "@nomicfoundation/hardhat-toolbox": "^4.0.0",
            "dotenv": "^16.3.1",
        },
        scripts={
            "compile": "hardhat compile",
            "test": "hardhat test",
            "deploy": "hardhat run scripts/deploy.js",
            "deploy:local": "hardhat run scripts/deploy.js --network localhost",
            "node": "hardhat node",
            "coverage": "hardhat coverage",
        },
    ),
    ("framework", "none"): Contribution(
        dependencies={"@openzeppelin/contracts": "^5.0.0", "ethers": "^6.9.0", "dotenv": "^16.3.1"},
        dev_dependencies={"solc": "^0.8.24", "mocha": "^10.2.0", "chai": "^4.3.10"},
        scripts={
            "compile": "node scripts/compile.js",
            "deploy": "node scripts/compile.js && node scripts/deploy.js",
            "test": "node scripts/compile.js && mocha",
        },
    ),
    ("upgradeable", "hardhat"): Contribution(
        dependencies={"@openzeppelin/contracts-upgradeable": "^5.0.0"},
        dev_dependencies={"@openzeppelin/hardhat-upgrades": "^3.0.0"},
    ),
    ("upgradeable", "none"): Contribution(
        dependencies={"@openzeppelin/contracts-upgradeable": "^5.0.0"},
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_manifest(config: Configuration) -> dict[str, Any] | None:
    """Build the ``package.json`` document for *config*.

    Returns ``None`` for Foundry projects, which have no Node manifest.
    """
    if config.is_solidity:
        return _build_solidity_manifest(config)

    manifest: dict[str, Any] = {
        "name": config.project_name,
        "version": "1.0.0",
        "description": (
            f"A Churn backend project built with "
            f"{'TypeScript' if config.is_typescript else 'JavaScript'}"
        ),
        "main": "dist/index.js" if config.is_typescript else "index.js",
        "type": "module",
        "scripts": _base_scripts(config),
    }
    dependencies: dict[str, str] = {}
    dev_dependencies: dict[str, str] = {}

    for key in active_contribution_keys(config):
        contribution = CONTRIBUTIONS[key]
        _merge(dependencies, contribution.dependencies)
        _merge(dev_dependencies, contribution.dev_dependencies)
        if config.is_typescript:
            _merge(dev_dependencies, contribution.ts_dev_dependencies)
        _merge(manifest["scripts"], contribution.scripts)

    manifest["dependencies"] = dict(sorted(dependencies.items()))
    manifest["devDependencies"] = dict(sorted(dev_dependencies.items()))
    manifest["keywords"] = ["churn", "backend", "api", config.protocol]
    manifest["author"] = ""
    manifest["license"] = "MIT"
    return manifest


def active_contribution_keys(config: Configuration) -> list[tuple[str, Any]]:
    """Return the ``CONTRIBUTIONS`` keys selected by *config*, in merge order."""
    runtime = config.pm.runtime
    keys: list[tuple[str, Any]] = []

    if config.is_typescript:
        keys.append(("typescript", runtime))

    keys.append(("protocol", config.protocol))
    if config.protocol == "http" and config.cors:
        keys.append(("cors", True))

    if config.orm != "none":
        keys.append(("orm", config.orm))
        if ("driver", (config.orm, config.database)) in CONTRIBUTIONS:
            keys.append(("driver", (config.orm, config.database)))
        if config.orm == "drizzle":
            keys.append(("drizzle_dialect", config.database))

    if config.auth != "none":
        keys.append(("auth", config.auth))

    if config.testing != "none":
        keys.append(("testing", config.testing))
        if config.protocol == "http":
            keys.append(("http_testing", True))

    if config.linting:
        keys.append(("linting", config.source_ext))

    if config.is_typescript and config.aliases and runtime == "node":
        keys.append(("aliases", runtime))

    return keys


def build_tsconfig(config: Configuration) -> dict[str, Any]:
    """Build ``tsconfig.json``; path aliases are added when enabled."""
    bun = config.pm.runtime == "bun"
    compiler_options: dict[str, Any] = {
        "target": "ES2022",
        "module": "ESNext",
        "moduleResolution": "bundler",
        "lib": ["ES2022"],
        "types": ["bun-types"] if bun else ["node"],
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "forceConsistentCasingInFileNames": True,
        "resolveJsonModule": True,
        "isolatedModules": True,
    }
    if bun:
        compiler_options["noEmit"] = True
    else:
        compiler_options["outDir"] = "dist"
        compiler_options["rootDir"] = "src"

    if config.orm == "typeorm":
        compiler_options["experimentalDecorators"] = True
        compiler_options["emitDecoratorMetadata"] = True
        compiler_options["strictPropertyInitialization"] = False

    if config.aliases:
        compiler_options["baseUrl"] = "."
        compiler_options["paths"] = {"@/*": ["src/*"]}

    return {
        "compilerOptions": compiler_options,
        "include": ["src/**/*"],
        "exclude": ["node_modules", "dist"],
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _merge(target: dict[str, str], additions: dict[str, str]) -> None:
    """Add *additions* to *target*; keys already present are left untouched."""
    for key, value in additions.items():
        target.setdefault(key, value)


def _base_scripts(config: Configuration) -> dict[str, str]:
    pm = config.package_manager
    if config.is_typescript:
        dev = {
            "bun": "bun run --watch src/index.ts",
            "yarn": "yarn tsx watch src/index.ts",
            "pnpm": "pnpm tsx watch src/index.ts",
            "npm": "tsx watch src/index.ts",
        }[pm]
        if pm == "bun":
            build = "bun build src/index.ts --outdir ./dist --target node"
            start = "bun run src/index.ts"
        else:
            build = "tsc && tsc-alias -p tsconfig.json" if config.aliases else "tsc"
            start = "node dist/index.js"
    else:
        dev = "bun --watch index.js" if pm == "bun" else "node --watch index.js"
        build = 'echo "No build step for JavaScript"'
        start = "bun index.js" if pm == "bun" else "node index.js"

    return {"dev": dev, "build": build, "start": start, "test": _test_script(config)}


def _test_script(config: Configuration) -> str:
    if config.testing == "jest":
        # Generated projects are ES modules.
        return "NODE_OPTIONS=--experimental-vm-modules jest"
    if config.testing == "vitest":
        return "vitest run"
    if config.package_manager == "bun":
        return "bun test"
    return 'echo "No tests configured" && exit 0'


def _build_solidity_manifest(config: Configuration) -> dict[str, Any] | None:
    framework = config.evm_framework
    if framework == "foundry":
        return None

    manifest: dict[str, Any] = {
        "name": config.project_name,
        "version": "1.0.0",
        "description": f"Smart contracts for {config.project_name}",
        "private": True,
        "scripts": {},
    }
    dependencies: dict[str, str] = {}
    dev_dependencies: dict[str, str] = {}

    keys = [("framework", framework)]
    if config.proxy != "none":
        keys.append(("upgradeable", framework))
    for key in keys:
        contribution = SOLIDITY_CONTRIBUTIONS[key]
        _merge(dependencies, contribution.dependencies)
        _merge(dev_dependencies, contribution.dev_dependencies)
        _merge(manifest["scripts"], contribution.scripts)

    manifest["dependencies"] = dict(sorted(dependencies.items()))
    manifest["devDependencies"] = dict(sorted(dev_dependencies.items()))
    manifest["license"] = "MIT"
    return manifest
