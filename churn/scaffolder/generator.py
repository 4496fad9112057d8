"""Main scaffolding orchestrator.

Takes a resolved ``Configuration`` and writes the project tree under
``config.target_dir``, moving through the ``ScaffoldStage`` states in order:

1. create the project root;
2. emit the core files (backend) or the contract project (Solidity);
3. emit the conditional bundles (orm, auth, testing, linting, docker, cicd);
4. install dependencies;
5. done.

Failures in the first three stages raise ``ScaffoldError``.  Install
failures only produce warnings on the returned ``ScaffoldResult``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from churn.config import Configuration
from churn.errors import ScaffoldError
from churn.utils import print_file_written

from .bundles import Bundle, plan_bundles
from .contract_gen import ContractGenerator
from .docker_gen import database_name
from .entrypoint import render_entrypoint
from .installer import fetch_contract_dependencies, run_install
from .manifest import build_manifest, build_tsconfig
from .templates import TemplateRenderer, to_json


class ScaffoldStage(str, Enum):
    CREATE_ROOT = "create_root"
    EMIT_CORE_FILES = "emit_core_files"
    EMIT_CONDITIONAL_BUNDLES = "emit_conditional_bundles"
    INVOKE_INSTALL = "invoke_install"
    COMPLETED = "completed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass
class ScaffoldResult:
    """What a scaffold run produced."""

    root: Path
    files: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    installed: bool = False


LANGUAGE_LABELS = {"ts": "TypeScript", "js": "JavaScript", "solidity": "Solidity"}

ORM_LABELS = {
    "none": "None",
    "prisma": "Prisma",
    "drizzle": "Drizzle",
    "typeorm": "TypeORM",
    "sequelize": "Sequelize",
    "mongoose": "Mongoose",
}

ORM_DOCS = {
    "prisma": "https://www.prisma.io/docs",
    "drizzle": "https://orm.drizzle.team/docs/overview",
    "typeorm": "https://typeorm.io",
    "sequelize": "https://sequelize.org/docs/v6/",
    "mongoose": "https://mongoosejs.com/docs/",
}

DATABASE_LABELS = {
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "sqlite": "SQLite",
    "mongodb": "MongoDB",
}

AUTH_LABELS = {"none": "None", "jwt": "JWT", "oauth": "OAuth (Google, GitHub)", "session": "Session"}

CICD_LABELS = {
    "none": "None",
    "github": "GitHub Actions",
    "gitlab": "GitLab CI",
    "circleci": "CircleCI",
}


class ProjectGenerator:
    """Scaffold orchestrator.

    Given a ``Configuration``, generates either a Node backend (manifest,
    entrypoint, tsconfig, README, .gitignore, .env.example and the active
    bundles) or a Solidity project, then runs the install step.
    """

    def __init__(self, config: Configuration, renderer: TemplateRenderer | None = None) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.root = Path(config.target_dir)
        self.stage = ScaffoldStage.CREATE_ROOT

    # -- Public API --------------------------------------------------------

    async def generate(self, install: bool = True) -> ScaffoldResult:
        """Write the project and (optionally) install its dependencies.

        Raises:
            ScaffoldError: If the root directory or any project file cannot
                be written.  Nothing after the failing stage runs.
        """
        result = ScaffoldResult(root=self.root)

        self.stage = ScaffoldStage.CREATE_ROOT
        try:
            await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise ScaffoldError(self.stage, f"Failed to create project directory: {exc}") from exc

        try:
            self.stage = ScaffoldStage.EMIT_CORE_FILES
            if self.config.is_solidity:
                await self._emit_contract_project(result)
            else:
                bundles = plan_bundles(self.config)
                await self._emit_core_files(result, bundles)

                self.stage = ScaffoldStage.EMIT_CONDITIONAL_BUNDLES
                for bundle in bundles:
                    await self._emit_bundle(bundle, result)
        except OSError as exc:
            raise ScaffoldError(self.stage, f"Failed to generate project files: {exc}") from exc

        self.stage = ScaffoldStage.INVOKE_INSTALL
        if install:
            warnings = await self._install()
            result.warnings.extend(warnings)
            result.installed = not warnings

        self.stage = ScaffoldStage.COMPLETED
        return result

    # -- Stages ------------------------------------------------------------

    async def _emit_core_files(self, result: ScaffoldResult, bundles: list[Bundle]) -> None:
        config = self.config
        core_paths = ["package.json", config.entry_path]
        if config.is_typescript:
            core_paths.append("tsconfig.json")
        core_paths += ["README.md", ".gitignore", ".env.example"]
        context = self._build_context(
            core_paths + [path for bundle in bundles for path in bundle.paths]
        )

        manifest = build_manifest(config)
        await self._write("package.json", to_json(manifest), result)
        await self._write(config.entry_path, render_entrypoint(self.renderer, config), result)
        if config.is_typescript:
            await self._write("tsconfig.json", to_json(build_tsconfig(config)), result)
        await self._render("core/README.md.j2", "README.md", context, result)
        await self._render("core/gitignore.j2", ".gitignore", context, result)
        await self._render("core/env.example.j2", ".env.example", context, result)

    async def _emit_contract_project(self, result: ScaffoldResult) -> None:
        bundle = ContractGenerator(self.config).bundle()
        manifest = build_manifest(self.config)

        paths = list(bundle.paths)
        if manifest is not None:
            paths.insert(0, "package.json")
            await self._write("package.json", to_json(manifest), result)
        bundle.context.update(self._build_context(paths))
        await self._emit_bundle(bundle, result)

    async def _emit_bundle(self, bundle: Bundle, result: ScaffoldResult) -> None:
        """Create the bundle's directories, then render its files."""
        for directory in bundle.directories:
            await asyncio.to_thread((self.root / directory).mkdir, parents=True, exist_ok=True)

        base = self._build_context()
        base.update(bundle.context)
        for spec in bundle.files:
            await self._render(spec.template, spec.path, {**base, **spec.context}, result)

    async def _install(self) -> list[str]:
        if self.config.is_solidity and self.config.evm_framework == "foundry":
            return await fetch_contract_dependencies(self.config, self.root)
        return await run_install(self.config, self.root)

    # -- Helpers -----------------------------------------------------------

    def _build_context(self, paths: list[str] | None = None) -> dict[str, Any]:
        """Build the shared Jinja2 context."""
        config = self.config
        return {
            "config": config,
            "pm": config.pm,
            "db_name": database_name(config.project_name),
            "language_label": LANGUAGE_LABELS[config.language],
            "orm_label": ORM_LABELS[config.orm],
            "orm_docs": ORM_DOCS.get(config.orm, ""),
            "database_label": DATABASE_LABELS.get(config.database or "", ""),
            "auth_label": AUTH_LABELS[config.auth],
            "cicd_label": CICD_LABELS[config.cicd],
            "structure": project_structure(paths or []),
        }

    async def _render(
        self,
        template: str,
        relative: str,
        context: dict[str, Any],
        result: ScaffoldResult,
    ) -> None:
        await self.renderer.render_to_file(template, self.root / relative, context)
        _record(relative, result)

    async def _write(self, relative: str, content: str, result: ScaffoldResult) -> None:
        await self.renderer.write_to_file(content, self.root / relative)
        _record(relative, result)


def _record(relative: str, result: ScaffoldResult) -> None:
    result.files.append(relative)
    print_file_written(relative)


def project_structure(paths: list[str]) -> list[str]:
    """Render project-relative *paths* as tree lines for the README.

    Top-level files and directories are listed once each; a directory's
    entry shows its name followed by ``/``.
    """
    entries: list[str] = []
    for path in paths:
        top, sep, _rest = path.partition("/")
        entry = f"{top}/" if sep else top
        if entry not in entries:
            entries.append(entry)
    entries.sort(key=lambda e: (not e.endswith("/"), e.lower()))

    lines = []
    for index, entry in enumerate(entries):
        branch = "└──" if index == len(entries) - 1 else "├──"
        lines.append(f"{branch} {entry}")
    return lines

