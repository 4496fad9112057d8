"""Conditional file bundles for backend projects.

A bundle is the fixed set of files emitted together when one concern is
active.  Each concern has a table row mapping its value to ``FileSpec``
entries; ``plan_bundles`` selects the active rows in the order they are
written: orm, auth, testing, linting, docker, cicd.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

from churn.config import Configuration

from .docker_gen import DockerGenerator
from .entrypoint import health_check_for


@dataclass(frozen=True)
class FileSpec:
    """One template rendered to one project-relative path."""

    template: str
    path: str
    # Extra context merged over the bundle context for this file only.
    context: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass
class Bundle:
    """Files emitted together, plus the directories they need."""

    name: str
    files: list[FileSpec]
    context: dict[str, Any] = field(default_factory=dict)
    # Directories created even when no file lands in them.
    extra_directories: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [spec.path for spec in self.files]

    @property
    def directories(self) -> list[str]:
        """Every directory the bundle needs, parents before children."""
        dirs = set(self.extra_directories)
        for spec in self.files:
            for parent in PurePosixPath(spec.path).parents:
                if str(parent) != ".":
                    dirs.add(str(parent))
        return sorted(dirs, key=lambda d: (d.count("/"), d))


# ---------------------------------------------------------------------------
# Bundle tables
# ---------------------------------------------------------------------------

ORM_BUNDLES: dict[str, tuple[FileSpec, ...]] = {
    "prisma": (
        FileSpec("orm/prisma/schema.prisma.j2", "prisma/schema.prisma"),
    ),
    "drizzle": (
        FileSpec("orm/drizzle/schema.ts.j2", "src/db/schema.ts"),
        FileSpec("orm/drizzle/client.ts.j2", "src/db/index.ts"),
        FileSpec("orm/drizzle/drizzle.config.ts.j2", "drizzle.config.ts"),
    ),
    "typeorm": (
        FileSpec("orm/typeorm/database.ts.j2", "src/config/database.ts"),
        FileSpec("orm/typeorm/User.ts.j2", "src/entities/User.ts"),
    ),
    "sequelize": (
        FileSpec("orm/sequelize/database.ts.j2", "src/config/database.ts"),
        FileSpec("orm/sequelize/User.ts.j2", "src/models/User.ts"),
    ),
    "mongoose": (
        FileSpec("orm/mongoose/database.ts.j2", "src/config/database.ts"),
        FileSpec("orm/mongoose/User.ts.j2", "src/models/User.ts"),
    ),
}

AUTH_BUNDLES: dict[str, tuple[FileSpec, ...]] = {
    "jwt": (FileSpec("auth/jwt.ts.j2", "src/auth/jwt.ts"),),
    "session": (FileSpec("auth/session.ts.j2", "src/auth/session.ts"),),
    "oauth": (FileSpec("auth/oauth.ts.j2", "src/auth/oauth.ts"),),
}

# ``{ext}`` is the source extension of the project (ts or js).
TESTING_BUNDLES: dict[str, tuple[FileSpec, ...]] = {
    "jest": (
        FileSpec("testing/jest.config.js.j2", "jest.config.js"),
        FileSpec("testing/api.test.j2", "__tests__/api.test.{ext}"),
    ),
    "vitest": (
        FileSpec("testing/vitest.config.ts.j2", "vitest.config.ts"),
        FileSpec("testing/api.test.j2", "__tests__/api.test.{ext}"),
    ),
}

LINTING_BUNDLE: tuple[FileSpec, ...] = (
    FileSpec("linting/eslintrc.json.j2", ".eslintrc.json"),
    FileSpec("linting/prettierrc.j2", ".prettierrc"),
    FileSpec("linting/prettierignore.j2", ".prettierignore"),
    FileSpec("linting/lintstagedrc.json.j2", ".lintstagedrc.json"),
)

DOCKER_BUNDLE: tuple[FileSpec, ...] = (
    FileSpec("docker/Dockerfile.j2", "Dockerfile"),
    FileSpec("docker/docker-compose.yml.j2", "docker-compose.yml"),
    FileSpec("docker/dockerignore.j2", ".dockerignore"),
)

CICD_BUNDLES: dict[str, tuple[FileSpec, ...]] = {
    "github": (FileSpec("cicd/github.yml.j2", ".github/workflows/ci-cd.yml"),),
    "gitlab": (FileSpec("cicd/gitlab-ci.yml.j2", ".gitlab-ci.yml"),),
    "circleci": (FileSpec("cicd/circleci.yml.j2", ".circleci/config.yml"),),
}

# Driver names as the ORMs spell them.
TYPEORM_TYPES: dict[str, str] = {
    "postgresql": "postgres",
    "mysql": "mysql",
    "sqlite": "better-sqlite3",
    "mongodb": "mongodb",
}

SEQUELIZE_DIALECTS: dict[str, str] = {
    "postgresql": "postgres",
    "mysql": "mysql",
    "sqlite": "sqlite",
}


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def plan_bundles(config: Configuration) -> list[Bundle]:
    """Return the active backend bundles for *config*, in write order.

    Solidity projects have no backend bundles.
    """
    if config.is_solidity:
        return []

    bundles: list[Bundle] = []

    if config.orm != "none":
        bundles.append(Bundle("orm", list(ORM_BUNDLES[config.orm]), orm_context(config)))

    if config.auth != "none":
        bundles.append(Bundle("auth", list(AUTH_BUNDLES[config.auth])))

    if config.testing != "none":
        files = [
            FileSpec(spec.template, spec.path.format(ext=config.source_ext))
            for spec in TESTING_BUNDLES[config.testing]
        ]
        bundles.append(Bundle("testing", files, testing_context(config)))

    if config.linting:
        bundles.append(Bundle("linting", list(LINTING_BUNDLE)))

    if config.docker:
        bundles.append(Bundle("docker", list(DOCKER_BUNDLE), DockerGenerator(config).context()))

    if config.cicd != "none":
        bundles.append(Bundle("cicd", list(CICD_BUNDLES[config.cicd]), {"ci_jobs": ci_jobs(config)}))

    return bundles


def orm_context(config: Configuration) -> dict[str, Any]:
    database = config.database or ""
    return {
        "typeorm_type": TYPEORM_TYPES.get(database, ""),
        "sequelize_dialect": SEQUELIZE_DIALECTS.get(database, ""),
    }


def testing_context(config: Configuration) -> dict[str, Any]:
    """Where the API test imports the server from, and what /health returns."""
    return {
        "entry_import": "../src/index" if config.is_typescript else "../index.js",
        "has_health_check": health_check_for(config) is not None,
    }


def ci_jobs(config: Configuration) -> list[str]:
    """Jobs the deploy step waits for.

    GitHub always runs a ``build`` job (install, type check, build); GitLab
    and CircleCI only get the jobs that have something to do, and fall back
    to waiting on ``install``.
    """
    checks: list[str] = []
    if config.linting:
        checks.append("lint")
    if config.testing != "none":
        checks.append("test")

    if config.cicd == "github":
        return ["build", *checks]
    if config.is_typescript:
        checks.append("build")
    return checks or ["install"]
