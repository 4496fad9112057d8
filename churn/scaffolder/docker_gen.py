"""Container file generation.

Builds the rendering context for ``Dockerfile``, ``docker-compose.yml`` and
``.dockerignore``.  The Dockerfile varies with the package manager (base
image, install commands, start command) and the language (whether there is a
build step and which artifacts are copied); the compose file adds one
database service from ``DATABASE_SERVICES``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from churn.config import Configuration

from .templates import slugify


@dataclass(frozen=True)
class DatabaseService:
    """A database container for ``docker-compose.yml``.

    ``{db_name}`` in an environment entry is replaced by the project's
    database name.
    """

    image: str
    container_suffix: str
    port: int
    environment: tuple[str, ...]
    volume: str
    data_path: str
    healthcheck: tuple[str, ...]


# Keyed by database; SQLite runs in-process and has no service.
DATABASE_SERVICES: dict[str, DatabaseService] = {
    "postgresql": DatabaseService(
        image="postgres:16-alpine",
        container_suffix="postgres",
        port=5432,
        environment=(
            "POSTGRES_USER=${DB_USER:-user}",
            "POSTGRES_PASSWORD=${DB_PASSWORD:-password}",
            "POSTGRES_DB=${DB_NAME:-{db_name}}",
        ),
        volume="postgres-data",
        data_path="/var/lib/postgresql/data",
        healthcheck=("CMD-SHELL", "pg_isready -U ${DB_USER:-user}"),
    ),
    "mysql": DatabaseService(
        image="mysql:8",
        container_suffix="mysql",
        port=3306,
        environment=(
            "MYSQL_ROOT_PASSWORD=${DB_ROOT_PASSWORD:-rootpassword}",
            "MYSQL_USER=${DB_USER:-user}",
            "MYSQL_PASSWORD=${DB_PASSWORD:-password}",
            "MYSQL_DATABASE=${DB_NAME:-{db_name}}",
        ),
        volume="mysql-data",
        data_path="/var/lib/mysql",
        healthcheck=("CMD", "mysqladmin", "ping", "-h", "localhost"),
    ),
    "mongodb": DatabaseService(
        image="mongo:7",
        container_suffix="mongodb",
        port=27017,
        environment=(
            "MONGO_INITDB_ROOT_USERNAME=${DB_USER:-admin}",
            "MONGO_INITDB_ROOT_PASSWORD=${DB_PASSWORD:-password}",
            "MONGO_INITDB_DATABASE=${DB_NAME:-{db_name}}",
        ),
        volume="mongodb-data",
        data_path="/data/db",
        healthcheck=("CMD", "mongosh", "--eval", "db.adminCommand('ping')"),
    ),
}


def database_name(project_name: str) -> str:
    """Database names use underscores where the project name has hyphens."""
    return slugify(project_name).replace("-", "_")


class DockerGenerator:
    """Derives the container files' context from a ``Configuration``."""

    def __init__(self, config: Configuration) -> None:
        self.config = config

    def context(self) -> dict[str, Any]:
        service = self.database_service()
        db_name = database_name(self.config.project_name)
        return {
            "needs_build": self.needs_build,
            "artifacts": self.artifacts(),
            "command": self.start_command(),
            "container_name": slugify(self.config.project_name),
            "service": service,
            "db_environment": [
                line.replace("{db_name}", db_name) for line in service.environment
            ] if service else [],
        }

    def database_service(self) -> DatabaseService | None:
        if self.config.orm == "none" or self.config.database is None:
            return None
        return DATABASE_SERVICES.get(self.config.database)

    @property
    def needs_build(self) -> bool:
        """TypeScript under Node is compiled to ``dist/``; Bun runs sources."""
        return self.config.is_typescript and self.config.pm.runtime == "node"

    def artifacts(self) -> list[tuple[str, str]]:
        """``(source, destination)`` pairs copied from the build stage."""
        if not self.config.is_typescript:
            copies = [("index.js", "index.js")]
            # Generated ORM/auth modules live in src/ even for JavaScript.
            if self.config.orm != "none" or self.config.auth != "none":
                copies.append(("src", "src"))
        elif self.needs_build:
            copies = [("dist", "dist")]
        else:
            copies = [("src", "src"), ("tsconfig.json", "tsconfig.json")]
        if self.config.orm == "prisma":
            copies.append(("prisma", "prisma"))
        return copies

    def start_command(self) -> list[str]:
        pm = self.config.pm
        if pm.name == "bun":
            if self.config.is_typescript:
                return ["bun", "run", "src/index.ts"]
            return ["bun", "index.js"]
        return [pm.name, "start"]
