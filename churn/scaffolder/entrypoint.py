"""Server entrypoint composition.

The entrypoint is described as an ``EntrypointPlan`` -- imports, setup lines,
middleware and routes -- and rendered by a single template per protocol.  ORM
health checks are plan fragments that turn the ``/health`` route into an
async route with a liveness probe, so nothing is spliced into rendered text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from churn.config import Configuration

from .templates import TemplateRenderer


@dataclass
class Route:
    """One ``app.<method>(path, handler)`` registration."""

    method: str
    path: str
    body: list[str]
    is_async: bool = False


@dataclass(frozen=True)
class HealthCheck:
    """Database liveness probe for one ORM.

    ``{src}`` in an import is replaced by the source root specifier (``.`` or
    the ``@`` path alias).
    """

    imports: tuple[str, ...]
    probe: tuple[str, ...]
    setup: tuple[str, ...] = ()

    @property
    def imports_generated_module(self) -> bool:
        """True when the probe needs one of the generated TypeScript modules."""
        return any("{src}" in line for line in self.imports)


@dataclass
class EntrypointPlan:
    """Everything the entrypoint template needs, assembled before rendering."""

    template: str
    imports: list[str] = field(default_factory=list)
    setup: list[str] = field(default_factory=list)
    middleware: list[str] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)

    def route(self, method: str, path: str) -> Route | None:
        for route in self.routes:
            if route.method == method and route.path == path:
                return route
        return None


ENTRYPOINT_TEMPLATES: dict[str, str] = {
    "http": "entrypoint/http.j2",
    "ws": "entrypoint/ws.j2",
}

# Keyed by (orm, database); ``None`` is the fallback for any database.
HEALTH_CHECKS: dict[tuple[str, str | None], HealthCheck] = {
    ("prisma", None): HealthCheck(
        imports=("import { PrismaClient } from '@prisma/client';",),
        setup=("const prisma = new PrismaClient();",),
        probe=("await prisma.$queryRaw`SELECT 1`;",),
    ),
    ("drizzle", None): HealthCheck(
        imports=("import { sql } from 'drizzle-orm';", "import { db } from '{src}/db';"),
        probe=("await db.execute(sql`SELECT 1`);",),
    ),
    ("drizzle", "sqlite"): HealthCheck(
        imports=("import { sql } from 'drizzle-orm';", "import { db } from '{src}/db';"),
        probe=("db.run(sql`SELECT 1`);",),
    ),
    ("typeorm", None): HealthCheck(
        imports=("import 'reflect-metadata';", "import { AppDataSource } from '{src}/config/database';"),
        setup=(
            "AppDataSource.initialize().catch((error) => console.error('Database initialization failed:', error));",
        ),
        probe=("await AppDataSource.query('SELECT 1');",),
    ),
    ("typeorm", "mongodb"): HealthCheck(
        imports=("import 'reflect-metadata';", "import { AppDataSource } from '{src}/config/database';"),
        setup=(
            "AppDataSource.initialize().catch((error) => console.error('Database initialization failed:', error));",
        ),
        probe=("if (!AppDataSource.isInitialized) throw new Error('Data source not initialized');",),
    ),
    ("sequelize", None): HealthCheck(
        imports=("import { sequelize } from '{src}/config/database';",),
        probe=("await sequelize.authenticate();",),
    ),
    ("mongoose", None): HealthCheck(
        imports=("import mongoose from 'mongoose';", "import { connectDB } from '{src}/config/database';"),
        setup=("connectDB();",),
        probe=("if (mongoose.connection.readyState !== 1) throw new Error('MongoDB not connected');",),
    ),
}

_HEALTH_OK = "res.json({ status: 'ok', timestamp: new Date().toISOString() });"


def health_check_for(config: Configuration) -> HealthCheck | None:
    """Return the probe to wire into ``/health``, or ``None``.

    JavaScript entrypoints cannot import the generated ``.ts`` modules, so
    they only get probes that talk to a package directly.
    """
    if config.orm == "none":
        return None
    check = HEALTH_CHECKS.get((config.orm, config.database)) or HEALTH_CHECKS.get((config.orm, None))
    if check is None:
        return None
    if not config.is_typescript and check.imports_generated_module:
        return None
    return check


def build_entrypoint_plan(config: Configuration) -> EntrypointPlan:
    """Assemble the entrypoint fragments for *config*."""
    plan = EntrypointPlan(template=ENTRYPOINT_TEMPLATES[config.protocol])

    if config.protocol == "ws":
        plan.imports.append("import { WebSocketServer } from 'ws';")
        return plan

    plan.imports.append("import express from 'express';")
    if config.cors:
        plan.imports.append("import cors from 'cors';")
        plan.middleware.append("cors({ origin: process.env.CORS_ORIGIN || '*' })")
    plan.middleware.append("express.json()")

    plan.routes.append(Route("get", "/", ["res.json({ message: 'Hello from Churn!' });"]))
    plan.routes.append(Route("get", "/health", [_HEALTH_OK]))

    check = health_check_for(config)
    if check is not None:
        _apply_health_check(plan, check, "@" if config.aliases and config.is_typescript else ".")

    return plan


def render_entrypoint(renderer: TemplateRenderer, config: Configuration) -> str:
    """Render the entrypoint source for *config*."""
    plan = build_entrypoint_plan(config)
    return renderer.render(plan.template, {"plan": plan, "config": config})


def _apply_health_check(plan: EntrypointPlan, check: HealthCheck, src: str) -> None:
    plan.imports.extend(line.replace("{src}", src) for line in check.imports)
    plan.setup.extend(check.setup)

    health = plan.route("get", "/health")
    assert health is not None
    health.is_async = True
    health.body = [
        "try {",
        *(f"  {line}" for line in check.probe),
        f"  {_HEALTH_OK}",
        "} catch (error) {",
        "  res.status(500).json({ status: 'error', message: 'Database connection failed' });",
        "}",
    ]
