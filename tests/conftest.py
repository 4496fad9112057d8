"""Shared pytest fixtures for the churn test suite.

Provides reusable fixtures for:
- Configurations rooted in a temporary directory
- A real TemplateRenderer over the packaged templates
- A mocked install subprocess
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, patch

import pytest

from churn.config import Configuration, resolve_configuration
from churn.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Configuration]:
    """Factory for configurations whose target_dir lives under tmp_path.

    Usage:
        def test_something(make_config):
            config = make_config(orm="drizzle", database="sqlite")
    """

    def _make(**raw: Any) -> Configuration:
        raw.setdefault("project_name", "test-project")
        raw.setdefault("target_dir", tmp_path / raw["project_name"])
        return resolve_configuration(raw)

    return _make


@pytest.fixture
def scenario_a(make_config) -> Configuration:
    """The fully loaded TypeScript backend."""
    return make_config(
        project_name="my-api",
        language="ts",
        package_manager="bun",
        protocol="http",
        cors=True,
        orm="prisma",
        database="postgresql",
        aliases=True,
        auth="jwt",
        testing="jest",
        linting=True,
        docker=True,
        cicd="github",
    )


@pytest.fixture
def scenario_b(make_config) -> Configuration:
    """The minimal JavaScript backend."""
    return make_config(
        project_name="simple-api",
        language="js",
        package_manager="npm",
        protocol="http",
        cors=False,
        orm="none",
        auth="none",
        testing="none",
        linting=False,
        docker=False,
        cicd="none",
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

@pytest.fixture
def renderer() -> TemplateRenderer:
    """A TemplateRenderer over the packaged templates."""
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Install subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_install():
    """Patch the installer's run_command so no package manager is spawned.

    The mock returns a successful ``(0, "", "")`` by default; set
    ``return_value`` or ``side_effect`` to simulate failures.
    """
    with patch(
        "churn.scaffolder.installer.run_command",
        new=AsyncMock(return_value=(0, "", "")),
    ) as mocked:
        yield mocked
