"""Tests for container file generation.

Covers:
- DATABASE_SERVICES rows and database_name
- DockerGenerator context (build step, artifacts, start command, service)
- Rendered Dockerfile and docker-compose.yml
"""

from __future__ import annotations

import pytest
import yaml

from churn.scaffolder.docker_gen import DATABASE_SERVICES, DockerGenerator, database_name


pytestmark = pytest.mark.unit


def _render(renderer, config, template):
    context = {"config": config, "pm": config.pm, **DockerGenerator(config).context()}
    return renderer.render(template, context)


class TestDatabaseServices:
    def test_rows(self):
        assert set(DATABASE_SERVICES) == {"postgresql", "mysql", "mongodb"}
        assert DATABASE_SERVICES["mongodb"].port == 27017

    def test_database_name(self):
        assert database_name("my-api") == "my_api"

    def test_sqlite_has_no_service(self, make_config):
        assert DockerGenerator(make_config(orm="drizzle", database="sqlite")).database_service() is None

    def test_no_orm_has_no_service(self, make_config):
        assert DockerGenerator(make_config(orm="none")).database_service() is None


class TestContext:
    def test_bun_typescript(self, make_config):
        gen = DockerGenerator(make_config(package_manager="bun"))
        assert not gen.needs_build
        assert gen.start_command() == ["bun", "run", "src/index.ts"]
        assert ("src", "src") in gen.artifacts()

    def test_node_typescript_builds(self, make_config):
        gen = DockerGenerator(make_config(package_manager="npm", orm="none"))
        assert gen.needs_build
        assert gen.artifacts() == [("dist", "dist")]
        assert gen.start_command() == ["npm", "start"]

    def test_javascript_with_generated_modules(self, make_config):
        gen = DockerGenerator(make_config(language="js", package_manager="yarn", orm="none", auth="jwt"))
        assert gen.artifacts() == [("index.js", "index.js"), ("src", "src")]

    def test_prisma_schema_copied(self, make_config):
        assert ("prisma", "prisma") in DockerGenerator(make_config(orm="prisma")).artifacts()

    def test_db_environment_uses_database_name(self, make_config):
        context = DockerGenerator(make_config(project_name="shop-api", orm="prisma")).context()
        assert "POSTGRES_DB=${DB_NAME:-shop_api}" in context["db_environment"]
        assert context["container_name"] == "shop-api"


class TestRendered:
    def test_dockerfile_node(self, make_config, renderer):
        output = _render(renderer, make_config(package_manager="npm"), "docker/Dockerfile.j2")
        assert "FROM node:20-alpine" in output
        assert "npm ci" in output
        assert "npm run build" in output
        assert 'CMD ["npm", "start"]' in output
        assert "HEALTHCHECK" in output

    def test_dockerfile_bun_ws(self, make_config, renderer):
        output = _render(renderer, make_config(protocol="ws"), "docker/Dockerfile.j2")
        assert "FROM oven/bun:1" in output
        assert "bun.lockb" in output
        assert "HEALTHCHECK" not in output

    @pytest.mark.parametrize(
        "orm,database,image",
        [("prisma", "postgresql", "postgres:16-alpine"), ("sequelize", "mysql", "mysql:8"),
         ("mongoose", None, "mongo:7")],
    )
    def test_compose_database_service(self, make_config, renderer, orm, database, image):
        config = make_config(orm=orm, database=database)
        compose = yaml.safe_load(_render(renderer, config, "docker/docker-compose.yml.j2"))
        assert compose["services"]["db"]["image"] == image
        assert "DATABASE_URL" in str(compose["services"]["app"]["environment"])
        assert "db" in compose["services"]["app"]["depends_on"]

    def test_compose_without_database(self, make_config, renderer):
        compose = yaml.safe_load(
            _render(renderer, make_config(orm="none"), "docker/docker-compose.yml.j2")
        )
        assert list(compose["services"]) == ["app"]
