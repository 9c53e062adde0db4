"""Integration tests for the resolve-then-scaffold flow.

These tests run the real resolver and generator end-to-end into a temporary
directory and verify that the generated project contains well-formed
configuration files.

No external services (Docker, bun, databases) are required.
"""

from __future__ import annotations

import itertools
import json
from pathlib import Path

import pytest
import yaml

from absolute_create.catalog import is_host_compatible, is_orm_compatible
from absolute_create.config import ScaffoldSettings
from absolute_create.models import ORM, DatabaseEngine, DatabaseHost, RawConfiguration
from absolute_create.resolver import resolve
from absolute_create.scaffolder import ProjectGenerator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _reachable_databases() -> list[tuple[str, str, str]]:
    combos = []
    for engine, host, orm in itertools.product(DatabaseEngine, DatabaseHost, ORM):
        if engine is DatabaseEngine.NONE:
            continue
        if is_host_compatible(engine, host) and is_orm_compatible(engine, orm):
            combos.append((engine.value, host.value, orm.value))
    return combos


async def _scaffold(tmp_path: Path, **selections) -> Path:
    """Resolve *selections* and generate the project under *tmp_path*."""
    selections.setdefault("project_name", "e2e-app")
    selections.setdefault("frontends", ["react", "svelte", "vue", "html", "htmx"])
    configuration = resolve(RawConfiguration(**selections)).configuration

    settings = ScaffoldSettings(output_dir=tmp_path, max_port_attempts=50)
    project = await ProjectGenerator(configuration, settings).generate()
    assert project.root is not None
    return project.root


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestScaffoldValidation:
    """Every reachable database selection yields a well-formed project."""

    @pytest.mark.parametrize("engine, host, orm", _reachable_databases())
    @pytest.mark.parametrize("auth", ["none", "absoluteAuth"])
    async def test_database_matrix(self, tmp_path: Path, engine: str, host: str, orm: str, auth: str) -> None:
        root = await _scaffold(
            tmp_path,
            database_engine=engine,
            database_host=host,
            orm=orm,
            auth_provider=auth,
        )

        manifest = json.loads((root / "package.json").read_text())
        assert manifest["name"] == "e2e-app"
        assert "elysia" in manifest["dependencies"]

        server = (root / "src/backend/server.ts").read_text()
        assert "new Elysia()" in server
        assert "const db = " in server

        compose = root / "db" / "docker-compose.db.yml"
        if compose.exists():
            data = yaml.safe_load(compose.read_text())
            service = data["services"]["db"]
            host_port, container_port = service["ports"][0].split(":")
            assert host_port.isdigit()
            assert container_port.isdigit()
            assert service["healthcheck"]["test"][0] == "CMD-SHELL"
            assert "db_data" in data["volumes"]

    async def test_drizzle_config_points_at_schema(self, tmp_path: Path) -> None:
        root = await _scaffold(tmp_path, database_engine="postgresql", orm="drizzle", database_directory="data")
        config = (root / "drizzle.config.ts").read_text()
        assert "'./data/schema.ts'" in config
        assert (root / "data" / "schema.ts").is_file()

    async def test_frontend_skeleton(self, tmp_path: Path) -> None:
        root = await _scaffold(tmp_path)
        for framework in ("react", "svelte", "vue", "html", "htmx"):
            assert (root / "src" / "frontend" / framework / "pages").is_dir()
        assert (root / "src" / "backend" / "utils" / "vueImporter.ts").is_file()
