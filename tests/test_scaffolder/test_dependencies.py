"""Tests for dependency collection and version resolution.

Covers:
- Uniqueness and ordering over many configurations
- Conditional dependency sets (frameworks, ORM, drivers, tooling)
- staticPlugin assets pointing at the build directory
- resolve_versions with mocked registry lookups and per-package fallback
"""

from __future__ import annotations

import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest

from absolute_create.registry import NpmRegistryClient, VersionLookup
from absolute_create.scaffolder.dependencies import (
    collect_dependencies,
    plugin_imports,
    resolve_versions,
)
from absolute_create.versions import VERSIONS

pytestmark = pytest.mark.unit


def _names(entries) -> list[str]:
    return [entry.package_name for entry in entries]


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


class TestCollectInvariants:
    @pytest.mark.parametrize(
        "frontends, engine, orm, auth",
        list(
            itertools.product(
                [["react"], ["html", "htmx"], ["svelte", "vue", "react"]],
                ["none", "sqlite", "postgresql", "mysql"],
                ["none", "drizzle", "prisma"],
                ["none", "absoluteAuth"],
            )
        ),
    )
    def test_unique_and_sorted(self, make_config, frontends, engine, orm, auth):
        if engine == "none" and orm != "none":
            pytest.skip("ORM needs an engine")
        config = make_config(
            frontends=frontends,
            database_engine=engine,
            orm=orm,
            auth_provider=auth,
            use_tailwind=True,
        )
        names = _names(collect_dependencies(config))
        assert len(names) == len(set(names))
        assert names == sorted(names)

    def test_versions_come_from_pins(self, react_config):
        for entry in collect_dependencies(react_config):
            assert entry.resolved_version == VERSIONS[entry.package_name]


class TestCollectSets:
    def test_defaults(self, react_config):
        names = _names(collect_dependencies(react_config))
        for package in ("elysia", "@absolutejs/absolute", "@elysiajs/static", "react", "react-dom"):
            assert package in names
        assert "@absolutejs/auth" not in names

    def test_dev_flags(self, react_config):
        entries = {e.package_name: e for e in collect_dependencies(react_config)}
        assert entries["@types/react"].dev is True
        assert entries["typescript"].dev is True
        assert entries["react"].dev is False

    def test_drizzle_sqlite(self, sqlite_drizzle_config):
        entries = {e.package_name: e for e in collect_dependencies(sqlite_drizzle_config)}
        assert entries["drizzle-orm"].dev is False
        assert entries["drizzle-kit"].dev is True

    def test_prisma(self, make_config):
        names = _names(collect_dependencies(make_config(database_engine="mssql", orm="prisma")))
        assert "@prisma/client" in names
        assert "prisma" in names
        assert "mssql" not in names

    def test_neon_driver(self, make_config):
        names = _names(collect_dependencies(make_config(database_engine="postgresql", database_host="neon")))
        assert "@neondatabase/serverless" in names

    def test_auth_plugin(self, make_config):
        names = _names(collect_dependencies(make_config(auth_provider="absoluteAuth")))
        assert "@absolutejs/auth" in names

    def test_htmx_scoped_state(self, make_config):
        names = _names(collect_dependencies(make_config(frontends=["htmx"])))
        assert "elysia-scoped-state" in names

    def test_selected_plugins(self, make_config):
        config = make_config(plugins=["@elysiajs/cors", "elysia-rate-limit"])
        names = _names(collect_dependencies(config))
        assert "@elysiajs/cors" in names
        assert "elysia-rate-limit" in names
        assert "@elysiajs/swagger" not in names

    def test_tailwind(self, make_config):
        names = _names(collect_dependencies(make_config(use_tailwind=True)))
        assert {"tailwindcss", "@tailwindcss/cli", "autoprefixer", "postcss"} <= set(names)

    def test_biome_replaces_eslint(self, make_config):
        names = _names(collect_dependencies(make_config(code_quality_tool="biome")))
        assert "@biomejs/biome" in names
        assert "eslint" not in names
        assert "prettier" not in names

    def test_prettier_svelte_plugin(self, make_config):
        assert "prettier-plugin-svelte" in _names(collect_dependencies(make_config(frontends=["svelte"])))
        assert "prettier-plugin-svelte" not in _names(
            collect_dependencies(make_config(frontends=["svelte"], code_quality_tool="biome"))
        )

    def test_javascript_skips_typescript(self, make_config):
        names = _names(collect_dependencies(make_config(language="js")))
        assert "typescript" not in names

    def test_static_assets_follow_build_directory(self, make_config):
        config = make_config(build_directory="dist")
        plugins = {imp.name: imp for imp in plugin_imports(collect_dependencies(config))}
        assert plugins["staticPlugin"].config == {"assets": "./dist", "prefix": ""}


class TestPluginImports:
    def test_in_dependency_order(self, make_config):
        config = make_config(frontends=["htmx"], auth_provider="absoluteAuth", plugins=["@elysiajs/cors"])
        names = [imp.name for imp in plugin_imports(collect_dependencies(config))]
        assert names == ["networking", "absoluteAuth", "cors", "staticPlugin", "scopedState"]


# ---------------------------------------------------------------------------
# Version resolution
# ---------------------------------------------------------------------------


class TestResolveVersions:
    @pytest.mark.asyncio
    async def test_replaces_versions(self, react_config, mock_registry):
        entries = collect_dependencies(react_config)
        resolved = await resolve_versions(entries, mock_registry)

        assert _names(resolved) == _names(entries)
        assert {entry.resolved_version for entry in resolved} == {"9.9.9"}
        assert mock_registry.lookup.await_count == len(entries)

    @pytest.mark.asyncio
    async def test_failures_fall_back_per_package(self, react_config):
        async def lookup(package: str) -> VersionLookup:
            if package == "react":
                return VersionLookup(package=package, success=False, error="timeout")
            if package == "react-dom":
                raise RuntimeError("unexpected")
            return VersionLookup(package=package, version="2.0.0")

        registry = MagicMock(spec=NpmRegistryClient)
        registry.lookup = AsyncMock(side_effect=lookup)

        resolved = {e.package_name: e for e in await resolve_versions(collect_dependencies(react_config), registry)}

        assert resolved["react"].resolved_version == VERSIONS["react"]
        assert resolved["react-dom"].resolved_version == VERSIONS["react-dom"]
        assert resolved["elysia"].resolved_version == "2.0.0"
