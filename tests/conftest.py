"""Shared pytest fixtures for the absolute-create test suite.

Provides reusable fixtures for:
- Building resolved configurations from keyword selections
- A real template renderer over the packaged templates
- Collected dependency lists
- Mocked npm registry clients and subprocess helpers
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from absolute_create.config import ScaffoldSettings
from absolute_create.models import Configuration, RawConfiguration
from absolute_create.registry import NpmRegistryClient, VersionLookup
from absolute_create.resolver import resolve
from absolute_create.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


def build_config(**selections: Any) -> Configuration:
    """Resolve a configuration from keyword selections.

    ``project_name`` defaults to ``demo-app`` and ``frontends`` to
    ``["react"]``; every other field takes the resolver's default.
    """
    selections.setdefault("project_name", "demo-app")
    selections.setdefault("frontends", ["react"])
    return resolve(RawConfiguration(**selections)).configuration


@pytest.fixture
def make_config() -> Callable[..., Configuration]:
    """Factory fixture returning ``build_config``."""
    return build_config


@pytest.fixture
def react_config() -> Configuration:
    """React only, no database, no auth."""
    return build_config()


@pytest.fixture
def sqlite_drizzle_config() -> Configuration:
    """React + local SQLite + Drizzle, no auth."""
    return build_config(database_engine="sqlite", orm="drizzle")


@pytest.fixture
def postgres_auth_config() -> Configuration:
    """React + local PostgreSQL + Drizzle + absoluteAuth."""
    return build_config(database_engine="postgresql", orm="drizzle", auth_provider="absoluteAuth")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


@pytest.fixture
def renderer() -> TemplateRenderer:
    """A TemplateRenderer over the packaged templates."""
    return TemplateRenderer()


@pytest.fixture
def settings(tmp_path: Path) -> ScaffoldSettings:
    """Settings writing under a temporary directory with a short port scan."""
    return ScaffoldSettings(output_dir=tmp_path, max_port_attempts=5)


# ---------------------------------------------------------------------------
# Registry and subprocess mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_registry() -> MagicMock:
    """An NpmRegistryClient whose lookups all return version 9.9.9."""
    registry = MagicMock(spec=NpmRegistryClient)

    async def _lookup(package: str) -> VersionLookup:
        return VersionLookup(package=package, version="9.9.9")

    registry.lookup = AsyncMock(side_effect=_lookup)
    return registry


@pytest.fixture
def mock_run_command() -> AsyncMock:
    """An async ``run_command`` replacement that always succeeds."""
    return AsyncMock(return_value=(0, "", ""))
