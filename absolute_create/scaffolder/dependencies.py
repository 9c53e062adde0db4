"""Dependency collection and version resolution.

``collect_dependencies`` merges every dependency source for a configuration
into one list that is unique by package name (first occurrence wins) and
sorted by package name.  ``resolve_versions`` optionally replaces the pinned
versions with the latest published ones, falling back per package.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from ..catalog import (
    AUTH_PLUGIN,
    AVAILABLE_PLUGINS,
    BIOME_DEPENDENCIES,
    DEFAULT_DEPENDENCIES,
    DEFAULT_PLUGINS,
    ESLINT_PRETTIER_DEPENDENCIES,
    FRAMEWORK_DEPENDENCIES,
    ORM_DEPENDENCIES,
    PRETTIER_SVELTE_DEPENDENCY,
    TAILWIND_DEPENDENCIES,
    TYPESCRIPT_DEPENDENCY,
)
from ..models import (
    CatalogDependency,
    CodeQualityTool,
    Configuration,
    DependencyEntry,
    Frontend,
    Language,
    PackageImport,
)
from ..registry import NpmRegistryClient, VersionLookup
from .drivers import driver_profile


def _with_static_assets(dependency: CatalogDependency, build_directory: str) -> CatalogDependency:
    """Point staticPlugin's ``assets`` at the configured build directory."""
    imports = tuple(
        imp.model_copy(update={"config": {**imp.config, "assets": f"./{build_directory}"}})
        if imp.name == "staticPlugin" and imp.config is not None
        else imp
        for imp in dependency.imports
    )
    return dependency.model_copy(update={"imports": imports})


def _sources(config: Configuration) -> Iterable[CatalogDependency]:
    yield from DEFAULT_DEPENDENCIES
    for dependency in DEFAULT_PLUGINS:
        yield _with_static_assets(dependency, config.build_directory)

    if config.uses_auth:
        yield AUTH_PLUGIN

    for plugin in config.plugins:
        # Unknown identifiers are skipped.
        if plugin in AVAILABLE_PLUGINS:
            yield AVAILABLE_PLUGINS[plugin]

    for selection in config.frontends:
        yield from FRAMEWORK_DEPENDENCIES[selection.framework]

    if config.has_database:
        yield from driver_profile(config).packages
        yield from ORM_DEPENDENCIES[config.orm]

    if config.tailwind is not None:
        yield from TAILWIND_DEPENDENCIES

    if config.code_quality_tool is CodeQualityTool.ESLINT_PRETTIER:
        yield from ESLINT_PRETTIER_DEPENDENCIES
        if config.requires(Frontend.SVELTE):
            yield PRETTIER_SVELTE_DEPENDENCY
    else:
        yield from BIOME_DEPENDENCIES

    if config.language is Language.TS:
        yield TYPESCRIPT_DEPENDENCY


def collect_dependencies(config: Configuration) -> list[DependencyEntry]:
    """Collect the project's dependencies.

    Args:
        config: A resolved configuration.

    Returns:
        Entries unique by package name, sorted ascending by package name.

    Raises:
        UnsupportedCombinationError: If the database has no driver profile.
    """
    seen: dict[str, DependencyEntry] = {}
    for dependency in _sources(config):
        if dependency.package in seen:
            continue
        seen[dependency.package] = DependencyEntry(
            package_name=dependency.package,
            resolved_version=dependency.version,
            dev=dependency.dev,
            imports=dependency.imports,
        )
    return sorted(seen.values(), key=lambda entry: entry.package_name)


def plugin_imports(dependencies: Iterable[DependencyEntry]) -> list[PackageImport]:
    """Every plugin import across *dependencies*, in dependency order."""
    return [imp for entry in dependencies for imp in entry.imports if imp.is_plugin]


async def resolve_versions(
    dependencies: list[DependencyEntry],
    registry: NpmRegistryClient,
) -> list[DependencyEntry]:
    """Replace pinned versions with the latest published ones.

    All lookups run concurrently.  A lookup that fails, or raises, leaves
    that entry's pinned version in place; the batch itself never fails.
    """
    results = await asyncio.gather(
        *(registry.lookup(entry.package_name) for entry in dependencies),
        return_exceptions=True,
    )

    resolved: list[DependencyEntry] = []
    for entry, result in zip(dependencies, results):
        if isinstance(result, VersionLookup) and result.success and result.version:
            entry = entry.model_copy(update={"resolved_version": result.version})
        resolved.append(entry)
    return resolved
