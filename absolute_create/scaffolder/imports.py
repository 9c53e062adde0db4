"""Import block builder for the generated server.

Raw ``import`` lines are gathered from every contributor (page handlers,
dependency imports, example components, the database driver, handler
modules, auth wiring) and merged per module path into one canonical
statement each.  Merging is idempotent: feeding the merged block back in
yields identical text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from pydantic import BaseModel, Field

from ..models import Configuration, DependencyEntry, Frontend, ORM
from .drivers import driver_profile

_TYPE_IMPORT = re.compile(r"""^import\s+type\s+\{([^}]*)\}\s+from\s+['"](.+?)['"];?$""")
_VALUE_IMPORT = re.compile(r"""^import\s+(.+?)\s+from\s+['"](.+?)['"];?$""")

PAGE_HANDLERS: dict[Frontend, tuple[str, ...]] = {
    Frontend.HTML: ("handleHTMLPageRequest",),
    Frontend.REACT: ("handleReactPageRequest",),
    Frontend.SVELTE: ("handleSveltePageRequest",),
    Frontend.VUE: ("handleVuePageRequest", "generateHeadElement"),
    Frontend.HTMX: ("handleHTMXPageRequest",),
}

VUE_IMPORTER_PATH = "src/backend/utils/vueImporter.ts"


class ParsedImport(BaseModel):
    """One import statement broken into its parts."""

    module: str
    default: str | None = None
    names: list[str] = Field(default_factory=list)
    type_names: list[str] = Field(default_factory=list)


class ImportBlock(BaseModel):
    """The merged import text plus any side files it depends on."""

    text: str
    side_files: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing and merging
# ---------------------------------------------------------------------------


def _split_names(body: str) -> list[str]:
    return [name.strip() for name in body.split(",") if name.strip()]


def parse_import(line: str) -> ParsedImport | None:
    """Parse a single ``import`` statement.

    Handles ``import type { A } from 'm'``, ``import D from 'm'``,
    ``import { a, type B } from 'm'`` and ``import D, { a } from 'm'``.
    Returns ``None`` for anything else.
    """
    line = line.strip()
    match = _TYPE_IMPORT.match(line)
    if match:
        return ParsedImport(module=match.group(2), type_names=_split_names(match.group(1)))

    match = _VALUE_IMPORT.match(line)
    if not match:
        return None
    clause, module = match.group(1).strip(), match.group(2)
    parsed = ParsedImport(module=module)

    brace = clause.find("{")
    if brace == -1:
        parsed.default = clause
        return parsed

    default = clause[:brace].strip().rstrip(",").strip()
    if default:
        parsed.default = default
    for name in _split_names(clause[brace + 1 : clause.rfind("}")]):
        if name.startswith("type "):
            parsed.type_names.append(name[len("type ") :].strip())
        else:
            parsed.names.append(name)
    return parsed


def _sort_key(name: str) -> tuple[str, str]:
    bare = name[len("type ") :] if name.startswith("type ") else name
    return (bare.lower(), bare)


def merge_imports(lines: Iterable[str]) -> str:
    """Merge raw import lines into one statement per module path.

    The first default import seen for a module wins.  A name imported both
    as a type and as a value is kept as a value only.  Statements are sorted
    by module path and names are sorted alphabetically.
    """
    defaults: dict[str, str | None] = {}
    values: dict[str, set[str]] = {}
    types: dict[str, set[str]] = {}

    for line in lines:
        parsed = parse_import(line)
        if parsed is None:
            continue
        module = parsed.module
        if defaults.get(module) is None:
            defaults[module] = parsed.default
        values.setdefault(module, set()).update(parsed.names)
        types.setdefault(module, set()).update(parsed.type_names)

    statements: list[str] = []
    for module in sorted(defaults, key=lambda path: (path.lower(), path)):
        default = defaults[module]
        value_names = values[module]
        type_only = types[module] - value_names

        if default is None and not value_names:
            if not type_only:
                continue
            names = ", ".join(sorted(type_only, key=_sort_key))
            statements.append(f"import type {{ {names} }} from '{module}'")
            continue

        parts: list[str] = []
        if default is not None:
            parts.append(default)
        named = [*value_names, *(f"type {name}" for name in type_only)]
        if named:
            parts.append("{ " + ", ".join(sorted(named, key=_sort_key)) + " }")
        statements.append(f"import {', '.join(parts)} from '{module}'")

    return "\n".join(statements)


# ---------------------------------------------------------------------------
# Contributors
# ---------------------------------------------------------------------------


def example_page_path(directory: str, file: str, depth: int = 1) -> str:
    """Relative path from the backend to an example page component."""
    prefix = "../" * depth
    return f"{prefix}frontend{'/' + directory if directory else ''}/pages/{file}"


def _handler_imports(config: Configuration) -> list[str]:
    lines: list[str] = []
    for framework, names in PAGE_HANDLERS.items():
        if config.requires(framework):
            lines.append(f"import {{ {', '.join(names)} }} from '@absolutejs/absolute'")
    return lines


def _dependency_imports(config: Configuration, dependencies: Iterable[DependencyEntry]) -> list[str]:
    lines: list[str] = []
    for entry in dependencies:
        names = [imp.name for imp in entry.imports]
        if config.html_only:
            names = [name for name in names if name != "asset"]
        if names:
            lines.append(f"import {{ {', '.join(names)} }} from '{entry.package_name}'")
    return lines


def _component_imports(config: Configuration) -> list[str]:
    lines: list[str] = []
    react_dir = config.frontend_directory(Frontend.REACT)
    if react_dir is not None:
        lines.append(f"import {{ ReactExample }} from '{example_page_path(react_dir, 'ReactExample')}'")

    svelte_dir = config.frontend_directory(Frontend.SVELTE)
    if svelte_dir is not None:
        lines.append(
            f"import SvelteExample from '{example_page_path(svelte_dir, 'SvelteExample.svelte')}'"
        )

    vue_dir = config.frontend_directory(Frontend.VUE)
    if vue_dir is not None and svelte_dir is None:
        lines.append(f"import VueExample from '{example_page_path(vue_dir, 'VueExample.vue')}'")
    return lines


def _database_imports(config: Configuration) -> list[str]:
    if not config.has_database:
        return []

    profile = driver_profile(config)
    lines = list(profile.imports)
    if config.orm is ORM.DRIZZLE:
        lines.append(f"import {{ schema }} from '../../{config.db_dir}/schema'")

    if config.uses_auth:
        lines.append("import { createUser, getUser } from './handlers/userHandlers'")
    else:
        lines.append(
            "import { createCountHistory, getCountHistory } from './handlers/countHistoryHandlers'"
        )
        lines.append("import { t } from 'elysia'")
    return lines


def _auth_imports(config: Configuration) -> list[str]:
    if not config.uses_auth:
        return []

    lines = ["import { absoluteAuthConfig } from './utils/absoluteAuthConfig'"]
    if config.has_database:
        lines.append("import { instantiateUserSession } from '@absolutejs/auth'")
    if config.orm is ORM.DRIZZLE:
        lines.append(f"import type {{ User }} from '../../{config.db_dir}/schema'")
    elif config.orm is ORM.PRISMA:
        lines.append("import type { User } from '@prisma/client'")
    return lines


def needs_vue_importer(config: Configuration) -> bool:
    """Vue and Svelte example components both default-export, so Vue goes through a shim."""
    return config.requires(Frontend.VUE) and config.requires(Frontend.SVELTE)


def vue_importer_source(config: Configuration) -> str:
    vue_dir = config.frontend_directory(Frontend.VUE) or ""
    path = example_page_path(vue_dir, "VueExample.vue", depth=2)
    return f"import VueExample from '{path}'\n\nexport const vueImports = {{ VueExample }} as const\n"


def raw_import_lines(config: Configuration, dependencies: Iterable[DependencyEntry]) -> list[str]:
    """Every raw import line the server needs, before merging."""
    lines = [
        *_handler_imports(config),
        *_dependency_imports(config, dependencies),
        *_component_imports(config),
        *_database_imports(config),
        *_auth_imports(config),
    ]
    if needs_vue_importer(config):
        lines.append("import { vueImports } from './utils/vueImporter'")
    return lines


def build_imports(config: Configuration, dependencies: Iterable[DependencyEntry]) -> ImportBlock:
    """Build the merged server import block.

    Args:
        config: A resolved configuration.
        dependencies: Collected dependencies, whose declared imports are
            included.

    Returns:
        An ``ImportBlock`` whose ``side_files`` holds the Vue importer shim
        when both Vue and Svelte are selected.
    """
    side_files: dict[str, str] = {}
    if needs_vue_importer(config):
        side_files[VUE_IMPORTER_PATH] = vue_importer_source(config)
    return ImportBlock(
        text=merge_imports(raw_import_lines(config, dependencies)),
        side_files=side_files,
    )
