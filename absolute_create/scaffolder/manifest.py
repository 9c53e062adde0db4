"""``package.json`` generation."""

from __future__ import annotations

import json
import shlex
from collections.abc import Iterable

from ..models import (
    ORM,
    CodeQualityTool,
    Configuration,
    DatabaseEngine,
    DependencyEntry,
    Frontend,
)
from .docker_gen import compose_command, container_spec, uses_docker

MANIFEST_PATH = "package.json"

_PRETTIER_EXTENSIONS: dict[Frontend, tuple[str, ...]] = {
    Frontend.REACT: ("jsx", "tsx"),
    Frontend.SVELTE: ("svelte",),
    Frontend.VUE: ("vue",),
}


def _format_script(config: Configuration) -> str:
    if config.code_quality_tool is CodeQualityTool.BIOME:
        return "biome format --write ./"

    extensions = ["js", "ts", "css", "json", "mjs", "md"]
    for framework, extra in _PRETTIER_EXTENSIONS.items():
        if config.requires(framework):
            extensions.extend(extra)
    if config.requires(Frontend.HTML) or config.requires(Frontend.HTMX):
        extensions.append("html")
    return f'prettier --write "./**/*.{{{",".join(extensions)}}}"'


def _lint_script(config: Configuration) -> str:
    if config.code_quality_tool is CodeQualityTool.BIOME:
        return "biome lint ./src"
    return "eslint ./src"


def _docker_scripts(config: Configuration) -> dict[str, str]:
    spec = container_spec(config)
    engine = config.database_engine.value

    def compose(*args: str) -> str:
        return " ".join(compose_command(config, *args))

    shell = shlex.quote(f"{spec.wait}; exec {spec.shell}")
    return {
        "db:up": (
            'sh -c "docker info >/dev/null 2>&1 || sudo service docker start; '
            f'{compose("up", "-d", "db")}"'
        ),
        "db:down": compose("down"),
        "db:reset": compose("down", "-v"),
        f"db:{engine}": f"{compose('exec', 'db', 'bash', '-lc')} {shell}",
        "predev": "bun db:up",
        "postdev": "bun db:down",
        f"predb:{engine}": "bun db:up",
        f"postdb:{engine}": "bun db:down",
    }


def build_scripts(config: Configuration) -> dict[str, str]:
    """The ``scripts`` block for *config*."""
    scripts = {
        "dev": "bash -c 'trap \"exit 0\" INT; bun run --watch src/backend/server.ts'",
        "format": _format_script(config),
        "lint": _lint_script(config),
        "typecheck": "bun run tsc --noEmit",
    }

    if uses_docker(config):
        scripts.update(_docker_scripts(config))
    elif config.is_local_database and config.database_engine is DatabaseEngine.SQLITE:
        database = f"{config.db_dir}/database.sqlite"
        scripts["db:sqlite"] = f"sqlite3 {database}"
        scripts["db:init"] = f"sqlite3 {database} < {config.db_dir}/init.sql"

    if config.orm is ORM.DRIZZLE:
        scripts["db:push"] = "drizzle-kit push"
        scripts["db:generate"] = "drizzle-kit generate"
    elif config.orm is ORM.PRISMA:
        schema = f"--schema {config.db_dir}/schema.prisma"
        scripts["db:push"] = f"prisma db push {schema}"
        scripts["db:generate"] = f"prisma generate {schema}"

    return scripts


def build_manifest(config: Configuration, dependencies: Iterable[DependencyEntry]) -> dict[str, object]:
    """Assemble the ``package.json`` object.

    ``dependencies`` and ``devDependencies`` keep the collector's sorted
    order.
    """
    runtime: dict[str, str] = {}
    dev: dict[str, str] = {}
    for entry in dependencies:
        (dev if entry.dev else runtime)[entry.package_name] = entry.resolved_version

    return {
        "name": config.project_name,
        "version": "0.0.0",
        "type": "module",
        "scripts": build_scripts(config),
        "dependencies": dict(sorted(runtime.items())),
        "devDependencies": dict(sorted(dev.items())),
    }


def render_manifest(config: Configuration, dependencies: Iterable[DependencyEntry]) -> str:
    return json.dumps(build_manifest(config, dependencies), indent=2) + "\n"
