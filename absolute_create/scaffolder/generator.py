"""Main scaffolding orchestrator.

Takes a resolved ``Configuration`` and generates the project directory:
``package.json``, ``src/backend/server.ts`` and its imports, database
handlers, schema and init scripts, the database compose file, ``.env`` and
the auth utility.

Artifact building (:meth:`ProjectGenerator.build_artifacts`) is pure and
returns a path -> text mapping; :meth:`ProjectGenerator.generate` adds the
I/O around it (directory skeleton, optional registry lookups, port
allocation, writes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field

from ..config import ScaffoldSettings
from ..errors import ExternalToolError
from ..models import Configuration, DatabaseEngine, DependencyEntry
from ..registry import NpmRegistryClient
from ..utils import (
    ensure_dir,
    find_available_port,
    require_tool,
    run_command,
    write_text_file,
)
from .auth import AUTH_CONFIG_PATH, generate_auth_config
from .dependencies import collect_dependencies, resolve_versions
from .docker_gen import DEFAULT_PORTS, DatabaseContainer, DockerGenerator, uses_docker
from .env import ENV_PATH, generate_env
from .handlers import generate_handlers
from .imports import build_imports
from .manifest import MANIFEST_PATH, render_manifest
from .schema import SchemaGenerator
from .server import SERVER_PATH, ServerGenerator
from .templates import TemplateRenderer

SQLITE_GUIDANCE = "Install the sqlite3 command-line shell: https://sqlite.org/download.html"


class GeneratedProject(BaseModel):
    """Every generated file, keyed by project-relative path."""

    files: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    dependencies: list[DependencyEntry] = Field(default_factory=list)
    database_port: int | None = None
    root: Path | None = None


class ProjectGenerator:
    """Main scaffolding orchestrator.

    Given a resolved ``Configuration``, generates:
    - ``package.json`` with dependencies and scripts
    - ``src/backend/server.ts`` and any import side files
    - database handlers, schema, init script and ``drizzle.config.ts``
    - ``<db>/docker-compose.db.yml`` for local container engines
    - ``.env`` and the OAuth2 auth utility
    """

    def __init__(
        self,
        config: Configuration,
        settings: ScaffoldSettings | None = None,
        registry: NpmRegistryClient | None = None,
        env_variables: Iterable[str] = (),
    ) -> None:
        self.config = config
        self.settings = settings or ScaffoldSettings()
        self.registry = registry
        self.env_variables = tuple(env_variables)
        self.renderer = TemplateRenderer()
        self.docker_gen = DockerGenerator(self.renderer)
        self.schema_gen = SchemaGenerator(self.renderer)
        self.server_gen = ServerGenerator(self.renderer)

    # -- Pure artifact building --------------------------------------------

    def build_artifacts(
        self,
        dependencies: list[DependencyEntry],
        database_port: int | None = None,
    ) -> GeneratedProject:
        """Render every artifact without touching the file system.

        Args:
            dependencies: Collected (and possibly version-resolved) entries.
            database_port: Host port allocated for a local container engine.

        Raises:
            UnsupportedCombinationError: If any artifact has no template for
                the configuration.
        """
        config = self.config
        files: dict[str, str] = {MANIFEST_PATH: render_manifest(config, dependencies)}
        warnings: list[str] = []

        auth = generate_auth_config(config, self.renderer)
        providers: list[str] = []
        if auth is not None:
            files[AUTH_CONFIG_PATH] = auth.text
            providers = auth.providers
            warnings.extend(auth.warnings)

        imports = build_imports(config, dependencies)
        files.update(imports.side_files)
        files[SERVER_PATH] = self.server_gen.assemble(config, dependencies, imports, providers)

        if config.has_database:
            path, text = generate_handlers(config, self.renderer)
            files[path] = text
            files.update(self.schema_gen.generate(config))
            files.update(self.docker_gen.generate(config, database_port))

        env = generate_env(config, database_port, self.env_variables)
        if env is not None:
            files[ENV_PATH] = env

        return GeneratedProject(
            files=files,
            warnings=warnings,
            dependencies=dependencies,
            database_port=database_port,
        )

    # -- Public API --------------------------------------------------------

    def skeleton_directories(self) -> list[str]:
        config = self.config
        dirs = [
            "src/backend/handlers",
            "src/backend/utils",
            config.assets_directory,
            config.public_directory,
        ]
        for selection in config.frontends:
            base = f"src/frontend/{selection.directory}" if selection.directory else "src/frontend"
            dirs.append(f"{base}/pages")
        if config.has_database:
            dirs.append(config.db_dir)
        return list(dict.fromkeys(dirs))

    async def allocate_port(self) -> int | None:
        """Pick a free host port for the database container, if one is needed."""
        if not uses_docker(self.config):
            return None
        return await find_available_port(
            DEFAULT_PORTS[self.config.database_engine],
            self.settings.max_port_attempts,
            self.settings.port_probe_host,
        )

    async def collect(self) -> list[DependencyEntry]:
        dependencies = collect_dependencies(self.config)
        if self.settings.latest:
            registry = self.registry or NpmRegistryClient(
                self.settings.registry_url, self.settings.registry_timeout
            )
            dependencies = await resolve_versions(dependencies, registry)
        return dependencies

    async def generate(self, output_dir: str | Path | None = None) -> GeneratedProject:
        """Generate the project under ``<output_dir>/<project_name>``.

        The directory skeleton is created before any artifact is rendered,
        so a template lookup failure leaves it on disk for inspection.

        Returns:
            The ``GeneratedProject`` with ``root`` set.

        Raises:
            UnsupportedCombinationError: If an artifact has no template.
            NoAvailablePortError: If no host port could be allocated.
        """
        base = Path(output_dir) if output_dir is not None else self.settings.output_dir
        project_root = base / self.config.project_name

        await asyncio.to_thread(ensure_dir, project_root)
        for directory in self.skeleton_directories():
            await asyncio.to_thread(ensure_dir, project_root / directory)

        dependencies = await self.collect()
        port = await self.allocate_port()
        project = self.build_artifacts(dependencies, port)

        await asyncio.gather(
            *(write_text_file(project_root / path, text) for path, text in project.files.items())
        )
        project.root = project_root
        return project

    async def initialize_database(self, project_root: str | Path) -> None:
        """Create the demo table in the project's local database.

        Container engines are started, initialized and always stopped
        again; local SQLite is initialized through the ``sqlite3`` shell.

        Raises:
            ExternalToolError: If docker or sqlite3 is missing or fails.
        """
        config = self.config
        root = Path(project_root)
        if not config.is_local_database:
            return

        _, script = self.schema_gen.init_script(config)
        if uses_docker(config):
            async with DatabaseContainer(config, root) as container:
                await container.initialize(script)
            return

        if config.database_engine is DatabaseEngine.SQLITE:
            require_tool("sqlite3", SQLITE_GUIDANCE)
            database = f"{config.db_dir}/database.sqlite"
            init = f"{config.db_dir}/init.sql"
            returncode, stdout, stderr = await run_command(
                ["sqlite3", database, f".read {init}"], cwd=root
            )
            if returncode != 0:
                raise ExternalToolError("sqlite3", stderr or stdout)
