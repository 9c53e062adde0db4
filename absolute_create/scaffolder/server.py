"""Server entry point assembly.

``src/backend/server.ts`` is composed from named sections in a fixed
order: imports, the build call, the database connection, and the Elysia
app chain (plugins, routes, error handler).  Assembly is pure text
composition; nothing is written here.
"""

from __future__ import annotations

import json
import textwrap
from collections.abc import Iterable, Sequence

from ..models import Configuration, DependencyEntry, Frontend, PackageImport
from .dependencies import plugin_imports
from .drivers import driver_profile
from .imports import ImportBlock, needs_vue_importer
from .templates import TemplateRenderer

SERVER_PATH = "src/backend/server.ts"

AUTH_ROUTES: dict[str, str] = {
    "authorize": "/auth/authorize/:provider",
    "callback": "/auth/callback/:provider",
    "profile": "/auth/profile",
    "signout": "/auth/signout",
    "status": "/auth/session",
}

ERROR_HANDLER = """\
.on('error', ({ error, request }) => {
  const message = error instanceof Error ? error.message : String(error)
  console.error(`Server error on ${request.method} ${request.url}: ${message}`)
})"""

COUNT_ROUTES = (
    """\
.get('/count/:uid', ({ params: { uid } }) => getCountHistory(db, uid), {
  params: t.Object({ uid: t.Number() })
})""",
    """\
.post('/count', ({ body: { count } }) => createCountHistory({ count, db }), {
  body: t.Object({ count: t.Number() })
})""",
)

HTMX_ROUTES = (
    ".post('/htmx/reset', ({ resetScopedStore }) => resetScopedStore())",
    ".get('/htmx/count', ({ scopedStore }) => scopedStore.count)",
    ".post('/htmx/increment', ({ scopedStore }) => ++scopedStore.count)",
)


class ServerSource:
    """Ordered named sections joined by blank lines."""

    def __init__(self) -> None:
        self._sections: list[tuple[str, str]] = []

    def add(self, name: str, text: str) -> None:
        if text:
            self._sections.append((name, text))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._sections]

    def section(self, name: str) -> str | None:
        for section_name, text in self._sections:
            if section_name == name:
                return text
        return None

    def render(self) -> str:
        return "\n\n".join(text for _, text in self._sections) + "\n"


# ---------------------------------------------------------------------------
# Section builders
# ---------------------------------------------------------------------------


def _frontend_path(directory: str) -> str:
    return f"src/frontend/{directory}" if directory else "src/frontend"


def build_block(config: Configuration) -> str:
    """The ``build({...})`` call that compiles every frontend."""
    options = [
        f"assetsDirectory: '{config.assets_directory}'",
        f"buildDirectory: '{config.build_directory}'",
    ]
    for selection in config.frontends:
        options.append(f"{selection.framework.value}Directory: '{_frontend_path(selection.directory)}'")
    options.append(f"publicDirectory: '{config.public_directory}'")
    if config.tailwind is not None:
        options.append(
            f"tailwind: {{ input: '{config.tailwind.input}', output: '{config.tailwind.output}' }}"
        )

    declaration = "" if config.html_only else "const manifest = "
    body = ",\n".join(f"  {option}" for option in options)
    return f"{declaration}await build({{\n{body}\n}})"


def plugin_use(plugin: PackageImport) -> str:
    if not plugin.invoke:
        return f".use({plugin.name})"
    if plugin.config is None:
        return f".use({plugin.name}())"
    return f".use({plugin.name}({json.dumps(plugin.config, separators=(',', ':'))}))"


def page_handler_call(config: Configuration, framework: Frontend, directory: str) -> str:
    """The page-request handler expression for one frontend."""
    pages = f"{config.build_directory}{'/' + directory if directory else ''}/pages"

    if framework is Frontend.HTML:
        return f"handleHTMLPageRequest(`{pages}/HTMLExample.html`)"
    if framework is Frontend.HTMX:
        return f"handleHTMXPageRequest(`{pages}/HTMXExample.html`)"
    if framework is Frontend.REACT:
        return (
            "handleReactPageRequest(\n"
            "  ReactExample,\n"
            "  asset(manifest, 'ReactExampleIndex'),\n"
            "  { initialCount: 0, cssPath: asset(manifest, 'ReactExampleCSS') }\n"
            ")"
        )
    if framework is Frontend.SVELTE:
        return (
            "handleSveltePageRequest(\n"
            "  SvelteExample,\n"
            "  asset(manifest, 'SvelteExample'),\n"
            "  asset(manifest, 'SvelteExampleIndex'),\n"
            "  { initialCount: 0, cssPath: asset(manifest, 'SvelteExampleCSS') }\n"
            ")"
        )

    component = "vueImports.VueExample" if needs_vue_importer(config) else "VueExample"
    return (
        "handleVuePageRequest(\n"
        f"  {component},\n"
        "  asset(manifest, 'VueExample'),\n"
        "  asset(manifest, 'VueExampleIndex'),\n"
        "  generateHeadElement({\n"
        "    cssPath: asset(manifest, 'VueExampleCSS'),\n"
        "    title: 'AbsoluteJS + Vue',\n"
        "    description: 'A Vue.js example with AbsoluteJS'\n"
        "  }),\n"
        "  { initialCount: 0 }\n"
        ")"
    )


def frontend_routes(config: Configuration) -> list[str]:
    """One route per frontend; the first selected frontend also serves ``/``."""
    routes: list[str] = []
    for index, selection in enumerate(config.frontends):
        handler = f"() => {page_handler_call(config, selection.framework, selection.directory)}"
        if index == 0:
            routes.append(f".get('/', {handler})")
        routes.append(f".get('/{selection.framework.value}', {handler})")
        if selection.framework is Frontend.HTMX:
            routes.extend(HTMX_ROUTES)
    return routes


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ServerGenerator:
    """Assembles ``server.ts`` from the collected artifacts."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def auth_use(self, config: Configuration, providers: Sequence[str]) -> str:
        return self.renderer.render(
            "auth_use.ts.j2",
            {
                "generic": "<User>" if config.has_orm else "",
                "has_database": config.has_database,
                "providers": json.dumps(list(providers)),
                "routes": AUTH_ROUTES,
            },
        ).rstrip("\n")

    def app_chain(
        self,
        config: Configuration,
        dependencies: Iterable[DependencyEntry],
        providers: Sequence[str],
    ) -> list[str]:
        chain: list[str] = []
        for plugin in plugin_imports(dependencies):
            if plugin.name == "absoluteAuth":
                chain.append(self.auth_use(config, providers))
            else:
                chain.append(plugin_use(plugin))

        chain.extend(frontend_routes(config))
        if config.has_database and not config.uses_auth:
            chain.extend(COUNT_ROUTES)
        chain.append(ERROR_HANDLER)
        return chain

    def build(
        self,
        config: Configuration,
        dependencies: Iterable[DependencyEntry],
        imports: ImportBlock,
        auth_providers: Sequence[str] = (),
    ) -> ServerSource:
        """Build the sectioned server source.

        Args:
            config: A resolved configuration.
            dependencies: Collected dependencies; their plugin imports become
                ``.use(...)`` statements in dependency order.
            imports: The merged import block.
            auth_providers: Providers listed by ``GET /auth/providers``.

        Raises:
            UnsupportedCombinationError: If the database has no driver profile.
        """
        dependencies = list(dependencies)
        source = ServerSource()
        source.add("imports", imports.text)
        source.add("build", build_block(config))
        if config.has_database:
            source.add("database", driver_profile(config).connection)

        chain = self.app_chain(config, dependencies, auth_providers)
        app = "\n".join(["new Elysia()", *(textwrap.indent(item, "  ") for item in chain)])
        source.add("app", app)
        return source

    def assemble(
        self,
        config: Configuration,
        dependencies: Iterable[DependencyEntry],
        imports: ImportBlock,
        auth_providers: Sequence[str] = (),
    ) -> str:
        """Return the full text of ``src/backend/server.ts``."""
        return self.build(config, dependencies, imports, auth_providers).render()
