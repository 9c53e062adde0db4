"""Option catalog and compatibility tables.

Closed sets of valid values per configuration dimension, the per-ORM
dialect subsets, the managed-host compatibility table, and the packages
the generated project can depend on.
"""

from __future__ import annotations

from .models import (
    ORM,
    CatalogDependency,
    DatabaseEngine,
    DatabaseHost,
    Frontend,
    PackageImport,
)
from .versions import pinned


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

FRONTEND_LABELS: dict[Frontend, str] = {
    Frontend.REACT: "React",
    Frontend.HTML: "HTML",
    Frontend.SVELTE: "Svelte",
    Frontend.VUE: "Vue",
    Frontend.HTMX: "HTMX",
}


# ---------------------------------------------------------------------------
# Compatibility tables
# ---------------------------------------------------------------------------

DRIZZLE_DIALECTS: frozenset[DatabaseEngine] = frozenset({
    DatabaseEngine.GEL,
    DatabaseEngine.MYSQL,
    DatabaseEngine.POSTGRESQL,
    DatabaseEngine.SQLITE,
    DatabaseEngine.SINGLESTORE,
})

PRISMA_DIALECTS: frozenset[DatabaseEngine] = frozenset({
    DatabaseEngine.MYSQL,
    DatabaseEngine.POSTGRESQL,
    DatabaseEngine.SQLITE,
    DatabaseEngine.MARIADB,
    DatabaseEngine.COCKROACHDB,
    DatabaseEngine.MSSQL,
})

ORM_DIALECTS: dict[ORM, frozenset[DatabaseEngine]] = {
    ORM.DRIZZLE: DRIZZLE_DIALECTS,
    ORM.PRISMA: PRISMA_DIALECTS,
}

HOST_ENGINES: dict[DatabaseHost, frozenset[DatabaseEngine]] = {
    DatabaseHost.NEON: frozenset({DatabaseEngine.POSTGRESQL}),
    DatabaseHost.PLANETSCALE: frozenset({DatabaseEngine.POSTGRESQL, DatabaseEngine.MYSQL}),
    DatabaseHost.TURSO: frozenset({DatabaseEngine.SQLITE}),
}


def is_host_compatible(engine: DatabaseEngine, host: DatabaseHost) -> bool:
    """Return whether *host* may serve *engine*.  ``none`` is always allowed."""
    if host is DatabaseHost.NONE:
        return True
    return engine in HOST_ENGINES.get(host, frozenset())


def is_orm_compatible(engine: DatabaseEngine, orm: ORM) -> bool:
    """Return whether *orm* supports *engine*.  ``none`` is always allowed."""
    if orm is ORM.NONE:
        return True
    return engine in ORM_DIALECTS[orm]


def hosts_for(engine: DatabaseEngine) -> list[str]:
    """Hosts compatible with *engine*, ``none`` last."""
    hosts = [h.value for h in DatabaseHost if h is not DatabaseHost.NONE and is_host_compatible(engine, h)]
    return [*hosts, DatabaseHost.NONE.value]


def orms_for(engine: DatabaseEngine) -> list[str]:
    """ORMs compatible with *engine*, ``none`` last."""
    orms = [o.value for o in ORM if o is not ORM.NONE and is_orm_compatible(engine, o)]
    return [*orms, ORM.NONE.value]


# ---------------------------------------------------------------------------
# Dependency catalog
# ---------------------------------------------------------------------------


def _dep(
    package: str,
    *imports: PackageImport,
    dev: bool = False,
    label: str = "",
) -> CatalogDependency:
    return CatalogDependency(
        package=package,
        version=pinned(package),
        dev=dev,
        imports=imports,
        label=label,
    )


DEFAULT_DEPENDENCIES: tuple[CatalogDependency, ...] = (
    _dep("elysia", PackageImport(name="Elysia")),
)

# staticPlugin's ``assets`` is rewritten to the configured build directory
# by the dependency collector.
DEFAULT_PLUGINS: tuple[CatalogDependency, ...] = (
    _dep(
        "@absolutejs/absolute",
        PackageImport(name="asset"),
        PackageImport(name="build"),
        PackageImport(name="networking", is_plugin=True, invoke=False),
    ),
    _dep(
        "@elysiajs/static",
        PackageImport(
            name="staticPlugin",
            is_plugin=True,
            config={"assets": "./build", "prefix": ""},
        ),
    ),
)

AVAILABLE_PLUGINS: dict[str, CatalogDependency] = {
    dep.package: dep
    for dep in (
        _dep("@elysiajs/cors", PackageImport(name="cors", is_plugin=True), label="CORS"),
        _dep("@elysiajs/swagger", PackageImport(name="swagger", is_plugin=True), label="Swagger"),
        _dep(
            "elysia-rate-limit",
            PackageImport(name="rateLimit", is_plugin=True),
            label="Rate limiting",
        ),
    )
}

AUTH_PLUGIN: CatalogDependency = _dep(
    "@absolutejs/auth",
    PackageImport(name="absoluteAuth", is_plugin=True),
)

SCOPED_STATE_PLUGIN: CatalogDependency = _dep(
    "elysia-scoped-state",
    PackageImport(name="scopedState", is_plugin=True, config={"count": {"value": 0}}),
)

FRAMEWORK_DEPENDENCIES: dict[Frontend, tuple[CatalogDependency, ...]] = {
    Frontend.REACT: (
        _dep("react"),
        _dep("react-dom"),
        _dep("@types/react", dev=True),
    ),
    Frontend.SVELTE: (_dep("svelte"),),
    Frontend.VUE: (_dep("vue"),),
    Frontend.HTMX: (SCOPED_STATE_PLUGIN,),
    Frontend.HTML: (),
}

ORM_DEPENDENCIES: dict[ORM, tuple[CatalogDependency, ...]] = {
    ORM.DRIZZLE: (_dep("drizzle-orm"), _dep("drizzle-kit", dev=True)),
    ORM.PRISMA: (_dep("@prisma/client"), _dep("prisma", dev=True)),
    ORM.NONE: (),
}

TAILWIND_DEPENDENCIES: tuple[CatalogDependency, ...] = (
    _dep("tailwindcss", dev=True),
    _dep("@tailwindcss/cli", dev=True),
    _dep("autoprefixer", dev=True),
    _dep("postcss", dev=True),
)

ESLINT_PRETTIER_DEPENDENCIES: tuple[CatalogDependency, ...] = (
    _dep("eslint", dev=True),
    _dep("prettier", dev=True),
    _dep("typescript-eslint", dev=True),
    _dep("@eslint/js", dev=True),
    _dep("globals", dev=True),
)

PRETTIER_SVELTE_DEPENDENCY: CatalogDependency = _dep("prettier-plugin-svelte", dev=True)

BIOME_DEPENDENCIES: tuple[CatalogDependency, ...] = (
    _dep("@biomejs/biome", dev=True),
)

TYPESCRIPT_DEPENDENCY: CatalogDependency = _dep("typescript", dev=True)
