"""Domain models for project configuration and generated dependencies.

Each configuration dimension is a closed ``str`` enum so the value written
by the user, the value stored on the model, and the value rendered into
generated source are the same string.  ``RawConfiguration`` carries
unvalidated user input; ``Configuration`` is the frozen, fully-resolved
snapshot produced by :func:`absolute_create.resolver.resolve`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Option enums
# ---------------------------------------------------------------------------


class Frontend(str, Enum):
    REACT = "react"
    HTML = "html"
    SVELTE = "svelte"
    VUE = "vue"
    HTMX = "htmx"


class DatabaseEngine(str, Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    MONGODB = "mongodb"
    MARIADB = "mariadb"
    GEL = "gel"
    SINGLESTORE = "singlestore"
    COCKROACHDB = "cockroachdb"
    MSSQL = "mssql"
    NONE = "none"


class DatabaseHost(str, Enum):
    NEON = "neon"
    PLANETSCALE = "planetscale"
    TURSO = "turso"
    NONE = "none"


class ORM(str, Enum):
    DRIZZLE = "drizzle"
    PRISMA = "prisma"
    NONE = "none"


class AuthProvider(str, Enum):
    ABSOLUTE_AUTH = "absoluteAuth"
    NONE = "none"


class CodeQualityTool(str, Enum):
    ESLINT_PRETTIER = "eslint+prettier"
    BIOME = "biome"


class Language(str, Enum):
    TS = "ts"
    JS = "js"


class DirectoryConfiguration(str, Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


class OrmKind(str, Enum):
    """Data-access flavour used to index the template tables."""

    SQL = "sql"
    DRIZZLE = "drizzle"
    PRISMA = "prisma"
    NATIVE = "native"


class AuthKind(str, Enum):
    """Which demo table the generated handlers operate on."""

    AUTH = "auth"
    COUNT = "count"


LOCAL_HOST = "local"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TailwindConfig(BaseModel):
    """Tailwind input stylesheet and compiled output paths."""

    model_config = ConfigDict(frozen=True)

    input: str
    output: str


class FrontendSelection(BaseModel):
    """A selected frontend framework and its resolved directory."""

    model_config = ConfigDict(frozen=True)

    framework: Frontend
    directory: str = Field(default="", description="Directory under src/frontend, '' for the root")


class RawConfiguration(BaseModel):
    """Unvalidated user selections, as parsed from CLI flags.

    Every scalar is a plain string (or ``None`` for "not given") so that the
    resolver can report every invalid value at once instead of failing on
    the first one during model construction.
    """

    project_name: str = Field(..., min_length=1)
    language: str | None = None
    frontends: list[str] = Field(default_factory=list)
    frontend_directories: dict[str, str] = Field(default_factory=dict)
    database_engine: str | None = None
    database_host: str | None = None
    orm: str | None = None
    auth_provider: str | None = None
    auth_providers: list[str] = Field(default_factory=list)
    plugins: list[str] = Field(default_factory=list)
    code_quality_tool: str | None = None
    directory_configuration: str | None = None
    use_tailwind: bool | None = None
    tailwind_input: str | None = None
    tailwind_output: str | None = None
    build_directory: str | None = None
    assets_directory: str | None = None
    public_directory: str | None = None
    database_directory: str | None = None


class Configuration(BaseModel):
    """Immutable, fully-resolved snapshot of every user choice."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    language: Language = Language.TS
    frontends: tuple[FrontendSelection, ...]
    database_engine: DatabaseEngine = DatabaseEngine.NONE
    database_host: DatabaseHost = DatabaseHost.NONE
    orm: ORM = ORM.NONE
    auth_provider: AuthProvider = AuthProvider.NONE
    auth_providers: tuple[str, ...] = ()
    plugins: tuple[str, ...] = ()
    code_quality_tool: CodeQualityTool = CodeQualityTool.ESLINT_PRETTIER
    directory_configuration: DirectoryConfiguration = DirectoryConfiguration.DEFAULT
    tailwind: TailwindConfig | None = None
    build_directory: str = "build"
    assets_directory: str = "src/backend/assets"
    public_directory: str = "public"
    database_directory: str | None = None

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def has_database(self) -> bool:
        return self.database_engine is not DatabaseEngine.NONE

    @property
    def uses_auth(self) -> bool:
        return self.auth_provider is not AuthProvider.NONE

    @property
    def has_orm(self) -> bool:
        return self.orm is not ORM.NONE

    @property
    def is_local_database(self) -> bool:
        """True when the database runs locally rather than on a managed host."""
        return self.has_database and self.database_host is DatabaseHost.NONE

    @property
    def host_kind(self) -> str:
        if self.database_host is DatabaseHost.NONE:
            return LOCAL_HOST
        return self.database_host.value

    @property
    def orm_kind(self) -> OrmKind:
        if self.orm is ORM.DRIZZLE:
            return OrmKind.DRIZZLE
        if self.orm is ORM.PRISMA:
            return OrmKind.PRISMA
        if self.database_engine is DatabaseEngine.MONGODB:
            return OrmKind.NATIVE
        return OrmKind.SQL

    @property
    def auth_kind(self) -> AuthKind:
        return AuthKind.AUTH if self.uses_auth else AuthKind.COUNT

    @property
    def template_key(self) -> TemplateKey:
        return TemplateKey(
            engine=self.database_engine,
            orm_kind=self.orm_kind,
            host_kind=self.host_kind,
            auth_kind=self.auth_kind,
        )

    @property
    def db_dir(self) -> str:
        """Database directory, falling back to ``db``."""
        return self.database_directory or "db"

    def requires(self, framework: Frontend) -> bool:
        """Return whether *framework* is among the selected frontends."""
        return any(f.framework is framework for f in self.frontends)

    def frontend_directory(self, framework: Frontend) -> str | None:
        for selection in self.frontends:
            if selection.framework is framework:
                return selection.directory
        return None

    @property
    def html_only(self) -> bool:
        """True when only server-rendered frontends (HTML/HTMX) are selected."""
        return not any(
            self.requires(f) for f in (Frontend.REACT, Frontend.SVELTE, Frontend.VUE)
        )


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class PackageImport(BaseModel):
    """A name imported from a package, optionally registered as a plugin.

    ``config`` is the plugin's constructor argument: ``None`` means the
    plugin is called with no arguments, a dict is serialised as JSON.
    ``invoke=False`` registers the imported value itself (``.use(name)``).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    is_plugin: bool = False
    config: dict[str, Any] | None = None
    invoke: bool = True


class CatalogDependency(BaseModel):
    """A package as listed in the option catalog, before collection."""

    model_config = ConfigDict(frozen=True)

    package: str
    version: str
    dev: bool = False
    imports: tuple[PackageImport, ...] = ()
    label: str = ""


class DependencyEntry(BaseModel):
    """A collected dependency with its resolved version."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    resolved_version: str
    dev: bool = False
    imports: tuple[PackageImport, ...] = ()

    @property
    def is_plugin(self) -> bool:
        return any(imp.is_plugin for imp in self.imports)

    @property
    def plugin_config(self) -> dict[str, Any] | None:
        for imp in self.imports:
            if imp.is_plugin:
                return imp.config
        return None


class TemplateKey(BaseModel):
    """Lookup key for the database artifact tables."""

    model_config = ConfigDict(frozen=True)

    engine: DatabaseEngine
    orm_kind: OrmKind
    host_kind: str
    auth_kind: AuthKind

    def __str__(self) -> str:
        return f"{self.engine.value}:{self.orm_kind.value}:{self.host_kind}:{self.auth_kind.value}"
