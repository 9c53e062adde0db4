"""Compatibility resolver.

Turns a :class:`RawConfiguration` into a frozen :class:`Configuration`.
Validation runs in four passes (enum membership, host/engine
compatibility, ORM/dialect compatibility, frontend directory collisions)
and every issue is collected before anything is raised, so the user sees
the whole batch at once.  Only a clean batch proceeds to normalisation,
which never fails and reports its corrections as warnings.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from pydantic import BaseModel, Field

from .catalog import (
    AVAILABLE_PLUGINS,
    hosts_for,
    is_host_compatible,
    is_orm_compatible,
    orms_for,
)
from .errors import ConfigurationError, ValidationIssue
from .models import (
    ORM,
    AuthProvider,
    CodeQualityTool,
    Configuration,
    DatabaseEngine,
    DatabaseHost,
    DirectoryConfiguration,
    Frontend,
    FrontendSelection,
    Language,
    RawConfiguration,
    TailwindConfig,
)

E = TypeVar("E", bound=Enum)

DEFAULT_TAILWIND_INPUT = "./src/frontend/styles/tailwind.css"
DEFAULT_TAILWIND_OUTPUT = "./styles/tailwind.css"
DEFAULT_AUTH_PROVIDERS: tuple[str, ...] = ("google",)
NO_PLUGINS = "none"


class Resolution(BaseModel):
    """A resolved configuration plus the corrections applied to reach it."""

    configuration: Configuration
    warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Validation passes
# ---------------------------------------------------------------------------


def _parse_enum(
    enum_cls: type[E],
    field: str,
    value: str | None,
    default: E,
    issues: list[ValidationIssue],
) -> E | None:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        issues.append(
            ValidationIssue(
                field=field,
                value=value,
                message=f"'{value}' is not a valid {field.replace('_', ' ')}",
                allowed=tuple(m.value for m in enum_cls),
            )
        )
        return None


def _parse_frontends(raw: RawConfiguration, issues: list[ValidationIssue]) -> list[Frontend]:
    if not raw.frontends:
        issues.append(
            ValidationIssue(
                field="frontends",
                value=[],
                message="at least one frontend must be selected",
                allowed=tuple(f.value for f in Frontend),
            )
        )
        return []

    frontends: list[Frontend] = []
    for value in raw.frontends:
        framework = _parse_enum(Frontend, "frontends", value, Frontend.REACT, issues)
        if framework is not None and framework not in frontends:
            frontends.append(framework)
    return frontends


def _check_plugins(raw: RawConfiguration, issues: list[ValidationIssue]) -> tuple[str, ...]:
    plugins: list[str] = []
    for plugin in raw.plugins:
        if plugin == NO_PLUGINS:
            continue
        if plugin not in AVAILABLE_PLUGINS:
            issues.append(
                ValidationIssue(
                    field="plugins",
                    value=plugin,
                    message=f"unknown plugin '{plugin}'",
                    allowed=(*AVAILABLE_PLUGINS, NO_PLUGINS),
                )
            )
        elif plugin not in plugins:
            plugins.append(plugin)
    return tuple(plugins)


def _resolve_directories(
    raw: RawConfiguration,
    frontends: list[Frontend],
    issues: list[ValidationIssue],
) -> tuple[FrontendSelection, ...]:
    """Resolve each frontend's directory and reject collisions.

    An explicit directory always wins.  Otherwise a lone frontend lives at
    the frontend root and multiple frontends each get their framework name.
    """
    selected = {f.value for f in frontends}
    for key in raw.frontend_directories:
        if key not in selected:
            issues.append(
                ValidationIssue(
                    field="frontend_directories",
                    value=key,
                    message=f"directory given for unselected frontend '{key}'",
                    allowed=tuple(sorted(selected)),
                )
            )

    single = len(frontends) == 1
    owners: dict[str, Frontend] = {}
    selections: list[FrontendSelection] = []
    for framework in frontends:
        directory = raw.frontend_directories.get(framework.value)
        if directory is None:
            directory = "" if single else framework.value
        directory = directory.strip().strip("/")

        owner = owners.get(directory)
        if owner is not None:
            issues.append(
                ValidationIssue(
                    field="frontend_directories",
                    value=directory,
                    message=(
                        f"frontends '{owner.value}' and '{framework.value}' "
                        f"both resolve to directory '{directory or '.'}'"
                    ),
                )
            )
            continue
        owners[directory] = framework
        selections.append(FrontendSelection(framework=framework, directory=directory))
    return tuple(selections)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve(raw: RawConfiguration) -> Resolution:
    """Validate and normalise *raw* into a frozen ``Configuration``.

    Args:
        raw: Unvalidated user selections.

    Returns:
        A ``Resolution`` carrying the configuration and any warnings.

    Raises:
        ConfigurationError: With every issue found, if any.
    """
    issues: list[ValidationIssue] = []

    # 1. Enum membership
    language = _parse_enum(Language, "language", raw.language, Language.TS, issues)
    engine = _parse_enum(
        DatabaseEngine, "database_engine", raw.database_engine, DatabaseEngine.NONE, issues
    )
    host = _parse_enum(DatabaseHost, "database_host", raw.database_host, DatabaseHost.NONE, issues)
    orm = _parse_enum(ORM, "orm", raw.orm, ORM.NONE, issues)
    auth = _parse_enum(
        AuthProvider, "auth_provider", raw.auth_provider, AuthProvider.NONE, issues
    )
    quality = _parse_enum(
        CodeQualityTool,
        "code_quality_tool",
        raw.code_quality_tool,
        CodeQualityTool.ESLINT_PRETTIER,
        issues,
    )
    directory_configuration = _parse_enum(
        DirectoryConfiguration,
        "directory_configuration",
        raw.directory_configuration,
        DirectoryConfiguration.DEFAULT,
        issues,
    )
    frontends = _parse_frontends(raw, issues)
    plugins = _check_plugins(raw, issues)

    # 2. Host <-> engine
    has_engine = engine is not None and engine is not DatabaseEngine.NONE
    if has_engine and host is not None and not is_host_compatible(engine, host):
        issues.append(
            ValidationIssue(
                field="database_host",
                value=host.value,
                message=f"host '{host.value}' does not support engine '{engine.value}'",
                allowed=tuple(hosts_for(engine)),
            )
        )

    # 3. ORM <-> dialect
    if has_engine and orm is not None and not is_orm_compatible(engine, orm):
        issues.append(
            ValidationIssue(
                field="orm",
                value=orm.value,
                message=f"ORM '{orm.value}' does not support engine '{engine.value}'",
                allowed=tuple(orms_for(engine)),
            )
        )

    # 4. Directory collisions
    selections = _resolve_directories(raw, frontends, issues)

    if issues:
        raise ConfigurationError(issues)

    return _normalise(
        raw,
        language=language,
        engine=engine,
        host=host,
        orm=orm,
        auth=auth,
        quality=quality,
        directory_configuration=directory_configuration,
        selections=selections,
        plugins=plugins,
    )


def _normalise(
    raw: RawConfiguration,
    *,
    language: Language,
    engine: DatabaseEngine,
    host: DatabaseHost,
    orm: ORM,
    auth: AuthProvider,
    quality: CodeQualityTool,
    directory_configuration: DirectoryConfiguration,
    selections: tuple[FrontendSelection, ...],
    plugins: tuple[str, ...],
) -> Resolution:
    warnings: list[str] = []

    database_directory = raw.database_directory
    if engine is DatabaseEngine.NONE:
        if host is not DatabaseHost.NONE:
            warnings.append(f"Database host '{host.value}' ignored because no database engine is selected")
            host = DatabaseHost.NONE
        if orm is not ORM.NONE:
            warnings.append(f"ORM '{orm.value}' ignored because no database engine is selected")
            orm = ORM.NONE
        if database_directory:
            warnings.append("Database directory ignored because no database engine is selected")
        database_directory = None
    else:
        database_directory = (database_directory or "db").strip().strip("/") or "db"

    tailwind: TailwindConfig | None = None
    has_paths = raw.tailwind_input is not None or raw.tailwind_output is not None
    if raw.use_tailwind is False and has_paths:
        warnings.append("Tailwind input/output paths ignored because Tailwind is disabled")
    elif raw.use_tailwind or has_paths:
        tailwind = TailwindConfig(
            input=raw.tailwind_input or DEFAULT_TAILWIND_INPUT,
            output=raw.tailwind_output or DEFAULT_TAILWIND_OUTPUT,
        )

    auth_providers: tuple[str, ...] = ()
    if auth is not AuthProvider.NONE:
        auth_providers = tuple(dict.fromkeys(raw.auth_providers)) or DEFAULT_AUTH_PROVIDERS
    elif raw.auth_providers:
        warnings.append("Auth providers ignored because authentication is disabled")

    configuration = Configuration(
        project_name=raw.project_name,
        language=language,
        frontends=selections,
        database_engine=engine,
        database_host=host,
        orm=orm,
        auth_provider=auth,
        auth_providers=auth_providers,
        plugins=plugins,
        code_quality_tool=quality,
        directory_configuration=directory_configuration,
        tailwind=tailwind,
        build_directory=raw.build_directory or "build",
        assets_directory=raw.assets_directory or "src/backend/assets",
        public_directory=raw.public_directory or "public",
        database_directory=database_directory,
    )
    return Resolution(configuration=configuration, warnings=warnings)
