"""CRUD handler generation for the demo table.

Every reachable (engine, ORM kind, host kind, auth kind) combination maps to
exactly one handler template plus its rendering context.  The table is
built from the driver profiles so a driver without handlers cannot slip in
unnoticed; a lookup miss raises ``UnsupportedCombinationError`` and is never
substituted with another driver's template.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import UnsupportedCombinationError
from ..models import (
    LOCAL_HOST,
    AuthKind,
    Configuration,
    DatabaseEngine,
    OrmKind,
    TemplateKey,
)
from .drivers import DriverProfile, ProfileKey, build_profiles, driver_profile
from .templates import TemplateRenderer

USER_HANDLERS_PATH = "src/backend/handlers/userHandlers.ts"
COUNT_HANDLERS_PATH = "src/backend/handlers/countHistoryHandlers.ts"

# Engines without INSERT ... RETURNING in the driver we generate for.
_NO_RETURNING = frozenset({
    DatabaseEngine.MYSQL,
    DatabaseEngine.MARIADB,
    DatabaseEngine.SINGLESTORE,
})


class HandlerTemplate(BaseModel):
    """A handler template path and the context it is rendered with."""

    model_config = ConfigDict(frozen=True)

    template: str
    context: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Template table
# ---------------------------------------------------------------------------

_RAW_SQL_TEMPLATES: dict[tuple[DatabaseEngine, str], str] = {
    (DatabaseEngine.POSTGRESQL, LOCAL_HOST): "bun_sql",
    (DatabaseEngine.MYSQL, LOCAL_HOST): "bun_sql",
    (DatabaseEngine.MARIADB, LOCAL_HOST): "bun_sql",
    (DatabaseEngine.COCKROACHDB, LOCAL_HOST): "bun_sql",
    (DatabaseEngine.POSTGRESQL, "neon"): "neon",
    (DatabaseEngine.POSTGRESQL, "planetscale"): "pg",
    (DatabaseEngine.MYSQL, "planetscale"): "planetscale",
    (DatabaseEngine.SQLITE, LOCAL_HOST): "bun_sqlite",
    (DatabaseEngine.SQLITE, "turso"): "libsql",
    (DatabaseEngine.MSSQL, LOCAL_HOST): "mssql",
    (DatabaseEngine.GEL, LOCAL_HOST): "gel",
    (DatabaseEngine.SINGLESTORE, LOCAL_HOST): "mysql2",
}


def _handler_for_profile(
    key: ProfileKey, profile: DriverProfile, schema_path: str
) -> HandlerTemplate | None:
    engine, host_kind, orm_kind = key
    returning = engine not in _NO_RETURNING

    if orm_kind is OrmKind.DRIZZLE:
        drizzle_type = profile.drizzle_type
        if drizzle_type is None:
            return None
        return HandlerTemplate(
            template="handlers/drizzle.ts.j2",
            context={
                "db_type": drizzle_type.name,
                "db_type_module": drizzle_type.module,
                "schema_path": schema_path,
                "returning": returning,
            },
        )

    if orm_kind is OrmKind.PRISMA:
        return HandlerTemplate(
            template="handlers/prisma.ts.j2",
            context={"json_as_string": engine is DatabaseEngine.MSSQL},
        )

    if orm_kind is OrmKind.NATIVE:
        if engine is DatabaseEngine.MONGODB:
            return HandlerTemplate(template="handlers/mongodb.ts.j2")
        return None

    name = _RAW_SQL_TEMPLATES.get((engine, host_kind))
    if name is None:
        return None
    return HandlerTemplate(template=f"handlers/{name}.ts.j2", context={"returning": returning})


def handler_table(database_directory: str = "db") -> dict[TemplateKey, HandlerTemplate]:
    """Build the full handler table for both auth kinds.

    Args:
        database_directory: Directory holding the generated schema, used for
            the Drizzle schema import path.
    """
    schema_path = f"../../../{database_directory}/schema"
    table: dict[TemplateKey, HandlerTemplate] = {}
    for key, profile in build_profiles(database_directory).items():
        handler = _handler_for_profile(key, profile, schema_path)
        if handler is None:
            continue
        engine, host_kind, orm_kind = key
        for auth_kind in AuthKind:
            template_key = TemplateKey(
                engine=engine,
                orm_kind=orm_kind,
                host_kind=host_kind,
                auth_kind=auth_kind,
            )
            table[template_key] = handler.model_copy(
                update={"context": {**handler.context, "auth": auth_kind is AuthKind.AUTH}}
            )
    return table


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def handlers_path(config: Configuration) -> str:
    return USER_HANDLERS_PATH if config.uses_auth else COUNT_HANDLERS_PATH


def generate_handlers(config: Configuration, renderer: TemplateRenderer) -> tuple[str, str]:
    """Render the handler module for *config*.

    Returns:
        ``(relative_path, source_text)``.

    Raises:
        UnsupportedCombinationError: If no handler is registered for the
            configuration's template key, or its driver has no profile.
    """
    # Surfaces a driver miss with the driver's own error first.
    driver_profile(config)

    key = config.template_key
    handler = handler_table(config.db_dir).get(key)
    if handler is None:
        raise UnsupportedCombinationError("handler", key)
    return handlers_path(config), renderer.render(handler.template, handler.context)
