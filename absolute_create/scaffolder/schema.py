"""Schema generation: Drizzle schema, Prisma schema and init scripts.

Column definitions come from per-dialect tables.  Exactly one demo table is
emitted per configuration: ``users`` when auth is enabled, otherwise
``count_history``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ..errors import UnsupportedCombinationError
from ..models import ORM, Configuration, DatabaseEngine, DatabaseHost
from .drivers import driver_profile
from .templates import TemplateRenderer


class DrizzleDialect(BaseModel):
    model_config = ConfigDict(frozen=True)

    pkg: str
    table: str
    string: str
    json_column: str
    time: str
    int_builder: str = "integer"


class PrismaDialect(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    auto_increment: str = "@default(autoincrement())"
    string_attribute: str = " @db.VarChar(255)"
    metadata_field: str = 'Json     @default("{}")'


class InitScript(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: str
    filename: str


# ---------------------------------------------------------------------------
# Dialect tables
# ---------------------------------------------------------------------------

DRIZZLE_SCHEMA_DIALECTS: dict[DatabaseEngine, DrizzleDialect] = {
    DatabaseEngine.GEL: DrizzleDialect(
        pkg="gel-core",
        table="gelTable",
        string="text()",
        json_column="json()",
        time="timestamp()",
    ),
    DatabaseEngine.MYSQL: DrizzleDialect(
        pkg="mysql-core",
        table="mysqlTable",
        string="varchar({ length: 255 })",
        json_column="json()",
        time="timestamp()",
        int_builder="int",
    ),
    DatabaseEngine.POSTGRESQL: DrizzleDialect(
        pkg="pg-core",
        table="pgTable",
        string="varchar({ length: 255 })",
        json_column="jsonb()",
        time="timestamp()",
    ),
    DatabaseEngine.SINGLESTORE: DrizzleDialect(
        pkg="singlestore-core",
        table="singlestoreTable",
        string="varchar({ length: 255 })",
        json_column="json()",
        time="timestamp()",
        int_builder="int",
    ),
    DatabaseEngine.SQLITE: DrizzleDialect(
        pkg="sqlite-core",
        table="sqliteTable",
        string="text()",
        json_column="text({ mode: 'json' })",
        time="integer({ mode: 'timestamp' })",
    ),
}

PRISMA_SCHEMA_DIALECTS: dict[DatabaseEngine, PrismaDialect] = {
    DatabaseEngine.COCKROACHDB: PrismaDialect(
        provider="cockroachdb",
        auto_increment="@default(sequence())",
        string_attribute=" @db.String(255)",
    ),
    DatabaseEngine.MARIADB: PrismaDialect(provider="mysql", metadata_field="Json?"),
    DatabaseEngine.MSSQL: PrismaDialect(
        provider="sqlserver",
        metadata_field='String   @default("{}")',
    ),
    DatabaseEngine.MYSQL: PrismaDialect(provider="mysql", metadata_field="Json?"),
    DatabaseEngine.POSTGRESQL: PrismaDialect(provider="postgresql"),
    DatabaseEngine.SQLITE: PrismaDialect(provider="sqlite", string_attribute=""),
}

INIT_SCRIPTS: dict[DatabaseEngine, InitScript] = {
    DatabaseEngine.POSTGRESQL: InitScript(template="init/postgresql.sql.j2", filename="init.sql"),
    DatabaseEngine.COCKROACHDB: InitScript(template="init/postgresql.sql.j2", filename="init.sql"),
    DatabaseEngine.MYSQL: InitScript(template="init/mysql.sql.j2", filename="init.sql"),
    DatabaseEngine.MARIADB: InitScript(template="init/mysql.sql.j2", filename="init.sql"),
    DatabaseEngine.SINGLESTORE: InitScript(template="init/mysql.sql.j2", filename="init.sql"),
    DatabaseEngine.MSSQL: InitScript(template="init/mssql.sql.j2", filename="init.sql"),
    DatabaseEngine.SQLITE: InitScript(template="init/sqlite.sql.j2", filename="init.sql"),
    DatabaseEngine.GEL: InitScript(template="init/gel.edgeql.j2", filename="init.edgeql"),
    DatabaseEngine.MONGODB: InitScript(template="init/mongodb.js.j2", filename="init.js"),
}

DRIZZLE_KIT_DIALECTS: dict[DatabaseEngine, str] = {
    DatabaseEngine.GEL: "gel",
    DatabaseEngine.MYSQL: "mysql",
    DatabaseEngine.POSTGRESQL: "postgresql",
    DatabaseEngine.SINGLESTORE: "singlestore",
    DatabaseEngine.SQLITE: "sqlite",
}

_JSON_DEFAULTS: dict[DatabaseEngine, str] = {
    DatabaseEngine.MYSQL: "JSON_OBJECT()",
    DatabaseEngine.MARIADB: "'{}'",
    DatabaseEngine.SINGLESTORE: "'{}'",
}


def _builder(expression: str) -> str:
    return expression.split("(", 1)[0]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class SchemaGenerator:
    """Renders the schema artifacts for a resolved configuration."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def drizzle_schema(self, config: Configuration) -> str:
        """Render ``<db>/schema.ts`` for a Drizzle configuration.

        Raises:
            UnsupportedCombinationError: If the engine is not a Drizzle
                dialect or its driver has no Drizzle database type.
        """
        dialect = DRIZZLE_SCHEMA_DIALECTS.get(config.database_engine)
        db_type = driver_profile(config).drizzle_type
        if dialect is None or db_type is None:
            raise UnsupportedCombinationError("drizzle schema", config.template_key)

        engine = config.database_engine
        sqlite = engine is DatabaseEngine.SQLITE

        if config.uses_auth:
            builders = [dialect.table, _builder(dialect.string), _builder(dialect.time), _builder(dialect.json_column)]
        else:
            builders = [dialect.table, dialect.int_builder, _builder(dialect.time)]
        builders = list(dict.fromkeys(builders))

        if engine in (DatabaseEngine.MYSQL, DatabaseEngine.SINGLESTORE):
            uid_column = f"{dialect.int_builder}('uid').primaryKey().autoincrement()"
        elif sqlite:
            uid_column = "integer('uid').primaryKey({ autoIncrement: true })"
        else:
            uid_column = "integer('uid').primaryKey().generatedAlwaysAsIdentity()"

        if sqlite:
            timestamp_column = (
                f"{dialect.time}.notNull().default("
                "sql`(julianday('now') - ${JULIAN_DAY_UNIX_EPOCH_OFFSET}) * ${MILLIS_PER_DAY}`)"
            )
        else:
            timestamp_column = f"{dialect.time}.notNull().defaultNow()"

        return self.renderer.render(
            "schema/drizzle.ts.j2",
            {
                "auth": config.uses_auth,
                "builders": builders,
                "db_type": db_type,
                "dialect": dialect,
                "sqlite": sqlite,
                "timestamp_column": timestamp_column,
                "uid_column": uid_column,
            },
        )

    def prisma_schema(self, config: Configuration) -> str:
        """Render ``<db>/schema.prisma`` for a Prisma configuration."""
        dialect = PRISMA_SCHEMA_DIALECTS.get(config.database_engine)
        if dialect is None:
            raise UnsupportedCombinationError("prisma schema", config.template_key)

        engine = config.database_engine
        if engine is DatabaseEngine.SQLITE and config.database_host is DatabaseHost.NONE:
            url = '"file:./database.sqlite"'
        else:
            url = 'env("DATABASE_URL")'
        shadow = config.is_local_database and engine in (DatabaseEngine.MYSQL, DatabaseEngine.MARIADB)

        return self.renderer.render(
            "schema/schema.prisma.j2",
            {"auth": config.uses_auth, "dialect": dialect, "shadow": shadow, "url": url},
        )

    def drizzle_config(self, config: Configuration) -> str:
        """Render ``drizzle.config.ts``; Turso uses drizzle-kit's ``turso`` dialect."""
        dialect = DRIZZLE_KIT_DIALECTS.get(config.database_engine)
        if dialect is None:
            raise UnsupportedCombinationError("drizzle config", config.template_key)
        if config.database_host is DatabaseHost.TURSO:
            dialect = "turso"
        return self.renderer.render(
            "drizzle.config.ts.j2",
            {"dialect": dialect, "database_directory": config.db_dir},
        )

    def init_script(self, config: Configuration) -> tuple[str, str]:
        """Render the raw initialization script for the demo table.

        Returns:
            ``(filename, text)`` where filename is relative to the database
            directory.
        """
        script = INIT_SCRIPTS.get(config.database_engine)
        if script is None:
            raise UnsupportedCombinationError("init script", config.template_key)
        text = self.renderer.render(
            script.template,
            {
                "auth": config.uses_auth,
                "json_default": _JSON_DEFAULTS.get(config.database_engine, "'{}'"),
                "sequence": config.database_engine is DatabaseEngine.COCKROACHDB,
            },
        )
        return script.filename, text

    def generate(self, config: Configuration) -> dict[str, str]:
        """Every schema artifact for *config*, keyed by project-relative path."""
        if not config.has_database:
            return {}

        db_dir = config.db_dir
        filename, text = self.init_script(config)
        files = {f"{db_dir}/{filename}": text}
        if config.orm is ORM.DRIZZLE:
            files[f"{db_dir}/schema.ts"] = self.drizzle_schema(config)
            files["drizzle.config.ts"] = self.drizzle_config(config)
        elif config.orm is ORM.PRISMA:
            files[f"{db_dir}/schema.prisma"] = self.prisma_schema(config)
        return files
