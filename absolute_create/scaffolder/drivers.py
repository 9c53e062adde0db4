"""Database driver profiles.

A driver profile describes, for one (engine, host kind, ORM kind)
combination, the import lines the server needs, the connection snippet
that defines ``db``, the driver packages to install, and (for Drizzle) the
database type the generated handlers and schema are parameterised with.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ..catalog import PRISMA_DIALECTS, is_host_compatible
from ..errors import UnsupportedCombinationError
from ..models import (
    LOCAL_HOST,
    CatalogDependency,
    Configuration,
    DatabaseEngine,
    DatabaseHost,
    OrmKind,
)
from ..versions import pinned

GET_ENV = "import { getEnv } from '@absolutejs/absolute'"
DATABASE_URL = "getEnv('DATABASE_URL')"


class DrizzleDatabaseType(BaseModel):
    """The Drizzle database class for a driver, e.g. ``BunSQLDatabase``."""

    model_config = ConfigDict(frozen=True)

    name: str
    module: str

    @property
    def import_line(self) -> str:
        return f"import type {{ {self.name} }} from '{self.module}'"


class DriverProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    imports: tuple[str, ...]
    connection: str
    packages: tuple[CatalogDependency, ...] = ()
    drizzle_type: DrizzleDatabaseType | None = None


ProfileKey = tuple[DatabaseEngine, str, OrmKind]


def _pkg(package: str, dev: bool = False) -> CatalogDependency:
    return CatalogDependency(package=package, version=pinned(package), dev=dev)


def _drizzle(
    client_imports: tuple[str, ...],
    client: str,
    driver: str,
    type_name: str,
    packages: tuple[CatalogDependency, ...] = (),
    mode: str | None = None,
) -> DriverProfile:
    options = "{ schema, mode: '%s' }" % mode if mode else "{ schema }"
    return DriverProfile(
        imports=(*client_imports, f"import {{ drizzle }} from 'drizzle-orm/{driver}'"),
        connection=f"const pool = {client}\nconst db = drizzle(pool, {options})",
        packages=packages,
        drizzle_type=DrizzleDatabaseType(name=type_name, module=f"drizzle-orm/{driver}"),
    )


def build_profiles(database_directory: str) -> dict[ProfileKey, DriverProfile]:
    sqlite_file = f"'{database_directory}/database.sqlite'"
    bun_sql = ("import { SQL } from 'bun'", GET_ENV)
    neon = ("import { neon } from '@neondatabase/serverless'", GET_ENV)
    pg = ("import { Pool } from 'pg'", GET_ENV)
    planetscale = ("import { Client } from '@planetscale/database'", GET_ENV)
    libsql = ("import { createClient } from '@libsql/client'", GET_ENV)
    mysql2 = ("import { createPool } from 'mysql2/promise'", GET_ENV)
    gel = ("import { createClient } from 'gel'", GET_ENV)
    bun_sqlite = ("import { Database } from 'bun:sqlite'",)

    bun_sql_profile = DriverProfile(imports=bun_sql, connection=f"const db = new SQL({DATABASE_URL})")
    pg_packages = (_pkg("pg"), _pkg("@types/pg", dev=True))

    profiles: dict[ProfileKey, DriverProfile] = {
        # Raw drivers
        (DatabaseEngine.POSTGRESQL, LOCAL_HOST, OrmKind.SQL): bun_sql_profile,
        (DatabaseEngine.MYSQL, LOCAL_HOST, OrmKind.SQL): bun_sql_profile,
        (DatabaseEngine.MARIADB, LOCAL_HOST, OrmKind.SQL): bun_sql_profile,
        (DatabaseEngine.COCKROACHDB, LOCAL_HOST, OrmKind.SQL): bun_sql_profile,
        (DatabaseEngine.POSTGRESQL, "neon", OrmKind.SQL): DriverProfile(
            imports=neon,
            connection=f"const db = neon({DATABASE_URL})",
            packages=(_pkg("@neondatabase/serverless"),),
        ),
        (DatabaseEngine.POSTGRESQL, "planetscale", OrmKind.SQL): DriverProfile(
            imports=pg,
            connection=f"const db = new Pool({{ connectionString: {DATABASE_URL} }})",
            packages=pg_packages,
        ),
        (DatabaseEngine.MYSQL, "planetscale", OrmKind.SQL): DriverProfile(
            imports=planetscale,
            connection=f"const db = new Client({{ url: {DATABASE_URL} }})",
            packages=(_pkg("@planetscale/database"),),
        ),
        (DatabaseEngine.SQLITE, LOCAL_HOST, OrmKind.SQL): DriverProfile(
            imports=bun_sqlite,
            connection=f"const db = new Database({sqlite_file})",
        ),
        (DatabaseEngine.SQLITE, "turso", OrmKind.SQL): DriverProfile(
            imports=libsql,
            connection=f"const db = createClient({{ url: {DATABASE_URL} }})",
            packages=(_pkg("@libsql/client"),),
        ),
        (DatabaseEngine.MONGODB, LOCAL_HOST, OrmKind.NATIVE): DriverProfile(
            imports=("import { MongoClient } from 'mongodb'", GET_ENV),
            connection=(
                f"const client = new MongoClient({DATABASE_URL})\n"
                "await client.connect()\n"
                "const db = client.db('database')"
            ),
            packages=(_pkg("mongodb"),),
        ),
        (DatabaseEngine.MSSQL, LOCAL_HOST, OrmKind.SQL): DriverProfile(
            imports=("import { connect } from 'mssql'", GET_ENV),
            connection=f"const db = await connect({DATABASE_URL})",
            packages=(_pkg("mssql"), _pkg("@types/mssql", dev=True)),
        ),
        (DatabaseEngine.GEL, LOCAL_HOST, OrmKind.SQL): DriverProfile(
            imports=gel,
            connection=f"const db = createClient({{ dsn: {DATABASE_URL} }})",
            packages=(_pkg("gel"),),
        ),
        (DatabaseEngine.SINGLESTORE, LOCAL_HOST, OrmKind.SQL): DriverProfile(
            imports=mysql2,
            connection=f"const db = createPool({DATABASE_URL})",
            packages=(_pkg("mysql2"),),
        ),
        # Drizzle
        (DatabaseEngine.POSTGRESQL, LOCAL_HOST, OrmKind.DRIZZLE): _drizzle(
            bun_sql, f"new SQL({DATABASE_URL})", "bun-sql", "BunSQLDatabase"
        ),
        (DatabaseEngine.POSTGRESQL, "neon", OrmKind.DRIZZLE): _drizzle(
            neon,
            f"neon({DATABASE_URL})",
            "neon-http",
            "NeonHttpDatabase",
            (_pkg("@neondatabase/serverless"),),
        ),
        (DatabaseEngine.POSTGRESQL, "planetscale", OrmKind.DRIZZLE): _drizzle(
            pg,
            f"new Pool({{ connectionString: {DATABASE_URL} }})",
            "node-postgres",
            "NodePgDatabase",
            pg_packages,
        ),
        (DatabaseEngine.MYSQL, LOCAL_HOST, OrmKind.DRIZZLE): _drizzle(
            mysql2,
            f"createPool({DATABASE_URL})",
            "mysql2",
            "MySql2Database",
            (_pkg("mysql2"),),
            mode="default",
        ),
        (DatabaseEngine.MYSQL, "planetscale", OrmKind.DRIZZLE): _drizzle(
            planetscale,
            f"new Client({{ url: {DATABASE_URL} }})",
            "planetscale-serverless",
            "PlanetScaleDatabase",
            (_pkg("@planetscale/database"),),
        ),
        (DatabaseEngine.SQLITE, LOCAL_HOST, OrmKind.DRIZZLE): _drizzle(
            bun_sqlite, f"new Database({sqlite_file})", "bun-sqlite", "BunSQLiteDatabase"
        ),
        (DatabaseEngine.SQLITE, "turso", OrmKind.DRIZZLE): _drizzle(
            libsql,
            f"createClient({{ url: {DATABASE_URL} }})",
            "libsql",
            "LibSQLDatabase",
            (_pkg("@libsql/client"),),
        ),
        (DatabaseEngine.GEL, LOCAL_HOST, OrmKind.DRIZZLE): _drizzle(
            gel, f"createClient({{ dsn: {DATABASE_URL} }})", "gel", "GelJsDatabase", (_pkg("gel"),)
        ),
        (DatabaseEngine.SINGLESTORE, LOCAL_HOST, OrmKind.DRIZZLE): _drizzle(
            mysql2,
            f"createPool({DATABASE_URL})",
            "singlestore",
            "SingleStoreDriverDatabase",
            (_pkg("mysql2"),),
        ),
    }

    # Prisma reads DATABASE_URL itself, whatever the host.
    prisma = DriverProfile(
        imports=("import { PrismaClient } from '@prisma/client'",),
        connection="const db = new PrismaClient()",
    )
    for engine in PRISMA_DIALECTS:
        for host in DatabaseHost:
            if is_host_compatible(engine, host):
                host_kind = LOCAL_HOST if host is DatabaseHost.NONE else host.value
                profiles[(engine, host_kind, OrmKind.PRISMA)] = prisma

    return profiles


def supported_profile_keys() -> list[ProfileKey]:
    """Every (engine, host kind, ORM kind) with a registered profile."""
    return list(build_profiles("db"))


def driver_profile(config: Configuration) -> DriverProfile:
    """Return the driver profile for *config*.

    Raises:
        UnsupportedCombinationError: If no profile is registered.
    """
    key = (config.database_engine, config.host_kind, config.orm_kind)
    profile = build_profiles(config.db_dir).get(key)
    if profile is None:
        raise UnsupportedCombinationError(
            "driver", f"{key[0].value}:{key[2].value}:{key[1]}"
        )
    return profile
