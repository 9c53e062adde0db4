"""Docker Compose generation and container lifecycle for local databases.

Renders ``<db>/docker-compose.db.yml`` (a single ``db`` service) from a
per-engine table, and drives the container through start, schema
initialization and teardown with :class:`DatabaseContainer`.
"""

from __future__ import annotations

import contextlib
import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..errors import ExternalToolError, UnsupportedCombinationError
from ..models import Configuration, DatabaseEngine
from ..utils import require_tool, run_command, to_docker_project_name
from .templates import TemplateRenderer

COMPOSE_FILENAME = "docker-compose.db.yml"
DOCKER_GUIDANCE = "Docker is required to initialize a local database. Install it from https://docs.docker.com/get-docker/"


class ContainerSpec(BaseModel):
    """Everything needed to run one engine in a container."""

    model_config = ConfigDict(frozen=True)

    image: str
    container_port: int
    env: dict[str, str] = Field(default_factory=dict)
    command: str | None = None
    healthcheck: str
    start_period: str = "5s"
    volume_path: str
    wait: str = Field(..., description="Shell loop that blocks until the server accepts queries")
    cli: str = Field(..., description="Client invocation the init script is appended to")
    shell: str = Field(..., description="Interactive client for the db:<engine> script")


# ---------------------------------------------------------------------------
# Per-engine table
# ---------------------------------------------------------------------------

CONTAINER_SPECS: dict[DatabaseEngine, ContainerSpec] = {
    DatabaseEngine.COCKROACHDB: ContainerSpec(
        image="cockroachdb/cockroach:latest-v25.3",
        container_port=26257,
        env={"COCKROACH_DATABASE": "database"},
        command="start-single-node --insecure",
        healthcheck='cockroach sql --insecure -e "select 1" >/dev/null 2>&1',
        volume_path="/cockroach/cockroach-data",
        wait='until (cockroach sql --insecure -e "select 1" >/dev/null 2>&1); do sleep 1; done',
        cli="cockroach sql --insecure --host localhost --database=database -e",
        shell="cockroach sql --insecure --host localhost --database=database",
    ),
    DatabaseEngine.GEL: ContainerSpec(
        image="geldata/gel:latest",
        container_port=5656,
        env={"GEL_SERVER_SECURITY": "insecure_dev_mode"},
        healthcheck='gel query -H localhost -P 5656 -u admin --tls-security insecure "select 1" >/dev/null 2>&1',
        start_period="30s",
        volume_path="/var/lib/gel/data",
        wait='until gel query -H localhost -P 5656 -u admin --tls-security insecure "select 1" >/dev/null 2>&1; do sleep 1; done',
        cli="gel query -H localhost -P 5656 -u admin --tls-security insecure -b main",
        shell="gel -H localhost -P 5656 -u admin --tls-security insecure -b main",
    ),
    DatabaseEngine.MARIADB: ContainerSpec(
        image="mariadb:11.4",
        container_port=3306,
        env={
            "MARIADB_DATABASE": "database",
            "MARIADB_USER": "user",
            "MARIADB_PASSWORD": "userpassword",
            "MARIADB_ROOT_PASSWORD": "rootpassword",
        },
        healthcheck="mariadb-admin ping -h127.0.0.1 --silent",
        volume_path="/var/lib/mysql",
        wait="until mariadb-admin ping -h127.0.0.1 --silent; do sleep 1; done",
        cli="MYSQL_PWD=userpassword mariadb -h127.0.0.1 -u user database -e",
        shell="MYSQL_PWD=userpassword mariadb -h127.0.0.1 -u user database",
    ),
    DatabaseEngine.MONGODB: ContainerSpec(
        image="mongo:7.0",
        container_port=27017,
        env={
            "MONGO_INITDB_DATABASE": "database",
            "MONGO_INITDB_ROOT_USERNAME": "user",
            "MONGO_INITDB_ROOT_PASSWORD": "password",
        },
        healthcheck="mongosh -u user -p password --authenticationDatabase admin --eval \"db.adminCommand('ping')\" --quiet",
        volume_path="/data/db",
        wait=(
            "until mongosh -u user -p password --authenticationDatabase admin "
            "--eval \"db.adminCommand('ping')\" --quiet >/dev/null 2>&1; do sleep 1; done"
        ),
        cli="mongosh -u user -p password --authenticationDatabase admin database --eval",
        shell="mongosh -u user -p password --authenticationDatabase admin database",
    ),
    DatabaseEngine.MSSQL: ContainerSpec(
        image="mcr.microsoft.com/mssql/server:2022-latest",
        container_port=1433,
        env={"ACCEPT_EULA": "Y", "MSSQL_SA_PASSWORD": "SApassword1"},
        healthcheck='/opt/mssql-tools18/bin/sqlcmd -C -S localhost -U sa -P SApassword1 -Q "SELECT 1" >/dev/null 2>&1',
        start_period="30s",
        volume_path="/var/opt/mssql",
        wait=(
            "until /opt/mssql-tools18/bin/sqlcmd -C -S localhost -U sa -P SApassword1 "
            '-Q "SELECT 1" >/dev/null 2>&1; do sleep 1; done'
        ),
        cli="/opt/mssql-tools18/bin/sqlcmd -C -S localhost -U sa -P SApassword1 -Q",
        shell="/opt/mssql-tools18/bin/sqlcmd -C -S localhost -U sa -P SApassword1",
    ),
    DatabaseEngine.MYSQL: ContainerSpec(
        image="mysql:8.0",
        container_port=3306,
        env={
            "MYSQL_DATABASE": "database",
            "MYSQL_USER": "user",
            "MYSQL_PASSWORD": "userpassword",
            "MYSQL_ROOT_PASSWORD": "rootpassword",
        },
        healthcheck="mysqladmin ping -h127.0.0.1 --silent",
        volume_path="/var/lib/mysql",
        wait="until mysqladmin ping -h127.0.0.1 --silent; do sleep 1; done",
        cli="MYSQL_PWD=userpassword mysql -h127.0.0.1 -u user database -e",
        shell="MYSQL_PWD=userpassword mysql -h127.0.0.1 -u user database",
    ),
    DatabaseEngine.POSTGRESQL: ContainerSpec(
        image="postgres:15",
        container_port=5432,
        env={
            "POSTGRES_DB": "database",
            "POSTGRES_USER": "user",
            "POSTGRES_PASSWORD": "password",
        },
        healthcheck="pg_isready -U user -h localhost --quiet",
        volume_path="/var/lib/postgresql/data",
        wait="until pg_isready -U user -h localhost --quiet; do sleep 1; done",
        cli="psql -U user -d database -c",
        shell="psql -h localhost -U user -d database",
    ),
    DatabaseEngine.SINGLESTORE: ContainerSpec(
        image="ghcr.io/singlestore-labs/singlestoredb-dev",
        container_port=3306,
        env={"ROOT_PASSWORD": "password"},
        healthcheck='singlestore -u root -ppassword -e "SELECT 1" >/dev/null 2>&1',
        start_period="30s",
        volume_path="/data",
        wait='until singlestore -u root -ppassword -e "SELECT 1" >/dev/null 2>&1; do sleep 1; done',
        cli=(
            'singlestore -u root -ppassword -e "CREATE DATABASE IF NOT EXISTS \\`database\\`" >/dev/null'
            " && singlestore -u root -ppassword -D database -e"
        ),
        shell="singlestore -u root -ppassword -D database",
    ),
}

DEFAULT_PORTS: dict[DatabaseEngine, int] = {
    engine: spec.container_port for engine, spec in CONTAINER_SPECS.items()
}


def uses_docker(config: Configuration) -> bool:
    """True when the database runs in a local container."""
    return config.is_local_database and config.database_engine in CONTAINER_SPECS


def container_spec(config: Configuration) -> ContainerSpec:
    """Return the container spec for *config*'s engine.

    Raises:
        UnsupportedCombinationError: If the engine is not run in a container.
    """
    spec = CONTAINER_SPECS.get(config.database_engine)
    if spec is None:
        raise UnsupportedCombinationError("container", config.database_engine.value)
    return spec


def compose_command(config: Configuration, *args: str) -> list[str]:
    """``docker compose`` argv for the project's database compose file."""
    return [
        "docker",
        "compose",
        "-p",
        to_docker_project_name(config.project_name),
        "-f",
        f"{config.db_dir}/{COMPOSE_FILENAME}",
        *args,
    ]


# ---------------------------------------------------------------------------
# Compose file generation
# ---------------------------------------------------------------------------


class DockerGenerator:
    """Generates the database Docker Compose file."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def render(self, config: Configuration, host_port: int | None = None) -> str:
        """Render the compose file for *config*.

        Args:
            config: A configuration with a local container engine.
            host_port: Host port mapped to the container's port.  Defaults
                to the engine's conventional port.
        """
        spec = container_spec(config)
        return self.renderer.render(
            "docker-compose.db.yml.j2",
            {"spec": spec, "host_port": host_port or spec.container_port},
        )

    def generate(self, config: Configuration, host_port: int | None = None) -> dict[str, str]:
        """Compose file keyed by project-relative path; empty when not needed."""
        if not uses_docker(config):
            return {}
        return {f"{config.db_dir}/{COMPOSE_FILENAME}": self.render(config, host_port)}


# ---------------------------------------------------------------------------
# Container lifecycle
# ---------------------------------------------------------------------------


class DatabaseContainer:
    """Async context manager around the project's database container.

    Entering starts the ``db`` service; leaving always runs
    ``docker compose down``, whether or not initialization succeeded.
    A failed start is torn down before the error propagates.

    Usage::

        async with DatabaseContainer(config, project_root) as container:
            await container.initialize(init_script)
    """

    def __init__(self, config: Configuration, project_root: str | Path, timeout: int = 300) -> None:
        self.config = config
        self.project_root = Path(project_root)
        self.timeout = timeout
        self.spec = container_spec(config)

    async def _compose(self, *args: str) -> str:
        cmd = compose_command(self.config, *args)
        returncode, stdout, stderr = await run_command(cmd, cwd=self.project_root, timeout=self.timeout)
        if returncode != 0:
            raise ExternalToolError("docker", f"`{' '.join(cmd)}` failed: {stderr or stdout}")
        return stdout

    async def __aenter__(self) -> DatabaseContainer:
        require_tool("docker", DOCKER_GUIDANCE)
        try:
            await self._compose("up", "-d", "db")
        except ExternalToolError:
            # A partial start can leave the network or container behind.
            with contextlib.suppress(ExternalToolError):
                await self._compose("down")
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._compose("down")

    async def initialize(self, script: str) -> str:
        """Wait for the server, then run *script* through the engine's client."""
        command = f"{self.spec.wait} && {self.spec.cli} {shlex.quote(script)}"
        return await self._compose("exec", "-T", "db", "bash", "-lc", command)
