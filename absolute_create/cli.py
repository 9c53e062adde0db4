"""Command-line entry point for ``absolute-create``.

Parses flags into a :class:`RawConfiguration`, resolves it, and runs the
scaffolder.  Exit code is 0 on success and 1 on any reported error.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from collections.abc import Sequence
from pathlib import Path

from .catalog import AVAILABLE_PLUGINS, FRONTEND_LABELS
from .config import ScaffoldSettings
from .errors import (
    ConfigurationError,
    ExternalToolError,
    NoAvailablePortError,
    UnsupportedCombinationError,
)
from .models import (
    ORM,
    AuthProvider,
    DatabaseEngine,
    DatabaseHost,
    DirectoryConfiguration,
    Frontend,
    Language,
    RawConfiguration,
)
from .resolver import resolve
from .scaffolder.generator import GeneratedProject, ProjectGenerator
from .utils import (
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    require_tool,
    run_command,
)

GIT_GUIDANCE = "Install git: https://git-scm.com/downloads"
BUN_GUIDANCE = "Install bun: https://bun.sh"


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _one_of(enum_cls) -> str:
    # Values are checked by the resolver so every bad flag is reported at once.
    return "one of: " + ", ".join(member.value for member in enum_cls)


def _plugin_help() -> str:
    available = ", ".join(f"{package} ({dependency.label})" for package, dependency in AVAILABLE_PLUGINS.items())
    return f"Elysia plugin to include (repeatable, 'none' for no plugins): {available}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="absolute-create",
        description="Scaffold an AbsoluteJS project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  absolute-create my-app --skip\n"
            "  absolute-create my-app --react --svelte --db sqlite --orm drizzle\n"
            "  absolute-create my-app --html --db postgresql --db-host neon --auth absoluteAuth\n"
        ),
    )
    parser.add_argument("project_name", help="Name of the project directory to create")

    frontends = parser.add_argument_group("frontends")
    for framework in Frontend:
        frontends.add_argument(
            f"--{framework.value}",
            dest="frontends",
            action="append_const",
            const=framework.value,
            help=f"Include the {FRONTEND_LABELS[framework]} frontend",
        )
        frontends.add_argument(
            f"--{framework.value}-dir",
            dest=f"{framework.value}_dir",
            default=None,
            metavar="DIR",
            help=f"Directory under src/frontend for {framework.value}",
        )

    database = parser.add_argument_group("database")
    database.add_argument("--db", default=None, metavar="ENGINE", help=_one_of(DatabaseEngine))
    database.add_argument("--db-host", default=None, metavar="HOST", help=_one_of(DatabaseHost))
    database.add_argument("--db-dir", default=None, metavar="DIR", help="Database directory (default: db)")
    database.add_argument("--orm", default=None, metavar="ORM", help=_one_of(ORM))
    database.add_argument(
        "--init-db",
        action="store_true",
        help="Create the demo table in the local database after generation",
    )

    auth = parser.add_argument_group("authentication")
    auth.add_argument("--auth", default=None, metavar="PROVIDER", help=_one_of(AuthProvider))
    auth.add_argument(
        "--auth-provider",
        dest="auth_providers",
        action="append",
        default=[],
        metavar="NAME",
        help="OAuth2 provider to configure (repeatable, default: google)",
    )

    project = parser.add_argument_group("project")
    project.add_argument("--lang", dest="language", default=None, metavar="LANG", help=_one_of(Language))
    project.add_argument(
        "--plugin",
        dest="plugins",
        action="append",
        default=[],
        metavar="PACKAGE",
        help=_plugin_help(),
    )
    project.add_argument("--tailwind", action="store_true", default=None)
    project.add_argument("--tailwind-input", default=None, metavar="PATH")
    project.add_argument("--tailwind-output", default=None, metavar="PATH")
    project.add_argument(
        "--directory",
        dest="directory",
        default=None,
        metavar="MODE",
        help=_one_of(DirectoryConfiguration),
    )
    project.add_argument("--build-dir", default=None, metavar="DIR")
    project.add_argument("--assets-dir", default=None, metavar="DIR")
    project.add_argument("--public-dir", default=None, metavar="DIR")

    quality = project.add_mutually_exclusive_group()
    quality.add_argument(
        "--eslint+prettier",
        dest="code_quality_tool",
        action="store_const",
        const="eslint+prettier",
    )
    quality.add_argument("--biome", dest="code_quality_tool", action="store_const", const="biome")

    run = parser.add_argument_group("run")
    run.add_argument("--git", action="store_true", help="Initialise a git repository")
    run.add_argument("--install", action="store_true", help="Run `bun install` after generation")
    run.add_argument("--skip", action="store_true", help="Use defaults for anything not given")
    run.add_argument("--latest", action="store_true", help="Resolve the latest dependency versions")
    run.add_argument("--output", "-o", default=None, help="Parent directory (default: .)")
    run.add_argument(
        "--env",
        dest="env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra .env line (repeatable)",
    )
    return parser


def raw_from_args(args: argparse.Namespace) -> RawConfiguration:
    """Map parsed flags onto a ``RawConfiguration``.

    With ``--skip`` and no frontend flag, the React frontend is selected.
    """
    frontends = list(args.frontends or [])
    if not frontends and args.skip:
        frontends = [Frontend.REACT.value]

    directories = {
        framework.value: getattr(args, f"{framework.value}_dir")
        for framework in Frontend
        if getattr(args, f"{framework.value}_dir") is not None
    }

    return RawConfiguration(
        project_name=args.project_name,
        language=args.language,
        frontends=frontends,
        frontend_directories=directories,
        database_engine=args.db,
        database_host=args.db_host,
        orm=args.orm,
        auth_provider=args.auth,
        auth_providers=args.auth_providers,
        plugins=args.plugins,
        code_quality_tool=args.code_quality_tool,
        directory_configuration=args.directory,
        use_tailwind=args.tailwind,
        tailwind_input=args.tailwind_input,
        tailwind_output=args.tailwind_output,
        build_directory=args.build_dir,
        assets_directory=args.assets_dir,
        public_directory=args.public_dir,
        database_directory=args.db_dir,
    )


# ---------------------------------------------------------------------------
# Post-generation steps
# ---------------------------------------------------------------------------


async def _run_tool(cmd: list[str], cwd: Path, guidance: str, timeout: int = 120) -> None:
    require_tool(cmd[0], guidance)
    returncode, stdout, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
    if returncode != 0:
        raise ExternalToolError(cmd[0], f"`{' '.join(cmd)}` failed: {stderr or stdout}")


async def scaffold(generator: ProjectGenerator, args: argparse.Namespace) -> GeneratedProject:
    """Generate the project, then run the requested follow-up steps."""
    project = await generator.generate()
    root = project.root or Path(generator.config.project_name)

    if args.init_db:
        await generator.initialize_database(root)
    if args.git:
        await _run_tool(["git", "init"], root, GIT_GUIDANCE)
    if args.install:
        await _run_tool(["bun", "install"], root, BUN_GUIDANCE, timeout=600)
    return project


def _summary(project: GeneratedProject, elapsed: float) -> dict[str, str]:
    summary = {
        "Location": str(project.root),
        "Files": str(len(project.files)),
        "Dependencies": str(len(project.dependencies)),
    }
    if project.database_port is not None:
        summary["Database port"] = str(project.database_port)
    summary["Duration"] = format_duration(elapsed)
    return summary


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``absolute-create`` and ``python -m absolute_create``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    for line in args.env:
        if "=" not in line or not line.split("=", 1)[0].strip():
            parser.error(f"--env expects KEY=VALUE, got {line!r}")

    settings = ScaffoldSettings.from_env()
    if args.output is not None:
        settings.output_dir = Path(args.output)
    if args.latest:
        settings.latest = True

    try:
        resolution = resolve(raw_from_args(args))
    except ConfigurationError as exc:
        for issue in exc.issues:
            print_error(str(issue))
        sys.exit(1)

    for warning in resolution.warnings:
        print_warning(warning)

    generator = ProjectGenerator(resolution.configuration, settings, env_variables=args.env)
    started = time.monotonic()
    try:
        with create_progress() as progress:
            progress.add_task(f"Generating {resolution.configuration.project_name}...", total=None)
            project = asyncio.run(scaffold(generator, args))
    except (UnsupportedCombinationError, NoAvailablePortError, ExternalToolError) as exc:
        print_error(str(exc))
        sys.exit(1)

    for warning in project.warnings:
        print_warning(warning)
    print_summary_table(_summary(project, time.monotonic() - started), title=resolution.configuration.project_name)
    print_success(f"Created {resolution.configuration.project_name}")


if __name__ == "__main__":
    main()
