"""CLI entrypoint for the engine launcher.

Runs one workflow (or one raw command) to completion, printing output lines
as they arrive. Ctrl-C asks the running child to stop and waits for it.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import logging
import sys
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from engine_launcher import __version__
from engine_launcher.launcher.catalog import LauncherCatalog, ProjectEntry
from engine_launcher.launcher.config import LauncherSettings
from engine_launcher.launcher.log_buffer import LogLine
from engine_launcher.launcher.logging import configure_logging
from engine_launcher.launcher.platforms import (
    BuildConfiguration,
    Platform,
    parse_build_configuration,
    parse_platform,
)
from engine_launcher.launcher.process.factory import ProcessBackendFactory
from engine_launcher.launcher.process.runner import ProcessRunner
from engine_launcher.launcher.session import (
    EngineNotFound,
    LauncherSession,
    ProjectNotFound,
    Workflow,
    WorkflowRequest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _print_line(message: str, is_error: bool) -> None:
    print(message, file=sys.stderr if is_error else sys.stdout, flush=True)


def _print_log_line(line: LogLine) -> None:
    _print_line(line.message, line.is_error)


def _platform_arg(value: str) -> Platform:
    try:
        return parse_platform(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _configuration_arg(value: str) -> BuildConfiguration:
    try:
        return parse_build_configuration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _add_project_args(parser: argparse.ArgumentParser) -> None:
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--project", help="Project name (or manifest path) from projects.json")
    target.add_argument("--manifest", help="Path to a .uproject file not in the catalog")
    parser.add_argument(
        "--engine-root",
        default=None,
        help="Engine install root; overrides the engine from engines.json",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="engine-launcher",
        description="Clean, generate, build, run and package engine projects",
    )
    parser.add_argument("--version", action="version", version=f"engine-launcher {__version__}")
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding engines.json and projects.json (overrides LAUNCHER_CONFIG_DIR)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List configured engines and projects")

    clean = subparsers.add_parser("clean", help="Delete derived build artifacts")
    _add_project_args(clean)

    generate = subparsers.add_parser("generate", help="Generate IDE project files")
    _add_project_args(generate)

    build = subparsers.add_parser("build", help="Build the project's editor target")
    _add_project_args(build)
    build.add_argument(
        "--configuration",
        type=_configuration_arg,
        default="Development",
        help="Development | Shipping | Debug",
    )

    run = subparsers.add_parser("run", help="Launch the editor with the project")
    _add_project_args(run)
    run.add_argument(
        "--args",
        dest="extra_args",
        default=None,
        help="Extra command line arguments (defaults to the project's own)",
    )

    package = subparsers.add_parser("package", help="Cook, stage and archive the project")
    _add_project_args(package)
    package.add_argument(
        "--platform",
        type=_platform_arg,
        default=None,
        help="Windows | Linux | Mac | Android (defaults to the host)",
    )
    package.add_argument("--output-dir", default=None, help="Archive directory")

    exec_ = subparsers.add_parser("exec", help="Run an arbitrary shell command")
    exec_.add_argument(
        "shell_command",
        nargs="+",
        help="A single shell command line, or arguments to be joined",
    )

    return parser


def _wait(future: Future[T], cancel: Callable[[], None], interval: float) -> T | None:
    """Wait for ``future``; on Ctrl-C request cancellation and keep waiting.

    A second Ctrl-C stops waiting and returns ``None``.
    """

    try:
        while True:
            try:
                return future.result(timeout=interval)
            except concurrent.futures.TimeoutError:
                continue
    except KeyboardInterrupt:
        print("Cancelling...", file=sys.stderr, flush=True)
        cancel()
        try:
            return future.result()
        except KeyboardInterrupt:
            print("Interrupted", file=sys.stderr, flush=True)
            return None


def _resolve_project(session: LauncherSession, args: argparse.Namespace) -> ProjectEntry:
    if args.manifest is not None:
        manifest = Path(args.manifest)
        if not manifest.is_file():
            raise ProjectNotFound(project=str(manifest))
        return ProjectEntry.from_manifest(manifest)
    return session.resolve_project(args.project)


def _run_workflow(settings: LauncherSettings, args: argparse.Namespace) -> int:
    session = LauncherSession.from_settings(settings)
    session.log.subscribe(_print_log_line)

    try:
        project = _resolve_project(session, args)
        current = session.start(
            WorkflowRequest(
                workflow=Workflow(args.command),
                project=project,
                configuration=getattr(args, "configuration", BuildConfiguration.DEVELOPMENT),
                platform=getattr(args, "platform", None),
                extra_args=getattr(args, "extra_args", None),
                output_dir=Path(args.output_dir) if getattr(args, "output_dir", None) else None,
                engine_root=Path(args.engine_root) if args.engine_root else None,
            )
        )
    except ProjectNotFound as e:
        print(str(e), file=sys.stderr)
        return 2
    except EngineNotFound:
        # The session already reported it through the log.
        return 2

    success = _wait(current.future, session.cancel, settings.poll_interval_seconds)
    return 0 if success is True else 1


def _run_exec(settings: LauncherSettings, args: argparse.Namespace) -> int:
    runner = ProcessRunner(
        _print_line,
        backend=ProcessBackendFactory.create(chunk_size=settings.read_chunk_size),
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    parts: list[str] = args.shell_command
    command = parts[0] if len(parts) == 1 else parts
    code = _wait(runner.execute_async(command), runner.cancel, settings.poll_interval_seconds)
    return 0 if code == 0 else 1


def _list(settings: LauncherSettings) -> int:
    catalog = LauncherCatalog.from_files(settings.engines_file, settings.projects_file)

    print("Engines:")
    if not catalog.engines:
        print("  (none)")
    for engine in catalog.engines:
        print(f"  {engine.association}  {engine.display_name}  {engine.path}")

    print("Projects:")
    if not catalog.projects:
        print("  (none)")
    for project in catalog.projects:
        print(f"  {project.name}  [{project.engine_version}]  {project.uproject_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LauncherSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    if args.config_dir is not None:
        settings = settings.model_copy(update={"config_dir": Path(args.config_dir)})

    configure_logging(settings.log_level)

    if args.command == "list":
        return _list(settings)
    if args.command == "exec":
        return _run_exec(settings, args)
    return _run_workflow(settings, args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
