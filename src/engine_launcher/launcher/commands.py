"""Command-line synthesis for the engine tools.

Every function returns one shell-invocable string. Filesystem paths are
always double-quoted; tokens such as target names and platform ids are not.
"""

from __future__ import annotations

from pathlib import Path

from engine_launcher.launcher.platforms import (
    BuildConfiguration,
    EngineLayout,
    Platform,
    build_config_to_string,
    build_platform_id,
    package_platform_id,
    platform_to_string,
)

EDITOR_TARGET_SUFFIX = "Editor"


def quote(path: Path | str) -> str:
    return f'"{path}"'


def editor_target(uproject_path: Path) -> str:
    """Build target for the project's editor modules, e.g. ``MyGameEditor``."""

    return f"{Path(uproject_path).stem}{EDITOR_TARGET_SUFFIX}"


def default_package_dir(uproject_path: Path, platform: Platform) -> Path:
    return Path(uproject_path).parent / "Package" / platform_to_string(platform)


def generate_project_files_command(layout: EngineLayout, uproject_path: Path) -> str:
    return f"{quote(layout.generate_script)} {quote(uproject_path)} -game"


def build_command(
    layout: EngineLayout,
    uproject_path: Path,
    configuration: BuildConfiguration = BuildConfiguration.DEVELOPMENT,
) -> str:
    return " ".join(
        [
            quote(layout.build_script),
            editor_target(uproject_path),
            build_platform_id(layout.host),
            build_config_to_string(configuration),
            f"-Project={quote(uproject_path)}",
            "-WaitMutex",
            "-Progress",
            "-NoHotReload",
        ]
    )


def run_command(layout: EngineLayout, uproject_path: Path, extra_args: str = "") -> str:
    command = f"{quote(layout.editor)} {quote(uproject_path)}"
    if extra_args.strip():
        command += f" {extra_args}"
    return command


def package_command(
    layout: EngineLayout,
    uproject_path: Path,
    platform: Platform,
    output_dir: Path,
) -> str:
    return " ".join(
        [
            quote(layout.automation_tool),
            "BuildCookRun",
            f"-project={quote(uproject_path)}",
            "-noP4",
            f"-platform={package_platform_id(platform)}",
            "-clientconfig=Shipping",
            "-serverconfig=Shipping",
            "-cook",
            "-allmaps",
            "-build",
            "-stage",
            "-pak",
            "-archive",
            f"-archivedirectory={quote(output_dir)}",
        ]
    )
