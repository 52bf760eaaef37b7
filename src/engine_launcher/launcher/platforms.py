"""Platform and build-configuration naming.

The automation tools expect fixed tokens ("Win64", "Development", ...), so
everything that ends up on a command line goes through the helpers here.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Platform(str, Enum):
    WINDOWS = "Windows"
    LINUX = "Linux"
    MAC = "Mac"
    ANDROID = "Android"


class BuildConfiguration(str, Enum):
    DEVELOPMENT = "Development"
    SHIPPING = "Shipping"
    DEBUG = "Debug"


# Platform identifiers understood by the automation tool (-platform=...).
PACKAGE_PLATFORM_IDS: dict[Platform, str] = {
    Platform.WINDOWS: "Win64",
    Platform.LINUX: "Linux",
    Platform.MAC: "Mac",
    Platform.ANDROID: "Android",
}

HOST_PLATFORMS: frozenset[Platform] = frozenset({Platform.WINDOWS, Platform.LINUX, Platform.MAC})


def current_platform(sys_platform: str | None = None) -> Platform:
    """Return the platform the launcher itself is running on."""

    name = sys_platform if sys_platform is not None else sys.platform
    if name.startswith(("win32", "cygwin")):
        return Platform.WINDOWS
    if name.startswith("darwin"):
        return Platform.MAC
    return Platform.LINUX


def platform_to_string(platform: Platform) -> str:
    return platform.value


def build_config_to_string(config: BuildConfiguration) -> str:
    return config.value


def package_platform_id(platform: Platform) -> str:
    return PACKAGE_PLATFORM_IDS[platform]


def build_platform_id(host: Platform) -> str:
    """Platform token passed to the build script when building for ``host``."""

    if host not in HOST_PLATFORMS:
        raise ValueError(f"Not a host platform: {host.value}")
    return PACKAGE_PLATFORM_IDS[host]


def parse_platform(value: str) -> Platform:
    """Parse a platform name case-insensitively ("win64" is accepted too)."""

    lowered = value.strip().lower()
    for platform in Platform:
        if lowered in {platform.value.lower(), PACKAGE_PLATFORM_IDS[platform].lower()}:
            return platform
    raise ValueError(f"Unknown platform: {value!r}")


def parse_build_configuration(value: str) -> BuildConfiguration:
    lowered = value.strip().lower()
    for config in BuildConfiguration:
        if config.value.lower() == lowered:
            return config
    raise ValueError(f"Unknown build configuration: {value!r}")


@dataclass(frozen=True, slots=True)
class EngineLayout:
    """Locations of the engine tools under an install root for one host."""

    root: Path
    host: Platform

    def __post_init__(self) -> None:
        if self.host not in HOST_PLATFORMS:
            raise ValueError(f"Not a host platform: {self.host.value}")

    @property
    def batch_files(self) -> Path:
        return self.root / "Engine" / "Build" / "BatchFiles"

    @property
    def _host_batch_files(self) -> Path:
        if self.host is Platform.WINDOWS:
            return self.batch_files
        return self.batch_files / self.host.value

    @property
    def _script_suffix(self) -> str:
        return ".bat" if self.host is Platform.WINDOWS else ".sh"

    @property
    def editor(self) -> Path:
        binaries = self.root / "Engine" / "Binaries"
        if self.host is Platform.WINDOWS:
            return binaries / "Win64" / "UnrealEditor.exe"
        if self.host is Platform.MAC:
            return binaries / "Mac" / "UnrealEditor.app" / "Contents" / "MacOS" / "UnrealEditor"
        return binaries / "Linux" / "UnrealEditor"

    @property
    def build_script(self) -> Path:
        return self._host_batch_files / f"Build{self._script_suffix}"

    @property
    def generate_script(self) -> Path:
        return self._host_batch_files / f"GenerateProjectFiles{self._script_suffix}"

    @property
    def automation_tool(self) -> Path:
        # RunUAT lives directly in BatchFiles on every host.
        return self.batch_files / f"RunUAT{self._script_suffix}"
