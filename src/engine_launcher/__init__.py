"""Engine Launcher.

Drives the engine's command-line tools for a project:
- clean, generate project files, build, run and package workflows
- live streaming of tool output with cooperative cancellation
- a CLI and a small REST adapter over the same session
"""

__version__ = "0.1.0"

from engine_launcher.launcher.config import LauncherSettings

__all__ = ["__version__", "LauncherSettings"]
