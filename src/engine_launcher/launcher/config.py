"""Configuration for the launcher.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The catalog files (`engines.json`, `projects.json`) live in the config
directory; everything else has a sensible default.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LauncherSettings(BaseSettings):
    """Settings for the launcher core, CLI and REST adapter.

    Environment variables:
    - LOG_LEVEL                        (optional)
    - LAUNCHER_CONFIG_DIR              (optional)
    - LAUNCHER_MAX_LOG_LINES           (optional)
    - LAUNCHER_READ_CHUNK_SIZE         (optional)
    - LAUNCHER_POLL_INTERVAL_SECONDS   (optional)
    - LAUNCHER_CORS_ORIGINS            (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LauncherSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    config_dir: Path = Field(
        default=Path("."),
        validation_alias="LAUNCHER_CONFIG_DIR",
        description="Directory holding engines.json and projects.json",
    )

    max_log_lines: int = Field(
        default=500,
        ge=1,
        validation_alias="LAUNCHER_MAX_LOG_LINES",
        description="Number of log lines retained before the oldest are evicted",
    )

    read_chunk_size: int = Field(
        default=256,
        ge=1,
        le=1 << 20,
        validation_alias="LAUNCHER_READ_CHUNK_SIZE",
        description="Bytes read from the child output pipe per iteration",
    )

    poll_interval_seconds: float = Field(
        default=0.1,
        gt=0,
        le=5.0,
        validation_alias="LAUNCHER_POLL_INTERVAL_SECONDS",
        description=(
            "How long a single read waits for child output before re-checking "
            "the cancellation flag."
        ),
    )

    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="LAUNCHER_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins for the REST adapter.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @property
    def engines_file(self) -> Path:
        """Path of the engine installation catalog."""

        return self.config_dir / "engines.json"

    @property
    def projects_file(self) -> Path:
        """Path of the project catalog."""

        return self.config_dir / "projects.json"

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
