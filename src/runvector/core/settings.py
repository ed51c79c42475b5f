"""Process-level settings for the runvector command line.

``RunvectorSettings`` holds what the surrounding tooling needs (log level,
log format, default runtime binary). It reads ``RUNVECTOR_*`` environment
variables and an optional ``.env`` file via pydantic-settings. Translation
policy lives in :class:`runvector.translate.config.TranslationConfig`, not
here: the core never reads the environment on its own.

Examples:
    >>> settings = RunvectorSettings(log_level="DEBUG")
    >>> settings.log_level
    'DEBUG'
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RunvectorSettings(BaseSettings):
    """Settings for the ``runvector`` CLI process.

    Fields
    ──────
    log_level : structlog level for stderr output
    log_json  : force JSON log lines (``None`` = auto-detect from tty)
    runtime   : container runtime binary used by ``runvector command``
    """

    model_config = SettingsConfigDict(
        env_prefix="RUNVECTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Log level")
    log_json: bool | None = Field(default=None, description="JSON log output")
    runtime: str = Field(default="podman", description="Container runtime binary")

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LEVELS)}")
        return value


def get_settings(**overrides: object) -> RunvectorSettings:
    """Build settings from env vars / ``.env``, with keyword overrides on top."""
    return RunvectorSettings(**overrides)
