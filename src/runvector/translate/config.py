"""Configuration for the translation pipeline.

``TranslationConfig`` makes the runtime-specific policy of the pipeline an
explicit, injectable value instead of hidden constants: most importantly the
scratch paths that read-only reconciliation keeps writable.

Key Concepts:
    scratch_paths: Paths that get a synthesized tmpfs mount when the spec
        asks for a read-only root filesystem and nothing mounts them.
    parallel / max_workers: Optional thread-pool normalization for very
        large specs. The result is identical to sequential execution.

Architecture Decisions:
    - Pydantic v2 (not dataclass): validates and cleans the scratch paths
      once, at configuration time, so the resolver can trust them.
    - from_env() classmethod: explicit ``RUNVECTOR_*`` parsing with the
      precedence kwargs > env vars > field defaults.
    - Frozen: one config can be shared by concurrent translations.

Example::

    config = TranslationConfig(scratch_paths=["/tmp", "/var/tmp"])
    result = translate(spec, config)
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from runvector.core.errors import ConfigError
from runvector.translate.paths import clean_path, is_absolute

DEFAULT_SCRATCH_PATHS: tuple[str, ...] = ("/run", "/tmp")


class TranslationConfig(BaseModel):
    """Policy knobs for :func:`runvector.translate.translate`."""

    model_config = ConfigDict(frozen=True)

    scratch_paths: tuple[str, ...] = Field(
        default=DEFAULT_SCRATCH_PATHS,
        description="Paths kept writable with an implicit tmpfs when read_only is set",
    )
    parallel: bool = Field(
        default=False,
        description="Normalize resource categories on a thread pool",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        description="Thread pool size when parallel is enabled",
    )

    @field_validator("scratch_paths", mode="before")
    @classmethod
    def _split_scratch_paths(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return value

    @field_validator("scratch_paths")
    @classmethod
    def _clean_scratch_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned: list[str] = []
        for path in value:
            if not path or not is_absolute(path):
                raise ValueError(f"scratch path must be absolute: {path!r}")
            path = clean_path(path)
            if path not in cleaned:
                cleaned.append(path)
        return tuple(sorted(cleaned))

    @classmethod
    def from_env(cls, **overrides: Any) -> TranslationConfig:
        """Create config from RUNVECTOR_* environment variables."""
        env_map = {
            "scratch_paths": "RUNVECTOR_SCRATCH_PATHS",
            "parallel": "RUNVECTOR_PARALLEL",
            "max_workers": "RUNVECTOR_MAX_WORKERS",
        }
        values: dict[str, Any] = {}
        for field_name, env_var in env_map.items():
            env_val = os.environ.get(env_var)
            if env_val is not None:
                if field_name == "scratch_paths":
                    values[field_name] = tuple(p.strip() for p in env_val.split(",") if p.strip())
                elif field_name == "parallel":
                    values[field_name] = env_val.lower() in ("true", "1", "yes")
                elif field_name == "max_workers":
                    try:
                        values[field_name] = int(env_val)
                    except ValueError as e:
                        raise ConfigError(f"{env_var} must be an integer, got {env_val!r}", cause=e) from e
        values.update(overrides)
        try:
            return cls(**values)
        except PydanticValidationError as e:
            raise ConfigError(f"invalid translation config: {e.errors()[0]['msg']}", cause=e) from e
