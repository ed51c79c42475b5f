"""
Shared pytest fixtures for runvector tests.

This module provides:
- structlog routed to stderr (stdout stays clean for CLI assertions)
- Sample deployment specs used across test modules
- A JSON spec document writer for CLI tests
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
import structlog

from runvector.core.logging import configure_logging
from runvector.translate import DeploymentSpec, DeviceDecl, MountDecl, MountKind, MountMode, TranslationConfig


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def _structlog_to_stderr():
    configure_logging(level="DEBUG", json_format=True, add_timestamp=False)
    yield
    structlog.reset_defaults()


# =============================================================================
# Sample specs
# =============================================================================


@pytest.fixture
def minimal_spec() -> DeploymentSpec:
    return DeploymentSpec(image="library/app:1.0")


@pytest.fixture
def example_spec() -> DeploymentSpec:
    """workdir + one env var + one bind mount."""
    return DeploymentSpec(
        image="library/app:1.0",
        workdir="/srv",
        env={"MODE": "prod"},
        mounts=[MountDecl(source="/host/data", target="/data")],
    )


@pytest.fixture
def full_spec() -> DeploymentSpec:
    """Every category populated, declared out of canonical order."""
    return DeploymentSpec(
        image="registry.example.com:5000/team/app@sha256:" + "a" * 64,
        workdir="/srv/app/",
        read_only=True,
        env=[("ZETA", "last"), ("ALPHA", "first")],
        annotations={"com.example.tier": "web", "io.podman/hooks": "on"},
        mounts=[
            MountDecl(source="/host/logs", target="/var/log/app", mode=MountMode.READ_ONLY),
            MountDecl(source="cache", target="/cache", kind=MountKind.VOLUME),
            MountDecl(source=None, target="/scratch", kind=MountKind.TMPFS),
        ],
        devices=[
            DeviceDecl(host_path="/dev/fuse"),
            DeviceDecl(host_path="nvidia.com/gpu=all"),
        ],
    )


@pytest.fixture
def no_scratch() -> TranslationConfig:
    return TranslationConfig(scratch_paths=())


# =============================================================================
# CLI documents
# =============================================================================


@pytest.fixture
def write_spec(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a JSON spec document and return its path."""

    def _write(document: dict[str, Any], name: str = "spec.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write
