"""
runvector - deployment spec to container-runtime argument vector translation.

- runvector.core: errors, Result envelope, logging, settings
- runvector.translate: normalize, resolve conflicts, order, build
- runvector.runtime: full ``<runtime> run ...`` command composition
- runvector.cli: typer command line
"""

__version__ = "0.1.0"

from runvector.core.errors import TranslationError  # noqa: E402
from runvector.runtime import ContainerContext, RunCommand, RuntimeContext, build_run_command  # noqa: E402
from runvector.translate import (  # noqa: E402
    ArgumentVector,
    DeploymentSpec,
    DeviceDecl,
    MountDecl,
    MountKind,
    MountMode,
    TranslationConfig,
    translate,
    translate_or_raise,
)

__all__ = [
    "ArgumentVector",
    "ContainerContext",
    "DeploymentSpec",
    "DeviceDecl",
    "MountDecl",
    "MountKind",
    "MountMode",
    "RunCommand",
    "RuntimeContext",
    "TranslationConfig",
    "TranslationError",
    "__version__",
    "translate",
    "translate_or_raise",
]
