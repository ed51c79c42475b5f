"""Full runtime command composition around a translated deployment spec."""

from runvector.runtime.commands import RunCommand, build_run_command
from runvector.runtime.context import DEFAULT_RUNTIME, ContainerContext, RuntimeContext

__all__ = [
    "DEFAULT_RUNTIME",
    "ContainerContext",
    "RunCommand",
    "RuntimeContext",
    "build_run_command",
]
