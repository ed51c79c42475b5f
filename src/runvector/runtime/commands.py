"""Compose a complete runtime ``run`` command around a translated spec.

Layout of the produced argv::

    <program> [--root R] [--runroot R] [--module M] [--storage-opt ...]
        run [--rm] [--detach] [-it] [--name N] [--pidfile P] [--entrypoint=]
        <translated argument vector, image last> [command ...]

Nothing is executed here; the caller hands :attr:`RunCommand.argv` and
:attr:`RunCommand.env` to its process launcher.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Iterable
from dataclasses import dataclass, field

from runvector.core.errors import TranslationError, TranslationFailure, ValidationError
from runvector.core.logging import get_logger
from runvector.core.result import Err, Ok, Result
from runvector.runtime.context import ContainerContext, RuntimeContext
from runvector.translate.config import TranslationConfig
from runvector.translate.facade import translate
from runvector.translate.models import DeploymentSpec

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunCommand:
    """A fully composed runtime invocation."""

    program: str
    args: tuple[str, ...]
    env: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def environ(self, base: dict[str, str] | None = None) -> dict[str, str]:
        """Process environment: ``base`` (default ``os.environ``) plus ``env``."""
        merged = dict(os.environ if base is None else base)
        merged.update(self.env)
        return merged

    def render(self) -> str:
        return shlex.join(self.argv)


def build_run_command(
    spec: DeploymentSpec,
    runtime: RuntimeContext | None = None,
    container: ContainerContext | None = None,
    command: Iterable[str] = (),
    config: TranslationConfig | None = None,
) -> Result[RunCommand]:
    """Translate ``spec`` and wrap it in a complete runtime ``run`` command.

    Container options are validated alongside the spec. Their errors are
    merged with the spec's validation errors into one INVALID
    :class:`TranslationError`; conflicts are only reported when every input
    is individually valid.
    """
    runtime = runtime or RuntimeContext()
    container = container or ContainerContext()
    command = tuple(command)

    context_errors: list[ValidationError] = container.validate()
    translated = translate(spec, config)

    if context_errors:
        errors = list(context_errors)
        if translated.is_err():
            failure = translated.unwrap_err()
            if failure.kind is TranslationFailure.INVALID:
                errors.extend(failure.errors)
        logger.info("command.invalid", errors=len(errors))
        return Err(TranslationError.invalid(errors).with_context(spec_image=spec.image))

    if translated.is_err():
        return translated

    args = (*runtime.global_args(), "run", *container.run_args(), *translated.unwrap(), *command)
    run_command = RunCommand(program=runtime.program, args=args, env=runtime.env)
    logger.debug("command.composed", program=runtime.program, args=len(args))
    return Ok(run_command)
