"""Translation facade -- the single entry point of the pipeline.

``translate()`` drives::

    DeploymentSpec ─► normalize_spec ─► resolve_conflicts ─► order_resources ─► build_argument_vector
                          │                    │
                          ▼                    ▼
              TranslationError(INVALID)  TranslationError(CONFLICT)

Normalization failures stop the pipeline (a malformed declaration cannot be
meaningfully conflict-checked) but are aggregated across every category
first. The two failure kinds are therefore mutually exclusive per call.

Example:
    >>> from runvector.translate import DeploymentSpec, MountDecl, translate
    >>> spec = DeploymentSpec(
    ...     image="library/app:1.0",
    ...     workdir="/srv",
    ...     env={"MODE": "prod"},
    ...     mounts=[MountDecl(source="/host/data", target="/data")],
    ... )
    >>> translate(spec).unwrap().to_list()
    ['--workdir', '/srv', '--env', 'MODE=prod', '--mount', 'source=/host/data,target=/data,mode=rw', 'library/app:1.0']
"""

from __future__ import annotations

from runvector.core.errors import TranslationError
from runvector.core.logging import LogContext, get_logger
from runvector.core.result import Err, Result
from runvector.translate.builder import build_argument_vector
from runvector.translate.config import TranslationConfig
from runvector.translate.conflicts import resolve_conflicts
from runvector.translate.models import ArgumentVector, DeploymentSpec
from runvector.translate.normalizers import normalize_spec
from runvector.translate.ordering import order_resources

logger = get_logger(__name__)


def translate(spec: DeploymentSpec, config: TranslationConfig | None = None) -> Result[ArgumentVector]:
    """Translate a deployment spec into an argument vector.

    Returns:
        ``Ok(ArgumentVector)`` on success, otherwise ``Err(TranslationError)``
        whose ``kind`` is INVALID (every validation error) or CONFLICT
        (every conflict).
    """
    config = config or TranslationConfig()
    with LogContext(spec_image=spec.image):
        logger.debug("translation.started")

        normalized = normalize_spec(spec, config)
        if normalized.is_err():
            error = TranslationError.invalid(normalized.unwrap_err().errors)
            logger.info("translation.invalid", errors=len(error), rules=[e.rule for e in error])
            return Err(error.with_context(spec_image=spec.image))

        report = resolve_conflicts(normalized.unwrap(), config)
        if not report.is_clean:
            logger.info(
                "translation.conflict", conflicts=len(report.conflicts), keys=[c.key for c in report.conflicts]
            )
            return report.to_result().map_err(lambda e: e.with_context(spec_image=spec.image))

        if report.synthesized:
            logger.info("translation.reconciled", scratch_paths=[m.target for m in report.synthesized])

        result = report.to_result().map(order_resources).map(build_argument_vector)
        logger.debug("translation.completed", tokens=len(result.unwrap()), synthesized=len(report.synthesized))
        return result


def translate_or_raise(spec: DeploymentSpec, config: TranslationConfig | None = None) -> ArgumentVector:
    """Exception-style variant of :func:`translate`; raises :class:`TranslationError`."""
    return translate(spec, config).unwrap()
