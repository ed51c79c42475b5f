"""Deployment spec → container-runtime argument vector.

Pipeline stages, leaf-first:
    normalizers   validate + canonicalize one declaration category each
    conflicts     cross-check categories, reconcile read-only scratch paths
    ordering      total deterministic order of flag groups
    builder       fixed flag-token templates → ArgumentVector
    facade        translate(): drives the stages, aggregates errors
"""

from runvector.translate.builder import build_argument_vector
from runvector.translate.config import DEFAULT_SCRATCH_PATHS, TranslationConfig
from runvector.translate.conflicts import ConflictReport, resolve_conflicts
from runvector.translate.facade import translate, translate_or_raise
from runvector.translate.models import (
    AnnotationDecl,
    ArgumentVector,
    DeploymentSpec,
    DeviceDecl,
    DevicePermission,
    EnvDecl,
    MountDecl,
    MountKind,
    MountMode,
    NormalizedResources,
)
from runvector.translate.normalizers import normalize_spec
from runvector.translate.ordering import CATEGORY_ORDER, FlagCategory, FlagGroup, order_resources

__all__ = [
    "CATEGORY_ORDER",
    "DEFAULT_SCRATCH_PATHS",
    "AnnotationDecl",
    "ArgumentVector",
    "ConflictReport",
    "DeploymentSpec",
    "DeviceDecl",
    "DevicePermission",
    "EnvDecl",
    "FlagCategory",
    "FlagGroup",
    "MountDecl",
    "MountKind",
    "MountMode",
    "NormalizedResources",
    "TranslationConfig",
    "build_argument_vector",
    "normalize_spec",
    "order_resources",
    "resolve_conflicts",
    "translate",
    "translate_or_raise",
]
