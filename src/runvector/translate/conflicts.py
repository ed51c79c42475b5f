"""Conflict resolver.

Cross-checks normalized resource sets against each other. Identical
declarations collapse silently; declarations that share a key or path but
differ are reported. Every conflict is returned in one pass, one
:class:`~runvector.core.errors.ConflictError` per colliding key.

Checks, in evaluation order:
    1. duplicate mount targets               MountTargetCollision
    2. mount target == device container path MountDeviceCollision
       (skipped when check 1 found a collision: the first conflict of the
       mount category short-circuits the rest of that category)
    3. duplicate device container paths      DevicePathCollision
    4. duplicate env keys (case-sensitive)   DuplicateEnvKey
    5. duplicate annotation keys             DuplicateAnnotationKey
    6. read-only reconciliation: with ``read_only`` set, each configured
       scratch path not covered by a mount gets a synthesized tmpfs mount.
       This is the only step that adds a declaration instead of rejecting.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import TypeVar

from runvector.core.errors import (
    ConflictError,
    DevicePathCollision,
    DuplicateAnnotationKey,
    DuplicateEnvKey,
    MountDeviceCollision,
    MountTargetCollision,
    TranslationError,
)
from runvector.core.logging import get_logger
from runvector.core.result import Err, Ok, Result
from runvector.translate.config import TranslationConfig
from runvector.translate.models import (
    AnnotationDecl,
    DeviceDecl,
    EnvDecl,
    MountDecl,
    MountKind,
    MountMode,
    NormalizedResources,
)
from runvector.translate.paths import is_within

logger = get_logger(__name__)

D = TypeVar("D")


@dataclass(frozen=True)
class ConflictReport:
    """Outcome of conflict resolution.

    Clean reports carry the reconciled resources (deduplicated, with any
    synthesized scratch mounts merged in); failed reports carry the
    conflicts and no resources.
    """

    resources: NormalizedResources | None
    conflicts: tuple[ConflictError, ...] = ()
    synthesized: tuple[MountDecl, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.conflicts

    def to_result(self) -> Result[NormalizedResources]:
        if self.conflicts:
            return Err(TranslationError.conflicting(self.conflicts))
        return Ok(self.resources)


def _dedupe(decls: Iterable[D], sort_key: Callable[[D], tuple]) -> tuple[D, ...]:
    """Collapse identical declarations, keep canonical order."""
    return tuple(sorted(dict.fromkeys(decls), key=sort_key))


def _collisions(decls: Iterable[D], key: Callable[[D], str]) -> list[tuple[str, tuple[D, ...]]]:
    groups: dict[str, list[D]] = {}
    for decl in decls:
        groups.setdefault(key(decl), []).append(decl)
    return [(k, tuple(group)) for k, group in sorted(groups.items()) if len(group) > 1]


def _scratch_mounts(
    mounts: tuple[MountDecl, ...],
    devices: tuple[DeviceDecl, ...],
    scratch_paths: Iterable[str],
) -> tuple[MountDecl, ...]:
    device_paths = {d.container_path for d in devices if d.container_path}
    synthesized = []
    for path in scratch_paths:
        if any(is_within(path, m.target) for m in mounts):
            continue
        if path in device_paths:
            logger.warning("reconcile.scratch_path_is_device", path=path)
            continue
        synthesized.append(MountDecl(source=None, target=path, mode=MountMode.READ_WRITE, kind=MountKind.TMPFS))
    return tuple(synthesized)


def resolve_conflicts(
    resources: NormalizedResources,
    config: TranslationConfig | None = None,
) -> ConflictReport:
    """Cross-check normalized resources and reconcile read-only scratch paths."""
    config = config or TranslationConfig()

    mounts = _dedupe(resources.mounts, MountDecl.sort_key)
    devices = _dedupe(resources.devices, DeviceDecl.sort_key)
    env = _dedupe(resources.env, EnvDecl.sort_key)
    annotations = _dedupe(resources.annotations, AnnotationDecl.sort_key)

    conflicts: list[ConflictError] = []

    # 1 + 2: mount category
    target_collisions = [
        MountTargetCollision(target, f"{len(group)} different mounts share this target", declarations=group)
        for target, group in _collisions(mounts, lambda m: m.target)
    ]
    conflicts.extend(target_collisions)
    if not target_collisions:
        by_device_path: dict[str, list[DeviceDecl]] = {}
        for device in devices:
            if device.container_path:
                by_device_path.setdefault(device.container_path, []).append(device)
        for mount in mounts:
            if mount.target in by_device_path:
                conflicts.append(
                    MountDeviceCollision(
                        mount.target,
                        "path is both a mount target and a device container path",
                        declarations=(mount, *by_device_path[mount.target]),
                    )
                )

    # 3: device category
    conflicts.extend(
        DevicePathCollision(path, f"{len(group)} different devices share this container path", declarations=group)
        for path, group in _collisions(devices, lambda d: d.key)
    )

    # 4: env
    conflicts.extend(
        DuplicateEnvKey(key, f"declared {len(group)} times with different values", declarations=group)
        for key, group in _collisions(env, lambda e: e.key)
    )

    # 5: annotations
    conflicts.extend(
        DuplicateAnnotationKey(key, f"declared {len(group)} times with different values", declarations=group)
        for key, group in _collisions(annotations, lambda a: a.key)
    )

    if conflicts:
        logger.debug("conflicts.detected", count=len(conflicts), kinds=sorted({c.kind for c in conflicts}))
        return ConflictReport(resources=None, conflicts=tuple(conflicts))

    # 6: read-only reconciliation
    synthesized: tuple[MountDecl, ...] = ()
    if resources.read_only:
        synthesized = _scratch_mounts(mounts, devices, config.scratch_paths)
        if synthesized:
            mounts = tuple(sorted(mounts + synthesized, key=MountDecl.sort_key))

    reconciled = replace(resources, mounts=mounts, devices=devices, env=env, annotations=annotations)
    return ConflictReport(resources=reconciled, synthesized=synthesized)
