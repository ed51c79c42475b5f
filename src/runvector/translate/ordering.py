"""Ordering policy.

Imposes one total order on every flag, independent of declaration order, so
semantically equal specs produce byte-identical argument vectors.

Category sequence (options first, positional image last)::

    workdir → read-only → env → annotations → mounts → devices → image

Within a category entries are sorted by their primary identifier (key,
target path, container path) with ties broken by the full declaration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from runvector.translate.models import AnnotationDecl, DeviceDecl, EnvDecl, MountDecl, NormalizedResources


class FlagCategory(str, Enum):
    WORKDIR = "workdir"
    READ_ONLY = "read_only"
    ENV = "env"
    ANNOTATIONS = "annotations"
    MOUNTS = "mounts"
    DEVICES = "devices"
    IMAGE = "image"


CATEGORY_ORDER: tuple[FlagCategory, ...] = tuple(FlagCategory)


@dataclass(frozen=True)
class FlagGroup:
    """All entries of one category, already in final order."""

    category: FlagCategory
    entries: tuple[Any, ...]


def order_resources(resources: NormalizedResources) -> tuple[FlagGroup, ...]:
    """Return the non-empty flag groups of ``resources`` in policy order."""
    entries: dict[FlagCategory, tuple[Any, ...]] = {
        FlagCategory.WORKDIR: (resources.workdir,) if resources.workdir else (),
        FlagCategory.READ_ONLY: (True,) if resources.read_only else (),
        FlagCategory.ENV: tuple(sorted(resources.env, key=EnvDecl.sort_key)),
        FlagCategory.ANNOTATIONS: tuple(sorted(resources.annotations, key=AnnotationDecl.sort_key)),
        FlagCategory.MOUNTS: tuple(sorted(resources.mounts, key=MountDecl.sort_key)),
        FlagCategory.DEVICES: tuple(sorted(resources.devices, key=DeviceDecl.sort_key)),
        FlagCategory.IMAGE: (resources.image,),
    }
    return tuple(FlagGroup(category, entries[category]) for category in CATEGORY_ORDER if entries[category])
