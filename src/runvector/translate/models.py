"""Domain models for the translation pipeline.

Every value here is immutable. A :class:`DeploymentSpec` is built once by an
external renderer and read by the pipeline; each stage derives a new, more
refined value (``NormalizedResources`` → ``ConflictReport`` → ordered
``FlagGroup`` tuple → :class:`ArgumentVector`).

Key Concepts:
    MountDecl / DeviceDecl / EnvDecl / AnnotationDecl: one declaration each.
    MountKind, MountMode, DevicePermission: closed enums, so the normalizer
        and builder handle every case explicitly.
    DeploymentSpec: the caller-owned input.
    NormalizedResources: canonical, validated, sorted resource sets.
    ArgumentVector: ordered tuple of non-empty tokens for process creation.

Architecture Decisions:
    - Frozen dataclasses (not Pydantic): specs arrive already typed from the
      renderer; validation is the normalizers' job and must be reported as
      values, not raised from a constructor.
    - ``env`` and ``annotations`` accept a mapping *or* a sequence of pairs.
      Sequences keep repeated keys visible so the resolver can report them.

Tags:
    models, dataclasses, deployment-spec, argument-vector
"""

from __future__ import annotations

import shlex
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, overload


class MountKind(str, Enum):
    """How a mount is backed."""

    BIND = "bind"  # Host path
    VOLUME = "volume"  # Named runtime volume
    TMPFS = "tmpfs"  # Memory-backed scratch space


class MountMode(str, Enum):
    """Access mode of a mount."""

    READ_WRITE = "rw"
    READ_ONLY = "ro"

    @classmethod
    def parse(cls, value: Any) -> MountMode | None:
        """Accept the enum, ``rw``/``ro`` or ``read-write``/``read-only``."""
        if isinstance(value, MountMode):
            return value
        if isinstance(value, str):
            return _MODE_ALIASES.get(value.strip().lower())
        return None


_MODE_ALIASES = {
    "rw": MountMode.READ_WRITE,
    "read-write": MountMode.READ_WRITE,
    "read_write": MountMode.READ_WRITE,
    "ro": MountMode.READ_ONLY,
    "read-only": MountMode.READ_ONLY,
    "read_only": MountMode.READ_ONLY,
}


class DevicePermission(str, Enum):
    """cgroup device permission, value is the runtime flag letter."""

    READ = "r"
    WRITE = "w"
    MKNOD = "m"

    @classmethod
    def parse(cls, value: Any) -> DevicePermission | None:
        if isinstance(value, DevicePermission):
            return value
        if isinstance(value, str):
            return _PERMISSION_ALIASES.get(value.strip().lower())
        return None


_PERMISSION_ALIASES = {
    "r": DevicePermission.READ,
    "read": DevicePermission.READ,
    "w": DevicePermission.WRITE,
    "write": DevicePermission.WRITE,
    "m": DevicePermission.MKNOD,
    "mknod": DevicePermission.MKNOD,
}

PERMISSION_ORDER = (DevicePermission.READ, DevicePermission.WRITE, DevicePermission.MKNOD)
DEFAULT_DEVICE_PERMISSIONS = frozenset({DevicePermission.READ, DevicePermission.WRITE})


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MountDecl:
    """A filesystem mount. ``source`` is ignored for tmpfs mounts."""

    source: str | None
    target: str
    mode: MountMode = MountMode.READ_WRITE
    kind: MountKind = MountKind.BIND

    def sort_key(self) -> tuple[str, ...]:
        return (self.target, self.kind.value, self.source or "", self.mode.value)


@dataclass(frozen=True)
class DeviceDecl:
    """A device exposed to the container.

    ``host_path`` is either an absolute device node or a CDI qualified name
    (``vendor.com/class=name``); CDI devices take no container path.
    """

    host_path: str
    container_path: str | None = None
    permissions: frozenset[DevicePermission] | None = None

    @property
    def key(self) -> str:
        """Primary identifier: the container path, or the CDI name."""
        return self.container_path or self.host_path

    @property
    def permission_string(self) -> str:
        perms = self.permissions if self.permissions is not None else DEFAULT_DEVICE_PERMISSIONS
        return "".join(p.value for p in PERMISSION_ORDER if p in perms)

    def sort_key(self) -> tuple[str, ...]:
        return (self.key, self.host_path, self.permission_string)


@dataclass(frozen=True)
class EnvDecl:
    key: str
    value: str

    def sort_key(self) -> tuple[str, str]:
        return (self.key, self.value)


@dataclass(frozen=True)
class AnnotationDecl:
    key: str
    value: str

    def sort_key(self) -> tuple[str, str]:
        return (self.key, self.value)


KeyValueInput = Mapping[str, str] | Sequence[Any]


def _as_tuple(items: Any) -> tuple[Any, ...]:
    if items is None:
        return ()
    if isinstance(items, (str, bytes)):
        # a bare string is a malformed declaration list; keep it visible
        return (items,)
    return tuple(items)


def _as_pairs(items: Any, decl_type: type) -> tuple[Any, ...]:
    if items is None:
        return ()
    if isinstance(items, Mapping):
        return tuple(decl_type(k, v) for k, v in items.items())
    out = []
    for item in _as_tuple(items):
        if isinstance(item, tuple) and len(item) == 2 and not isinstance(item, decl_type):
            out.append(decl_type(*item))
        elif isinstance(item, Mapping) and len(item) == 1:
            # [{"A": "1"}, {"A": "2"}] style repeated declarations
            ((k, v),) = item.items()
            out.append(decl_type(k, v))
        else:
            out.append(item)
    return tuple(out)


@dataclass(frozen=True)
class DeploymentSpec:
    """Already-parsed deployment descriptor.

    Collections are frozen into tuples on construction; ``env`` and
    ``annotations`` become tuples of :class:`EnvDecl` / :class:`AnnotationDecl`.

    Example::

        spec = DeploymentSpec(
            image="library/app:1.0",
            workdir="/srv",
            env={"MODE": "prod"},
            mounts=[MountDecl(source="/host/data", target="/data")],
        )
    """

    image: str
    mounts: Sequence[MountDecl] = ()
    devices: Sequence[DeviceDecl] = ()
    env: KeyValueInput = ()
    annotations: KeyValueInput = ()
    workdir: str | None = None
    read_only: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "mounts", _as_tuple(self.mounts))
        object.__setattr__(self, "devices", _as_tuple(self.devices))
        object.__setattr__(self, "env", _as_pairs(self.env, EnvDecl))
        object.__setattr__(self, "annotations", _as_pairs(self.annotations, AnnotationDecl))


@dataclass(frozen=True)
class NormalizedResources:
    """Validated, canonical resource sets, one per category.

    Collections are sorted by the category key and then by the full
    declaration. Duplicates are kept: detecting them is the resolver's job.
    """

    image: str
    workdir: str | None
    read_only: bool
    mounts: tuple[MountDecl, ...] = ()
    devices: tuple[DeviceDecl, ...] = ()
    env: tuple[EnvDecl, ...] = ()
    annotations: tuple[AnnotationDecl, ...] = ()

    def to_spec(self) -> DeploymentSpec:
        """Re-express the normalized sets as a spec (normalization is a projection)."""
        return DeploymentSpec(
            image=self.image,
            mounts=self.mounts,
            devices=self.devices,
            env=self.env,
            annotations=self.annotations,
            workdir=self.workdir,
            read_only=self.read_only,
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArgumentVector:
    """Ordered sequence of discrete tokens handed directly to process creation.

    Tokens are never shell-quoted or joined; :meth:`render` exists only to
    produce an audit string for logs.
    """

    tokens: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        tokens = tuple(self.tokens)
        for position, token in enumerate(tokens):
            if not isinstance(token, str) or not token:
                raise ValueError(f"argument vector token {position} is empty or not a string: {token!r}")
        object.__setattr__(self, "tokens", tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[str, ...]: ...

    def __getitem__(self, index: int | slice) -> str | tuple[str, ...]:
        return self.tokens[index]

    def __add__(self, other: ArgumentVector | Sequence[str]) -> ArgumentVector:
        return ArgumentVector(self.tokens + tuple(other))

    def to_list(self) -> list[str]:
        return list(self.tokens)

    def render(self) -> str:
        """Shell-quoted single-line rendering for logging and display."""
        return shlex.join(self.tokens)
