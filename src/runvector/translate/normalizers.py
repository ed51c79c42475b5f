"""Resource normalizers.

Each normalizer takes one declaration category of a
:class:`~runvector.translate.models.DeploymentSpec` and returns either
``Ok(<canonical value>)`` or ``Err`` carrying every
:class:`~runvector.core.errors.ValidationError` found in that category.
Normalizers never raise for bad input and never look at another category,
so they may run in any order or concurrently.

Rules (one error class per category):
    image        InvalidImage          non-empty, valid reference grammar
    mounts       InvalidMount          absolute target; bind source absolute,
                                       volume source a name or absolute path,
                                       tmpfs source dropped; no "," in values
    devices      InvalidDevice         absolute host path or CDI name;
                                       absolute container path (defaults to
                                       host path); non-empty permission set
    env          InvalidEnvKey         trimmed key, no whitespace / "=" / NUL;
                                       values pass through unmodified
    annotations  InvalidAnnotationKey  namespaced key (``domain/key`` or
                                       ``com.example.key``)
    workdir      InvalidWorkdir        absent, or an absolute path
    read_only    InvalidReadOnly       a bool

Paths are cleaned lexically (see :mod:`runvector.translate.paths`); the host
filesystem is never consulted. Normalization is a projection: feeding a
normalized value back in returns it unchanged.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from runvector.core.errors import (
    AggregateError,
    InvalidAnnotationKey,
    InvalidDevice,
    InvalidEnvKey,
    InvalidImage,
    InvalidMount,
    InvalidReadOnly,
    InvalidWorkdir,
    ValidationError,
)
from runvector.core.result import Err, Ok, Result, collect_all_errors
from runvector.translate.config import TranslationConfig
from runvector.translate.models import (
    DEFAULT_DEVICE_PERMISSIONS,
    AnnotationDecl,
    DeploymentSpec,
    DeviceDecl,
    DevicePermission,
    EnvDecl,
    MountDecl,
    MountKind,
    MountMode,
    NormalizedResources,
)
from runvector.translate.paths import clean_path, is_absolute
from runvector.translate.reference import reference_problem

VOLUME_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")
CDI_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9.-]*/[A-Za-z0-9][A-Za-z0-9_.-]*=[A-Za-z0-9_][A-Za-z0-9_.:-]*")
_ANNOTATION_SEPARATORS = re.compile(r"[./]")


def _finish(value: Any, errors: list[ValidationError]) -> Result[Any]:
    if not errors:
        return Ok(value)
    if len(errors) == 1:
        return Err(errors[0])
    return Err(AggregateError(errors))


def _has_space(text: str) -> bool:
    return any(ch.isspace() for ch in text)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def normalize_image(image: Any) -> Result[str]:
    if not isinstance(image, str):
        return Err(InvalidImage("image must be a string", field="image", value=image))
    problem = reference_problem(image)
    if problem:
        return Err(InvalidImage(f"image reference {problem}", field="image", value=image))
    return Ok(image)


def normalize_workdir(workdir: Any) -> Result[str | None]:
    """``None`` or ``""`` keep the image's built-in working directory."""
    if workdir is None or workdir == "":
        return Ok(None)
    if not isinstance(workdir, str):
        return Err(InvalidWorkdir("workdir must be a string", field="workdir", value=workdir))
    if not is_absolute(workdir):
        return Err(InvalidWorkdir("workdir must be an absolute path", field="workdir", value=workdir))
    return Ok(clean_path(workdir))


def normalize_read_only(read_only: Any) -> Result[bool]:
    if not isinstance(read_only, bool):
        return Err(InvalidReadOnly("read_only must be a boolean", field="read_only", value=read_only))
    return Ok(read_only)


# ---------------------------------------------------------------------------
# Mounts
# ---------------------------------------------------------------------------


def _mount_path(index: int, field: str, value: Any, errors: list[ValidationError]) -> str | None:
    if not isinstance(value, str) or not value:
        errors.append(InvalidMount(f"{field} must be a non-empty path", index=index, field=field, value=value))
        return None
    if not is_absolute(value):
        errors.append(InvalidMount(f"{field} must be an absolute path", index=index, field=field, value=value))
        return None
    if "," in value:
        errors.append(InvalidMount(f"{field} must not contain ','", index=index, field=field, value=value))
        return None
    return clean_path(value)


def _normalize_mount(index: int, decl: Any) -> Result[MountDecl]:
    if not isinstance(decl, MountDecl):
        return Err(InvalidMount("mount declaration must be a MountDecl", index=index, value=decl))

    errors: list[ValidationError] = []

    try:
        kind = MountKind(decl.kind)
    except ValueError:
        errors.append(InvalidMount("kind must be bind, volume or tmpfs", index=index, field="kind", value=decl.kind))
        kind = None

    mode = MountMode.READ_WRITE if decl.mode is None else MountMode.parse(decl.mode)
    if mode is None:
        errors.append(InvalidMount("mode must be read-write or read-only", index=index, field="mode", value=decl.mode))

    target = _mount_path(index, "target", decl.target, errors)

    source: str | None = None
    if kind is MountKind.BIND:
        source = _mount_path(index, "source", decl.source, errors)
    elif kind is MountKind.VOLUME:
        if isinstance(decl.source, str) and VOLUME_NAME_RE.fullmatch(decl.source):
            source = decl.source
        elif isinstance(decl.source, str) and is_absolute(decl.source):
            source = _mount_path(index, "source", decl.source, errors)
        else:
            errors.append(
                InvalidMount(
                    "volume source must be a volume name or an absolute path",
                    index=index,
                    field="source",
                    value=decl.source,
                )
            )
    # tmpfs: source is ignored

    if errors:
        return _finish(None, errors)
    return Ok(MountDecl(source=source, target=target, mode=mode, kind=kind))


def normalize_mounts(mounts: Any) -> Result[tuple[MountDecl, ...]]:
    return collect_all_errors(
        _normalize_mount(i, decl) for i, decl in enumerate(mounts)
    ).map(lambda values: tuple(sorted(values, key=MountDecl.sort_key)))


# ---------------------------------------------------------------------------
# Devices
# ---------------------------------------------------------------------------


def _device_permissions(index: int, value: Any, errors: list[ValidationError]) -> frozenset[DevicePermission] | None:
    if value is None:
        return DEFAULT_DEVICE_PERMISSIONS
    if isinstance(value, str):
        items = list(value.strip())
    elif isinstance(value, (set, frozenset, list, tuple)):
        items = list(value)
    else:
        errors.append(
            InvalidDevice("permissions must be a set of r/w/m", index=index, field="permissions", value=value)
        )
        return None
    perms = set()
    for item in items:
        perm = DevicePermission.parse(item)
        if perm is None:
            errors.append(
                InvalidDevice("unknown device permission", index=index, field="permissions", value=item)
            )
            return None
        perms.add(perm)
    if not perms:
        errors.append(InvalidDevice("permissions must not be empty", index=index, field="permissions", value=value))
        return None
    return frozenset(perms)


def _normalize_device(index: int, decl: Any) -> Result[DeviceDecl]:
    if not isinstance(decl, DeviceDecl):
        return Err(InvalidDevice("device declaration must be a DeviceDecl", index=index, value=decl))

    host = decl.host_path
    if not isinstance(host, str) or not host:
        return Err(InvalidDevice("host_path must not be empty", index=index, field="host_path", value=host))

    if CDI_NAME_RE.fullmatch(host):
        if decl.container_path is not None or decl.permissions is not None:
            return Err(
                InvalidDevice(
                    "CDI devices take no container_path or permissions",
                    index=index,
                    field="host_path",
                    value=host,
                )
            )
        return Ok(DeviceDecl(host_path=host))

    errors: list[ValidationError] = []
    if not is_absolute(host) or ":" in host:
        errors.append(
            InvalidDevice(
                "host_path must be an absolute device path or a CDI name",
                index=index,
                field="host_path",
                value=host,
            )
        )

    container = decl.container_path
    if container is None:
        container = host
    elif not isinstance(container, str) or not is_absolute(container):
        errors.append(
            InvalidDevice(
                "container_path must be an absolute path", index=index, field="container_path", value=container
            )
        )
    elif ":" in container:
        errors.append(
            InvalidDevice("container_path must not contain ':'", index=index, field="container_path", value=container)
        )

    perms = _device_permissions(index, decl.permissions, errors)

    if errors:
        return _finish(None, errors)
    return Ok(DeviceDecl(host_path=clean_path(host), container_path=clean_path(container), permissions=perms))


def normalize_devices(devices: Any) -> Result[tuple[DeviceDecl, ...]]:
    return collect_all_errors(
        _normalize_device(i, decl) for i, decl in enumerate(devices)
    ).map(lambda values: tuple(sorted(values, key=DeviceDecl.sort_key)))


# ---------------------------------------------------------------------------
# Env / annotations
# ---------------------------------------------------------------------------


def _key_problem(key: str) -> str | None:
    if not key:
        return "key must not be empty"
    if _has_space(key):
        return "key must not contain whitespace"
    if "=" in key:
        return "key must not contain '='"
    if "\x00" in key:
        return "key must not contain NUL"
    return None


def _normalize_env(index: int, decl: Any) -> Result[EnvDecl]:
    if not isinstance(decl, EnvDecl):
        return Err(InvalidEnvKey("env declaration must be a key/value pair", index=index, value=decl))
    if not isinstance(decl.key, str):
        return Err(InvalidEnvKey("key must be a string", index=index, field="key", value=decl.key))
    key = decl.key.strip()
    problem = _key_problem(key)
    if problem:
        return Err(InvalidEnvKey(problem, index=index, field="key", value=decl.key))
    if not isinstance(decl.value, str):
        return Err(InvalidEnvKey(f"value of {key!r} must be a string", index=index, field="value", value=decl.value))
    return Ok(EnvDecl(key, decl.value))


def normalize_env(env: Any) -> Result[tuple[EnvDecl, ...]]:
    return collect_all_errors(
        _normalize_env(i, decl) for i, decl in enumerate(env)
    ).map(lambda values: tuple(sorted(values, key=EnvDecl.sort_key)))


def _normalize_annotation(index: int, decl: Any) -> Result[AnnotationDecl]:
    if not isinstance(decl, AnnotationDecl):
        return Err(InvalidAnnotationKey("annotation declaration must be a key/value pair", index=index, value=decl))
    if not isinstance(decl.key, str):
        return Err(InvalidAnnotationKey("key must be a string", index=index, field="key", value=decl.key))
    key = decl.key.strip()
    problem = _key_problem(key)
    if problem is None:
        segments = _ANNOTATION_SEPARATORS.split(key)
        if len(segments) < 2 or not all(segments):
            problem = "key must be namespaced, e.g. 'domain/key' or 'com.example.key'"
    if problem:
        return Err(InvalidAnnotationKey(problem, index=index, field="key", value=decl.key))
    if not isinstance(decl.value, str):
        return Err(
            InvalidAnnotationKey(f"value of {key!r} must be a string", index=index, field="value", value=decl.value)
        )
    return Ok(AnnotationDecl(key, decl.value))


def normalize_annotations(annotations: Any) -> Result[tuple[AnnotationDecl, ...]]:
    return collect_all_errors(
        _normalize_annotation(i, decl) for i, decl in enumerate(annotations)
    ).map(lambda values: tuple(sorted(values, key=AnnotationDecl.sort_key)))


# ---------------------------------------------------------------------------
# Whole spec
# ---------------------------------------------------------------------------

# Field order here is the order errors are reported in.
NORMALIZERS: dict[str, Callable[[Any], Result[Any]]] = {
    "image": normalize_image,
    "mounts": normalize_mounts,
    "devices": normalize_devices,
    "env": normalize_env,
    "annotations": normalize_annotations,
    "workdir": normalize_workdir,
    "read_only": normalize_read_only,
}


def normalize_spec(spec: DeploymentSpec, config: TranslationConfig | None = None) -> Result[NormalizedResources]:
    """Run every normalizer and aggregate all validation errors.

    Returns ``Ok(NormalizedResources)`` or ``Err(AggregateError)`` listing the
    errors of every failing category in field order.
    """
    config = config or TranslationConfig()
    fields = list(NORMALIZERS)
    inputs = [getattr(spec, name) for name in fields]

    if config.parallel:
        with ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="runvector-normalize") as pool:
            results = list(pool.map(lambda name, value: NORMALIZERS[name](value), fields, inputs))
    else:
        results = [NORMALIZERS[name](value) for name, value in zip(fields, inputs)]

    return collect_all_errors(results).map(lambda values: NormalizedResources(**dict(zip(fields, values))))
