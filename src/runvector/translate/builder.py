"""Argument vector builder.

Maps each ordered flag group onto its fixed token template. A declaration
becomes a flag token followed by exactly one value token; composed values
(``KEY=VALUE``, mount field lists, device triples) stay a single element of
the vector. Nothing is shell-quoted: the vector goes straight to process
creation.

Templates::

    workdir      --workdir <path>
    read-only    --read-only
    env          --env KEY=VALUE
    annotation   --annotation KEY=VALUE
    mount        --mount source=<src>,target=<dst>,mode=<rw|ro>             (bind)
                 --mount type=volume,source=<name>,target=<dst>[,ro=true]
                 --mount type=tmpfs,target=<dst>[,ro=true]
    device       --device <host>:<container>:<rwm>   |   --device <cdi-name>
    image        <image>                                                   (last)
"""

from __future__ import annotations

from collections.abc import Iterable

from runvector.translate.models import ArgumentVector, DeviceDecl, MountDecl, MountKind, MountMode
from runvector.translate.ordering import FlagCategory, FlagGroup

WORKDIR_FLAG = "--workdir"
READ_ONLY_FLAG = "--read-only"
ENV_FLAG = "--env"
ANNOTATION_FLAG = "--annotation"
MOUNT_FLAG = "--mount"
DEVICE_FLAG = "--device"


def key_value(key: str, value: str) -> str:
    return f"{key}={value}"


def mount_value(mount: MountDecl) -> str:
    match mount.kind:
        case MountKind.BIND:
            fields = [f"source={mount.source}", f"target={mount.target}", f"mode={mount.mode.value}"]
        case MountKind.VOLUME:
            fields = ["type=volume", f"source={mount.source}", f"target={mount.target}"]
        case MountKind.TMPFS:
            fields = ["type=tmpfs", f"target={mount.target}"]
    # volume and tmpfs use the runtime's read-only option
    if mount.kind is not MountKind.BIND and mount.mode is MountMode.READ_ONLY:
        fields.append("ro=true")
    return ",".join(fields)


def device_value(device: DeviceDecl) -> str:
    if device.container_path is None:
        return device.host_path
    return f"{device.host_path}:{device.container_path}:{device.permission_string}"


def _group_tokens(group: FlagGroup) -> list[str]:
    tokens: list[str] = []
    for entry in group.entries:
        match group.category:
            case FlagCategory.WORKDIR:
                tokens += [WORKDIR_FLAG, entry]
            case FlagCategory.READ_ONLY:
                tokens.append(READ_ONLY_FLAG)
            case FlagCategory.ENV:
                tokens += [ENV_FLAG, key_value(entry.key, entry.value)]
            case FlagCategory.ANNOTATIONS:
                tokens += [ANNOTATION_FLAG, key_value(entry.key, entry.value)]
            case FlagCategory.MOUNTS:
                tokens += [MOUNT_FLAG, mount_value(entry)]
            case FlagCategory.DEVICES:
                tokens += [DEVICE_FLAG, device_value(entry)]
            case FlagCategory.IMAGE:
                tokens.append(entry)
    return tokens


def build_argument_vector(groups: Iterable[FlagGroup]) -> ArgumentVector:
    """Assemble the final token sequence from ordered flag groups.

    The image group must come last; the ordering policy guarantees it.
    """
    groups = tuple(groups)
    if not groups or groups[-1].category is not FlagCategory.IMAGE:
        raise ValueError("flag groups must end with the image reference")
    tokens: list[str] = []
    for group in groups:
        tokens.extend(_group_tokens(group))
    return ArgumentVector(tuple(tokens))
