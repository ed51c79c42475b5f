"""JSON spec documents accepted by the ``runvector`` CLI.

The document mirrors :class:`~runvector.translate.models.DeploymentSpec`::

    {
      "image": "library/app:1.0",
      "workdir": "/srv",
      "read_only": true,
      "env": {"MODE": "prod"},
      "annotations": [["com.example.tier", "web"]],
      "mounts": [{"source": "/host/data", "target": "/data", "mode": "ro"},
                 {"type": "tmpfs", "target": "/cache"}],
      "devices": ["/dev/fuse", "nvidia.com/gpu=all",
                  {"host_path": "/dev/sda", "container_path": "/dev/xvda", "permissions": "r"}]
    }

Pydantic checks only the document *shape*. Every value is passed through
as-is so the pipeline normalizers report content problems with their usual
diagnostics.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from runvector.translate.models import DeploymentSpec, DeviceDecl, MountDecl

KeyValues = dict[str, Any] | list[tuple[Any, Any]] | list[dict[str, Any]]


class MountDocument(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    target: Any
    source: Any = None
    mode: Any = "rw"
    kind: Any = Field(default="bind", alias="type")

    def to_decl(self) -> MountDecl:
        return MountDecl(source=self.source, target=self.target, mode=self.mode, kind=self.kind)


class DeviceDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host_path: Any
    container_path: Any = None
    permissions: Any = None

    @classmethod
    def from_short(cls, value: str) -> DeviceDocument:
        """Parse ``host[:container[:perms]]``; a CDI name stays whole."""
        if "=" in value:
            return cls(host_path=value)
        host, _, rest = value.partition(":")
        container, _, perms = rest.partition(":")
        return cls(host_path=host, container_path=container or None, permissions=perms or None)

    def to_decl(self) -> DeviceDecl:
        return DeviceDecl(
            host_path=self.host_path,
            container_path=self.container_path,
            permissions=self.permissions,
        )


class SpecDocument(BaseModel):
    """Top-level JSON document."""

    model_config = ConfigDict(extra="forbid")

    image: Any
    mounts: list[MountDocument] = Field(default_factory=list)
    devices: list[DeviceDocument | str] = Field(default_factory=list)
    env: KeyValues = Field(default_factory=dict)
    annotations: KeyValues = Field(default_factory=dict)
    workdir: Any = None
    read_only: Any = False

    def to_spec(self) -> DeploymentSpec:
        devices = [DeviceDocument.from_short(d) if isinstance(d, str) else d for d in self.devices]
        return DeploymentSpec(
            image=self.image,
            mounts=[m.to_decl() for m in self.mounts],
            devices=[d.to_decl() for d in devices],
            env=self.env,
            annotations=self.annotations,
            workdir=self.workdir,
            read_only=self.read_only,
        )


def load_spec(path: str | Path) -> DeploymentSpec:
    """Read and shape-check a JSON spec document.

    Raises:
        OSError: the file cannot be read.
        pydantic.ValidationError: the document has the wrong shape.
    """
    text = Path(path).read_text(encoding="utf-8")
    return SpecDocument.model_validate_json(text).to_spec()
