"""Runtime and container contexts for composing a full ``run`` command.

``RuntimeContext`` describes the runtime executable and its storage
configuration (global flags placed before the ``run`` sub-command).
``ContainerContext`` holds per-container run options that do not come from
the deployment spec (name, detach, pidfile, ...).

Both are frozen dataclasses; ``with_env()`` returns a new context.

Example::

    runtime = RuntimeContext(
        program="/usr/bin/podman",
        graphroot="/dev/shm/graphroot",
        runroot="/dev/shm/runroot",
    ).with_env("SQUASHFUSE_CMD", "/usr/bin/squashfuse_ll")
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from runvector.core.errors import InvalidContainerContext, ValidationError
from runvector.translate.paths import is_absolute

DEFAULT_RUNTIME = "podman"


@dataclass(frozen=True)
class RuntimeContext:
    """The runtime executable and its global (pre-``run``) options."""

    program: str = DEFAULT_RUNTIME
    graphroot: str | None = None
    runroot: str | None = None
    module: str | None = None
    ro_store: str | None = None
    mount_program: str | None = None
    # Environment of the runtime process itself; never rendered into argv.
    env: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def with_env(self, key: str, value: str) -> RuntimeContext:
        return replace(self, env=(*self.env, (key, value)))

    def global_args(self) -> list[str]:
        """Flags placed between the program and ``run``."""
        args: list[str] = []
        if self.graphroot:
            args += ["--root", self.graphroot]
        if self.runroot:
            args += ["--runroot", self.runroot]
        if self.module:
            args += ["--module", self.module]
        if self.ro_store:
            args += ["--storage-opt", f"additionalimagestore={self.ro_store}"]
        if self.mount_program:
            args += ["--storage-opt", f"mount_program={self.mount_program}"]
        return args


@dataclass(frozen=True)
class ContainerContext:
    """Per-container ``run`` options."""

    name: str | None = None
    remove: bool = True
    detach: bool = False
    interactive: bool = False
    pidfile: str | None = None
    entrypoint: bool = True

    def validate(self) -> list[ValidationError]:
        errors: list[ValidationError] = []
        if self.name is not None and (not self.name or any(ch.isspace() for ch in self.name)):
            errors.append(
                InvalidContainerContext(
                    "container name must be non-empty and contain no whitespace",
                    field="name",
                    value=self.name,
                )
            )
        if self.pidfile is not None and not is_absolute(self.pidfile):
            errors.append(
                InvalidContainerContext("pidfile must be an absolute path", field="pidfile", value=self.pidfile)
            )
        return errors

    def run_args(self) -> list[str]:
        """Flags placed right after ``run``, before the translated vector."""
        args: list[str] = []
        if self.remove:
            args.append("--rm")
        if self.detach:
            args.append("--detach")
        if self.interactive:
            args.append("-it")
        if self.name:
            args += ["--name", self.name]
        if self.pidfile:
            args += ["--pidfile", self.pidfile]
        if not self.entrypoint:
            # empty value clears the image entrypoint
            args.append("--entrypoint=")
        return args
