"""
CLI: ``runvector translate`` and ``runvector command``.

Usage::

    runvector translate spec.json                    # one token per line
    runvector translate spec.json --json             # JSON array
    runvector translate spec.json --scratch-path /var/tmp

    runvector command spec.json --name web -it -- bash -l
    runvector command spec.json --runtime /usr/bin/podman --root /dev/shm/graph

Both commands print every diagnosis in a table and exit 1 when the spec is
invalid or conflicting. An unreadable or malformed document exits 2.
"""

from __future__ import annotations

import json
from pathlib import Path

import pydantic
import typer
from rich.console import Console
from rich.table import Table

from runvector.cli.documents import load_spec
from runvector.core.errors import ConfigError, ConflictError, TranslationError, TranslationFailure, ValidationError
from runvector.core.settings import get_settings
from runvector.runtime import ContainerContext, RuntimeContext, build_run_command
from runvector.translate import DeploymentSpec, TranslationConfig, translate

err_console = Console(stderr=True)


# ── Helpers ──────────────────────────────────────────────────────────────


def _load(path: Path) -> DeploymentSpec:
    try:
        return load_spec(path)
    except OSError as e:
        err_console.print(f"[bold red]Error[/bold red]: cannot read {path}: {e.strerror or e}")
        raise typer.Exit(code=2) from e
    except pydantic.ValidationError as e:
        err_console.print(f"[bold red]Error[/bold red]: malformed spec document {path}")
        err_console.print(str(e))
        raise typer.Exit(code=2) from e


def _config(scratch_path: list[str] | None) -> TranslationConfig:
    overrides = {"scratch_paths": tuple(scratch_path)} if scratch_path else {}
    try:
        return TranslationConfig.from_env(**overrides)
    except ConfigError as e:
        err_console.print(f"[bold red]Error[/bold red]: invalid configuration: {e}")
        raise typer.Exit(code=2) from e


def _print_failure(error: TranslationError, *, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(error.to_dict(), indent=2, default=str))
        raise typer.Exit(code=1)

    title = "Invalid declarations" if error.kind is TranslationFailure.INVALID else "Conflicts"
    table = Table(title=f"{title} ({len(error)})", show_lines=False)
    table.add_column("Kind", style="red", no_wrap=True)
    table.add_column("Where", style="cyan", no_wrap=True)
    table.add_column("Message")
    for item in error:
        if isinstance(item, ValidationError):
            table.add_row(item.rule, item.location, item.message)
        elif isinstance(item, ConflictError):
            table.add_row(item.kind, f"{item.resource.value}: {item.key}", item.reason)
        else:
            table.add_row(type(item).__name__, "", str(item))
    err_console.print(table)
    raise typer.Exit(code=1)


# ── translate ────────────────────────────────────────────────────────────


def translate_cmd(
    spec_file: Path = typer.Argument(..., metavar="SPEC.json", help="JSON deployment spec document."),
    scratch_path: list[str] = typer.Option(
        None, "--scratch-path", "-s",
        help="Scratch path kept writable under read_only. Repeatable; replaces the defaults.",
    ),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Print the argument vector a deployment spec translates to."""
    spec = _load(spec_file)
    result = translate(spec, _config(scratch_path))

    if result.is_err():
        _print_failure(result.unwrap_err(), as_json=json_out)

    vector = result.unwrap()
    if json_out:
        typer.echo(json.dumps(vector.to_list()))
    else:
        for token in vector:
            typer.echo(token)


# ── command ──────────────────────────────────────────────────────────────


def command_cmd(
    spec_file: Path = typer.Argument(..., metavar="SPEC.json", help="JSON deployment spec document."),
    command: list[str] = typer.Argument(None, help="Command run inside the container (after --)."),
    runtime: str | None = typer.Option(None, "--runtime", help="Runtime binary [default: RUNVECTOR_RUNTIME]."),
    root: str | None = typer.Option(None, "--root", help="Storage graph root."),
    runroot: str | None = typer.Option(None, "--runroot", help="Storage run root."),
    module: str | None = typer.Option(None, "--module", help="Runtime configuration module."),
    ro_store: str | None = typer.Option(None, "--ro-store", help="Additional read-only image store."),
    name: str | None = typer.Option(None, "--name", "-n", help="Container name."),
    detach: bool = typer.Option(False, "--detach", "-d", help="Run in background."),
    interactive: bool = typer.Option(False, "-it", help="Interactive with a TTY."),
    pidfile: str | None = typer.Option(None, "--pidfile", help="Write the container PID here."),
    keep: bool = typer.Option(False, "--keep", help="Do not remove the container on exit."),
    no_entrypoint: bool = typer.Option(False, "--no-entrypoint", help="Clear the image entrypoint."),
    scratch_path: list[str] = typer.Option(None, "--scratch-path", "-s", help="Scratch path (repeatable)."),
    json_out: bool = typer.Option(False, "--json", help="Output argv as JSON."),
) -> None:
    """Print the full runtime ``run`` command for a deployment spec."""
    spec = _load(spec_file)
    runtime_ctx = RuntimeContext(
        program=runtime or get_settings().runtime,
        graphroot=root,
        runroot=runroot,
        module=module,
        ro_store=ro_store,
    )
    container_ctx = ContainerContext(
        name=name,
        remove=not keep,
        detach=detach,
        interactive=interactive,
        pidfile=pidfile,
        entrypoint=not no_entrypoint,
    )
    result = build_run_command(spec, runtime_ctx, container_ctx, command or (), _config(scratch_path))

    if result.is_err():
        _print_failure(result.unwrap_err(), as_json=json_out)

    run_command = result.unwrap()
    if json_out:
        typer.echo(json.dumps(run_command.argv))
    else:
        typer.echo(run_command.render())
