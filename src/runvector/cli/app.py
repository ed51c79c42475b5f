"""
Root Typer application for the runvector CLI.

Logging is configured once in the root callback from
:class:`~runvector.core.settings.RunvectorSettings`, so every sub-command
logs to stderr and keeps stdout for its result.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from typer import Typer

from runvector.core.logging import configure_logging
from runvector.core.settings import get_settings

app = Typer(
    name="runvector",
    help="runvector: translate deployment specs into container-runtime argument vectors.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("runvector")
        except PackageNotFoundError:
            from runvector import __version__ as v
        typer.echo(f"runvector {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override RUNVECTOR_LOG_LEVEL."),
) -> None:
    """runvector CLI: inspect the argument vector a deployment spec produces."""
    overrides = {"log_level": log_level} if log_level else {}
    try:
        settings = get_settings(**overrides)
    except ValidationError as e:
        typer.echo(f"Invalid settings: {e}", err=True)
        raise typer.Exit(code=2) from e
    configure_logging(level=settings.log_level, json_format=settings.log_json)


# ── Command registration ─────────────────────────────────────────────────

from runvector.cli.translate import command_cmd, translate_cmd  # noqa: E402

app.command("translate")(translate_cmd)
app.command("command")(command_cmd)
