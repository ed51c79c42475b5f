"""
CLI layer for runvector.

A Typer application over :mod:`runvector.translate` and
:mod:`runvector.runtime`. All translation logic lives there; this package
handles only terminal transport: reading the JSON spec document, argument
parsing and rich diagnostics.

Entry point::

    runvector --help
"""

from runvector.cli.app import app

__all__ = ["app"]
