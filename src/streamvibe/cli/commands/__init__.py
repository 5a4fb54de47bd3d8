"""Command registration utilities for the StreamVibe CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from streamvibe.cli.commands import videos


def register_commands(app: typer.Typer, console: Console) -> None:
    """Attach command groups to the provided Typer application."""

    videos.register(app, console)


__all__ = ["register_commands"]
