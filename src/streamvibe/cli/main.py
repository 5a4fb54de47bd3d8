"""CLI entry point and application wiring."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from streamvibe.cli.commands import register_commands


class CLIApplication:
    """Builds the StreamVibe Typer application around a shared console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self._app = typer.Typer(add_completion=False, rich_markup_mode="rich", no_args_is_help=True)
        register_commands(self._app, self.console)

    @property
    def app(self) -> typer.Typer:
        return self._app

    def run(self, *, prog_name: Optional[str] = None, args: Optional[list[str]] = None) -> None:
        self._app(prog_name=prog_name, args=args)


def create_app(console: Optional[Console] = None) -> typer.Typer:
    """Factory helper that returns the configured Typer application."""

    return CLIApplication(console=console).app


def main() -> None:
    """Console script entry point for the installed ``streamvibe`` command."""

    CLIApplication().run(prog_name="streamvibe")


__all__ = ["CLIApplication", "create_app", "main"]
