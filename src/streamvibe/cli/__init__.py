"""Command-line interface package for StreamVibe."""

from streamvibe.cli.main import CLIApplication, create_app

__all__ = ["CLIApplication", "create_app"]
