"""Command-line interface for logsh."""

from logsh.cli.app import app

__all__ = ["app"]
