"""Command-line interface for openclaw-vps."""

from openclaw_vps.cli.main import cli

__all__ = ["cli"]
