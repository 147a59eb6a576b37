"""Orrery CLI.

Usage:
    uv run orrery --help
"""

from orrery.cli.app import app

__all__ = ["app"]
