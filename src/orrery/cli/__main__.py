"""Entry point for running the CLI as a module.

Usage:
    python -m orrery.cli
"""

from orrery.cli.app import app

if __name__ == "__main__":
    app()
