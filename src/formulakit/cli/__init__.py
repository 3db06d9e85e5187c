"""
formulakit CLI Package.

- app.py: the typer application and its commands
- utils.py: shared utilities (version, logging, tree loading)
"""

from formulakit.cli.app import app, main
from formulakit.cli.utils import version_callback

__all__ = ["app", "main", "version_callback"]
