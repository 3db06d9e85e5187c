"""
formulakit CLI Utilities.

Shared utility functions used across CLI commands.
"""

import json
import logging
import platform
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from formulakit._version import get_version
from formulakit.core.errors import make_scenario_error
from formulakit.core.ir import FormulaElement


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        python_version = platform.python_version()
        python_impl = platform.python_implementation()

        typer.echo(f"formulakit version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(f"  Python:        {python_impl} {python_version}")
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")

        raise typer.Exit()


def setup_logging(level: str | int) -> None:
    """Route formulakit log records through rich at ``level``."""
    logger = logging.getLogger("formulakit")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True), show_time=False, show_path=False, markup=False
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


def load_tree(path: Path) -> FormulaElement:
    """Load a formula tree from its JSON form.

    Raises:
        ScenarioError: If the file is missing or does not describe a tree.
    """
    if not path.exists():
        raise make_scenario_error("Formula file not found", path)
    try:
        return FormulaElement.model_validate_json(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValidationError) as e:
        raise make_scenario_error(f"Invalid formula tree: {e}", path) from e
