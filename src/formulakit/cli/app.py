"""
formulakit command line.

Commands operate on a formula tree stored as JSON (the pydantic dump of a
FormulaElement):

- eval: evaluate the formula, optionally against a scenario file
- tokens: show the display tokens of the formula
- resources: show the capabilities the formula requires
- names: show the variables and lists the formula references
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from formulakit.cli.utils import load_tree, setup_logging, version_callback
from formulakit.core.config import FormulaSettings, load_settings
from formulakit.core.errors import FormulaError
from formulakit.core.formula_lang import EvaluationContext, display, evaluate, load_scenario

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="formulakit - inspect and evaluate formula trees",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_state: dict[str, bool] = {"verbose": False}


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """formulakit CLI main callback for global options."""
    _state["verbose"] = verbose


def _settings(config: Path | None) -> FormulaSettings:
    settings = load_settings(config)
    setup_logging(logging.DEBUG if _state["verbose"] else settings.log_level_number)
    return settings


def _fail(error: FormulaError) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    return typer.Exit(code=1)


TREE_ARGUMENT = typer.Argument(..., help="Formula tree JSON file")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="formulakit.toml to use")


@app.command(name="eval")
def eval_command(
    tree: Path = TREE_ARGUMENT,
    scenario: Path | None = typer.Option(
        None, "--scenario", "-s", help="Scenario JSON with variables, sensors and sprites"
    ),
    config: Path | None = CONFIG_OPTION,
    repeat: int = typer.Option(1, "--repeat", "-n", min=1, help="Number of evaluations"),
) -> None:
    """Evaluate a formula and print the result."""
    try:
        settings = _settings(config)
        element = load_tree(tree)
        if scenario is not None:
            context = load_scenario(scenario).build_context(settings)
        else:
            context = EvaluationContext(settings=settings)
    except FormulaError as e:
        raise _fail(e) from e

    logger.debug("Evaluating %s", element)
    for _ in range(repeat):
        typer.echo(display(evaluate(element, context)))


@app.command(name="tokens")
def tokens_command(
    tree: Path = TREE_ARGUMENT,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Show the display tokens of a formula."""
    try:
        _settings(config)
        element = load_tree(tree)
    except FormulaError as e:
        raise _fail(e) from e

    table = Table(title=str(element))
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Value")
    for index, token in enumerate(element.linearize(), start=1):
        table.add_row(str(index), str(token.kind), token.value)
    console.print(table)


@app.command(name="resources")
def resources_command(
    tree: Path = TREE_ARGUMENT,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Show the capabilities a formula requires."""
    try:
        _settings(config)
        element = load_tree(tree)
    except FormulaError as e:
        raise _fail(e) from e

    resources = sorted(element.required_resources())
    if not resources:
        typer.echo("No resources required")
        return
    for resource in resources:
        typer.echo(str(resource))


@app.command(name="names")
def names_command(
    tree: Path = TREE_ARGUMENT,
    config: Path | None = CONFIG_OPTION,
) -> None:
    """Show the user variables and lists a formula references."""
    try:
        _settings(config)
        element = load_tree(tree)
    except FormulaError as e:
        raise _fail(e) from e

    variables: list[str] = []
    lists: list[str] = []
    element.get_variable_and_list_names(variables, lists)

    table = Table()
    table.add_column("Kind")
    table.add_column("Name")
    for name in variables:
        table.add_row("variable", name)
    for name in lists:
        table.add_row("list", name)
    console.print(table)


def main() -> None:
    app(standalone_mode=True)
