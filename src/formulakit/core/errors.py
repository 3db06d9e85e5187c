"""
Error types for formula trees, configuration, and CLI documents.

Evaluation itself never raises for a well-formed tree; these errors cover
structural misuse of the tree API and invalid input files.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class FormulaError(Exception):
    """Base exception for all formulakit errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class TreeStructureError(FormulaError):
    """
    Raised when a tree edit cannot be applied to the element's position.

    Examples:
    - Wrapping the root element in a binary operator
    """

    pass


class ConfigError(FormulaError):
    """
    Raised when a formulakit.toml file cannot be loaded.

    Examples:
    - Malformed TOML
    - Wrong value type for a setting
    - Unknown log level
    """

    pass


class ScenarioError(FormulaError):
    """
    Raised when a formula tree or scenario document is invalid.

    Examples:
    - File is not valid JSON
    - Unknown element type or sensor name
    """

    pass


@dataclass
class ErrorContext:
    """
    Where an error originated.

    Attributes:
        file: Path of the document being loaded
        element: Short description of the tree element involved
    """

    file: Path | None = None
    element: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "formulakit.toml" or "at element OPERATOR 'PLUS'"
        """
        parts = []
        if self.file:
            parts.append(str(self.file))
        if self.element:
            parts.append(f"at element {self.element}")
        return " ".join(parts)


def make_config_error(message: str, file: Path | None = None) -> ConfigError:
    """
    Helper to create a ConfigError with the offending file attached.

    Args:
        message: Error description
        file: Optional config file path

    Returns:
        ConfigError with context if a file was given
    """
    if file:
        return ConfigError(message, ErrorContext(file=file))
    return ConfigError(message)


def make_scenario_error(message: str, file: Path | None = None) -> ScenarioError:
    """
    Helper to create a ScenarioError with the offending file attached.

    Args:
        message: Error description
        file: Optional document path

    Returns:
        ScenarioError with context if a file was given
    """
    if file:
        return ScenarioError(message, ErrorContext(file=file))
    return ScenarioError(message)
