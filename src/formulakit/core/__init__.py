"""Core formulakit functionality: formula tree IR, evaluation, settings and errors."""

from . import ir
from .config import FormulaSettings, load_settings
from .errors import (
    ConfigError,
    ErrorContext,
    FormulaError,
    ScenarioError,
    TreeStructureError,
)

__all__ = [
    "ir",
    "FormulaSettings",
    "load_settings",
    "FormulaError",
    "ErrorContext",
    "TreeStructureError",
    "ConfigError",
    "ScenarioError",
]
