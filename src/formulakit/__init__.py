"""
formulakit - formula trees for block-based programs.

Represents, edits and evaluates the formulas attached to brick parameters:
arithmetic, comparisons, logic, math and text functions, device sensors,
user variables and lists, and collision probes.
"""

from __future__ import annotations

# Re-export commonly used types for convenience
from ._version import get_version
from .core import ir
from .core.errors import ConfigError, FormulaError, ScenarioError, TreeStructureError
from .core.formula_lang import EvaluationContext, evaluate
from .core.ir import ElementType, FormulaElement

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "ElementType",
    "FormulaElement",
    "EvaluationContext",
    "evaluate",
    "FormulaError",
    "TreeStructureError",
    "ConfigError",
    "ScenarioError",
]
