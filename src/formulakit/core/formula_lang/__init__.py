"""
Formula evaluation.

Value coercions, IEEE-safe numeric helpers, the evaluation context with its
collaborator protocols, and the tree-walking evaluator.

Usage:
    from formulakit.core.formula_lang import EvaluationContext, evaluate
    from formulakit.core.ir import ElementType, FormulaElement

    formula = FormulaElement(
        type=ElementType.OPERATOR,
        value="PLUS",
        left=FormulaElement(type=ElementType.NUMBER, value="100"),
        right=FormulaElement(type=ElementType.NUMBER, value="50"),
    )
    result = evaluate(formula, EvaluationContext())
    # result == 150.0
"""

from formulakit.core.formula_lang.context import DeviceServices, EvaluationContext
from formulakit.core.formula_lang.evaluator import evaluate
from formulakit.core.formula_lang.memory import Scenario, load_scenario
from formulakit.core.formula_lang.values import Value, display

__all__ = [
    "DeviceServices",
    "EvaluationContext",
    "Scenario",
    "Value",
    "display",
    "evaluate",
    "load_scenario",
]
