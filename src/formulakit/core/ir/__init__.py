"""
Formula tree intermediate representation.

Element identities (element kinds, operators, functions, sensors), display
tokens, capability tags and the FormulaElement tree itself.
"""

from .elements import ElementType, Function, Operator, Sensor
from .formula import FormulaElement, strip_trailing_zero
from .resources import (
    COLLISION_FORMULA_RESOURCE,
    FUNCTION_RESOURCES,
    SENSOR_RESOURCES,
    Resource,
)
from .tokens import Token, TokenKind, TokenSequence

__all__ = [
    # Identities
    "ElementType",
    "Operator",
    "Function",
    "Sensor",
    # Tree
    "FormulaElement",
    "strip_trailing_zero",
    # Tokens
    "Token",
    "TokenKind",
    "TokenSequence",
    # Capabilities
    "Resource",
    "FUNCTION_RESOURCES",
    "SENSOR_RESOURCES",
    "COLLISION_FORMULA_RESOURCE",
]
