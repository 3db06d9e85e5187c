"""Shorthand constructors for formula trees used across the test suite."""

from __future__ import annotations

from formulakit.core.ir import ElementType, FormulaElement, Function, Operator, Sensor


def num(value: float | str) -> FormulaElement:
    return FormulaElement(type=ElementType.NUMBER, value=str(value))


def string(text: str) -> FormulaElement:
    return FormulaElement(type=ElementType.STRING, value=text)


def op(
    operator: Operator,
    left: FormulaElement | None = None,
    right: FormulaElement | None = None,
) -> FormulaElement:
    return FormulaElement(type=ElementType.OPERATOR, value=str(operator), left=left, right=right)


def neg(operand: FormulaElement) -> FormulaElement:
    return op(Operator.MINUS, None, operand)


def fn(
    function: Function,
    left: FormulaElement | None = None,
    right: FormulaElement | None = None,
) -> FormulaElement:
    return FormulaElement(type=ElementType.FUNCTION, value=str(function), left=left, right=right)


def sensor(name: Sensor) -> FormulaElement:
    return FormulaElement(type=ElementType.SENSOR, value=str(name))


def var(name: str) -> FormulaElement:
    return FormulaElement(type=ElementType.USER_VARIABLE, value=name)


def lst(name: str) -> FormulaElement:
    return FormulaElement(type=ElementType.USER_LIST, value=name)


def collision(target: str) -> FormulaElement:
    return FormulaElement(type=ElementType.COLLISION_FORMULA, value=target)


def bracket(inner: FormulaElement) -> FormulaElement:
    return FormulaElement(type=ElementType.BRACKET, right=inner)
