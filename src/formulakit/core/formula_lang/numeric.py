"""
Floating point operations with IEEE-754 results.

Python's math module raises on domain errors, overflow and division by zero.
Formulas must never raise, so these wrappers return the IEEE result instead
(inf, -inf or NaN).
"""

from __future__ import annotations

import math
from collections.abc import Callable

LONG_MAX = float(2**63 - 1)
LONG_MIN = float(-(2**63))


def _domain_safe(func: Callable[[float], float]) -> Callable[[float], float]:
    def wrapper(x: float) -> float:
        try:
            return func(x)
        except ValueError:
            return math.nan

    wrapper.__name__ = func.__name__
    return wrapper


sin = _domain_safe(math.sin)
cos = _domain_safe(math.cos)
tan = _domain_safe(math.tan)
asin = _domain_safe(math.asin)
acos = _domain_safe(math.acos)


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2.0) != 0


def divide(dividend: float, divisor: float) -> float:
    try:
        return dividend / divisor
    except ZeroDivisionError:
        if dividend == 0 or math.isnan(dividend):
            return math.nan
        return math.copysign(math.inf, dividend) * math.copysign(1.0, divisor)


def power(base: float, exponent: float) -> float:
    if exponent == 0:
        return 1.0
    # Undefined for formulas, though math.pow gives 1.0 for a unit base
    if math.isnan(exponent) or (abs(base) == 1 and math.isinf(exponent)):
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        # zero to a negative power, or a negative base to a fractional power
        if base == 0:
            if math.copysign(1.0, base) < 0 and _is_odd_integer(exponent):
                return -math.inf
            return math.inf
        return math.nan


def ln(x: float) -> float:
    if x == 0:
        return -math.inf
    if math.isnan(x) or x < 0:
        return math.nan
    return math.log(x)


def log10(x: float) -> float:
    if x == 0:
        return -math.inf
    if math.isnan(x) or x < 0:
        return math.nan
    return math.log10(x)


def sqrt(x: float) -> float:
    if x < 0:
        return math.nan
    return math.sqrt(x)


def exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def floor(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.floor(x))


def ceil(x: float) -> float:
    if not math.isfinite(x):
        return x
    return float(math.ceil(x))


def round_half_up(x: float) -> float:
    """Nearest integer with halves rounded toward +inf, in the 64-bit range."""
    if math.isnan(x):
        return 0.0
    if x >= LONG_MAX:
        return LONG_MAX
    if x <= LONG_MIN:
        return LONG_MIN
    return float(math.floor(x + 0.5))


def maximum(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    if a == b:
        # +0.0 wins over -0.0
        return a if math.copysign(1.0, a) > 0 else b
    return a if a > b else b


def minimum(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    if a == b:
        return a if math.copysign(1.0, a) < 0 else b
    return a if a < b else b


def fmod(dividend: float, divisor: float) -> float:
    """Remainder with the sign of the dividend."""
    try:
        return math.fmod(dividend, divisor)
    except ValueError:
        return math.nan


def modulo(dividend: float, divisor: float) -> float:
    """MOD semantics.

    A zero operand returns the dividend unchanged. A positive divisor gives a
    non-negative result. A negative divisor with a positive dividend gives the
    remainder shifted by the divisor; otherwise the plain remainder.
    """
    if dividend == 0 or divisor == 0:
        return dividend
    if divisor > 0:
        remainder = fmod(dividend, divisor)
        if remainder < 0:
            remainder += divisor
        return remainder + 0.0
    if dividend > 0:
        return fmod(dividend, divisor) + divisor
    return fmod(dividend, divisor)
