"""
Runtime values of the formula language and their coercions.

A value is a float or a str. There is no boolean: truth is 1.0 / 0.0.
Collaborators may also hand back None (absent), which normalizes to 0.0.

Text is read as a number with the same lenient decimal grammar the editor
writes (surrounding whitespace, optional sign, NaN, Infinity, exponent, and an
optional d/f suffix), and numbers are written back as shortest round-trip
decimals with E notation outside [1e-3, 1e7).
"""

from __future__ import annotations

import math
import re
import sys
from decimal import Decimal
from typing import Any

from formulakit.core.config import DEFAULT_INTEGER_EPSILON
from formulakit.core.ir.formula import strip_trailing_zero

Value = float | str

INT_MAX = 2**31 - 1
INT_MIN = -(2**31)

# Control characters and space, all trimmed from both ends of numeric text
_TRIM_CHARS = "".join(chr(code) for code in range(0x21))

_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:NaN|Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[fFdD]?)"
)


def trim(text: str) -> str:
    return text.strip(_TRIM_CHARS)


def parse_number(text: str) -> float | None:
    """Parse numeric text, returning None when it is not a number."""
    candidate = trim(text)
    if not _NUMBER_PATTERN.fullmatch(candidate):
        return None
    if candidate[-1] in "fFdD":
        candidate = candidate[:-1]
    return float(candidate)


def as_value(raw: Any) -> Value | None:
    """Bring a collaborator result into the value domain (None stays None)."""
    if raw is None or isinstance(raw, str):
        return raw
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    return float(raw)


def to_number(value: Value | None) -> float:
    """Coerce an operand to a number; unparseable text becomes NaN."""
    if isinstance(value, str):
        number = parse_number(value)
        return math.nan if number is None else number
    if value is None:
        return math.nan
    return value


def coerce_argument(value: Value | None) -> float | None:
    """Coerce a function argument; unparseable text becomes None."""
    if isinstance(value, str):
        return parse_number(value)
    return value


def format_number(number: float) -> str:
    """Shortest decimal text for ``number``: 2.0 → "2.0", 1e7 → "1.0E7"."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "-0.0" if math.copysign(1.0, number) < 0 else "0.0"

    magnitude = abs(number)
    if 1e-3 <= magnitude < 1e7:
        return repr(number)

    shortest = Decimal(repr(magnitude)).normalize()
    digits = shortest.as_tuple().digits
    head = str(digits[0])
    tail = "".join(str(d) for d in digits[1:]) or "0"
    sign = "-" if number < 0 else ""
    return f"{sign}{head}.{tail}E{shortest.adjusted()}"


def stringify(value: Value | None) -> str:
    """Text form of a value, as used by comparisons and text functions."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return format_number(value)


def display(value: Value | None) -> str:
    """Text form for output, with whole numbers shown without ``.0``."""
    return strip_trailing_zero(stringify(value))


def to_int(number: float) -> int:
    """Truncate toward zero, saturating to the 32-bit range; NaN becomes 0."""
    if math.isnan(number):
        return 0
    if number >= INT_MAX:
        return INT_MAX
    if number <= INT_MIN:
        return INT_MIN
    return int(number)


def is_integer(number: float, epsilon: float = DEFAULT_INTEGER_EPSILON) -> bool:
    """True if ``number`` has no fractional part within ``epsilon``.

    Magnitudes beyond the 32-bit range never count as integers.
    """
    magnitude = abs(number)
    return (magnitude - to_int(magnitude)) < epsilon


def compare(left: float, right: float) -> int:
    """Total order on floats: -0.0 < 0.0, and NaN sorts above everything."""
    if left < right:
        return -1
    if left > right:
        return 1
    left_nan = math.isnan(left)
    right_nan = math.isnan(right)
    if left_nan or right_nan:
        if left_nan and right_nan:
            return 0
        return 1 if left_nan else -1
    left_sign = math.copysign(1.0, left)
    right_sign = math.copysign(1.0, right)
    if left_sign == right_sign:
        return 0
    return -1 if left_sign < right_sign else 1


def equals(left: Value | None, right: Value | None) -> float:
    """EQUAL semantics: numeric when both sides parse, exact text otherwise.

    When either number is zero the magnitudes are compared, so 0 equals -0.
    """
    left_text = stringify(left)
    right_text = stringify(right)
    left_number = parse_number(left_text)
    right_number = parse_number(right_text)
    if left_number is not None and right_number is not None:
        if left_number == 0 or right_number == 0:
            result = compare(abs(left_number), abs(right_number))
        else:
            result = compare(left_number, right_number)
        return 1.0 if result == 0 else 0.0
    return 1.0 if left_text == right_text else 0.0


def normalize(value: Any) -> Value:
    """Final step of every evaluation.

    Text passes through, absent becomes 0.0, and infinities clamp to the
    largest finite magnitude. NaN is left alone.
    """
    result = as_value(value)
    if result is None:
        return 0.0
    if isinstance(result, str):
        return result
    if result == math.inf:
        return sys.float_info.max
    if result == -math.inf:
        return -sys.float_info.max
    return result
