"""
Formula evaluator.

Evaluates formula trees against an EvaluationContext. A pure tree-walking
interpreter: children are evaluated before their parent combines them, and
every result passes through ``normalize``. Nothing raises out of ``evaluate``
for a well-formed tree. Bad operands, missing bindings and absent devices
all degrade to a default value instead.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from formulakit.core.formula_lang import numeric
from formulakit.core.formula_lang.context import (
    ARDUINO_ANALOG_PINS,
    ARDUINO_DIGITAL_PINS,
    EvaluationContext,
)
from formulakit.core.formula_lang.values import (
    Value,
    as_value,
    coerce_argument,
    compare,
    equals,
    format_number,
    is_integer,
    normalize,
    parse_number,
    stringify,
    to_int,
    to_number,
    trim,
)
from formulakit.core.ir.elements import ElementType, Function, Operator, Sensor
from formulakit.core.ir.formula import FormulaElement, strip_trailing_zero

logger = logging.getLogger(__name__)

# Result of a variable or list that does not exist
NOT_EXISTING_USER_VARIABLE_VALUE = 0.0
NOT_EXISTING_USER_LIST_VALUE = 0.0
EMPTY_USER_LIST_VALUE = ""

# Result of a function whose operands could not be read as numbers
DEFAULT_FUNCTION_VALUE = 0.0

_ONE_ARGUMENT_MATH = {
    Function.SIN: lambda x: numeric.sin(math.radians(x)),
    Function.COS: lambda x: numeric.cos(math.radians(x)),
    Function.TAN: lambda x: numeric.tan(math.radians(x)),
    Function.LN: numeric.ln,
    Function.LOG: numeric.log10,
    Function.SQRT: numeric.sqrt,
    Function.ABS: abs,
    Function.ROUND: numeric.round_half_up,
    Function.ARCSIN: lambda x: math.degrees(numeric.asin(x)),
    Function.ARCCOS: lambda x: math.degrees(numeric.acos(x)),
    Function.ARCTAN: lambda x: math.degrees(math.atan(x)),
    Function.EXP: numeric.exp,
    Function.FLOOR: numeric.floor,
    Function.CEIL: numeric.ceil,
}

_TWO_ARGUMENT_MATH = {
    Function.MOD: numeric.modulo,
    Function.POWER: numeric.power,
    Function.MAX: numeric.maximum,
    Function.MIN: numeric.minimum,
}

_ARITHMETIC = {
    Operator.PLUS: lambda a, b: a + b,
    Operator.MINUS: lambda a, b: a - b,
    Operator.MULT: lambda a, b: a * b,
    Operator.DIVIDE: numeric.divide,
    Operator.POW: numeric.power,
}

_RELATIONS = {
    Operator.GREATER_THAN: lambda order: order > 0,
    Operator.GREATER_OR_EQUAL: lambda order: order >= 0,
    Operator.SMALLER_THAN: lambda order: order < 0,
    Operator.SMALLER_OR_EQUAL: lambda order: order <= 0,
}


def evaluate(element: FormulaElement, context: EvaluationContext | None = None) -> Value:
    """Evaluate a formula tree.

    Args:
        element: Root of the (sub)tree to evaluate.
        context: Collaborators and settings. Defaults to an empty context in
            which every variable, sensor and device reads as absent.

    Returns:
        The normalized value: a float or a str.
    """
    return _interpret(element, context or EvaluationContext())


def _interpret(element: FormulaElement, ctx: EvaluationContext) -> Value:
    """Dispatch evaluation to the appropriate handler, then normalize."""
    result: Any = 0.0
    kind = element.type

    if kind == ElementType.BRACKET:
        result = _interpret(element.right, ctx) if element.right is not None else None
    elif kind in (ElementType.NUMBER, ElementType.STRING):
        result = element.value
    elif kind == ElementType.OPERATOR:
        operator = Operator.lookup(element.value)
        if operator is not None:
            result = _interpret_operator(element, operator, ctx)
    elif kind == ElementType.FUNCTION:
        function = Function.lookup(element.value)
        if function is not None:
            result = _interpret_function(element, function, ctx)
    elif kind == ElementType.SENSOR:
        result = _interpret_sensor(element, ctx)
    elif kind == ElementType.USER_VARIABLE:
        result = _interpret_user_variable(element, ctx)
    elif kind == ElementType.USER_LIST:
        result = _interpret_user_list(element, ctx)
    elif kind == ElementType.COLLISION_FORMULA:
        try:
            result = _interpret_collision(element.value or "", ctx)
        except Exception:
            logger.debug("Collision probe for %r failed", element.value, exc_info=True)
            result = 0.0

    return normalize(result)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def _interpret_operator(element: FormulaElement, operator: Operator, ctx: EvaluationContext) -> Any:
    """Evaluate a unary or binary operator."""
    if element.right is None:
        return 0.0
    right = _interpret(element.right, ctx)

    if element.left is None:
        if operator == Operator.MINUS:
            return -to_number(right)
        if operator == Operator.LOGICAL_NOT:
            return 1.0 if to_number(right) == 0 else 0.0
        return 0.0

    left = _interpret(element.left, ctx)

    if operator == Operator.EQUAL:
        return equals(left, right)
    if operator == Operator.NOT_EQUAL:
        return 0.0 if equals(left, right) == 1.0 else 1.0

    a = to_number(left)
    b = to_number(right)

    if operator in _ARITHMETIC:
        return _ARITHMETIC[operator](a, b)
    if operator in _RELATIONS:
        return 1.0 if _RELATIONS[operator](compare(a, b)) else 0.0
    if operator == Operator.LOGICAL_AND:
        return 1.0 if a * b != 0 else 0.0
    if operator == Operator.LOGICAL_OR:
        return 1.0 if a != 0 or b != 0 else 0.0

    return 0.0


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


def _interpret_function(element: FormulaElement, function: Function, ctx: EvaluationContext) -> Any:
    """Evaluate a built-in function (closed set)."""
    left: Value | None = None
    right: Value | None = None
    if element.left is not None:
        left = _interpret(element.left, ctx)
    if element.right is not None:
        right = _interpret(element.right, ctx)
    x = coerce_argument(left)
    y = coerce_argument(right)

    if function in _ONE_ARGUMENT_MATH:
        return DEFAULT_FUNCTION_VALUE if x is None else _ONE_ARGUMENT_MATH[function](x)
    if function in _TWO_ARGUMENT_MATH:
        if x is None or y is None:
            return DEFAULT_FUNCTION_VALUE
        return _TWO_ARGUMENT_MATH[function](x, y)

    if function == Function.PI:
        return math.pi
    if function == Function.TRUE:
        return 1.0
    if function == Function.FALSE:
        return 0.0
    if function == Function.RAND:
        if x is None or y is None:
            return DEFAULT_FUNCTION_VALUE
        return _rand(element, x, y, ctx)
    if function == Function.ARCTAN2:
        if x is None or y is None:
            return DEFAULT_FUNCTION_VALUE
        if x == 0 and y == 0:
            # Any direction is as good as another; draw from (-180, 180]
            return 180.0 - ctx.rng.random() * 360.0
        return math.degrees(math.atan2(x, y))

    # Text and lists
    if function == Function.LETTER:
        return _letter(left, right)
    if function == Function.LENGTH:
        return _length(element, left, ctx)
    if function == Function.JOIN:
        return strip_trailing_zero(_text_argument(element.left, left, ctx)) + strip_trailing_zero(
            _text_argument(element.right, right, ctx)
        )
    if function == Function.REGEX:
        return _regex(element, left, right, ctx)
    if function == Function.LIST_ITEM:
        return _list_item(element, left, ctx)
    if function == Function.CONTAINS:
        return _contains(element, right, ctx)
    if function == Function.NUMBER_OF_ITEMS:
        if element.left is not None and element.left.type == ElementType.USER_LIST:
            items = _get_list(element.left, ctx)
            return float(len(items)) if items is not None else 0.0
        return _length(element, left, ctx)

    # Devices and input
    if function == Function.ARDUINODIGITAL:
        return _arduino_pin(x, ctx, analog=False)
    if function == Function.ARDUINOANALOG:
        return _arduino_pin(x, ctx, analog=True)
    if function == Function.RASPIDIGITAL:
        return _raspberry_pin(x, ctx)
    if function == Function.MULTI_FINGER_TOUCHED:
        touching = x is not None and ctx.touch.is_finger_touching(to_int(x))
        return 1.0 if touching else DEFAULT_FUNCTION_VALUE
    if function == Function.MULTI_FINGER_X:
        return float(ctx.touch.x(to_int(x))) if x is not None else DEFAULT_FUNCTION_VALUE
    if function == Function.MULTI_FINGER_Y:
        return float(ctx.touch.y(to_int(x))) if x is not None else DEFAULT_FUNCTION_VALUE

    return DEFAULT_FUNCTION_VALUE


def _is_decimal_literal(element: FormulaElement | None) -> bool:
    """True for a number literal written with a decimal point, e.g. 2.0 or -(1.5)."""
    if element is None or not element.is_number():
        return False
    if element.type == ElementType.NUMBER:
        return "." in (element.value or "")
    return _is_decimal_literal(element.right)


def _rand(element: FormulaElement, first: float, second: float, ctx: EvaluationContext) -> float:
    """Uniform random number between the two bounds, inclusive.

    Whole-number bounds not written as decimals give a whole-number result.
    """
    low, high = (first, second) if first <= second else (second, first)
    if low == high:
        return low

    epsilon = ctx.settings.integer_epsilon
    if (
        is_integer(low, epsilon)
        and is_integer(high, epsilon)
        and not _is_decimal_literal(element.left)
        and not _is_decimal_literal(element.right)
    ):
        return low + math.floor(ctx.rng.random() * ((high + 1) - low))
    return ctx.rng.random() * (high - low) + low


def _index_argument(value: Value | None) -> int | None:
    """1-based index operand converted to a 0-based index; None if absent."""
    if value is None:
        return None
    if isinstance(value, str):
        number = parse_number(value)
        return (to_int(number) if number is not None else 0) - 1
    return to_int(value) - 1


def _letter(index_value: Value | None, text_value: Value | None) -> str:
    index = _index_argument(index_value)
    if index is None or index < 0 or text_value is None:
        return ""
    text = stringify(text_value)
    if index >= len(text):
        return ""
    return text[index]


def _length(element: FormulaElement, left: Value | None, ctx: EvaluationContext) -> float:
    """LENGTH: length of the text form of the first argument."""
    child = element.left
    if child is None:
        return 0.0
    if child.type in (ElementType.NUMBER, ElementType.STRING):
        return float(len(child.value or ""))
    if child.type == ElementType.USER_VARIABLE:
        return float(_variable_text_length(child, ctx))
    if child.type == ElementType.USER_LIST:
        items = _get_list(child, ctx)
        if not items:
            return 0.0
        if isinstance(left, str):
            return float(len(left))
        if left is None or not math.isfinite(left):
            return 0.0
        return float(len(str(to_int(left))))
    if isinstance(left, float) and math.isnan(left):
        return 0.0
    return float(len(stringify(left)))


def _variable_text_length(child: FormulaElement, ctx: EvaluationContext) -> int:
    value = as_value(ctx.variables.get_variable(child.value or "", ctx.sprite, ctx.project))
    if value is None:
        return 0
    if isinstance(value, str):
        return len(value)
    if is_integer(value, ctx.settings.integer_epsilon):
        return len(str(to_int(value)))
    return len(format_number(value))


def _text_argument(
    child: FormulaElement | None, value: Value | None, ctx: EvaluationContext
) -> str:
    """Text form of an already evaluated JOIN/REGEX argument.

    Number literals lose a zero fraction.
    """
    if child is None:
        return ""
    if child.type == ElementType.NUMBER:
        number = parse_number(stringify(value))
        if number is None or math.isnan(number):
            return ""
        if is_integer(number, ctx.settings.integer_epsilon):
            return str(to_int(number))
        return format_number(number)
    if child.type == ElementType.STRING:
        return child.value or ""
    return stringify(value)


def _regex(
    element: FormulaElement, left: Value | None, right: Value | None, ctx: EvaluationContext
) -> str | None:
    """First capture group (or whole match) of the pattern in the text.

    An invalid pattern yields the error description as the result.
    """
    pattern = strip_trailing_zero(_text_argument(element.left, left, ctx))
    text = strip_trailing_zero(_text_argument(element.right, right, ctx))
    try:
        compiled = re.compile(pattern, re.DOTALL | re.MULTILINE)
    except re.error as e:
        logger.debug("Invalid regular expression %r: %s", pattern, e)
        return str(e)

    match = compiled.search(text)
    if match is None:
        return ""
    if compiled.groups == 0:
        return match.group(0)
    return match.group(1)


def _list_item(element: FormulaElement, left: Value | None, ctx: EvaluationContext) -> Any:
    items = None
    if element.right is not None and element.right.type == ElementType.USER_LIST:
        items = _get_list(element.right, ctx)
    if items is None:
        return ""

    index = _index_argument(left)
    if index is None or index < 0 or index >= len(items):
        return ""
    return items[index]


def _contains(element: FormulaElement, right: Value | None, ctx: EvaluationContext) -> float:
    if element.left is None or element.left.type != ElementType.USER_LIST:
        return 0.0
    items = _get_list(element.left, ctx)
    if items is None:
        return 0.0
    for item in items:
        if equals(as_value(item), right) == 1.0:
            return 1.0
    return 0.0


def _arduino_pin(pin: float | None, ctx: EvaluationContext, *, analog: bool) -> float:
    board = ctx.devices.arduino
    if board is None or pin is None:
        return DEFAULT_FUNCTION_VALUE
    valid = ARDUINO_ANALOG_PINS if analog else ARDUINO_DIGITAL_PINS
    if pin < valid.start or pin > valid.stop - 1:
        return DEFAULT_FUNCTION_VALUE
    if analog:
        return board.analog_pin(to_int(pin))
    return board.digital_pin(to_int(pin))


def _raspberry_pin(pin: float | None, ctx: EvaluationContext) -> float:
    connection = ctx.devices.raspberry_pi
    if connection is None or pin is None:
        return DEFAULT_FUNCTION_VALUE
    try:
        return 1.0 if connection.get_pin(to_int(pin)) else 0.0
    except Exception:
        logger.debug("Reading Raspberry Pi pin %s failed", to_int(pin), exc_info=True)
        return DEFAULT_FUNCTION_VALUE


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------


def _interpret_sensor(element: FormulaElement, ctx: EvaluationContext) -> Any:
    sensor = Sensor.lookup(element.value)
    if sensor is None:
        logger.debug("Unknown sensor %r", element.value)
        return 0.0
    if sensor.is_object_sensor:
        return _interpret_object_sensor(sensor, ctx)
    return ctx.sensors.read_sensor(sensor)


def _interpret_object_sensor(sensor: Sensor, ctx: EvaluationContext) -> Any:
    """Readings scoped to the evaluating sprite."""
    state = ctx.sprite_state
    sprite = ctx.sprite

    if sensor == Sensor.OBJECT_X:
        return state.x(sprite)
    if sensor == Sensor.OBJECT_Y:
        return state.y(sprite)
    if sensor == Sensor.OBJECT_TRANSPARENCY:
        return state.transparency(sprite)
    if sensor == Sensor.OBJECT_BRIGHTNESS:
        return state.brightness(sprite)
    if sensor == Sensor.OBJECT_COLOR:
        return state.color(sprite)
    if sensor == Sensor.OBJECT_SIZE:
        return state.size(sprite)
    if sensor == Sensor.OBJECT_ROTATION:
        return state.rotation(sprite)
    if sensor == Sensor.OBJECT_X_VELOCITY:
        return state.x_velocity(sprite)
    if sensor == Sensor.OBJECT_Y_VELOCITY:
        return state.y_velocity(sprite)
    if sensor == Sensor.OBJECT_ANGULAR_VELOCITY:
        return state.angular_velocity(sprite)
    if sensor == Sensor.OBJECT_DISTANCE_TO:
        return state.distance_to_touch(sprite)
    if sensor == Sensor.OBJECT_LAYER:
        z_index = state.z_index(sprite)
        if z_index < 0:
            return float(state.scene_index(sprite))
        if z_index == 0:
            return 0.0
        return float(z_index - ctx.settings.virtual_layers)
    if sensor in (Sensor.OBJECT_LOOK_NUMBER, Sensor.OBJECT_BACKGROUND_NUMBER):
        index = state.look_index(sprite)
        return 1.0 + (index if index is not None else 0)
    if sensor in (Sensor.OBJECT_LOOK_NAME, Sensor.OBJECT_BACKGROUND_NAME):
        return state.look_name(sprite) or ""
    if sensor == Sensor.NFC_TAG_MESSAGE:
        return ctx.nfc.last_tag_message()
    if sensor == Sensor.NFC_TAG_ID:
        return ctx.nfc.last_tag_id()
    if sensor == Sensor.COLLIDES_WITH_EDGE:
        if not ctx.collisions.first_frame_drawn():
            return 0.0
        return 1.0 if ctx.collisions.collides_with_edge(state.look(sprite)) else 0.0
    if sensor == Sensor.COLLIDES_WITH_FINGER:
        return 1.0 if ctx.collisions.collides_with_finger(state.look(sprite)) else 0.0

    return 0.0


# ---------------------------------------------------------------------------
# Variables, lists and collisions
# ---------------------------------------------------------------------------


def _get_list(element: FormulaElement, ctx: EvaluationContext) -> list[Value] | None:
    return ctx.variables.get_list(element.value or "", ctx.sprite, ctx.project)


def _interpret_user_variable(element: FormulaElement, ctx: EvaluationContext) -> Any:
    value = ctx.variables.get_variable(element.value or "", ctx.sprite, ctx.project)
    if value is None:
        return NOT_EXISTING_USER_VARIABLE_VALUE
    return value


def _interpret_user_list(element: FormulaElement, ctx: EvaluationContext) -> Any:
    items = _get_list(element, ctx)
    if items is None:
        return NOT_EXISTING_USER_LIST_VALUE
    if len(items) == 0:
        return EMPTY_USER_LIST_VALUE
    if len(items) == 1:
        return items[0]
    return _join_list_items(items)


def _join_list_items(items: list[Value]) -> str:
    """Display form of a list.

    Items are joined with spaces, or without a separator when every item is
    a single character. Numeric items show their whole part only.
    """
    texts = []
    for item in items:
        value = as_value(item)
        if isinstance(value, float):
            texts.append(str(to_int(value)))
        elif isinstance(value, str):
            texts.append(strip_trailing_zero(value))

    separator = "" if all(len(text) <= 1 for text in texts) else " "
    return trim(separator.join(strip_trailing_zero(text) for text in texts))


def _interpret_collision(target_name: str, ctx: EvaluationContext) -> float:
    """1.0 if the evaluating sprite touches the named sprite, group member, or clone."""
    detector = ctx.collisions
    first_look = ctx.sprite_state.look(ctx.sprite)
    try:
        target = detector.find_sprite(target_name)
    except LookupError:
        return 0.0

    if detector.is_group(target):
        for member in detector.group_members(target_name):
            if detector.collide_looks(first_look, ctx.sprite_state.look(member)):
                return 1.0
        return 0.0

    for candidate in [target, *detector.clones_of(target)]:
        second_look = ctx.sprite_state.look(candidate)
        if first_look == second_look:
            continue
        if detector.collide_looks(first_look, second_look):
            return 1.0
    return 0.0
