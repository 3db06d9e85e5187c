"""
Identities used by formula tree elements.

Element values are serialized by member name, so every enum here uses its
name as its string value.
"""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Element kinds
# ---------------------------------------------------------------------------


class ElementType(StrEnum):
    """Kinds of formula tree elements."""

    OPERATOR = "OPERATOR"
    FUNCTION = "FUNCTION"
    NUMBER = "NUMBER"
    SENSOR = "SENSOR"
    USER_VARIABLE = "USER_VARIABLE"
    USER_LIST = "USER_LIST"
    BRACKET = "BRACKET"
    STRING = "STRING"
    COLLISION_FORMULA = "COLLISION_FORMULA"


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class Operator(StrEnum):
    """Operators of OPERATOR elements. Only MINUS and LOGICAL_NOT are unary."""

    # Arithmetic
    PLUS = "PLUS"
    MINUS = "MINUS"
    MULT = "MULT"
    DIVIDE = "DIVIDE"
    POW = "POW"
    # Comparison
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    GREATER_OR_EQUAL = "GREATER_OR_EQUAL"
    SMALLER_THAN = "SMALLER_THAN"
    SMALLER_OR_EQUAL = "SMALLER_OR_EQUAL"
    # Logical
    LOGICAL_AND = "LOGICAL_AND"
    LOGICAL_OR = "LOGICAL_OR"
    LOGICAL_NOT = "LOGICAL_NOT"

    @classmethod
    def lookup(cls, value: str | None) -> Operator | None:
        """Return the operator named ``value``, or None."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def symbol(self) -> str:
        """Display symbol."""
        return _OPERATOR_SYMBOLS[self]

    @property
    def is_logical(self) -> bool:
        return self not in _ARITHMETIC_OPERATORS


_OPERATOR_SYMBOLS: dict[Operator, str] = {
    Operator.PLUS: "+",
    Operator.MINUS: "-",
    Operator.MULT: "×",
    Operator.DIVIDE: "÷",
    Operator.POW: "^",
    Operator.EQUAL: "=",
    Operator.NOT_EQUAL: "≠",
    Operator.GREATER_THAN: ">",
    Operator.GREATER_OR_EQUAL: "≥",
    Operator.SMALLER_THAN: "<",
    Operator.SMALLER_OR_EQUAL: "≤",
    Operator.LOGICAL_AND: "and",
    Operator.LOGICAL_OR: "or",
    Operator.LOGICAL_NOT: "not",
}

_ARITHMETIC_OPERATORS = frozenset(
    {Operator.PLUS, Operator.MINUS, Operator.MULT, Operator.DIVIDE, Operator.POW}
)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


class Function(StrEnum):
    """Built-in functions of FUNCTION elements (closed set)."""

    SIN = "SIN"
    COS = "COS"
    TAN = "TAN"
    LN = "LN"
    LOG = "LOG"
    SQRT = "SQRT"
    RAND = "RAND"
    ABS = "ABS"
    ROUND = "ROUND"
    PI = "PI"
    MOD = "MOD"
    ARCSIN = "ARCSIN"
    ARCCOS = "ARCCOS"
    ARCTAN = "ARCTAN"
    ARCTAN2 = "ARCTAN2"
    EXP = "EXP"
    POWER = "POWER"
    FLOOR = "FLOOR"
    CEIL = "CEIL"
    MAX = "MAX"
    MIN = "MIN"
    TRUE = "TRUE"
    FALSE = "FALSE"
    LETTER = "LETTER"
    LENGTH = "LENGTH"
    JOIN = "JOIN"
    REGEX = "REGEX"
    ARDUINODIGITAL = "ARDUINODIGITAL"
    ARDUINOANALOG = "ARDUINOANALOG"
    RASPIDIGITAL = "RASPIDIGITAL"
    MULTI_FINGER_TOUCHED = "MULTI_FINGER_TOUCHED"
    MULTI_FINGER_X = "MULTI_FINGER_X"
    MULTI_FINGER_Y = "MULTI_FINGER_Y"
    LIST_ITEM = "LIST_ITEM"
    CONTAINS = "CONTAINS"
    NUMBER_OF_ITEMS = "NUMBER_OF_ITEMS"

    @classmethod
    def lookup(cls, value: str | None) -> Function | None:
        """Return the function named ``value``, or None."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def arity(self) -> int:
        """Number of child elements the function takes."""
        if self in _NULLARY_FUNCTIONS:
            return 0
        if self in _BINARY_FUNCTIONS:
            return 2
        return 1


_NULLARY_FUNCTIONS = frozenset({Function.PI, Function.TRUE, Function.FALSE})

_BINARY_FUNCTIONS = frozenset(
    {
        Function.RAND,
        Function.MOD,
        Function.ARCTAN2,
        Function.POWER,
        Function.MAX,
        Function.MIN,
        Function.LETTER,
        Function.JOIN,
        Function.REGEX,
        Function.LIST_ITEM,
        Function.CONTAINS,
    }
)


# ---------------------------------------------------------------------------
# Sensors
# ---------------------------------------------------------------------------


class Sensor(StrEnum):
    """Sensors of SENSOR elements."""

    # Device motion and position
    X_ACCELERATION = "X_ACCELERATION"
    Y_ACCELERATION = "Y_ACCELERATION"
    Z_ACCELERATION = "Z_ACCELERATION"
    COMPASS_DIRECTION = "COMPASS_DIRECTION"
    X_INCLINATION = "X_INCLINATION"
    Y_INCLINATION = "Y_INCLINATION"
    LATITUDE = "LATITUDE"
    LONGITUDE = "LONGITUDE"
    LOCATION_ACCURACY = "LOCATION_ACCURACY"
    ALTITUDE = "ALTITUDE"
    LOUDNESS = "LOUDNESS"
    # Touch
    FINGER_TOUCHED = "FINGER_TOUCHED"
    FINGER_X = "FINGER_X"
    FINGER_Y = "FINGER_Y"
    LAST_FINGER_INDEX = "LAST_FINGER_INDEX"
    # Clock
    DATE_YEAR = "DATE_YEAR"
    DATE_MONTH = "DATE_MONTH"
    DATE_DAY = "DATE_DAY"
    DATE_WEEKDAY = "DATE_WEEKDAY"
    TIME_HOUR = "TIME_HOUR"
    TIME_MINUTE = "TIME_MINUTE"
    TIME_SECOND = "TIME_SECOND"
    # Camera
    FACE_DETECTED = "FACE_DETECTED"
    FACE_SIZE = "FACE_SIZE"
    FACE_X_POSITION = "FACE_X_POSITION"
    FACE_Y_POSITION = "FACE_Y_POSITION"
    # Robots and boards
    NXT_SENSOR_1 = "NXT_SENSOR_1"
    NXT_SENSOR_2 = "NXT_SENSOR_2"
    NXT_SENSOR_3 = "NXT_SENSOR_3"
    NXT_SENSOR_4 = "NXT_SENSOR_4"
    EV3_SENSOR_1 = "EV3_SENSOR_1"
    EV3_SENSOR_2 = "EV3_SENSOR_2"
    EV3_SENSOR_3 = "EV3_SENSOR_3"
    EV3_SENSOR_4 = "EV3_SENSOR_4"
    PHIRO_FRONT_LEFT = "PHIRO_FRONT_LEFT"
    PHIRO_FRONT_RIGHT = "PHIRO_FRONT_RIGHT"
    PHIRO_SIDE_LEFT = "PHIRO_SIDE_LEFT"
    PHIRO_SIDE_RIGHT = "PHIRO_SIDE_RIGHT"
    PHIRO_BOTTOM_LEFT = "PHIRO_BOTTOM_LEFT"
    PHIRO_BOTTOM_RIGHT = "PHIRO_BOTTOM_RIGHT"
    DRONE_BATTERY_STATUS = "DRONE_BATTERY_STATUS"
    DRONE_EMERGENCY_STATE = "DRONE_EMERGENCY_STATE"
    DRONE_FLYING = "DRONE_FLYING"
    DRONE_INITIALIZED = "DRONE_INITIALIZED"
    DRONE_USB_ACTIVE = "DRONE_USB_ACTIVE"
    DRONE_USB_REMAINING_TIME = "DRONE_USB_REMAINING_TIME"
    DRONE_CAMERA_READY = "DRONE_CAMERA_READY"
    DRONE_RECORD_READY = "DRONE_RECORD_READY"
    DRONE_RECORDING = "DRONE_RECORDING"
    DRONE_NUM_FRAMES = "DRONE_NUM_FRAMES"
    # Gamepad (cast)
    GAMEPAD_A_PRESSED = "GAMEPAD_A_PRESSED"
    GAMEPAD_B_PRESSED = "GAMEPAD_B_PRESSED"
    GAMEPAD_UP_PRESSED = "GAMEPAD_UP_PRESSED"
    GAMEPAD_DOWN_PRESSED = "GAMEPAD_DOWN_PRESSED"
    GAMEPAD_LEFT_PRESSED = "GAMEPAD_LEFT_PRESSED"
    GAMEPAD_RIGHT_PRESSED = "GAMEPAD_RIGHT_PRESSED"
    # Object sensors (scoped to the evaluating sprite)
    OBJECT_X = "OBJECT_X"
    OBJECT_Y = "OBJECT_Y"
    OBJECT_TRANSPARENCY = "OBJECT_TRANSPARENCY"
    OBJECT_BRIGHTNESS = "OBJECT_BRIGHTNESS"
    OBJECT_COLOR = "OBJECT_COLOR"
    OBJECT_SIZE = "OBJECT_SIZE"
    OBJECT_ROTATION = "OBJECT_ROTATION"
    OBJECT_LAYER = "OBJECT_LAYER"
    OBJECT_LOOK_NUMBER = "OBJECT_LOOK_NUMBER"
    OBJECT_LOOK_NAME = "OBJECT_LOOK_NAME"
    OBJECT_BACKGROUND_NUMBER = "OBJECT_BACKGROUND_NUMBER"
    OBJECT_BACKGROUND_NAME = "OBJECT_BACKGROUND_NAME"
    OBJECT_DISTANCE_TO = "OBJECT_DISTANCE_TO"
    OBJECT_ANGULAR_VELOCITY = "OBJECT_ANGULAR_VELOCITY"
    OBJECT_X_VELOCITY = "OBJECT_X_VELOCITY"
    OBJECT_Y_VELOCITY = "OBJECT_Y_VELOCITY"
    NFC_TAG_MESSAGE = "NFC_TAG_MESSAGE"
    NFC_TAG_ID = "NFC_TAG_ID"
    COLLIDES_WITH_EDGE = "COLLIDES_WITH_EDGE"
    COLLIDES_WITH_FINGER = "COLLIDES_WITH_FINGER"

    @classmethod
    def lookup(cls, value: str | None) -> Sensor | None:
        """Return the sensor named ``value``, or None."""
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_object_sensor(self) -> bool:
        """True if the reading comes from the evaluating sprite, not the device."""
        return self.name.startswith("OBJECT_") or self in _SPRITE_SCOPED_SENSORS


_SPRITE_SCOPED_SENSORS = frozenset(
    {
        Sensor.NFC_TAG_MESSAGE,
        Sensor.NFC_TAG_ID,
        Sensor.COLLIDES_WITH_EDGE,
        Sensor.COLLIDES_WITH_FINGER,
    }
)
