"""
Evaluation context and the collaborators it bundles.

The interpreter never reaches for global state. Everything outside the tree
(variables, sensors, sprite state, collisions, devices, touch, NFC) comes in
through an EvaluationContext threaded through every recursive call.

Each collaborator is a Protocol. The Null* implementations are the defaults
and answer every query with the sentinel the interpreter would fall back to
anyway, so a bare ``EvaluationContext()`` evaluates any tree.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Protocol

from formulakit.core.config import FormulaSettings
from formulakit.core.formula_lang.values import Value
from formulakit.core.ir.elements import Sensor

# Process-wide generator used unless the settings ask for a seed
_SHARED_RANDOM = random.Random()

ARDUINO_DIGITAL_PINS = range(0, 14)
ARDUINO_ANALOG_PINS = range(0, 6)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class VariableStore(Protocol):
    """User variables and lists, scoped to a sprite within a project."""

    def get_variable(self, name: str, sprite: Any, project: Any) -> Value | None: ...

    def get_list(self, name: str, sprite: Any, project: Any) -> list[Value] | None: ...


class SensorProvider(Protocol):
    """Device sensor readings."""

    def read_sensor(self, sensor: Sensor) -> Value: ...


class SpriteStateProvider(Protocol):
    """Visual state of a sprite, in user-interface units."""

    def x(self, sprite: Any) -> float: ...

    def y(self, sprite: Any) -> float: ...

    def rotation(self, sprite: Any) -> float: ...

    def size(self, sprite: Any) -> float: ...

    def transparency(self, sprite: Any) -> float: ...

    def brightness(self, sprite: Any) -> float: ...

    def color(self, sprite: Any) -> float: ...

    def x_velocity(self, sprite: Any) -> float: ...

    def y_velocity(self, sprite: Any) -> float: ...

    def angular_velocity(self, sprite: Any) -> float: ...

    def distance_to_touch(self, sprite: Any) -> float: ...

    def z_index(self, sprite: Any) -> int: ...

    def scene_index(self, sprite: Any) -> int:
        """Position of the sprite in the edited scene's sprite list."""
        ...

    def look_index(self, sprite: Any) -> int | None:
        """0-based index of the current look (the first look when none is
        selected), or None when the sprite has no looks."""
        ...

    def look_name(self, sprite: Any) -> str | None: ...

    def look(self, sprite: Any) -> Any:
        """Handle passed to the collision detector."""
        ...


class CollisionDetector(Protocol):
    """Shape collision tests and sprite resolution for collision probes."""

    def first_frame_drawn(self) -> bool: ...

    def collides_with_edge(self, look: Any) -> bool: ...

    def collides_with_finger(self, look: Any) -> bool: ...

    def collide_looks(self, first: Any, second: Any) -> bool: ...

    def find_sprite(self, name: str) -> Any:
        """Sprite in the playing scene. Raises LookupError when absent."""
        ...

    def is_group(self, sprite: Any) -> bool: ...

    def group_members(self, name: str) -> list[Any]: ...

    def clones_of(self, sprite: Any) -> list[Any]: ...


class ArduinoBoard(Protocol):
    def digital_pin(self, pin: int) -> float: ...

    def analog_pin(self, pin: int) -> float: ...


class RaspberryPiConnection(Protocol):
    def get_pin(self, pin: int) -> bool:
        """Pin state. Any failure reads as a low pin."""
        ...


class TouchInput(Protocol):
    """Multi-touch state, indexed by finger."""

    def is_finger_touching(self, index: int) -> bool: ...

    def x(self, index: int) -> float: ...

    def y(self, index: int) -> float: ...


class NfcReader(Protocol):
    def last_tag_message(self) -> str: ...

    def last_tag_id(self) -> str: ...


@dataclass
class DeviceServices:
    """Connected boards; None when a board is not connected."""

    arduino: ArduinoBoard | None = None
    raspberry_pi: RaspberryPiConnection | None = None


# ---------------------------------------------------------------------------
# Null collaborators
# ---------------------------------------------------------------------------


class NullVariableStore:
    def get_variable(self, name: str, sprite: Any, project: Any) -> Value | None:
        return None

    def get_list(self, name: str, sprite: Any, project: Any) -> list[Value] | None:
        return None


class NullSensorProvider:
    def read_sensor(self, sensor: Sensor) -> Value:
        return 0.0


class NullSpriteState:
    def x(self, sprite: Any) -> float:
        return 0.0

    def y(self, sprite: Any) -> float:
        return 0.0

    def rotation(self, sprite: Any) -> float:
        return 0.0

    def size(self, sprite: Any) -> float:
        return 0.0

    def transparency(self, sprite: Any) -> float:
        return 0.0

    def brightness(self, sprite: Any) -> float:
        return 0.0

    def color(self, sprite: Any) -> float:
        return 0.0

    def x_velocity(self, sprite: Any) -> float:
        return 0.0

    def y_velocity(self, sprite: Any) -> float:
        return 0.0

    def angular_velocity(self, sprite: Any) -> float:
        return 0.0

    def distance_to_touch(self, sprite: Any) -> float:
        return 0.0

    def z_index(self, sprite: Any) -> int:
        return 0

    def scene_index(self, sprite: Any) -> int:
        return 0

    def look_index(self, sprite: Any) -> int | None:
        return None

    def look_name(self, sprite: Any) -> str | None:
        return None

    def look(self, sprite: Any) -> Any:
        return sprite


class NullCollisionDetector:
    def first_frame_drawn(self) -> bool:
        return False

    def collides_with_edge(self, look: Any) -> bool:
        return False

    def collides_with_finger(self, look: Any) -> bool:
        return False

    def collide_looks(self, first: Any, second: Any) -> bool:
        return False

    def find_sprite(self, name: str) -> Any:
        raise LookupError(f"No sprite named {name!r}")

    def is_group(self, sprite: Any) -> bool:
        return False

    def group_members(self, name: str) -> list[Any]:
        return []

    def clones_of(self, sprite: Any) -> list[Any]:
        return []


class NullTouchInput:
    def is_finger_touching(self, index: int) -> bool:
        return False

    def x(self, index: int) -> float:
        return 0.0

    def y(self, index: int) -> float:
        return 0.0


class NullNfcReader:
    def last_tag_message(self) -> str:
        return ""

    def last_tag_id(self) -> str:
        return ""


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@dataclass
class EvaluationContext:
    """Everything an evaluation may consult outside the tree.

    Attributes:
        sprite: Handle of the sprite whose brick is evaluating the formula.
        project: Handle of the running project, passed through to the store.
        rng: Random source; defaults to a process-wide generator, or a
            dedicated one seeded from ``settings.random_seed``.
    """

    sprite: Any = None
    project: Any = None
    variables: VariableStore = field(default_factory=NullVariableStore)
    sensors: SensorProvider = field(default_factory=NullSensorProvider)
    sprite_state: SpriteStateProvider = field(default_factory=NullSpriteState)
    collisions: CollisionDetector = field(default_factory=NullCollisionDetector)
    devices: DeviceServices = field(default_factory=DeviceServices)
    touch: TouchInput = field(default_factory=NullTouchInput)
    nfc: NfcReader = field(default_factory=NullNfcReader)
    settings: FormulaSettings = field(default_factory=FormulaSettings)
    rng: random.Random | None = None

    def __post_init__(self) -> None:
        if self.rng is None:
            if self.settings.random_seed is not None:
                self.rng = random.Random(self.settings.random_seed)
            else:
                self.rng = _SHARED_RANDOM
