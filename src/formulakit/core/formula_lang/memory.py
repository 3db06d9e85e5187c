"""
In-memory collaborators.

Backs an EvaluationContext with plain data: used by the test suite and by
``formulakit eval --scenario``. Sprites are identified by name, and a
sprite's look handle is its name as well.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from formulakit.core.config import FormulaSettings
from formulakit.core.errors import make_scenario_error
from formulakit.core.formula_lang.context import DeviceServices, EvaluationContext
from formulakit.core.formula_lang.values import Value
from formulakit.core.ir.elements import Sensor

logger = logging.getLogger(__name__)


class InMemoryVariableStore:
    """Project-wide variables and lists, with optional per-sprite scopes.

    A sprite-local binding shadows a project-wide one of the same name.
    """

    def __init__(self) -> None:
        self._variables: dict[str, Value] = {}
        self._lists: dict[str, list[Value]] = {}
        self._local_variables: dict[Any, dict[str, Value]] = {}
        self._local_lists: dict[Any, dict[str, list[Value]]] = {}

    def set_variable(self, name: str, value: Value, sprite: Any = None) -> None:
        if sprite is None:
            self._variables[name] = value
        else:
            self._local_variables.setdefault(sprite, {})[name] = value

    def set_list(self, name: str, items: list[Value], sprite: Any = None) -> None:
        if sprite is None:
            self._lists[name] = list(items)
        else:
            self._local_lists.setdefault(sprite, {})[name] = list(items)

    def get_variable(self, name: str, sprite: Any, project: Any) -> Value | None:
        local = self._local_variables.get(sprite, {})
        if name in local:
            return local[name]
        return self._variables.get(name)

    def get_list(self, name: str, sprite: Any, project: Any) -> list[Value] | None:
        local = self._local_lists.get(sprite, {})
        if name in local:
            return local[name]
        return self._lists.get(name)


class StaticSensorProvider:
    """Fixed sensor readings; unknown sensors read 0."""

    def __init__(self, readings: dict[Sensor, Value] | None = None) -> None:
        self.readings = dict(readings or {})

    def read_sensor(self, sensor: Sensor) -> Value:
        return self.readings.get(sensor, 0.0)


class SpriteSnapshot(BaseModel):
    """Visual state of one sprite at a point in time."""

    name: str
    x: float = 0.0
    y: float = 0.0
    rotation: float = 90.0
    size: float = 100.0
    transparency: float = 0.0
    brightness: float = 50.0
    color: float = 0.0
    x_velocity: float = 0.0
    y_velocity: float = 0.0
    angular_velocity: float = 0.0
    distance_to_touch: float = 0.0
    z_index: int = 0
    scene_index: int = 0
    looks: list[str] = Field(default_factory=list)
    current_look: str | None = None


class SnapshotSpriteState:
    """SpriteStateProvider over a set of snapshots keyed by sprite name."""

    def __init__(self, sprites: list[SpriteSnapshot] | None = None) -> None:
        self._sprites = {sprite.name: sprite for sprite in sprites or []}

    def _get(self, sprite: Any) -> SpriteSnapshot:
        return self._sprites.get(sprite) or SpriteSnapshot(name=str(sprite))

    def x(self, sprite: Any) -> float:
        return self._get(sprite).x

    def y(self, sprite: Any) -> float:
        return self._get(sprite).y

    def rotation(self, sprite: Any) -> float:
        return self._get(sprite).rotation

    def size(self, sprite: Any) -> float:
        return self._get(sprite).size

    def transparency(self, sprite: Any) -> float:
        return self._get(sprite).transparency

    def brightness(self, sprite: Any) -> float:
        return self._get(sprite).brightness

    def color(self, sprite: Any) -> float:
        return self._get(sprite).color

    def x_velocity(self, sprite: Any) -> float:
        return self._get(sprite).x_velocity

    def y_velocity(self, sprite: Any) -> float:
        return self._get(sprite).y_velocity

    def angular_velocity(self, sprite: Any) -> float:
        return self._get(sprite).angular_velocity

    def distance_to_touch(self, sprite: Any) -> float:
        return self._get(sprite).distance_to_touch

    def z_index(self, sprite: Any) -> int:
        return self._get(sprite).z_index

    def scene_index(self, sprite: Any) -> int:
        return self._get(sprite).scene_index

    def look_index(self, sprite: Any) -> int | None:
        snapshot = self._get(sprite)
        if not snapshot.looks:
            return None
        if snapshot.current_look in snapshot.looks:
            return snapshot.looks.index(snapshot.current_look)
        return 0

    def look_name(self, sprite: Any) -> str | None:
        snapshot = self._get(sprite)
        index = self.look_index(sprite)
        return snapshot.looks[index] if index is not None else None

    def look(self, sprite: Any) -> Any:
        return sprite


class StaticCollisionDetector:
    """Collisions declared up front as pairs of sprite (or clone) names."""

    def __init__(
        self,
        sprites: list[str] | None = None,
        touching: list[tuple[str, str]] | None = None,
        groups: dict[str, list[str]] | None = None,
        clones: dict[str, list[str]] | None = None,
        edge: list[str] | None = None,
        finger: list[str] | None = None,
        frame_drawn: bool = True,
    ) -> None:
        self._sprites = set(sprites or [])
        self._touching = {frozenset(pair) for pair in touching or []}
        self._groups = dict(groups or {})
        self._clones = dict(clones or {})
        self._edge = set(edge or [])
        self._finger = set(finger or [])
        self._frame_drawn = frame_drawn

    def first_frame_drawn(self) -> bool:
        return self._frame_drawn

    def collides_with_edge(self, look: Any) -> bool:
        return look in self._edge

    def collides_with_finger(self, look: Any) -> bool:
        return look in self._finger

    def collide_looks(self, first: Any, second: Any) -> bool:
        return frozenset((first, second)) in self._touching

    def find_sprite(self, name: str) -> Any:
        if name in self._sprites or name in self._groups:
            return name
        raise LookupError(f"No sprite named {name!r}")

    def is_group(self, sprite: Any) -> bool:
        return sprite in self._groups

    def group_members(self, name: str) -> list[Any]:
        return list(self._groups.get(name, []))

    def clones_of(self, sprite: Any) -> list[Any]:
        return list(self._clones.get(sprite, []))


class StaticTouchInput:
    """Fingers currently on the screen, as index → (x, y)."""

    def __init__(self, touches: dict[int, tuple[float, float]] | None = None) -> None:
        self._touches = dict(touches or {})

    def is_finger_touching(self, index: int) -> bool:
        return index in self._touches

    def x(self, index: int) -> float:
        return self._touches.get(index, (0.0, 0.0))[0]

    def y(self, index: int) -> float:
        return self._touches.get(index, (0.0, 0.0))[1]


class StaticNfcReader:
    def __init__(self, message: str = "", tag_id: str = "") -> None:
        self.message = message
        self.tag_id = tag_id

    def last_tag_message(self) -> str:
        return self.message

    def last_tag_id(self) -> str:
        return self.tag_id


class StaticArduinoBoard:
    """Pin readings of a connected Arduino; unset pins read 0."""

    def __init__(
        self, digital: dict[int, float] | None = None, analog: dict[int, float] | None = None
    ) -> None:
        self.digital = dict(digital or {})
        self.analog = dict(analog or {})

    def digital_pin(self, pin: int) -> float:
        return self.digital.get(pin, 0.0)

    def analog_pin(self, pin: int) -> float:
        return self.analog.get(pin, 0.0)


class StaticRaspberryPi:
    """Pin states of a connected Raspberry Pi; unset pins read low."""

    def __init__(self, pins: dict[int, bool] | None = None) -> None:
        self.pins = dict(pins or {})

    def get_pin(self, pin: int) -> bool:
        return self.pins.get(pin, False)


# ---------------------------------------------------------------------------
# Scenario documents
# ---------------------------------------------------------------------------


class ArduinoPins(BaseModel):
    digital: dict[int, float] = Field(default_factory=dict)
    analog: dict[int, float] = Field(default_factory=dict)


class Scenario(BaseModel):
    """
    Runtime state to evaluate a formula against.

    Example (JSON):
        {
          "sprite": "Cat",
          "variables": {"score": 3},
          "lists": {"names": ["a", "bb"]},
          "sensors": {"LOUDNESS": 40},
          "sprites": [{"name": "Cat", "x": 10}, {"name": "Dog"}],
          "touching": [["Cat", "Dog"]]
        }
    """

    sprite: str | None = Field(default=None, description="Sprite evaluating the formula")
    variables: dict[str, Value] = Field(default_factory=dict)
    lists: dict[str, list[Value]] = Field(default_factory=dict)
    local_variables: dict[str, dict[str, Value]] = Field(
        default_factory=dict, description="sprite name -> variables"
    )
    local_lists: dict[str, dict[str, list[Value]]] = Field(
        default_factory=dict, description="sprite name -> lists"
    )
    sensors: dict[Sensor, Value] = Field(default_factory=dict)
    sprites: list[SpriteSnapshot] = Field(default_factory=list)
    touching: list[tuple[str, str]] = Field(default_factory=list)
    groups: dict[str, list[str]] = Field(default_factory=dict)
    clones: dict[str, list[str]] = Field(default_factory=dict)
    edge_collisions: list[str] = Field(default_factory=list)
    finger_collisions: list[str] = Field(default_factory=list)
    touches: dict[int, tuple[float, float]] = Field(default_factory=dict)
    nfc_message: str = ""
    nfc_tag_id: str = ""
    arduino: ArduinoPins | None = None
    raspberry_pi: dict[int, bool] | None = None

    def build_context(self, settings: FormulaSettings | None = None) -> EvaluationContext:
        """Create an EvaluationContext backed by this scenario's data."""
        store = InMemoryVariableStore()
        for name, value in self.variables.items():
            store.set_variable(name, value)
        for name, items in self.lists.items():
            store.set_list(name, items)
        for sprite, variables in self.local_variables.items():
            for name, value in variables.items():
                store.set_variable(name, value, sprite=sprite)
        for sprite, lists in self.local_lists.items():
            for name, items in lists.items():
                store.set_list(name, items, sprite=sprite)

        clone_names = [clone for names in self.clones.values() for clone in names]
        devices = DeviceServices(
            arduino=(
                StaticArduinoBoard(self.arduino.digital, self.arduino.analog)
                if self.arduino is not None
                else None
            ),
            raspberry_pi=(
                StaticRaspberryPi(self.raspberry_pi) if self.raspberry_pi is not None else None
            ),
        )

        return EvaluationContext(
            sprite=self.sprite,
            variables=store,
            sensors=StaticSensorProvider(self.sensors),
            sprite_state=SnapshotSpriteState(self.sprites),
            collisions=StaticCollisionDetector(
                sprites=[sprite.name for sprite in self.sprites] + clone_names,
                touching=self.touching,
                groups=self.groups,
                clones=self.clones,
                edge=self.edge_collisions,
                finger=self.finger_collisions,
            ),
            devices=devices,
            touch=StaticTouchInput(self.touches),
            nfc=StaticNfcReader(self.nfc_message, self.nfc_tag_id),
            settings=settings or FormulaSettings(),
        )


def load_scenario(path: Path) -> Scenario:
    """Load a scenario from a JSON file.

    Raises:
        ScenarioError: If the file is missing or does not describe a scenario.
    """
    if not path.exists():
        raise make_scenario_error("Scenario file not found", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        scenario = Scenario.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise make_scenario_error(f"Invalid scenario: {e}", path) from e
    logger.debug("Loaded scenario from %s", path)
    return scenario
