"""Tests for the in-memory collaborators and scenario documents."""

from __future__ import annotations

import json

import pytest
from builders import collision, fn, lst, num, op, sensor, var

from formulakit.core.config import FormulaSettings
from formulakit.core.errors import ScenarioError
from formulakit.core.formula_lang import Scenario, evaluate, load_scenario
from formulakit.core.formula_lang.memory import (
    InMemoryVariableStore,
    SnapshotSpriteState,
    SpriteSnapshot,
    StaticCollisionDetector,
)
from formulakit.core.ir import Function, Operator, Sensor

SCENARIO = {
    "sprite": "Cat",
    "variables": {"score": 3, "name": "Felix"},
    "lists": {"names": ["a", "bb"]},
    "local_variables": {"Cat": {"score": 10}},
    "sensors": {"LOUDNESS": 40},
    "sprites": [{"name": "Cat", "x": 10, "z_index": 4}, {"name": "Dog"}],
    "touching": [["Cat", "Dog"]],
    "touches": {"1": [5, 6]},
    "nfc_message": "hi",
    "arduino": {"digital": {"2": 1}},
    "raspberry_pi": {"7": True},
}


class TestInMemoryVariableStore:
    def test_global_and_local_scopes(self) -> None:
        store = InMemoryVariableStore()
        store.set_variable("x", 1.0)
        store.set_variable("x", 2.0, sprite="Cat")
        assert store.get_variable("x", "Cat", None) == 2.0
        assert store.get_variable("x", "Dog", None) == 1.0
        assert store.get_variable("y", "Cat", None) is None

    def test_lists_are_copied(self) -> None:
        items = [1.0, 2.0]
        store = InMemoryVariableStore()
        store.set_list("l", items)
        items.append(3.0)
        assert store.get_list("l", None, None) == [1.0, 2.0]


class TestSnapshots:
    def test_unknown_sprite_gets_defaults(self) -> None:
        state = SnapshotSpriteState([])
        assert state.size("Ghost") == 100.0
        assert state.look_index("Ghost") is None

    def test_current_look_falls_back_to_first(self) -> None:
        state = SnapshotSpriteState([SpriteSnapshot(name="Cat", looks=["a", "b"])])
        assert state.look_index("Cat") == 0
        assert state.look_name("Cat") == "a"

    def test_collision_pairs_are_symmetric(self) -> None:
        detector = StaticCollisionDetector(sprites=["Cat", "Dog"], touching=[("Cat", "Dog")])
        assert detector.collide_looks("Dog", "Cat")
        with pytest.raises(LookupError):
            detector.find_sprite("Mouse")


class TestScenario:
    @pytest.fixture
    def context(self):
        return Scenario.model_validate(SCENARIO).build_context(FormulaSettings(random_seed=1))

    def test_variables(self, context) -> None:
        assert evaluate(op(Operator.PLUS, var("score"), var("score")), context) == 20.0
        assert evaluate(var("name"), context) == "Felix"
        assert evaluate(lst("names"), context) == "a bb"

    def test_sensors_and_sprites(self, context) -> None:
        assert evaluate(sensor(Sensor.LOUDNESS), context) == 40.0
        assert evaluate(sensor(Sensor.OBJECT_X), context) == 10.0
        assert evaluate(sensor(Sensor.OBJECT_LAYER), context) == 2.0
        assert evaluate(sensor(Sensor.NFC_TAG_MESSAGE), context) == "hi"

    def test_collisions(self, context) -> None:
        assert evaluate(collision("Dog"), context) == 1.0
        assert evaluate(collision("Mouse"), context) == 0.0

    def test_devices_and_touch(self, context) -> None:
        assert evaluate(fn(Function.ARDUINODIGITAL, num(2)), context) == 1.0
        assert evaluate(fn(Function.RASPIDIGITAL, num(7)), context) == 1.0
        assert evaluate(fn(Function.MULTI_FINGER_Y, num(1)), context) == 6.0

    def test_settings_are_carried(self, context) -> None:
        assert context.settings.random_seed == 1

    def test_empty_scenario(self) -> None:
        context = Scenario().build_context()
        assert context.devices.arduino is None
        assert evaluate(var("anything"), context) == 0.0


class TestLoadScenario:
    def test_load(self, write_file) -> None:
        path = write_file("scenario.json", json.dumps(SCENARIO))
        scenario = load_scenario(path)
        assert scenario.sprite == "Cat"
        assert scenario.sensors == {Sensor.LOUDNESS: 40.0}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ScenarioError, match="not found"):
            load_scenario(tmp_path / "absent.json")

    def test_invalid_json(self, write_file) -> None:
        path = write_file("broken.json", "{not json")
        with pytest.raises(ScenarioError, match="Invalid scenario"):
            load_scenario(path)

    def test_unknown_sensor(self, write_file) -> None:
        path = write_file("sensor.json", json.dumps({"sensors": {"THERMOMETER": 1}}))
        with pytest.raises(ScenarioError, match="Invalid scenario"):
            load_scenario(path)
