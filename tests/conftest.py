"""Shared pytest fixtures for formulakit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from formulakit.core.config import LOG_LEVEL_ENV_VAR, FormulaSettings
from formulakit.core.formula_lang.context import EvaluationContext
from formulakit.core.formula_lang.memory import (
    InMemoryVariableStore,
    SnapshotSpriteState,
    SpriteSnapshot,
    StaticCollisionDetector,
    StaticSensorProvider,
)

SPRITE = "Cat"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's log level override out of the tests."""
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)


@pytest.fixture
def settings() -> FormulaSettings:
    """Settings with a fixed random seed."""
    return FormulaSettings(random_seed=1234)


@pytest.fixture
def variables() -> InMemoryVariableStore:
    return InMemoryVariableStore()


@pytest.fixture
def sensors() -> StaticSensorProvider:
    return StaticSensorProvider()


@pytest.fixture
def context(
    variables: InMemoryVariableStore,
    sensors: StaticSensorProvider,
    settings: FormulaSettings,
) -> EvaluationContext:
    """Context for sprite ``Cat`` backed by in-memory variables and sensors."""
    return EvaluationContext(
        sprite=SPRITE,
        variables=variables,
        sensors=sensors,
        settings=settings,
    )


@pytest.fixture
def stage_context(settings: FormulaSettings) -> EvaluationContext:
    """Context with three sprites on stage; Cat touches Bird and the clone of Dog."""
    sprites = [
        SpriteSnapshot(
            name="Cat",
            x=12.5,
            y=-4.0,
            size=80.0,
            z_index=5,
            looks=["sitting", "walking"],
            current_look="walking",
        ),
        SpriteSnapshot(name="Dog", z_index=3),
        SpriteSnapshot(name="Bird", z_index=4),
    ]
    return EvaluationContext(
        sprite=SPRITE,
        sprite_state=SnapshotSpriteState(sprites),
        collisions=StaticCollisionDetector(
            sprites=["Cat", "Dog", "Bird", "Dog-clone"],
            touching=[("Cat", "Dog-clone"), ("Cat", "Bird")],
            groups={"Pets": ["Dog", "Bird"], "Strays": ["Dog"]},
            clones={"Dog": ["Dog-clone"]},
            edge=["Cat"],
        ),
        settings=settings,
    )


@pytest.fixture
def write_file(tmp_path: Path):
    """Write text to a file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
