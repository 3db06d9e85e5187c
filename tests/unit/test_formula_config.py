"""Tests for formulakit.toml settings loading."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from formulakit.core.config import (
    CONFIG_FILENAME,
    DEFAULT_INTEGER_EPSILON,
    DEFAULT_VIRTUAL_LAYERS,
    LOG_LEVEL_ENV_VAR,
    FormulaSettings,
    load_settings,
)
from formulakit.core.errors import ConfigError
from formulakit.core.formula_lang.context import EvaluationContext


class TestLoadSettings:
    """Settings come from the [formula] table with sensible defaults."""

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings == FormulaSettings()
        assert settings.virtual_layers == DEFAULT_VIRTUAL_LAYERS
        assert settings.integer_epsilon == DEFAULT_INTEGER_EPSILON
        assert settings.random_seed is None
        assert settings.log_level == "WARNING"

    def test_reads_file_in_current_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "[formula]\nvirtual_layers = 3\nrandom_seed = 42\n", encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.virtual_layers == 3
        assert settings.random_seed == 42

    def test_reads_explicit_file(self, write_file) -> None:
        path = write_file(
            "custom.toml",
            '[formula]\ninteger_epsilon = 1e-9\nlog_level = "info"\n',
        )
        settings = load_settings(path)
        assert settings.integer_epsilon == 1e-9
        assert settings.log_level == "INFO"
        assert settings.log_level_number == logging.INFO

    def test_file_without_formula_table(self, write_file) -> None:
        path = write_file("other.toml", '[project]\nname = "demo"\n')
        assert load_settings(path) == FormulaSettings()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "absent.toml")

    def test_malformed_toml(self, write_file) -> None:
        path = write_file("broken.toml", "[formula\nvirtual_layers = 2\n")
        with pytest.raises(ConfigError, match="Invalid TOML") as exc_info:
            load_settings(path)
        assert str(path) in str(exc_info.value)

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ('virtual_layers = "two"', "virtual_layers"),
            ("virtual_layers = true", "virtual_layers"),
            ("integer_epsilon = 0", "positive"),
            ('integer_epsilon = "small"', "integer_epsilon"),
            ("random_seed = 1.5", "random_seed"),
            ('log_level = "LOUD"', "Unknown log level"),
        ],
    )
    def test_invalid_values(self, write_file, body: str, message: str) -> None:
        path = write_file("bad.toml", f"[formula]\n{body}\n")
        with pytest.raises(ConfigError, match=message):
            load_settings(path)

    def test_formula_must_be_a_table(self, write_file) -> None:
        path = write_file("flat.toml", 'formula = "yes"\n')
        with pytest.raises(ConfigError, match="table"):
            load_settings(path)


class TestEnvironmentOverride:
    def test_env_overrides_log_level(self, write_file, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_file("formulakit.toml", '[formula]\nlog_level = "ERROR"\n')
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")
        assert load_settings(path).log_level == "DEBUG"

    def test_invalid_env_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")
        with pytest.raises(ConfigError, match="Unknown log level"):
            load_settings()


class TestSettingsInContext:
    def test_seed_gives_dedicated_generator(self) -> None:
        first = EvaluationContext(settings=FormulaSettings(random_seed=3))
        second = EvaluationContext(settings=FormulaSettings(random_seed=3))
        assert first.rng is not second.rng
        assert first.rng.random() == second.rng.random()

    def test_unseeded_contexts_share_a_generator(self) -> None:
        assert EvaluationContext().rng is EvaluationContext().rng
