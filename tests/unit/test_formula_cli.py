"""Tests for the formulakit command line."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from builders import fn, lst, num, op, sensor, var
from typer.testing import CliRunner

from formulakit._version import _checkout_version
from formulakit.cli import app
from formulakit.core.ir import FormulaElement, Function, Operator, Sensor


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def write_tree(tmp_path: Path):
    """Save a formula tree as JSON and return its path."""

    def _write(tree: FormulaElement, name: str = "formula.json") -> Path:
        path = tmp_path / name
        path.write_text(tree.model_dump_json(), encoding="utf-8")
        return path

    return _write


class TestEval:
    def test_prints_result(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(op(Operator.PLUS, num(1), num(2)))
        result = cli_runner.invoke(app, ["eval", str(path)])
        assert result.exit_code == 0
        assert result.stdout.strip() == "3"

    def test_prints_fraction_and_text(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(op(Operator.DIVIDE, num(1), num(4)))
        assert cli_runner.invoke(app, ["eval", str(path)]).stdout.strip() == "0.25"

        path = write_tree(fn(Function.JOIN, num(2), num(3)), "join.json")
        assert cli_runner.invoke(app, ["eval", str(path)]).stdout.strip() == "23"

    def test_with_scenario(self, cli_runner: CliRunner, write_tree, write_file) -> None:
        path = write_tree(op(Operator.MULT, var("score"), sensor(Sensor.LOUDNESS)))
        scenario = write_file(
            "scenario.json",
            json.dumps({"variables": {"score": 3}, "sensors": {"LOUDNESS": 2.5}}),
        )
        result = cli_runner.invoke(app, ["eval", str(path), "--scenario", str(scenario)])
        assert result.exit_code == 0
        assert result.stdout.strip() == "7.5"

    def test_repeat(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(fn(Function.RAND, num(1), num(1)))
        result = cli_runner.invoke(app, ["eval", str(path), "--repeat", "3"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["1", "1", "1"]

    def test_seeded_config_is_reproducible(
        self, cli_runner: CliRunner, write_tree, write_file
    ) -> None:
        path = write_tree(fn(Function.RAND, num(1), num(1000)))
        config = write_file("formulakit.toml", "[formula]\nrandom_seed = 5\n")
        args = ["eval", str(path), "--config", str(config), "--repeat", "5"]
        first = cli_runner.invoke(app, args)
        second = cli_runner.invoke(app, args)
        assert first.exit_code == 0
        assert first.stdout == second.stdout

    def test_missing_tree(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["eval", str(tmp_path / "absent.json")])
        assert result.exit_code == 1
        assert "Formula file not found" in result.output

    def test_invalid_tree(self, cli_runner: CliRunner, write_file) -> None:
        path = write_file("bad.json", json.dumps({"type": "POTION"}))
        result = cli_runner.invoke(app, ["eval", str(path)])
        assert result.exit_code == 1
        assert "Invalid formula tree" in result.output

    def test_invalid_config(self, cli_runner: CliRunner, write_tree, write_file) -> None:
        path = write_tree(num(1))
        config = write_file("bad.toml", "[formula]\nvirtual_layers = -\n")
        result = cli_runner.invoke(app, ["eval", str(path), "--config", str(config)])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output

    def test_invalid_scenario(self, cli_runner: CliRunner, write_tree, write_file) -> None:
        path = write_tree(num(1))
        scenario = write_file("scenario.json", "[]")
        result = cli_runner.invoke(app, ["eval", str(path), "--scenario", str(scenario)])
        assert result.exit_code == 1
        assert "Invalid scenario" in result.output


class TestInspection:
    def test_tokens(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(op(Operator.PLUS, num(1), var("score")))
        result = cli_runner.invoke(app, ["tokens", str(path)])
        assert result.exit_code == 0
        assert "PLUS" in result.stdout
        assert "user_variable" in result.stdout
        assert "score" in result.stdout

    def test_resources(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(
            op(Operator.PLUS, sensor(Sensor.NFC_TAG_ID), fn(Function.ARDUINOANALOG, num(1)))
        )
        result = cli_runner.invoke(app, ["resources", str(path)])
        assert result.exit_code == 0
        assert result.stdout.split() == ["BLUETOOTH_SENSORS_ARDUINO", "NFC_ADAPTER"]

    def test_no_resources(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(num(1))
        result = cli_runner.invoke(app, ["resources", str(path)])
        assert result.exit_code == 0
        assert "No resources required" in result.stdout

    def test_names(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(
            op(Operator.PLUS, var("score"), fn(Function.NUMBER_OF_ITEMS, lst("inventory")))
        )
        result = cli_runner.invoke(app, ["names", str(path)])
        assert result.exit_code == 0
        assert "score" in result.stdout
        assert "inventory" in result.stdout


class TestGlobalOptions:
    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "formulakit version" in result.stdout

    def test_version_from_checkout(self, write_file) -> None:
        path = write_file("pyproject.toml", '[project]\nname = "formulakit"\nversion = "2.3.1"\n')
        assert _checkout_version(path) == "2.3.1"

    def test_version_ignores_other_projects(self, write_file, tmp_path: Path) -> None:
        path = write_file("pyproject.toml", '[project]\nname = "other"\nversion = "9.9"\n')
        assert _checkout_version(path) is None
        assert _checkout_version(tmp_path / "missing.toml") is None

    def test_config_log_level_applies(
        self, cli_runner: CliRunner, write_tree, write_file
    ) -> None:
        path = write_tree(op(Operator.PLUS, num(1), num(2)))
        config = write_file("formulakit.toml", '[formula]\nlog_level = "ERROR"\n')
        result = cli_runner.invoke(app, ["eval", str(path), "--config", str(config)])
        assert result.exit_code == 0
        assert logging.getLogger("formulakit").level == logging.ERROR

    def test_verbose_eval(self, cli_runner: CliRunner, write_tree) -> None:
        path = write_tree(op(Operator.PLUS, num(1), num(2)))
        result = cli_runner.invoke(app, ["--verbose", "eval", str(path)])
        assert result.exit_code == 0
        assert "3" in result.stdout
