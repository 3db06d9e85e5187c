"""
Settings for formula evaluation.

Settings live in the ``[formula]`` table of a ``formulakit.toml`` file:

    [formula]
    virtual_layers = 2
    integer_epsilon = 1e-12
    random_seed = 42
    log_level = "INFO"

The FORMULAKIT_LOG_LEVEL environment variable overrides ``log_level``.

Usage:
    from formulakit.core.config import load_settings

    settings = load_settings()  # ./formulakit.toml if present, else defaults
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from formulakit.core.errors import make_config_error

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "formulakit.toml"

# Environment variable name for the log level override
LOG_LEVEL_ENV_VAR = "FORMULAKIT_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Stage layers reserved below the first sprite layer
DEFAULT_VIRTUAL_LAYERS = 2

DEFAULT_INTEGER_EPSILON = 1e-12


@dataclass
class FormulaSettings:
    """Evaluation settings."""

    virtual_layers: int = DEFAULT_VIRTUAL_LAYERS
    integer_epsilon: float = DEFAULT_INTEGER_EPSILON
    random_seed: int | None = None
    log_level: str = "WARNING"

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(path: Path | None = None) -> FormulaSettings:
    """Load settings from a TOML file.

    Args:
        path: Explicit config file. When omitted, ``formulakit.toml`` in the
            current directory is used if it exists.

    Returns:
        FormulaSettings with file values and the environment override applied.

    Raises:
        ConfigError: If the file is missing, malformed, or holds invalid values.
    """
    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        data: dict[str, Any] = _read_toml(candidate) if candidate.exists() else {}
        source = candidate if candidate.exists() else None
    else:
        if not path.exists():
            raise make_config_error("Config file not found", path)
        data = _read_toml(path)
        source = path

    table = data.get("formula", {})
    if not isinstance(table, dict):
        raise make_config_error("[formula] must be a table", source)

    settings = FormulaSettings(
        virtual_layers=_get_int(table, "virtual_layers", DEFAULT_VIRTUAL_LAYERS, source),
        integer_epsilon=_get_float(table, "integer_epsilon", DEFAULT_INTEGER_EPSILON, source),
        random_seed=_get_optional_int(table, "random_seed", source),
        log_level=_get_log_level(table.get("log_level", "WARNING"), source),
    )

    override = os.environ.get(LOG_LEVEL_ENV_VAR)
    if override:
        settings.log_level = _get_log_level(override, None)

    if source is not None:
        logger.debug("Loaded formula settings from %s", source)
    return settings


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise make_config_error(f"Invalid TOML: {e}", path) from e


def _get_int(table: dict[str, Any], key: str, default: int, source: Path | None) -> int:
    value = table.get(key, default)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise make_config_error(f"'{key}' must be an integer, got {value!r}", source)
    return value


def _get_optional_int(table: dict[str, Any], key: str, source: Path | None) -> int | None:
    if key not in table:
        return None
    return _get_int(table, key, 0, source)


def _get_float(table: dict[str, Any], key: str, default: float, source: Path | None) -> float:
    value = table.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise make_config_error(f"'{key}' must be a number, got {value!r}", source)
    if value <= 0:
        raise make_config_error(f"'{key}' must be positive, got {value!r}", source)
    return float(value)


def _get_log_level(value: Any, source: Path | None) -> str:
    if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
        raise make_config_error(
            f"Unknown log level {value!r} (expected one of {', '.join(_LOG_LEVELS)})", source
        )
    return value.upper()
