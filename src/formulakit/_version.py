"""formulakit version lookup.

An installed distribution answers from its metadata. A source checkout that
was never installed falls back to the ``[project]`` table of the repository's
pyproject.toml, and reports ``0+unknown`` when neither is available.
"""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

DISTRIBUTION = "formulakit"
UNKNOWN_VERSION = "0+unknown"

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version(pyproject: Path) -> str | None:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return None
    project = data.get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    version = project.get("version")
    return version if isinstance(version, str) else None


def get_version() -> str:
    try:
        return _metadata_version(DISTRIBUTION)
    except PackageNotFoundError:
        return _checkout_version(_PYPROJECT) or UNKNOWN_VERSION
