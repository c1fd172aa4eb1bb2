"""Version lookup for itemdata."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

DISTRIBUTION = "itemdata"
PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"
UNKNOWN_VERSION = "0.0.0"


def get_version() -> str:
    """Installed distribution version; a source checkout falls back to its pyproject.toml."""
    try:
        return _metadata_version(DISTRIBUTION)
    except PackageNotFoundError:
        return source_version(PYPROJECT)


def source_version(pyproject: Path) -> str:
    """Read ``[project].version`` from ``pyproject``, or ``0.0.0`` if it has none."""
    try:
        data = tomllib.loads(pyproject.read_text())
    except (OSError, tomllib.TOMLDecodeError):
        return UNKNOWN_VERSION
    project = data.get("project", {})
    if project.get("name") != DISTRIBUTION:
        return UNKNOWN_VERSION
    return str(project.get("version", UNKNOWN_VERSION))
