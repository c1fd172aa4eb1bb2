"""
Configuration for item data linking.

Settings come from, in increasing precedence:

1. Defaults on ``ItemDataConfig``
2. A TOML file: an ``[itemdata]`` table, or ``[tool.itemdata]`` in pyproject.toml
3. Environment variables

Environment variables:
    ITEMDATA_STRICT: raise per-field link failures instead of logging them
    ITEMDATA_CACHE_LINKS: reuse link descriptors per type (default: true)
    ITEMDATA_LOG_LEVEL: log level for the ``itemdata`` loggers

Usage:
    config = config_from_env(load_config(Path("pyproject.toml")))
    helper = ItemDataHelper(default_registry(), config=config)
"""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

STRICT_ENV_VAR = "ITEMDATA_STRICT"
CACHE_LINKS_ENV_VAR = "ITEMDATA_CACHE_LINKS"
LOG_LEVEL_ENV_VAR = "ITEMDATA_LOG_LEVEL"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"


class ItemDataConfig(BaseModel):
    """
    Linking and logging settings.

    Attributes:
        strict: Raise per-field link failures instead of logging and skipping them
        cache_links: Reuse link descriptors per type
        log_level: Level name for the ``itemdata`` loggers
    """

    strict: bool = False
    cache_links: bool = True
    log_level: str = "WARNING"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the level name."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level '{v}'")
        return level


def load_config(path: Path) -> ItemDataConfig:
    """
    Load settings from a TOML file.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid TOML or has invalid settings
    """
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return ItemDataConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    section: Any = data.get("itemdata")
    if section is None:
        section = data.get("tool", {}).get("itemdata", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[itemdata] in {path} must be a table")

    return _build(section, source=str(path))


def config_from_env(base: ItemDataConfig | None = None) -> ItemDataConfig:
    """Overlay environment variables onto ``base`` (or the defaults)."""
    values = (base or ItemDataConfig()).model_dump()

    if STRICT_ENV_VAR in os.environ:
        values["strict"] = _parse_bool(STRICT_ENV_VAR, os.environ[STRICT_ENV_VAR])
    if CACHE_LINKS_ENV_VAR in os.environ:
        values["cache_links"] = _parse_bool(CACHE_LINKS_ENV_VAR, os.environ[CACHE_LINKS_ENV_VAR])
    if os.environ.get(LOG_LEVEL_ENV_VAR):
        values["log_level"] = os.environ[LOG_LEVEL_ENV_VAR]

    return _build(values, source="environment")


def configure_logging(config: ItemDataConfig) -> None:
    """Send log output to stderr at the configured level."""
    logging.basicConfig(level=config.log_level, stream=sys.stderr, format=LOG_FORMAT)
    logging.getLogger("itemdata").setLevel(config.log_level)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got '{raw}'")


def _build(values: dict[str, Any], source: str) -> ItemDataConfig:
    try:
        return ItemDataConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid item data settings from {source}: {e}") from e
