"""Utility helpers shared across dtxclient configuration code."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Final

from ..const import CONFIG_SECTION

logger = logging.getLogger(__name__)

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"1", "yes", "on", "true", "enable", "enabled"})


def parse_bool(value: object) -> bool:
    """Parse a boolean value safely from various types."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if value is None:
        return False
    s = str(value).lower().strip()
    return s in _TRUE_STRINGS


def parse_int(value: object, default: int) -> int:
    """Parse an integer value safely, handling floats and strings."""
    try:
        return int(float(value))  # type: ignore
    except (ValueError, TypeError):
        return default


def parse_float(value: object, default: float) -> float:
    """Parse a float value safely."""
    try:
        return float(value)  # type: ignore
    except (ValueError, TypeError):
        return default


def parse_names(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse an attribute name list given as a TOML array or a spaced string."""
    if value is None:
        return default
    items: Iterable[Any]
    if isinstance(value, str):
        items = value.split()
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return default
    seen: set[str] = set()
    names: list[str] = []
    for item in items:
        candidate = str(item).strip()
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        names.append(candidate)
    return tuple(names)


def read_config_file(path: Path) -> dict[str, Any]:
    """Return the ``[dtxclient]`` table of a TOML file, or {} when absent."""
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError:
        logger.warning("Config file %s not found; using defaults.", path)
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error("Failed to load config file %s: %s. Using defaults.", path, e)
        return {}

    section = document.get(CONFIG_SECTION, document)
    if not isinstance(section, dict):
        logger.warning("Config section '%s' in %s is not a table; using defaults.", CONFIG_SECTION, path)
        return {}
    return section


__all__: Final[tuple[str, ...]] = (
    "parse_bool",
    "parse_float",
    "parse_int",
    "parse_names",
    "read_config_file",
)
