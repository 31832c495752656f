"""Generic Object variant exchanged with the remote services.

The codec that turns wire bytes into these values lives outside this package.
Whatever it produces must fit the closed variant below; ``is_object`` and
``to_object`` enforce that at the boundaries where foreign values enter.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeAlias, Union

import msgspec

from .protocol import NS_LOCALIZED_DESCRIPTION_KEY, NS_USER_INFO_KEY


class NSError(msgspec.Struct, frozen=True):
    """Structured error object returned by the remote side instead of a result."""

    domain: str = ""
    code: int = 0
    user_info: dict[str, Any] = msgspec.field(default_factory=dict)

    @property
    def localized_description(self) -> str | None:
        description = self.user_info.get(NS_LOCALIZED_DESCRIPTION_KEY)
        return description if isinstance(description, str) else None


Object: TypeAlias = Union[
    None,
    bool,
    int,
    float,
    str,
    bytes,
    datetime,
    list["Object"],
    dict[str, "Object"],
    NSError,
]

_SCALARS = (bool, int, float, str, bytes, datetime)


def is_object(value: Any) -> bool:
    """Return True when *value* is a member of the Object variant."""
    if value is None or isinstance(value, _SCALARS) or isinstance(value, NSError):
        return True
    if isinstance(value, list):
        return all(is_object(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) and is_object(item) for key, item in value.items())
    return False


def to_object(value: Any) -> Object:
    """Normalise codec output into the Object variant.

    Tuples become lists and foreign mappings become dicts. Anything that has
    no place in the variant raises ``TypeError``.
    """
    if value is None or isinstance(value, _SCALARS) or isinstance(value, NSError):
        return value
    if isinstance(value, bytearray | memoryview):
        return bytes(value)
    if isinstance(value, list | tuple):
        return [to_object(item) for item in value]
    if isinstance(value, Mapping):
        normalised: dict[str, Object] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Object mapping keys must be str, got {type(key).__name__}")
            normalised[key] = to_object(item)
        return normalised
    raise TypeError(f"{type(value).__name__} is not a valid Object")


def fault_description(value: Any) -> str | None:
    """Extract the remote-fault message, or None when *value* is not a fault.

    An ``NSError`` is always a fault. A plain mapping only counts when it
    carries ``NSUserInfo`` -> ``NSLocalizedDescription``.
    """
    if isinstance(value, NSError):
        description = value.localized_description
        if description is not None:
            return description
        return f"{value.domain or 'NSError'} code {value.code}"
    if not isinstance(value, Mapping):
        return None
    user_info = value.get(NS_USER_INFO_KEY)
    if not isinstance(user_info, Mapping):
        return None
    description = user_info.get(NS_LOCALIZED_DESCRIPTION_KEY)
    if not isinstance(description, str):
        return None
    return description


__all__ = ["NSError", "Object", "fault_description", "is_object", "to_object"]
