"""
Helpers for coercing untrusted completion JSON into typed values.

Every value coming back from the completion service is treated as
untrusted: wrong types become None, never exceptions.
"""

from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic.alias_generators import to_camel

E = TypeVar("E", bound=Enum)


def pick(data: Any, name: str, *aliases: str) -> Any:
    """
    Read a field by snake_case name, its camelCase form, or an alias.

    Returns None when data is not a mapping or no key is present.
    """
    if not isinstance(data, dict):
        return None
    for key in (name, to_camel(name), *aliases):
        if key in data:
            return data[key]
    return None


def as_str(value: Any) -> Optional[str]:
    """Non-empty stripped string, numbers rendered as text, otherwise None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no"):
        return False
    return None


def as_str_list(value: Any) -> Optional[tuple[str, ...]]:
    """Tuple of non-empty strings; a bare string becomes a one-item tuple."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    items = tuple(s for s in (as_str(v) for v in value) if s is not None)
    return items or None


def as_enum(enum_cls: type[E], value: Any) -> Optional[E]:
    """
    Match an enum by value, ignoring case, spaces and underscores.

    "Auto_Renewal" and "auto renewal" both resolve to "auto-renewal".
    """
    if not isinstance(value, str):
        return None
    key = value.strip().lower().replace("_", "-").replace(" ", "-")
    try:
        return enum_cls(key)
    except ValueError:
        return None


def find_items(payload: Any, *keys: str) -> Optional[list]:
    """
    Locate the list of entries in a JSON-mode response.

    Accepts a bare array, or an object holding the array under one of
    the given keys. An empty object means no entries. Returns None when
    the located value is not a list, or when a non-empty object has none
    of the keys (e.g. {"error": ...}).
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return None
    for key in keys:
        if key in payload:
            value = payload[key]
            return value if isinstance(value, list) else None
    return None if payload else []
