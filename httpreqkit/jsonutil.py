"""Helpers for JSON-shaped dictionaries."""

from __future__ import annotations

import dataclasses
import json
from typing import Any

__all__ = [
    "contains",
    "is_json_string",
    "json_string_to_map",
    "convert_json_strings_to_maps",
    "struct_to_map",
    "convert_map_to_json",
]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _dumps(value: Any) -> str:
    text = json.dumps(
        value,
        default=_encode,
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
        allow_nan=False,
    )
    for char, escaped in (("<", "\\u003c"), (">", "\\u003e"), ("&", "\\u0026"),
                          ("\u2028", "\\u2028"), ("\u2029", "\\u2029")):
        text = text.replace(char, escaped)
    return text


def _encode(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _deep_equal(a: Any, b: Any) -> bool:
    try:
        return _dumps(a) == _dumps(b)
    except (TypeError, ValueError):
        return False


def contains(container: dict, containee: dict) -> bool:
    """Return True if every entry of ``containee`` is present in ``container``, recursing into objects."""
    for key, value in containee.items():
        if key not in container:
            return False
        current = container[key]
        if isinstance(value, dict):
            if not isinstance(current, dict) or not contains(current, value):
                return False
        elif not _deep_equal(value, current):
            return False
    return True


def is_json_string(text: str) -> bool:
    """Return True if ``text`` decodes to a JSON object (or null)."""
    try:
        value = _loads(text)
    except (ValueError, TypeError):
        return False
    return value is None or isinstance(value, dict)


def json_string_to_map(text: str) -> dict | None:
    """Decode ``text`` into a dict, or None if it is not a JSON object."""
    try:
        value = _loads(text)
    except (ValueError, TypeError):
        return None
    return value if isinstance(value, dict) else None


def convert_json_strings_to_maps(merged: dict) -> None:
    """Replace, in place, string values holding JSON objects by the decoded dicts."""
    for key, value in list(merged.items()):
        if isinstance(value, str):
            if is_json_string(value):
                merged[key] = json_string_to_map(value)
        elif isinstance(value, dict):
            convert_json_strings_to_maps(value)


def struct_to_map(obj: Any) -> dict | None:
    """Convert ``obj`` to a plain dict by a JSON round trip.

    Raises ValueError if the value does not encode to a JSON object.
    """
    try:
        value = _loads(_dumps(obj))
    except TypeError as exc:
        raise ValueError(str(exc)) from None
    if value is not None and not isinstance(value, dict):
        kind = {str: "string", list: "array", bool: "bool"}.get(type(value), "number")
        raise ValueError(f"cannot convert {kind} into a mapping")
    return value


def convert_map_to_json(mapping: dict) -> str:
    """Encode ``mapping`` as compact JSON with sorted keys."""
    try:
        return _dumps(mapping)
    except TypeError as exc:
        raise ValueError(str(exc)) from None