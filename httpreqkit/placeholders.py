"""Resolving ``{{name:namespace:key}}`` secret placeholders in strings and data."""

from __future__ import annotations

import logging
import re
from typing import Any

from httpreqkit.kube import KubeError, Secret, SecretClient, get_secret

__all__ = [
    "find_placeholders",
    "remove_duplicates",
    "parse_placeholder",
    "replace_placeholder_with_secret_value",
    "patch_secrets_into_string",
    "patch_secrets_into_headers",
    "patch_secrets_into_map",
]

logger = logging.getLogger(__name__)

_PART = r"([^:{}\t\n\f\r ]+)"
_SPACE = r"[\t\n\f\r ]*"
_PLACEHOLDER = re.compile(r"\{\{" + _SPACE + _PART + ":" + _PART + ":" + _PART + _SPACE + r"\}\}")


def find_placeholders(value: str) -> list[str]:
    """Return every placeholder in ``value``, in order of appearance."""
    return [match.group(0) for match in _PLACEHOLDER.finditer(value)]


def remove_duplicates(items: list[str]) -> list[str]:
    """Return ``items`` without repeats, keeping first occurrences in order."""
    return list(dict.fromkeys(items))


def parse_placeholder(placeholder: str) -> tuple[str, str, str] | None:
    """Return the secret name, namespace and key of a placeholder, or None."""
    match = _PLACEHOLDER.search(placeholder)
    if match is None:
        return None
    name, namespace, key = match.groups()
    return name, namespace, key


def replace_placeholder_with_secret_value(original: str, old: str, secret: Secret, key: str) -> str:
    """Replace every ``old`` in ``original`` with the secret's value for ``key``."""
    replacement = secret.data.get(key, b"").decode("utf-8", errors="replace")
    return original.replace(old, replacement)


def patch_secrets_into_string(client: SecretClient, text: str) -> str:
    """Resolve every placeholder in ``text`` from the secrets in ``client``."""
    for placeholder in remove_duplicates(find_placeholders(text)):
        parts = parse_placeholder(placeholder)
        if parts is None:
            return text
        name, namespace, key = parts
        try:
            secret = get_secret(client, name, namespace)
        except KubeError as exc:
            logger.info("failed to patch secret, %s", exc)
            raise
        text = replace_placeholder_with_secret_value(text, placeholder, secret, key)
    return text


def patch_secrets_into_headers(
    client: SecretClient, headers: dict[str, list[str]]
) -> dict[str, list[str]]:
    """Return a copy of ``headers`` with placeholders in every value resolved."""
    return {
        name: [patch_secrets_into_string(client, value) for value in values]
        for name, values in headers.items()
    }


def _patch_value(client: SecretClient, value: Any) -> Any:
    if isinstance(value, str):
        return patch_secrets_into_string(client, value)
    if isinstance(value, dict):
        return {key: _patch_value(client, item) for key, item in value.items()}
    if isinstance(value, list):
        return [_patch_value(client, item) for item in value]
    return value


def patch_secrets_into_map(client: SecretClient, data: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of ``data`` with placeholders in all nested strings resolved."""
    return _patch_value(client, data)