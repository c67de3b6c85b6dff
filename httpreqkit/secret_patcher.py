"""Copying values from HTTP responses into secrets and masking them afterwards."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from httpreqkit import jq
from httpreqkit.jsonutil import convert_json_strings_to_maps, struct_to_map
from httpreqkit.kube import Secret, SecretClient, update_secret
from httpreqkit.messages import HttpResponse

__all__ = [
    "update_secret_labels_and_annotations",
    "update_secret_with_patched_value",
    "prepare_data_map",
    "extract_value_to_patch",
    "update_secret_data",
    "replace_sensitive_values",
    "is_secret_data_up_to_date",
    "sync_map",
]

logger = logging.getLogger(__name__)


def update_secret_labels_and_annotations(
    client: SecretClient,
    data: HttpResponse,
    secret: Secret,
    labels: dict[str, str] | None,
    annotations: dict[str, str] | None,
) -> None:
    """Bring the secret's labels and annotations in line with the desired ones.

    Desired values that are jq queries are resolved against the response. The
    secret is written back only if something changed.
    """
    data_map = prepare_data_map(data)

    updated = sync_map(secret.labels, labels, data_map)
    updated = sync_map(secret.annotations, annotations, data_map) or updated

    if updated:
        logger.debug(
            "Updating labels and annotations for Secret [%s/%s]", secret.namespace, secret.name
        )
        update_secret(client, secret)
        return

    logger.debug(
        "No updates required for labels and annotations of Secret [%s/%s]",
        secret.namespace,
        secret.name,
    )


def update_secret_with_patched_value(
    client: SecretClient,
    data: HttpResponse,
    secret: Secret,
    secret_key: str,
    request_field_path: str,
) -> None:
    """Store a value taken from the response under ``secret_key`` and mask it in the response."""
    data_map = prepare_data_map(data)
    value = extract_value_to_patch(data_map, request_field_path)

    if is_secret_data_up_to_date(secret, secret_key, value):
        return

    update_secret_data(secret, secret_key, value)
    replace_sensitive_values(data, secret, secret_key, value)
    update_secret(client, secret)


def prepare_data_map(data: HttpResponse) -> dict[str, Any]:
    """Turn a response into a dict, decoding JSON object strings such as the body."""
    try:
        data_map = struct_to_map(data)
    except ValueError as exc:
        raise ValueError(f"failed to convert data to map: {exc}") from exc
    if data_map is None:
        data_map = {}
    convert_json_strings_to_maps(data_map)
    return data_map


def _format_number(number: float) -> str:
    return format(Decimal(repr(float(number))).normalize(), "f")


def extract_value_to_patch(data_map: dict[str, Any], request_field_path: str) -> str:
    """Evaluate ``request_field_path`` and render the result as a string.

    Strings are returned as they are, booleans and numbers are formatted, and
    anything else yields an empty string.
    """
    try:
        return jq.parse_string(request_field_path, data_map)
    except jq.JQError as exc:
        string_error = exc
        logger.debug("Failed to parse the field %s as a string: %s", request_field_path, exc)

    try:
        return "true" if jq.parse_bool(request_field_path, data_map) else "false"
    except jq.JQError as exc:
        logger.debug("Failed to parse the field %s as a boolean: %s", request_field_path, exc)

    try:
        return _format_number(jq.parse_float(request_field_path, data_map))
    except jq.JQError as exc:
        logger.debug("Failed to parse the field %s as a number: %s", request_field_path, exc)

    logger.info(
        "Failed to parse the field %s as a string, boolean, or number: %s, "
        "setting an empty string instead.",
        request_field_path,
        string_error,
    )
    return ""


def update_secret_data(secret: Secret, secret_key: str, value: str) -> None:
    """Set ``secret_key`` in the secret's data to ``value``."""
    secret.data[secret_key] = value.encode()


def replace_sensitive_values(data: HttpResponse, secret: Secret, secret_key: str, value: str) -> None:
    """Replace ``value`` in the response body and headers with a secret placeholder."""
    if not value:
        return

    placeholder = f"{{{{{secret.name}:{secret.namespace}:{secret_key}}}}}"
    data.body = data.body.replace(value, placeholder)

    for values in (data.headers or {}).values():
        values[:] = [header.replace(value, placeholder) for header in values]


def is_secret_data_up_to_date(secret: Secret, secret_key: str, value: str) -> bool:
    """Return True if the secret already holds ``value`` under ``secret_key``."""
    current = secret.data.get(secret_key)
    return current is not None and current == value.encode()


def sync_map(
    existing: dict[str, str],
    desired: dict[str, str] | None,
    data_map: dict[str, Any],
) -> bool:
    """Make ``existing`` equal to ``desired`` in place and report whether it changed.

    Desired values that are jq queries are replaced by their non-empty result.
    """
    desired = desired or {}
    changed = False

    for key, value in desired.items():
        if jq.is_jq_query(value):
            resolved = extract_value_to_patch(data_map, value)
            if resolved:
                value = resolved
        if existing.get(key) != value:
            existing[key] = value
            changed = True

    for key in [key for key in existing if key not in desired]:
        del existing[key]
        changed = True

    return changed