"""Access to Kubernetes-style Secrets through a small client interface."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable

__all__ = [
    "KubeError",
    "SecretNotFoundError",
    "OwnerReference",
    "Secret",
    "SecretClient",
    "InMemorySecretClient",
    "get_secret",
    "get_or_create_secret",
    "update_secret",
    "set_owner_reference",
    "has_owner_reference",
]


class KubeError(Exception):
    """Raised when an operation against the secret store fails."""


class SecretNotFoundError(KubeError):
    """Raised when a requested secret does not exist."""


@dataclass
class OwnerReference:
    """A reference from a secret to the object that owns it."""

    api_version: str
    kind: str
    name: str
    uid: str


@dataclass
class Secret:
    """A named, namespaced collection of byte values with metadata."""

    name: str
    namespace: str
    data: dict[str, bytes] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)


class SecretClient(ABC):
    """Interface to a store of secrets."""

    @abstractmethod
    def get(self, name: str, namespace: str) -> Secret:
        """Return the secret, raising :class:`SecretNotFoundError` if it is absent."""

    @abstractmethod
    def create(self, secret: Secret) -> None:
        """Store a new secret, raising :class:`KubeError` if it already exists."""

    @abstractmethod
    def update(self, secret: Secret) -> None:
        """Replace an existing secret, raising :class:`SecretNotFoundError` if it is absent."""


class InMemorySecretClient(SecretClient):
    """A secret store kept in a dictionary; values are copied in and out."""

    def __init__(self, secrets: Iterable[Secret] = ()) -> None:
        self._store: dict[tuple[str, str], Secret] = {
            (secret.namespace, secret.name): copy.deepcopy(secret) for secret in secrets
        }

    def get(self, name: str, namespace: str) -> Secret:
        try:
            return copy.deepcopy(self._store[(namespace, name)])
        except KeyError:
            raise SecretNotFoundError(f'secrets "{name}" not found') from None

    def create(self, secret: Secret) -> None:
        key = (secret.namespace, secret.name)
        if key in self._store:
            raise KubeError(f'secrets "{secret.name}" already exists')
        self._store[key] = copy.deepcopy(secret)

    def update(self, secret: Secret) -> None:
        key = (secret.namespace, secret.name)
        if key not in self._store:
            raise SecretNotFoundError(f'secrets "{secret.name}" not found')
        self._store[key] = copy.deepcopy(secret)


def _wrap(message: str, exc: Exception) -> KubeError:
    cls = SecretNotFoundError if isinstance(exc, SecretNotFoundError) else KubeError
    return cls(f"{message}: {exc}")


def get_secret(client: SecretClient, name: str, namespace: str) -> Secret:
    """Fetch a secret from ``client``."""
    try:
        return client.get(name, namespace)
    except KubeError as exc:
        raise _wrap(f"failed to get secret {name}:{namespace}", exc) from exc


def _group(api_version: str) -> str:
    return api_version.split("/", 1)[0] if "/" in api_version else ""


def _refers_to_same_object(a: OwnerReference, b: OwnerReference) -> bool:
    return (_group(a.api_version), a.kind, a.name) == (_group(b.api_version), b.kind, b.name)


def set_owner_reference(secret: Secret, owner: Any) -> None:
    """Add or replace the owner reference to ``owner`` on ``secret``.

    ``owner`` needs ``api_version``, ``kind``, ``name`` and ``uid`` attributes and
    may have a ``namespace``.
    """
    kind = getattr(owner, "kind", "")
    if not kind:
        raise KubeError("owner has no kind")
    owner_namespace = getattr(owner, "namespace", "") or ""
    if owner_namespace and owner_namespace != secret.namespace:
        raise KubeError(
            "cross-namespace owner references are disallowed, "
            f"owner's namespace {owner_namespace}, obj's namespace {secret.namespace}"
        )
    reference = OwnerReference(
        api_version=getattr(owner, "api_version", ""),
        kind=kind,
        name=getattr(owner, "name", ""),
        uid=getattr(owner, "uid", ""),
    )
    for position, existing in enumerate(secret.owner_references):
        if _refers_to_same_object(existing, reference):
            secret.owner_references[position] = reference
            return
    secret.owner_references.append(reference)


def has_owner_reference(secret: Secret, owner: Any) -> bool:
    """Return True if ``secret`` already refers to ``owner`` by uid."""
    uid = getattr(owner, "uid", None)
    return any(ref.uid == uid for ref in secret.owner_references)


def update_secret(client: SecretClient, secret: Secret) -> None:
    """Write ``secret`` back to ``client``."""
    try:
        client.update(secret)
    except KubeError as exc:
        raise _wrap("update secret failed", exc) from exc


def _create_secret(client: SecretClient, name: str, namespace: str, owner: Any) -> Secret:
    secret = Secret(name=name, namespace=namespace)
    if owner is not None:
        try:
            set_owner_reference(secret, owner)
        except KubeError as exc:
            raise KubeError(f"could not set owner reference to secret: {exc}") from exc
    try:
        client.create(secret)
    except KubeError as exc:
        raise KubeError(f"create secret failed: {exc}") from exc
    return secret


def get_or_create_secret(client: SecretClient, name: str, namespace: str, owner: Any) -> Secret:
    """Fetch a secret, creating it if missing and adding the owner reference if absent."""
    try:
        secret = get_secret(client, name, namespace)
    except SecretNotFoundError:
        return _create_secret(client, name, namespace, owner)

    if owner is not None and not has_owner_reference(secret, owner):
        try:
            set_owner_reference(secret, owner)
        except KubeError as exc:
            raise KubeError(f"could not set owner reference to secret: {exc}") from exc
        update_secret(client, secret)
    return secret