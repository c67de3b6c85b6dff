from dataclasses import dataclass

import pytest

from httpreqkit.kube import (
    InMemorySecretClient,
    KubeError,
    OwnerReference,
    Secret,
    SecretClient,
    SecretNotFoundError,
    get_or_create_secret,
    get_secret,
    has_owner_reference,
    set_owner_reference,
    update_secret,
)


@dataclass
class Owner:
    api_version: str
    kind: str
    name: str
    uid: str
    namespace: str = ""


OWNER = Owner("http.example.com/v1alpha2", "Request", "req", "uid-1")


class BrokenClient(SecretClient):
    def __init__(self):
        self.created = []

    def get(self, name, namespace):
        raise KubeError("boom")

    def create(self, obj):
        self.created.append(obj)

    def update(self, obj):
        raise KubeError("boom")


def test_get_secret_missing_raises_not_found():
    client = InMemorySecretClient()
    with pytest.raises(SecretNotFoundError, match="failed to get secret missing:default"):
        get_secret(client, "missing", "default")


def test_get_secret_returns_stored_value():
    stored = Secret("s", "ns", data={"key": b"value"})
    client = InMemorySecretClient([stored])
    assert get_secret(client, "s", "ns") == stored


def test_client_returns_copies():
    client = InMemorySecretClient([Secret("s", "ns", data={"key": b"value"})])
    fetched = client.get("s", "ns")
    fetched.data["key"] = b"changed"
    assert client.get("s", "ns").data == {"key": b"value"}


def test_get_or_create_creates_without_owner():
    client = InMemorySecretClient()
    record = get_or_create_secret(client, "s", "ns", None)
    assert (record.name, record.namespace) == ("s", "ns")
    assert client.get("s", "ns").owner_references == []


def test_get_or_create_creates_with_owner():
    client = InMemorySecretClient()
    record = get_or_create_secret(client, "s", "ns", OWNER)
    assert [ref.uid for ref in record.owner_references] == [OWNER.uid]
    assert client.get("s", "ns").owner_references == record.owner_references


def test_get_or_create_adds_missing_owner_to_existing_secret():
    client = InMemorySecretClient([Secret("s", "ns", data={"key": b"value"})])
    record = get_or_create_secret(client, "s", "ns", OWNER)
    stored = client.get("s", "ns")
    assert stored.data == {"key": b"value"}
    assert has_owner_reference(stored, OWNER)
    assert stored == record


def test_get_or_create_does_not_duplicate_owner():
    client = InMemorySecretClient()
    get_or_create_secret(client, "s", "ns", OWNER)
    record = get_or_create_secret(client, "s", "ns", OWNER)
    assert len(record.owner_references) == 1


def test_get_or_create_rejects_cross_namespace_owner():
    client = InMemorySecretClient()
    owner = Owner("v1", "Request", "req", "uid-2", namespace="other")
    with pytest.raises(KubeError, match="could not set owner reference to secret"):
        get_or_create_secret(client, "s", "ns", owner)
    with pytest.raises(SecretNotFoundError):
        client.get("s", "ns")


def test_get_or_create_propagates_other_errors():
    client = BrokenClient()
    with pytest.raises(KubeError, match="boom") as info:
        get_or_create_secret(client, "s", "ns", None)
    assert not isinstance(info.value, SecretNotFoundError)
    assert client.created == []


def test_update_missing_secret_raises():
    client = InMemorySecretClient()
    with pytest.raises(SecretNotFoundError, match="update secret failed"):
        update_secret(client, Secret("s", "ns"))


def test_update_secret_persists():
    client = InMemorySecretClient([Secret("s", "ns")])
    record = client.get("s", "ns")
    record.labels["app"] = "demo"
    update_secret(client, record)
    assert client.get("s", "ns").labels == {"app": "demo"}


def test_create_duplicate_raises():
    client = InMemorySecretClient([Secret("s", "ns")])
    with pytest.raises(KubeError):
        client.create(Secret("s", "ns"))


def test_set_owner_reference_replaces_same_object():
    record = Secret("s", "ns")
    set_owner_reference(record, OWNER)
    replacement = Owner(OWNER.api_version, OWNER.kind, OWNER.name, "uid-new")
    set_owner_reference(record, replacement)
    assert [ref.uid for ref in record.owner_references] == ["uid-new"]


def test_set_owner_reference_appends_different_object():
    record = Secret("s", "ns")
    set_owner_reference(record, OWNER)
    set_owner_reference(record, Owner(OWNER.api_version, OWNER.kind, "other", "uid-3"))
    assert [ref.name for ref in record.owner_references] == ["req", "other"]


def test_set_owner_reference_requires_kind():
    with pytest.raises(KubeError):
        set_owner_reference(Secret("s", "ns"), Owner("v1", "", "req", "uid-1"))


def test_has_owner_reference():
    record = Secret("s", "ns", owner_references=[OwnerReference("v1", "Request", "req", "uid-1")])
    assert has_owner_reference(record, OWNER)
    assert not has_owner_reference(record, Owner("v1", "Request", "req", "uid-9"))