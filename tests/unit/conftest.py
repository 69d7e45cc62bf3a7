"""Shared fakes for claim handler tests."""

from __future__ import annotations

import base64
import copy
from typing import Any

import pytest
from kubernetes import client

from quobject_operator.config import OperatorConfig
from quobject_operator.constants import FINALIZER
from quobject_operator.utils.errors import ClaimConflictError


def encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("utf-8")


def make_claim(
    name: str = "logs",
    namespace: str = "team-a",
    spec: dict[str, Any] | None = None,
    status: dict[str, Any] | None = None,
    finalizers: list[str] | None = None,
    annotations: dict[str, str] | None = None,
    deletion_timestamp: str | None = None,
) -> dict[str, Any]:
    """Build a claim body the way the API server returns it."""
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "uid": f"uid-{namespace}-{name}",
        "generation": 1,
        "resourceVersion": "1",
        "finalizers": list(finalizers or []),
        "annotations": dict(annotations or {}),
    }
    if deletion_timestamp:
        metadata["deletionTimestamp"] = deletion_timestamp
    claim: dict[str, Any] = {
        "apiVersion": "quobject.io/v1alpha1",
        "kind": "QuObjectBucketClaim",
        "metadata": metadata,
        "spec": dict(spec or {}),
    }
    if status is not None:
        claim["status"] = dict(status)
    return claim


class FakeClaimStore:
    """In-memory claim store with resourceVersion checks on the finalizer write."""

    def __init__(self, journal: list[tuple[str, ...]] | None = None):
        self.claims: dict[tuple[str, str], dict[str, Any]] = {}
        self.journal = journal if journal is not None else []
        self.status_writes: list[dict[str, Any]] = []
        self.fail_status_with: Exception | None = None

    def put(self, claim: dict[str, Any]) -> None:
        meta = claim["metadata"]
        self.claims[(meta["namespace"], meta["name"])] = copy.deepcopy(claim)

    def stored(self, namespace: str = "team-a", name: str = "logs") -> dict[str, Any] | None:
        return self.claims.get((namespace, name))

    def _bump(self, stored: dict[str, Any]) -> dict[str, Any]:
        meta = stored["metadata"]
        meta["resourceVersion"] = str(int(meta.get("resourceVersion", "0")) + 1)
        return copy.deepcopy(stored)

    def _lookup(self, claim: dict[str, Any]) -> dict[str, Any]:
        meta = claim["metadata"]
        return self.claims[(meta["namespace"], meta["name"])]

    def get(self, namespace: str, name: str) -> dict[str, Any] | None:
        self.journal.append(("store", "get"))
        stored = self.claims.get((namespace, name))
        return copy.deepcopy(stored) if stored is not None else None

    def add_finalizer(self, claim: dict[str, Any]) -> dict[str, Any]:
        self.journal.append(("store", "add_finalizer"))
        stored = self._lookup(claim)
        if stored["metadata"]["resourceVersion"] != claim["metadata"].get("resourceVersion"):
            raise ClaimConflictError("resourceVersion mismatch")
        finalizers = stored["metadata"].setdefault("finalizers", [])
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
        return self._bump(stored)

    def set_annotations(self, claim: dict[str, Any], annotations: dict[str, str]) -> dict[str, Any]:
        self.journal.append(("store", "set_annotations"))
        stored = self._lookup(claim)
        stored["metadata"].setdefault("annotations", {}).update(annotations)
        return self._bump(stored)

    def update_status(self, claim: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
        self.journal.append(("store", "update_status"))
        if self.fail_status_with is not None:
            raise self.fail_status_with
        stored = self._lookup(claim)
        self.status_writes.append(copy.deepcopy(fields))
        stored.setdefault("status", {}).update(copy.deepcopy(fields))
        return self._bump(stored)


class FakeStorageBackend:
    """In-memory S3 backend following the composite operation semantics."""

    def __init__(self, journal: list[tuple[str, ...]] | None = None):
        self.buckets: dict[str, set[str]] = {}
        self.journal = journal if journal is not None else []
        self.errors: dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def bucket_exists(self, name: str) -> bool:
        self.journal.append(("backend", "bucket_exists", name))
        return name in self.buckets

    def create_bucket(self, name: str, region: str | None = None) -> None:
        self.journal.append(("backend", "create_bucket", name))
        self._maybe_fail("create_bucket")
        self.buckets.setdefault(name, set())

    def list_object_keys(self, name: str) -> list[str]:
        self.journal.append(("backend", "list_object_keys", name))
        return sorted(self.buckets.get(name, set()))

    def delete_object(self, name: str, key: str) -> None:
        self.journal.append(("backend", "delete_object", name, key))
        self._maybe_fail("delete_object")
        self.buckets.get(name, set()).discard(key)

    def delete_bucket(self, name: str) -> None:
        self.journal.append(("backend", "delete_bucket", name))
        self._maybe_fail("delete_bucket")
        self.buckets.pop(name, None)

    def ensure_bucket(self, name: str, region: str | None = None) -> bool:
        self._maybe_fail("ensure_bucket")
        if self.bucket_exists(name):
            return False
        self.create_bucket(name, region)
        return True

    def empty_and_delete_bucket(self, name: str) -> int:
        self._maybe_fail("empty_and_delete_bucket")
        if name not in self.buckets:
            return 0
        keys = self.list_object_keys(name)
        for key in keys:
            self.delete_object(name, key)
        self.delete_bucket(name)
        return len(keys)


class FakeCoreApi:
    """CoreV1Api stand-in keeping Secrets and ConfigMaps in dictionaries."""

    def __init__(self):
        self.secrets: dict[tuple[str, str], client.V1Secret] = {}
        self.config_maps: dict[tuple[str, str], client.V1ConfigMap] = {}
        self.fail_writes_with: Exception | None = None

    def add_credentials(self, namespace: str = "quobject-controller", name: str = "s3-credentials", **fields: str) -> None:
        data = {
            "endpoint": "s3.example.com",
            "region": "eu-central-1",
            "accessKey": "AKIAEXAMPLE",
            "secretKey": "secret-example",
        }
        data.update(fields)
        self.secrets[(namespace, name)] = client.V1Secret(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            data={key: encode(value) for key, value in data.items()},
        )

    @staticmethod
    def _read(store: dict, name: str, namespace: str) -> Any:
        if (namespace, name) not in store:
            raise client.exceptions.ApiException(status=404, reason="Not Found")
        return copy.deepcopy(store[(namespace, name)])

    def _write(self, store: dict, namespace: str, body: Any) -> Any:
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        store[(namespace, body.metadata.name)] = copy.deepcopy(body)
        return body

    def read_namespaced_secret(self, name: str, namespace: str) -> client.V1Secret:
        return self._read(self.secrets, name, namespace)

    def create_namespaced_secret(self, namespace: str, body: client.V1Secret, field_manager: str | None = None) -> client.V1Secret:
        return self._write(self.secrets, namespace, body)

    def replace_namespaced_secret(
        self, name: str, namespace: str, body: client.V1Secret, field_manager: str | None = None
    ) -> client.V1Secret:
        return self._write(self.secrets, namespace, body)

    def read_namespaced_config_map(self, name: str, namespace: str) -> client.V1ConfigMap:
        return self._read(self.config_maps, name, namespace)

    def create_namespaced_config_map(
        self, namespace: str, body: client.V1ConfigMap, field_manager: str | None = None
    ) -> client.V1ConfigMap:
        return self._write(self.config_maps, namespace, body)

    def replace_namespaced_config_map(
        self, name: str, namespace: str, body: client.V1ConfigMap, field_manager: str | None = None
    ) -> client.V1ConfigMap:
        return self._write(self.config_maps, namespace, body)


@pytest.fixture
def journal() -> list[tuple[str, ...]]:
    return []


@pytest.fixture
def store(journal) -> FakeClaimStore:
    return FakeClaimStore(journal)


@pytest.fixture
def backend(journal) -> FakeStorageBackend:
    return FakeStorageBackend(journal)


@pytest.fixture
def core_api() -> FakeCoreApi:
    api = FakeCoreApi()
    api.add_credentials()
    return api


@pytest.fixture
def operator_config() -> OperatorConfig:
    return OperatorConfig()


@pytest.fixture
def claim_factory():
    return make_claim
