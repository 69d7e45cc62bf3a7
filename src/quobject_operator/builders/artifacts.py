"""Builders for the credentials Secret and configuration ConfigMap of a claim."""

from __future__ import annotations

import base64
from typing import Any

from kubernetes import client

from ..constants import (
    API_GROUP_VERSION,
    CONFIG_MAP_NAME_SUFFIX,
    FIELD_MANAGER,
    KEY_ACCESS_KEY_ID,
    KEY_BUCKET_HOST,
    KEY_BUCKET_NAME,
    KEY_BUCKET_PORT,
    KEY_BUCKET_REGION,
    KEY_SECRET_ACCESS_KEY,
    KIND_BUCKET_CLAIM,
    LABEL_CLAIM_NAME,
    LABEL_MANAGED_BY,
    SECRET_NAME_SUFFIX,
)
from ..services.aws.models import StorageCredentials


def secret_name_for(claim_name: str) -> str:
    """Name of the credentials Secret for a claim."""
    return f"{claim_name}{SECRET_NAME_SUFFIX}"


def config_map_name_for(claim_name: str) -> str:
    """Name of the configuration ConfigMap for a claim."""
    return f"{claim_name}{CONFIG_MAP_NAME_SUFFIX}"


def build_owner_reference(claim: dict[str, Any]) -> client.V1OwnerReference:
    """Owner reference that lets the garbage collector remove artifacts with the claim.

    Raises:
        ValueError: If the claim has no uid yet
    """
    meta = claim.get("metadata") or {}
    uid = meta.get("uid")
    if not uid:
        raise ValueError(f"Claim {meta.get('name', 'unknown')} has no uid, cannot own artifacts")
    return client.V1OwnerReference(
        api_version=claim.get("apiVersion", API_GROUP_VERSION),
        kind=claim.get("kind", KIND_BUCKET_CLAIM),
        name=meta["name"],
        uid=uid,
        controller=True,
        block_owner_deletion=True,
    )


def _artifact_metadata(claim: dict[str, Any], name: str) -> client.V1ObjectMeta:
    meta = claim.get("metadata") or {}
    return client.V1ObjectMeta(
        name=name,
        namespace=meta.get("namespace", "default"),
        labels={
            LABEL_MANAGED_BY: FIELD_MANAGER,
            LABEL_CLAIM_NAME: meta.get("name", "unknown"),
        },
        owner_references=[build_owner_reference(claim)],
    )


def build_credentials_secret(
    claim: dict[str, Any],
    credentials: StorageCredentials,
    bucket_name: str,
) -> client.V1Secret:
    """Build the desired credentials Secret for a claim.

    Args:
        claim: Claim body
        credentials: Storage credentials handed out to the claim's workloads
        bucket_name: Resolved bucket name

    Returns:
        Secret with base64-encoded data and an owner reference to the claim
    """
    meta = claim.get("metadata") or {}
    payload = {
        KEY_ACCESS_KEY_ID: credentials.access_key,
        KEY_SECRET_ACCESS_KEY: credentials.secret_key,
        KEY_BUCKET_NAME: bucket_name,
        KEY_BUCKET_HOST: credentials.endpoint,
        KEY_BUCKET_REGION: credentials.region,
    }
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=_artifact_metadata(claim, secret_name_for(meta.get("name", "unknown"))),
        type="Opaque",
        data={k: base64.b64encode(v.encode("utf-8")).decode("utf-8") for k, v in payload.items()},
    )


def build_config_map(
    claim: dict[str, Any],
    credentials: StorageCredentials,
    bucket_name: str,
) -> client.V1ConfigMap:
    """Build the desired configuration ConfigMap for a claim."""
    meta = claim.get("metadata") or {}
    return client.V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=_artifact_metadata(claim, config_map_name_for(meta.get("name", "unknown"))),
        data={
            KEY_BUCKET_NAME: bucket_name,
            KEY_BUCKET_HOST: credentials.endpoint,
            KEY_BUCKET_REGION: credentials.region,
            KEY_BUCKET_PORT: str(credentials.port),
        },
    )
