"""Create-or-update helpers for claim-owned Secrets and ConfigMaps."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client

from .. import metrics
from ..constants import FIELD_MANAGER
from .context import check_deadline

logger = logging.getLogger(__name__)


def merge_owner_references(
    existing: list[client.V1OwnerReference] | None,
    desired: list[client.V1OwnerReference] | None,
) -> list[client.V1OwnerReference]:
    """Add desired owner references whose uid is not referenced yet."""
    merged = list(existing or [])
    known_uids = {ref.uid for ref in merged}
    for ref in desired or []:
        if ref.uid not in known_uids:
            merged.append(ref)
            known_uids.add(ref.uid)
    return merged


def _upsert(
    artifact: str,
    desired: Any,
    read: Callable[..., Any],
    create: Callable[..., Any],
    replace: Callable[..., Any],
    apply_payload: Callable[[Any, Any], None],
) -> Any:
    """Fetch by name, create when absent, otherwise overwrite the payload and replace."""
    name = desired.metadata.name
    namespace = desired.metadata.namespace

    check_deadline(f"read_{artifact}")
    try:
        existing = read(name=name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status != 404:
            metrics.artifact_operations_total.labels(artifact=artifact, operation="read", result="error").inc()
            raise
        existing = None

    start_time = time.time()
    operation = "create" if existing is None else "update"
    check_deadline(f"{operation}_{artifact}")
    try:
        if existing is None:
            applied = create(namespace=namespace, body=desired, field_manager=FIELD_MANAGER)
            logger.info(f"Created {artifact} {namespace}/{name}")
        else:
            # Keep uid, resourceVersion and the rest of the stored identity
            apply_payload(existing, desired)
            existing.metadata.owner_references = merge_owner_references(
                existing.metadata.owner_references, desired.metadata.owner_references
            )
            applied = replace(name=name, namespace=namespace, body=existing, field_manager=FIELD_MANAGER)
            logger.debug(f"Updated {artifact} {namespace}/{name}")
        metrics.artifact_operations_total.labels(artifact=artifact, operation=operation, result="success").inc()
        return applied
    except Exception:
        metrics.artifact_operations_total.labels(artifact=artifact, operation=operation, result="error").inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation=f"{operation}_{artifact}").observe(duration)


def _apply_secret_payload(existing: client.V1Secret, desired: client.V1Secret) -> None:
    existing.data = desired.data
    existing.string_data = None
    existing.type = desired.type


def _apply_config_map_payload(existing: client.V1ConfigMap, desired: client.V1ConfigMap) -> None:
    existing.data = desired.data


def upsert_secret(api: client.CoreV1Api, secret: client.V1Secret) -> client.V1Secret:
    """Create or fully overwrite a Secret.

    Args:
        api: Kubernetes CoreV1Api instance
        secret: Desired secret, including owner references

    Returns:
        Secret as stored by the API server
    """
    return _upsert(
        "secret",
        secret,
        api.read_namespaced_secret,
        api.create_namespaced_secret,
        api.replace_namespaced_secret,
        _apply_secret_payload,
    )


def upsert_config_map(api: client.CoreV1Api, config_map: client.V1ConfigMap) -> client.V1ConfigMap:
    """Create or fully overwrite a ConfigMap.

    Args:
        api: Kubernetes CoreV1Api instance
        config_map: Desired config map, including owner references

    Returns:
        ConfigMap as stored by the API server
    """
    return _upsert(
        "configmap",
        config_map,
        api.read_namespaced_config_map,
        api.create_namespaced_config_map,
        api.replace_namespaced_config_map,
        _apply_config_map_payload,
    )
