"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_ARTIFACTS_SYNCED,
    EVENT_REASON_BUCKET_CREATED,
    EVENT_REASON_BUCKET_DELETE_FAILED,
    EVENT_REASON_BUCKET_DELETED,
    EVENT_REASON_BUCKET_RETAINED,
    EVENT_REASON_CLAIM_BOUND,
    EVENT_REASON_FINALIZER_ADDED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Full resource body (apiVersion, kind, metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_finalizer_added(body: dict[str, Any]) -> None:
    """Emit finalizer added event."""
    emit_event(body, EVENT_REASON_FINALIZER_ADDED, "Finalizer added, claim is now protected")


def emit_bucket_created(body: dict[str, Any], bucket_name: str) -> None:
    """Emit bucket created event."""
    emit_event(body, EVENT_REASON_BUCKET_CREATED, f"Bucket {bucket_name} created")


def emit_bucket_deleted(body: dict[str, Any], bucket_name: str) -> None:
    """Emit bucket deleted event."""
    emit_event(body, EVENT_REASON_BUCKET_DELETED, f"Bucket {bucket_name} deleted")


def emit_bucket_retained(body: dict[str, Any], bucket_name: str) -> None:
    """Emit bucket retained event."""
    emit_event(body, EVENT_REASON_BUCKET_RETAINED, f"Bucket {bucket_name} retained")


def emit_bucket_delete_failed(body: dict[str, Any], message: str) -> None:
    """Emit bucket delete failed event."""
    emit_event(body, EVENT_REASON_BUCKET_DELETE_FAILED, message, type_="Warning")


def emit_artifacts_synced(body: dict[str, Any], secret_name: str, config_map_name: str) -> None:
    """Emit artifacts synced event."""
    emit_event(
        body,
        EVENT_REASON_ARTIFACTS_SYNCED,
        f"Secret {secret_name} and ConfigMap {config_map_name} are up to date",
    )


def emit_claim_bound(body: dict[str, Any], bucket_name: str) -> None:
    """Emit claim bound event."""
    emit_event(body, EVENT_REASON_CLAIM_BOUND, f"Claim bound to bucket {bucket_name}")
