"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_ARTIFACTS_NOT_SYNCED,
    COND_BUCKET_NOT_READY,
    COND_CREDENTIALS_INVALID,
    COND_READY,
)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition, returning a new conditions list.

    The input list is not modified, since it usually comes straight from the
    claim body kopf hands to the handler.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()
    result = copy.deepcopy(list(conditions or []))

    existing_idx = None
    for idx, cond in enumerate(result):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = result[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        result[existing_idx] = new_condition
    else:
        result.append(new_condition)

    return result


def clear_condition(conditions: list[dict[str, Any]], condition_type: str) -> list[dict[str, Any]]:
    """Return conditions without the given type."""
    return [copy.deepcopy(cond) for cond in conditions or [] if cond.get("type") != condition_type]


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "Bound" if status else "NotBound",
        message,
        observed_generation,
    )


def set_credentials_invalid_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the CredentialsInvalid condition."""
    return update_condition(
        conditions,
        COND_CREDENTIALS_INVALID,
        "True",
        "CredentialsUnavailable",
        message,
        observed_generation,
    )


def set_bucket_not_ready_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the BucketNotReady condition."""
    return update_condition(
        conditions,
        COND_BUCKET_NOT_READY,
        "True",
        "BucketNotReady",
        message,
        observed_generation,
    )


def set_artifacts_not_synced_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ArtifactsNotSynced condition."""
    return update_condition(
        conditions,
        COND_ARTIFACTS_NOT_SYNCED,
        "True",
        "ArtifactsNotSynced",
        message,
        observed_generation,
    )


def clear_failure_conditions(conditions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop every failure condition, keeping Ready and foreign types."""
    result = conditions
    for condition_type in (COND_CREDENTIALS_INVALID, COND_BUCKET_NOT_READY, COND_ARTIFACTS_NOT_SYNCED):
        result = clear_condition(result, condition_type)
    return result
