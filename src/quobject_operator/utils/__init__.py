"""Utility functions for the QuObject Operator."""

from .artifacts import merge_owner_references, upsert_config_map, upsert_secret
from .conditions import (
    clear_failure_conditions,
    set_ready_condition,
    update_condition,
)
from .context import (
    check_deadline,
    get_context_dict,
    get_correlation_id,
    reconcile_deadline,
    set_correlation_id,
    with_correlation_id,
)
from .errors import (
    ArtifactSyncError,
    BucketProvisioningError,
    ClaimConflictError,
    ClaimReconcileError,
    CredentialsError,
    DeadlineExceeded,
)
from .events import emit_event
from .secrets import read_secret_data

__all__ = [
    "update_condition",
    "set_ready_condition",
    "clear_failure_conditions",
    "emit_event",
    "read_secret_data",
    "upsert_secret",
    "upsert_config_map",
    "merge_owner_references",
    "get_context_dict",
    "get_correlation_id",
    "set_correlation_id",
    "with_correlation_id",
    "reconcile_deadline",
    "check_deadline",
    "ClaimReconcileError",
    "CredentialsError",
    "BucketProvisioningError",
    "ArtifactSyncError",
    "ClaimConflictError",
    "DeadlineExceeded",
]
