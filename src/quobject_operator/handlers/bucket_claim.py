"""Handler for QuObjectBucketClaim CRD."""

from __future__ import annotations

import uuid
from typing import Any, Callable

import kopf
from kubernetes import client

from .. import metrics
from ..builders.artifacts import build_config_map, build_credentials_secret
from ..builders.bucket_name import SuffixSource, generate_suffix, resolve_bucket_name
from ..builders.storage import create_storage_client, load_storage_credentials
from ..config import OperatorConfig, get_config
from ..constants import (
    ANNOTATION_BUCKET_NAME,
    ANNOTATION_RESYNC,
    ANNOTATION_RETAIN_POLICY,
    API_GROUP_VERSION,
    DEFAULT_RETAIN_POLICY,
    FINALIZER,
    KIND_BUCKET_CLAIM,
    PHASE_BOUND,
    PHASE_ERROR,
    PHASE_PENDING,
    RETAIN_POLICY_DELETE,
    RETAIN_POLICY_RETAIN,
)
from ..services.aws.models import StorageCredentials
from ..services.k8s.claims import ClaimStore
from ..services.s3.base import StorageBackend
from ..tracing import add_span_attribute, trace_span
from ..utils.artifacts import upsert_config_map, upsert_secret
from ..utils.conditions import (
    clear_failure_conditions,
    set_artifacts_not_synced_condition,
    set_bucket_not_ready_condition,
    set_credentials_invalid_condition,
    set_ready_condition,
)
from ..utils.context import reconcile_deadline, with_correlation_id
from ..utils.errors import (
    ArtifactSyncError,
    BucketProvisioningError,
    ClaimConflictError,
    ClaimReconcileError,
    CredentialsError,
    DeadlineExceeded,
    sanitize_exception,
)
from ..utils.events import (
    emit_artifacts_synced,
    emit_bucket_created,
    emit_bucket_delete_failed,
    emit_bucket_deleted,
    emit_bucket_retained,
    emit_claim_bound,
    emit_finalizer_added,
)
from .base import BaseHandler
from .shared import get_core_v1_client, get_k8s_client

ClientFactory = Callable[[StorageCredentials, OperatorConfig], StorageBackend]
ConditionSetter = Callable[..., list[dict[str, Any]]]


class BucketClaimHandler(BaseHandler):
    """Handler for QuObjectBucketClaim resources.

    Each pass re-reads the claim and the storage credentials and builds a new
    storage client, so nothing carries over between passes except what was
    written back to the claim.
    """

    def __init__(
        self,
        store: ClaimStore | None = None,
        core_api: client.CoreV1Api | None = None,
        client_factory: ClientFactory = create_storage_client,
        suffix_source: SuffixSource = generate_suffix,
        config: OperatorConfig | None = None,
    ):
        """Initialize bucket claim handler.

        API clients are created lazily so that importing the handler module
        does not need cluster access.
        """
        super().__init__(KIND_BUCKET_CLAIM)
        self._store = store
        self._core_api = core_api
        self._config = config
        self.client_factory = client_factory
        self.suffix_source = suffix_source

    @property
    def store(self) -> ClaimStore:
        if self._store is None:
            self._store = ClaimStore(get_k8s_client())
        return self._store

    @property
    def core_api(self) -> client.CoreV1Api:
        if self._core_api is None:
            self._core_api = get_core_v1_client()
        return self._core_api

    @property
    def config(self) -> OperatorConfig:
        return self._config or get_config()

    def reconcile(self, namespace: str, name: str) -> None:
        """Run one reconcile pass for the claim ``namespace/name``.

        Raises:
            ClaimReconcileError: If the pass failed and should be retried
        """
        with reconcile_deadline(self.config.reconcile_timeout_seconds):
            claim = self.store.get(namespace, name)
            if claim is None:
                self.logger.info(f"Claim {namespace}/{name} no longer exists, skipping")
                return

            meta = claim.get("metadata") or {}
            if meta.get("deletionTimestamp"):
                self.delete(claim)
                return

            if FINALIZER not in (meta.get("finalizers") or []):
                claim = self.store.add_finalizer(claim)
                emit_finalizer_added(claim)
                self.log_info(claim["metadata"], "Added finalizer", event="finalizer", reason="FinalizerAdded")

            self.reconcile_with_metrics(claim, lambda: self.provision(claim))

    def load_credentials(self) -> StorageCredentials:
        """Read the operator-wide storage credentials."""
        return load_storage_credentials(
            self.core_api,
            self.config.credentials_secret_namespace,
            self.config.credentials_secret_name,
        )

    def provision(self, claim: dict[str, Any]) -> None:
        """Bring the bucket and the claim artifacts in line with the claim spec.

        The claim must already carry the operator finalizer.
        """
        meta = claim.get("metadata") or {}
        name = meta.get("name", "unknown")

        with trace_span("reconcile_bucket_claim", kind=KIND_BUCKET_CLAIM, attributes={"claim.name": name}):
            try:
                credentials = self.load_credentials()
            except CredentialsError as e:
                self._record_failure(claim, set_credentials_invalid_condition, e, phase=PHASE_ERROR)
                raise

            bucket_name = resolve_bucket_name(claim, self.suffix_source)
            add_span_attribute("bucket.name", bucket_name)
            claim = self._persist_bucket_name(claim, bucket_name)

            try:
                storage = self.client_factory(credentials, self.config)
                created = storage.ensure_bucket(bucket_name, credentials.region)
            except DeadlineExceeded:
                raise
            except Exception as e:
                metrics.bucket_operations_total.labels(operation="ensure", result="error").inc()
                error = BucketProvisioningError(f"Failed to ensure bucket {bucket_name}: {sanitize_exception(e)}")
                self._record_failure(claim, set_bucket_not_ready_condition, error, phase=PHASE_ERROR)
                raise error from e

            metrics.bucket_operations_total.labels(operation="ensure", result="success").inc()
            if created:
                emit_bucket_created(claim, bucket_name)
                self.log_info(claim["metadata"], f"Created bucket {bucket_name}", event="bucket", reason="BucketCreated", bucket_name=bucket_name)
            else:
                self.log_info(claim["metadata"], f"Bucket {bucket_name} already exists", event="bucket", reason="BucketExists", bucket_name=bucket_name)

            try:
                secret = build_credentials_secret(claim, credentials, bucket_name)
                config_map = build_config_map(claim, credentials, bucket_name)
                upsert_secret(self.core_api, secret)
                upsert_config_map(self.core_api, config_map)
            except DeadlineExceeded:
                raise
            except Exception as e:
                error = ArtifactSyncError(f"Failed to sync artifacts for bucket {bucket_name}: {sanitize_exception(e)}")
                self._record_failure(claim, set_artifacts_not_synced_condition, error)
                raise error from e

            secret_name = secret.metadata.name
            config_map_name = config_map.metadata.name
            emit_artifacts_synced(claim, secret_name, config_map_name)

            generation = (claim.get("metadata") or {}).get("generation")
            conditions = clear_failure_conditions((claim.get("status") or {}).get("conditions") or [])
            conditions = set_ready_condition(conditions, True, f"Bucket {bucket_name} is bound", generation)
            status_update: dict[str, Any] = {
                "phase": PHASE_BOUND,
                "bucketName": bucket_name,
                "secretRef": secret_name,
                "configMapRef": config_map_name,
                "conditions": conditions,
            }
            if generation is not None:
                status_update["observedGeneration"] = generation
            self.store.update_status(claim, status_update)
            self.record_resource_status(PHASE_BOUND)

            emit_claim_bound(claim, bucket_name)
            self.log_info(claim["metadata"], f"Claim bound to bucket {bucket_name}", event="bound", reason="ClaimBound", bucket_name=bucket_name)

    def _persist_bucket_name(self, claim: dict[str, Any], bucket_name: str) -> dict[str, Any]:
        """Write the resolved name to the claim before touching the backend.

        Once stored in status the name is what later passes resolve to, so a
        generated suffix is drawn only once.
        """
        meta = claim.get("metadata") or {}
        spec = claim.get("spec") or {}
        status = claim.get("status") or {}

        previous = status.get("bucketName")
        if previous and previous != bucket_name:
            self.log_warning(
                meta,
                f"spec.bucketName {bucket_name} differs from bound bucket {previous}, following spec.bucketName",
                reason="BucketNameChanged",
                bucket_name=bucket_name,
                previous_bucket_name=previous,
            )

        claim = self.store.set_annotations(
            claim,
            {
                ANNOTATION_BUCKET_NAME: bucket_name,
                ANNOTATION_RETAIN_POLICY: spec.get("retainPolicy") or DEFAULT_RETAIN_POLICY,
            },
        )
        status_update: dict[str, Any] = {}
        if previous != bucket_name:
            status_update["bucketName"] = bucket_name
        if not status.get("phase"):
            status_update["phase"] = PHASE_PENDING
        if status_update:
            claim = self.store.update_status(claim, status_update)
        return claim

    def _record_failure(
        self,
        claim: dict[str, Any],
        condition_fn: ConditionSetter,
        error: Exception,
        phase: str | None = None,
    ) -> None:
        """Write the failure condition (and phase, if given) to the claim status.

        Only the phase and conditions are written, so bucketName and the
        artifact references from an earlier pass stay intact. A failing status
        write is logged and does not replace the original error.
        """
        meta = claim.get("metadata") or {}
        generation = meta.get("generation")
        message = sanitize_exception(error)

        conditions = (claim.get("status") or {}).get("conditions") or []
        conditions = condition_fn(conditions, message, generation)
        conditions = set_ready_condition(conditions, False, message, generation)
        status_update: dict[str, Any] = {"conditions": conditions}
        if phase is not None:
            status_update["phase"] = phase
            self.record_resource_status(phase)

        try:
            self.store.update_status(claim, status_update)
        except (ClaimReconcileError, client.exceptions.ApiException) as e:
            self.log_warning(meta, f"Failed to record failure status: {sanitize_exception(e)}", reason="StatusUpdateFailed")

    def delete(self, claim: dict[str, Any]) -> None:
        """Handle claim deletion according to its retain policy.

        Backend failures are logged and reported as events but never raise.
        The finalizer is kopf's persistence finalizer, and kopf removes it once
        the deletion handler returns, so a completed cleanup always releases
        the claim.
        """
        meta = claim.get("metadata") or {}
        if FINALIZER not in (meta.get("finalizers") or []):
            self.log_info(meta, "Claim has no operator finalizer, nothing to clean up", event="deletion", reason="Deletion")
            return

        spec = claim.get("spec") or {}
        retain_policy = spec.get("retainPolicy") or DEFAULT_RETAIN_POLICY
        bucket_name = (meta.get("annotations") or {}).get(ANNOTATION_BUCKET_NAME) or (claim.get("status") or {}).get(
            "bucketName"
        )

        self.log_info(
            meta,
            f"Claim is being deleted with retainPolicy={retain_policy}",
            event="deletion",
            reason="Deletion",
            bucket_name=bucket_name,
            retain_policy=retain_policy,
        )

        with trace_span("delete_bucket_claim", kind=KIND_BUCKET_CLAIM, attributes={"claim.name": meta.get("name", "unknown")}):
            if retain_policy == RETAIN_POLICY_DELETE:
                if bucket_name:
                    self._delete_bucket(claim, bucket_name)
                else:
                    self.log_info(meta, "No bucket was recorded for this claim, nothing to delete", reason="BucketNotRecorded")
            else:
                if retain_policy != RETAIN_POLICY_RETAIN:
                    self.log_warning(meta, f"Unknown retainPolicy {retain_policy}, retaining bucket", reason="UnknownRetainPolicy")
                if bucket_name:
                    emit_bucket_retained(claim, bucket_name)
                    self.log_info(meta, f"Retaining bucket {bucket_name}", reason="BucketRetained", bucket_name=bucket_name)

            self.log_info(meta, "Cleanup finished, kopf releases the finalizer", event="finalizer", reason="CleanupFinished")

    def _delete_bucket(self, claim: dict[str, Any], bucket_name: str) -> None:
        meta = claim.get("metadata") or {}
        try:
            credentials = self.load_credentials()
            storage = self.client_factory(credentials, self.config)
            removed = storage.empty_and_delete_bucket(bucket_name)
        except Exception as e:
            metrics.bucket_operations_total.labels(operation="delete", result="error").inc()
            self.log_error(meta, f"Failed to delete bucket {bucket_name}", error=e, reason="DeletionFailed", bucket_name=bucket_name)
            emit_bucket_delete_failed(claim, f"Failed to delete bucket {bucket_name}: {sanitize_exception(e)}")
            return

        metrics.bucket_operations_total.labels(operation="delete", result="success").inc()
        emit_bucket_deleted(claim, bucket_name)
        self.log_info(
            meta,
            f"Deleted bucket {bucket_name}",
            reason="BucketDeleted",
            bucket_name=bucket_name,
            objects_removed=removed,
        )


# Global handler instance
_handler = BucketClaimHandler()


def _run_pass(namespace: str, name: str) -> None:
    """Run a pass, turning retryable failures into delayed kopf retries."""
    config = _handler.config
    with with_correlation_id(uuid.uuid4().hex):
        try:
            _handler.reconcile(namespace, name)
        except ClaimConflictError as e:
            raise kopf.TemporaryError(sanitize_exception(e), delay=config.conflict_retry_delay_seconds) from e
        except ClaimReconcileError as e:
            raise kopf.TemporaryError(sanitize_exception(e), delay=config.retry_delay_seconds) from e


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET_CLAIM)
@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET_CLAIM, field="spec")
@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET_CLAIM)
def handle_bucket_claim(
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle QuObjectBucketClaim reconciliation."""
    _run_pass(meta.get("namespace", "default"), meta["name"])


@kopf.on.update(
    API_GROUP_VERSION,
    KIND_BUCKET_CLAIM,
    id="resync",
    field=("metadata", "annotations", ANNOTATION_RESYNC),
)
def handle_bucket_claim_resync(
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Reconcile again after an owned Secret or ConfigMap drifted."""
    _run_pass(meta.get("namespace", "default"), meta["name"])


# Mandatory, so kopf keeps FINALIZER on the claim until this returns
@kopf.on.delete(API_GROUP_VERSION, KIND_BUCKET_CLAIM)
def handle_bucket_claim_delete(
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle QuObjectBucketClaim deletion."""
    _run_pass(meta.get("namespace", "default"), meta["name"])
