"""Read and write access to QuObjectBucketClaim objects."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from kubernetes import client

from ... import metrics
from ...constants import ANNOTATION_RESYNC, API_GROUP, API_VERSION, FINALIZER, PLURAL_BUCKET_CLAIM
from ...utils.context import check_deadline
from ...utils.errors import ClaimConflictError

logger = logging.getLogger(__name__)


class ClaimStore:
    """Claim access through the Kubernetes API.

    Spec-side writes (finalizers, annotations) and status writes go through
    separate endpoints, so neither clobbers fields owned by the other.
    Adding the finalizer carries the observed resourceVersion and fails with
    ClaimConflictError when the claim changed in between. Removal is left to
    kopf, which owns the same finalizer.
    """

    def __init__(self, api: client.CustomObjectsApi) -> None:
        self.api = api

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        check_deadline(operation)
        start_time = time.time()
        try:
            result = fn(
                group=API_GROUP,
                version=API_VERSION,
                plural=PLURAL_BUCKET_CLAIM,
                **kwargs,
            )
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except client.exceptions.ApiException as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            if e.status == 409:
                raise ClaimConflictError(
                    f"Claim {kwargs.get('namespace')}/{kwargs.get('name')} changed during {operation}"
                ) from e
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    @staticmethod
    def _identity(claim: dict[str, Any]) -> tuple[str, str]:
        meta = claim.get("metadata") or {}
        return meta.get("namespace", "default"), meta["name"]

    def get(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Fetch the current claim.

        Returns:
            Claim body, or None if it no longer exists
        """
        try:
            return self._call(
                "get_claim",
                self.api.get_namespaced_custom_object,
                namespace=namespace,
                name=name,
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise

    def add_finalizer(self, claim: dict[str, Any]) -> dict[str, Any]:
        """Add the operator finalizer and persist it.

        Returns:
            Updated claim body
        """
        meta = claim.get("metadata") or {}
        finalizers = list(meta.get("finalizers") or [])
        if FINALIZER in finalizers:
            return claim
        finalizers.append(FINALIZER)
        return self._patch_finalizers(claim, finalizers)

    def _patch_finalizers(self, claim: dict[str, Any], finalizers: list[str]) -> dict[str, Any]:
        namespace, name = self._identity(claim)
        metadata: dict[str, Any] = {"finalizers": finalizers if finalizers else None}
        resource_version = (claim.get("metadata") or {}).get("resourceVersion")
        if resource_version:
            metadata["resourceVersion"] = resource_version
        return self._call(
            "patch_claim_finalizers",
            self.api.patch_namespaced_custom_object,
            namespace=namespace,
            name=name,
            body={"metadata": metadata},
        )

    def set_annotations(self, claim: dict[str, Any], annotations: dict[str, str]) -> dict[str, Any]:
        """Merge annotations into the claim metadata.

        Returns:
            Updated claim body (unchanged claim when nothing differs)
        """
        current = (claim.get("metadata") or {}).get("annotations") or {}
        changed = {key: value for key, value in annotations.items() if current.get(key) != value}
        if not changed:
            return claim
        namespace, name = self._identity(claim)
        return self._call(
            "patch_claim_annotations",
            self.api.patch_namespaced_custom_object,
            namespace=namespace,
            name=name,
            body={"metadata": {"annotations": changed}},
        )

    def request_resync(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Stamp the resync annotation so the claim's resync handler runs.

        The pass itself runs from the claim's own handler, which keeps a
        single pass per claim at a time.

        Returns:
            Updated claim body, or None if the claim no longer exists
        """
        stamp = datetime.now(timezone.utc).isoformat()
        try:
            return self._call(
                "patch_claim_resync",
                self.api.patch_namespaced_custom_object,
                namespace=namespace,
                name=name,
                body={"metadata": {"annotations": {ANNOTATION_RESYNC: stamp}}},
            )
        except client.exceptions.ApiException as e:
            if e.status == 404:
                return None
            raise

    def update_status(self, claim: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
        """Merge fields into the claim status subresource.

        Returns:
            Updated claim body
        """
        namespace, name = self._identity(claim)
        return self._call(
            "patch_claim_status",
            self.api.patch_namespaced_custom_object_status,
            namespace=namespace,
            name=name,
            body={"status": fields},
        )
