"""Watchers for the Secrets and ConfigMaps owned by bucket claims."""

from __future__ import annotations

import uuid
from typing import Any

import kopf

from ..constants import FIELD_MANAGER, KIND_BUCKET_CLAIM, LABEL_CLAIM_NAME, LABEL_MANAGED_BY
from ..services.k8s.claims import ClaimStore
from ..utils.context import with_correlation_id
from .base import BaseHandler
from .shared import get_k8s_client

# ADDED follows our own creates and the initial listing has no type; resume covers both
RESYNC_EVENT_TYPES = ("MODIFIED", "DELETED")

ARTIFACT_LABELS = {LABEL_MANAGED_BY: FIELD_MANAGER, LABEL_CLAIM_NAME: kopf.PRESENT}


class ArtifactDriftHandler(BaseHandler):
    """Ask the owning claim to reconcile when one of its artifacts changes.

    The artifact is never repaired here. The claim's resync handler runs a
    normal pass, which rewrites missing or edited artifacts.
    """

    def __init__(self, store: ClaimStore | None = None):
        super().__init__("BucketArtifact")
        self._store = store

    @property
    def store(self) -> ClaimStore:
        if self._store is None:
            self._store = ClaimStore(get_k8s_client())
        return self._store

    @staticmethod
    def owning_claim(meta: dict[str, Any]) -> str | None:
        """Name of the claim that controls the artifact, if any."""
        claim_name = (meta.get("labels") or {}).get(LABEL_CLAIM_NAME)
        if not claim_name:
            return None
        for ref in meta.get("ownerReferences") or []:
            if ref.get("kind") == KIND_BUCKET_CLAIM and ref.get("name") == claim_name:
                return claim_name
        return None

    def handle_event(self, event_type: str | None, artifact_kind: str, meta: dict[str, Any]) -> None:
        if event_type not in RESYNC_EVENT_TYPES:
            return

        claim_name = self.owning_claim(meta)
        if claim_name is None:
            return

        namespace = meta.get("namespace", "default")
        claim = self.store.request_resync(namespace, claim_name)
        if claim is None:
            self.logger.debug(f"Claim {namespace}/{claim_name} is gone, ignoring {artifact_kind} {meta.get('name')}")
            return

        self.log_info(
            meta,
            f"{artifact_kind} {meta.get('name')} was {event_type.lower()}, requested resync of claim {claim_name}",
            event="drift",
            reason="ArtifactDrift",
            claim_name=claim_name,
            artifact_kind=artifact_kind,
        )


# Global handler instance
_handler = ArtifactDriftHandler()


@kopf.on.event("v1", "secrets", labels=ARTIFACT_LABELS)
def handle_bucket_secret_event(
    event: dict[str, Any],
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle changes to claim credential Secrets."""
    with with_correlation_id(uuid.uuid4().hex):
        _handler.handle_event(event.get("type"), "Secret", meta)


@kopf.on.event("v1", "configmaps", labels=ARTIFACT_LABELS)
def handle_bucket_config_map_event(
    event: dict[str, Any],
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle changes to claim configuration ConfigMaps."""
    with with_correlation_id(uuid.uuid4().hex):
        _handler.handle_event(event.get("type"), "ConfigMap", meta)
