"""Main entry point for the QuObject Operator.

Run with ``kopf run -m quobject_operator.main --all-namespaces``.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .config import get_config
from .constants import FINALIZER
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    config = get_config()

    # Set up structured JSON logging
    structured_logging.setup_structured_logging(config.log_level)
    initialize_tracing()

    # Use annotations for kopf's own bookkeeping so status stays engine-owned
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()
    # kopf recognises deleting claims by this finalizer and removes it after cleanup
    settings.persistence.finalizer = FINALIZER

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = config.request_timeout_seconds
    settings.execution.max_workers = config.max_workers

    # Start metrics HTTP server with health check endpoints
    health.start_health_server(config.metrics_port)
    health.mark_ready()
    logger.info(
        f"Operator started: metrics on :{config.metrics_port}, max_workers={config.max_workers}, "
        f"credentials from {config.credentials_secret_namespace}/{config.credentials_secret_name}"
    )


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not-ready while the operator stops."""
    health.mark_not_ready()
