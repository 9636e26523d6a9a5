"""Main entry point for the GitHub Operator."""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import config, health
from . import logging as structured_logging
from . import handlers  # noqa: F401
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging(config.LOG_LEVEL)

    # Use annotations for kopf's own bookkeeping so status stays ours
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = config.K8S_REQUEST_TIMEOUT_SECONDS
    settings.execution.max_workers = 4

    initialize_tracing()

    # Metrics and health check endpoints share one port
    health.start_metrics_server(config.METRICS_PORT)

    logger.info(
        f"GitHub operator configured (actual_delete={config.ACTUAL_DELETE}, "
        f"requeue_interval={config.REQUEUE_INTERVAL_SECONDS}s, resync_interval={config.RESYNC_INTERVAL_SECONDS}s)"
    )
    if not config.GITHUB_AUTH_TOKEN:
        logger.warning("GITHUB_AUTH_TOKEN is not set, forge calls will fail")

    health.set_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not-ready while the operator stops."""
    health.set_ready(False)
    logger.info("GitHub operator shutting down")
