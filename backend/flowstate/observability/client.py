"""Process-wide Opik client used by tracing and metrics."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from flowstate.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_client: Optional["Opik"] = None
_lock = Lock()
_resolved = False


def init_opik() -> Optional["Opik"]:
    """Create the Opik client on first call; later calls return the same result.

    Tracing stays off when the SDK is missing, OPIK_ENABLED is false or no API key is
    configured. A failed init is not retried for the life of the process.
    """
    global _client, _resolved

    with _lock:
        if _resolved:
            return _client
        _resolved = True
        _client = _build_client()
    return _client


def _build_client() -> Optional["Opik"]:
    if Opik is None or not settings.opik_enabled:
        logger.debug("Opik tracing off; plan and storage traces are no-ops.")
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is set without OPIK_API_KEY; tracing stays off.")
        return None
    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:  # pragma: no cover - SDK raises assorted errors on bad config
        logger.warning("Opik init failed, tracing stays off: %s", exc)
        return None
    logger.info("Opik tracing on (project=%s).", settings.opik_project)
    return client


def get_opik_client() -> Optional["Opik"]:
    if _resolved:
        return _client
    return init_opik()


def flush_opik() -> None:
    """Send buffered traces before shutdown."""
    if _client is None:
        return
    try:
        _client.flush()
    except Exception as exc:  # pragma: no cover - shutdown must not fail on tracing
        logger.debug("Opik flush failed: %s", exc)
