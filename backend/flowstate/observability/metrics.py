"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, Optional

from flowstate.observability import tracing

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log a metric to Opik if it is enabled."""
    client = tracing.get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        metric_trace = client.trace(name=f"metric:{name}", metadata=payload)
        metric_trace.end()
    except Exception as exc:  # pragma: no cover - metrics never break a request
        logger.debug("Unable to record metric %s: %s", name, exc)


def log_latency(name: str, started_at: float, metadata: Optional[Dict[str, Any]] = None) -> float:
    """Record milliseconds elapsed since a ``perf_counter`` reading and return them."""
    latency_ms = (perf_counter() - started_at) * 1000
    log_metric(f"{name}.latency_ms", latency_ms, metadata=metadata)
    return latency_ms
