"""Tests ensuring observability wiring is safe by default."""
from __future__ import annotations

import importlib

from flowstate.observability import tracing


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import flowstate.core.config as core_config
    import flowstate.observability.client as client_module
    import flowstate.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("plan.generate", metadata={"goal_length": 10}) as span:
        tracing.annotate(span, task_count=3)

    assert span is None
