"""Shared fixtures: in-memory database, local store and a scripted model client."""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from flowstate.db import Base
from flowstate.services.storage.database import DatabaseStorageBackend
from flowstate.services.storage.facade import StorageFacade
from flowstate.services.storage.local import LocalStorageBackend

STRENGTHS_TEXT = "\n".join(
    [
        "1. Strategic",
        "2. Learner",
        "3. Achiever",
        "4. Ideation",
        "5. Input",
        "6. Focus",
        "30. Woo",
        "34. Discipline",
    ]
)


class _ScriptedCompletions:
    """Returns queued responses in order; the last one repeats. Exceptions are raised."""

    def __init__(self, responses: List[Any]):
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=response))])


class FakeLLMClient:
    def __init__(self, *responses: Any):
        self.chat = SimpleNamespace(completions=_ScriptedCompletions(list(responses)))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.chat.completions.calls


def plan_json(task_count: int = 3, *, duration: int = 30, goal: str = "Ship the launch post") -> str:
    return json.dumps(
        {
            "goal": goal,
            "tasks": [
                {
                    "id": f"t{index}",
                    "title": f"Step {index}",
                    "description": "Draft the outline",
                    "sop": "1. Open the doc\n2. Write three bullets",
                    "start_time": "14:00",
                    "duration_minutes": duration,
                    "energy_type": "deep-focus",
                    "rationale": "Using your #1 Strategic to bypass your #34 Discipline",
                }
                for index in range(1, task_count + 1)
            ],
            "energy_distribution": [{"name": "deep-focus", "value": 70}, {"name": "rest", "value": 30}],
        }
    )


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
    engine.dispose()


@pytest.fixture()
def db_storage(session_factory, tmp_path) -> StorageFacade:
    facade = StorageFacade(
        local=LocalStorageBackend(tmp_path / "local"),
        database=DatabaseStorageBackend(session_factory),
    )
    facade.start_session()
    return facade


@pytest.fixture()
def local_storage(tmp_path) -> StorageFacade:
    facade = StorageFacade(local=LocalStorageBackend(tmp_path / "local"))
    facade.start_session()
    return facade


@pytest.fixture(params=["database", "local"])
def any_storage(request) -> StorageFacade:
    return request.getfixturevalue("db_storage" if request.param == "database" else "local_storage")
