"""Storage facade behavior across the database and local backends."""
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID, uuid4

import pytest

from flowstate.api.schemas.document import DocBlock, DocBlockType, DocumentAsset
from flowstate.api.schemas.plan import DayPlan, EnergySlice, Task
from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.api.schemas.prompt import PromptItem
from flowstate.db.models import Plan
from flowstate.services.errors import PersistenceError, ValidationError
from flowstate.services.storage.database import DatabaseStorageBackend
from flowstate.services.storage.facade import MODE_DATABASE, MODE_LOCAL, StorageFacade
from flowstate.services.storage.factory import build_storage_facade
from flowstate.services.storage.local import PLANS_KEY, UNRECONCILED_KEY, LocalStorageBackend

from conftest import STRENGTHS_TEXT


def _plan(plan_id: str, *, journal: Optional[str] = "", created_at: int = 1_700_000_000_123) -> DayPlan:
    return DayPlan(
        id=plan_id,
        goal=f"Goal {plan_id}",
        created_at=created_at,
        tasks=[
            Task(
                id=f"{plan_id}-t1",
                title="Outline",
                description="Write three bullets",
                sop="1. Open the doc",
                start_time="14:00",
                duration_minutes=25,
                energy_type="deep-focus",
                rationale="Using your #1 Strategic",
                is_completed=True,
            )
        ],
        energy_distribution=[EnergySlice(name="deep-focus", value=100)],
        journal_notes=journal,
    )


class _UnreachableBackend:
    """Database backend whose connection dropped after the session user was resolved."""

    name = "database"

    def resolve_user(self) -> Optional[UUID]:
        return uuid4()

    def __getattr__(self, operation):
        def _fail(*args, **kwargs):
            raise PersistenceError(f"{operation}: connection refused")

        return _fail


def test_profile_is_absent_before_onboarding(any_storage):
    assert any_storage.load_profile() is None
    assert any_storage.load_strengths_config() is None
    assert any_storage.load_plans() == []


def test_profile_and_config_round_trip(any_storage):
    profile = UserProfile(name="Ada", strengths_raw_text=STRENGTHS_TEXT, top_strengths=["Strategic", "Learner"])
    config = StrengthsConfig(
        id="cfg-1",
        strengths_raw_text=STRENGTHS_TEXT,
        top_strengths=["Strategic"],
        created_at=1_700_000_000_123,
        updated_at=1_700_000_000_456,
    )

    any_storage.save_profile(profile)
    any_storage.save_strengths_config(config)

    assert any_storage.load_profile() == profile
    assert any_storage.load_strengths_config() == config


def test_strengths_config_is_updated_in_place(db_storage):
    first = StrengthsConfig(id="cfg-1", strengths_raw_text="a", top_strengths=["A"], created_at=1_000, updated_at=1_000)
    db_storage.save_strengths_config(first)
    db_storage.save_strengths_config(first.model_copy(update={"top_strengths": ["B"], "updated_at": 2_000}))

    loaded = db_storage.load_strengths_config()
    assert loaded.id == "cfg-1"
    assert loaded.top_strengths == ["B"]
    assert loaded.created_at == 1_000
    assert loaded.updated_at == 2_000


def test_plans_round_trip_preserves_order_and_fields(any_storage):
    plans = [_plan("b", journal=None), _plan("a", journal="Felt focused"), _plan("c")]

    any_storage.save_plans(plans)

    assert any_storage.load_plans() == plans


def test_plan_sync_deletes_removed_rows_and_reorders(db_storage, session_factory):
    db_storage.save_plans([_plan("a"), _plan("b"), _plan("c")])
    db_storage.save_plans([_plan("c"), _plan("a")])

    assert [plan.id for plan in db_storage.load_plans()] == ["c", "a"]
    db = session_factory()
    assert db.query(Plan).count() == 2
    db.close()


def test_saving_empty_plan_list_clears_plans(any_storage):
    any_storage.save_plans([_plan("a")])
    any_storage.save_plans([])

    assert any_storage.load_plans() == []


def test_documents_and_prompts_are_seeded_when_empty(any_storage):
    documents = any_storage.load_documents()
    prompts = any_storage.load_prompts()

    assert [document.id for document in documents] == ["1"]
    assert [block.id for block in documents[0].blocks] == ["b1", "b2"]
    assert [prompt.id for prompt in prompts] == ["1", "2", "3"]
    assert [prompt.usage_count for prompt in prompts] == [12, 45, 8]


def test_documents_and_prompts_round_trip(any_storage):
    documents = [
        DocumentAsset(
            id="d1",
            title="Launch",
            category="Marketing",
            last_modified=1_700_000_000_999,
            blocks=[DocBlock(id="b1", type=DocBlockType.CODE, content="print('hi')", label="Snippet")],
        )
    ]
    prompts = [PromptItem(id="p1", title="Rewrite", content="Rewrite: ", category="Writing", usage_count=3, tags=["Email"])]

    any_storage.save_documents(documents)
    any_storage.save_prompts(prompts)

    assert any_storage.load_documents() == documents
    assert any_storage.load_prompts() == prompts


def test_local_empty_collection_is_not_reseeded(local_storage):
    local_storage.save_prompts([])

    assert local_storage.load_prompts() == []


def test_database_empty_prompts_read_back_as_seed(db_storage):
    db_storage.save_prompts([])

    assert [prompt.id for prompt in db_storage.load_prompts()] == ["1", "2", "3"]


def test_duplicate_ids_are_rejected_before_writing(any_storage):
    prompt = PromptItem(id="p1", title="Rewrite")
    any_storage.save_prompts([PromptItem(id="p0", title="Keep")])

    with pytest.raises(ValidationError):
        any_storage.save_prompts([prompt, prompt.model_copy(update={"title": "Again"})])
    with pytest.raises(ValidationError):
        any_storage.save_plans([_plan("a"), _plan("a")])

    assert [p.id for p in any_storage.load_prompts()] == ["p0"]
    assert any_storage.load_plans() == []


def test_database_session_user_is_created_once(db_storage, session_factory, tmp_path):
    first_user = db_storage.user_id
    assert first_user is not None

    again = StorageFacade(local=LocalStorageBackend(tmp_path / "other"), database=DatabaseStorageBackend(session_factory))
    assert again.start_session() == first_user


def test_runtime_failure_switches_to_local_and_marks_divergence(tmp_path, caplog):
    local = LocalStorageBackend(tmp_path / "local")
    facade = StorageFacade(local=local, database=_UnreachableBackend())
    facade.start_session()
    assert facade.mode == MODE_DATABASE

    with caplog.at_level(logging.WARNING):
        facade.save_plans([_plan("a")])

    assert facade.mode == MODE_LOCAL
    assert "database -> local" in caplog.text
    assert local.has_value(PLANS_KEY)
    assert local.read(UNRECONCILED_KEY)["operations"] == ["save_plans"]
    assert [plan.id for plan in facade.load_plans()] == ["a"]


def test_dropped_table_falls_back_to_local(db_storage, session_factory):
    Plan.__table__.drop(session_factory.kw["bind"])

    db_storage.save_plans([_plan("a")])

    assert db_storage.mode == MODE_LOCAL
    assert [plan.id for plan in db_storage.load_plans()] == ["a"]


def test_unreconciled_marker_is_reported_on_next_database_session(session_factory, tmp_path, caplog):
    local = LocalStorageBackend(tmp_path / "local")
    local.write(UNRECONCILED_KEY, {"since": 1, "operations": ["save_plans"]})
    facade = StorageFacade(local=local, database=DatabaseStorageBackend(session_factory))

    with caplog.at_level(logging.WARNING):
        facade.start_session()

    assert facade.mode == MODE_DATABASE
    assert "not merged automatically" in caplog.text


def test_local_only_mode_does_not_mark_divergence(local_storage, tmp_path):
    local_storage.save_plans([_plan("a")])

    assert not LocalStorageBackend(tmp_path / "local").has_value(UNRECONCILED_KEY)


def test_factory_without_url_uses_local_storage(tmp_path):
    facade = build_storage_facade(None, tmp_path)
    assert facade.mode == MODE_LOCAL


def test_factory_with_unreachable_database_uses_local_storage(tmp_path):
    facade = build_storage_facade(f"sqlite:///{tmp_path}/missing/dir/flowstate.db", tmp_path / "local")
    facade.start_session()

    facade.save_plans([_plan("a")])

    assert facade.mode == MODE_LOCAL
    assert LocalStorageBackend(tmp_path / "local").has_value(UNRECONCILED_KEY)


def test_factory_with_reachable_database_uses_it(tmp_path):
    facade = build_storage_facade(f"sqlite:///{tmp_path}/flowstate.db", tmp_path / "local")
    facade.start_session()

    facade.save_plans([_plan("a")])

    assert facade.mode == MODE_DATABASE
    assert [plan.id for plan in facade.load_plans()] == ["a"]


def test_corrupt_local_value_is_treated_as_missing(tmp_path):
    local = LocalStorageBackend(tmp_path)
    (tmp_path / f"{PLANS_KEY}.json").write_text("{not json", encoding="utf-8")

    assert local.load_plans(None) is None
