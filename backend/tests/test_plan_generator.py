import json
from datetime import datetime

import openai
import pytest

from flowstate.api.schemas.plan import DayPlan, EnergyType
from flowstate.api.schemas.profile import UserProfile
from flowstate.services.errors import GenerationError, ModelUnavailableError, ValidationError
from flowstate.services.plan_generator import build_strength_context, generate_plan

from conftest import STRENGTHS_TEXT, FakeLLMClient, plan_json

PROFILE = UserProfile(name="Ada", strengths_raw_text=STRENGTHS_TEXT, top_strengths=["Strategic", "Learner"])
NOW = datetime(2026, 10, 19, 14, 5)


def test_generate_plan_returns_stamped_plan():
    client = FakeLLMClient(plan_json(3))

    plan = generate_plan(client, "Ship the launch post", PROFILE, now=NOW)

    assert plan.id
    assert plan.created_at > 0
    assert plan.journal_notes == ""
    assert len(plan.tasks) == 3
    assert all(task.is_completed is False for task in plan.tasks)
    assert plan.tasks[0].energy_type == EnergyType.DEEP_FOCUS
    assert plan.energy_distribution[0].name == "deep-focus"


def test_generate_plan_sends_full_profile_and_time():
    client = FakeLLMClient(plan_json())

    generate_plan(client, "Ship the launch post", PROFILE, now=NOW)

    request = client.calls[0]
    assert request["response_format"] == {"type": "json_object"}
    system_prompt = request["messages"][0]["content"]
    user_prompt = request["messages"][1]["content"]
    assert "34. Discipline" in system_prompt
    assert "Current Time: 14:05" in user_prompt
    assert "USER FEEDBACK" not in user_prompt


def test_generate_plan_clamps_durations():
    plan = generate_plan(FakeLLMClient(plan_json(2, duration=90)), "Goal", PROFILE)
    assert [task.duration_minutes for task in plan.tasks] == [45, 45]

    plan = generate_plan(FakeLLMClient(plan_json(1, duration=0)), "Goal", PROFILE)
    assert plan.tasks[0].duration_minutes == 1


def test_generate_plan_reissues_duplicate_task_ids():
    payload = json.loads(plan_json(2))
    payload["tasks"][1]["id"] = payload["tasks"][0]["id"]

    plan = generate_plan(FakeLLMClient(json.dumps(payload)), "Goal", PROFILE)

    assert len({task.id for task in plan.tasks}) == 2


def test_generate_plan_accepts_numeric_task_ids():
    payload = json.loads(plan_json(2))
    payload["tasks"][0]["id"] = 1
    payload["tasks"][1]["id"] = 2

    plan = generate_plan(FakeLLMClient(json.dumps(payload)), "Goal", PROFILE)

    assert [task.id for task in plan.tasks] == ["1", "2"]


def test_regeneration_keeps_identity_and_journal():
    prior = generate_plan(FakeLLMClient(plan_json(4)), "Goal", PROFILE)
    prior = prior.model_copy(update={"journal_notes": "Felt good", "created_at": 1_234})
    client = FakeLLMClient(plan_json(2))

    plan = generate_plan(client, prior.goal, PROFILE, feedback="too much", prior_plan=prior)

    assert plan.id == prior.id
    assert plan.created_at == 1_234
    assert plan.journal_notes == "Felt good"
    assert len(plan.tasks) == 2
    user_prompt = client.calls[0]["messages"][1]["content"]
    assert 'USER FEEDBACK (CRITICAL): "too much"' in user_prompt
    assert "Previous Plan Summary: 4 tasks." in user_prompt


def test_generate_plan_rejects_empty_goal():
    with pytest.raises(ValidationError):
        generate_plan(FakeLLMClient(plan_json()), "   ", PROFILE)


def test_generate_plan_without_client_is_unavailable():
    with pytest.raises(ModelUnavailableError):
        generate_plan(None, "Goal", PROFILE)


@pytest.mark.parametrize(
    "response",
    [
        "not json",
        "",
        json.dumps({"goal": "Goal", "tasks": []}),
        json.dumps({"goal": "Goal", "tasks": [{"title": "Missing fields"}]}),
        openai.OpenAIError("model offline"),
    ],
)
def test_generate_plan_failures_raise_generation_error(response):
    with pytest.raises(GenerationError):
        generate_plan(FakeLLMClient(response), "Goal", PROFILE)


def test_strength_context_prefers_raw_text_then_top_list():
    assert build_strength_context(PROFILE).startswith("User's Full CliftonStrengths Profile")

    short = UserProfile(name="Ada", strengths_raw_text="1. Focus", top_strengths=["Focus", "Input"])
    assert build_strength_context(short) == "User's Top Strengths: Focus, Input"

    with pytest.raises(ValidationError):
        build_strength_context(UserProfile(name="Ada", strengths_raw_text="", top_strengths=[]))


def test_generated_plan_is_a_valid_day_plan():
    plan = generate_plan(FakeLLMClient(plan_json()), "Goal", PROFILE)
    assert DayPlan.model_validate(plan.model_dump(mode="json")) == plan
