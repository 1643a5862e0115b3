"""LLM-backed day plan generation from a goal and a strengths profile."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple

import openai
import pydantic
from pydantic import BaseModel, Field

from flowstate.api.schemas.plan import DayPlan, EnergySlice, EnergyType, Task
from flowstate.core.config import settings
from flowstate.observability.metrics import log_metric
from flowstate.observability.tracing import annotate, trace
from flowstate.services.errors import GenerationError, ModelUnavailableError, ValidationError
from flowstate.services.ids import new_id, now_ms

logger = logging.getLogger(__name__)

# Raw text shorter than this is treated as "not provided".
MIN_RAW_STRENGTHS_CHARS = 20
GENERATION_FAILED_MESSAGE = "AI is taking a nap. Please try again."


class StrengthsSource(Protocol):
    strengths_raw_text: str
    top_strengths: List[str]


class GeneratedTask(BaseModel):
    """A single task as returned by the model."""

    id: str | int = Field(default="", description="Short unique task id.")
    title: str
    description: str
    sop: str = Field(
        ...,
        description="Step-by-step specific instruction. If mitigating a weakness, explain the workaround.",
    )
    start_time: str = Field(..., description="Clock time like 14:30.")
    duration_minutes: int
    energy_type: EnergyType
    rationale: str = Field(..., description="Why this fits their strengths profile (mention specific ranks).")


class GeneratedPlan(BaseModel):
    """Overall structured plan returned by the model."""

    goal: str = Field(..., description="Refined goal title.")
    tasks: List[GeneratedTask] = Field(..., min_length=1)
    energy_distribution: List[EnergySlice] = Field(
        default_factory=list,
        description="Share of the day per energy type, e.g. [{'name': 'deep-focus', 'value': 60}].",
    )


def generate_plan(
    client: Optional[openai.OpenAI],
    goal: str,
    profile: StrengthsSource,
    feedback: Optional[str] = None,
    prior_plan: Optional[DayPlan] = None,
    *,
    now: Optional[datetime] = None,
    request_id: Optional[str] = None,
) -> DayPlan:
    """Ask the model for a plan and stamp it with a stable identity.

    When ``prior_plan`` is given its id, created_at and journal notes carry over.
    Task completion flags are left at their defaults.
    """
    goal_text = (goal or "").strip()
    if not goal_text:
        raise ValidationError("Please describe what you want to get done.")
    strength_context = build_strength_context(profile)
    if client is None:
        raise ModelUnavailableError("The AI model is not configured.")

    regenerating = bool(feedback and feedback.strip() and prior_plan is not None)
    system_prompt, user_prompt = build_prompts(
        goal=goal_text,
        strength_context=strength_context,
        current_time=(now or datetime.now()).strftime("%H:%M"),
        feedback=feedback if regenerating else None,
        prior_task_count=len(prior_plan.tasks) if regenerating and prior_plan else None,
    )

    span_name = "plan.regenerate" if regenerating else "plan.generate"
    metadata = {
        "model": settings.openai_model,
        "regenerating": regenerating,
        "goal_length": len(goal_text),
        "uses_full_profile": strength_context.startswith("User's Full"),
    }
    with trace(span_name, metadata=metadata, request_id=request_id) as span:
        generated = _request_plan(client, system_prompt, user_prompt)
        annotate(span, **metadata, task_count=len(generated.tasks))

    log_metric(f"{span_name}.task_count", len(generated.tasks), metadata={"regenerating": regenerating})
    return _stamp_plan(generated, goal_text, prior_plan)


def build_strength_context(profile: StrengthsSource) -> str:
    """Prefer the full ranked text; fall back to the short top list."""
    raw_text = (getattr(profile, "strengths_raw_text", "") or "").strip()
    top = [item for item in (getattr(profile, "top_strengths", None) or []) if item and item.strip()]
    if len(raw_text) > MIN_RAW_STRENGTHS_CHARS:
        return f"User's Full CliftonStrengths Profile (1-34 Ordered): \n{raw_text}"
    if top:
        return f"User's Top Strengths: {', '.join(top)}"
    raise ValidationError("Please upload your 34 strengths before creating a plan.")


def build_prompts(
    *,
    goal: str,
    strength_context: str,
    current_time: str,
    feedback: Optional[str] = None,
    prior_task_count: Optional[int] = None,
) -> Tuple[str, str]:
    schema_json = json.dumps(GeneratedPlan.model_json_schema(), indent=2)
    energy_values = ", ".join(f"'{energy.value}'" for energy in EnergyType)

    system_prompt = (
        "You are an expert productivity psychologist using the \"Gallup StrengthsFinder\" framework.\n"
        "Your task is to build a \"Low-Friction Execution Plan\" for the user.\n\n"
        "DATA:\n"
        f"{strength_context}\n\n"
        "METHODOLOGY (The 34-Theme Strategy):\n"
        "1. **Analyze the Hierarchy**:\n"
        "   - **Dominant Themes (Rank 1-10)**: These are the user's \"Superpowers\". Use these to drive the main tasks.\n"
        "     *Example: High 'Ideation' needs brainstorming time. High 'Achiever' needs a checklist.*\n"
        "   - **Supporting Themes (Rank 11-20)**: Use these to assist.\n"
        "   - **Lesser Themes (Rank 30-34)**: These are \"Energy Drains\" or \"Weaknesses\".\n"
        "     *CRITICAL*: DO NOT assign tasks that purely rely on these strengths. If the goal requires it, "
        "provide a 'Workaround' or 'Compensation Strategy' in the SOP using a Top 5 strength.\n"
        "     *Example: If 'Discipline' is #34, DO NOT create a rigid minute-by-minute schedule. "
        "Instead, create flexible time blocks (Flow).*\n"
        "     *Example: If 'Woo' (Winning Others Over) is #34, DO NOT say \"Call 5 people\". "
        "Say \"Send these 5 pre-written emails\".*\n\n"
        "2. **De-Ambiguity Protocol**:\n"
        "   - Convert vague goals (\"Research market\") into micro-actions "
        "(\"Open Google, Search 'Competitor Price', Copy 3 prices\").\n"
        f"   - Max task duration: {settings.max_task_minutes} mins.\n\n"
        "3. **Tone**: Supportive, coaching, non-judgmental.\n\n"
        "OUTPUT RULES:\n"
        "- Output language MUST match the User's input language.\n"
        "- JSON format only.\n"
        f"- energy_type must be one of {energy_values}; energy_distribution uses the same names.\n"
        "- In the 'rationale' field, explicitly mention which strength is being used or which weakness "
        "is being mitigated (e.g., \"Using your #1 Strategic to bypass your #34 Consistency\")."
    )

    user_prompt = (
        f"User's Goal: \"{goal}\". Current Time: {current_time}. Generate a plan for the rest of the day."
    )
    if feedback:
        user_prompt += (
            "\n\nCONTEXT: The user is refining an existing plan.\n"
            f"Previous Plan Summary: {prior_task_count or 0} tasks.\n"
            f"USER FEEDBACK (CRITICAL): \"{feedback.strip()}\"\n\n"
            "Please RE-GENERATE the tasks. Respect the user's feedback.\n"
            "If they said \"too much\", reduce tasks.\n"
            "If they said \"I don't need X\", remove it.\n"
            "If they said \"More detail\", break it down further."
        )
    user_prompt += f"\n\nReturn strictly valid JSON matching this schema:\n{schema_json}"
    return system_prompt, user_prompt


def _request_plan(client: openai.OpenAI, system_prompt: str, user_prompt: str) -> GeneratedPlan:
    try:
        completion = client.chat.completions.create(
            model=settings.openai_model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
    except openai.OpenAIError as exc:
        logger.error("Plan generation call failed: %s", exc)
        raise GenerationError(GENERATION_FAILED_MESSAGE) from exc

    content = completion.choices[0].message.content if completion.choices else None
    if not content:
        raise GenerationError("No plan generated")
    try:
        return GeneratedPlan.model_validate(json.loads(content))
    except (json.JSONDecodeError, pydantic.ValidationError) as exc:
        logger.warning("Model returned an unusable plan: %s", exc)
        raise GenerationError("The generated plan could not be read") from exc


def _stamp_plan(generated: GeneratedPlan, goal: str, prior_plan: Optional[DayPlan]) -> DayPlan:
    return DayPlan(
        id=prior_plan.id if prior_plan else new_id(),
        created_at=prior_plan.created_at if prior_plan else now_ms(),
        journal_notes=(prior_plan.journal_notes or "") if prior_plan else "",
        goal=generated.goal.strip() or goal,
        tasks=_normalize_tasks(generated.tasks),
        energy_distribution=generated.energy_distribution,
    )


def _normalize_tasks(tasks: Sequence[GeneratedTask]) -> List[Task]:
    seen: set[str] = set()
    normalized: List[Task] = []
    for draft in tasks:
        task_id = str(draft.id).strip()
        if not task_id or task_id in seen:
            task_id = new_id()
        seen.add(task_id)
        normalized.append(
            Task(
                id=task_id,
                title=draft.title.strip(),
                description=draft.description,
                sop=draft.sop,
                start_time=draft.start_time,
                duration_minutes=max(1, min(settings.max_task_minutes, draft.duration_minutes)),
                energy_type=draft.energy_type,
                rationale=draft.rationale,
            )
        )
    return normalized
