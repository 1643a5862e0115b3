"""Operations on the user's collection of day plans."""
from __future__ import annotations

import logging
from typing import List, Optional

import openai

from flowstate.api.schemas.plan import DayPlan
from flowstate.services.errors import NotFoundError, ValidationError
from flowstate.services.plan_generator import generate_plan
from flowstate.services.storage.facade import StorageFacade

logger = logging.getLogger(__name__)

MISSING_STRENGTHS_MESSAGE = "Please upload your 34 strengths first."


def create_plan_for_goal(
    storage: StorageFacade,
    client: Optional[openai.OpenAI],
    goal: str,
    *,
    request_id: str | None = None,
) -> DayPlan:
    """Generate a plan from the active strengths config and put it first in the list."""
    config = storage.load_strengths_config()
    if config is None:
        raise ValidationError(MISSING_STRENGTHS_MESSAGE)

    plan = reset_completion(generate_plan(client, goal, config, request_id=request_id))
    storage.save_plans([plan, *storage.load_plans()])
    logger.info("Created plan %s with %d tasks", plan.id, len(plan.tasks))
    return plan


def regenerate_plan(
    storage: StorageFacade,
    client: Optional[openai.OpenAI],
    plan_id: str,
    feedback: str,
    *,
    request_id: str | None = None,
) -> DayPlan:
    """Regenerate an existing plan with feedback, keeping its id, position and journal."""
    if not (feedback or "").strip():
        raise ValidationError("Tell us what to change about this plan.")
    config = storage.load_strengths_config()
    if config is None:
        raise ValidationError(MISSING_STRENGTHS_MESSAGE)

    plans = storage.load_plans()
    prior = find_plan(plans, plan_id)
    plan = reset_completion(
        generate_plan(client, prior.goal, config, feedback=feedback, prior_plan=prior, request_id=request_id)
    )
    storage.save_plans(replace_plan(plans, plan))
    logger.info("Regenerated plan %s (%d -> %d tasks)", plan.id, len(prior.tasks), len(plan.tasks))
    return plan


def reset_completion(plan: DayPlan) -> DayPlan:
    """New tasks always start incomplete."""
    return plan.model_copy(
        update={"tasks": [task.model_copy(update={"is_completed": False}) for task in plan.tasks]}
    )


def find_plan(plans: List[DayPlan], plan_id: str) -> DayPlan:
    for plan in plans:
        if plan.id == plan_id:
            return plan
    raise NotFoundError("Plan not found")


def replace_plan(plans: List[DayPlan], updated: DayPlan) -> List[DayPlan]:
    find_plan(plans, updated.id)
    return [updated if plan.id == updated.id else plan for plan in plans]


def remove_plan(plans: List[DayPlan], plan_id: str) -> List[DayPlan]:
    find_plan(plans, plan_id)
    return [plan for plan in plans if plan.id != plan_id]


def update_task(
    plan: DayPlan,
    task_id: str,
    *,
    is_completed: Optional[bool] = None,
    title: Optional[str] = None,
) -> DayPlan:
    """Toggle completion and/or retitle one task."""
    changes = {}
    if is_completed is not None:
        changes["is_completed"] = is_completed
    if title is not None:
        clean_title = title.strip()
        if not clean_title:
            raise ValidationError("Task title must not be empty")
        changes["title"] = clean_title

    found = False
    tasks = []
    for task in plan.tasks:
        if task.id == task_id:
            found = True
            task = task.model_copy(update=changes)
        tasks.append(task)
    if not found:
        raise NotFoundError("Task not found")
    return plan.model_copy(update={"tasks": tasks})


def remove_task(plan: DayPlan, task_id: str) -> DayPlan:
    tasks = [task for task in plan.tasks if task.id != task_id]
    if len(tasks) == len(plan.tasks):
        raise NotFoundError("Task not found")
    return plan.model_copy(update={"tasks": tasks})


def set_journal(plan: DayPlan, notes: Optional[str]) -> DayPlan:
    return plan.model_copy(update={"journal_notes": notes or ""})
