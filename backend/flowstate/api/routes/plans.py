"""Day plan routes: generation, regeneration and editing."""
from __future__ import annotations

from time import perf_counter
from typing import Callable, List, Optional

import openai
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from flowstate.api.errors import http_error_for
from flowstate.api.schemas.plan import (
    DayPlan,
    GeneratePlanRequest,
    JournalUpdateRequest,
    RegeneratePlanRequest,
    TaskUpdateRequest,
)
from flowstate.db.deps import get_storage
from flowstate.observability.metrics import log_latency, log_metric
from flowstate.services import plan_board
from flowstate.services.errors import FlowStateError
from flowstate.services.llm_client import get_llm_client
from flowstate.services.storage.facade import StorageFacade

router = APIRouter()


@router.get("/plans", response_model=List[DayPlan], tags=["plans"])
def list_plans(storage: StorageFacade = Depends(get_storage)) -> List[DayPlan]:
    """List plans, newest first."""
    return storage.load_plans()


@router.post("/plans", response_model=DayPlan, status_code=status.HTTP_201_CREATED, tags=["plans"])
def create_plan(
    payload: GeneratePlanRequest,
    http_request: Request,
    storage: StorageFacade = Depends(get_storage),
    client: Optional[openai.OpenAI] = Depends(get_llm_client),
) -> DayPlan:
    """Generate a strengths-aware plan for a goal."""
    request_id = getattr(http_request.state, "request_id", None)
    start = perf_counter()
    try:
        plan = plan_board.create_plan_for_goal(storage, client, payload.goal, request_id=request_id)
    except FlowStateError as exc:
        log_metric("plan.generate.success", 0, metadata={"error": type(exc).__name__})
        raise http_error_for(exc) from exc

    log_metric("plan.generate.success", 1)
    log_latency("plan.generate", start)
    return plan


@router.post("/plans/{plan_id}/regenerate", response_model=DayPlan, tags=["plans"])
def regenerate_plan(
    plan_id: str,
    payload: RegeneratePlanRequest,
    http_request: Request,
    storage: StorageFacade = Depends(get_storage),
    client: Optional[openai.OpenAI] = Depends(get_llm_client),
) -> DayPlan:
    """Regenerate a plan from user feedback; its id and creation time are kept."""
    request_id = getattr(http_request.state, "request_id", None)
    start = perf_counter()
    try:
        plan = plan_board.regenerate_plan(storage, client, plan_id, payload.feedback, request_id=request_id)
    except FlowStateError as exc:
        log_metric("plan.regenerate.success", 0, metadata={"error": type(exc).__name__})
        raise http_error_for(exc) from exc

    log_metric("plan.regenerate.success", 1)
    log_latency("plan.regenerate", start)
    return plan


@router.put("/plans/{plan_id}", response_model=DayPlan, tags=["plans"])
def replace_plan(
    plan_id: str,
    payload: DayPlan,
    storage: StorageFacade = Depends(get_storage),
) -> DayPlan:
    if payload.id != plan_id:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Plan id does not match path")
    try:
        storage.save_plans(plan_board.replace_plan(storage.load_plans(), payload))
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return payload


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["plans"])
def delete_plan(plan_id: str, storage: StorageFacade = Depends(get_storage)) -> Response:
    try:
        storage.save_plans(plan_board.remove_plan(storage.load_plans(), plan_id))
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/plans/{plan_id}/journal", response_model=DayPlan, tags=["plans"])
def update_journal(
    plan_id: str,
    payload: JournalUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> DayPlan:
    """Set the plan's journal notes."""
    return _edit_plan(storage, plan_id, lambda plan: plan_board.set_journal(plan, payload.journal_notes))


@router.patch("/plans/{plan_id}/tasks/{task_id}", response_model=DayPlan, tags=["plans"])
def update_task(
    plan_id: str,
    task_id: str,
    payload: TaskUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> DayPlan:
    """Toggle a task's completion and/or rename it."""
    response = _edit_plan(
        storage,
        plan_id,
        lambda plan: plan_board.update_task(plan, task_id, is_completed=payload.is_completed, title=payload.title),
    )
    if payload.is_completed is not None:
        log_metric("task.complete.changed", 1 if payload.is_completed else 0, metadata={"plan_id": plan_id})
    return response


@router.delete("/plans/{plan_id}/tasks/{task_id}", response_model=DayPlan, tags=["plans"])
def delete_task(plan_id: str, task_id: str, storage: StorageFacade = Depends(get_storage)) -> DayPlan:
    return _edit_plan(storage, plan_id, lambda plan: plan_board.remove_task(plan, task_id))


def _edit_plan(storage: StorageFacade, plan_id: str, edit: Callable[[DayPlan], DayPlan]) -> DayPlan:
    try:
        plans = storage.load_plans()
        updated = edit(plan_board.find_plan(plans, plan_id))
        storage.save_plans(plan_board.replace_plan(plans, updated))
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return updated
