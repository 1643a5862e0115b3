"""Prompt library routes."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from flowstate.api.errors import http_error_for
from flowstate.api.schemas.prompt import (
    CategoryRenameRequest,
    PromptCreateRequest,
    PromptItem,
    PromptUpdateRequest,
)
from flowstate.db.deps import get_storage
from flowstate.observability.metrics import log_metric
from flowstate.observability.tracing import trace
from flowstate.services import prompt_library
from flowstate.services.errors import FlowStateError
from flowstate.services.storage.facade import StorageFacade

router = APIRouter()


@router.get("/prompts", response_model=List[PromptItem], tags=["prompts"])
def list_prompts(
    q: str = Query("", description="Case-insensitive search over title, content and tags"),
    category: Optional[str] = Query(default=None),
    tags: Optional[List[str]] = Query(default=None),
    sort: str = Query("manual", pattern="^(manual|usage)$"),
    storage: StorageFacade = Depends(get_storage),
) -> List[PromptItem]:
    """List prompts with optional search, category, tag and sort filters."""
    return prompt_library.filter_prompts(
        storage.load_prompts(),
        search=q,
        category=category,
        tags=tags,
        sort=sort,  # type: ignore[arg-type]
    )


@router.put("/prompts", response_model=List[PromptItem], tags=["prompts"])
def replace_prompts(
    payload: List[PromptItem],
    storage: StorageFacade = Depends(get_storage),
) -> List[PromptItem]:
    """Replace the whole prompt collection (used for reordering)."""
    try:
        storage.save_prompts(payload)
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return payload


@router.post("/prompts", response_model=PromptItem, status_code=status.HTTP_201_CREATED, tags=["prompts"])
def create_prompt(
    payload: PromptCreateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> PromptItem:
    """Add a blank prompt to a category; naming a new category creates it."""
    prompt = prompt_library.new_prompt(payload.category)
    try:
        storage.save_prompts([prompt, *storage.load_prompts()])
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return prompt


@router.get("/prompts/categories", response_model=List[str], tags=["prompts"])
def list_categories(storage: StorageFacade = Depends(get_storage)) -> List[str]:
    return prompt_library.list_categories(storage.load_prompts())


@router.get("/prompts/tags", response_model=List[str], tags=["prompts"])
def list_tags(storage: StorageFacade = Depends(get_storage)) -> List[str]:
    return prompt_library.list_tags(storage.load_prompts())


@router.post("/prompts/categories/rename", response_model=List[PromptItem], tags=["prompts"])
def rename_category(
    payload: CategoryRenameRequest,
    storage: StorageFacade = Depends(get_storage),
) -> List[PromptItem]:
    try:
        prompts = prompt_library.rename_category(storage.load_prompts(), payload.old_name, payload.new_name)
        storage.save_prompts(prompts)
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return prompts


@router.patch("/prompts/{prompt_id}", response_model=PromptItem, tags=["prompts"])
def update_prompt(
    prompt_id: str,
    payload: PromptUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> PromptItem:
    try:
        prompts = storage.load_prompts()
        updated = prompt_library.update_prompt(
            prompt_library.find_prompt(prompts, prompt_id),
            title=payload.title,
            content=payload.content,
            category=payload.category,
            tags=payload.tags,
        )
        storage.save_prompts([updated if prompt.id == prompt_id else prompt for prompt in prompts])
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return updated


@router.delete("/prompts/{prompt_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["prompts"])
def delete_prompt(prompt_id: str, storage: StorageFacade = Depends(get_storage)) -> Response:
    try:
        storage.save_prompts(prompt_library.remove_prompt(storage.load_prompts(), prompt_id))
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/prompts/{prompt_id}/copy", response_model=PromptItem, tags=["prompts"])
def copy_prompt(
    prompt_id: str,
    http_request: Request,
    storage: StorageFacade = Depends(get_storage),
) -> PromptItem:
    """Record that a prompt was copied to the clipboard."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("prompt.copy", metadata={"prompt_id": prompt_id}, request_id=request_id):
        try:
            prompts, copied = prompt_library.copy_prompt(storage.load_prompts(), prompt_id)
            storage.save_prompts(prompts)
        except FlowStateError as exc:
            raise http_error_for(exc) from exc

    log_metric("prompt.copy.usage_count", copied.usage_count, metadata={"prompt_id": prompt_id})
    return copied
