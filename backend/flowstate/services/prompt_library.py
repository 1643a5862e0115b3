"""Prompt library operations: copy tracking, filtering and category management."""
from __future__ import annotations

from typing import Iterable, List, Literal, Optional

from flowstate.api.schemas.prompt import PromptItem
from flowstate.services.errors import NotFoundError, ValidationError
from flowstate.services.ids import new_id

UNCATEGORIZED = "Uncategorized"

SortMode = Literal["manual", "usage"]


def find_prompt(prompts: List[PromptItem], prompt_id: str) -> PromptItem:
    for prompt in prompts:
        if prompt.id == prompt_id:
            return prompt
    raise NotFoundError("Prompt not found")


def copy_prompt(prompts: List[PromptItem], prompt_id: str) -> tuple[List[PromptItem], PromptItem]:
    """Record one copy of a prompt: usage_count goes up by exactly one, nothing else changes."""
    target = find_prompt(prompts, prompt_id)
    copied = target.model_copy(update={"usage_count": target.usage_count + 1})
    return [copied if prompt.id == prompt_id else prompt for prompt in prompts], copied


def new_prompt(category: Optional[str] = None) -> PromptItem:
    return PromptItem(
        id=new_id(),
        title="New Prompt",
        content="",
        category=(category or "").strip() or UNCATEGORIZED,
        usage_count=0,
        tags=[],
    )


def update_prompt(
    prompt: PromptItem,
    *,
    title: Optional[str] = None,
    content: Optional[str] = None,
    category: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> PromptItem:
    changes = {}
    if title is not None:
        changes["title"] = title
    if content is not None:
        changes["content"] = content
    if category is not None:
        changes["category"] = category.strip() or UNCATEGORIZED
    if tags is not None:
        changes["tags"] = _clean_tags(tags)
    return prompt.model_copy(update=changes)


def remove_prompt(prompts: List[PromptItem], prompt_id: str) -> List[PromptItem]:
    find_prompt(prompts, prompt_id)
    return [prompt for prompt in prompts if prompt.id != prompt_id]


def filter_prompts(
    prompts: List[PromptItem],
    *,
    search: str = "",
    category: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    sort: SortMode = "manual",
) -> List[PromptItem]:
    """Search title, content and tags case-insensitively; tags must all match.

    Manual sort keeps the stored order.
    """
    term = (search or "").strip().lower()
    required_tags = [tag for tag in (tags or []) if tag]

    def _matches(prompt: PromptItem) -> bool:
        if term and not (
            term in prompt.title.lower()
            or term in prompt.content.lower()
            or any(term in tag.lower() for tag in prompt.tags)
        ):
            return False
        if category and category != "All" and prompt.category != category:
            return False
        return all(tag in prompt.tags for tag in required_tags)

    matched = [prompt for prompt in prompts if _matches(prompt)]
    if sort == "usage":
        matched.sort(key=lambda prompt: prompt.usage_count, reverse=True)
    return matched


def list_categories(prompts: List[PromptItem]) -> List[str]:
    return sorted({prompt.category or UNCATEGORIZED for prompt in prompts})


def list_tags(prompts: List[PromptItem]) -> List[str]:
    return sorted({tag for prompt in prompts for tag in prompt.tags})


def rename_category(prompts: List[PromptItem], old_name: str, new_name: str) -> List[PromptItem]:
    target = new_name.strip()
    if not target:
        raise ValidationError("Category name must not be empty")
    if old_name not in list_categories(prompts):
        raise NotFoundError("Category not found")
    return [
        prompt.model_copy(update={"category": target}) if prompt.category == old_name else prompt
        for prompt in prompts
    ]


def _clean_tags(tags: Iterable[str]) -> List[str]:
    cleaned: List[str] = []
    for tag in tags:
        value = tag.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned
