import pytest

from flowstate.api.schemas.prompt import PromptItem
from flowstate.services import prompt_library
from flowstate.services.errors import NotFoundError, ValidationError
from flowstate.services.storage.seed import default_prompts


def test_copy_increments_usage_by_exactly_one():
    prompts = default_prompts()

    updated, copied = prompt_library.copy_prompt(prompts, "2")

    assert copied.usage_count == 46
    assert [prompt.usage_count for prompt in updated] == [12, 46, 8]
    assert updated[1].model_dump(exclude={"usage_count"}) == prompts[1].model_dump(exclude={"usage_count"})


def test_copy_unknown_prompt_raises():
    with pytest.raises(NotFoundError):
        prompt_library.copy_prompt(default_prompts(), "missing")


def test_filter_searches_title_content_and_tags():
    prompts = default_prompts()

    assert [p.id for p in prompt_library.filter_prompts(prompts, search="email")] == ["1"]
    assert [p.id for p in prompt_library.filter_prompts(prompts, search="CLEAN CODE")] == ["2"]
    assert [p.id for p in prompt_library.filter_prompts(prompts, search="meeting")] == ["3"]


def test_filter_by_category_and_all_tags():
    prompts = default_prompts() + [
        PromptItem(id="4", title="Cold email", category="Communication", tags=["Email"]),
    ]

    assert [p.id for p in prompt_library.filter_prompts(prompts, category="Communication")] == ["1", "4"]
    assert len(prompt_library.filter_prompts(prompts, category="All")) == 4
    assert [p.id for p in prompt_library.filter_prompts(prompts, tags=["Email", "Work"])] == ["1"]


def test_sort_by_usage_or_manual_order():
    prompts = default_prompts()

    assert [p.id for p in prompt_library.filter_prompts(prompts, sort="usage")] == ["2", "1", "3"]
    assert [p.id for p in prompt_library.filter_prompts(prompts)] == ["1", "2", "3"]


def test_new_prompt_defaults_to_uncategorized():
    prompt = prompt_library.new_prompt()

    assert prompt.title == "New Prompt"
    assert prompt.category == "Uncategorized"
    assert prompt.usage_count == 0
    assert prompt_library.new_prompt(" Research ").category == "Research"


def test_update_prompt_deduplicates_tags():
    prompt = prompt_library.update_prompt(default_prompts()[0], tags=["Work", " Work ", "", "Email"])
    assert prompt.tags == ["Work", "Email"]


def test_categories_and_tags_are_sorted_and_unique():
    prompts = default_prompts()

    assert prompt_library.list_categories(prompts) == ["Admin", "Coding", "Communication"]
    assert prompt_library.list_tags(prompts) == ["Dev", "Email", "Meeting", "Work"]


def test_rename_category_moves_every_prompt():
    renamed = prompt_library.rename_category(default_prompts(), "Coding", "Engineering")

    assert [p.category for p in renamed] == ["Communication", "Engineering", "Admin"]
    with pytest.raises(NotFoundError):
        prompt_library.rename_category(renamed, "Coding", "Dev")
    with pytest.raises(ValidationError):
        prompt_library.rename_category(renamed, "Admin", "  ")


def test_remove_prompt():
    remaining = prompt_library.remove_prompt(default_prompts(), "1")
    assert [p.id for p in remaining] == ["2", "3"]
