"""Starter content shown before the user has saved any documents or prompts."""
from __future__ import annotations

from typing import List

from flowstate.api.schemas.document import DocBlock, DocBlockType, DocumentAsset
from flowstate.api.schemas.prompt import PromptItem
from flowstate.services.ids import now_ms


def default_documents() -> List[DocumentAsset]:
    return [
        DocumentAsset(
            id="1",
            title="Product Launch Materials",
            category="Marketing",
            last_modified=now_ms(),
            blocks=[
                DocBlock(
                    id="b1",
                    type=DocBlockType.TEXT,
                    content="Introducing FlowState: The first AI planner that understands your psychology.",
                    label="Hero Headline",
                ),
                DocBlock(
                    id="b2",
                    type=DocBlockType.LINK,
                    content="https://flowstate.app/demo-video",
                    label="Demo Video URL",
                ),
            ],
        )
    ]


def default_prompts() -> List[PromptItem]:
    return [
        PromptItem(
            id="1",
            title="Professional Email Rewriter",
            content="Rewrite this email to be more professional, concise, and empathetic: [Paste Text]",
            category="Communication",
            usage_count=12,
            tags=["Email", "Work"],
        ),
        PromptItem(
            id="2",
            title="Code Refactor",
            content="Refactor this code to follow Clean Code principles and add comments explaining complex logic.",
            category="Coding",
            usage_count=45,
            tags=["Dev"],
        ),
        PromptItem(
            id="3",
            title="Meeting Summary",
            content="Summarize these meeting notes into: Key Decisions, Action Items, and Next Steps.",
            category="Admin",
            usage_count=8,
            tags=["Meeting"],
        ),
    ]
