"""Schemas for the prompt library."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PromptItem(BaseModel):
    id: str
    title: str
    content: str = ""
    category: str = "Uncategorized"
    usage_count: int = Field(0, ge=0)
    tags: List[str] = Field(default_factory=list)


class PromptCreateRequest(BaseModel):
    category: Optional[str] = Field(default=None, max_length=200)


class PromptUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=200)
    tags: Optional[List[str]] = None


class CategoryRenameRequest(BaseModel):
    old_name: str = Field(..., min_length=1)
    new_name: str = Field(..., min_length=1, max_length=200)
