"""Schemas for document assets."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class DocBlockType(str, Enum):
    TEXT = "text"
    LINK = "link"
    IMAGE_URL = "image_url"
    CODE = "code"


class DocBlock(BaseModel):
    id: str
    type: DocBlockType
    content: str = ""
    label: Optional[str] = None


class DocumentAsset(BaseModel):
    id: str
    title: str
    category: str = "General"
    blocks: List[DocBlock] = Field(default_factory=list)
    last_modified: int = Field(..., description="Epoch milliseconds.")


class DocumentUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=200)


class BlockCreateRequest(BaseModel):
    type: DocBlockType = DocBlockType.TEXT
    content: str = ""
    label: Optional[str] = None


class BlockUpdateRequest(BaseModel):
    content: Optional[str] = None
    label: Optional[str] = None
