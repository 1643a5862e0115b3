"""Schemas for day plans and their tasks."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class EnergyType(str, Enum):
    DEEP_FOCUS = "deep-focus"
    LIGHT_ADMIN = "light-admin"
    SOCIAL = "social"
    REST = "rest"


class Task(BaseModel):
    id: str
    title: str
    description: str = ""
    sop: str = Field("", description="Step-by-step procedural instructions.")
    start_time: str = Field("", description="Free-form clock string such as 14:30.")
    duration_minutes: int = Field(..., ge=1)
    energy_type: EnergyType
    rationale: str = ""
    is_completed: bool = False


class EnergySlice(BaseModel):
    name: str
    value: float


class DayPlan(BaseModel):
    id: str
    goal: str
    created_at: int = Field(..., description="Epoch milliseconds.")
    tasks: List[Task] = Field(default_factory=list)
    energy_distribution: List[EnergySlice] = Field(default_factory=list)
    journal_notes: Optional[str] = None


class GeneratePlanRequest(BaseModel):
    goal: str = Field(..., max_length=2000)


class RegeneratePlanRequest(BaseModel):
    feedback: str = Field(..., max_length=2000)


class JournalUpdateRequest(BaseModel):
    journal_notes: Optional[str] = Field(default=None, max_length=20000)


class TaskUpdateRequest(BaseModel):
    is_completed: Optional[bool] = None
    title: Optional[str] = Field(default=None, max_length=500)
