"""Schemas for the user profile, onboarding and strengths configuration."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    name: str
    strengths_raw_text: str
    top_strengths: List[str] = Field(default_factory=list)


class StrengthsConfig(BaseModel):
    id: str
    strengths_raw_text: str
    top_strengths: List[str] = Field(default_factory=list)
    created_at: int = Field(..., description="Epoch milliseconds.")
    updated_at: int = Field(..., description="Epoch milliseconds.")


class OnboardingRequest(BaseModel):
    name: str = Field(..., max_length=200)
    strengths_raw_text: str = Field(..., max_length=20000)


class OnboardingResponse(BaseModel):
    profile: UserProfile
    strengths_config: StrengthsConfig
    parsed_strengths: List[str]
    request_id: str


class StrengthsConfigUpdateRequest(BaseModel):
    strengths_raw_text: str = Field(..., max_length=20000)
    top_strengths: List[str]


class StrengthsExtractRequest(BaseModel):
    mime_type: str = Field(..., description="image/jpeg, image/png or application/pdf.")
    data: str = Field(..., min_length=1, description="Base64 payload without the data URL prefix.")


class StrengthsExtractResponse(BaseModel):
    raw_text: str
    strengths: List[str]
    request_id: str
