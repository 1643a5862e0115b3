"""Profile, onboarding and strengths configuration routes."""
from __future__ import annotations

from time import perf_counter
from typing import Optional

import openai
from fastapi import APIRouter, Depends, HTTPException, Request, status

from flowstate.api.errors import http_error_for
from flowstate.api.schemas.profile import (
    OnboardingRequest,
    OnboardingResponse,
    StrengthsConfig,
    StrengthsConfigUpdateRequest,
    StrengthsExtractRequest,
    StrengthsExtractResponse,
    UserProfile,
)
from flowstate.db.deps import get_storage
from flowstate.observability.metrics import log_latency, log_metric
from flowstate.observability.tracing import trace
from flowstate.services.errors import FlowStateError
from flowstate.services.llm_client import get_llm_client
from flowstate.services.storage.facade import StorageFacade
from flowstate.services.strengths import build_profile, parse_strengths, upsert_strengths_config
from flowstate.services.strengths_extractor import extract_strengths_text

router = APIRouter()


@router.get("/profile", response_model=UserProfile, tags=["profile"])
def get_profile(storage: StorageFacade = Depends(get_storage)) -> UserProfile:
    """Return the onboarded profile."""
    profile = storage.load_profile()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.post("/onboarding", response_model=OnboardingResponse, tags=["profile"])
def complete_onboarding(
    payload: OnboardingRequest,
    http_request: Request,
    storage: StorageFacade = Depends(get_storage),
) -> OnboardingResponse:
    """Save the profile and the single strengths config from a pasted strengths list."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("onboarding.complete", metadata={"route": "/onboarding"}, request_id=request_id):
        try:
            profile, parsed = build_profile(payload.name, payload.strengths_raw_text)
            config = upsert_strengths_config(
                storage.load_strengths_config(),
                profile.strengths_raw_text,
                profile.top_strengths,
            )
            storage.save_profile(profile)
            storage.save_strengths_config(config)
        except FlowStateError as exc:
            log_metric("onboarding.accepted", 0)
            raise http_error_for(exc) from exc

    log_metric("onboarding.accepted", 1, metadata={"strength_count": len(parsed)})
    return OnboardingResponse(
        profile=profile,
        strengths_config=config,
        parsed_strengths=parsed,
        request_id=request_id or "",
    )


@router.post("/strengths/extract", response_model=StrengthsExtractResponse, tags=["strengths"])
def extract_strengths(
    payload: StrengthsExtractRequest,
    http_request: Request,
    client: Optional[openai.OpenAI] = Depends(get_llm_client),
) -> StrengthsExtractResponse:
    """Read a ranked strengths list from an uploaded report image or PDF."""
    request_id = getattr(http_request.state, "request_id", None)
    start = perf_counter()
    try:
        raw_text = extract_strengths_text(client, payload.data, payload.mime_type, request_id=request_id)
    except FlowStateError as exc:
        raise http_error_for(exc) from exc

    strengths = parse_strengths(raw_text)
    log_latency("strengths.extract", start, metadata={"mime_type": payload.mime_type})
    return StrengthsExtractResponse(raw_text=raw_text, strengths=strengths, request_id=request_id or "")


@router.get("/strengths-config", response_model=StrengthsConfig, tags=["strengths"])
def get_strengths_config(storage: StorageFacade = Depends(get_storage)) -> StrengthsConfig:
    config = storage.load_strengths_config()
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Strengths not configured")
    return config


@router.put("/strengths-config", response_model=StrengthsConfig, tags=["strengths"])
def update_strengths_config(
    payload: StrengthsConfigUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> StrengthsConfig:
    """Update the active strengths config in place, creating it on first save."""
    try:
        config = upsert_strengths_config(
            storage.load_strengths_config(),
            payload.strengths_raw_text,
            payload.top_strengths,
        )
        storage.save_strengths_config(config)
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return config
