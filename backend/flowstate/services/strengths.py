"""Strengths report parsing and onboarding rules."""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.core.config import settings
from flowstate.services.errors import ValidationError
from flowstate.services.ids import new_id, now_ms

# "1. Strategic" or "12) Learner"
_RANK_PREFIX = re.compile(r"^\d+[.)]\s*")


def parse_strengths(text: str) -> List[str]:
    """Turn a numbered strengths list into ordered theme names.

    Rank markers are stripped and lines of two characters or fewer are dropped.
    """
    parsed: List[str] = []
    for line in (text or "").splitlines():
        cleaned = _RANK_PREFIX.sub("", line.strip()).strip()
        if len(cleaned) > 2:
            parsed.append(cleaned)
    return parsed


def build_profile(name: str, strengths_raw_text: str) -> Tuple[UserProfile, List[str]]:
    """Validate onboarding input and return the profile plus every parsed strength."""
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("Please tell us your name.")

    strengths = parse_strengths(strengths_raw_text)
    if len(strengths) < settings.min_onboarding_strengths:
        raise ValidationError(
            f"Please provide at least your Top {settings.min_onboarding_strengths} strengths."
        )

    profile = UserProfile(
        name=clean_name,
        strengths_raw_text=strengths_raw_text,
        top_strengths=strengths[: settings.top_strengths_count],
    )
    return profile, strengths


def upsert_strengths_config(
    existing: Optional[StrengthsConfig],
    strengths_raw_text: str,
    top_strengths: List[str],
    *,
    now: Optional[int] = None,
) -> StrengthsConfig:
    """Return the single active config, updated in place when one already exists."""
    raw_text = (strengths_raw_text or "").strip()
    if not raw_text:
        raise ValidationError("Please paste the full ranked list of your 34 strengths.")
    top = [item.strip() for item in top_strengths if item and item.strip()]
    if not top:
        raise ValidationError("Please enter at least one top strength.")

    timestamp = now if now is not None else now_ms()
    return StrengthsConfig(
        id=existing.id if existing else new_id(),
        strengths_raw_text=raw_text,
        top_strengths=top,
        created_at=existing.created_at if existing else timestamp,
        updated_at=timestamp,
    )
