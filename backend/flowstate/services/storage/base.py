"""Storage backend interface."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from flowstate.api.schemas.document import DocumentAsset
from flowstate.api.schemas.plan import DayPlan
from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.api.schemas.prompt import PromptItem


class StorageBackend:
    """Base interface for persistence providers.

    Collection loads return None when nothing has ever been stored, so callers can
    tell "never saved" apart from "saved empty" where the backend can.
    Implementations raise PersistenceError on failure.
    """

    name = "base"

    def resolve_user(self) -> Optional[UUID]:
        raise NotImplementedError

    def load_profile(self, user_id: Optional[UUID]) -> Optional[UserProfile]:
        raise NotImplementedError

    def save_profile(self, user_id: Optional[UUID], profile: UserProfile) -> None:
        raise NotImplementedError

    def load_strengths_config(self, user_id: Optional[UUID]) -> Optional[StrengthsConfig]:
        raise NotImplementedError

    def save_strengths_config(self, user_id: Optional[UUID], config: StrengthsConfig) -> None:
        raise NotImplementedError

    def load_plans(self, user_id: Optional[UUID]) -> Optional[List[DayPlan]]:
        raise NotImplementedError

    def save_plans(self, user_id: Optional[UUID], plans: List[DayPlan]) -> None:
        raise NotImplementedError

    def load_documents(self, user_id: Optional[UUID]) -> Optional[List[DocumentAsset]]:
        raise NotImplementedError

    def save_documents(self, user_id: Optional[UUID], documents: List[DocumentAsset]) -> None:
        raise NotImplementedError

    def load_prompts(self, user_id: Optional[UUID]) -> Optional[List[PromptItem]]:
        raise NotImplementedError

    def save_prompts(self, user_id: Optional[UUID], prompts: List[PromptItem]) -> None:
        raise NotImplementedError
