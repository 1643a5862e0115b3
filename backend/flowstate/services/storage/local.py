"""Local JSON-file storage, one file per key."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, TypeAdapter

from flowstate.api.schemas.document import DocumentAsset
from flowstate.api.schemas.plan import DayPlan
from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.api.schemas.prompt import PromptItem
from flowstate.services.errors import PersistenceError
from flowstate.services.storage.base import StorageBackend

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

USER_KEY = "flowstate_user"
PLANS_KEY = "flowstate_plans"
DOCS_KEY = "flowstate_docs"
PROMPTS_KEY = "flowstate_prompts"
STRENGTHS_CONFIG_KEY = "flowstate_strengths_config"
# Present while the local store holds writes the database never received.
UNRECONCILED_KEY = "flowstate_unreconciled"


class LocalStorageBackend(StorageBackend):
    """Stores each entity or collection as serialized JSON under its own key."""

    name = "local"

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def resolve_user(self) -> Optional[UUID]:
        # The local store belongs to exactly one user and needs no id.
        return None

    def has_value(self, key: str) -> bool:
        return self._path(key).exists()

    def read(self, key: str) -> Any:
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Unable to read local key {key}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Local key %s holds invalid JSON; treating it as empty", key)
            return None

    def write(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write local key {key}") from exc

    def load_profile(self, user_id: Optional[UUID]) -> Optional[UserProfile]:
        return self._read_model(USER_KEY, UserProfile)

    def save_profile(self, user_id: Optional[UUID], profile: UserProfile) -> None:
        self.write(USER_KEY, profile.model_dump(mode="json"))

    def load_strengths_config(self, user_id: Optional[UUID]) -> Optional[StrengthsConfig]:
        return self._read_model(STRENGTHS_CONFIG_KEY, StrengthsConfig)

    def save_strengths_config(self, user_id: Optional[UUID], config: StrengthsConfig) -> None:
        self.write(STRENGTHS_CONFIG_KEY, config.model_dump(mode="json"))

    def load_plans(self, user_id: Optional[UUID]) -> Optional[List[DayPlan]]:
        return self._read_list(PLANS_KEY, DayPlan)

    def save_plans(self, user_id: Optional[UUID], plans: List[DayPlan]) -> None:
        self._write_list(PLANS_KEY, plans)

    def load_documents(self, user_id: Optional[UUID]) -> Optional[List[DocumentAsset]]:
        return self._read_list(DOCS_KEY, DocumentAsset)

    def save_documents(self, user_id: Optional[UUID], documents: List[DocumentAsset]) -> None:
        self._write_list(DOCS_KEY, documents)

    def load_prompts(self, user_id: Optional[UUID]) -> Optional[List[PromptItem]]:
        return self._read_list(PROMPTS_KEY, PromptItem)

    def save_prompts(self, user_id: Optional[UUID], prompts: List[PromptItem]) -> None:
        self._write_list(PROMPTS_KEY, prompts)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def _read_model(self, key: str, model: Type[ModelT]) -> Optional[ModelT]:
        data = self.read(key)
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except ValueError:
            logger.error("Local key %s does not match %s; ignoring it", key, model.__name__)
            return None

    def _read_list(self, key: str, model: Type[ModelT]) -> Optional[List[ModelT]]:
        data = self.read(key)
        if data is None:
            return None
        try:
            return TypeAdapter(List[model]).validate_python(data)
        except ValueError:
            logger.error("Local key %s does not match a list of %s; ignoring it", key, model.__name__)
            return None

    def _write_list(self, key: str, items: List[BaseModel]) -> None:
        self.write(key, [item.model_dump(mode="json") for item in items])
