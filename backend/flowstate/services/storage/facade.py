"""Storage facade choosing between the database and the local JSON store."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Any, List, Optional
from uuid import UUID

from flowstate.api.schemas.document import DocumentAsset
from flowstate.api.schemas.plan import DayPlan
from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.api.schemas.prompt import PromptItem
from flowstate.observability.metrics import log_metric
from flowstate.services.errors import PersistenceError, ValidationError
from flowstate.services.ids import now_ms
from flowstate.services.storage.base import StorageBackend
from flowstate.services.storage.local import DOCS_KEY, PROMPTS_KEY, UNRECONCILED_KEY, LocalStorageBackend
from flowstate.services.storage.seed import default_documents, default_prompts

logger = logging.getLogger(__name__)

MODE_DATABASE = "database"
MODE_LOCAL = "local"


class StorageFacade:
    """Uniform save/load for profile, strengths config, plans, documents and prompts.

    The backend is chosen once at construction. A database failure at call time moves
    the facade to local mode for the rest of the process; the transition is logged and
    the call is served by the local store. Writes that land locally while a database is
    configured leave an unreconciled marker, reported on the next session start.

    An empty documents or prompts collection reads back as the starter set unless the
    local store holds a saved value, so in database mode saving [] restores the seed.
    """

    def __init__(
        self,
        local: LocalStorageBackend,
        database: Optional[StorageBackend] = None,
        *,
        database_configured: bool | None = None,
    ):
        self._local = local
        self._database = database
        self._database_configured = database is not None if database_configured is None else database_configured
        self._lock = Lock()
        self.mode = MODE_DATABASE if database is not None else MODE_LOCAL
        self.user_id: Optional[UUID] = None
        self._session_started = False

    def start_session(self) -> Optional[UUID]:
        """Resolve the session user once; every database call is scoped to it."""
        with self._lock:
            if self._session_started:
                return self.user_id
            self._session_started = True
        if self.mode == MODE_DATABASE:
            try:
                self.user_id = self._database.resolve_user()
            except PersistenceError as exc:
                self._switch_to_local("start_session", exc)
        if self.mode == MODE_DATABASE and self._local.has_value(UNRECONCILED_KEY):
            marker = self._local.read(UNRECONCILED_KEY) or {}
            logger.warning(
                "Local storage holds writes made while the database was unreachable (since %s); "
                "they are not merged automatically.",
                marker.get("since"),
            )
        logger.info("Storage session started (backend=%s, user=%s)", self.mode, self.user_id)
        return self.user_id

    def save_profile(self, profile: UserProfile) -> None:
        self._save("save_profile", profile)

    def load_profile(self) -> Optional[UserProfile]:
        return self._load("load_profile")

    def save_strengths_config(self, config: StrengthsConfig) -> None:
        self._save("save_strengths_config", config)

    def load_strengths_config(self) -> Optional[StrengthsConfig]:
        return self._load("load_strengths_config")

    def save_plans(self, plans: List[DayPlan]) -> None:
        self._save("save_plans", _unique_by_id("plan", plans))

    def load_plans(self) -> List[DayPlan]:
        return self._load("load_plans") or []

    def save_documents(self, documents: List[DocumentAsset]) -> None:
        self._save("save_documents", _unique_by_id("document", documents))

    def load_documents(self) -> List[DocumentAsset]:
        documents = self._load("load_documents")
        if not documents and not self._local.has_value(DOCS_KEY):
            return default_documents()
        return documents or []

    def save_prompts(self, prompts: List[PromptItem]) -> None:
        self._save("save_prompts", _unique_by_id("prompt", prompts))

    def load_prompts(self) -> List[PromptItem]:
        prompts = self._load("load_prompts")
        if not prompts and not self._local.has_value(PROMPTS_KEY):
            return default_prompts()
        return prompts or []

    def _load(self, operation: str) -> Any:
        return self._call(operation)

    def _save(self, operation: str, value: Any) -> None:
        served_by = self._call(operation, value, returns_backend=True)
        if served_by == MODE_LOCAL and self._database_configured:
            self._mark_unreconciled(operation)

    def _call(self, operation: str, *args: Any, returns_backend: bool = False) -> Any:
        if not self._session_started:
            self.start_session()
        if self.mode == MODE_DATABASE:
            try:
                result = getattr(self._database, operation)(self.user_id, *args)
                return MODE_DATABASE if returns_backend else result
            except PersistenceError as exc:
                self._switch_to_local(operation, exc)
        result = getattr(self._local, operation)(self.user_id, *args)
        return MODE_LOCAL if returns_backend else result

    def _switch_to_local(self, operation: str, exc: Exception) -> None:
        with self._lock:
            if self.mode == MODE_LOCAL:
                return
            self.mode = MODE_LOCAL
        logger.warning(
            "Storage backend switched database -> local after %s failed: %s. "
            "Local storage serves the rest of this process.",
            operation,
            exc,
        )
        log_metric("storage.fallback", 1, metadata={"operation": operation})

    def _mark_unreconciled(self, operation: str) -> None:
        marker = self._local.read(UNRECONCILED_KEY) or {"since": now_ms(), "operations": []}
        operations = marker.setdefault("operations", [])
        if operation not in operations:
            operations.append(operation)
            self._local.write(UNRECONCILED_KEY, marker)


def _unique_by_id(kind: str, items: List[Any]) -> List[Any]:
    """Reject a collection that repeats an id; both backends key records by id."""
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise ValidationError(f"Duplicate {kind} id: {item.id}")
        seen.add(item.id)
    return list(items)
