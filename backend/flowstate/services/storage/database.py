"""Relational storage backend built on SQLAlchemy sessions."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from flowstate.api.schemas.document import DocumentAsset
from flowstate.api.schemas.plan import DayPlan
from flowstate.api.schemas.profile import StrengthsConfig, UserProfile
from flowstate.api.schemas.prompt import PromptItem
from flowstate.db.models.document import Document
from flowstate.db.models.plan import Plan
from flowstate.db.models.prompt import Prompt
from flowstate.db.models.strengths_config import StrengthsConfig as StrengthsConfigRow
from flowstate.db.models.user import User
from flowstate.services.errors import PersistenceError
from flowstate.services.ids import now_ms
from flowstate.services.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class DatabaseStorageBackend(StorageBackend):
    """Persists every entity under the session user's id.

    Collections hold unique ids and are synchronized by id (insert new, update existing,
    delete removed) inside a single transaction, with a position column keeping their order.
    """

    name = "database"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db: Session = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(str(exc)) from exc
        finally:
            db.close()

    def resolve_user(self) -> Optional[UUID]:
        """Return the single user row's id, creating an un-onboarded row if needed."""
        with self._session() as db:
            user = db.query(User).order_by(asc(User.created_at)).first()
            if user is None:
                user = User()
                db.add(user)
                db.flush()
                logger.info("Created session user %s", user.id)
            return user.id

    def load_profile(self, user_id: Optional[UUID]) -> Optional[UserProfile]:
        with self._session() as db:
            user = db.get(User, _require_user(user_id))
            if user is None or user.name is None:
                return None
            return UserProfile(
                name=user.name,
                strengths_raw_text=user.strengths_raw_text or "",
                top_strengths=list(user.top_strengths or []),
            )

    def save_profile(self, user_id: Optional[UUID], profile: UserProfile) -> None:
        with self._session() as db:
            user = db.get(User, _require_user(user_id))
            if user is None:
                user = User(id=user_id)
                db.add(user)
            user.name = profile.name
            user.strengths_raw_text = profile.strengths_raw_text
            user.top_strengths = list(profile.top_strengths)

    def load_strengths_config(self, user_id: Optional[UUID]) -> Optional[StrengthsConfig]:
        with self._session() as db:
            row = db.query(StrengthsConfigRow).filter(StrengthsConfigRow.user_id == _require_user(user_id)).first()
            if row is None:
                return None
            return StrengthsConfig(
                id=row.id,
                strengths_raw_text=row.strengths_raw_text,
                top_strengths=list(row.top_strengths or []),
                created_at=row.created_at,
                updated_at=row.updated_at,
            )

    def save_strengths_config(self, user_id: Optional[UUID], config: StrengthsConfig) -> None:
        with self._session() as db:
            row = db.query(StrengthsConfigRow).filter(StrengthsConfigRow.user_id == _require_user(user_id)).first()
            if row is None:
                row = StrengthsConfigRow(id=config.id, user_id=user_id, created_at=config.created_at)
                db.add(row)
            row.strengths_raw_text = config.strengths_raw_text
            row.top_strengths = list(config.top_strengths)
            row.updated_at = config.updated_at

    def load_plans(self, user_id: Optional[UUID]) -> Optional[List[DayPlan]]:
        with self._session() as db:
            rows = self._ordered(db, Plan, user_id)
            return [
                DayPlan(
                    id=row.id,
                    goal=row.goal,
                    created_at=row.created_at,
                    tasks=row.tasks or [],
                    energy_distribution=row.energy_distribution or [],
                    journal_notes=row.journal_notes,
                )
                for row in rows
            ]

    def save_plans(self, user_id: Optional[UUID], plans: List[DayPlan]) -> None:
        updated_at = now_ms()

        def _values(plan: DayPlan) -> Dict[str, Any]:
            dumped = plan.model_dump(mode="json")
            return {
                "goal": dumped["goal"],
                "tasks": dumped["tasks"],
                "energy_distribution": dumped["energy_distribution"],
                "journal_notes": dumped["journal_notes"],
                "created_at": plan.created_at,
                "updated_at": updated_at,
            }

        with self._session() as db:
            self._sync_collection(db, Plan, _require_user(user_id), plans, _values)

    def load_documents(self, user_id: Optional[UUID]) -> Optional[List[DocumentAsset]]:
        with self._session() as db:
            rows = self._ordered(db, Document, user_id)
            return [
                DocumentAsset(
                    id=row.id,
                    title=row.title,
                    category=row.category or "General",
                    blocks=row.blocks or [],
                    last_modified=row.last_modified,
                )
                for row in rows
            ]

    def save_documents(self, user_id: Optional[UUID], documents: List[DocumentAsset]) -> None:
        def _values(document: DocumentAsset) -> Dict[str, Any]:
            dumped = document.model_dump(mode="json")
            return {
                "title": dumped["title"],
                "category": dumped["category"],
                "blocks": dumped["blocks"],
                "last_modified": document.last_modified,
            }

        with self._session() as db:
            self._sync_collection(db, Document, _require_user(user_id), documents, _values)

    def load_prompts(self, user_id: Optional[UUID]) -> Optional[List[PromptItem]]:
        with self._session() as db:
            rows = self._ordered(db, Prompt, user_id)
            return [
                PromptItem(
                    id=row.id,
                    title=row.title,
                    content=row.content,
                    category=row.category or "Uncategorized",
                    usage_count=row.usage_count or 0,
                    tags=list(row.tags or []),
                )
                for row in rows
            ]

    def save_prompts(self, user_id: Optional[UUID], prompts: List[PromptItem]) -> None:
        def _values(prompt: PromptItem) -> Dict[str, Any]:
            return {
                "title": prompt.title,
                "content": prompt.content,
                "category": prompt.category,
                "usage_count": prompt.usage_count,
                "tags": list(prompt.tags),
            }

        with self._session() as db:
            self._sync_collection(db, Prompt, _require_user(user_id), prompts, _values)

    @staticmethod
    def _ordered(db: Session, model, user_id: Optional[UUID]) -> List[Any]:
        return (
            db.query(model)
            .filter(model.user_id == _require_user(user_id))
            .order_by(asc(model.position))
            .all()
        )

    @staticmethod
    def _sync_collection(
        db: Session,
        model,
        user_id: UUID,
        items: Sequence[Any],
        to_values: Callable[[Any], Dict[str, Any]],
    ) -> None:
        existing = {row.id: row for row in db.query(model).filter(model.user_id == user_id).all()}
        inserted = updated = 0
        for position, item in enumerate(items):
            values = to_values(item)
            row = existing.pop(item.id, None)
            if row is None:
                db.add(model(id=item.id, user_id=user_id, position=position, **values))
                inserted += 1
                continue
            for column, value in values.items():
                setattr(row, column, value)
            row.position = position
            updated += 1
        for row in existing.values():
            db.delete(row)
        logger.debug(
            "Synced %s: %d inserted, %d updated, %d deleted",
            model.__tablename__,
            inserted,
            updated,
            len(existing),
        )


def _require_user(user_id: Optional[UUID]) -> UUID:
    if user_id is None:
        raise PersistenceError("No session user resolved for database storage")
    return user_id
