"""Day plan ORM model."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text
from sqlalchemy.dialects.postgresql import UUID

from flowstate.db.base import Base
from flowstate.db.types import EpochMillis, JSONBCompat


class Plan(Base):
    __tablename__ = "plans"
    __table_args__ = (Index("ix_plans_user_id", "user_id"),)

    id = Column(Text, primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    goal = Column(Text, nullable=False)
    tasks = Column(JSONBCompat, nullable=False, default=list)
    energy_distribution = Column(JSONBCompat, nullable=False, default=list)
    journal_notes = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(EpochMillis, nullable=False)
    updated_at = Column(EpochMillis, nullable=False)
