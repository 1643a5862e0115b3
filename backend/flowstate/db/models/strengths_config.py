"""Strengths configuration ORM model."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import UUID

from flowstate.db.base import Base
from flowstate.db.types import EpochMillis, JSONBCompat


class StrengthsConfig(Base):
    __tablename__ = "strengths_configs"
    __table_args__ = (Index("ix_strengths_configs_user_id", "user_id", unique=True),)

    id = Column(Text, primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    strengths_raw_text = Column(Text, nullable=False)
    top_strengths = Column(JSONBCompat, nullable=False, default=list)
    created_at = Column(EpochMillis, nullable=False)
    updated_at = Column(EpochMillis, nullable=False)
