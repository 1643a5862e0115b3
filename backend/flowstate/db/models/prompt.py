"""Prompt library ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from flowstate.db.base import Base
from flowstate.db.types import JSONBCompat


class Prompt(Base):
    __tablename__ = "prompts"
    __table_args__ = (Index("ix_prompts_user_id", "user_id"),)

    id = Column(Text, primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(Text, nullable=False, server_default=sa_text("'Uncategorized'"))
    usage_count = Column(Integer, nullable=False, server_default=sa_text("0"))
    tags = Column(JSONBCompat, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
