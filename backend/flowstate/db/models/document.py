"""Document asset ORM model."""
from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, Text, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from flowstate.db.base import Base
from flowstate.db.types import EpochMillis, JSONBCompat


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_user_id", "user_id"),)

    id = Column(Text, primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    category = Column(Text, nullable=False, server_default=sa_text("'General'"))
    blocks = Column(JSONBCompat, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)
    last_modified = Column(EpochMillis, nullable=False)
