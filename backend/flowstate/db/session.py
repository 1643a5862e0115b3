"""Engine and session factory construction."""
from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from flowstate.db.base import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """Create an engine and prove the connection works before handing it out."""
    engine = create_engine(database_url, pool_pre_ping=True, future=True)
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    return engine


def create_tables(engine: Engine) -> None:
    """Create any missing tables; Alembic owns migrations beyond the initial schema."""
    from flowstate.db import models  # noqa: F401  ensure models are registered

    Base.metadata.create_all(bind=engine)
    logger.debug("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)
