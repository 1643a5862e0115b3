"""Storage facade factory."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from flowstate.core.config import settings
from flowstate.db.session import create_db_engine, create_tables, make_session_factory
from flowstate.services.storage.database import DatabaseStorageBackend
from flowstate.services.storage.facade import StorageFacade
from flowstate.services.storage.local import LocalStorageBackend

logger = logging.getLogger(__name__)


def build_storage_facade(database_url: str | None, local_dir: str | Path) -> StorageFacade:
    """Pick the backend once: the database if it connects, otherwise local storage."""
    local = LocalStorageBackend(local_dir)
    if not database_url:
        logger.warning("DATABASE_URL not set; falling back to local storage.")
        return StorageFacade(local=local, database=None, database_configured=False)

    try:
        engine = create_db_engine(database_url)
        if settings.database_create_tables:
            create_tables(engine)
    except (SQLAlchemyError, ImportError) as exc:
        # ImportError covers a missing DB driver package.
        logger.warning(
            "Database unavailable (%s); local storage serves the rest of this process.",
            exc,
        )
        return StorageFacade(local=local, database=None, database_configured=True)

    return StorageFacade(
        local=local,
        database=DatabaseStorageBackend(make_session_factory(engine)),
        database_configured=True,
    )


@lru_cache
def get_storage_facade() -> StorageFacade:
    facade = build_storage_facade(settings.database_url, settings.local_storage_dir)
    facade.start_session()
    return facade
