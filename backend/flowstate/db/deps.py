"""FastAPI dependencies for persistence."""
from __future__ import annotations

from flowstate.services.storage.facade import StorageFacade
from flowstate.services.storage.factory import get_storage_facade


def get_storage() -> StorageFacade:
    """Return the process-wide storage facade (backend chosen on first use)."""
    return get_storage_facade()
