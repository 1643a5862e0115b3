"""Database utilities and models."""

from flowstate.db.base import Base
from flowstate.db import models  # noqa: F401  (imported for side effects)

__all__ = ["Base"]
