"""ORM models exposed for metadata discovery."""
from flowstate.db.models.document import Document
from flowstate.db.models.plan import Plan
from flowstate.db.models.prompt import Prompt
from flowstate.db.models.strengths_config import StrengthsConfig
from flowstate.db.models.user import User

__all__ = [
    "Document",
    "Plan",
    "Prompt",
    "StrengthsConfig",
    "User",
]
