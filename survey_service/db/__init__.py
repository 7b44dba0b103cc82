"""Database bootstrap for the survey service.

Exposes engine construction, the SQL migrations runner and the generic store
client. Route handlers never touch these directly; they go through
`survey_service.logic`.
"""

from survey_service.db.base import build_engine, get_engine
from survey_service.db.migrations_runner import apply_migrations
from survey_service.db.store import StoreError, StoreSession, SurveyStore

__all__ = [
    "build_engine",
    "get_engine",
    "apply_migrations",
    "StoreError",
    "StoreSession",
    "SurveyStore",
]
