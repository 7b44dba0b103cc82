"""Functional test bootstrap.

Every test gets its own in-memory SQLite database (StaticPool keeps the single
connection alive) with the SQL migrations applied, wrapped in a SurveyStore.
The `client` fixture builds the FastAPI app and overrides the store
dependency so HTTP calls and direct store assertions see the same data.
"""

from __future__ import annotations

import pathlib
from typing import Iterator, Sequence

import pytest
from fastapi.testclient import TestClient

from survey_service.config import AppConfig, AuthConfig, DatabaseConfig
from survey_service.db.base import build_engine
from survey_service.db.migrations_runner import apply_migrations
from survey_service.db.store import SurveyStore
from survey_service.http.dependencies import get_store
from survey_service.logic.builder import AuthoringBuilder, SetOptions, SetText, SetType
from survey_service.main import create_app
from survey_service.models.schema import SurveySchema
from survey_service.models.session import Session

_ROOT = pathlib.Path(__file__).resolve().parents[2]
MIGRATIONS_DIR = _ROOT / "migrations"
MEMORY_DSN = "sqlite+pysqlite:///:memory:"

OWNER = Session(user_id="owner-1")
OWNER_HEADERS = {"X-User-Id": "owner-1"}


@pytest.fixture
def store() -> Iterator[SurveyStore]:
    engine = build_engine(MEMORY_DSN)
    apply_migrations(engine, MIGRATIONS_DIR, journal=False)
    yield SurveyStore(engine)
    engine.dispose()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn=MEMORY_DSN, auto_apply_migrations=False),
        auth=AuthConfig(require_login_to_author=True, require_login_to_respond=False),
    )


@pytest.fixture
def client(store: SurveyStore, app_config: AppConfig) -> Iterator[TestClient]:
    app = create_app(app_config)
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c


def build_survey(
    store: SurveyStore,
    title: str,
    questions: Sequence[tuple],
    *,
    session: Session = OWNER,
) -> SurveySchema:
    """Commit a survey from (text, type, options) tuples."""
    builder = AuthoringBuilder(session, title=title)
    for text, kind, options in questions:
        qid = builder.add_question()
        builder.update_question(qid, SetText(text))
        builder.update_question(qid, SetType(kind))
        if options:
            builder.update_question(qid, SetOptions(tuple(options)))
    return builder.commit(store)


@pytest.fixture
def make_survey(store: SurveyStore):
    def _make(title: str, questions: Sequence[tuple], *, session: Session = OWNER) -> SurveySchema:
        return build_survey(store, title, questions, session=session)

    return _make


@pytest.fixture
def coffee_survey(store: SurveyStore) -> SurveySchema:
    return build_survey(
        store,
        "Coffee Preference",
        [
            ("How much do you like our coffee?", "rating", None),
            ("Favourite drink", "single_choice", ["Espresso", "Latte", "Cappuccino"]),
            ("Extras you add", "multi_choice", ["Milk", "Sugar", "Syrup"]),
            ("Anything else?", "free_text", None),
        ],
    )
