"""FastAPI dependencies: store, configuration and caller session.

The app factory places the store and config on `app.state`; tests replace
them through `app.dependency_overrides`.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from survey_service.config import AppConfig
from survey_service.db.store import SurveyStore
from survey_service.models.session import Session


def get_store(request: Request) -> SurveyStore:
    return request.app.state.store


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_session(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> Session:
    """Session for the identity asserted by the upstream auth gateway."""
    user_id = (x_user_id or "").strip() or None
    return Session(user_id=user_id)


__all__ = ["get_store", "get_config", "get_session"]
