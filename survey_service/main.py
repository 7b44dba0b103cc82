from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from survey_service.config import AppConfig, load_config
from survey_service.db.base import get_engine
from survey_service.db.migrations_runner import apply_migrations
from survey_service.db.store import StoreError, SurveyStore
from survey_service.http.problem import (
    handle_domain_error,
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from survey_service.http.request_id import RequestIdMiddleware
from survey_service.logging_setup import configure_logging
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    PermissionDeniedError,
    SurveyNotFoundError,
    SurveyValidationError,
)
from survey_service.middleware.cors import apply_cors
from survey_service.routes import api_router

logger = logging.getLogger(__name__)

_DOMAIN_ERRORS = (
    SurveyValidationError,
    SurveyNotFoundError,
    AuthenticationRequiredError,
    PermissionDeniedError,
    StoreError,
)


def _is_in_memory(dsn: str) -> bool:
    return dsn.startswith("sqlite") and ":memory:" in dsn


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the FastAPI application.

    Wires logging, the shared store, problem+json handlers, request-id and
    CORS middleware, and mounts the API under /api/v1.
    """
    cfg = config or load_config()
    configure_logging(cfg.logging.level)

    app = FastAPI(title="Survey Service")
    app.state.config = cfg
    app.state.store = SurveyStore(get_engine(cfg.database.dsn))

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    for exc_type in _DOMAIN_ERRORS:
        app.add_exception_handler(exc_type, handle_domain_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    apply_cors(app, origins=cfg.cors.allow_origins)
    # Added last so it wraps CORS and tags every response
    app.add_middleware(RequestIdMiddleware)

    # Apply migrations on startup to avoid import-time side effects
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not cfg.database.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        applied = apply_migrations(
            app.state.store.engine,
            cfg.database.migrations_dir,
            journal=not _is_in_memory(cfg.database.dsn),
        )
        logger.info("startup_migrations applied=%s", applied)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    def health() -> dict:
        store: SurveyStore = app.state.store
        ok = store.ping()
        return {"status": "ok" if ok else "degraded", "db": ok}

    logger.info(
        "app.created dialect=%s require_login_to_author=%s require_login_to_respond=%s",
        app.state.store.engine.dialect.name,
        cfg.auth.require_login_to_author,
        cfg.auth.require_login_to_respond,
    )
    return app


__all__ = ["create_app"]
