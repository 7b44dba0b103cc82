"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and the handler callables registered by the
app factory. Domain errors are shaped from the central error map.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from survey_service.db.store import StoreError
from survey_service.http.error_mapping import lookup
from survey_service.logic.validation import IncompleteSubmissionError, InvalidAnswerError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(status: int, title: str, detail: str = "", code: str | None = None, **extra: Any) -> JSONResponse:
    body: Dict[str, Any] = {"type": "about:blank", "title": title, "status": status}
    if detail:
        body["detail"] = detail
    if code:
        body["code"] = code
    body.update(extra)
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    entry = lookup(exc)
    if entry is None:
        return await handle_unexpected_error(request, exc)
    status = int(entry["status"])  # type: ignore[arg-type]
    extra: Dict[str, Any] = {}
    detail = str(exc)
    if isinstance(exc, IncompleteSubmissionError):
        extra["unanswered"] = exc.unanswered
    elif isinstance(exc, InvalidAnswerError):
        extra["question_id"] = exc.question_id
    elif isinstance(exc, StoreError):
        # Store messages carry driver internals
        detail = "The survey store is unavailable, please retry later"
    logger.info(
        "error_handler.handle code=%s status=%s path=%s",
        entry["code"],
        status,
        request.url.path,
    )
    return problem_response(status, str(entry["title"]), detail, str(entry["code"]), **extra)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        return JSONResponse(exc.detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=exc.headers)
    return JSONResponse(
        {"type": "about:blank", "title": "Error", "status": status, "detail": str(exc.detail or "")},
        status_code=status,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=exc.headers,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = [
        {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
        for e in exc.errors()
    ]
    return problem_response(
        422,
        "Invalid Request",
        "Request validation failed",
        "REQUEST_VALIDATION_FAILED",
        errors=errors,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(500, "Internal Server Error")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_domain_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
