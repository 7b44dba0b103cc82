"""Central error mapping for domain exceptions.

Single source of truth for the problem+json title, code and HTTP status of
each domain error. Handlers resolve an exception through its MRO, so a
subclass without its own entry inherits its parent's mapping.
"""

from __future__ import annotations

from typing import Dict, Optional

from survey_service.db.store import StoreError
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    EmptyQuestionTextError,
    EmptyTitleError,
    IncompleteSubmissionError,
    InsufficientOptionsError,
    InvalidAnswerError,
    NoQuestionsError,
    PermissionDeniedError,
    SurveyNotFoundError,
    SurveyValidationError,
)

ERROR_MAP: Dict[type, Dict[str, object]] = {
    EmptyTitleError: {"code": "EMPTY_TITLE", "status": 422, "title": "Invalid Survey"},
    NoQuestionsError: {"code": "NO_QUESTIONS", "status": 422, "title": "Invalid Survey"},
    EmptyQuestionTextError: {"code": "EMPTY_QUESTION_TEXT", "status": 422, "title": "Invalid Survey"},
    InsufficientOptionsError: {"code": "INSUFFICIENT_OPTIONS", "status": 422, "title": "Invalid Survey"},
    IncompleteSubmissionError: {"code": "INCOMPLETE_SUBMISSION", "status": 422, "title": "Incomplete Submission"},
    InvalidAnswerError: {"code": "INVALID_ANSWER", "status": 422, "title": "Invalid Answer"},
    SurveyValidationError: {"code": "VALIDATION_FAILED", "status": 422, "title": "Unprocessable Entity"},
    SurveyNotFoundError: {"code": "SURVEY_NOT_FOUND", "status": 404, "title": "Survey not found"},
    AuthenticationRequiredError: {"code": "AUTHENTICATION_REQUIRED", "status": 401, "title": "Unauthorized"},
    PermissionDeniedError: {"code": "PERMISSION_DENIED", "status": 403, "title": "Forbidden"},
    StoreError: {"code": "STORE_UNAVAILABLE", "status": 503, "title": "Service Unavailable"},
}


def lookup(exc: BaseException) -> Optional[Dict[str, object]]:
    for cls in type(exc).__mro__:
        entry = ERROR_MAP.get(cls)
        if entry is not None:
            return entry
    return None


__all__ = ["ERROR_MAP", "lookup"]
