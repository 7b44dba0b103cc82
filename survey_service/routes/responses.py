"""Response submission endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from survey_service.config import AppConfig
from survey_service.db.store import SurveyStore
from survey_service.http.dependencies import get_config, get_session, get_store
from survey_service.logic.collector import ResponseCollector
from survey_service.logic.repository_surveys import require_survey_schema
from survey_service.models.schema import ResponseOut, SubmissionIn
from survey_service.models.session import Session

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/surveys/{survey_id}/responses",
    status_code=201,
    response_model=ResponseOut,
    summary="Submit a complete set of answers for a survey",
    operation_id="submitResponse",
)
def submit_response(
    survey_id: str,
    payload: SubmissionIn,
    response: Response,
    store: SurveyStore = Depends(get_store),
    session: Session = Depends(get_session),
    config: AppConfig = Depends(get_config),
) -> ResponseOut:
    schema = require_survey_schema(store, survey_id)
    collector = ResponseCollector(store, session, require_auth=config.auth.require_login_to_respond)
    created = collector.submit(schema, payload.answers)
    response.headers["Location"] = f"/api/v1/surveys/{survey_id}/responses/{created.id}"
    return created


__all__ = ["router"]
