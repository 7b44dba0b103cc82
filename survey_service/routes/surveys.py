"""Survey authoring, listing, retrieval and deletion endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from survey_service.config import AppConfig
from survey_service.db.store import SurveyStore
from survey_service.http.dependencies import get_config, get_session, get_store
from survey_service.logic.builder import AuthoringBuilder
from survey_service.logic.repository_surveys import delete_survey, list_surveys, require_survey_schema
from survey_service.logic.validation import AuthenticationRequiredError
from survey_service.models.schema import SurveyCreateIn, SurveyOut, SurveySchema
from survey_service.models.session import Session

router = APIRouter(prefix="/surveys")
logger = logging.getLogger(__name__)


@router.post(
    "",
    status_code=201,
    response_model=SurveySchema,
    summary="Create a survey with its questions and options",
    operation_id="createSurvey",
)
def create_survey(
    payload: SurveyCreateIn,
    response: Response,
    store: SurveyStore = Depends(get_store),
    session: Session = Depends(get_session),
    config: AppConfig = Depends(get_config),
) -> SurveySchema:
    logger.info(
        "survey.create.entry questions=%s user_id=%s",
        len(payload.questions),
        session.user_id,
    )
    builder = AuthoringBuilder.from_draft(
        session,
        payload,
        require_auth=config.auth.require_login_to_author,
    )
    survey = builder.commit(store)
    response.headers["Location"] = f"/api/v1/surveys/{survey.id}"
    return survey


@router.get(
    "",
    response_model=List[SurveyOut],
    summary="List surveys, newest first",
    operation_id="listSurveys",
)
def get_surveys(store: SurveyStore = Depends(get_store)) -> List[SurveyOut]:
    return list_surveys(store)


@router.get(
    "/mine",
    response_model=List[SurveyOut],
    summary="List surveys owned by the caller",
    operation_id="listMySurveys",
)
def get_my_surveys(
    store: SurveyStore = Depends(get_store),
    session: Session = Depends(get_session),
) -> List[SurveyOut]:
    if not session.is_authenticated:
        raise AuthenticationRequiredError("login required to list your surveys")
    return list_surveys(store, owner_id=session.user_id)


@router.get(
    "/{survey_id}",
    response_model=SurveySchema,
    summary="Get a survey with ordered questions and options",
    operation_id="getSurvey",
)
def get_survey(survey_id: str, store: SurveyStore = Depends(get_store)) -> SurveySchema:
    return require_survey_schema(store, survey_id)


@router.delete(
    "/{survey_id}",
    status_code=204,
    summary="Delete a survey and everything under it",
    operation_id="deleteSurvey",
)
def remove_survey(
    survey_id: str,
    store: SurveyStore = Depends(get_store),
    session: Session = Depends(get_session),
) -> Response:
    delete_survey(store, survey_id, session)
    return Response(status_code=204)


__all__ = ["router"]
