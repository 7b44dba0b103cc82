"""Aggregated results endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from survey_service.db.store import SurveyStore
from survey_service.http.dependencies import get_store
from survey_service.logic.results import load_survey_results
from survey_service.models.results import SurveyResults

router = APIRouter()


@router.get(
    "/surveys/{survey_id}/results",
    response_model=SurveyResults,
    summary="Per-question tallies, percentages and rating means",
    operation_id="getSurveyResults",
)
def get_results(survey_id: str, store: SurveyStore = Depends(get_store)) -> SurveyResults:
    return load_survey_results(store, survey_id)


__all__ = ["router"]
