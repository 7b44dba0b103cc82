"""Results loading: fetch a survey and its answers, then aggregate."""

from __future__ import annotations

import logging
from typing import List

from survey_service.db.store import StoreError, SurveyStore
from survey_service.logic.aggregator import aggregate
from survey_service.logic.repository_surveys import load_responses_and_answers, require_survey_schema
from survey_service.models.results import SurveyResults
from survey_service.models.schema import Answer, SurveyOut

logger = logging.getLogger(__name__)


def load_survey_results(store: SurveyStore, survey_id: str) -> SurveyResults:
    """Return aggregated results for a survey.

    An unknown survey raises SurveyNotFoundError. A store failure while
    fetching answers degrades to zero results instead of propagating.
    """
    schema = require_survey_schema(store, survey_id)

    degraded = False
    detail = None
    responses_count = 0
    answers: List[Answer] = []
    try:
        responses_count, answers = load_responses_and_answers(store, survey_id)
    except StoreError as exc:
        logger.error("results.answers_fetch_failed survey_id=%s", survey_id, exc_info=True)
        degraded = True
        detail = str(exc)

    results = aggregate(schema, answers)
    logger.info(
        "results.aggregate survey_id=%s responses=%s answers=%s degraded=%s",
        survey_id,
        responses_count,
        len(answers),
        degraded,
    )
    header = SurveyOut(**schema.model_dump(include=set(SurveyOut.model_fields)))
    return SurveyResults(
        survey=header,
        responses_count=responses_count,
        results=list(results.values()),
        degraded=degraded,
        detail=detail,
    )


__all__ = ["load_survey_results"]
