"""Response collection: validate a submission and fan it out into answer rows.

A submission maps question ids to inputs: a string (free text, rating or a
single option id), an integer rating, or a list of option ids (multi-select).
One response row is written together with its answer rows:

- multi-select: one row per selected option
- single choice: one row with ``selected_option_id`` set
- free text / rating: one row with ``answer_text`` set
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, List, Mapping, Optional

from survey_service.db.store import Row, SurveyStore
from survey_service.logic.timestamps import format_created_at
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    IncompleteSubmissionError,
    InvalidAnswerError,
)
from survey_service.models.question_kind import RATING_MAX, RATING_MIN, QuestionKind
from survey_service.models.schema import QuestionOut, ResponseOut, SurveySchema
from survey_service.models.session import Session

logger = logging.getLogger(__name__)


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def find_unanswered(schema: SurveySchema, answers: Mapping[str, Any]) -> List[str]:
    """Question ids (schema order) with no usable input."""
    return [q.id for q in schema.questions if _is_absent(answers.get(q.id))]


def _answer_row(response_id: str, question_id: str, text: Optional[str], option_id: Optional[str]) -> Row:
    return {
        "id": str(uuid.uuid4()),
        "response_id": response_id,
        "question_id": question_id,
        "answer_text": text,
        "selected_option_id": option_id,
    }


def _selected_options(question: QuestionOut, value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise InvalidAnswerError(question.id, "expected a list of option ids")
    known = set(question.option_ids())
    selected: List[str] = []
    for option_id in value:
        if option_id not in known:
            raise InvalidAnswerError(question.id, f"unknown option {option_id!r}")
        if option_id not in selected:
            selected.append(option_id)
    return selected


def _single_option(question: QuestionOut, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidAnswerError(question.id, "expected a single option id")
    if value not in question.option_ids():
        raise InvalidAnswerError(question.id, f"unknown option {value!r}")
    return value


def _rating(question: QuestionOut, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidAnswerError(question.id, "rating must be an integer")
    if isinstance(value, int):
        rating = value
    elif isinstance(value, str):
        try:
            rating = int(value.strip())
        except ValueError:
            raise InvalidAnswerError(question.id, "rating must be an integer") from None
    else:
        raise InvalidAnswerError(question.id, "rating must be an integer")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise InvalidAnswerError(question.id, f"rating must be between {RATING_MIN} and {RATING_MAX}")
    return rating


def _free_text(question: QuestionOut, value: Any) -> str:
    if isinstance(value, (list, tuple, dict)):
        raise InvalidAnswerError(question.id, "expected text")
    return str(value)


def shape_answers(schema: SurveySchema, answers: Mapping[str, Any], response_id: str) -> List[Row]:
    """Build answer rows for ``response_id`` in the order answers were received."""
    rows: List[Row] = []
    for question_id, value in answers.items():
        question = schema.question(question_id)
        if question is None:
            raise InvalidAnswerError(question_id, "question does not belong to this survey")
        if question.is_multi_select:
            for option_id in _selected_options(question, value):
                rows.append(_answer_row(response_id, question.id, None, option_id))
        elif question.type == QuestionKind.SINGLE_CHOICE:
            rows.append(_answer_row(response_id, question.id, None, _single_option(question, value)))
        elif question.type == QuestionKind.RATING:
            rows.append(_answer_row(response_id, question.id, str(_rating(question, value)), None))
        else:
            rows.append(_answer_row(response_id, question.id, _free_text(question, value), None))
    return rows


class ResponseCollector:
    """Accepts submissions for surveys on behalf of one session."""

    def __init__(self, store: SurveyStore, session: Session, *, require_auth: bool = False) -> None:
        self.store = store
        self.session = session
        self.require_auth = require_auth

    def submit(self, schema: SurveySchema, answers: Mapping[str, Any]) -> ResponseOut:
        if self.require_auth and not self.session.is_authenticated:
            raise AuthenticationRequiredError("login required to respond to this survey")

        unanswered = find_unanswered(schema, answers)
        if unanswered:
            logger.info(
                "response.submit.incomplete survey_id=%s unanswered=%s",
                schema.id,
                unanswered,
            )
            raise IncompleteSubmissionError(unanswered)

        response_id = str(uuid.uuid4())
        # Shape before writing so invalid input never leaves a response row
        rows = shape_answers(schema, answers, response_id)
        created_at = format_created_at()
        with self.store.transaction() as tx:
            tx.insert("responses", [{"id": response_id, "survey_id": schema.id, "created_at": created_at}])
            tx.insert("answers", rows)

        logger.info(
            "response.submit.success survey_id=%s response_id=%s answers=%s",
            schema.id,
            response_id,
            len(rows),
        )
        return ResponseOut(id=response_id, survey_id=schema.id, created_at=created_at, answers_count=len(rows))


__all__ = ["ResponseCollector", "find_unanswered", "shape_answers"]
