"""Survey-related data access helpers.

Keeps route handlers and the core computations free of store queries. Rows
come back from `SurveyStore` as plain dicts and are mapped onto the pydantic
schema models here.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from survey_service.db.store import Row, SurveyStore
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    PermissionDeniedError,
    SurveyNotFoundError,
)
from survey_service.models.question_kind import is_choice
from survey_service.models.schema import Answer, OptionOut, QuestionOut, SurveyOut, SurveySchema
from survey_service.models.session import Session

logger = logging.getLogger(__name__)


def survey_from_row(row: Row) -> SurveyOut:
    return SurveyOut(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description"),
        owner_id=row.get("owner_id"),
        created_at=str(row["created_at"]),
    )


def schema_from_rows(
    survey_row: Row,
    question_rows: Iterable[Row],
    option_rows: Iterable[Row],
) -> SurveySchema:
    """Assemble a SurveySchema, ordering questions and options by order_index."""
    options_by_question: Dict[str, List[OptionOut]] = defaultdict(list)
    for o in option_rows:
        options_by_question[str(o["question_id"])].append(
            OptionOut(
                id=str(o["id"]),
                question_id=str(o["question_id"]),
                text=o["option_text"],
                order_index=int(o["order_index"]),
            )
        )

    questions: List[QuestionOut] = []
    for q in sorted(question_rows, key=lambda r: int(r["order_index"])):
        qid = str(q["id"])
        opts = sorted(options_by_question.get(qid, []), key=lambda o: o.order_index)
        questions.append(
            QuestionOut(
                id=qid,
                survey_id=str(q["survey_id"]),
                text=q["question_text"],
                type=q["question_type"],
                order_index=int(q["order_index"]),
                allow_multiple=bool(q.get("allow_multiple")),
                options=opts,
            )
        )

    header = survey_from_row(survey_row)
    return SurveySchema(**header.model_dump(), questions=questions)


def get_survey_schema(store: SurveyStore, survey_id: str) -> Optional[SurveySchema]:
    """Load a survey with its questions and options, or None when unknown."""
    with store.transaction() as tx:
        rows = tx.select("surveys", {"id": survey_id})
        if not rows:
            return None
        question_rows = tx.select("questions", {"survey_id": survey_id}, order_by=["order_index"])
        choice_ids = [q["id"] for q in question_rows if is_choice(q["question_type"])]
        option_rows = tx.select(
            "question_options",
            {"question_id": choice_ids},
            order_by=["question_id", "order_index"],
        )
    return schema_from_rows(rows[0], question_rows, option_rows)


def require_survey_schema(store: SurveyStore, survey_id: str) -> SurveySchema:
    schema = get_survey_schema(store, survey_id)
    if schema is None:
        raise SurveyNotFoundError(survey_id)
    return schema


def list_surveys(store: SurveyStore, owner_id: Optional[str] = None) -> List[SurveyOut]:
    """List surveys newest first, optionally restricted to one owner."""
    filters = {"owner_id": owner_id} if owner_id is not None else None
    rows = store.select("surveys", filters, order_by=["-created_at"])
    return [survey_from_row(r) for r in rows]


def load_responses_and_answers(store: SurveyStore, survey_id: str) -> Tuple[int, List[Answer]]:
    """Return (responses_count, answers) for a survey.

    Answers are in arrival order: grouped by response creation time.
    """
    with store.transaction() as tx:
        responses = tx.select("responses", {"survey_id": survey_id}, order_by=["created_at", "id"])
        response_ids = [r["id"] for r in responses]
        answer_rows = tx.select("answers", {"response_id": response_ids})

    position = {rid: i for i, rid in enumerate(response_ids)}
    answer_rows.sort(key=lambda a: position.get(a["response_id"], len(position)))
    answers = [
        Answer(
            id=a.get("id"),
            response_id=a.get("response_id"),
            question_id=str(a["question_id"]),
            answer_text=a.get("answer_text"),
            selected_option_id=a.get("selected_option_id"),
        )
        for a in answer_rows
    ]
    return len(responses), answers


def delete_survey(store: SurveyStore, survey_id: str, session: Session) -> None:
    """Delete a survey owned by the session user; children cascade."""
    if not session.is_authenticated:
        raise AuthenticationRequiredError("login required to delete a survey")
    rows = store.select("surveys", {"id": survey_id})
    if not rows:
        raise SurveyNotFoundError(survey_id)
    owner_id = rows[0].get("owner_id")
    if owner_id is None or owner_id != session.user_id:
        raise PermissionDeniedError("only the survey owner may delete it")
    store.delete("surveys", {"id": survey_id})
    logger.info("survey.delete survey_id=%s owner_id=%s", survey_id, owner_id)


__all__ = [
    "survey_from_row",
    "schema_from_rows",
    "get_survey_schema",
    "require_survey_schema",
    "list_surveys",
    "load_responses_and_answers",
    "delete_survey",
]
