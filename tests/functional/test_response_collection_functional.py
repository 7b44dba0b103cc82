"""Functional tests for response collection and answer shaping."""

from __future__ import annotations

from typing import Any, Dict

import pytest

from survey_service.db.store import SurveyStore
from survey_service.logic.collector import ResponseCollector, find_unanswered, shape_answers
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    IncompleteSubmissionError,
    InvalidAnswerError,
)
from survey_service.models.schema import SurveySchema
from survey_service.models.session import ANONYMOUS, Session


def _full_answers(schema: SurveySchema, **overrides: Any) -> Dict[str, Any]:
    rating, drink, extras, comment = schema.questions
    answers: Dict[str, Any] = {
        rating.id: 5,
        drink.id: drink.options[1].id,
        extras.id: [extras.options[0].id, extras.options[2].id],
        comment.id: "More oat milk please",
    }
    for position, value in overrides.items():
        answers[schema.questions[int(position[1:])].id] = value
    return answers


def _collector(store: SurveyStore) -> ResponseCollector:
    return ResponseCollector(store, ANONYMOUS)


# ----------------------------------------------------------------------------
# Shaping
# ----------------------------------------------------------------------------


def test_submission_fans_out_into_answer_rows(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    rating, drink, extras, comment = coffee_survey.questions
    created = _collector(store).submit(coffee_survey, _full_answers(coffee_survey))

    assert created.survey_id == coffee_survey.id
    assert created.answers_count == 5
    assert created.created_at.endswith("Z")

    responses = store.select("responses")
    assert [r["id"] for r in responses] == [created.id]

    rows = store.select("answers", {"response_id": created.id})
    by_question: Dict[str, list] = {}
    for row in rows:
        by_question.setdefault(row["question_id"], []).append(row)

    assert [r["answer_text"] for r in by_question[rating.id]] == ["5"]
    assert [r["selected_option_id"] for r in by_question[drink.id]] == [drink.options[1].id]
    assert sorted(r["selected_option_id"] for r in by_question[extras.id]) == sorted(
        [extras.options[0].id, extras.options[2].id]
    )
    assert all(r["answer_text"] is None for r in by_question[extras.id])
    assert [r["answer_text"] for r in by_question[comment.id]] == ["More oat milk please"]


def test_rating_accepts_numeric_string(coffee_survey: SurveySchema) -> None:
    rows = shape_answers(coffee_survey, _full_answers(coffee_survey, q0=" 3 "), "r1")
    assert rows[0]["answer_text"] == "3"
    assert rows[0]["selected_option_id"] is None


@pytest.mark.parametrize("value", [0, 6, "ten", True, [4]])
def test_rating_rejects_out_of_range_or_non_integer(coffee_survey: SurveySchema, value: Any) -> None:
    with pytest.raises(InvalidAnswerError) as excinfo:
        shape_answers(coffee_survey, _full_answers(coffee_survey, q0=value), "r1")
    assert excinfo.value.question_id == coffee_survey.questions[0].id


def test_duplicate_multi_select_choices_collapse(coffee_survey: SurveySchema) -> None:
    extras = coffee_survey.questions[2]
    milk = extras.options[0].id
    rows = shape_answers(coffee_survey, _full_answers(coffee_survey, q2=[milk, milk]), "r1")
    assert [r["selected_option_id"] for r in rows if r["question_id"] == extras.id] == [milk]


def test_single_string_accepted_for_multi_select(coffee_survey: SurveySchema) -> None:
    extras = coffee_survey.questions[2]
    sugar = extras.options[1].id
    rows = shape_answers(coffee_survey, _full_answers(coffee_survey, q2=sugar), "r1")
    assert [r["selected_option_id"] for r in rows if r["question_id"] == extras.id] == [sugar]


def test_unknown_option_or_question_is_rejected(coffee_survey: SurveySchema) -> None:
    with pytest.raises(InvalidAnswerError):
        shape_answers(coffee_survey, _full_answers(coffee_survey, q1="not-an-option"), "r1")
    with pytest.raises(InvalidAnswerError):
        shape_answers(coffee_survey, _full_answers(coffee_survey, q2=["nope"]), "r1")

    answers = _full_answers(coffee_survey)
    answers["stray-question"] = "hello"
    with pytest.raises(InvalidAnswerError) as excinfo:
        shape_answers(coffee_survey, answers, "r1")
    assert excinfo.value.question_id == "stray-question"


def test_free_text_rejects_structured_values(coffee_survey: SurveySchema) -> None:
    with pytest.raises(InvalidAnswerError):
        shape_answers(coffee_survey, _full_answers(coffee_survey, q3=["a", "b"]), "r1")


# ----------------------------------------------------------------------------
# Completeness
# ----------------------------------------------------------------------------


def test_find_unanswered_lists_ids_in_question_order(coffee_survey: SurveySchema) -> None:
    rating, drink, extras, comment = coffee_survey.questions
    answers = {comment.id: "   ", extras.id: [], drink.id: drink.options[0].id}
    assert find_unanswered(coffee_survey, answers) == [rating.id, extras.id, comment.id]


def test_incomplete_submission_writes_nothing(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    answers = _full_answers(coffee_survey)
    del answers[coffee_survey.questions[3].id]
    with pytest.raises(IncompleteSubmissionError) as excinfo:
        _collector(store).submit(coffee_survey, answers)
    assert excinfo.value.unanswered == [coffee_survey.questions[3].id]
    assert store.select("responses") == []
    assert store.select("answers") == []


def test_empty_multi_select_counts_as_unanswered(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    with pytest.raises(IncompleteSubmissionError) as excinfo:
        _collector(store).submit(coffee_survey, _full_answers(coffee_survey, q2=[]))
    assert excinfo.value.unanswered == [coffee_survey.questions[2].id]


def test_invalid_answer_leaves_no_response_row(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    with pytest.raises(InvalidAnswerError):
        _collector(store).submit(coffee_survey, _full_answers(coffee_survey, q0=9))
    assert store.select("responses") == []


def test_login_required_to_respond_when_configured(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    strict = ResponseCollector(store, ANONYMOUS, require_auth=True)
    with pytest.raises(AuthenticationRequiredError):
        strict.submit(coffee_survey, _full_answers(coffee_survey))

    signed_in = ResponseCollector(store, Session(user_id="respondent-7"), require_auth=True)
    assert signed_in.submit(coffee_survey, _full_answers(coffee_survey)).answers_count == 5


def test_responses_are_independent(store: SurveyStore, coffee_survey: SurveySchema) -> None:
    collector = _collector(store)
    first = collector.submit(coffee_survey, _full_answers(coffee_survey))
    second = collector.submit(coffee_survey, _full_answers(coffee_survey, q0=1))
    assert first.id != second.id
    assert len(store.select("responses", {"survey_id": coffee_survey.id})) == 2
    assert len(store.select("answers")) == 10


# ----------------------------------------------------------------------------
# HTTP
# ----------------------------------------------------------------------------


def test_api_submit_response_returns_201(client, coffee_survey: SurveySchema) -> None:
    path = f"/api/v1/surveys/{coffee_survey.id}/responses"
    res = client.post(path, json={"answers": _full_answers(coffee_survey)})
    assert res.status_code == 201
    body = res.json()
    assert body["answers_count"] == 5
    assert res.headers["Location"] == f"{path}/{body['id']}"


def test_api_incomplete_submission_lists_unanswered(client, coffee_survey: SurveySchema) -> None:
    answers = _full_answers(coffee_survey, q0=None)
    res = client.post(f"/api/v1/surveys/{coffee_survey.id}/responses", json={"answers": answers})
    assert res.status_code == 422
    body = res.json()
    assert body["code"] == "INCOMPLETE_SUBMISSION"
    assert body["unanswered"] == [coffee_survey.questions[0].id]


def test_api_invalid_answer_names_question(client, coffee_survey: SurveySchema) -> None:
    answers = _full_answers(coffee_survey, q1="bogus")
    res = client.post(f"/api/v1/surveys/{coffee_survey.id}/responses", json={"answers": answers})
    assert res.status_code == 422
    assert res.json()["code"] == "INVALID_ANSWER"
    assert res.json()["question_id"] == coffee_survey.questions[1].id


def test_api_submit_to_unknown_survey_is_404(client) -> None:
    res = client.post("/api/v1/surveys/missing/responses", json={"answers": {}})
    assert res.status_code == 404
    assert res.json()["code"] == "SURVEY_NOT_FOUND"
