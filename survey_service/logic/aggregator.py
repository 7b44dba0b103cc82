"""Results aggregation over a survey schema and its answers.

Pure computation: no store access, no I/O. The same inputs always produce
the same results, in question order.

Per question type:
- free text: the answer texts in arrival order
- choice: a count per option (zero-vote options included) and a percentage
  of the question's answer rows
- rating: a 1-5 histogram, per-bucket percentages and the mean; unparseable
  or out-of-range values are skipped
Empty denominators yield 0 rather than an error.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from survey_service.models.question_kind import RATING_SCALE, QuestionKind, is_choice
from survey_service.models.results import (
    ChoiceResult,
    OptionTally,
    QuestionResult,
    RatingBucket,
    RatingResult,
    TextResult,
)
from survey_service.models.schema import Answer, QuestionOut, SurveySchema


def percentage(count: int, total: int) -> float:
    return (count / total) * 100 if total > 0 else 0.0


def display_mean(mean: float) -> float:
    """Round to one decimal with halves going up (4.25 shows as 4.3)."""
    return float(Decimal(mean).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _parse_rating(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    try:
        value = int(str(text).strip())
    except ValueError:
        return None
    return value if value in RATING_SCALE else None


def tally_text(question: QuestionOut, answers: List[Answer]) -> TextResult:
    texts = [a.answer_text for a in answers if a.answer_text is not None]
    return TextResult(question_id=question.id, question_text=question.text, answers=texts)


def tally_choice(question: QuestionOut, answers: List[Answer]) -> ChoiceResult:
    counts: Dict[str, int] = {o.id: 0 for o in question.options}
    for a in answers:
        if a.selected_option_id:
            counts[a.selected_option_id] = counts.get(a.selected_option_id, 0) + 1
    # Denominator is every answer row for the question, not distinct respondents
    total = len(answers)
    tallies = [
        OptionTally(
            option_id=o.id,
            option_text=o.text,
            count=counts[o.id],
            percentage=percentage(counts[o.id], total),
        )
        for o in question.options
    ]
    return ChoiceResult(
        question_id=question.id,
        question_text=question.text,
        allow_multiple=question.is_multi_select,
        total=total,
        options=tallies,
    )


def tally_rating(question: QuestionOut, answers: List[Answer]) -> RatingResult:
    histogram: Dict[int, int] = {r: 0 for r in RATING_SCALE}
    for a in answers:
        rating = _parse_rating(a.answer_text)
        if rating is not None:
            histogram[rating] += 1
    total = sum(histogram.values())
    mean = sum(r * c for r, c in histogram.items()) / total if total > 0 else 0.0
    buckets = [
        RatingBucket(rating=r, count=histogram[r], percentage=percentage(histogram[r], total))
        for r in sorted(RATING_SCALE, reverse=True)
    ]
    return RatingResult(
        question_id=question.id,
        question_text=question.text,
        total=total,
        histogram=histogram,
        buckets=buckets,
        mean=mean,
        mean_display=display_mean(mean),
    )


def aggregate_question(question: QuestionOut, answers: List[Answer]) -> QuestionResult:
    if is_choice(question.type):
        return tally_choice(question, answers)
    if question.type == QuestionKind.RATING:
        return tally_rating(question, answers)
    return tally_text(question, answers)


def aggregate(schema: SurveySchema, answers: Iterable[Answer]) -> Dict[str, QuestionResult]:
    """Compute per-question results keyed by question id, in question order."""
    by_question: Dict[str, List[Answer]] = defaultdict(list)
    for a in answers:
        by_question[a.question_id].append(a)
    return {q.id: aggregate_question(q, by_question.get(q.id, [])) for q in schema.questions}


__all__ = [
    "aggregate",
    "aggregate_question",
    "display_mean",
    "percentage",
    "tally_choice",
    "tally_rating",
    "tally_text",
]
