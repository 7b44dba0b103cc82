"""Pydantic models for aggregated survey results."""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from survey_service.models.schema import SurveyOut


class TextResult(BaseModel):
    kind: Literal["text"] = "text"
    question_id: str
    question_text: str
    answers: List[str] = Field(default_factory=list)


class OptionTally(BaseModel):
    option_id: str
    option_text: str
    count: int
    percentage: float


class ChoiceResult(BaseModel):
    kind: Literal["choice"] = "choice"
    question_id: str
    question_text: str
    allow_multiple: bool
    # Answer rows, not respondents: a multi-select respondent adds one per pick
    total: int
    options: List[OptionTally] = Field(default_factory=list)


class RatingBucket(BaseModel):
    rating: int
    count: int
    percentage: float


class RatingResult(BaseModel):
    kind: Literal["rating"] = "rating"
    question_id: str
    question_text: str
    total: int
    histogram: Dict[int, int]
    # Highest rating first, matching the results page
    buckets: List[RatingBucket] = Field(default_factory=list)
    mean: float
    mean_display: float


QuestionResult = Annotated[Union[TextResult, ChoiceResult, RatingResult], Field(discriminator="kind")]


class SurveyResults(BaseModel):
    survey: SurveyOut
    responses_count: int
    results: List[QuestionResult] = Field(default_factory=list)
    degraded: bool = False
    detail: Optional[str] = None


__all__ = [
    "TextResult",
    "OptionTally",
    "ChoiceResult",
    "RatingBucket",
    "RatingResult",
    "QuestionResult",
    "SurveyResults",
]
