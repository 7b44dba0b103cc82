"""Pydantic models for the survey schema, answers and request payloads."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from survey_service.models.question_kind import QuestionKind

QuestionType = Literal["free_text", "single_choice", "multi_choice", "rating"]

# str for text/rating/single choice, int for rating, list for multi choice
AnswerInput = Union[str, int, List[str]]


class OptionOut(BaseModel):
    id: str
    question_id: str
    text: str
    order_index: int


class QuestionOut(BaseModel):
    id: str
    survey_id: str
    text: str
    type: QuestionType
    order_index: int
    allow_multiple: bool = False
    options: List[OptionOut] = Field(default_factory=list)

    @property
    def is_multi_select(self) -> bool:
        """True when each selected option becomes its own answer row."""
        if self.type == QuestionKind.MULTI_CHOICE:
            return True
        return self.type == QuestionKind.SINGLE_CHOICE and self.allow_multiple

    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]


class SurveyOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: str


class SurveySchema(SurveyOut):
    """A survey with its questions and options, both in order_index order."""

    questions: List[QuestionOut] = Field(default_factory=list)

    def question(self, question_id: str) -> Optional[QuestionOut]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class Answer(BaseModel):
    id: Optional[str] = None
    response_id: Optional[str] = None
    question_id: str
    answer_text: Optional[str] = None
    selected_option_id: Optional[str] = None


class ResponseOut(BaseModel):
    id: str
    survey_id: str
    created_at: str
    answers_count: int


class QuestionDraftIn(BaseModel):
    text: str = ""
    type: QuestionType = "free_text"
    allow_multiple: bool = False
    options: List[str] = Field(default_factory=list)


class SurveyCreateIn(BaseModel):
    title: str = ""
    description: Optional[str] = None
    questions: List[QuestionDraftIn] = Field(default_factory=list)


class SubmissionIn(BaseModel):
    answers: Dict[str, Optional[AnswerInput]] = Field(default_factory=dict)


__all__ = [
    "AnswerInput",
    "QuestionType",
    "OptionOut",
    "QuestionOut",
    "SurveyOut",
    "SurveySchema",
    "Answer",
    "ResponseOut",
    "QuestionDraftIn",
    "SurveyCreateIn",
    "SubmissionIn",
]
