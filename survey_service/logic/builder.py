"""Authoring builder: an in-memory survey draft and its commit.

Question edits are expressed as tagged update values (`SetText`, `SetType`,
`SetOptions`, `SetAllowMultiple`) applied through `reduce_question`. A commit
validates the draft, then writes the survey, its questions and their options
in one store transaction.

Validation order on commit (first failure wins):
1. non-empty title
2. at least one question
3. non-empty text on every question
4. at least two non-empty options on every choice question
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple, Union

from survey_service.db.store import Row, SurveyStore
from survey_service.logic.repository_surveys import schema_from_rows
from survey_service.logic.timestamps import format_created_at
from survey_service.logic.validation import (
    AuthenticationRequiredError,
    EmptyQuestionTextError,
    EmptyTitleError,
    InsufficientOptionsError,
    NoQuestionsError,
)
from survey_service.models.question_kind import QuestionKind, is_choice
from survey_service.models.schema import SurveyCreateIn, SurveySchema
from survey_service.models.session import Session

logger = logging.getLogger(__name__)

MIN_CHOICE_OPTIONS = 2


@dataclass(frozen=True)
class DraftQuestion:
    id: str
    text: str = ""
    type: str = QuestionKind.FREE_TEXT
    allow_multiple: bool = False
    options: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SetText:
    text: str


@dataclass(frozen=True)
class SetType:
    type: str


@dataclass(frozen=True)
class SetOptions:
    options: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SetAllowMultiple:
    allow_multiple: bool


QuestionUpdate = Union[SetText, SetType, SetOptions, SetAllowMultiple]


def reduce_question(question: DraftQuestion, update: QuestionUpdate) -> DraftQuestion:
    """Return ``question`` with ``update`` applied."""
    if isinstance(update, SetText):
        return replace(question, text=update.text)
    if isinstance(update, SetType):
        if update.type not in QuestionKind.ALL:
            raise ValueError(f"unknown question type: {update.type!r}")
        options = question.options
        # A fresh choice question starts with two blank options to fill in
        if is_choice(update.type) and not options:
            options = ("", "")
        return replace(question, type=update.type, options=options)
    if isinstance(update, SetOptions):
        return replace(question, options=tuple(update.options))
    if isinstance(update, SetAllowMultiple):
        return replace(question, allow_multiple=bool(update.allow_multiple))
    raise TypeError(f"unsupported question update: {type(update).__name__}")


def _stored_kind(question: DraftQuestion) -> Tuple[str, bool]:
    """Resolve (question_type, allow_multiple) as persisted."""
    if question.type == QuestionKind.MULTI_CHOICE:
        return QuestionKind.MULTI_CHOICE, True
    if question.type == QuestionKind.SINGLE_CHOICE and question.allow_multiple:
        return QuestionKind.MULTI_CHOICE, True
    return question.type, False


def _filled_options(question: DraftQuestion) -> List[str]:
    return [o.strip() for o in question.options if o and o.strip()]


class AuthoringBuilder:
    """Mutable survey draft owned by one session."""

    def __init__(
        self,
        session: Session,
        *,
        require_auth: bool = True,
        title: str = "",
        description: Optional[str] = None,
    ) -> None:
        self.session = session
        self.require_auth = require_auth
        self.title = title
        self.description = description
        self._questions: List[DraftQuestion] = []

    @classmethod
    def from_draft(cls, session: Session, draft: SurveyCreateIn, *, require_auth: bool = True) -> "AuthoringBuilder":
        """Replay a submitted draft through the builder operations."""
        builder = cls(session, require_auth=require_auth, title=draft.title, description=draft.description)
        for q in draft.questions:
            qid = builder.add_question()
            builder.update_question(qid, SetText(q.text))
            builder.update_question(qid, SetType(q.type))
            builder.update_question(qid, SetAllowMultiple(q.allow_multiple))
            if is_choice(q.type):
                builder.update_question(qid, SetOptions(tuple(q.options)))
        return builder

    @property
    def questions(self) -> Tuple[DraftQuestion, ...]:
        return tuple(self._questions)

    def _index(self, question_id: str) -> int:
        for i, q in enumerate(self._questions):
            if q.id == question_id:
                return i
        raise KeyError(question_id)

    def question(self, question_id: str) -> DraftQuestion:
        return self._questions[self._index(question_id)]

    def add_question(self) -> str:
        question_id = uuid.uuid4().hex
        self._questions.append(DraftQuestion(id=question_id))
        return question_id

    def remove_question(self, question_id: str) -> None:
        del self._questions[self._index(question_id)]

    def update_question(self, question_id: str, update: QuestionUpdate) -> DraftQuestion:
        i = self._index(question_id)
        self._questions[i] = reduce_question(self._questions[i], update)
        return self._questions[i]

    def add_option(self, question_id: str) -> int:
        q = self.question(question_id)
        self.update_question(question_id, SetOptions(q.options + ("",)))
        return len(q.options)

    def update_option(self, question_id: str, idx: int, value: str) -> None:
        options = list(self.question(question_id).options)
        if not 0 <= idx < len(options):
            raise IndexError(f"option index {idx} out of range")
        options[idx] = value
        self.update_question(question_id, SetOptions(tuple(options)))

    def remove_option(self, question_id: str, idx: int) -> None:
        options = list(self.question(question_id).options)
        if not 0 <= idx < len(options):
            raise IndexError(f"option index {idx} out of range")
        del options[idx]
        self.update_question(question_id, SetOptions(tuple(options)))

    def validate(self) -> None:
        if not (self.title or "").strip():
            raise EmptyTitleError()
        if not self._questions:
            raise NoQuestionsError()
        for pos, q in enumerate(self._questions):
            if not (q.text or "").strip():
                raise EmptyQuestionTextError(pos)
        for pos, q in enumerate(self._questions):
            if is_choice(q.type):
                filled = len(_filled_options(q))
                if filled < MIN_CHOICE_OPTIONS:
                    raise InsufficientOptionsError(pos, filled)

    def _rows(self) -> Tuple[Row, List[Row], List[Row]]:
        survey_id = str(uuid.uuid4())
        description = (self.description or "").strip() or None
        survey_row: Row = {
            "id": survey_id,
            "title": self.title.strip(),
            "description": description,
            "owner_id": self.session.user_id,
            "created_at": format_created_at(),
        }
        question_rows: List[Row] = []
        option_rows: List[Row] = []
        for order_index, q in enumerate(self._questions):
            qid = str(uuid.uuid4())
            kind, allow_multiple = _stored_kind(q)
            question_rows.append(
                {
                    "id": qid,
                    "survey_id": survey_id,
                    "question_text": q.text.strip(),
                    "question_type": kind,
                    "order_index": order_index,
                    "allow_multiple": allow_multiple,
                }
            )
            if is_choice(kind):
                for opt_index, text in enumerate(_filled_options(q)):
                    option_rows.append(
                        {
                            "id": str(uuid.uuid4()),
                            "question_id": qid,
                            "option_text": text,
                            "order_index": opt_index,
                        }
                    )
        return survey_row, question_rows, option_rows

    def commit(self, store: SurveyStore) -> SurveySchema:
        """Validate and persist the draft; all rows are written or none are."""
        if self.require_auth and not self.session.is_authenticated:
            raise AuthenticationRequiredError("login required to create a survey")
        self.validate()
        survey_row, question_rows, option_rows = self._rows()
        with store.transaction() as tx:
            tx.insert("surveys", [survey_row])
            tx.insert("questions", question_rows)
            tx.insert("question_options", option_rows)
        logger.info(
            "survey.commit.success survey_id=%s questions=%s options=%s owner_id=%s",
            survey_row["id"],
            len(question_rows),
            len(option_rows),
            survey_row["owner_id"],
        )
        return schema_from_rows(survey_row, question_rows, option_rows)


__all__ = [
    "AuthoringBuilder",
    "DraftQuestion",
    "QuestionUpdate",
    "SetAllowMultiple",
    "SetOptions",
    "SetText",
    "SetType",
    "reduce_question",
]
