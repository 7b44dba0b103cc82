"""Domain errors raised by authoring, collection and lookup.

`SurveyValidationError` covers user-input shape violations. The HTTP layer
maps each class to a problem+json status/code through
`survey_service.http.error_mapping`.
"""

from __future__ import annotations

from typing import Sequence


class SurveyValidationError(ValueError):
    pass


class EmptyTitleError(SurveyValidationError):
    def __init__(self) -> None:
        super().__init__("survey title must not be empty")


class NoQuestionsError(SurveyValidationError):
    def __init__(self) -> None:
        super().__init__("survey must contain at least one question")


class EmptyQuestionTextError(SurveyValidationError):
    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"question {position + 1} has no text")


class InsufficientOptionsError(SurveyValidationError):
    def __init__(self, position: int, found: int) -> None:
        self.position = position
        self.found = found
        super().__init__(
            f"choice question {position + 1} needs at least 2 non-empty options, found {found}"
        )


class IncompleteSubmissionError(SurveyValidationError):
    def __init__(self, unanswered: Sequence[str]) -> None:
        self.unanswered = list(unanswered)
        super().__init__(f"unanswered questions: {', '.join(self.unanswered)}")


class InvalidAnswerError(SurveyValidationError):
    def __init__(self, question_id: str, reason: str) -> None:
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"invalid answer for question {question_id}: {reason}")


class SurveyNotFoundError(LookupError):
    def __init__(self, survey_id: str) -> None:
        self.survey_id = survey_id
        super().__init__(f"survey {survey_id} not found")


class AuthenticationRequiredError(PermissionError):
    pass


class PermissionDeniedError(PermissionError):
    pass


__all__ = [
    "SurveyValidationError",
    "EmptyTitleError",
    "NoQuestionsError",
    "EmptyQuestionTextError",
    "InsufficientOptionsError",
    "IncompleteSubmissionError",
    "InvalidAnswerError",
    "SurveyNotFoundError",
    "AuthenticationRequiredError",
    "PermissionDeniedError",
]
