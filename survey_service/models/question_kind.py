"""QuestionKind enumeration for survey question types.

A plain constants container instead of an Enum keeps stored values, JSON
payloads and comparisons as ordinary strings.
"""

from __future__ import annotations


class QuestionKind:
    FREE_TEXT = "free_text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    RATING = "rating"

    ALL = (FREE_TEXT, SINGLE_CHOICE, MULTI_CHOICE, RATING)
    CHOICE = (SINGLE_CHOICE, MULTI_CHOICE)


RATING_MIN = 1
RATING_MAX = 5
RATING_SCALE = tuple(range(RATING_MIN, RATING_MAX + 1))


def is_choice(kind: str) -> bool:
    return kind in QuestionKind.CHOICE


__all__ = ["QuestionKind", "RATING_MIN", "RATING_MAX", "RATING_SCALE", "is_choice"]
