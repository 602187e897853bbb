"""
Server-side answer checking for quiz questions.
"""
from typing import Any, Iterable, Optional

QUESTION_TYPES = ("multiple-choice", "true-false", "fill-in-blank", "matching", "saq")


def _normalize(value: Any) -> str:
    return " ".join(str(value).split()).casefold()


def _as_bool(value: Any):
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


def _as_list(value: Any) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _matches_any(user_answer: Any, accepted: Iterable[Any]) -> bool:
    answer = _normalize(user_answer)
    return any(answer == _normalize(a) for a in accepted)


def grade_answer(question_type: str, correct_answer: Any, user_answer: Any, options: Optional[list] = None) -> bool:
    """
    Decide whether ``user_answer`` is correct for a question.

    Args:
        question_type: One of QUESTION_TYPES
        correct_answer: Stored answer (string, bool or list of accepted answers)
        user_answer: Submitted answer
        options: Choices of a multiple-choice question, letting "B" match the second option

    Returns:
        True if the answer is accepted
    """
    if user_answer is None or user_answer == "":
        return False

    if question_type == "true-false":
        expected = _as_bool(correct_answer)
        given = _as_bool(user_answer)
        return expected is not None and expected == given

    if question_type == "matching" and isinstance(correct_answer, list):
        if not isinstance(user_answer, list) or len(user_answer) != len(correct_answer):
            return False
        return all(_normalize(a) == _normalize(b) for a, b in zip(user_answer, correct_answer))

    if question_type in ("fill-in-blank", "saq"):
        return _matches_any(user_answer, _as_list(correct_answer))

    # multiple-choice and anything unrecognised: exact option match
    return _resolve_option(user_answer, options) == _resolve_option(correct_answer, options)


def _resolve_option(value: Any, options: Optional[list]) -> str:
    """Map an option letter (A, B, ...) to its text when the options are known."""
    text = str(value).strip()
    if options and len(text) == 1 and text.isalpha():
        index = ord(text.upper()) - ord("A")
        if 0 <= index < len(options):
            return str(options[index]).strip()
    return text
