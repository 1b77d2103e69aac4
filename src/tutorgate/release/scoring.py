"""
Submission Scorer

Provisional, deterministic scores computed when a student submits. These are
heuristics for instructor triage, not correctness checks.

- code: whitespace-collapsed exact match, 100 or 0
- text: lower-cased, whitespace-collapsed positional character comparison

The text similarity compares characters index by index up to the longer
string's length. It is not an edit distance: one inserted character near the
start shifts everything after it and can zero the rest of the comparison.
"""

from __future__ import annotations

import json
import math
import re
import unicodedata
from dataclasses import dataclass
from itertools import zip_longest
from typing import Any

CODE = "code"
TEXT = "text"

STANDARD = "standard"
MULTIPLE_CHOICE = "multiple_choice"
SHORTCUT = "shortcut"

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Words too common to say anything about whether an answer addresses the task
STOPWORDS = frozenset(
    {
        "about", "also", "answer", "answers", "because", "been", "being", "between",
        "does", "each", "exercise", "exercises", "from", "have", "into", "just",
        "like", "more", "most", "much", "other", "should", "some", "such", "task",
        "tasks", "than", "that", "their", "them", "then", "there", "these", "they",
        "this", "those", "very", "what", "when", "where", "which", "while", "will",
        "with", "would", "your",
    }
)  # fmt: skip


class MultipleChoiceError(Exception):
    """Raised when a multiple-choice answer is malformed or incomplete."""

    pass


@dataclass(frozen=True)
class GradingOutcome:
    """Score to persist with a new submission."""

    score: int | None
    graded: bool


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def normalize_code(source: str) -> str:
    """Collapse every whitespace run, newlines included, to one space and trim."""
    return _WHITESPACE.sub(" ", source).strip()


def normalize_text(text: str) -> str:
    """Lower-case, collapse whitespace and trim."""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def positional_similarity(a: str, b: str) -> float:
    """Share of positions, up to the longer length, holding the same character."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    mismatches = sum(1 for x, y in zip_longest(a, b) if x != y)
    return 1 - mismatches / longest


def score_submission(
    answer: str | None, reference_answer: str | None, answer_kind: str
) -> int | None:
    """Provisional score in [0, 100], or None when there is nothing to compare to.

    Args:
        answer: Raw student answer
        reference_answer: Exercise's reference answer
        answer_kind: "text" or "code"

    Returns:
        Integer score, or None for a missing reference or unknown answer kind
    """
    if not reference_answer or not reference_answer.strip():
        return None

    answer = answer or ""
    if answer_kind == CODE:
        return 100 if normalize_code(answer) == normalize_code(reference_answer) else 0

    if answer_kind == TEXT:
        similarity = positional_similarity(normalize_text(answer), normalize_text(reference_answer))
        return min(100, max(0, round_half_up(similarity * 100)))

    return None


# ============================================================================
# Multiple choice
# ============================================================================


def _load(value: str | dict[str, Any] | None) -> Any:
    if isinstance(value, str):
        return json.loads(value)
    return value


def _questions(rules: str | dict[str, Any] | None) -> list[dict[str, Any]]:
    parsed = _load(rules)
    if not isinstance(parsed, dict) or not isinstance(parsed.get("questions"), list):
        raise MultipleChoiceError("Invalid multiple-choice rules")
    if not all(isinstance(question, dict) for question in parsed["questions"]):
        raise MultipleChoiceError("Invalid multiple-choice rules")
    return parsed["questions"]


def check_choice_rules(rules: str | dict[str, Any] | None) -> None:
    """Raise MultipleChoiceError unless `rules` holds a list of question objects."""
    _questions(rules)


def validate_choice_answer(
    answer: str | dict[str, Any] | None, rules: str | dict[str, Any] | None
) -> None:
    """Require an answer key `q<i>` for every question.

    Raises:
        MultipleChoiceError: If the answer cannot be parsed or skips a question
    """
    questions = _questions(rules)
    try:
        answers = _load(answer)
    except json.JSONDecodeError as e:
        raise MultipleChoiceError("Invalid answer format") from e
    if not isinstance(answers, dict):
        raise MultipleChoiceError("Invalid answer format")

    for index in range(len(questions)):
        if not answers.get(f"q{index}"):
            raise MultipleChoiceError(
                f"Answer all {len(questions)} questions before submitting."
            )


def score_multiple_choice(
    answer: str | dict[str, Any] | None, rules: str | dict[str, Any] | None
) -> int:
    """Percentage of questions whose chosen option matches `correct`. Malformed input scores 0."""
    try:
        questions = _questions(rules)
        answers = _load(answer)
    except (MultipleChoiceError, json.JSONDecodeError):
        return 0
    if not questions or not isinstance(answers, dict):
        return 0

    hits = sum(
        1
        for index, question in enumerate(questions)
        if answers.get(f"q{index}") == question.get("correct")
    )
    return round_half_up(hits / len(questions) * 100)


# ============================================================================
# Attempt penalty and combined grading
# ============================================================================


def apply_attempt_penalty(score: int, penalty_percent: float, previous_attempts: int) -> int:
    """Reduce a score by `penalty_percent` for every earlier attempt, never below 0."""
    if penalty_percent <= 0 or previous_attempts <= 0:
        return score
    factor = max(1 - (penalty_percent * previous_attempts) / 100, 0)
    return max(0, round_half_up(score * factor))


def grade_submission(
    answer: str | None,
    answer_kind: str,
    *,
    exercise_type: str = STANDARD,
    reference_answer: str | None = None,
    choice_rules: str | dict[str, Any] | None = None,
    penalty_percent: float = 0,
    previous_attempts: int = 0,
) -> GradingOutcome:
    """Automatic grade for a new submission.

    Shortcut drills always score 100; multiple-choice exercises score by their
    rules; anything else goes through `score_submission`. A None score leaves
    the submission ungraded for manual review.
    """
    score: int | None
    if exercise_type == SHORTCUT:
        score = 100
    elif choice_rules:
        score = score_multiple_choice(answer, choice_rules)
    else:
        score = score_submission(answer, reference_answer, answer_kind)

    if score is not None:
        score = apply_attempt_penalty(score, penalty_percent, previous_attempts)
    return GradingOutcome(score=score, graded=score is not None)


# ============================================================================
# Description adherence (instructor hint)
# ============================================================================


def _fold_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def extract_keywords(text: str) -> list[str]:
    """Accent-folded words of 4+ characters that are not stop-words."""
    base = _NON_ALNUM.sub(" ", _fold_accents(text.lower())).strip()
    if not base:
        return []
    return [word for word in base.split(" ") if len(word) >= 4 and word not in STOPWORDS]


def description_adherence(
    answer: str | None, answer_kind: str, description: str, reference_answer: str | None
) -> int | None:
    """How closely an answer tracks the exercise, shown next to submissions.

    With a reference answer this is the scorer's similarity. Without one, text
    answers get the share of description keywords they mention; code gets None.
    """
    answer = answer or ""
    if reference_answer:
        if answer_kind == CODE:
            similarity = positional_similarity(
                normalize_code(answer), normalize_code(reference_answer)
            )
        else:
            similarity = positional_similarity(
                normalize_text(answer), normalize_text(reference_answer)
            )
        return round_half_up(similarity * 100)

    if answer_kind != TEXT:
        return None

    keywords = extract_keywords(description)
    if not keywords:
        return None
    mentioned = set(extract_keywords(answer))
    found = sum(1 for keyword in keywords if keyword in mentioned)
    return round_half_up(found / len(keywords) * 100)
