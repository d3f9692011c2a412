from __future__ import annotations

import re
from typing import Any

from learnsphere.domain.materials import QuizDifficulty
from learnsphere.domain.preferences import ComplexityBucket, UserPreferences

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "be", "been", "being", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "can", "this", "that", "these", "those",
    }
)

_TONE_DIRECTIVES: dict[ComplexityBucket, str] = {
    "elementary": "Use the simplest vocabulary and the shortest sentences possible.",
    "middle": "Use clear everyday vocabulary and explain any new term the first time it appears.",
    "high": "Use subject vocabulary and allow multi-step reasoning.",
    "college": "Use academic depth and precise terminology.",
}

_QUIZ_DIFFICULTY: dict[ComplexityBucket, tuple[QuizDifficulty, int]] = {
    "elementary": ("easy", 2),
    "middle": ("medium", 3),
    "high": ("hard", 4),
    "college": ("hard", 4),
}

_NON_WORD_RE = re.compile(r"[^\w]")


def tone_directive(bucket: ComplexityBucket) -> str:
    return _TONE_DIRECTIVES[bucket]


def analogy_phrases(preferences: UserPreferences, limit: int = 2) -> list[str]:
    return list(preferences.interest_info.analogy_examples[:limit])


def quiz_difficulty_for(bucket: ComplexityBucket) -> tuple[QuizDifficulty, int]:
    """Returns (difficulty, points per question) for a complexity bucket."""
    return _QUIZ_DIFFICULTY[bucket]


def rewrite_tone_for(bucket: ComplexityBucket) -> str:
    return "more-casual" if bucket == "elementary" else "as-is"


def build_context(preferences: UserPreferences, task: str) -> str:
    """
    Deterministic instruction text for one capability call.

    Same preferences and task always yield the same string.
    """
    grade = preferences.grade_info
    interest = preferences.interest_info
    analogies = ", ".join(analogy_phrases(preferences))
    return (
        f"{task} for {grade.display_name} students ({grade.age_range}). "
        f"Use vocabulary appropriate for {grade.complexity} level. "
        f"{tone_directive(grade.complexity)} "
        f"Include analogies and examples from {interest.display_name} "
        f"({interest.description}). "
        f"Example analogies to use: {analogies}"
    )


def extract_concepts(text: str, limit: int) -> list[str]:
    """
    Ranks candidate concept terms by frequency.

    Ties keep first-occurrence order; the result holds at most `limit` terms.
    """
    counts: dict[str, int] = {}
    for raw in (text or "").lower().split():
        token = _NON_WORD_RE.sub("", raw)
        if len(token) <= 3 or token in STOP_WORDS:
            continue
        counts[token] = counts.get(token, 0) + 1

    # dicts keep insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [term for term, _ in ranked[: max(0, limit)]]


def generation_options(preferences: UserPreferences, **extra: Any) -> dict[str, Any]:
    options: dict[str, Any] = {
        "grade_level": preferences.grade_level.value,
        "interest": preferences.interest.value,
        "language": preferences.language,
    }
    options.update(extra)
    return options
