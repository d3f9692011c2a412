from __future__ import annotations

import pytest

from learnsphere.domain.policies.personalization import (
    analogy_phrases,
    build_context,
    extract_concepts,
    quiz_difficulty_for,
    rewrite_tone_for,
)
from learnsphere.domain.preferences import (
    GRADE_LEVEL_INFO,
    GradeLevel,
    Interest,
    UserPreferences,
    get_grade_info,
    grade_order,
)


@pytest.mark.parametrize(
    "grade,expected",
    [
        (GradeLevel.GRADE_1, ("easy", 2)),
        (GradeLevel.GRADE_5, ("easy", 2)),
        (GradeLevel.GRADE_6, ("medium", 3)),
        (GradeLevel.GRADE_8, ("medium", 3)),
        (GradeLevel.GRADE_9, ("hard", 4)),
        (GradeLevel.GRADE_12, ("hard", 4)),
        (GradeLevel.UNDERGRAD, ("hard", 4)),
    ],
)
def test_quiz_difficulty_follows_grade_bucket(grade: GradeLevel, expected: tuple[str, int]) -> None:
    assert quiz_difficulty_for(get_grade_info(grade).complexity) == expected


def test_every_grade_has_a_bucket_and_increasing_order() -> None:
    orders = [GRADE_LEVEL_INFO[grade].order for grade in GradeLevel]

    assert orders == sorted(orders)
    assert len(set(orders)) == 13
    assert grade_order("undergrad") == 13
    assert grade_order(None) == 0


def test_context_is_deterministic_and_uses_first_two_analogies() -> None:
    prefs = UserPreferences(grade_level=GradeLevel.GRADE_4, interest=Interest.SOCCER)

    first = build_context(prefs, "Rewrite this content")
    second = build_context(prefs, "Rewrite this content")

    assert first == second
    assert "Grade 4 students (9-10 years)" in first
    assert "elementary level" in first
    assert "like scoring a goal" in first
    assert "similar to team coordination" in first
    assert "as in strategic positioning" not in first
    assert analogy_phrases(prefs) == ["like scoring a goal", "similar to team coordination"]


def test_tone_changes_only_for_elementary() -> None:
    assert rewrite_tone_for("elementary") == "more-casual"
    assert rewrite_tone_for("middle") == "as-is"
    assert rewrite_tone_for("college") == "as-is"


def test_extract_concepts_ranks_by_frequency_with_stable_ties() -> None:
    concepts = extract_concepts("Beta alpha, beta. ALPHA gamma", limit=8)

    assert concepts == ["beta", "alpha", "gamma"]


def test_extract_concepts_drops_stop_words_and_short_tokens() -> None:
    assert extract_concepts("these those with cat dog beta", limit=8) == ["beta"]
    assert extract_concepts("", limit=8) == []
    assert extract_concepts("one two three four five six", limit=2) == ["three", "four"]
