"""
Pre-flight content validation.

Runs entirely before any capability call: a failed validation must leave
the pipeline with zero external-call attempts.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Pattern, Sequence

from learnsphere.domain.content import (
    ContentComplexity,
    ContentLimits,
    ContentValidation,
    GradeSuitability,
    TextStatistics,
)
from learnsphere.domain.preferences import GradeLevel, grade_order

READING_WORDS_PER_MINUTE = 200

_WHITESPACE_ONLY_RE = re.compile(r"\s*")
DEFAULT_FORBIDDEN_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE),
    re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE),
)
SUSPICIOUS_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:text/html", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
)

_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_TECHNICAL_PUNCTUATION_RE = re.compile(r"[();:]")
_DISCOURSE_MARKERS_RE = re.compile(
    r"\b(however|therefore|consequently|furthermore|moreover)\b", re.IGNORECASE
)


def count_words(text: str) -> int:
    return len(text.split())


def split_sentences(text: str) -> list[str]:
    return [fragment.strip() for fragment in _SENTENCE_SPLIT_RE.split(text) if fragment.strip()]


class TextValidator:
    def __init__(
        self,
        limits: Optional[ContentLimits] = None,
        forbidden_patterns: Optional[Sequence[Pattern[str]]] = None,
        require_alphanumeric: bool = True,
    ):
        self.limits = limits or ContentLimits.from_settings()
        self.forbidden_patterns = tuple(
            forbidden_patterns if forbidden_patterns is not None else DEFAULT_FORBIDDEN_PATTERNS
        )
        self.require_alphanumeric = require_alphanumeric

    def validate(self, content: str) -> ContentValidation:
        content = content or ""
        stats = self.statistics(content)
        errors: list[str] = []
        warnings: list[str] = []

        self._check_length(stats, errors, warnings)
        self._check_quality(content, errors, warnings)
        self._check_security(content, errors, warnings)
        self._check_structure(stats, warnings)

        return ContentValidation(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            word_count=stats.words,
            character_count=stats.characters,
            estimated_reading_time=stats.reading_time_minutes,
            complexity=stats.complexity,
        )

    def statistics(self, text: str) -> TextStatistics:
        trimmed = (text or "").strip()
        if not trimmed:
            return TextStatistics()

        words = count_words(trimmed)
        sentences = max(1, len(split_sentences(trimmed)))
        paragraphs = max(
            1, len([p for p in _PARAGRAPH_SPLIT_RE.split(trimmed) if p.strip()])
        )
        average = words / sentences if sentences else 0.0
        return TextStatistics(
            words=words,
            characters=len(text),
            characters_no_spaces=len(re.sub(r"\s", "", text)),
            sentences=sentences,
            paragraphs=paragraphs,
            average_words_per_sentence=average,
            reading_time_minutes=math.ceil(words / READING_WORDS_PER_MINUTE),
            complexity=self.classify_complexity(trimmed, average),
        )

    @staticmethod
    def classify_complexity(text: str, average_words_per_sentence: float) -> ContentComplexity:
        score = 0
        if average_words_per_sentence > 20:
            score += 2
        elif average_words_per_sentence > 15:
            score += 1

        words = text.split()
        if words:
            long_word_ratio = sum(1 for word in words if len(word) > 6) / len(words)
            if long_word_ratio > 0.3:
                score += 2
            elif long_word_ratio > 0.2:
                score += 1

        if _TECHNICAL_PUNCTUATION_RE.search(text):
            score += 1
        if _DISCOURSE_MARKERS_RE.search(text):
            score += 1

        if score >= 4:
            return "complex"
        if score >= 2:
            return "moderate"
        return "simple"

    def _check_length(self, stats: TextStatistics, errors: list[str], warnings: list[str]) -> None:
        limits = self.limits
        if stats.characters < limits.min_characters:
            errors.append(
                f"Content must be at least {limits.min_characters} characters long "
                f"(currently {stats.characters})"
            )
        if stats.characters > limits.max_characters:
            errors.append(
                f"Content must not exceed {limits.max_characters} characters "
                f"(currently {stats.characters})"
            )
        if stats.words < limits.min_words:
            errors.append(
                f"Content must contain at least {limits.min_words} words (currently {stats.words})"
            )
        if stats.words > limits.max_words:
            errors.append(
                f"Content must not exceed {limits.max_words} words (currently {stats.words})"
            )

        if limits.max_sentences and stats.sentences > limits.max_sentences:
            warnings.append(
                f"Very long content with {stats.sentences} sentences may take longer to process"
            )
        if 0 < stats.characters < 100:
            warnings.append("Very short content may result in limited learning materials")
        if stats.characters > limits.max_characters * 0.8:
            warnings.append("Content is approaching the maximum length limit")

    def _check_quality(self, content: str, errors: list[str], warnings: list[str]) -> None:
        if self.require_alphanumeric and not _ALNUM_RE.search(content):
            errors.append("Content must contain alphanumeric characters")

        if content.strip():
            meaningful = len(_NON_ALNUM_RE.sub("", content))
            if meaningful / len(content) < 0.3:
                warnings.append("Content appears to contain mostly non-alphanumeric characters")

        words = content.lower().split()
        if len(words) > 10 and len(set(words)) / len(words) < 0.3:
            warnings.append("Content appears to be very repetitive")

        if re.search(r"\s{5,}", content) or re.search(r"\n{5,}", content):
            warnings.append("Content contains unusual spacing or formatting")

    def _check_security(self, content: str, errors: list[str], warnings: list[str]) -> None:
        forbidden = _WHITESPACE_ONLY_RE.fullmatch(content) is not None or any(
            pattern.search(content) for pattern in self.forbidden_patterns
        )
        if forbidden:
            errors.append("Content contains forbidden patterns or potentially unsafe elements")

        if any(pattern.search(content) for pattern in SUSPICIOUS_PATTERNS):
            warnings.append("Content may contain code or script elements")

    @staticmethod
    def _check_structure(stats: TextStatistics, warnings: list[str]) -> None:
        if stats.average_words_per_sentence > 30:
            warnings.append("Very long sentences may be difficult to process")
        if stats.average_words_per_sentence < 5 and stats.sentences > 5:
            warnings.append("Very short sentences may indicate fragmented content")
        if stats.paragraphs == 1 and stats.words > 200:
            warnings.append("Consider breaking long content into paragraphs for better processing")
        if stats.complexity == "complex":
            warnings.append("Complex content may require higher grade levels for optimal adaptation")

    def check_grade_suitability(self, content: str, grade_level: GradeLevel | str) -> GradeSuitability:
        stats = self.statistics(content)
        order = grade_order(grade_level)
        recommendations: list[str] = []
        suitable = True

        if order <= 5:
            if stats.average_words_per_sentence > 15:
                suitable = False
                recommendations.append("Consider shorter sentences for elementary grade levels")
            if stats.complexity == "complex":
                suitable = False
                recommendations.append("Content complexity may be too high for elementary students")
        elif order <= 8:
            if stats.average_words_per_sentence > 20:
                recommendations.append(
                    "Consider simplifying sentence structure for middle school level"
                )
        elif order <= 12:
            if stats.average_words_per_sentence > 30:
                recommendations.append(
                    "Very complex sentences may be challenging even for high school level"
                )

        return GradeSuitability(suitable=suitable, recommendations=recommendations)

    def suggest_improvements(self, content: str) -> list[str]:
        stats = self.statistics(content)
        suggestions: list[str] = []
        if stats.words < 50:
            suggestions.append("Add more detail to create richer learning materials")
        if stats.paragraphs == 1 and stats.words > 100:
            suggestions.append("Break content into multiple paragraphs for better organization")
        if stats.average_words_per_sentence > 25:
            suggestions.append("Consider breaking up long sentences for better readability")
        if stats.complexity == "simple" and stats.words > 200:
            suggestions.append("Consider adding more detailed explanations or examples")
        return suggestions
