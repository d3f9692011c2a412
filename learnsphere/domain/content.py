"""
Source content schemas: limits, validation results and text statistics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnsphere.core.settings import settings

ContentComplexity = Literal["simple", "moderate", "complex"]


class ContentLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_characters: int = 50
    max_characters: int = 50000
    min_words: int = 10
    max_words: int = 10000
    max_sentences: Optional[int] = 500

    @classmethod
    def from_settings(cls) -> "ContentLimits":
        return cls(
            min_characters=settings.CONTENT_MIN_CHARACTERS,
            max_characters=settings.CONTENT_MAX_CHARACTERS,
            min_words=settings.CONTENT_MIN_WORDS,
            max_words=settings.CONTENT_MAX_WORDS,
            max_sentences=settings.CONTENT_MAX_SENTENCES,
        )


class TextStatistics(BaseModel):
    model_config = ConfigDict(frozen=True)

    words: int = 0
    characters: int = 0
    characters_no_spaces: int = 0
    sentences: int = 0
    paragraphs: int = 0
    average_words_per_sentence: float = 0.0
    reading_time_minutes: int = 0
    complexity: ContentComplexity = "simple"


class ContentValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    word_count: int = 0
    character_count: int = 0
    estimated_reading_time: int = 0
    complexity: ContentComplexity = "simple"


class GradeSuitability(BaseModel):
    model_config = ConfigDict(frozen=True)

    suitable: bool
    recommendations: List[str] = Field(default_factory=list)


class SourceContent(BaseModel):
    """Validated source text. Never mutated by the pipeline."""

    model_config = ConfigDict(frozen=True)

    text: str
    word_count: int
    character_count: int
    validation: ContentValidation
    complexity: ContentComplexity = "simple"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_validation(cls, text: str, validation: ContentValidation) -> "SourceContent":
        return cls(
            text=text,
            word_count=validation.word_count,
            character_count=validation.character_count,
            validation=validation,
            complexity=validation.complexity,
        )
