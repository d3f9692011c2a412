"""
Generated learning material schemas.

Every artifact is frozen on construction. The bundle ``GeneratedMaterials``
is only assembled by the materials aggregator at the end of a successful run.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnsphere.domain.preferences import GradeLevel, Interest

QuizDifficulty = Literal["easy", "medium", "hard"]
ConceptCategory = Literal["main_topic", "subtopic", "example", "definition", "process"]
EdgeType = Literal["hierarchical", "associative", "causal", "temporal"]


class GenerationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    processing_time_ms: float
    grade_level: GradeLevel
    interest: Interest
    model: Optional[str] = None


class SummaryContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    key_points: List[str] = Field(default_factory=list)
    word_count: int = 0
    type: Literal["key-points", "tldr", "teaser", "headline"] = "key-points"
    metadata: GenerationMetadata


class AdaptedContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    original_length: int
    adapted_length: int
    grade_level: GradeLevel
    interest: Interest
    metadata: GenerationMetadata


class ConceptNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str = ""
    level: int = 0
    category: ConceptCategory = "subtopic"
    importance: int = Field(ge=1, le=10)


class ConceptEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    target_id: str
    relationship: str = "contains"
    weight: int = Field(default=8, ge=1, le=10)
    type: EdgeType = "hierarchical"


class ConceptMap(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: List[ConceptNode]
    edges: List[ConceptEdge] = Field(default_factory=list)
    root_node_id: str
    outline: str = ""
    metadata: GenerationMetadata

    def children_of(self, node_id: str) -> List[str]:
        return [edge.target_id for edge in self.edges if edge.source_id == node_id]


class AudioSegment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    start_time: float
    end_time: float
    speed: float = 1.0


class AudioScript(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    duration_seconds: float
    speed: float = 1.0
    language: str = "en"
    segments: List[AudioSegment] = Field(default_factory=list)
    speaker_notes: str = ""
    metadata: GenerationMetadata


class QuizOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    is_correct: bool = False
    explanation: Optional[str] = None


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["multiple_choice"] = "multiple_choice"
    question: str
    options: List[QuizOption] = Field(min_length=3, max_length=4)
    correct_option_id: str
    explanation: str = ""
    points: int
    category: str = "comprehension"
    difficulty: QuizDifficulty
    time_limit_seconds: Optional[int] = 60


class Quiz(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = "Learning Assessment"
    questions: List[QuizQuestion]
    total_points: int
    time_estimate_minutes: int
    difficulty: GradeLevel
    metadata: GenerationMetadata


class GeneratedMaterials(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: SummaryContent
    adapted_content: AdaptedContent
    concept_map: ConceptMap
    audio_script: AudioScript
    quiz: Quiz
    processing_time_ms: float
    generated_at: datetime
    schema_version: str
