from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnsphere.domain.exceptions import ErrorKind
from learnsphere.domain.materials import GeneratedMaterials

ProgressStatus = Literal["pending", "in_progress", "completed", "error"]


class PipelineStep(str, Enum):
    VALIDATE = "validate"
    SUMMARIZE = "summarize"
    ADAPT = "adapt"
    CONCEPT_MAP = "concept_map"
    AUDIO_SCRIPT = "audio_script"
    QUIZ = "quiz"
    FINALIZE = "finalize"


PIPELINE_ORDER: tuple[PipelineStep, ...] = tuple(PipelineStep)

# (in_progress, completed) percent per step, independent of elapsed time.
PROGRESS_CHECKPOINTS: Dict[PipelineStep, tuple[int, int]] = {
    PipelineStep.VALIDATE: (5, 10),
    PipelineStep.SUMMARIZE: (20, 35),
    PipelineStep.ADAPT: (45, 60),
    PipelineStep.CONCEPT_MAP: (70, 80),
    PipelineStep.AUDIO_SCRIPT: (85, 90),
    PipelineStep.QUIZ: (95, 98),
    PipelineStep.FINALIZE: (99, 100),
}


class GenerationProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: str
    status: ProgressStatus
    percent: int = Field(ge=0, le=100)
    message: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class GenerationStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_time_ms: float = 0.0
    step_times_ms: Dict[str, float] = Field(default_factory=dict)
    external_call_count: int = 0


class GenerationResult(BaseModel):
    """Terminal outcome of one pipeline invocation."""

    model_config = ConfigDict(frozen=True)

    success: bool
    materials: Optional[GeneratedMaterials] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    failed_step: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)
    stats: GenerationStats = Field(default_factory=GenerationStats)
