from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional

from pydantic import BaseModel

from learnsphere.core.settings import settings
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.materials import (
    AdaptedContent,
    AudioScript,
    ConceptMap,
    GeneratedMaterials,
    Quiz,
    SummaryContent,
)
from learnsphere.infrastructure.observability.timing import utc_now

_REQUIRED: dict[PipelineStep, type[BaseModel]] = {
    PipelineStep.SUMMARIZE: SummaryContent,
    PipelineStep.ADAPT: AdaptedContent,
    PipelineStep.CONCEPT_MAP: ConceptMap,
    PipelineStep.AUDIO_SCRIPT: AudioScript,
    PipelineStep.QUIZ: Quiz,
}


class MaterialsAggregator:
    """Pure assembly of stage outputs into one GeneratedMaterials bundle."""

    def __init__(self, schema_version: Optional[str] = None):
        self.schema_version = schema_version or settings.MATERIALS_SCHEMA_VERSION

    def assemble(
        self,
        outputs: Mapping[PipelineStep, BaseModel],
        processing_time_ms: float,
        generated_at: Optional[datetime] = None,
    ) -> GeneratedMaterials:
        for step, expected in _REQUIRED.items():
            value = outputs.get(step)
            if value is None:
                raise ValueError(f"Missing output for step '{step.value}'")
            if not isinstance(value, expected):
                raise ValueError(
                    f"Output for step '{step.value}' must be {expected.__name__}, "
                    f"got {type(value).__name__}"
                )

        return GeneratedMaterials(
            summary=outputs[PipelineStep.SUMMARIZE],
            adapted_content=outputs[PipelineStep.ADAPT],
            concept_map=outputs[PipelineStep.CONCEPT_MAP],
            audio_script=outputs[PipelineStep.AUDIO_SCRIPT],
            quiz=outputs[PipelineStep.QUIZ],
            processing_time_ms=processing_time_ms,
            generated_at=generated_at or utc_now(),
            schema_version=self.schema_version,
        )
