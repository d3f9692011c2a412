from __future__ import annotations

from typing import Any, Dict

from learnsphere.application.stages.base import GenerationStage, RunState
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import CapabilityKind
from learnsphere.domain.materials import AdaptedContent, GenerationMetadata
from learnsphere.domain.policies.personalization import (
    build_context,
    generation_options,
    rewrite_tone_for,
)


class AdaptStage(GenerationStage):
    """Rewrites the source for the learner's grade and interest."""

    step = PipelineStep.ADAPT
    kind = CapabilityKind.REWRITE

    def build_options(self, state: RunState) -> Dict[str, Any]:
        return generation_options(
            state.preferences,
            tone=rewrite_tone_for(state.preferences.complexity),
            format="plain-text",
            length="as-is",
        )

    def build_context(self, state: RunState) -> str:
        return build_context(state.preferences, "Rewrite this content")

    def build_input(self, state: RunState) -> str:
        return state.source_text

    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> AdaptedContent:
        text = raw.strip()
        return AdaptedContent(
            text=text,
            original_length=len(state.source_text),
            adapted_length=len(text),
            grade_level=state.preferences.grade_level,
            interest=state.preferences.interest,
            metadata=metadata,
        )
