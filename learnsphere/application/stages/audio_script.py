from __future__ import annotations

import math
from typing import Any, Dict, Optional

from learnsphere.application.stages.base import GenerationStage, RunState
from learnsphere.core.settings import settings
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import CapabilityKind
from learnsphere.domain.materials import AudioScript, AudioSegment, GenerationMetadata
from learnsphere.domain.policies.personalization import build_context, generation_options
from learnsphere.domain.policies.text_validator import split_sentences


def segment_script(text: str, words_per_second: float) -> tuple[float, list[AudioSegment]]:
    """
    Splits narration into contiguous timed segments.

    Returns (duration_seconds, segments). Segment i ends at
    duration * (i + 1) / n so the last end time equals the duration.
    """
    stripped = (text or "").strip()
    if not stripped:
        return 0.0, []

    duration = float(math.ceil(len(stripped.split()) / words_per_second))
    fragments = split_sentences(stripped) or [stripped]
    count = len(fragments)

    segments: list[AudioSegment] = []
    start = 0.0
    for index, fragment in enumerate(fragments):
        end = duration if index == count - 1 else duration * (index + 1) / count
        segments.append(
            AudioSegment(id=f"segment_{index}", text=fragment, start_time=start, end_time=end)
        )
        start = end
    return duration, segments


class AudioScriptStage(GenerationStage):
    step = PipelineStep.AUDIO_SCRIPT
    kind = CapabilityKind.SEGMENT

    def __init__(self, words_per_second: Optional[float] = None):
        self.words_per_second = words_per_second or settings.AUDIO_WORDS_PER_SECOND

    def build_options(self, state: RunState) -> Dict[str, Any]:
        return generation_options(state.preferences, speed=1.0)

    def build_context(self, state: RunState) -> str:
        return build_context(state.preferences, "Write speaker notes for narrating this content")

    def build_input(self, state: RunState) -> str:
        return state.adapted_text

    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> AudioScript:
        narration = state.adapted_text
        duration, segments = segment_script(narration, self.words_per_second)
        return AudioScript(
            text=narration,
            duration_seconds=duration,
            speed=1.0,
            language=state.preferences.language,
            segments=segments,
            speaker_notes=raw.strip(),
            metadata=metadata,
        )
