from __future__ import annotations

import re
from typing import Any, Dict

from learnsphere.application.stages.base import GenerationStage, RunState
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import CapabilityKind
from learnsphere.domain.materials import GenerationMetadata, SummaryContent
from learnsphere.domain.policies.personalization import build_context, generation_options

_BULLET_RE = re.compile(r"^\s*[-•*]\s*(.*)$")


def extract_key_points(text: str) -> list[str]:
    """Bullet lines (`-`, `•`, `*`) with the marker stripped."""
    points: list[str] = []
    for line in (text or "").splitlines():
        match = _BULLET_RE.match(line)
        if not match:
            continue
        point = match.group(1).strip()
        if point:
            points.append(point)
    return points


class SummarizeStage(GenerationStage):
    step = PipelineStep.SUMMARIZE
    kind = CapabilityKind.SUMMARIZE

    def build_options(self, state: RunState) -> Dict[str, Any]:
        return generation_options(
            state.preferences, type="key-points", format="plain-text", length="medium"
        )

    def build_context(self, state: RunState) -> str:
        return build_context(state.preferences, "Summarize the key points of this content")

    def build_input(self, state: RunState) -> str:
        return state.source_text

    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> SummaryContent:
        text = raw.strip()
        return SummaryContent(
            text=text,
            key_points=extract_key_points(text),
            word_count=len(text.split()),
            type="key-points",
            metadata=metadata,
        )
