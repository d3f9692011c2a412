"""
Stage adapter contract.

A stage owns exactly one capability kind. It derives the call's options,
context and input from the learner preferences and the outputs of earlier
stages, and turns the raw capability text into a typed artifact.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional

import structlog
from pydantic import BaseModel

from learnsphere.domain.cancellation import CancellationToken, run_cancellable
from learnsphere.domain.generation import PipelineStep
from learnsphere.domain.interfaces.capability_registry import (
    CapabilityHandle,
    CapabilityKind,
    CapabilityRegistry,
)
from learnsphere.domain.materials import (
    AdaptedContent,
    ConceptMap,
    GenerationMetadata,
    SummaryContent,
)
from learnsphere.domain.preferences import UserPreferences
from learnsphere.infrastructure.observability.timing import elapsed_ms, perf_now, utc_now

logger = structlog.get_logger(__name__)


@dataclass
class RunState:
    """Inputs and intermediate artifacts of one pipeline run."""

    source_text: str
    preferences: UserPreferences
    outputs: Dict[PipelineStep, BaseModel] = field(default_factory=dict)

    @property
    def summary(self) -> Optional[SummaryContent]:
        return self.outputs.get(PipelineStep.SUMMARIZE)  # type: ignore[return-value]

    @property
    def adapted(self) -> Optional[AdaptedContent]:
        return self.outputs.get(PipelineStep.ADAPT)  # type: ignore[return-value]

    @property
    def concept_map(self) -> Optional[ConceptMap]:
        return self.outputs.get(PipelineStep.CONCEPT_MAP)  # type: ignore[return-value]

    @property
    def adapted_text(self) -> str:
        adapted = self.adapted
        return adapted.text if adapted is not None else self.source_text


@asynccontextmanager
async def acquire_capability(
    registry: CapabilityRegistry,
    kind: CapabilityKind,
    options: Mapping[str, Any],
) -> AsyncIterator[CapabilityHandle]:
    """Creates a handle and disposes it on every exit path."""
    handle = await registry.create(kind, options)
    try:
        yield handle
    finally:
        try:
            handle.dispose()
        except Exception as exc:
            logger.warning("capability_dispose_failed", kind=kind.value, error=str(exc))


class GenerationStage(ABC):
    step: PipelineStep
    kind: CapabilityKind

    @abstractmethod
    def build_options(self, state: RunState) -> Dict[str, Any]:
        ...

    @abstractmethod
    def build_context(self, state: RunState) -> str:
        ...

    @abstractmethod
    def build_input(self, state: RunState) -> str:
        ...

    @abstractmethod
    def parse(self, raw: str, state: RunState, metadata: GenerationMetadata) -> BaseModel:
        ...

    async def execute(
        self,
        handle: CapabilityHandle,
        state: RunState,
        cancellation: Optional[CancellationToken] = None,
        on_call: Optional[Callable[[], None]] = None,
    ) -> BaseModel:
        input_text = self.build_input(state)
        context = self.build_context(state)

        # The token may fire while availability() or create() were awaited.
        if cancellation is not None:
            cancellation.raise_if_cancelled(self.step.value)
        started = perf_now()
        if on_call is not None:
            on_call()
        raw = await run_cancellable(
            handle.transform(input_text, context), cancellation, step=self.step.value
        )
        metadata = GenerationMetadata(
            generated_at=utc_now(),
            processing_time_ms=elapsed_ms(started),
            grade_level=state.preferences.grade_level,
            interest=state.preferences.interest,
            model=getattr(handle, "model_name", None),
        )
        return self.parse(str(raw or ""), state, metadata)
