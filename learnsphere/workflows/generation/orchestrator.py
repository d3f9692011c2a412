"""
Materials generation pipeline.

One run is a single sequential asyncio flow:
validate -> summarize -> adapt -> concept_map -> audio_script -> quiz -> finalize.
Every failure ends the run and is returned, classified, in the
GenerationResult. The caller never sees a stage exception.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog
from structlog.contextvars import bound_contextvars

from learnsphere.application.services.materials_aggregator import MaterialsAggregator
from learnsphere.application.services.progress_reporter import ProgressReporter
from learnsphere.application.stages import GenerationStage, RunState, acquire_capability, default_stages
from learnsphere.domain.cancellation import CancellationToken
from learnsphere.domain.exceptions import (
    CapabilityNotReadyError,
    CapabilityUnavailableError,
    ContentValidationError,
    ErrorKind,
    GenerationError,
    classify_failure,
)
from learnsphere.domain.generation import GenerationResult, PipelineStep
from learnsphere.domain.interfaces.capability_registry import (
    Availability,
    CapabilityKind,
    CapabilityRegistry,
)
from learnsphere.domain.interfaces.progress_observer import ProgressObserver
from learnsphere.domain.policies.text_validator import TextValidator
from learnsphere.domain.preferences import UserPreferences
from learnsphere.infrastructure.observability.context_vars import run_id_ctx
from learnsphere.infrastructure.observability.timing import elapsed_ms, perf_now
from learnsphere.workflows.generation.run_stats import RunStatsAccumulator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GenerateMaterialsCommand:
    text: str
    preferences: UserPreferences


class GenerationPipeline:
    """Application orchestrator for learning-material generation."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        validator: Optional[TextValidator] = None,
        stages: Optional[Sequence[GenerationStage]] = None,
        aggregator: Optional[MaterialsAggregator] = None,
    ):
        self._registry = registry
        self._validator = validator or TextValidator()
        self._stages = list(stages) if stages is not None else default_stages()
        self._aggregator = aggregator or MaterialsAggregator()

    @property
    def stages(self) -> list[GenerationStage]:
        return list(self._stages)

    async def run(
        self,
        command: GenerateMaterialsCommand,
        observer: Optional[ProgressObserver] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        run_id = uuid.uuid4().hex[:12]
        ctx_token = run_id_ctx.set(run_id)
        try:
            with bound_contextvars(run_id=run_id):
                return await self._run(command, observer, cancellation or CancellationToken())
        finally:
            run_id_ctx.reset(ctx_token)

    async def _run(
        self,
        command: GenerateMaterialsCommand,
        observer: Optional[ProgressObserver],
        cancellation: CancellationToken,
    ) -> GenerationResult:
        stats = RunStatsAccumulator()
        reporter = ProgressReporter(observer)
        prefs = command.preferences
        logger.info(
            "generation_run_started",
            grade_level=prefs.grade_level.value,
            interest=prefs.interest.value,
            characters=len(command.text or ""),
        )

        step = PipelineStep.VALIDATE
        reporter.started(step, "Validating content")
        step_start = perf_now()
        validation = self._validator.validate(command.text)
        stats.record_step(step, elapsed_ms(step_start))
        if not validation.is_valid:
            error = ContentValidationError(validation.errors, validation.warnings)
            reporter.failed(step, error.message)
            logger.warning("generation_validation_failed", errors=validation.errors)
            return self._failure(error, step, stats, validation.warnings)
        reporter.completed(step, "Content validated")

        state = RunState(source_text=command.text, preferences=prefs)
        checked_kinds: set[CapabilityKind] = set()

        try:
            for stage in self._stages:
                step = stage.step
                cancellation.raise_if_cancelled(step.value)
                reporter.started(step)
                step_start = perf_now()
                try:
                    await self._ensure_available(stage.kind, checked_kinds, step)
                    options = stage.build_options(state)
                    async with acquire_capability(self._registry, stage.kind, options) as handle:
                        output = await stage.execute(
                            handle, state, cancellation, on_call=stats.count_call
                        )
                finally:
                    duration_ms = elapsed_ms(step_start)
                    stats.record_step(step, duration_ms)
                state.outputs[step] = output
                reporter.completed(step)
                logger.info(
                    "generation_step_completed",
                    step=step.value,
                    duration_ms=duration_ms,
                )

            step = PipelineStep.FINALIZE
            cancellation.raise_if_cancelled(step.value)
            reporter.started(step, "Assembling materials")
            step_start = perf_now()
            materials = self._aggregator.assemble(state.outputs, stats.total_ms())
            stats.record_step(step, elapsed_ms(step_start))
            reporter.completed(step, "Materials ready")
        except asyncio.CancelledError:
            reporter.failed(step, "Generation was cancelled")
            logger.warning("generation_run_task_cancelled", step=step.value)
            raise
        except Exception as exc:
            error = classify_failure(exc, step.value)
            reporter.failed(step, error.message)
            log = logger.info if error.kind is ErrorKind.ABORTED else logger.warning
            log(
                "generation_run_failed",
                step=error.step,
                error_kind=error.kind.value,
                error=error.message,
                external_call_count=stats.external_call_count,
            )
            return self._failure(error, step, stats, validation.warnings)

        result_stats = stats.snapshot()
        logger.info(
            "generation_run_completed",
            total_time_ms=result_stats.total_time_ms,
            external_call_count=result_stats.external_call_count,
        )
        return GenerationResult(
            success=True,
            materials=materials,
            warnings=validation.warnings,
            stats=result_stats,
        )

    async def _ensure_available(
        self,
        kind: CapabilityKind,
        checked: set[CapabilityKind],
        step: PipelineStep,
    ) -> None:
        if kind in checked:
            return
        availability = Availability(await self._registry.availability(kind))
        if availability is Availability.UNAVAILABLE:
            raise CapabilityUnavailableError(
                f"The '{kind.value}' capability is not available", step=step.value
            )
        if availability is Availability.NEEDS_DOWNLOAD:
            raise CapabilityNotReadyError(
                f"The '{kind.value}' capability must be downloaded before use", step=step.value
            )
        checked.add(kind)

    @staticmethod
    def _failure(
        error: GenerationError,
        step: PipelineStep,
        stats: RunStatsAccumulator,
        warnings: list[str],
    ) -> GenerationResult:
        return GenerationResult(
            success=False,
            error=error.message,
            error_kind=error.kind,
            failed_step=error.step or step.value,
            warnings=warnings,
            stats=stats.snapshot(),
        )
