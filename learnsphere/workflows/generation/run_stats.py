from __future__ import annotations

from typing import Dict

from learnsphere.domain.generation import GenerationStats, PipelineStep
from learnsphere.infrastructure.observability.timing import elapsed_ms, perf_now


class RunStatsAccumulator:
    """Per-run timing and external-call counters. Never shared across runs."""

    def __init__(self) -> None:
        self._started = perf_now()
        self._step_times_ms: Dict[str, float] = {}
        self._external_calls = 0

    @property
    def external_call_count(self) -> int:
        return self._external_calls

    def count_call(self) -> None:
        self._external_calls += 1

    def record_step(self, step: PipelineStep, duration_ms: float) -> None:
        self._step_times_ms[step.value] = duration_ms

    def total_ms(self) -> float:
        return elapsed_ms(self._started)

    def snapshot(self) -> GenerationStats:
        return GenerationStats(
            total_time_ms=self.total_ms(),
            step_times_ms=dict(self._step_times_ms),
            external_call_count=self._external_calls,
        )
