from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional

import structlog

from learnsphere.domain.generation import (
    PROGRESS_CHECKPOINTS,
    GenerationProgress,
    PipelineStep,
)
from learnsphere.domain.interfaces.progress_observer import ProgressObserver
from learnsphere.infrastructure.observability.timing import utc_now

logger = structlog.get_logger(__name__)


class CollectingProgressObserver:
    """Keeps every emitted progress entry, in order."""

    def __init__(self) -> None:
        self.events: List[GenerationProgress] = []

    def on_progress(self, progress: GenerationProgress) -> None:
        self.events.append(progress)

    @property
    def percents(self) -> List[int]:
        return [event.percent for event in self.events]

    @property
    def last(self) -> Optional[GenerationProgress]:
        return self.events[-1] if self.events else None


class CallbackProgressObserver:
    def __init__(self, callback: Callable[[GenerationProgress], None]):
        self._callback = callback

    def on_progress(self, progress: GenerationProgress) -> None:
        self._callback(progress)


class ProgressReporter:
    """
    Emits step transitions at fixed checkpoints.

    Percent never decreases within a run: an error entry repeats the last
    percent reached. A failing observer is logged and skipped.
    """

    def __init__(self, observer: Optional[ProgressObserver] = None):
        self._observer = observer
        self._percent = 0
        self._started: dict[PipelineStep, datetime] = {}

    @property
    def percent(self) -> int:
        return self._percent

    def started(self, step: PipelineStep, message: Optional[str] = None) -> None:
        now = utc_now()
        self._started[step] = now
        self._emit(
            GenerationProgress(
                step=step.value,
                status="in_progress",
                percent=self._advance(PROGRESS_CHECKPOINTS[step][0]),
                message=message,
                started_at=now,
            )
        )

    def completed(self, step: PipelineStep, message: Optional[str] = None) -> None:
        self._emit(
            GenerationProgress(
                step=step.value,
                status="completed",
                percent=self._advance(PROGRESS_CHECKPOINTS[step][1]),
                message=message,
                started_at=self._started.get(step),
                ended_at=utc_now(),
            )
        )

    def failed(self, step: PipelineStep, error: str) -> None:
        self._emit(
            GenerationProgress(
                step=step.value,
                status="error",
                percent=self._percent,
                error=error,
                started_at=self._started.get(step),
                ended_at=utc_now(),
            )
        )

    def _advance(self, checkpoint: int) -> int:
        self._percent = max(self._percent, checkpoint)
        return self._percent

    def _emit(self, progress: GenerationProgress) -> None:
        if self._observer is None:
            return
        try:
            self._observer.on_progress(progress)
        except Exception as exc:
            logger.warning(
                "progress_observer_failed",
                step=progress.step,
                status=progress.status,
                error=str(exc),
            )
