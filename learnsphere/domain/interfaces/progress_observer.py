from __future__ import annotations

from typing import Protocol

from learnsphere.domain.generation import GenerationProgress


class ProgressObserver(Protocol):
    def on_progress(self, progress: GenerationProgress) -> None:
        ...
