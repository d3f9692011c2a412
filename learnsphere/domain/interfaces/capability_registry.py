"""Provider-agnostic contract for the generative text capability."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Protocol


class CapabilityKind(str, Enum):
    SUMMARIZE = "summarize"
    REWRITE = "rewrite"
    EXTRACT_STRUCTURE = "extract_structure"
    SEGMENT = "segment"
    AUTHOR_QUESTIONS = "author_questions"


class Availability(str, Enum):
    READY = "ready"
    NEEDS_DOWNLOAD = "needs_download"
    UNAVAILABLE = "unavailable"


class CapabilityHandle(Protocol):
    """Disposable handle performing one transformation kind."""

    async def transform(self, input_text: str, context: str) -> str:
        ...

    def dispose(self) -> None:
        ...


class CapabilityRegistry(Protocol):
    async def availability(self, kind: CapabilityKind) -> Availability:
        ...

    async def create(self, kind: CapabilityKind, options: Mapping[str, Any]) -> CapabilityHandle:
        ...
