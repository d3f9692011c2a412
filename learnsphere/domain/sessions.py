from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnsphere.domain.content import SourceContent
from learnsphere.domain.generation import GenerationProgress, GenerationStats
from learnsphere.domain.materials import GeneratedMaterials
from learnsphere.domain.preferences import UserPreferences


class SessionStatus(str, Enum):
    CREATED = "created"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class LearningSession(BaseModel):
    """Snapshot of one learner session. Updates produce a new snapshot."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: SessionStatus = SessionStatus.CREATED
    title: str
    source_content: SourceContent
    preferences: UserPreferences
    materials: Optional[GeneratedMaterials] = None
    processing_steps: List[GenerationProgress] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    stats: Optional[GenerationStats] = None
    processing_time_ms: Optional[float] = None

    def evolve(self, **changes) -> "LearningSession":
        changes.setdefault("updated_at", datetime.now(timezone.utc))
        return self.model_copy(update=changes)

    @property
    def preview(self) -> str:
        text = self.source_content.text.strip()
        return text[:120] + ("..." if len(text) > 120 else "")
