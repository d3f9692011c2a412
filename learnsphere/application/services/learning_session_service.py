from __future__ import annotations

import asyncio
import uuid
from typing import List, Optional, Set, Tuple

import structlog
from structlog.contextvars import bound_contextvars

from learnsphere.application.services.progress_reporter import CollectingProgressObserver
from learnsphere.domain.cancellation import CancellationToken
from learnsphere.domain.content import ContentValidation, SourceContent
from learnsphere.domain.exceptions import ContentValidationError
from learnsphere.domain.generation import GenerationProgress, GenerationResult
from learnsphere.domain.interfaces.progress_observer import ProgressObserver
from learnsphere.domain.interfaces.session_repository import ISessionRepository
from learnsphere.domain.policies.text_validator import TextValidator
from learnsphere.domain.preferences import UserPreferences
from learnsphere.domain.sessions import LearningSession, SessionStatus
from learnsphere.infrastructure.concurrency.session_run_guard import SessionRunGuard
from learnsphere.infrastructure.observability.context_vars import session_id_ctx
from learnsphere.workflows.generation.orchestrator import (
    GenerateMaterialsCommand,
    GenerationPipeline,
)

logger = structlog.get_logger(__name__)

TITLE_MAX_WORDS = 8
TITLE_MAX_CHARS = 50
UNTITLED_SESSION = "Untitled Session"


class SessionBusyError(Exception):
    """Raised when a session already has a generation run in flight."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is already generating materials")
        self.session_id = session_id


class SessionNotFoundError(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


def derive_title(text: str) -> str:
    words = (text or "").split()[:TITLE_MAX_WORDS]
    if not words:
        return UNTITLED_SESSION
    title = " ".join(words)
    if len(title) > TITLE_MAX_CHARS:
        title = title[:TITLE_MAX_CHARS].rstrip() + "..."
    return title


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex}"


class _TeeObserver:
    def __init__(self, collector: CollectingProgressObserver, downstream: Optional[ProgressObserver]):
        self._collector = collector
        self._downstream = downstream

    def on_progress(self, progress: GenerationProgress) -> None:
        self._collector.on_progress(progress)
        if self._downstream is not None:
            self._downstream.on_progress(progress)


class LearningSessionService:
    """
    Session lifecycle around the generation pipeline.

    Content is validated before a session exists, so invalid input never
    reaches the pipeline. A session runs at most one generation at a time.
    """

    def __init__(
        self,
        pipeline: GenerationPipeline,
        repository: ISessionRepository,
        validator: Optional[TextValidator] = None,
        run_guard: Optional[SessionRunGuard] = None,
    ):
        self._pipeline = pipeline
        self._repository = repository
        self._validator = validator or TextValidator()
        self._guard = run_guard or SessionRunGuard()
        self._background: Set[asyncio.Task] = set()

    def validate_content(self, text: str) -> ContentValidation:
        return self._validator.validate(text)

    async def create_session(
        self,
        text: str,
        preferences: UserPreferences,
        observer: Optional[ProgressObserver] = None,
    ) -> Tuple[LearningSession, GenerationResult]:
        session = self._new_session(text, preferences)
        await self._repository.save(session)
        logger.info("session_created", new_session_id=session.id, title=session.title)
        return await self._generate(session, observer)

    async def start_session(
        self,
        text: str,
        preferences: UserPreferences,
        observer: Optional[ProgressObserver] = None,
    ) -> LearningSession:
        """
        Like `create_session`, but returns the processing session right away
        and runs the pipeline in a background task, so the run can be
        aborted through its session id.
        """
        session = self._new_session(text, preferences).evolve(status=SessionStatus.PROCESSING)
        token = await self._guard.try_acquire(session.id)
        if token is None:
            raise SessionBusyError(session.id)
        await self._repository.save(session)
        logger.info("session_created", new_session_id=session.id, title=session.title, background=True)

        task = asyncio.create_task(self._run_guarded(session, observer, token))
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return session

    def _on_background_done(self, task: "asyncio.Task") -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("session_background_run_failed", error=str(exc), error_type=type(exc).__name__)

    async def shutdown(self) -> None:
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._background.clear()

    async def regenerate(
        self,
        session_id: str,
        preferences: Optional[UserPreferences] = None,
        observer: Optional[ProgressObserver] = None,
    ) -> Tuple[LearningSession, GenerationResult]:
        session = await self._require(session_id)
        if preferences is not None:
            session = session.evolve(preferences=preferences)
        return await self._generate(session, observer)

    async def abort(self, session_id: str) -> bool:
        return await self._guard.cancel(session_id)

    async def get(self, session_id: str) -> Optional[LearningSession]:
        return await self._repository.get(session_id)

    async def list_sessions(self) -> List[LearningSession]:
        return await self._repository.list()

    async def delete(self, session_id: str) -> bool:
        await self._guard.cancel(session_id, reason="Session was deleted")
        return await self._repository.delete(session_id)

    def _new_session(self, text: str, preferences: UserPreferences) -> LearningSession:
        validation = self._validator.validate(text)
        if not validation.is_valid:
            logger.info("session_rejected_invalid_content", errors=validation.errors)
            raise ContentValidationError(validation.errors, validation.warnings)
        return LearningSession(
            id=new_session_id(),
            title=derive_title(text),
            source_content=SourceContent.from_validation(text, validation),
            preferences=preferences,
        )

    async def _require(self, session_id: str) -> LearningSession:
        session = await self._repository.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def _generate(
        self,
        session: LearningSession,
        observer: Optional[ProgressObserver],
    ) -> Tuple[LearningSession, GenerationResult]:
        token = await self._guard.try_acquire(session.id)
        if token is None:
            raise SessionBusyError(session.id)
        return await self._run_guarded(session, observer, token)

    async def _run_guarded(
        self,
        session: LearningSession,
        observer: Optional[ProgressObserver],
        token: CancellationToken,
    ) -> Tuple[LearningSession, GenerationResult]:
        collector = CollectingProgressObserver()
        ctx_token = session_id_ctx.set(session.id)
        try:
            with bound_contextvars(session_id=session.id):
                session = session.evolve(
                    status=SessionStatus.PROCESSING, materials=None, processing_steps=[], errors=[]
                )
                await self._repository.save(session)

                result = await self._pipeline.run(
                    GenerateMaterialsCommand(
                        text=session.source_content.text, preferences=session.preferences
                    ),
                    observer=_TeeObserver(collector, observer),
                    cancellation=token,
                )

                session = session.evolve(
                    status=SessionStatus.COMPLETED if result.success else SessionStatus.ERROR,
                    materials=result.materials,
                    processing_steps=list(collector.events),
                    errors=[result.error] if result.error else [],
                    stats=result.stats,
                    processing_time_ms=result.stats.total_time_ms,
                )
                if await self._repository.get(session.id) is not None:
                    await self._repository.save(session)
                logger.info(
                    "session_generation_finished",
                    status=session.status.value,
                    error_kind=result.error_kind.value if result.error_kind else None,
                )
                return session, result
        finally:
            session_id_ctx.reset(ctx_token)
            await self._guard.release(session.id)
