"""
LearnSphere Container - Infrastructure Layer

Centralizes service instantiation and dependency injection.
"""

from typing import Optional

import structlog

from learnsphere.application.services.learning_session_service import LearningSessionService
from learnsphere.domain.interfaces.capability_registry import CapabilityRegistry
from learnsphere.domain.interfaces.session_repository import ISessionRepository
from learnsphere.domain.policies.text_validator import TextValidator
from learnsphere.infrastructure.capabilities.langchain_registry import LangChainCapabilityRegistry
from learnsphere.infrastructure.concurrency.session_run_guard import SessionRunGuard
from learnsphere.infrastructure.repositories.in_memory_session_repository import (
    InMemorySessionRepository,
)
from learnsphere.workflows.generation.orchestrator import GenerationPipeline

logger = structlog.get_logger(__name__)


class LearnSphereContainer:
    """
    IoC Container for the materials service.
    """

    _instance: Optional["LearnSphereContainer"] = None

    def __init__(self, capability_registry: Optional[CapabilityRegistry] = None):
        # Lazy initialization of services
        self._capability_registry = capability_registry
        self._text_validator = None
        self._session_repository = None
        self._session_run_guard = None
        self._generation_pipeline = None
        self._session_service = None

    @classmethod
    def get_instance(cls) -> "LearnSphereContainer":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_instance(cls, container: Optional["LearnSphereContainer"]) -> None:
        cls._instance = container

    @property
    def capability_registry(self) -> CapabilityRegistry:
        if self._capability_registry is None:
            self._capability_registry = LangChainCapabilityRegistry()
        return self._capability_registry

    @property
    def text_validator(self) -> TextValidator:
        if self._text_validator is None:
            self._text_validator = TextValidator()
        return self._text_validator

    @property
    def session_repository(self) -> ISessionRepository:
        if self._session_repository is None:
            self._session_repository = InMemorySessionRepository()
        return self._session_repository

    @property
    def session_run_guard(self) -> SessionRunGuard:
        if self._session_run_guard is None:
            self._session_run_guard = SessionRunGuard()
        return self._session_run_guard

    @property
    def generation_pipeline(self) -> GenerationPipeline:
        if self._generation_pipeline is None:
            self._generation_pipeline = GenerationPipeline(
                registry=self.capability_registry,
                validator=self.text_validator,
            )
        return self._generation_pipeline

    @property
    def session_service(self) -> LearningSessionService:
        if self._session_service is None:
            self._session_service = LearningSessionService(
                pipeline=self.generation_pipeline,
                repository=self.session_repository,
                validator=self.text_validator,
                run_guard=self.session_run_guard,
            )
        return self._session_service

    async def startup(self) -> None:
        logger.info("container_started")

    async def shutdown(self) -> None:
        if self._session_service is not None:
            await self._session_service.shutdown()
        if self._session_repository is not None:
            await self._session_repository.clear()
        logger.info("container_stopped")
