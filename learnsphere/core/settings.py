import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ROOT_ENV = PROJECT_ROOT / ".env"
ROOT_ENV_LOCAL = PROJECT_ROOT / ".env.local"


class Settings(BaseSettings):
    """
    LearnSphere - Global Configuration Registry
    Centralizes all environment variables using Pydantic Settings.
    """

    model_config = SettingsConfigDict(
        env_file=(str(ROOT_ENV), str(ROOT_ENV_LOCAL)),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Config
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    APP_ENV: str = "local"

    # AI Models & Services
    GROQ_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None
    LLM_PROVIDER: Literal["auto", "groq", "gemini"] = "auto"

    # Content limits
    CONTENT_MIN_CHARACTERS: int = 50
    CONTENT_MAX_CHARACTERS: int = 50000
    CONTENT_MIN_WORDS: int = 10
    CONTENT_MAX_WORDS: int = 10000
    CONTENT_MAX_SENTENCES: int = 500

    # Generation tunables
    CONCEPT_MAP_MAX_CONCEPTS: int = 8
    AUDIO_WORDS_PER_SECOND: float = 3.0
    QUIZ_QUESTION_COUNT: int = 3
    EXTRACT_STRUCTURE_INPUT_MAX_CHARS: int = 2000
    QUIZ_INPUT_MAX_CHARS: int = 1500
    MATERIALS_SCHEMA_VERSION: str = "1.0.0"

    # Sessions
    SESSION_STORE_MAX_SESSIONS: int = 10

    @field_validator("LLM_PROVIDER", mode="before")
    @classmethod
    def _normalize_provider(cls, value: str | None) -> str:
        return str(value or "auto").strip().lower()

    @field_validator("APP_ENV", "ENVIRONMENT", mode="before")
    @classmethod
    def _normalize_environment_labels(cls, value: str | None) -> str:
        return str(value or "").strip().lower()

    @property
    def is_deployed_environment(self) -> bool:
        app_env = self.APP_ENV or self.ENVIRONMENT
        return app_env in {"staging", "production", "prod"}

    @model_validator(mode="after")
    def _enforce_content_limits(self) -> "Settings":
        if self.CONTENT_MIN_CHARACTERS > self.CONTENT_MAX_CHARACTERS:
            logger.warning(
                "CONTENT_MIN_CHARACTERS exceeds CONTENT_MAX_CHARACTERS; swapping bounds",
                extra={
                    "min_characters": self.CONTENT_MIN_CHARACTERS,
                    "max_characters": self.CONTENT_MAX_CHARACTERS,
                },
            )
            self.CONTENT_MIN_CHARACTERS, self.CONTENT_MAX_CHARACTERS = (
                self.CONTENT_MAX_CHARACTERS,
                self.CONTENT_MIN_CHARACTERS,
            )
        self.CONCEPT_MAP_MAX_CONCEPTS = max(1, int(self.CONCEPT_MAP_MAX_CONCEPTS))
        self.SESSION_STORE_MAX_SESSIONS = max(1, int(self.SESSION_STORE_MAX_SESSIONS))
        if self.AUDIO_WORDS_PER_SECOND <= 0:
            self.AUDIO_WORDS_PER_SECOND = 3.0
        return self


settings = Settings()  # type: ignore[call-arg]
