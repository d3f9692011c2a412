"""
Centralized AI model configurations for the materials service.
Follows the rule of a single model registry per deployment.
"""

from learnsphere.core.settings import settings


class AIModelConfig:
    # Gemini Configuration
    GEMINI_API_KEY = settings.GEMINI_API_KEY
    GEMINI_MODEL_NAME = "gemini-2.5-flash-lite"

    # Groq Configuration
    GROQ_API_KEY = settings.GROQ_API_KEY
    GROQ_MODEL_LIGHTWEIGHT = "openai/gpt-oss-20b"
    GROQ_MODEL_HEAVY = "openai/gpt-oss-120b"

    # Default Temperatures
    DEFAULT_TEMPERATURE_SUMMARIZE = 0.3
    DEFAULT_TEMPERATURE_REWRITE = 0.4
    DEFAULT_TEMPERATURE_EXTRACT_STRUCTURE = 0.0
    DEFAULT_TEMPERATURE_SEGMENT = 0.2
    DEFAULT_TEMPERATURE_AUTHOR_QUESTIONS = 0.2

    _LIGHTWEIGHT_CAPABILITIES = {
        "SUMMARIZE",
        "EXTRACT_STRUCTURE",
        "SEGMENT",
    }

    _HEAVY_CAPABILITIES = {
        "REWRITE",
        "AUTHOR_QUESTIONS",
    }

    @classmethod
    def is_gemini_available(cls) -> bool:
        return bool(cls.GEMINI_API_KEY)

    @classmethod
    def is_groq_available(cls) -> bool:
        return bool(cls.GROQ_API_KEY)

    @classmethod
    def get_groq_model_for_capability(cls, capability: str) -> str:
        normalized = str(capability or "").strip().upper()
        if normalized in cls._HEAVY_CAPABILITIES:
            return cls.GROQ_MODEL_HEAVY
        return cls.GROQ_MODEL_LIGHTWEIGHT

    @classmethod
    def default_temperature(cls, capability: str) -> float:
        normalized = str(capability or "").strip().upper()
        return float(
            getattr(cls, f"DEFAULT_TEMPERATURE_{normalized}", cls.DEFAULT_TEMPERATURE_SUMMARIZE)
        )
