from typing import Optional

import structlog
from langchain_core.language_models.chat_models import BaseChatModel

from learnsphere.core.ai_models import AIModelConfig
from learnsphere.core.settings import settings

logger = structlog.get_logger(__name__)


def get_llm(
    capability: str = "SUMMARIZE",
    temperature: Optional[float] = None,
    prefer_provider: Optional[str] = None,
) -> BaseChatModel:
    """
    Returns the configured chat model for a generation capability.
    Prioritizes Groq -> Gemini unless a provider is preferred.
    """
    if temperature is None:
        temperature = AIModelConfig.default_temperature(capability)

    def _build_groq() -> Optional[BaseChatModel]:
        if not AIModelConfig.is_groq_available():
            return None
        try:
            from langchain_groq import ChatGroq

            return ChatGroq(
                model=AIModelConfig.get_groq_model_for_capability(capability),
                temperature=temperature,
                api_key=AIModelConfig.GROQ_API_KEY,
            )
        except ImportError:
            logger.warning("llm_provider_package_missing", provider="groq", package="langchain-groq")
            return None

    def _build_gemini() -> Optional[BaseChatModel]:
        if not AIModelConfig.is_gemini_available():
            return None
        try:
            from langchain_google_genai import ChatGoogleGenerativeAI

            return ChatGoogleGenerativeAI(
                model=AIModelConfig.GEMINI_MODEL_NAME,
                temperature=temperature,
                google_api_key=AIModelConfig.GEMINI_API_KEY,
            )
        except ImportError:
            logger.warning(
                "llm_provider_package_missing", provider="gemini", package="langchain-google-genai"
            )
            return None

    normalized_preference = (prefer_provider or settings.LLM_PROVIDER or "auto").strip().lower()
    if normalized_preference not in {"auto", "groq", "gemini"}:
        normalized_preference = "auto"

    if normalized_preference == "gemini":
        provider_order = ["gemini", "groq"]
    elif normalized_preference == "groq":
        provider_order = ["groq", "gemini"]
    elif str(capability).upper() in {"REWRITE", "AUTHOR_QUESTIONS"}:
        provider_order = ["gemini", "groq"]
    else:
        provider_order = ["groq", "gemini"]

    for provider in provider_order:
        model = _build_groq() if provider == "groq" else _build_gemini()
        if model is not None:
            return model

    raise ValueError("No valid AI Provider found. Set GROQ_API_KEY or GEMINI_API_KEY.")
