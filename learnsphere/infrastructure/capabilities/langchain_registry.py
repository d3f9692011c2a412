"""
Capability registry backed by LangChain chat models (Groq / Gemini).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from learnsphere.core.llm import get_llm
from learnsphere.domain.exceptions import CapabilityUnavailableError
from learnsphere.domain.interfaces.capability_registry import Availability, CapabilityKind

logger = structlog.get_logger(__name__)

ModelFactory = Callable[[str], BaseChatModel]

_INSTRUCTIONS: Dict[CapabilityKind, str] = {
    CapabilityKind.SUMMARIZE: (
        "You summarize educational content. Answer with a short summary followed by "
        "key points, one per line, each starting with '- '."
    ),
    CapabilityKind.REWRITE: (
        "You rewrite educational content for a specific learner. Keep every fact, "
        "change only vocabulary, sentence length and examples. Answer with plain text only."
    ),
    CapabilityKind.EXTRACT_STRUCTURE: (
        "You extract the concept structure of educational content. Answer with an "
        "indented outline: the main topic first, then its subtopics."
    ),
    CapabilityKind.SEGMENT: (
        "You prepare educational content for narration. Answer with brief speaker notes "
        "on pacing and emphasis."
    ),
    CapabilityKind.AUTHOR_QUESTIONS: (
        "You write multiple-choice quiz questions. For each question use the format:\n"
        "Question: <text>\nA) <option>\nB) <option>\nC) <option>\nD) <option>\n"
        "Answer: <letter>\nExplanation: <one sentence>"
    ),
}


def _default_factory(capability: str) -> BaseChatModel:
    return get_llm(capability=capability)


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(content or "")


class LangChainCapabilityHandle:
    def __init__(self, kind: CapabilityKind, model: BaseChatModel, options: Mapping[str, Any]):
        self.kind = kind
        self._model = model
        self._options = dict(options)
        self._disposed = False

    @property
    def model_name(self) -> Optional[str]:
        for attr in ("model_name", "model"):
            value = getattr(self._model, attr, None)
            if isinstance(value, str) and value:
                return value
        return None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def system_prompt(self, context: str) -> str:
        lines = [_INSTRUCTIONS[self.kind]]
        if self._options:
            rendered = ", ".join(f"{key}={value}" for key, value in sorted(self._options.items()))
            lines.append(f"Options: {rendered}")
        if context:
            lines.append(context)
        return "\n\n".join(lines)

    async def transform(self, input_text: str, context: str) -> str:
        if self._disposed:
            raise RuntimeError(f"Capability handle for '{self.kind.value}' was already disposed")
        messages = [
            SystemMessage(content=self.system_prompt(context)),
            HumanMessage(content=input_text),
        ]
        response = await self._model.ainvoke(messages)
        return _content_text(getattr(response, "content", response)).strip()

    def dispose(self) -> None:
        self._disposed = True


class LangChainCapabilityRegistry:
    """
    Resolves one chat model per capability kind, lazily, and caches it.

    A kind whose model cannot be built reports `unavailable`.
    """

    def __init__(self, model_factory: Optional[ModelFactory] = None):
        self._factory = model_factory or _default_factory
        self._models: Dict[CapabilityKind, BaseChatModel] = {}

    def _model_for(self, kind: CapabilityKind) -> BaseChatModel:
        model = self._models.get(kind)
        if model is None:
            model = self._factory(kind.name)
            self._models[kind] = model
        return model

    async def availability(self, kind: CapabilityKind) -> Availability:
        try:
            self._model_for(kind)
        except ValueError as exc:
            logger.warning("capability_unavailable", kind=kind.value, error=str(exc))
            return Availability.UNAVAILABLE
        return Availability.READY

    async def create(self, kind: CapabilityKind, options: Mapping[str, Any]) -> LangChainCapabilityHandle:
        try:
            model = self._model_for(kind)
        except ValueError as exc:
            raise CapabilityUnavailableError(str(exc), cause=exc) from exc
        return LangChainCapabilityHandle(kind, model, options)
