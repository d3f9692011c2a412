from __future__ import annotations

import pytest
from langchain_core.language_models import FakeListChatModel

from learnsphere.domain.exceptions import CapabilityUnavailableError, ErrorKind
from learnsphere.domain.interfaces.capability_registry import Availability, CapabilityKind
from learnsphere.infrastructure.capabilities.langchain_registry import LangChainCapabilityRegistry
from learnsphere.workflows.generation.orchestrator import (
    GenerateMaterialsCommand,
    GenerationPipeline,
)
from tests.support.fake_capabilities import DEFAULT_OUTPUTS, SAMPLE_TEXT, make_preferences


def _fake_factory(capability: str) -> FakeListChatModel:
    return FakeListChatModel(responses=[DEFAULT_OUTPUTS[CapabilityKind[capability]]])


def _no_provider(_: str):
    raise ValueError("No valid AI Provider found. Set GROQ_API_KEY or GEMINI_API_KEY.")


@pytest.mark.asyncio
async def test_handle_returns_model_text() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_fake_factory)

    assert await registry.availability(CapabilityKind.SUMMARIZE) == Availability.READY
    handle = await registry.create(CapabilityKind.SUMMARIZE, {"type": "key-points"})
    output = await handle.transform(SAMPLE_TEXT, "Summarize for Grade 5 students")

    assert output == DEFAULT_OUTPUTS[CapabilityKind.SUMMARIZE]


@pytest.mark.asyncio
async def test_system_prompt_includes_instruction_options_and_context() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_fake_factory)
    handle = await registry.create(
        CapabilityKind.AUTHOR_QUESTIONS, {"question_count": 3, "difficulty": "easy"}
    )

    prompt = handle.system_prompt("Write questions for Grade 3 students")

    assert "Answer: <letter>" in prompt
    assert "difficulty=easy, question_count=3" in prompt
    assert prompt.endswith("Write questions for Grade 3 students")


@pytest.mark.asyncio
async def test_disposed_handle_refuses_work() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_fake_factory)
    handle = await registry.create(CapabilityKind.SEGMENT, {})
    handle.dispose()

    assert handle.disposed is True
    with pytest.raises(RuntimeError):
        await handle.transform("text", "context")


@pytest.mark.asyncio
async def test_missing_provider_reports_unavailable() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_no_provider)

    assert await registry.availability(CapabilityKind.REWRITE) == Availability.UNAVAILABLE
    with pytest.raises(CapabilityUnavailableError):
        await registry.create(CapabilityKind.REWRITE, {})


@pytest.mark.asyncio
async def test_pipeline_runs_end_to_end_on_langchain_models() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_fake_factory)
    command = GenerateMaterialsCommand(text=SAMPLE_TEXT, preferences=make_preferences())

    result = await GenerationPipeline(registry).run(command)

    assert result.success is True
    assert result.stats.external_call_count == 5
    assert len(result.materials.quiz.questions) == 3
    assert result.materials.summary.key_points[0] == "Leaves capture sunlight"


@pytest.mark.asyncio
async def test_pipeline_without_provider_fails_as_unavailable() -> None:
    registry = LangChainCapabilityRegistry(model_factory=_no_provider)
    command = GenerateMaterialsCommand(text=SAMPLE_TEXT, preferences=make_preferences())

    result = await GenerationPipeline(registry).run(command)

    assert result.error_kind == ErrorKind.CAPABILITY_UNAVAILABLE
    assert result.stats.external_call_count == 0
