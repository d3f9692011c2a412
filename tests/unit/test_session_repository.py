from __future__ import annotations

import pytest

from learnsphere.domain.content import SourceContent
from learnsphere.domain.policies.text_validator import TextValidator
from learnsphere.domain.sessions import LearningSession, SessionStatus
from learnsphere.infrastructure.repositories.in_memory_session_repository import (
    InMemorySessionRepository,
)
from tests.support.fake_capabilities import SAMPLE_TEXT, make_preferences


def _session(session_id: str) -> LearningSession:
    validation = TextValidator().validate(SAMPLE_TEXT)
    return LearningSession(
        id=session_id,
        title=f"Session {session_id}",
        source_content=SourceContent.from_validation(SAMPLE_TEXT, validation),
        preferences=make_preferences(),
    )


@pytest.mark.asyncio
async def test_oldest_insertion_is_evicted_beyond_limit() -> None:
    repo = InMemorySessionRepository(max_sessions=3)
    for session_id in ("s1", "s2", "s3", "s4"):
        await repo.save(_session(session_id))

    assert await repo.get("s1") is None
    assert [session.id for session in await repo.list()] == ["s4", "s3", "s2"]


@pytest.mark.asyncio
async def test_updates_replace_in_place_without_reordering() -> None:
    repo = InMemorySessionRepository(max_sessions=3)
    for session_id in ("s1", "s2", "s3"):
        await repo.save(_session(session_id))

    updated = (await repo.get("s1")).evolve(status=SessionStatus.COMPLETED)
    await repo.save(updated)
    await repo.save(_session("s4"))

    assert await repo.get("s1") is None
    assert [session.id for session in await repo.list()] == ["s4", "s3", "s2"]


@pytest.mark.asyncio
async def test_update_of_existing_session_is_visible() -> None:
    repo = InMemorySessionRepository(max_sessions=2)
    await repo.save(_session("s1"))
    await repo.save((await repo.get("s1")).evolve(status=SessionStatus.ERROR, errors=["boom"]))

    stored = await repo.get("s1")
    assert stored.status == SessionStatus.ERROR
    assert stored.errors == ["boom"]
    assert len(await repo.list()) == 1


@pytest.mark.asyncio
async def test_delete_and_clear() -> None:
    repo = InMemorySessionRepository(max_sessions=5)
    await repo.save(_session("s1"))
    await repo.save(_session("s2"))

    assert await repo.delete("s1") is True
    assert await repo.delete("s1") is False

    await repo.clear()
    assert await repo.list() == []
