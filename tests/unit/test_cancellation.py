from __future__ import annotations

import asyncio

import pytest

from learnsphere.domain.cancellation import CancellationToken, run_cancellable
from learnsphere.domain.exceptions import AbortedError


async def _value(value: str, delay: float = 0.0) -> str:
    await asyncio.sleep(delay)
    return value


@pytest.mark.asyncio
async def test_run_cancellable_returns_result_when_token_is_idle() -> None:
    assert await run_cancellable(_value("ok"), CancellationToken()) == "ok"
    assert await run_cancellable(_value("no token"), None) == "no token"


@pytest.mark.asyncio
async def test_run_cancellable_cancels_in_flight_work() -> None:
    token = CancellationToken()
    started = asyncio.Event()
    cancelled = asyncio.Event()

    async def slow() -> str:
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise
        return "late"

    async def cancel_when_started() -> None:
        await started.wait()
        token.cancel("stop now")

    canceller = asyncio.create_task(cancel_when_started())
    with pytest.raises(AbortedError) as excinfo:
        await asyncio.wait_for(run_cancellable(slow(), token, step="adapt"), timeout=2.0)
    await canceller

    assert cancelled.is_set()
    assert excinfo.value.step == "adapt"
    assert excinfo.value.message == "stop now"


@pytest.mark.asyncio
async def test_run_cancellable_with_cancelled_token_never_completes_work() -> None:
    token = CancellationToken()
    token.cancel()
    ran = []

    async def work() -> None:
        ran.append(True)

    with pytest.raises(AbortedError):
        await run_cancellable(work(), token)
    assert ran == []


def test_token_keeps_first_reason_and_raises() -> None:
    token = CancellationToken()
    token.raise_if_cancelled()

    token.cancel("first")
    token.cancel("second")

    assert token.is_cancelled is True
    assert token.reason == "first"
    with pytest.raises(AbortedError):
        token.raise_if_cancelled("quiz")


@pytest.mark.asyncio
async def test_outer_cancellation_waits_for_the_call_to_unwind() -> None:
    token = CancellationToken()
    started = asyncio.Event()
    unwound = []

    async def slow() -> str:
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            await asyncio.sleep(0)
            unwound.append("call")
            raise
        return "late"

    outer = asyncio.create_task(run_cancellable(slow(), token))
    await started.wait()
    outer.cancel()

    with pytest.raises(asyncio.CancelledError):
        await outer
    assert unwound == ["call"]


@pytest.mark.asyncio
async def test_finished_call_leaves_no_pending_waiter() -> None:
    before = len(asyncio.all_tasks())

    assert await run_cancellable(_value("ok"), CancellationToken()) == "ok"

    assert len(asyncio.all_tasks()) == before
