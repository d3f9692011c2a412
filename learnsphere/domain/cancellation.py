from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from learnsphere.domain.exceptions import AbortedError

T = TypeVar("T")


class CancellationToken:
    """
    Cooperative cancellation signal shared by one pipeline run.
    Polled between stages and raced against in-flight capability calls.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "Generation was cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def raise_if_cancelled(self, step: Optional[str] = None) -> None:
        if self._event.is_set():
            raise AbortedError(self._reason or "Generation was cancelled", step=step)

    async def wait(self) -> None:
        await self._event.wait()


async def _cancel_and_drain(*tasks: "asyncio.Future") -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def run_cancellable(
    awaitable: Awaitable[T],
    token: Optional[CancellationToken],
    step: Optional[str] = None,
) -> T:
    """Awaits `awaitable`, cancelling it if `token` fires first."""
    if token is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    if token.is_cancelled:
        await _cancel_and_drain(task)
        token.raise_if_cancelled(step)

    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        # Outer task cancelled; both children must finish before re-raising.
        await asyncio.shield(_cancel_and_drain(task, waiter))
        raise

    if task in done:
        await _cancel_and_drain(waiter)
        return task.result()

    await _cancel_and_drain(task)
    raise AbortedError(token.reason or "Generation was cancelled", step=step)
