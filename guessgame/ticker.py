from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from guessgame.api.models import SessionPhase
from guessgame.engine import EngineResult, SessionEngine

logger = logging.getLogger(__name__)

OnResult = Callable[[EngineResult], Awaitable[None]]


class SessionTicker:
    """Periodic trigger that calls `engine.tick()` while a session runs.

    Contract:
      - `start()` (re)arms the timer; call it right after `engine.start()`.
      - `rearm()` restarts the interval after the countdown was reset.
      - `cancel()` disarms it synchronously; call it in the same request that
        ends the session so no stale tick is delivered.
      - the loop exits by itself once the phase leaves running.

    The engine also ignores ticks outside of running, so a tick that slips
    through cancellation is harmless.
    """

    def __init__(self, *, engine: SessionEngine, interval: float = 1.0, on_result: OnResult | None = None) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._engine = engine
        self._interval = interval
        self._on_result = on_result
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def rearm(self) -> None:
        """Restart the interval so a full period passes before the next tick.

        Call after a correct answer resets the countdown. No-op when disarmed.
        """

        if self.active:
            self.start()

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def stop(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if self._engine.phase != SessionPhase.running:
                return

            result = self._engine.tick()
            if self._on_result is not None:
                try:
                    await self._on_result(result)
                except Exception:
                    logger.exception("Tick listener failed")

            if result.state.phase != SessionPhase.running:
                return
