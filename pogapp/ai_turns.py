"""
AI turn pacing: separates when the AI's throw is resolved from when the host
lets it happen. The engine hands over a callable; these schedulers run it after
a "thinking" delay. The callable re-validates itself, so a late or cancelled
turn never corrupts the match.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Any, Callable

from pogapp.config import DEFAULT_AI_DELAY_SECONDS
from pogapp.engine.match_engine import AITurn
from pogapp.engine.schemas import GameSnapshot

logger = logging.getLogger(__name__)


class DeferredAITurns:
    """
    Blocking scheduler for single-threaded hosts. schedule() only queues;
    the host calls run_pending() once its own command has returned.
    """

    def __init__(
        self,
        delay_seconds: float = DEFAULT_AI_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._pending: deque[AITurn] = deque()

    def schedule(self, turn: AITurn) -> None:
        self._pending.append(turn)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        self._pending.clear()

    def run_pending(self, on_result: Callable[[GameSnapshot], None] | None = None) -> GameSnapshot | None:
        """Run queued turns in order, pausing before each. Returns the last snapshot, or None if nothing was queued."""
        last = None
        while self._pending:
            turn = self._pending.popleft()
            if self.delay_seconds > 0:
                self._sleep(self.delay_seconds)
            last = turn()
            if on_result:
                on_result(last)
        return last


class AsyncAITurnScheduler:
    """
    asyncio scheduler: one task per pending AI turn, each sleeping for the delay
    before invoking the turn. If a lock is given, the turn runs while holding it
    so it never overlaps another command on the same engine.
    on_result may be a plain function or a coroutine function.
    """

    def __init__(
        self,
        delay_seconds: float = DEFAULT_AI_DELAY_SECONDS,
        on_result: Callable[[GameSnapshot], Any] | None = None,
        lock: asyncio.Lock | None = None,
    ) -> None:
        self.delay_seconds = delay_seconds
        self.on_result = on_result
        self.lock = lock
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, turn: AITurn) -> None:
        """Must be called with a running event loop."""
        task = asyncio.get_running_loop().create_task(self._run(turn))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    async def wait_idle(self) -> None:
        """Wait until no AI turn is pending, including turns scheduled meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, turn: AITurn) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        if self.lock is not None:
            async with self.lock:
                snapshot = turn()
        else:
            snapshot = turn()
        logger.debug("AI turn resolved: %s", snapshot.message.replace("\n", " | "))
        if self.on_result:
            result = self.on_result(snapshot)
            if asyncio.iscoroutine(result):
                await result
