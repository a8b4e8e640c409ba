"""Cancelable delayed actions.

A DelayedAction holds at most one pending asyncio task that sleeps for a
delay and then runs a callback. Scheduling again cancels the pending task
first, so only the most recent schedule can fire.
"""

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

ActionCallback = Callable[[], Awaitable[None] | None]


class DelayedAction:
    """Single-slot, cancelable timer.

    Lifecycle:
    - schedule() cancels any pending run and starts a new one.
    - cancel() drops the pending run without firing it.
    - wait() awaits the pending run (for tests and shutdown).

    Args:
        name: Label used in log messages.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self._generation = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_pending(self) -> bool:
        """Whether a scheduled callback has not fired or been cancelled yet."""
        return self._task is not None and not self._task.done()

    def schedule(self, delay_seconds: float, callback: ActionCallback) -> None:
        """Run callback after delay_seconds, replacing any pending run.

        Must be called from an async context (running event loop).

        Args:
            delay_seconds: Seconds to wait before firing.
            callback: Plain or async callable with no arguments.
        """
        self.cancel()
        self._generation += 1
        self._task = asyncio.create_task(
            self._run(self._generation, delay_seconds, callback),
            name=f"delayed-{self._name}",
        )

    def cancel(self) -> bool:
        """Cancel the pending run.

        Returns:
            True if a pending run was cancelled.
        """
        # Bumping the generation also stops a run whose sleep already
        # finished but which has not started the callback.
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Cancelled pending %s", self._name)
            return True
        return False

    async def wait(self) -> None:
        """Wait for the pending run to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(
        self, generation: int, delay_seconds: float, callback: ActionCallback
    ) -> None:
        await asyncio.sleep(delay_seconds)
        if generation != self._generation:
            return
        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001
            logger.exception("Error in delayed %s", self._name)
