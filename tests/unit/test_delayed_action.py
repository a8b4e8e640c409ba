"""Tests for the cancelable DelayedAction timer.

Lifecycle: schedule fires once after the delay, rescheduling and cancel
drop the pending run, and callback errors are logged rather than raised.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from dashboard_gate.services.delayed_action import DelayedAction

_SHORT = 0.01
_LONG = 0.05


class TestSchedule:
    """schedule() runs the callback once after the delay."""

    async def test_fires_after_delay(self) -> None:
        action = DelayedAction("test")
        callback = MagicMock()

        action.schedule(_SHORT, callback)
        assert action.is_pending is True
        callback.assert_not_called()

        await action.wait()
        callback.assert_called_once_with()
        assert action.is_pending is False

    async def test_awaits_async_callback(self) -> None:
        action = DelayedAction("test")
        callback = AsyncMock()

        action.schedule(_SHORT, callback)
        await action.wait()

        callback.assert_awaited_once()

    async def test_reschedule_replaces_pending_run(self) -> None:
        """Only the most recent schedule fires."""
        action = DelayedAction("test")
        first = MagicMock()
        second = MagicMock()

        action.schedule(_LONG, first)
        action.schedule(_SHORT, second)
        await action.wait()
        await asyncio.sleep(_LONG + _SHORT)

        first.assert_not_called()
        second.assert_called_once()

    async def test_zero_delay_still_runs_later(self) -> None:
        action = DelayedAction("test")
        callback = MagicMock()

        action.schedule(0, callback)
        callback.assert_not_called()
        await action.wait()
        callback.assert_called_once()


class TestCancel:
    """cancel() drops the pending run."""

    async def test_cancel_prevents_callback(self) -> None:
        action = DelayedAction("test")
        callback = MagicMock()

        action.schedule(_SHORT, callback)
        assert action.cancel() is True
        await asyncio.sleep(_SHORT * 3)

        callback.assert_not_called()
        assert action.is_pending is False

    async def test_cancel_without_pending_is_safe(self) -> None:
        assert DelayedAction("test").cancel() is False

    async def test_cancel_after_fire_returns_false(self) -> None:
        action = DelayedAction("test")
        action.schedule(_SHORT, MagicMock())
        await action.wait()
        assert action.cancel() is False


class TestErrors:
    async def test_callback_error_is_logged_not_raised(self, caplog) -> None:
        action = DelayedAction("failing")
        callback = MagicMock(side_effect=RuntimeError("boom"))

        action.schedule(_SHORT, callback)
        await action.wait()

        callback.assert_called_once()
        assert action.is_pending is False
        assert "Error in delayed failing" in caplog.text

    async def test_wait_without_schedule_returns(self) -> None:
        await DelayedAction("idle").wait()

    async def test_wait_on_cancelled_run_returns(self) -> None:
        action = DelayedAction("test")
        action.schedule(_LONG, MagicMock())
        task_waiter = asyncio.create_task(action.wait())
        await asyncio.sleep(0)
        action.cancel()
        await task_waiter
