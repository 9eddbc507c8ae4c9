"""Unit tests for the scheduled task."""

import asyncio
import pytest
from hotplug.core.scheduler import ScheduledTask


@pytest.mark.asyncio
class TestScheduledTask:
    """Test delayed, self-rescheduling runs."""

    async def test_runs_after_delay(self):
        runs = []

        async def callback():
            runs.append(1)

        task = ScheduledTask("test", callback)
        task.schedule_after(0.01)
        assert task.is_pending()

        await asyncio.sleep(0.05)
        assert runs == [1]
        assert not task.is_pending()

    async def test_reschedules_from_within(self):
        runs = []
        task = None

        async def callback():
            runs.append(1)
            if len(runs) < 3:
                task.schedule_after(0)

        task = ScheduledTask("chain", callback)
        task.schedule_after(0)
        await asyncio.sleep(0.05)

        assert len(runs) == 3

    async def test_cancel_before_run(self):
        runs = []

        async def callback():
            runs.append(1)

        task = ScheduledTask("idle", callback)
        task.schedule_after(10)
        await task.cancel_and_join()
        await asyncio.sleep(0.01)

        assert runs == []
        assert task.closed
        assert task.schedule_after(0) is False

    async def test_cancel_waits_for_executing_run(self):
        started = asyncio.Event()
        finished = []
        task = None

        async def callback():
            started.set()
            await asyncio.sleep(0.05)
            finished.append(1)
            task.schedule_after(0)

        task = ScheduledTask("slow", callback)
        task.schedule_after(0)
        await started.wait()

        await task.cancel_and_join()

        assert finished == [1]
        assert not task.is_pending()

    async def test_callback_error_does_not_leak_into_drain(self):
        async def callback():
            raise RuntimeError("boom")

        task = ScheduledTask("broken", callback)
        task.schedule_after(0)
        await asyncio.sleep(0.01)
        await task.cancel_and_join()
