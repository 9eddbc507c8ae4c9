"""Integration tests for the hotplug governor."""

import asyncio
import pytest
from hotplug.core.events import SystemResumed, SystemSuspended
from hotplug.control import build_registry
from hotplug.governor import HotplugGovernor
from hotplug.utils.validation import ResourceAllocationError
from tests.fixtures.mock_services import (
    FailingEventBus,
    MockPowerController,
    failing_task_factory,
)


@pytest.mark.asyncio
class TestLifecycle:
    """Test start, stop and activation."""

    async def test_start_brings_all_units_online(self, governor, power):
        power.online = {0, 1, 2, 3}

        await governor.start()

        assert governor.is_active()
        assert power.online == set(range(8))
        assert governor._task.is_pending()

    async def test_start_when_active_is_noop(self, governor, power):
        await governor.start()
        task = governor._task
        power.online = {0, 1, 2, 3}

        await governor.start()

        assert governor._task is task
        assert power.online == {0, 1, 2, 3}

    async def test_stop_when_inactive_is_noop(self, governor):
        await governor.stop()
        assert not governor.is_active()

    async def test_stop_releases_resources(self, governor, event_bus):
        await governor.start()
        task = governor._task

        await governor.stop()

        assert not governor.is_active()
        assert governor._task is None
        assert task.closed
        assert not event_bus.has_subscribers(SystemResumed)
        assert not event_bus.has_subscribers(SystemSuspended)

    async def test_task_allocation_failure(self, hotplug_config, profiles, power, load_source, event_bus):
        governor = HotplugGovernor(
            hotplug_config, profiles, power, load_source, event_bus,
            task_factory=failing_task_factory
        )
        power.online = {0, 1, 2, 3}

        with pytest.raises(ResourceAllocationError):
            await governor.start()

        assert not governor.is_active()
        assert power.online == {0, 1, 2, 3}
        assert not event_bus.has_subscribers(SystemResumed)

    async def test_listener_registration_failure(self, hotplug_config, profiles, power, load_source):
        governor = HotplugGovernor(hotplug_config, profiles, power, load_source, FailingEventBus())

        with pytest.raises(ResourceAllocationError):
            await governor.start()

        assert not governor.is_active()
        assert governor._task is None
        assert power.calls == []

    async def test_set_active_reports_failed_start(self, hotplug_config, profiles, power, load_source):
        governor = HotplugGovernor(hotplug_config, profiles, power, load_source, FailingEventBus())

        assert await governor.set_active(True) is False
        assert not governor.is_active()

    async def test_set_active_toggles(self, governor):
        assert await governor.set_active(True) is True
        assert await governor.set_active(True) is True
        assert await governor.set_active(False) is False
        assert not governor.is_active()


@pytest.mark.asyncio
class TestSamplingLoop:
    """Test the periodic control loop."""

    async def test_loop_scales_down_to_idle_target(self, governor, hotplug_config, power, load_source):
        hotplug_config.startup_delay_ms = 0
        hotplug_config.min_up_time_ms = 0
        load_source.set_tasks(0.1)

        await governor.start()
        await asyncio.sleep(0.1)

        assert power.online == {0, 1, 2, 3}
        assert governor.status()["last_target"] == 4
        assert governor.status()["ticks"] > 1

    async def test_loop_follows_load(self, governor, hotplug_config, power, load_source):
        hotplug_config.startup_delay_ms = 0
        hotplug_config.min_up_time_ms = 0
        load_source.set_tasks(0.1)

        await governor.start()
        await asyncio.sleep(0.1)

        # 2.5 tasks: above 35/16, below 53/16
        load_source.set_tasks(2.5)
        await asyncio.sleep(0.1)

        assert power.online == {0, 1, 2, 3, 4, 5}

    async def test_hysteresis_holds_after_cold_start(self, governor, hotplug_config, power, load_source):
        hotplug_config.startup_delay_ms = 0
        power.online = {0, 1, 2, 3}

        await governor.start()
        await asyncio.sleep(0.05)

        # Manual clock never advances: freshly powered units stay up
        assert power.online == set(range(8))

    async def test_no_pass_after_stop(self, governor, hotplug_config, power):
        hotplug_config.startup_delay_ms = 0
        hotplug_config.min_up_time_ms = 0
        power.delay = 0.01

        await governor.start()
        await asyncio.sleep(0.03)
        await governor.stop()

        ticks = governor.status()["ticks"]
        calls = len(power.calls)
        await asyncio.sleep(0.05)

        assert governor.status()["ticks"] == ticks
        assert len(power.calls) == calls

    async def test_pass_error_keeps_loop_alive(self, governor, hotplug_config, load_source):
        hotplug_config.startup_delay_ms = 0
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise OSError("loadavg unavailable")
            return 0

        load_source.sample_system_load = flaky

        await governor.start()
        await asyncio.sleep(0.1)

        assert len(calls) > 1
        assert governor.is_active()

    async def test_core_map_replaces_decision(self, governor, hotplug_config, power):
        hotplug_config.core_map = [1, 1, 1, 1, 1, 0, 1, 0]

        result = await governor.run_pass()

        assert result.powered_down == [5, 7]
        assert power.online == {0, 1, 2, 3, 4, 6}
        assert governor.status()["static_map"] is True

    async def test_profile_switch_applies_next_pass(self, governor, hotplug_config, power, load_source, clock):
        load_source.set_tasks(10)
        power.online = {0, 1, 2, 3}
        await governor.run_pass()
        assert len(power.online) == 8

        governor.profiles.set_profile(1)
        clock.advance(hotplug_config.min_up_time_ms)
        result = await governor.run_pass()

        assert result.target == 4
        assert power.online == {0, 1, 2, 3}

    async def test_pass_uses_config_snapshot(self, governor, hotplug_config, power, clock):
        registry = build_registry(governor)
        power.delay = 0.01

        pass_task = asyncio.create_task(governor.run_pass())
        await asyncio.sleep(0.005)
        await registry.write("global_threshold", "0")
        await registry.write("min_online", "6")
        hotplug_config.min_up_time_ms = 10**9
        result = await pass_task

        # Old values: target 4, every non-reserved unit below 200 // 8
        assert result.target == 4
        assert result.powered_down == [4, 5, 6, 7]

        result = await governor.run_pass()
        assert result.target == 6
        assert result.powered_up == [4, 5]

        hotplug_config.min_up_time_ms = 2000
        await registry.write("min_online", "4")
        clock.advance(2000)
        result = await governor.run_pass()

        # Dynamic threshold is now 0; nothing qualifies
        assert result.target == 4
        assert not result.changed
        assert power.online == set(range(6))

    async def test_one_refresh_per_pass(self, governor, hotplug_config, load_source):
        await governor.run_pass()
        assert load_source.unit_samples == 8

        hotplug_config.core_map = [1] * 8
        await governor.run_pass()
        assert load_source.unit_samples == 8 + 4


@pytest.mark.asyncio
class TestPowerStateListener:
    """Test resume and suspend handling."""

    async def test_resume_brings_all_online(self, governor, hotplug_config, power, event_bus):
        await governor.start()
        power.online = {0, 1, 2, 3}
        before = hotplug_config.snapshot()

        await event_bus.dispatch(SystemResumed(source="test"))

        assert power.online == set(range(8))
        assert hotplug_config == before
        assert governor.states[5].last_power_up_ms > 0

    async def test_suspend_changes_nothing(self, governor, power, event_bus):
        await governor.start()
        power.online = {0, 1, 2, 3}
        calls = len(power.calls)

        await event_bus.dispatch(SystemSuspended(source="test"))

        assert power.online == {0, 1, 2, 3}
        assert len(power.calls) == calls

    async def test_resume_ignored_while_inactive(self, governor, power, event_bus):
        await governor.start()
        await governor.stop()
        power.online = {0, 1, 2, 3}

        await event_bus.dispatch(SystemResumed())
        await governor._on_resume(SystemResumed())

        assert power.online == {0, 1, 2, 3}

    async def test_resume_during_pass(self, governor, hotplug_config, power, event_bus):
        hotplug_config.min_up_time_ms = 0
        power.delay = 0.01
        await governor.start()

        pass_task = asyncio.create_task(governor.run_pass())
        await asyncio.sleep(0.015)
        await event_bus.dispatch(SystemResumed())
        await pass_task

        # The pass may take units down again; the next resume restores them
        await event_bus.dispatch(SystemResumed())
        assert power.online == set(range(8))
