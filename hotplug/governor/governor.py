"""Hotplug governor: sampling loop, resume override and lifecycle."""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from hotplug.core.config import HotplugConfig
from hotplug.core.events import (
    EventBus,
    GovernorStateChanged,
    SystemResumed,
    SystemSuspended,
    UnitsScaled,
)
from hotplug.core.interfaces import IGovernor, ILoadSource, IPowerController
from hotplug.core.scheduler import ScheduledTask
from hotplug.governor.controller import ReconcileResult, UnitController
from hotplug.governor.decision import compute_target
from hotplug.governor.profiles import ProfileStore
from hotplug.governor.state import CoreStateTable
from hotplug.utils.validation import ResourceAllocationError

logger = logging.getLogger(__name__)


class HotplugGovernor(IGovernor):
    """Keeps the number of online units in line with system load."""

    def __init__(
        self,
        config: HotplugConfig,
        profiles: ProfileStore,
        power: IPowerController,
        load_source: ILoadSource,
        event_bus: EventBus,
        clock: Optional[Callable[[], float]] = None,
        task_factory: Callable[..., ScheduledTask] = ScheduledTask
    ):
        self.config = config
        self.profiles = profiles
        self.power = power
        self.load_source = load_source
        self.event_bus = event_bus
        self.states = CoreStateTable(config.platform_max_units)
        self.controller = UnitController(power, load_source, self.states, clock)

        self._task_factory = task_factory
        self._task: Optional[ScheduledTask] = None
        self._active = False
        self._lifecycle_lock = asyncio.Lock()
        self._pass_lock = asyncio.Lock()

        self._last_target: Optional[int] = None
        self._last_load: Optional[int] = None
        self._tick_count = 0

        logger.info(
            f"Hotplug governor initialized (units={config.platform_max_units}, "
            f"online={config.min_online}..{config.max_online}, "
            f"profile={profiles.current.name})"
        )

    def is_active(self) -> bool:
        return self._active

    # Lifecycle

    async def start(self):
        """Start the control loop.

        Brings every unit online, then lets the loop scale down once the
        startup delay has passed.
        """
        async with self._lifecycle_lock:
            if self._active:
                return
            await self._start_locked()

    async def stop(self):
        """Stop the control loop and wait for any pass in progress."""
        async with self._lifecycle_lock:
            if not self._active:
                return
            await self._stop_locked()

    async def set_active(self, active: bool) -> bool:
        """Toggle the control loop; a failed start leaves it inactive."""
        async with self._lifecycle_lock:
            if active == self._active:
                return self._active
            if active:
                try:
                    await self._start_locked()
                except ResourceAllocationError as e:
                    logger.error(f"Governor activation failed: {e}")
            else:
                await self._stop_locked()
            return self._active

    async def _start_locked(self):
        try:
            task = self._task_factory("hotplug-sampler", self._tick)
        except Exception as e:
            self._active = False
            raise ResourceAllocationError(f"Failed to allocate sampler task: {e}") from e

        try:
            self.event_bus.subscribe(SystemResumed, self._on_resume)
            self.event_bus.subscribe(SystemSuspended, self._on_suspend)
        except Exception as e:
            self._unsubscribe()
            await task.cancel_and_join()
            self._active = False
            raise ResourceAllocationError(f"Failed to register power-state listener: {e}") from e

        self._task = task
        self._active = True

        powered = await self.controller.bring_all_online()
        if powered:
            logger.info(f"Cold start: powered up units {powered}")

        task.schedule_after(self.config.startup_delay_ms / 1000.0)
        logger.info(f"Hotplug governor started (first sample in {self.config.startup_delay_ms}ms)")
        await self.event_bus.publish(GovernorStateChanged(active=True, reason="start"))

    async def _stop_locked(self):
        self._active = False

        task, self._task = self._task, None
        if task is not None:
            await task.cancel_and_join()

        # Wait out a pass started outside the scheduler
        async with self._pass_lock:
            pass

        self._unsubscribe()
        logger.info("Hotplug governor stopped")
        await self.event_bus.publish(GovernorStateChanged(active=False, reason="stop"))

    def _unsubscribe(self):
        self.event_bus.unsubscribe(SystemResumed, self._on_resume)
        self.event_bus.unsubscribe(SystemSuspended, self._on_suspend)

    # Sampling loop

    async def _tick(self):
        """One sampling tick: decide, reconcile, reschedule."""
        if not self._active:
            return

        try:
            await self.run_pass()
        except Exception as e:
            logger.error(f"Sampling pass failed: {e}", exc_info=True)

        task = self._task
        if self._active and task is not None:
            task.schedule_after(self.config.sampling_interval_ms / 1000.0)

    async def run_pass(self) -> ReconcileResult:
        """Run a single refresh/decide/reconcile pass.

        Passes never overlap; a concurrent caller waits for the running one.
        """
        async with self._pass_lock:
            config = self.config.snapshot()
            self._tick_count += 1

            if config.core_map is not None:
                result = await self.controller.apply_core_map(config.core_map, config)
                reason = "core_map"
            else:
                load = self.load_source.sample_system_load()
                profile = self.profiles.current
                target = compute_target(load, config, profile)
                self._last_load = load
                self._last_target = target
                logger.debug(f"Load {load} -> target {target} (profile={profile.name})")
                result = await self.controller.reconcile(target, config)
                reason = "load"

        if result.changed:
            await self._publish_scaled(result, reason)
        return result

    # Power-state listener

    async def _on_resume(self, event: SystemResumed):
        if not self._active:
            return

        powered = await self.controller.bring_all_online()
        logger.info(f"Resume override: powered up units {powered}")
        if powered:
            online = len(self.power.online_units())
            await self._publish_scaled(ReconcileResult(
                target=self.config.platform_max_units,
                online_before=online - len(powered),
                online_after=online,
                powered_up=powered
            ), "resume")

    async def _on_suspend(self, event: SystemSuspended):
        if not self._active:
            return
        logger.debug("Suspend event received; keeping current units")

    async def _publish_scaled(self, result: ReconcileResult, reason: str):
        await self.event_bus.publish(UnitsScaled(
            target=result.target,
            online_before=result.online_before,
            online_after=result.online_after,
            powered_up=list(result.powered_up),
            powered_down=list(result.powered_down),
            reason=reason
        ))

    def status(self) -> Dict[str, Any]:
        """Get governor status for health reporting."""
        return {
            "active": self._active,
            "online_units": sorted(self.power.online_units()),
            "last_load": self._last_load,
            "last_target": self._last_target,
            "profile": self.profiles.current.name,
            "profile_index": self.profiles.index,
            "ticks": self._tick_count,
            "static_map": self.config.core_map is not None,
        }
