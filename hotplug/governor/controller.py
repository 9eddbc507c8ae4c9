"""Unit controller: converges the set of online units to a target count."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from hotplug.core.config import HotplugConfig
from hotplug.core.interfaces import ILoadSource, IPowerController
from hotplug.governor.state import CoreStateTable

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class ReconcileResult:
    """Outcome of one reconcile pass."""
    target: int
    online_before: int
    online_after: int
    powered_up: List[int] = field(default_factory=list)
    powered_down: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.powered_up or self.powered_down)


class UnitController:
    """Issues power commands to move the online count towards a target.

    Units ``[0, reserved_unit_count)`` are never powered down. Candidates
    are visited lowest id first in both directions.
    """

    def __init__(
        self,
        power: IPowerController,
        load_source: ILoadSource,
        states: CoreStateTable,
        clock: Optional[Callable[[], float]] = None
    ):
        self.power = power
        self.load_source = load_source
        self.states = states
        self.clock = clock or monotonic_ms

    @property
    def unit_count(self) -> int:
        return len(self.states)

    def refresh(self):
        """Refresh the state table from the current online set."""
        self.states.refresh(self.load_source, self.power.online_units())

    async def reconcile(self, target: int, config: HotplugConfig) -> ReconcileResult:
        """Power units up or down until ``target`` units are online."""
        self.refresh()
        online = self.power.online_units()
        result = ReconcileResult(
            target=target,
            online_before=len(online),
            online_after=len(online)
        )

        if target == len(online):
            return result

        if target < len(online):
            await self._scale_down(target, online, config, result)
        else:
            await self._scale_up(target, online, config, result)

        logger.debug(
            f"Reconciled to target {target}: {result.online_before} -> {result.online_after} "
            f"(up={result.powered_up}, down={result.powered_down})"
        )
        return result

    async def _scale_down(self, target, online, config, result):
        now = self.clock()
        dyn_threshold = (config.global_threshold * 2) // len(online)
        count = len(online)

        for unit_id in sorted(online):
            if unit_id < config.reserved_unit_count:
                continue
            if self.states.within_min_up_time(unit_id, now, config.min_up_time_ms):
                continue

            if self.states[unit_id].load_sample < dyn_threshold:
                if await self._power_down(unit_id):
                    result.powered_down.append(unit_id)
                    count -= 1

            if count <= target:
                break

        result.online_after = count

    async def _scale_up(self, target, online, config, result):
        count = len(online)

        for unit_id in range(self.unit_count):
            if count >= target:
                break
            if unit_id in online or unit_id < config.reserved_unit_count:
                continue

            if await self._power_up(unit_id):
                result.powered_up.append(unit_id)
                count += 1

        result.online_after = count

    async def bring_all_online(self) -> List[int]:
        """Power up every offline unit, ignoring policy."""
        online = self.power.online_units()
        powered = []
        for unit_id in range(self.unit_count):
            if unit_id in online:
                continue
            if await self._power_up(unit_id):
                powered.append(unit_id)
        return powered

    async def apply_core_map(self, core_map: Sequence[int], config: HotplugConfig) -> ReconcileResult:
        """Force units on or off according to a fixed per-unit map."""
        self.refresh()
        online = self.power.online_units()
        wanted = sum(1 for unit_id in range(self.unit_count)
                     if unit_id < config.reserved_unit_count
                     or (unit_id < len(core_map) and core_map[unit_id]))
        result = ReconcileResult(
            target=wanted,
            online_before=len(online),
            online_after=len(online)
        )

        for unit_id in range(self.unit_count):
            keep = unit_id < len(core_map) and bool(core_map[unit_id])
            if unit_id in online:
                if keep or unit_id < config.reserved_unit_count:
                    continue
                if await self._power_down(unit_id):
                    result.powered_down.append(unit_id)
            elif keep:
                if await self._power_up(unit_id):
                    result.powered_up.append(unit_id)

        result.online_after = (
            result.online_before + len(result.powered_up) - len(result.powered_down)
        )
        return result

    async def _power_up(self, unit_id: int) -> bool:
        try:
            await self.power.power_up(unit_id)
        except Exception as e:
            logger.warning(f"Power-up of unit {unit_id} failed: {e}")
            return False
        self.states.mark_powered_up(unit_id, self.clock())
        return True

    async def _power_down(self, unit_id: int) -> bool:
        try:
            await self.power.power_down(unit_id)
        except Exception as e:
            logger.warning(f"Power-down of unit {unit_id} failed: {e}")
            return False
        self.states[unit_id].last_power_up_ms = 0.0
        return True
