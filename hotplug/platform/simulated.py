"""In-memory platform used for dry runs and tests."""

import logging
from typing import Dict, Iterable, List, Optional, Set

from hotplug.core.config import REFERENCE_SHIFT
from hotplug.core.interfaces import ILoadSource, IPowerController

logger = logging.getLogger(__name__)


class SimulatedPowerController(IPowerController):
    """Tracks unit power state without touching hardware."""

    def __init__(self, unit_count: int, online: Optional[Iterable[int]] = None):
        self.unit_count = unit_count
        self._online: Set[int] = set(range(unit_count) if online is None else online)
        self.history: List[tuple] = []

    def _check(self, unit_id: int):
        if not 0 <= unit_id < self.unit_count:
            raise ValueError(f"Unknown unit {unit_id}")

    async def power_up(self, unit_id: int) -> None:
        self._check(unit_id)
        if unit_id not in self._online:
            self._online.add(unit_id)
            self.history.append(("up", unit_id))
            logger.debug(f"Unit {unit_id} online")

    async def power_down(self, unit_id: int) -> None:
        self._check(unit_id)
        if unit_id in self._online:
            self._online.discard(unit_id)
            self.history.append(("down", unit_id))
            logger.debug(f"Unit {unit_id} offline")

    def online_units(self) -> Set[int]:
        return set(self._online)


class SimulatedLoadSource(ILoadSource):
    """Load values set by the caller.

    ``system_load`` is given in runnable tasks and converted to fixed point.
    """

    def __init__(self, system_load: float = 0.0, unit_loads: Optional[Dict[int, int]] = None):
        self.system_load = system_load
        self.unit_loads: Dict[int, int] = dict(unit_loads or {})

    def set_system_load(self, tasks: float):
        self.system_load = tasks

    def sample_system_load(self) -> int:
        return int(self.system_load * (1 << REFERENCE_SHIFT))

    def sample_unit_load(self, unit_id: int) -> int:
        return self.unit_loads.get(unit_id, 0)
