"""Per-unit bookkeeping."""

import logging
from dataclasses import dataclass
from typing import List, Set

from hotplug.core.interfaces import ILoadSource

logger = logging.getLogger(__name__)


@dataclass
class CoreState:
    """Last known load and power-up time of one unit."""
    load_sample: int = 0
    last_power_up_ms: float = 0.0


class CoreStateTable:
    """Fixed-size table of CoreState indexed by unit id."""

    def __init__(self, unit_count: int):
        self._states: List[CoreState] = [CoreState() for _ in range(unit_count)]

    def __len__(self) -> int:
        return len(self._states)

    def __getitem__(self, unit_id: int) -> CoreState:
        return self._states[unit_id]

    def refresh(self, load_source: ILoadSource, online: Set[int]):
        """Sample online units and clear the power-up stamp of offline ones."""
        for unit_id, state in enumerate(self._states):
            if unit_id in online:
                try:
                    state.load_sample = load_source.sample_unit_load(unit_id)
                except Exception as e:
                    # Keep the previous sample; the next tick samples again
                    logger.warning(f"Load sample failed for unit {unit_id}: {e}")
            else:
                state.last_power_up_ms = 0.0

    def mark_powered_up(self, unit_id: int, now_ms: float):
        self._states[unit_id].last_power_up_ms = now_ms

    def within_min_up_time(self, unit_id: int, now_ms: float, min_up_time_ms: int) -> bool:
        """Check whether a unit is still inside its hysteresis window."""
        return (now_ms - self._states[unit_id].last_power_up_ms) < min_up_time_ms
