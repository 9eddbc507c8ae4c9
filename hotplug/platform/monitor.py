"""Host load monitoring."""

import logging
import psutil
from typing import List

from hotplug.core.config import REFERENCE_SHIFT
from hotplug.core.interfaces import ILoadSource

logger = logging.getLogger(__name__)


class ResourceMonitor(ILoadSource):
    """Reads host load through psutil.

    The system sample is the one-minute run-queue average in fixed point.
    Unit samples are per-CPU utilisation percentages, which line up with the
    0..100 range of ``global_threshold``.
    """

    def __init__(self, unit_count: int):
        self.unit_count = unit_count
        self._percpu: List[float] = []
        # Prime the per-CPU counters; the first call always returns zeros
        psutil.cpu_percent(percpu=True)

    def sample_system_load(self) -> int:
        """Get the running load average in fixed point."""
        try:
            load1, _, _ = psutil.getloadavg()
        except (AttributeError, OSError) as e:
            logger.error(f"Load average unavailable: {e}")
            return 0

        # Refresh per-CPU figures once per tick
        self._percpu = psutil.cpu_percent(percpu=True)
        return int(load1 * (1 << REFERENCE_SHIFT))

    def sample_unit_load(self, unit_id: int) -> int:
        """Get CPU utilisation of one unit in percent."""
        if not self._percpu:
            self._percpu = psutil.cpu_percent(percpu=True)
        if unit_id >= len(self._percpu):
            return 0
        return int(self._percpu[unit_id])

    def get_system_summary(self) -> str:
        """Get human-readable system summary."""
        load1, load5, load15 = psutil.getloadavg()
        mem = psutil.virtual_memory()
        percpu = ", ".join(f"{p:.0f}%" for p in self._percpu) or "n/a"

        return f"""
System Resources:
- Load: {load1:.2f} {load5:.2f} {load15:.2f}
- CPU: {percpu}
- RAM: {mem.percent:.0f}% ({mem.used / (1024**3):.1f}GB / {mem.total / (1024**3):.1f}GB)
"""
