"""Reference platform collaborators.

- SimulatedPowerController / SimulatedLoadSource: in-memory, for dry runs
- ResourceMonitor: host load through psutil
- install_power_state_signals: SIGUSR1/SIGUSR2 as resume/suspend events
"""

from hotplug.platform.simulated import SimulatedPowerController, SimulatedLoadSource
from hotplug.platform.monitor import ResourceMonitor
from hotplug.platform.signals import install_power_state_signals, remove_power_state_signals

__all__ = [
    "SimulatedPowerController",
    "SimulatedLoadSource",
    "ResourceMonitor",
    "install_power_state_signals",
    "remove_power_state_signals",
]
