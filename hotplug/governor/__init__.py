"""Hotplug governor.

Components, leaves first:
- Profile store: named threshold tables
- Core state table: per-unit load and power-up time
- Decision engine: load sample -> target online count
- Unit controller: issues power commands towards the target
- Governor: sampling loop, resume override and lifecycle

Usage:
    from hotplug.governor import HotplugGovernor, ProfileStore

    governor = HotplugGovernor(config, profiles, power, load_source, event_bus)
    await governor.start()
"""

from hotplug.governor.profiles import Profile, ProfileStore
from hotplug.governor.state import CoreState, CoreStateTable
from hotplug.governor.decision import compute_target, scale_threshold
from hotplug.governor.controller import ReconcileResult, UnitController
from hotplug.governor.governor import HotplugGovernor

__all__ = [
    "Profile",
    "ProfileStore",
    "CoreState",
    "CoreStateTable",
    "compute_target",
    "scale_threshold",
    "ReconcileResult",
    "UnitController",
    "HotplugGovernor",
]
