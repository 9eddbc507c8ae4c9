"""
Adaptive hotplug governor.

Keeps the number of online processing units in line with system load:
a periodic sampling loop maps the running load onto a threshold profile,
then powers units up or down while respecting a reserved always-on set,
min/max bounds and a minimum up time per unit.

Usage:
    from hotplug import load_config, EventBus, HotplugGovernor, ProfileStore

    config = load_config()
    governor = HotplugGovernor(
        config.hotplug,
        ProfileStore.from_config(config.profiles, config.hotplug.profile_index),
        power_controller,
        load_source,
        event_bus
    )
    await governor.start()
"""

__version__ = "7.1.0"
__license__ = "MIT"

# Core exports
from hotplug.core import (
    SystemConfig,
    HotplugConfig,
    load_config,
    validate_config,
    EventBus,
)

# Governor exports
from hotplug.governor import (
    HotplugGovernor,
    ProfileStore,
    UnitController,
    compute_target,
)
from hotplug.control import TunableRegistry, build_registry

# Utility exports
from hotplug.utils import setup_logging

__all__ = [
    # Version info
    "__version__",
    "__license__",

    # Core
    "SystemConfig",
    "HotplugConfig",
    "load_config",
    "validate_config",
    "EventBus",

    # Governor
    "HotplugGovernor",
    "ProfileStore",
    "UnitController",
    "compute_target",

    # Control surface
    "TunableRegistry",
    "build_registry",

    # Utilities
    "setup_logging",
]


def get_version() -> str:
    """Get the current governor version."""
    return __version__
