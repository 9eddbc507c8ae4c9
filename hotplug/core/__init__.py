"""Core components: configuration, events, interfaces and scheduling.

Usage:
    from hotplug.core import HotplugConfig, EventBus, ScheduledTask
"""

from hotplug.core.config import (
    SystemConfig,
    HotplugConfig,
    ProfileConfig,
    REFERENCE_SHIFT,
    default_profiles,
    load_config,
    load_profiles,
    validate_config,
)
from hotplug.core.events import (
    EventBus,
    Event,
    SystemResumed,
    SystemSuspended,
    UnitsScaled,
    GovernorStateChanged,
)
from hotplug.core.interfaces import (
    IPowerController,
    ILoadSource,
    IGovernor,
)
from hotplug.core.scheduler import ScheduledTask
from hotplug.core.events_listener import (
    SystemEventLogger,
    register_event_listeners
)

__all__ = [
    # Configuration
    "SystemConfig",
    "HotplugConfig",
    "ProfileConfig",
    "REFERENCE_SHIFT",
    "default_profiles",
    "load_config",
    "load_profiles",
    "validate_config",

    # Event System
    "EventBus",
    "Event",
    "SystemResumed",
    "SystemSuspended",
    "UnitsScaled",
    "GovernorStateChanged",

    # Interfaces
    "IPowerController",
    "ILoadSource",
    "IGovernor",

    # Scheduling
    "ScheduledTask",

    # Logging & Listeners
    "SystemEventLogger",
    "register_event_listeners",
]
