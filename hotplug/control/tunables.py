"""Runtime control surface: validated key/value tunables."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from hotplug import __version__
from hotplug.governor.governor import HotplugGovernor
from hotplug.utils.validation import (
    ValidationError,
    parse_signed,
    parse_unsigned,
    validate_range,
)

logger = logging.getLogger(__name__)

# Upper bound shared by the plain integer tunables
GENERIC_LIMIT = 100

MIN_SAMPLING_MS = 1
MAX_SAMPLING_MS = 10000


class UnknownTunableError(KeyError):
    """No tunable is registered under the requested key."""
    pass


@dataclass
class Tunable:
    """One registry entry."""
    name: str
    getter: Callable[[], Any]
    parser: Callable[[str], int] = parse_unsigned
    validator: Optional[Callable[[int], int]] = None
    setter: Optional[Callable[[int], Awaitable[None]]] = None
    description: str = ""

    @property
    def writable(self) -> bool:
        return self.setter is not None


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return str(value)


class TunableRegistry:
    """Key/value access to governor settings.

    Writes are parsed and validated before anything is changed, so a
    rejected write leaves every value untouched.
    """

    def __init__(self):
        self._entries: Dict[str, Tunable] = {}

    def register(self, tunable: Tunable):
        if tunable.name in self._entries:
            raise ValueError(f"Tunable {tunable.name} already registered")
        self._entries[tunable.name] = tunable

    def keys(self) -> List[str]:
        return list(self._entries)

    def _entry(self, key: str) -> Tunable:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownTunableError(key) from None

    def read(self, key: str) -> str:
        """Read a tunable as text."""
        return _format(self._entry(key).getter())

    async def write(self, key: str, raw: str):
        """Parse, validate and apply a textual value."""
        entry = self._entry(key)
        if not entry.writable:
            raise ValidationError(f"Tunable {key} is read-only")

        value = entry.parser(raw)
        if entry.validator is not None:
            value = entry.validator(value)

        await entry.setter(value)
        logger.info(f"Tunable {key} set to {value}")

    def dump(self) -> Dict[str, str]:
        """Read every tunable."""
        return {key: self.read(key) for key in self._entries}


def _bounded(low: int, high: Optional[int]) -> Callable[[int], int]:
    def check(value: int) -> int:
        return validate_range(value, low, high)
    return check


def build_registry(governor: HotplugGovernor) -> TunableRegistry:
    """Create the registry exposing a governor's settings."""
    config = governor.config
    registry = TunableRegistry()

    async def set_active(value: int):
        await governor.set_active(value > 0)

    async def set_min_online(value: int):
        if config.max_online < value:
            config.max_online = value
        config.min_online = value

    async def set_max_online(value: int):
        if config.min_online > value:
            config.min_online = value
        config.max_online = value

    def check_profile(value: int) -> int:
        validate_range(value, 0, GENERIC_LIMIT)
        return validate_range(value, 0, len(governor.profiles) - 1)

    async def set_profile(value: int):
        governor.profiles.set_profile(value)
        config.profile_index = value

    def setter(attr: str) -> Callable[[int], Awaitable[None]]:
        async def apply(value: int):
            setattr(config, attr, value)
        return apply

    units = _bounded(1, config.platform_max_units)
    generic = _bounded(0, GENERIC_LIMIT)

    registry.register(Tunable(
        "active", governor.is_active, parser=parse_signed, setter=set_active,
        description="1 runs the control loop, 0 stops it"
    ))
    registry.register(Tunable(
        "min_online", lambda: config.min_online, validator=units,
        setter=set_min_online, description="lower bound of online units"
    ))
    registry.register(Tunable(
        "max_online", lambda: config.max_online, validator=units,
        setter=set_max_online, description="upper bound of online units"
    ))
    registry.register(Tunable(
        "profile_index", lambda: governor.profiles.index, validator=check_profile,
        setter=set_profile, description="selected threshold profile"
    ))
    registry.register(Tunable(
        "global_threshold", lambda: config.global_threshold, validator=generic,
        setter=setter("global_threshold"), description="base power-down threshold"
    ))
    registry.register(Tunable(
        "sampling_interval_ms", lambda: config.sampling_interval_ms,
        validator=_bounded(MIN_SAMPLING_MS, MAX_SAMPLING_MS),
        setter=setter("sampling_interval_ms"), description="delay between ticks"
    ))
    registry.register(Tunable(
        "load_scale_shift", lambda: config.load_scale_shift, validator=generic,
        setter=setter("load_scale_shift"), description="fractional bits of profile thresholds"
    ))
    registry.register(Tunable(
        "online_units", lambda: sorted(governor.power.online_units()),
        description="ids of online units"
    ))
    registry.register(Tunable(
        "version", lambda: __version__, description="governor version"
    ))

    return registry
