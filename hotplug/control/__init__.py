"""Runtime control surface for governor tunables."""

from hotplug.control.tunables import (
    Tunable,
    TunableRegistry,
    UnknownTunableError,
    build_registry,
)

__all__ = [
    "Tunable",
    "TunableRegistry",
    "UnknownTunableError",
    "build_registry",
]
