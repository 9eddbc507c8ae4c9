"""Decision engine: maps a load sample to a target online-unit count."""

import math

from hotplug.core.config import HotplugConfig, REFERENCE_SHIFT
from hotplug.governor.profiles import Profile


def scale_threshold(threshold: float, load_scale_shift: int) -> float:
    """Convert a profile threshold into the load sample's fixed-point scale."""
    if math.isinf(threshold):
        return threshold

    shift = REFERENCE_SHIFT - load_scale_shift
    value = int(threshold)
    if shift >= 0:
        return value << shift
    return value >> -shift


def compute_target(load_sample: int, config: HotplugConfig, profile: Profile) -> int:
    """Smallest online count whose threshold covers the load.

    Walks ``n`` from ``min_online`` to ``max_online`` comparing the sample
    against ``profile.threshold(n - min_online)`` and stops at the first
    threshold the sample does not exceed. The +infinity sentinel past the
    finite entries always matches. The result is always within
    ``[min_online, max_online]``.
    """
    min_online = config.min_online
    max_online = max(config.max_online, min_online)

    if profile.pins_minimum:
        return min_online

    for n in range(min_online, max_online):
        scaled = scale_threshold(profile.threshold(n - min_online), config.load_scale_shift)
        if load_sample <= scaled:
            return n

    return max_online
