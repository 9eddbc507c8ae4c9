"""Configuration models and loading."""

from dataclasses import dataclass, field, replace
from typing import List, Optional
from pathlib import Path
import yaml
import os
from dotenv import load_dotenv

from hotplug.utils.validation import validate_core_map


# Fixed-point shift of raw load samples (1.0 runnable task == 1 << 11)
REFERENCE_SHIFT = 11

DEFAULT_PROFILES_PATH = "config/profiles.yaml"


@dataclass
class ProfileConfig:
    """A named threshold table."""
    name: str = "balanced"
    thresholds: List[float] = field(default_factory=list)


def default_profiles() -> List[ProfileConfig]:
    """Built-in profiles used when no YAML file is present."""
    return [
        ProfileConfig(name="balanced", thresholds=[12, 35, 53, 71, float("inf")]),
        ProfileConfig(name="disabled", thresholds=[0] * 8 + [float("inf")]),
    ]


@dataclass
class HotplugConfig:
    """Governor tunables.

    Mutable at runtime through the tunables registry; the governor takes a
    snapshot at the start of every sampling pass.
    """
    enabled: bool = True
    platform_max_units: int = 8
    min_online: int = 4
    max_online: int = 8
    min_up_time_ms: int = 2000
    sampling_interval_ms: int = 300
    startup_delay_ms: int = 10000
    load_scale_shift: int = 4
    global_threshold: int = 100
    reserved_unit_count: int = 4
    profile_index: int = 0

    # Static variant: per-unit on/off map applied instead of the decision engine
    core_map: Optional[List[int]] = None

    def snapshot(self) -> "HotplugConfig":
        """Return a detached copy for use during one pass."""
        core_map = list(self.core_map) if self.core_map is not None else None
        return replace(self, core_map=core_map)


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: str = "data/logs"
    simulate_load: bool = False

    hotplug: HotplugConfig = field(default_factory=HotplugConfig)
    profiles: List[ProfileConfig] = field(default_factory=default_profiles)


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def load_profiles(path: Path) -> List[ProfileConfig]:
    """Load profile tables from a YAML file.

    Expected layout::

        profiles:
          - name: balanced
            thresholds: [12, 35, 53, 71, .inf]
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    profiles = []
    for entry in data.get("profiles", []):
        profiles.append(ProfileConfig(
            name=str(entry["name"]),
            thresholds=[float(t) for t in entry.get("thresholds", [])]
        ))
    return profiles


def load_config(profiles_path: str = DEFAULT_PROFILES_PATH) -> SystemConfig:
    """Load configuration from environment and files."""
    load_dotenv()

    config = SystemConfig()

    config.debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"
    config.log_level = os.getenv("LOG_LEVEL", "INFO")
    config.log_dir = os.getenv("LOG_DIR", config.log_dir)
    config.simulate_load = os.getenv("SIMULATE_LOAD", "false").lower() == "true"

    hp = config.hotplug
    hp.enabled = os.getenv("HOTPLUG_ENABLED", "true").lower() == "true"
    hp.platform_max_units = _env_int("HOTPLUG_PLATFORM_MAX_UNITS", hp.platform_max_units)
    hp.min_online = _env_int("HOTPLUG_MIN_ONLINE", hp.min_online)
    hp.max_online = _env_int("HOTPLUG_MAX_ONLINE", hp.max_online)
    hp.min_up_time_ms = _env_int("HOTPLUG_MIN_UP_TIME_MS", hp.min_up_time_ms)
    hp.sampling_interval_ms = _env_int("HOTPLUG_SAMPLING_MS", hp.sampling_interval_ms)
    hp.startup_delay_ms = _env_int("HOTPLUG_STARTUP_DELAY_MS", hp.startup_delay_ms)
    hp.load_scale_shift = _env_int("HOTPLUG_LOAD_SCALE_SHIFT", hp.load_scale_shift)
    hp.global_threshold = _env_int("HOTPLUG_GLOBAL_THRESHOLD", hp.global_threshold)
    hp.reserved_unit_count = _env_int("HOTPLUG_RESERVED_UNITS", hp.reserved_unit_count)
    hp.profile_index = _env_int("HOTPLUG_PROFILE", hp.profile_index)

    core_map = os.getenv("HOTPLUG_CORE_MAP")
    if core_map:
        hp.core_map = [int(x) for x in core_map.split(",") if x.strip()]

    path = Path(os.getenv("HOTPLUG_PROFILES_PATH", profiles_path))
    if path.exists():
        profiles = load_profiles(path)
        if profiles:
            config.profiles = profiles

    return config


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = []
    hp = config.hotplug

    if hp.platform_max_units < 1:
        errors.append("platform_max_units must be at least 1")

    if not 1 <= hp.min_online <= hp.platform_max_units:
        errors.append(f"min_online must be between 1 and {hp.platform_max_units}")

    if not 1 <= hp.max_online <= hp.platform_max_units:
        errors.append(f"max_online must be between 1 and {hp.platform_max_units}")

    if hp.min_online > hp.max_online:
        errors.append(
            f"min_online ({hp.min_online}) must not exceed max_online ({hp.max_online})"
        )

    # reserved units stay online even when min_online is lower
    if not 0 <= hp.reserved_unit_count <= hp.platform_max_units:
        errors.append(f"reserved_unit_count must be between 0 and {hp.platform_max_units}")

    if hp.sampling_interval_ms < 1:
        errors.append("sampling_interval_ms must be positive")

    if hp.startup_delay_ms < 0 or hp.min_up_time_ms < 0:
        errors.append("startup_delay_ms and min_up_time_ms must not be negative")

    if not 0 <= hp.global_threshold <= 100:
        errors.append("global_threshold must be between 0 and 100")

    if not 0 <= hp.load_scale_shift <= 100:
        errors.append("load_scale_shift must be between 0 and 100")

    if not config.profiles:
        errors.append("At least one profile must be configured")
    elif not 0 <= hp.profile_index < len(config.profiles):
        errors.append(
            f"profile_index ({hp.profile_index}) does not name a configured profile"
        )

    for profile in config.profiles:
        if not profile.thresholds:
            errors.append(f"Profile '{profile.name}' has no thresholds")
        elif any(t < 0 for t in profile.thresholds):
            errors.append(f"Profile '{profile.name}' has negative thresholds")

    if not validate_core_map(hp.core_map, hp.platform_max_units):
        errors.append("core_map must hold one 0/1 entry per unit")

    return errors
