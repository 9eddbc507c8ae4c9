"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil

from hotplug.core.config import SystemConfig, HotplugConfig
from hotplug.core.events import EventBus
from hotplug.governor import HotplugGovernor, ProfileStore
from tests.fixtures.mock_services import ManualClock, MockLoadSource, MockPowerController


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def test_config():
    """Create test configuration."""
    config = SystemConfig()
    config.debug_mode = True
    config.log_level = "DEBUG"
    return config


@pytest.fixture
def hotplug_config(test_config) -> HotplugConfig:
    """Governor settings that keep the loop idle unless a test drives it."""
    hp = test_config.hotplug
    hp.startup_delay_ms = 60_000
    hp.sampling_interval_ms = 10
    return hp


@pytest.fixture
def profiles(test_config):
    return ProfileStore.from_config(test_config.profiles)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def power():
    return MockPowerController(unit_count=8)


@pytest.fixture
def load_source():
    return MockLoadSource()


@pytest.fixture
async def event_bus():
    """Create and start event bus."""
    bus = EventBus()
    await bus.start()
    yield bus
    await bus.stop()


@pytest.fixture
async def governor(hotplug_config, profiles, power, load_source, event_bus, clock):
    """Governor wired to mocks; stopped after the test."""
    gov = HotplugGovernor(hotplug_config, profiles, power, load_source, event_bus, clock=clock)
    yield gov
    await gov.stop()
