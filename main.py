"""Main entry point for the hotplug governor."""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from hotplug.core.config import load_config, validate_config
from hotplug.core.events import EventBus
from hotplug.core.events_listener import register_event_listeners
from hotplug.governor import HotplugGovernor, ProfileStore
from hotplug.control import build_registry
from hotplug.platform import (
    ResourceMonitor,
    SimulatedLoadSource,
    SimulatedPowerController,
    install_power_state_signals,
    remove_power_state_signals,
)
from hotplug.utils.logging_config import setup_logging
from hotplug.utils.validation import ResourceAllocationError

logger = logging.getLogger(__name__)


async def main():
    """Main application entry point."""
    config = load_config()

    setup_logging(config.debug_mode, config.log_level, config.log_dir)

    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Hotplug Governor Initializing")
    logger.info("=" * 60)

    event_bus = None
    governor = None

    try:
        event_bus = EventBus(max_queue_size=1000)
        await event_bus.start()
        register_event_listeners(event_bus, config.log_dir)

        hp = config.hotplug
        power = SimulatedPowerController(hp.platform_max_units, online=range(hp.min_online))
        if config.simulate_load:
            load_source = SimulatedLoadSource()
        else:
            load_source = ResourceMonitor(hp.platform_max_units)

        governor = HotplugGovernor(
            hp,
            ProfileStore.from_config(config.profiles, hp.profile_index),
            power,
            load_source,
            event_bus
        )
        registry = build_registry(governor)
        install_power_state_signals(event_bus)

        if hp.enabled:
            try:
                await governor.start()
            except ResourceAllocationError as e:
                logger.error(f"Governor left disabled: {e}")

        logger.info(f"Tunables: {registry.dump()}")
        logger.info("=" * 60)
        logger.info("System Ready")
        logger.info("=" * 60)

        while True:
            await asyncio.sleep(60)
            logger.info(f"Status: {governor.status()}")

    except asyncio.CancelledError:
        logger.info("Shutdown signal received")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        logger.info("Shutting down...")

        if event_bus:
            remove_power_state_signals()

        # Drain the control loop before the event bus goes away
        if governor:
            await governor.stop()

        if event_bus:
            await event_bus.stop()

        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutdown complete.")
