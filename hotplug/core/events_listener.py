import logging
from pathlib import Path
import json

from hotplug.core.events import (
    EventBus,
    GovernorStateChanged,
    SystemResumed,
    SystemSuspended,
    UnitsScaled,
)

logger = logging.getLogger(__name__)


class SystemEventLogger:
    def __init__(self, log_dir: str = "data/logs"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.metrics_file = self.log_dir / "metrics.jsonl"

    async def on_units_scaled(self, event: UnitsScaled):
        logger.info(
            f"Units scaled ({event.reason}): "
            f"{event.online_before}->{event.online_after} online, "
            f"target {event.target}, "
            f"up={event.powered_up} down={event.powered_down}"
        )

        await self._write_metric({
            "event": "units_scaled",
            "timestamp": event.timestamp.isoformat(),
            "reason": event.reason,
            "target": event.target,
            "online_before": event.online_before,
            "online_after": event.online_after,
            "powered_up": event.powered_up,
            "powered_down": event.powered_down
        })

    async def on_state_changed(self, event: GovernorStateChanged):
        logger.info(f"Governor {'activated' if event.active else 'deactivated'} ({event.reason})")

        await self._write_metric({
            "event": "governor_state_changed",
            "timestamp": event.timestamp.isoformat(),
            "active": event.active,
            "reason": event.reason
        })

    async def on_resumed(self, event: SystemResumed):
        logger.info(f"System resumed ({event.source or 'unknown source'})")

    async def on_suspended(self, event: SystemSuspended):
        logger.info(f"System suspending ({event.source or 'unknown source'})")

    async def _write_metric(self, data: dict):
        try:
            with open(self.metrics_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(data) + '\n')
        except Exception as e:
            logger.error(f"Failed to write metric: {e}")


def register_event_listeners(event_bus: EventBus, log_dir: str = "data/logs"):
    event_logger = SystemEventLogger(log_dir)

    event_bus.subscribe(UnitsScaled, event_logger.on_units_scaled)
    event_bus.subscribe(GovernorStateChanged, event_logger.on_state_changed)
    event_bus.subscribe(SystemResumed, event_logger.on_resumed)
    event_bus.subscribe(SystemSuspended, event_logger.on_suspended)

    logger.info("Event listeners registered")
    return event_logger
