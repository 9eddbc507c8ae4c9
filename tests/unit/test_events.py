"""Unit tests for the event bus and event logger."""

import dataclasses
import json
import pytest
from hotplug.core.events import Event, EventBus, GovernorStateChanged, UnitsScaled
from hotplug.core.events_listener import register_event_listeners


@pytest.mark.asyncio
class TestEventBus:
    """Test subscription handling."""

    async def test_dispatch_and_unsubscribe(self):
        bus = EventBus()
        seen = []

        def handler(event):
            seen.append(event)

        bus.subscribe(UnitsScaled, handler)
        await bus.dispatch(UnitsScaled(target=5))
        bus.unsubscribe(UnitsScaled, handler)
        bus.unsubscribe(UnitsScaled, handler)
        await bus.dispatch(UnitsScaled(target=6))

        assert [e.target for e in seen] == [5]
        assert not bus.has_subscribers(UnitsScaled)

    async def test_base_event_carries_only_timestamp(self):
        assert [f.name for f in dataclasses.fields(Event)] == ["timestamp"]
        assert [f.name for f in dataclasses.fields(GovernorStateChanged)] == [
            "timestamp", "active", "reason"
        ]

    async def test_handler_errors_are_isolated(self):
        bus = EventBus()
        seen = []

        async def broken(event):
            raise RuntimeError("boom")

        async def healthy(event):
            seen.append(event)

        bus.subscribe(GovernorStateChanged, broken)
        bus.subscribe(GovernorStateChanged, healthy)
        await bus.dispatch(GovernorStateChanged(active=True))

        assert len(seen) == 1


@pytest.mark.asyncio
class TestSystemEventLogger:
    """Test metrics output."""

    async def test_units_scaled_written_as_metric(self, temp_data_dir):
        bus = EventBus()
        event_logger = register_event_listeners(bus, str(temp_data_dir))

        await bus.dispatch(UnitsScaled(
            target=4, online_before=8, online_after=4,
            powered_down=[4, 5, 6, 7], reason="load"
        ))
        await bus.dispatch(GovernorStateChanged(active=False, reason="stop"))

        lines = event_logger.metrics_file.read_text().splitlines()
        records = [json.loads(line) for line in lines]

        assert records[0]["event"] == "units_scaled"
        assert records[0]["powered_down"] == [4, 5, 6, 7]
        assert records[1] == {
            "event": "governor_state_changed",
            "timestamp": records[1]["timestamp"],
            "active": False,
            "reason": "stop"
        }
