"""Event system for decoupled communication between components."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Type
import asyncio
import logging

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """Base event class.

    Note: All fields have defaults to allow subclasses to add required fields.
    """
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SystemResumed(Event):
    """Host left suspend and is interactive again."""
    source: str = ""


@dataclass
class SystemSuspended(Event):
    """Host is entering suspend."""
    source: str = ""


@dataclass
class UnitsScaled(Event):
    """A pass changed the set of online units."""
    target: int = 0
    online_before: int = 0
    online_after: int = 0
    powered_up: List[int] = field(default_factory=list)
    powered_down: List[int] = field(default_factory=list)
    reason: str = ""  # 'load', 'core_map', 'resume', 'start'


@dataclass
class GovernorStateChanged(Event):
    """Governor was activated or deactivated."""
    active: bool = False
    reason: str = ""


class EventBus:
    """Central event bus for system-wide communication with backpressure."""

    def __init__(self, max_queue_size: int = 1000):
        self._handlers: Dict[Type[Event], List[Callable]] = {}
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._running = False
        self._task = None
        logger.info(f"Event bus initialized (max_queue_size={max_queue_size})")

    def subscribe(self, event_type: Type[Event], handler: Callable):
        """Register an event handler."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {handler.__name__} to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[Event], handler: Callable):
        """Remove an event handler."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def has_subscribers(self, event_type: Type[Event]) -> bool:
        """Check whether anything listens for an event type."""
        return bool(self._handlers.get(event_type))

    async def publish(self, event: Event):
        """Publish an event to all subscribers."""
        try:
            await asyncio.wait_for(self._queue.put(event), timeout=1.0)
        except asyncio.TimeoutError:
            logger.error(f"Event queue full, dropping {type(event).__name__}")

    async def start(self):
        """Start processing events."""
        self._running = True
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self):
        """Stop processing events."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Event bus stopped")

    async def _process_events(self):
        """Process events from queue."""
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
                await self.dispatch(event)
            except asyncio.TimeoutError:
                continue
            except Exception as e:
                logger.error(f"Error processing event: {e}", exc_info=True)

    async def dispatch(self, event: Event):
        """Dispatch event to handlers with error isolation.

        Also used directly by event sources that need handlers to run in
        their own calling context.
        """
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug(f"No handlers for {event_type.__name__}")
            return

        logger.debug(f"Dispatching {event_type.__name__} to {len(handlers)} handlers")

        for handler in handlers:
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(
                    f"Handler {handler.__name__} failed for {event_type.__name__}: {e}",
                    exc_info=True
                )
