"""POSIX signals as power-state events.

SIGUSR1 reports a resume and SIGUSR2 a suspend. Handlers are dispatched
on the running loop; pending dispatch tasks are held until they finish.
"""

import asyncio
import logging
import signal
from typing import Set

from hotplug.core.events import EventBus, SystemResumed, SystemSuspended

logger = logging.getLogger(__name__)

POWER_STATE_SIGNALS = {
    signal.SIGUSR1: SystemResumed,
    signal.SIGUSR2: SystemSuspended,
}

_pending: Set[asyncio.Task] = set()


def install_power_state_signals(event_bus: EventBus) -> bool:
    """Map SIGUSR1/SIGUSR2 to resume/suspend events on the running loop."""
    loop = asyncio.get_running_loop()

    def emit(event_type):
        task = loop.create_task(event_bus.dispatch(event_type(source="signal")))
        _pending.add(task)
        task.add_done_callback(_pending.discard)

    try:
        for signum, event_type in POWER_STATE_SIGNALS.items():
            loop.add_signal_handler(signum, emit, event_type)
    except (NotImplementedError, AttributeError, RuntimeError) as e:
        logger.warning(f"Signal handlers unavailable, power-state events disabled: {e}")
        return False

    logger.info("Power-state signals installed (SIGUSR1=resume, SIGUSR2=suspend)")
    return True


def remove_power_state_signals():
    """Remove the handlers installed on the running loop."""
    loop = asyncio.get_running_loop()
    for signum in POWER_STATE_SIGNALS:
        try:
            loop.remove_signal_handler(signum)
        except (NotImplementedError, AttributeError, RuntimeError):
            pass


def pending_dispatches() -> int:
    """Number of signal dispatches still running."""
    return len(_pending)
