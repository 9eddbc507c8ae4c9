"""Interface definitions for the governor's external collaborators."""

from abc import ABC, abstractmethod
from typing import Dict, Set, Any


class IPowerController(ABC):
    """Powers processing units on and off.

    Both commands are idempotent: powering up an online unit (or down an
    offline one) has no effect.
    """

    @abstractmethod
    async def power_up(self, unit_id: int) -> None:
        """Bring a unit online."""
        pass

    @abstractmethod
    async def power_down(self, unit_id: int) -> None:
        """Take a unit offline."""
        pass

    @abstractmethod
    def online_units(self) -> Set[int]:
        """Get ids of the units currently online."""
        pass


class ILoadSource(ABC):
    """Load measurement interface."""

    @abstractmethod
    def sample_system_load(self) -> int:
        """Get the system-wide running load, fixed point (REFERENCE_SHIFT bits)."""
        pass

    @abstractmethod
    def sample_unit_load(self, unit_id: int) -> int:
        """Get the load of a single unit."""
        pass


class IGovernor(ABC):
    """Lifecycle interface of a hotplug governor."""

    @abstractmethod
    async def start(self) -> None:
        """Activate the control loop."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Deactivate and drain the control loop."""
        pass

    @abstractmethod
    async def set_active(self, active: bool) -> bool:
        """Toggle the control loop, returning the resulting state."""
        pass

    @abstractmethod
    def is_active(self) -> bool:
        """Check whether the control loop is scheduled."""
        pass

    @abstractmethod
    def status(self) -> Dict[str, Any]:
        """Get a status snapshot."""
        pass
