"""Threshold profiles and profile selection."""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from hotplug.core.config import ProfileConfig
from hotplug.utils.validation import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Profile:
    """Ordered load thresholds for consecutive online-unit counts.

    ``thresholds[i]`` is the highest load still served by ``min_online + i``
    units. Positions past the finite entries behave as +infinity.
    """
    name: str
    thresholds: Tuple[int, ...]

    @classmethod
    def from_values(cls, name: str, values: Iterable[float]) -> "Profile":
        finite = []
        for value in values:
            if math.isinf(value):
                break
            finite.append(int(value))
        return cls(name=name, thresholds=tuple(finite))

    def threshold(self, position: int) -> float:
        """Get the threshold at a position, +infinity past the table."""
        if 0 <= position < len(self.thresholds):
            return self.thresholds[position]
        return math.inf

    @property
    def pins_minimum(self) -> bool:
        """All-zero tables keep the online count at its minimum."""
        return bool(self.thresholds) and all(t == 0 for t in self.thresholds)


class ProfileStore:
    """Named profiles plus the current selection."""

    def __init__(self, profiles: List[Profile], index: int = 0):
        if not profiles:
            raise ValueError("ProfileStore needs at least one profile")
        self._profiles = list(profiles)
        self._index = 0
        self.set_profile(index)

    @classmethod
    def from_config(cls, profiles: List[ProfileConfig], index: int = 0) -> "ProfileStore":
        return cls([Profile.from_values(p.name, p.thresholds) for p in profiles], index)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Profile:
        return self._profiles[self._index]

    def __len__(self) -> int:
        return len(self._profiles)

    def set_profile(self, index: int) -> Profile:
        """Select the active profile, rejecting unknown indices."""
        self._check_index(index)
        if index != self._index:
            logger.info(
                f"Profile changed: {self.current.name} -> {self._profiles[index].name}"
            )
        self._index = index
        return self.current

    def _check_index(self, index: int):
        if not 0 <= index < len(self._profiles):
            raise ValidationError(
                f"Profile index {index} out of range (0..{len(self._profiles) - 1})"
            )
