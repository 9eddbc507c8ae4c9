"""Input validation utilities."""

import re
from typing import Optional


class ValidationError(Exception):
    """Validation error."""
    pass


class ResourceAllocationError(Exception):
    """A resource needed to activate a component could not be obtained."""
    pass


_UNSIGNED_PATTERN = re.compile(r'^\s*\+?(\d+)\s*$')
_SIGNED_PATTERN = re.compile(r'^\s*([+-]?\d+)\s*$')


def parse_unsigned(raw: str) -> int:
    """Parse a non-negative integer written to a tunable."""
    match = _UNSIGNED_PATTERN.match(raw or "")
    if not match:
        raise ValidationError(f"Expected a non-negative integer, got {raw!r}")
    return int(match.group(1))


def parse_signed(raw: str) -> int:
    """Parse an integer written to a tunable."""
    match = _SIGNED_PATTERN.match(raw or "")
    if not match:
        raise ValidationError(f"Expected an integer, got {raw!r}")
    return int(match.group(1))


def validate_range(value: int, low: int, high: Optional[int]) -> int:
    """Check an integer against an inclusive range."""
    if value < low or (high is not None and value > high):
        upper = "" if high is None else f" and {high}"
        raise ValidationError(f"Value {value} must be between {low}{upper}")
    return value


def validate_core_map(core_map, unit_count: int) -> bool:
    """Validate a static per-unit on/off map."""
    if core_map is None:
        return True
    return len(core_map) == unit_count and all(v in (0, 1) for v in core_map)
