"""Utility functions and helpers.

Usage:
    from hotplug.utils import setup_logging, ValidationError

    setup_logging(debug_mode=True, log_level="DEBUG")
"""

from hotplug.utils.logging_config import setup_logging
from hotplug.utils.validation import (
    ValidationError,
    ResourceAllocationError,
    parse_unsigned,
    parse_signed,
    validate_range,
    validate_core_map,
)

__all__ = [
    # Logging
    "setup_logging",

    # Validation
    "ValidationError",
    "ResourceAllocationError",
    "parse_unsigned",
    "parse_signed",
    "validate_range",
    "validate_core_map",
]
