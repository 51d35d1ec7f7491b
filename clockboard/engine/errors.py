"""Exceptions raised by the clock engine."""
from __future__ import annotations


class ClockboardError(Exception):
    """Base class for recoverable engine errors."""


class ClockRegistryError(ClockboardError):
    pass


class ProtectedClockError(ClockRegistryError):
    """Raised when removing a clock the registry must keep."""


class MalformedInputError(ClockboardError, ValueError):
    """Raised when a simulated time cannot be parsed; prior state is kept."""
