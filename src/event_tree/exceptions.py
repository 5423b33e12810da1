"""Domain exception hierarchy for the event tree library."""

from __future__ import annotations

from typing import Any


class EventTreeError(RuntimeError):
    """Base class for all domain-level event tree errors."""


class UnhandledErrorEvent(EventTreeError):
    """Raised when an ``error`` event has no handler and carries no exception."""

    def __init__(self, value: Any = None) -> None:
        self.value = value
        if value is None:
            message = "No 'error' handler for an error event"
        else:
            message = f"No 'error' handler for an error event: {value!r}"
        super().__init__(message)


class InvalidDirectionError(EventTreeError, ValueError):
    """Raised when a value cannot be used as a propagation direction."""


class TreeCycleError(EventTreeError, ValueError):
    """Raised when linking two emitters would turn the tree into a cycle."""


class ConfigValidationError(EventTreeError):
    """Raised when configuration cannot be validated safely."""
