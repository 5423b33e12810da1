"""Hierarchical event emitters with direction-controlled propagation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import EmitterConfig, load_config
    from .directions import (
        DOWN,
        LOCAL,
        NONE,
        SATURATING,
        SIBLINGS,
        UP,
        Direction,
    )
    from .emitter import Emitter
    from .event import Event
    from .exceptions import (
        ConfigValidationError,
        EventTreeError,
        InvalidDirectionError,
        TreeCycleError,
        UnhandledErrorEvent,
    )
    from .interfaces import Propagatable
    from .logging_utils import configure_logging

__all__ = [
    "DOWN",
    "LOCAL",
    "NONE",
    "SATURATING",
    "SIBLINGS",
    "UP",
    "ConfigValidationError",
    "Direction",
    "Emitter",
    "EmitterConfig",
    "Event",
    "EventTreeError",
    "InvalidDirectionError",
    "Propagatable",
    "TreeCycleError",
    "UnhandledErrorEvent",
    "configure_logging",
    "load_config",
]

_EXPORTS = {
    "DOWN": ".directions",
    "LOCAL": ".directions",
    "NONE": ".directions",
    "SATURATING": ".directions",
    "SIBLINGS": ".directions",
    "UP": ".directions",
    "Direction": ".directions",
    "Emitter": ".emitter",
    "Event": ".event",
    "Propagatable": ".interfaces",
    "ConfigValidationError": ".exceptions",
    "EventTreeError": ".exceptions",
    "InvalidDirectionError": ".exceptions",
    "TreeCycleError": ".exceptions",
    "UnhandledErrorEvent": ".exceptions",
    "EmitterConfig": ".config",
    "load_config": ".config",
    "configure_logging": ".logging_utils",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so ``import event_tree`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
