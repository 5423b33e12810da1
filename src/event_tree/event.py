"""Event object carried through an emitter tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .directions import DEFAULT_PROPAGATION, LOCAL, NONE, Direction, coerce_direction

if TYPE_CHECKING:
    from .emitter import Emitter


class Event:
    """Typed event with a payload, a result and a propagation mask.

    Listeners share one instance for the whole emission: payload and result
    changes are visible to every listener that runs afterwards, and mask
    changes steer where the event travels next.
    """

    def __init__(
        self,
        event_type: str,
        payload: Any = None,
        target: Emitter | None = None,
        propagation: Direction | int = DEFAULT_PROPAGATION,
    ) -> None:
        self._type = event_type
        self.payload = payload
        self.result: Any = None
        self.target = target
        self.current_target: Emitter | None = None
        self.event_phase = NONE
        # Fresh events behave like the single-level emit path until a
        # tree-aware emission touches them.
        self.legacy_mode = True
        self.propagation = NONE
        self.bubbles = False
        self.set_propagation(propagation)

    @property
    def type(self) -> str:
        return self._type

    def __repr__(self) -> str:
        return (
            f"Event(type={self._type!r}, phase={self.event_phase!r}, "
            f"propagation={self.propagation!r})"
        )

    def get_payload(self) -> Any:
        return self.payload

    def set_payload(self, value: Any) -> Event:
        self.payload = value
        return self

    def get_result(self) -> Any:
        return self.result

    def set_result(self, value: Any) -> Event:
        self.result = value
        return self

    def get_propagation(self) -> Direction:
        return self.propagation

    def set_propagation(self, mask: Direction | int) -> Event:
        """Replace the allowed directions and recompute ``bubbles``."""
        self.propagation = coerce_direction(mask)
        self.bubbles = bool(int(self.propagation) & ~int(LOCAL))
        return self

    def stop_propagation(self) -> Event:
        """Stop the event from travelling any further.

        On the single-level path this is a full stop. On the tree path the
        listeners of the current level keep running but no other emitter is
        visited.
        """
        if self.legacy_mode:
            self.propagation = NONE
        else:
            self.propagation &= LOCAL
        self.bubbles = False
        return self

    def stop_immediate_propagation(self) -> Event:
        """Stop everything, including the remaining listeners of this level."""
        self.propagation = NONE
        self.bubbles = False
        return self

    def cancel_event(self) -> Event:
        return self.stop_immediate_propagation()

    def can_propagate(self, direction: Direction | int | None = None) -> bool:
        """Return whether the event may still travel in ``direction``.

        Without a direction, any remaining permission counts. Every
        direction except LOCAL additionally requires ``bubbles``.
        """
        if direction is None:
            return bool(self.propagation)
        direction = coerce_direction(direction)
        if direction == NONE:
            return bool(self.propagation)
        if int(direction) & ~int(LOCAL) and not self.bubbles:
            return False
        return (self.propagation & direction) == direction
