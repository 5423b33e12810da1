"""Hierarchical event emitter.

An ``Emitter`` keeps its own listener registries and can be linked into a
tree of parents, children and siblings. Two emission paths coexist:

    emitter.emit("ready", value)        # this emitter only
    emitter.emit_event(Event("ready"))  # walks the tree

``emit_event`` follows the event's propagation mask and the emitter's
traversal order (``set_order``) to decide which emitters receive the event
and in which order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import Any, NoReturn, TypeVar
import weakref

from .config import EmitterConfig
from .directions import (
    DOWN,
    LOCAL,
    NONE,
    SATURATING,
    SIBLINGS,
    UP,
    Direction,
    coerce_direction,
    normalize_order,
)
from .event import Event
from .exceptions import TreeCycleError, UnhandledErrorEvent
from .interfaces import Propagatable

LOGGER = logging.getLogger(__name__)

ERROR_EVENT = "error"
NEW_LISTENER_EVENT = "newListener"
REMOVE_LISTENER_EVENT = "removeListener"
CHILD_ADDED_EVENT = "childAdded"
BEFORE_CHILD_REMOVED_EVENT = "beforeChildRemoved"
CHILD_REMOVED_EVENT = "childRemoved"

Listener = Callable[..., Any]
T = TypeVar("T")

# Directions a recursive step must not take again from the emitter it
# reaches, keyed by the direction of that step.
_SKIP_AFTER = {
    DOWN: UP | SIBLINGS,
    UP: DOWN | SIBLINGS,
    SIBLINGS: SIBLINGS | DOWN | UP,
}


class Emitter:
    """Event emitter that can be linked into a parent/child tree."""

    def __init__(self, config: EmitterConfig | None = None) -> None:
        self.config = config or EmitterConfig()
        self._listeners: dict[str, list[Listener]] = {}
        self._listeners_once: dict[str, list[Listener]] = {}
        self._parent_ref: weakref.ref[Emitter] | None = None
        self._children: list[Emitter] = []
        self._order: tuple[Direction, ...] = normalize_order(self.config.traversal_order)
        self._max_listeners = self.config.max_listeners
        self._warned_types: set[str] = set()

    # --- Listener registry ------------------------------------------------

    def on(self, event_type: str, callback: Listener) -> Emitter:
        return self.add_listener(event_type, callback)

    def once(self, event_type: str, callback: Listener) -> Emitter:
        return self.add_listener(event_type, callback, once=True)

    def prepend_listener(self, event_type: str, callback: Listener) -> Emitter:
        return self.add_listener(event_type, callback, prepend=True)

    def prepend_once_listener(self, event_type: str, callback: Listener) -> Emitter:
        return self.add_listener(event_type, callback, once=True, prepend=True)

    def add_listener(
        self,
        event_type: str,
        callback: Listener,
        once: bool = False,
        prepend: bool = False,
    ) -> Emitter:
        """Register ``callback`` for ``event_type``.

        ``newListener`` fires before the registration is stored, so a
        ``newListener`` handler may itself register listeners.
        """
        if not callable(callback):
            raise TypeError(f"Listener for {event_type!r} must be callable.")
        self.emit(NEW_LISTENER_EVENT, event_type, callback)

        registry = self._listeners_once if once else self._listeners
        bucket = registry.setdefault(event_type, [])
        if prepend:
            bucket.insert(0, callback)
        else:
            bucket.append(callback)
        self._check_max_listeners(event_type)
        return self

    def off(self, event_type: str, callback: Listener | None = None) -> Emitter:
        """Remove one listener, or every listener of ``event_type``."""
        if callback is None:
            self._listeners.pop(event_type, None)
            self._listeners_once.pop(event_type, None)
            self._warned_types.discard(event_type)
            return self

        for registry in (self._listeners, self._listeners_once):
            bucket = registry.get(event_type)
            if bucket and callback in bucket:
                bucket.remove(callback)
                self.emit(REMOVE_LISTENER_EVENT, event_type, callback)
                break
        return self

    def remove_listener(self, event_type: str, callback: Listener | None = None) -> Emitter:
        return self.off(event_type, callback)

    def remove_all_listeners(self, event_type: str | None = None) -> Emitter:
        if event_type is not None:
            return self.off(event_type)
        self._listeners = {}
        self._listeners_once = {}
        self._warned_types.clear()
        return self

    def listeners(self, event_type: str) -> list[Listener]:
        """Return a copy of the listeners of ``event_type``, persistent first."""
        return list(self._listeners.get(event_type, ())) + list(
            self._listeners_once.get(event_type, ())
        )

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, ())) + len(
            self._listeners_once.get(event_type, ())
        )

    def event_names(self) -> list[str]:
        names: list[str] = []
        for registry in (self._listeners, self._listeners_once):
            for name, bucket in registry.items():
                if bucket and name not in names:
                    names.append(name)
        return names

    def get_max_listeners(self) -> int:
        return self._max_listeners

    def set_max_listeners(self, limit: int) -> Emitter:
        """Set the per-type listener count above which a warning is logged (0 = unlimited)."""
        if limit < 0:
            raise ValueError("max listeners must be zero or positive.")
        self._max_listeners = limit
        self._warned_types.clear()
        return self

    def _check_max_listeners(self, event_type: str) -> None:
        if not self._max_listeners or event_type in self._warned_types:
            return
        count = self.listener_count(event_type)
        if count > self._max_listeners:
            self._warned_types.add(event_type)
            LOGGER.warning(
                "emitter.listeners.exceeded",
                extra={
                    "event": "emitter.listeners.exceeded",
                    "event_type": event_type,
                    "count": count,
                    "limit": self._max_listeners,
                },
            )

    # --- Tree management --------------------------------------------------

    def get_parent(self) -> Emitter | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def has_parent(self) -> bool:
        return self.get_parent() is not None

    def has_child(self, emitter: Emitter) -> bool:
        return emitter in self._children

    def get_children(self) -> list[Emitter]:
        return list(self._children)

    def add_child(self, emitter: Emitter) -> Emitter:
        """Link ``emitter`` below this one, detaching it from any previous parent."""
        if emitter in self._children:
            return self
        node: Emitter | None = self
        while node is not None:
            if node is emitter:
                raise TreeCycleError("An emitter cannot become a child of itself or its descendants.")
            node = node.get_parent()

        emitter.remove_self()
        self._children.append(emitter)
        emitter._parent_ref = weakref.ref(self)
        LOGGER.debug(
            "emitter.child.added",
            extra={"event": "emitter.child.added", "children": len(self._children)},
        )
        self.emit(CHILD_ADDED_EVENT, emitter)
        return self

    def remove_child(self, emitter: Emitter) -> Emitter:
        if emitter not in self._children:
            return self
        emitter.emit(BEFORE_CHILD_REMOVED_EVENT, emitter)
        self.emit(BEFORE_CHILD_REMOVED_EVENT, emitter)
        # A listener above may already have detached it.
        if emitter in self._children:
            self._children.remove(emitter)
        if emitter.get_parent() is self:
            emitter._parent_ref = None
        LOGGER.debug(
            "emitter.child.removed",
            extra={"event": "emitter.child.removed", "children": len(self._children)},
        )
        self.emit(CHILD_REMOVED_EVENT, emitter)
        return self

    def remove_self(self) -> Emitter:
        parent = self.get_parent()
        if parent is not None:
            parent.remove_child(self)
        self._parent_ref = None
        return self

    def remove_all_children(self) -> Emitter:
        for child in list(self._children):
            self.remove_child(child)
        return self

    def get_siblings(self) -> list[Emitter]:
        parent = self.get_parent()
        if parent is None:
            return []
        return [child for child in parent._children if child is not self]

    def get_all_children(self, exclude: list[Emitter] | None = None) -> list[Emitter]:
        """Return every descendant depth-first, skipping subtrees rooted in ``exclude``."""
        exclude = exclude or []
        collected: list[Emitter] = []
        for child in self._children:
            if child in exclude:
                continue
            collected.append(child)
            collected.extend(child.get_all_children(exclude))
        return collected

    def get_relations(self, exclude: list[Emitter] | None = None) -> list[Emitter]:
        """Return every emitter of the connected tree reachable from here.

        Order: this emitter, each sibling followed by its descendants, this
        emitter's descendants, then the relations of the parent. Nodes in
        ``exclude`` and their subtrees are skipped.
        """
        exclude = list(exclude or [])
        relations: list[Emitter] = []

        def collect(emitter: Emitter) -> None:
            if emitter not in exclude and emitter not in relations:
                relations.append(emitter)

        collect(self)
        for sibling in self.get_siblings():
            if sibling in exclude:
                continue
            collect(sibling)
            for descendant in sibling.get_all_children(exclude + relations):
                collect(descendant)
        for descendant in self.get_all_children(exclude):
            collect(descendant)

        parent = self.get_parent()
        if parent is not None and parent not in exclude:
            for relation in parent.get_relations(exclude + relations):
                collect(relation)
        return relations

    def call_on_parent(self, fn: Callable[[Propagatable], T]) -> T | None:
        parent = self.get_parent()
        if parent is None:
            return None
        return fn(parent)

    def call_on_children(self, fn: Callable[[Propagatable], T]) -> list[T]:
        return [fn(child) for child in self.get_children()]

    def call_on_siblings(self, fn: Callable[[Propagatable], T]) -> list[T]:
        return [fn(sibling) for sibling in self.get_siblings()]

    def shutdown(self) -> None:
        """Drop every listener and every tree link of this emitter."""
        self.remove_all_listeners()
        self.remove_self()
        self.remove_all_children()
        LOGGER.debug("emitter.shutdown", extra={"event": "emitter.shutdown"})

    # --- Traversal order --------------------------------------------------

    def set_order(
        self,
        first: Direction | int,
        second: Direction | int = NONE,
        third: Direction | int = NONE,
        fourth: Direction | int = NONE,
    ) -> Emitter:
        """Set the order in which ``emit_event`` tries each direction."""
        self._order = normalize_order((first, second, third, fourth))
        return self

    def get_order(self) -> tuple[Direction, ...]:
        return self._order

    # --- Emission ---------------------------------------------------------

    def create_event(self, event_type: str, payload: Any = None) -> Event:
        """Build an event targeting this emitter with the configured default mask."""
        return Event(event_type, payload, self, self.config.propagation)

    def emit(self, event: Event | str, *args: Any) -> bool:
        """Dispatch to this emitter's listeners only.

        With an ``Event`` the listeners receive ``(event, *args)`` and stop
        being called once the event no longer propagates. Returns whether
        any listener was registered.
        """
        if isinstance(event, Event):
            event_type = event.type
            params: tuple[Any, ...] = (event, *args)
            event.legacy_mode = True
            event.current_target = self
        else:
            event_type = event
            params = args

        if event_type == ERROR_EVENT and self.listener_count(ERROR_EVENT) == 0:
            if isinstance(event, Event):
                self._raise_unhandled(event.payload)
            self._raise_unhandled(params[0] if params else None)

        calls = self.listeners(event_type)
        self._listeners_once.pop(event_type, None)
        if not calls:
            return False

        try:
            for callback in calls:
                if isinstance(event, Event) and not event.can_propagate():
                    break
                callback(*params)
        except Exception as exc:
            self._handle_listener_error(event_type, exc)
        return True

    def emit_event(self, event: Event, skip: Direction | int = NONE) -> Event:
        """Propagate ``event`` through the tree starting at this emitter.

        ``skip`` names directions this emitter must not take; recursive
        steps use it to keep the event from bouncing back.
        """
        event.legacy_mode = False
        if event.target is None:
            event.target = self
        if not event.can_propagate():
            return event

        if event.can_propagate(SATURATING):
            self._saturate(event)
            return event

        skip = coerce_direction(skip)
        for direction in self._order:
            if direction == NONE or direction & skip:
                continue
            if not event.can_propagate(direction):
                continue
            if direction == LOCAL:
                if event.event_phase == NONE:
                    event.event_phase = LOCAL
                self._dispatch(event)
            elif direction == DOWN:
                self._walk(event, DOWN, self.get_children())
            elif direction == UP:
                parent = self.get_parent()
                self._walk(event, UP, [parent] if parent is not None else [])
            elif direction == SIBLINGS:
                self._walk(event, SIBLINGS, self.get_siblings())
        return event

    def _walk(
        self, event: Event, direction: Direction, targets: Sequence[Propagatable]
    ) -> None:
        previous_phase = event.event_phase
        previous_target = event.current_target
        event.event_phase = direction
        try:
            for target in targets:
                if not event.can_propagate(direction):
                    break
                target.emit_event(event, _SKIP_AFTER[direction])
        finally:
            event.event_phase = previous_phase
            event.current_target = previous_target

    def _saturate(self, event: Event) -> None:
        for emitter in self.get_relations():
            if not event.can_propagate(SATURATING):
                break
            event.event_phase = LOCAL if emitter is self else SATURATING
            emitter._dispatch(event)

    def _dispatch(self, event: Event) -> None:
        """Run this emitter's listeners for ``event`` during a tree walk."""
        event.current_target = self
        if event.type == ERROR_EVENT and self.listener_count(ERROR_EVENT) == 0:
            self._raise_unhandled(event.payload)

        calls = self.listeners(event.type)
        self._listeners_once.pop(event.type, None)
        try:
            for callback in calls:
                if not event.can_propagate(event.event_phase):
                    break
                callback(event)
        except Exception as exc:
            self._handle_listener_error(event.type, exc)

    def _handle_listener_error(self, event_type: str, exc: Exception) -> None:
        if event_type == ERROR_EVENT:
            raise exc
        LOGGER.warning(
            "emitter.listener.failed",
            extra={
                "event": "emitter.listener.failed",
                "event_type": event_type,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        self.emit(ERROR_EVENT, exc)

    def _raise_unhandled(self, value: Any) -> NoReturn:
        LOGGER.debug(
            "emitter.error.unhandled",
            extra={"event": "emitter.error.unhandled", "value": repr(value)},
        )
        if isinstance(value, BaseException):
            raise value
        raise UnhandledErrorEvent(value)
