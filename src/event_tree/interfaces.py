"""Capability interface shared by every node of an emitter tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .directions import Direction

if TYPE_CHECKING:
    from .event import Event


@runtime_checkable
class Propagatable(Protocol):
    """What a tree walk needs from a node.

    ``call_on_parent``/``call_on_children``/``call_on_siblings`` hand their
    callables a ``Propagatable`` so the callee is checked statically instead
    of being resolved by method name at runtime.
    """

    def emit_event(self, event: Event, skip: Direction | int = ...) -> Event: ...

    def get_parent(self) -> Propagatable | None: ...

    def get_children(self) -> list[Propagatable]: ...

    def get_siblings(self) -> list[Propagatable]: ...
