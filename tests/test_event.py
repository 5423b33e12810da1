"""Tests for the event object's accessors and propagation mask."""

from __future__ import annotations

import unittest

from event_tree.directions import (
    DEFAULT_PROPAGATION,
    DOWN,
    LOCAL,
    NONE,
    SATURATING,
    SIBLINGS,
    UP,
)
from event_tree.event import Event


class EventAccessorTests(unittest.TestCase):
    """Validate payload/result accessors and defaults."""

    def test_defaults(self) -> None:
        event = Event("saved")
        self.assertEqual(event.type, "saved")
        self.assertIsNone(event.get_payload())
        self.assertIsNone(event.get_result())
        self.assertIsNone(event.target)
        self.assertIsNone(event.current_target)
        self.assertEqual(event.event_phase, NONE)
        self.assertEqual(event.get_propagation(), DEFAULT_PROPAGATION)
        self.assertTrue(event.bubbles)
        self.assertTrue(event.legacy_mode)

    def test_type_is_read_only(self) -> None:
        event = Event("saved")
        with self.assertRaises(AttributeError):
            event.type = "other"  # type: ignore[misc]

    def test_setters_chain(self) -> None:
        event = Event("saved", "before").set_payload("after").set_result(42)
        self.assertEqual(event.get_payload(), "after")
        self.assertEqual(event.get_result(), 42)


class EventPropagationTests(unittest.TestCase):
    """Validate mask, bubbles and stop semantics."""

    def test_set_propagation_recomputes_bubbles(self) -> None:
        event = Event("x")
        event.set_propagation(LOCAL)
        self.assertFalse(event.bubbles)
        event.set_propagation(LOCAL | SIBLINGS)
        self.assertTrue(event.bubbles)
        event.set_propagation(0)
        self.assertFalse(event.bubbles)
        self.assertFalse(event.can_propagate())

    def test_can_propagate_per_direction(self) -> None:
        event = Event("x", propagation=LOCAL | DOWN)
        self.assertTrue(event.can_propagate())
        self.assertTrue(event.can_propagate(LOCAL))
        self.assertTrue(event.can_propagate(DOWN))
        self.assertFalse(event.can_propagate(UP))
        self.assertFalse(event.can_propagate(SATURATING))

    def test_bubbles_gates_everything_but_local(self) -> None:
        event = Event("x", propagation=LOCAL | UP | DOWN | SIBLINGS)
        event.bubbles = False
        self.assertTrue(event.can_propagate(LOCAL))
        for direction in (UP, DOWN, SIBLINGS):
            self.assertFalse(event.can_propagate(direction))
        self.assertEqual(event.get_propagation(), LOCAL | UP | DOWN | SIBLINGS)

    def test_stop_propagation_in_legacy_mode_is_full_stop(self) -> None:
        event = Event("x")
        event.stop_propagation()
        self.assertEqual(event.get_propagation(), NONE)
        self.assertFalse(event.bubbles)
        self.assertFalse(event.can_propagate())

    def test_stop_propagation_in_tree_mode_keeps_local(self) -> None:
        event = Event("x")
        event.legacy_mode = False
        event.stop_propagation()
        self.assertEqual(event.get_propagation(), LOCAL)
        self.assertTrue(event.can_propagate(LOCAL))
        self.assertFalse(event.can_propagate(DOWN))
        self.assertFalse(event.bubbles)

    def test_cancel_event_zeroes_mask(self) -> None:
        for legacy in (True, False):
            with self.subTest(legacy=legacy):
                event = Event("x")
                event.legacy_mode = legacy
                event.cancel_event()
                self.assertEqual(event.get_propagation(), NONE)
                self.assertFalse(event.can_propagate(LOCAL))

    def test_stop_immediate_propagation_matches_cancel(self) -> None:
        event = Event("x", propagation=LOCAL | SATURATING)
        event.stop_immediate_propagation()
        self.assertFalse(event.can_propagate())


if __name__ == "__main__":
    unittest.main()
