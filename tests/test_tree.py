"""Tests for parent/child linking and tree queries."""

from __future__ import annotations

import gc
from typing import Any
import unittest

from event_tree.emitter import Emitter
from event_tree.exceptions import TreeCycleError
from event_tree.interfaces import Propagatable


def _record(emitter: Emitter, name: str, log: list[tuple[str, Any]]) -> None:
    emitter.on(name, lambda child: log.append((name, child)))


class TreeLinkTests(unittest.TestCase):
    """Validate add/remove semantics and notifications."""

    def test_add_child_links_both_ways(self) -> None:
        parent, child = Emitter(), Emitter()
        added: list[tuple[str, Any]] = []
        _record(parent, "childAdded", added)
        parent.add_child(child)
        self.assertEqual(parent.get_children(), [child])
        self.assertIs(child.get_parent(), parent)
        self.assertTrue(child.has_parent())
        self.assertTrue(parent.has_child(child))
        self.assertEqual(added, [("childAdded", child)])

    def test_add_child_is_idempotent(self) -> None:
        parent, child = Emitter(), Emitter()
        added: list[tuple[str, Any]] = []
        _record(parent, "childAdded", added)
        parent.add_child(child).add_child(child)
        self.assertEqual(len(parent.get_children()), 1)
        self.assertEqual(len(added), 1)

    def test_add_child_reparents(self) -> None:
        old, new, child = Emitter(), Emitter(), Emitter()
        log: list[tuple[str, Any]] = []
        old.add_child(child)
        _record(old, "childRemoved", log)
        _record(new, "childAdded", log)
        new.add_child(child)
        self.assertEqual(old.get_children(), [])
        self.assertEqual(new.get_children(), [child])
        self.assertIs(child.get_parent(), new)
        self.assertEqual(log, [("childRemoved", child), ("childAdded", child)])

    def test_remove_child_notifications(self) -> None:
        parent, child = Emitter(), Emitter()
        log: list[tuple[str, Any]] = []
        parent.add_child(child)
        child.on("beforeChildRemoved", lambda c: log.append(("child:before", c)))
        parent.on("beforeChildRemoved", lambda c: log.append(("parent:before", c)))
        parent.on("childRemoved", lambda c: log.append(("parent:removed", c)))
        parent.remove_child(child)
        self.assertEqual(
            log,
            [("child:before", child), ("parent:before", child), ("parent:removed", child)],
        )
        self.assertIsNone(child.get_parent())
        self.assertFalse(parent.has_child(child))

    def test_remove_missing_child_is_noop(self) -> None:
        parent, stranger = Emitter(), Emitter()
        log: list[tuple[str, Any]] = []
        _record(parent, "childRemoved", log)
        parent.remove_child(stranger)
        self.assertEqual(log, [])

    def test_remove_self_and_remove_all_children(self) -> None:
        parent, a, b = Emitter(), Emitter(), Emitter()
        parent.add_child(a).add_child(b)
        a.remove_self()
        self.assertEqual(parent.get_children(), [b])
        parent.remove_all_children()
        self.assertEqual(parent.get_children(), [])
        self.assertFalse(b.has_parent())
        Emitter().remove_self()

    def test_cycles_are_rejected(self) -> None:
        root, child, grandchild = Emitter(), Emitter(), Emitter()
        root.add_child(child)
        child.add_child(grandchild)
        with self.assertRaises(TreeCycleError):
            grandchild.add_child(root)
        with self.assertRaises(TreeCycleError):
            root.add_child(root)
        self.assertIs(child.get_parent(), root)

    def test_parent_is_a_weak_reference(self) -> None:
        child = Emitter()
        parent = Emitter()
        parent.add_child(child)
        del parent
        gc.collect()
        self.assertIsNone(child.get_parent())
        self.assertEqual(child.get_siblings(), [])

    def test_shutdown_clears_listeners_and_links(self) -> None:
        parent, node, child = Emitter(), Emitter(), Emitter()
        parent.add_child(node)
        node.add_child(child)
        node.on("a", print)
        node.shutdown()
        self.assertEqual(node.event_names(), [])
        self.assertFalse(node.has_parent())
        self.assertEqual(node.get_children(), [])
        self.assertFalse(child.has_parent())
        self.assertEqual(parent.get_children(), [])


class TreeQueryTests(unittest.TestCase):
    """Validate siblings, descendants and relations."""

    def setUp(self) -> None:
        self.parent = Emitter()
        self.node = Emitter()
        self.sibling = Emitter()
        self.child = Emitter()
        self.grandchild_a = Emitter()
        self.grandchild_b = Emitter()
        self.nephew = Emitter()
        self.parent.add_child(self.node)
        self.parent.add_child(self.sibling)
        self.node.add_child(self.child)
        self.child.add_child(self.grandchild_a)
        self.child.add_child(self.grandchild_b)
        self.sibling.add_child(self.nephew)

    def test_get_siblings(self) -> None:
        self.assertEqual(self.node.get_siblings(), [self.sibling])
        self.assertEqual(self.parent.get_siblings(), [])

    def test_get_all_children_depth_first(self) -> None:
        self.assertEqual(
            self.node.get_all_children(),
            [self.child, self.grandchild_a, self.grandchild_b],
        )

    def test_get_all_children_excludes_subtrees(self) -> None:
        self.assertEqual(self.parent.get_all_children([self.child]), [self.node, self.sibling, self.nephew])

    def test_get_relations_covers_tree_once(self) -> None:
        relations = self.node.get_relations()
        self.assertEqual(
            relations,
            [
                self.node,
                self.sibling,
                self.nephew,
                self.child,
                self.grandchild_a,
                self.grandchild_b,
                self.parent,
            ],
        )

    def test_snapshots_are_copies(self) -> None:
        self.node.get_children().clear()
        self.node.get_siblings().clear()
        self.assertEqual(self.node.get_children(), [self.child])
        self.assertEqual(self.node.get_siblings(), [self.sibling])

    def test_call_on_relatives_receive_propagatables(self) -> None:
        received = self.node.call_on_children(lambda c: c)
        received += self.node.call_on_siblings(lambda s: s)
        received.append(self.node.call_on_parent(lambda p: p))
        for relative in received:
            self.assertIsInstance(relative, Propagatable)
        self.assertEqual(received, [self.child, self.sibling, self.parent])

    def test_call_on_relatives(self) -> None:
        self.assertIs(self.node.call_on_parent(lambda p: p), self.parent)
        self.assertIsNone(self.parent.call_on_parent(lambda p: p))
        self.assertEqual(
            self.node.call_on_children(lambda c: self.grandchild_a in c.get_children()),
            [True],
        )
        self.assertEqual(self.node.call_on_siblings(lambda s: len(s.get_children())), [1])


if __name__ == "__main__":
    unittest.main()
