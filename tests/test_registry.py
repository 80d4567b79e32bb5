"""Tests for DependencyRegistry."""

from reactorstore import DependencyRegistry, Field
from reactorstore._registry import new_id


class FakeNode:
    def __init__(self):
        self._id = new_id()


class TestDependencyRegistry:
    def test_add_and_has(self):
        reg = DependencyRegistry()
        node = FakeNode()
        reg.add(node, "x")
        assert reg.has(node, "x")
        assert not reg.has(node, "y")

    def test_add_is_idempotent(self):
        reg = DependencyRegistry()
        node = FakeNode()
        reg.add(node, "x")
        reg.add(node, "x")
        assert len(reg) == 1

    def test_identity_not_equality(self):
        reg = DependencyRegistry()
        a, b = FakeNode(), FakeNode()
        reg.add(a, "x")
        assert reg.has(a, "x")
        assert not reg.has(b, "x")

    def test_markers_are_distinct_from_named_fields(self):
        reg = DependencyRegistry()
        node = FakeNode()
        reg.add(node, Field.LENGTH)
        assert reg.has(node, Field.LENGTH)
        assert not reg.has(node, "length")

    def test_keys(self):
        reg = DependencyRegistry()
        a, b = FakeNode(), FakeNode()
        reg.add(a, "x")
        reg.add(b, "x")
        reg.add(a, Field.SHAPE)
        assert set(reg.keys()) == {"x", Field.SHAPE}
        assert "x" in reg
        assert len(reg) == 3

    def test_reset(self):
        reg = DependencyRegistry()
        node = FakeNode()
        reg.add(node, "x")
        reg.reset()
        assert not reg.has(node, "x")
        assert reg.keys() == []

    def test_iter_pairs(self):
        reg = DependencyRegistry()
        node = FakeNode()
        reg.add(node, "x")
        assert list(reg) == [(node._id, "x")]
