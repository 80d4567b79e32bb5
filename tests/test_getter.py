"""Tests for Getter."""

import pytest

from reactorstore import Getter, NotComputed
from reactorstore._tracking import Tracker
from reactorstore.observable import wrap


def make(fn, state=None):
    tracker = Tracker({})
    getter = Getter("g", fn, tracker)
    tracker._getters["g"] = getter
    return getter, tracker, wrap(state if state is not None else {"count": 1}, tracker)


class TestGetter:
    def test_created_invalid(self):
        getter, _, _ = make(lambda state, getters: 1)
        assert getter.invalid
        assert not getter.valid

    def test_lazy_eval(self):
        call_count = 0

        def fn(state, getters):
            nonlocal call_count
            call_count += 1
            return state["count"] * 2

        getter, _, state = make(fn)
        assert call_count == 0  # not yet evaluated
        assert getter.run(state, None) == 2
        assert call_count == 1
        assert getter.valid

    def test_caches_until_invalidated(self):
        call_count = 0

        def fn(state, getters):
            nonlocal call_count
            call_count += 1
            return state["count"]

        getter, _, state = make(fn)
        getter.run(state, None)
        getter.run(state, None)
        assert call_count == 1
        getter.invalidate()
        getter.run(state, None)
        assert call_count == 2

    def test_value_requires_computation(self):
        getter, _, state = make(lambda state, getters: state["count"])
        with pytest.raises(NotComputed):
            getter.value
        getter.run(state, None)
        assert getter.value == 1
        getter.invalidate()
        with pytest.raises(NotComputed):
            getter.value

    def test_records_reads(self):
        getter, _, state = make(lambda state, getters: state["count"])
        getter.run(state, None)
        assert getter.registry.has(state, "count")

    def test_fresh_registry_per_computation(self):
        state_data = {"flag": True, "a": 1, "b": 2}
        getter, _, state = make(
            lambda state, getters: state["a"] if state["flag"] else state["b"], state_data
        )
        getter.run(state, None)
        assert getter.registry.has(state, "a")

        state["flag"] = False
        assert getter.invalid
        assert getter.run(state, None) == 2
        assert getter.registry.has(state, "b")
        assert not getter.registry.has(state, "a")

    def test_failure_pops_frame_and_stays_invalid(self):
        def fn(state, getters):
            raise ValueError("boom")

        getter, tracker, state = make(fn)
        with pytest.raises(ValueError):
            getter.run(state, None)
        assert tracker.running == []
        assert getter.invalid

    def test_write_invalidates(self):
        getter, _, state = make(lambda state, getters: state["count"])
        getter.run(state, None)
        state["count"] = 5
        assert getter.invalid
        assert getter.run(state, None) == 5

    def test_repr(self):
        getter, _, state = make(lambda state, getters: state["count"])
        assert repr(getter) == "Getter('g', invalid)"
        getter.run(state, None)
        assert repr(getter) == "Getter('g', cached=1)"
