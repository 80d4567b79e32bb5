"""Tests for the Tracker: frame stack, trigger cascades and thread confinement."""

import threading

import pytest

from reactorstore import CyclicDependency, DependencyRegistry, Getter, Store
from reactorstore._tracking import Tracker


class TestTrack:
    def test_track_without_frames_is_noop(self):
        s = Store({"a": 1})
        s.state.a
        s.define_getter("g", lambda state, getters: 1)
        s.getters.g
        assert s.dependency_keys("g") == []

    def test_reads_attributed_to_every_frame(self):
        s = Store({"x": 1, "y": 2})
        s.define_getter("inner", lambda state, getters: state.y)
        s.define_getter("outer", lambda state, getters: state.x + getters.inner)
        s.getters.outer
        outer = s.get_getter("outer")
        assert outer.registry.has(s.state, "x")
        assert outer.registry.has(s.state, "y")
        assert not s.get_getter("inner").registry.has(s.state, "x")

    def test_computing_pops_on_error(self):
        tracker = Tracker({})
        getter = Getter("g", lambda state, getters: None, tracker)
        with pytest.raises(KeyError):
            with tracker.computing(getter, DependencyRegistry()):
                assert tracker.running == ["g"]
                raise KeyError("x")
        assert tracker.running == []

    def test_reentry_rejected(self):
        tracker = Tracker({})
        getter = Getter("g", lambda state, getters: None, tracker)
        with tracker.computing(getter, DependencyRegistry()):
            with pytest.raises(CyclicDependency):
                with tracker.computing(getter, DependencyRegistry()):
                    pass
            assert tracker.running == ["g"]


class TestTrigger:
    def test_already_invalid_getter_does_not_cascade(self, monkeypatch):
        s = Store({"x": 1})
        s.define_getter("a", lambda state, getters: state.x)
        s.define_getter("b", lambda state, getters: getters.a)
        s.getters.b
        s.state.x = 2

        invalidated = []
        original = Getter.invalidate

        def recording(self):
            invalidated.append(self.name)
            original(self)

        monkeypatch.setattr(Getter, "invalidate", recording)
        s.state.x = 3
        assert invalidated == []

    def test_diamond_invalidates_each_getter_once(self, monkeypatch):
        s = Store({"x": 1})
        s.define_getters(
            {
                "left": lambda state, getters: state.x + 1,
                "right": lambda state, getters: state.x + 2,
                "top": lambda state, getters: getters.left + getters.right,
            }
        )
        assert s.getters.top == 5

        invalidated = []
        original = Getter.invalidate

        def recording(self):
            invalidated.append(self.name)
            original(self)

        monkeypatch.setattr(Getter, "invalidate", recording)
        s.state.x = 2
        assert sorted(invalidated) == ["left", "right", "top"]
        assert s.getters.top == 7


class TestThreadConfinement:
    def test_foreign_thread_write_rejected(self):
        s = Store({"a": 1}, check_thread=True)
        errors = []

        def write():
            try:
                s.state.a = 2
            except RuntimeError as exc:
                errors.append(exc)

        t = threading.Thread(target=write)
        t.start()
        t.join()
        assert len(errors) == 1
        assert s.state.a == 1

    def test_owner_thread_write_allowed(self):
        s = Store({"a": 1}, check_thread=True)
        s.state.a = 2
        assert s.state.a == 2

    def test_check_off_by_default(self):
        s = Store({"a": 1})
        t = threading.Thread(target=lambda: s.state.update(a=2))
        t.start()
        t.join()
        assert s.state.a == 2
