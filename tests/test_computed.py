"""Tests for Computed values."""

import pytest

from tracefx import Computed, computed, reactive, register_effect


class TestComputed:
    def test_lazy_eval(self):
        call_count = 0
        state = reactive({"foo": 5})

        def fn():
            nonlocal call_count
            call_count += 1
            return state.foo * 2

        c = Computed(fn)
        assert call_count == 0  # not yet evaluated
        assert c.value == 10
        assert call_count == 1

    def test_caches_until_dirty(self):
        call_count = 0
        state = reactive({"foo": 1, "bar": 2})

        def fn():
            nonlocal call_count
            call_count += 1
            return state.foo + state.bar

        c = Computed(fn)
        assert c.value == 3
        assert c.value == 3
        assert call_count == 1  # cached, no re-eval
        assert not c.dirty

    def test_invalidation_is_lazy(self):
        call_count = 0
        state = reactive({"foo": 1, "bar": 2})

        def fn():
            nonlocal call_count
            call_count += 1
            return state.foo + state.bar

        c = Computed(fn)
        c.value
        state.foo = 10
        assert c.dirty
        assert call_count == 1  # nothing recomputed yet
        assert c.value == 12
        assert call_count == 2

    def test_dependency_tracking(self):
        """Computed tracks dependencies dynamically."""
        state = reactive({"flag": True, "a": 1, "b": 2})

        c = Computed(lambda: state.a if state.flag else state.b)
        assert c.value == 1

        state.flag = False
        assert c.value == 2  # now depends on b, not a
        state.a = 100
        assert not c.dirty

    def test_chained_computed(self):
        state = reactive({"n": 3})
        doubled = Computed(lambda: state.n * 2)
        quadrupled = Computed(lambda: doubled.value * 2)
        assert quadrupled.value == 12
        state.n = 5
        assert quadrupled.value == 20

    def test_dispose(self):
        state = reactive({"n": 5})
        c = Computed(lambda: state.n * 2)
        c.value
        c.dispose()
        assert c.dirty
        state.n = 10
        assert c.dirty
        # get() re-evaluates from scratch and tracks again
        assert c.value == 20
        state.n = 11
        assert c.dirty
        assert c.value == 22

    def test_dispose_disconnects_readers(self):
        state = reactive({"n": 1})
        c = Computed(lambda: state.n)
        log = []
        register_effect(lambda: log.append(c.value))
        c.dispose()
        state.n = 2
        assert log == [1]

    def test_getter_error_keeps_dirty(self):
        state = reactive({"n": 0})

        def fn():
            return 10 // state.n

        c = Computed(fn)
        with pytest.raises(ZeroDivisionError):
            c.value
        assert c.dirty
        state.n = 2
        assert c.value == 5

    def test_repr(self):
        def total():
            return 3

        c = Computed(total)
        assert repr(c) == "Computed(total, dirty)"
        c.value
        assert repr(c) == "Computed(total, cached=3)"


class TestPropagation:
    def test_propagates_to_effects(self):
        """Computed invalidation propagates to downstream effects."""
        state = reactive({"foo": 1, "bar": 2})
        total = Computed(lambda: state.foo + state.bar)
        log = []
        register_effect(lambda: log.append(total.value))
        assert log == [3]
        state.foo += 1
        assert log == [3, 4]

    def test_invalidates_once_until_read(self):
        state = reactive({"foo": 1})
        c = Computed(lambda: state.foo)
        runs = []
        register_effect(lambda: runs.append(c.value))
        c._dirty = True  # simulate a second invalidation before any read
        state.foo = 2
        assert runs == [1]  # already dirty: readers were not notified again

    def test_unread_computed_notifies_nobody(self):
        state = reactive({"foo": 1})
        c = Computed(lambda: state.foo)
        c.value
        state.foo = 2  # no subscribers on (c, "value"): silent
        assert c.value == 2


class TestComputedDecorator:
    def test_decorator_factory(self):
        state = reactive({"n": 7})

        @computed
        def doubled():
            return state.n * 2

        assert doubled.value == 14
        state.n = 3
        assert doubled.value == 6
