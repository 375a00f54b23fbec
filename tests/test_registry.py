"""Tests for ListenerRegistry."""

import logging

import pytest

from eventobserver.core.events import ListenerRegistry

from .sample_events import Ping

KEY = Ping.type_key()


@pytest.fixture
def registry():
    """Create a registry that propagates listener errors."""
    return ListenerRegistry()


class TestRegistryOrdering:
    """Tests for registration order."""

    def test_dispatch_in_registration_order(self, registry, recorder):
        registry.register(KEY, recorder("first"))
        registry.register(KEY, recorder("second"))
        registry.register(KEY, recorder("third"))

        assert registry.dispatch(KEY, Ping()) is True
        assert [label for label, _ in recorder.calls] == ["first", "second", "third"]

    def test_prepend_runs_before_earlier_registrations(self, registry, recorder):
        registry.register(KEY, recorder("plain"))
        registry.register(KEY, recorder("prepended"), prepend=True)
        registry.register(KEY, recorder("late"))

        registry.dispatch(KEY, Ping())

        assert [label for label, _ in recorder.calls] == ["prepended", "plain", "late"]

    def test_latest_prepend_goes_first(self, registry, recorder):
        registry.register(KEY, recorder("p1"), prepend=True)
        registry.register(KEY, recorder("p2"), prepend=True)

        registry.dispatch(KEY, Ping())

        assert [label for label, _ in recorder.calls] == ["p2", "p1"]

    def test_dispatch_passes_event(self, registry, recorder):
        event = Ping("payload")
        registry.register(KEY, recorder("only"))

        registry.dispatch(KEY, event)

        assert recorder.calls == [("only", event)]

    def test_dispatch_without_listeners(self, registry):
        assert registry.dispatch(KEY, Ping()) is False


class TestRegistryMembership:
    """Tests for register/unregister/has."""

    def test_has(self, registry):
        def listener(event):
            pass

        assert not registry.has(KEY, listener)
        registry.register(KEY, listener)
        assert registry.has(KEY, listener)

    def test_unregister_removes_first_match_only(self, registry, recorder):
        listener = recorder("dup")
        registry.register(KEY, listener)
        registry.register(KEY, listener)

        registry.unregister(KEY, listener)

        assert registry.listener_count(KEY) == 1
        registry.dispatch(KEY, Ping())
        assert len(recorder.calls) == 1

    def test_unregister_absent_is_noop(self, registry):
        registry.unregister(KEY, print)
        registry.register(KEY, len)
        registry.unregister(KEY, print)

        assert registry.listeners(KEY) == [len]

    def test_unregister_all_for_key(self, registry):
        registry.register(KEY, len)
        registry.register("other", len)

        registry.unregister_all(KEY)

        assert registry.listener_count(KEY) == 0
        assert registry.event_keys() == ["other"]

    def test_unregister_all(self, registry):
        registry.register(KEY, len)
        registry.register("other", len)

        registry.unregister_all()

        assert registry.event_keys() == []

    def test_rejects_non_callable(self, registry):
        with pytest.raises(TypeError):
            registry.register(KEY, "not callable")
        assert registry.listener_count(KEY) == 0

    def test_stats(self, registry):
        registry.register(KEY, len)
        registry.register(KEY, print)

        stats = registry.get_stats()

        assert stats["total_event_types"] == 1
        assert stats["total_listeners"] == 2
        assert stats["listeners_by_type"] == {KEY: 2}


class TestRegistryOnce:
    """Tests for once registrations."""

    def test_once_fires_once(self, registry, recorder):
        registry.register(KEY, recorder("once"), once=True)

        assert registry.dispatch(KEY, Ping()) is True
        assert registry.dispatch(KEY, Ping()) is False
        assert len(recorder.calls) == 1

    def test_once_not_refired_by_reentrant_dispatch(self, registry):
        calls = []

        def once_listener(event):
            calls.append(event)
            registry.dispatch(KEY, Ping("nested"))

        registry.register(KEY, once_listener, once=True)
        registry.dispatch(KEY, Ping("outer"))

        assert [e.data for e in calls] == ["outer"]


class TestRegistryReentrancy:
    """Tests for listeners that mutate the registry during dispatch."""

    def test_listener_removed_by_earlier_listener_is_skipped(self, registry, recorder):
        victim = recorder("victim")

        def remover(event):
            registry.unregister(KEY, victim)

        registry.register(KEY, remover)
        registry.register(KEY, victim)

        assert registry.dispatch(KEY, Ping()) is True
        assert recorder.calls == []

    def test_listener_added_during_dispatch_runs_next_time(self, registry, recorder):
        late = recorder("late")

        def adder(event):
            if not registry.has(KEY, late):
                registry.register(KEY, late)

        registry.register(KEY, adder)

        registry.dispatch(KEY, Ping())
        assert recorder.calls == []

        registry.dispatch(KEY, Ping())
        assert len(recorder.calls) == 1

    def test_clear_during_dispatch(self, registry, recorder):
        def clearer(event):
            registry.unregister_all()

        registry.register(KEY, clearer)
        registry.register(KEY, recorder("after"))

        registry.dispatch(KEY, Ping())

        assert recorder.calls == []
        assert registry.event_keys() == []

    def test_self_removal(self, registry, recorder):
        def self_removing(event):
            registry.unregister(KEY, self_removing)

        registry.register(KEY, self_removing)
        registry.register(KEY, recorder("other"))

        registry.dispatch(KEY, Ping())

        assert len(recorder.calls) == 1
        assert not registry.has(KEY, self_removing)


class TestRegistryErrors:
    """Tests for listener exceptions."""

    def test_errors_propagate_by_default(self, registry, recorder):
        def failing(event):
            raise RuntimeError("boom")

        registry.register(KEY, failing)
        registry.register(KEY, recorder("after"))

        with pytest.raises(RuntimeError, match="boom"):
            registry.dispatch(KEY, Ping())
        assert recorder.calls == []

    def test_isolated_errors_are_logged(self, recorder, caplog):
        registry = ListenerRegistry(isolate_errors=True)

        def failing(event):
            raise ValueError("Bug")

        registry.register(KEY, failing)
        registry.register(KEY, recorder("after"))

        with caplog.at_level(logging.ERROR):
            assert registry.dispatch(KEY, Ping()) is True

        assert len(recorder.calls) == 1
        assert "Bug" in caplog.text
        assert "failing" in caplog.text


class TestRegistrationRemovedFlag:
    """Tests for registrations leaving the registry."""

    def test_removal_marks_registration(self, registry):
        registry.register(KEY, len)
        registry.register(KEY, print)
        first, second = registry._registrations[KEY]

        registry.unregister(KEY, len)
        assert first.removed and not second.removed

        registry.unregister_all()
        assert second.removed

    def test_reregistered_listener_waits_for_next_dispatch(self, registry, recorder):
        listener = recorder("listener")

        def reregister(event):
            registry.unregister(KEY, listener)
            registry.register(KEY, listener)

        registry.register(KEY, reregister, once=True)
        registry.register(KEY, listener)

        registry.dispatch(KEY, Ping())
        assert recorder.calls == []

        registry.dispatch(KEY, Ping())
        assert len(recorder.calls) == 1

    def test_many_listeners(self, registry):
        calls = []
        for index in range(2000):
            registry.register(KEY, lambda event, index=index: calls.append(index))

        registry.dispatch(KEY, Ping())

        assert calls == list(range(2000))
