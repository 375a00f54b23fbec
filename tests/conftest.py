"""Pytest configuration and fixtures."""

import pytest

from eventobserver import EventObserver, ObserverConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep EVENTOBSERVER_* variables from the host out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("EVENTOBSERVER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def observer():
    """Create an EventObserver with default configuration."""
    return EventObserver()


@pytest.fixture
def pair():
    """Create two unbound observers."""
    return EventObserver(), EventObserver()


@pytest.fixture
def isolating_observer():
    """Create an EventObserver that logs listener errors instead of raising."""
    return EventObserver(ObserverConfig(isolate_listener_errors=True))


@pytest.fixture
def recorder():
    """Listener factory that records (label, event) tuples into a shared list."""
    calls = []

    def make(label):
        def listener(event):
            calls.append((label, event))

        listener.calls = calls
        return listener

    make.calls = calls
    return make
