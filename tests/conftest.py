"""
Shared pytest fixtures for handle bridge tests.
"""
import gc
import sys

import pytest
from PySide6.QtCore import QCoreApplication

from handlebridge.handles import HandleBridge, KindRegistry


class FakeNativeHeap:
    """Stand-in for a native library: hands out addresses and checks frees.

    Freeing an address twice, or one it never allocated, raises. Inside a GC
    finalizer that shows up as a logged error plus a missing entry in
    ``freed``.
    """

    def __init__(self, start: int = 0x1000):
        self._next = start
        self.live = set()
        self.freed = []

    def alloc(self, *args):
        address = self._next
        self._next += 0x10
        self.live.add(address)
        return address

    def fail(self, *args):
        return None

    def free(self, address):
        if address not in self.live:
            raise AssertionError(f"invalid free of 0x{address:x}")
        self.live.remove(address)
        self.freed.append(address)


@pytest.fixture
def heap():
    return FakeNativeHeap()


@pytest.fixture
def kinds(heap):
    """A registry shaped like a small multimedia binding."""
    registry = KindRegistry()
    registry.define("config", heap.free)
    registry.define("display", heap.free)
    registry.define("bitmap", heap.free)
    registry.define("sample", heap.free)
    registry.define("sample_instance", heap.free)
    registry.define("mixer", heap.free)
    registry.define("host", heap.free, auto_finalize=False)
    registry.define("peer")
    return registry


@pytest.fixture
def bridge():
    """Create HandleBridge instance for testing."""
    instance = HandleBridge()
    yield instance
    instance.shutdown()


@pytest.fixture
def collect():
    """Force a full collection; returns the collector for repeated use."""
    def _collect():
        for _ in range(3):
            gc.collect()
    return _collect


@pytest.fixture(scope="session")
def qt_app():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def settings_manager(qt_app, tmp_path):
    """Create BridgeSettings backed by a throwaway INI file."""
    from handlebridge.settings import BridgeSettings
    manager = BridgeSettings(path=tmp_path / "bridge.ini")
    yield manager
    manager.clear()
