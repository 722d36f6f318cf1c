"""
Tests for proxy identity: IdentityTable and wrap_by_pointer.
"""
import logging
import weakref

from handlebridge.handles import HandleState, IdentityTable, WrapFailure


class TestWrapByPointer:
    """Deduplication of handles for pointers the native layer keeps."""

    def test_same_pointer_same_handle(self, bridge, kinds):
        """Two queries for the same bitmap return the identical handle."""
        first = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        second = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        assert first is second

    def test_new_handle_is_non_owning(self, bridge, kinds):
        handle = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        assert handle.state is HandleState.NON_OWNING_LIVE

    def test_returns_existing_owning_handle(self, bridge, kinds, heap):
        """A query for a resource script code created yields the creating handle."""
        address = heap.alloc()
        owner = bridge.wrap(address, kinds.get("bitmap"), owns=True)
        assert bridge.wrap_by_pointer(address, kinds.get("bitmap")) is owner
        assert owner.owns is True

    def test_distinct_pointers_distinct_handles(self, bridge, kinds):
        a = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        b = bridge.wrap_by_pointer(0xa010, kinds.get("bitmap"))
        assert a is not b

    def test_null_pointer_returns_failure(self, bridge, kinds):
        assert isinstance(bridge.wrap_by_pointer(None, kinds.get("mixer")), WrapFailure)

    def test_dependency_attached_on_first_wrap(self, bridge, kinds, heap):
        """Peers borrowed from a host keep that host alive."""
        host = bridge.wrap(heap.alloc(), kinds.get("host"), owns=True)
        peer = bridge.wrap_by_pointer(0xb000, kinds.get("peer"), dependency=host)
        assert peer.keep_alive is host
        bridge.destroy(host)

    def test_collected_handle_is_recreated(self, bridge, kinds, collect):
        """Once nothing references the proxy, a new query builds a fresh one."""
        first = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        ref = weakref.ref(first)
        del first
        collect()
        assert ref() is None
        second = bridge.wrap_by_pointer(0xa000, kinds.get("bitmap"))
        assert second.alive

    def test_dead_handle_never_returned(self, bridge, kinds, heap):
        """A destroyed proxy is not handed out for a reused address."""
        address = heap.alloc()
        old = bridge.wrap(address, kinds.get("bitmap"), owns=True)
        bridge.destroy(old)
        heap.live.add(address)  # native allocator reuses the address
        fresh = bridge.wrap_by_pointer(address, kinds.get("bitmap"))
        assert fresh is not old
        assert fresh.alive
        assert old.state is HandleState.DEAD


class TestIdentityTable:
    """IdentityTable weak-value semantics."""

    def test_table_does_not_keep_handles_alive(self, bridge, kinds, collect):
        handle = bridge.wrap(0xc000, kinds.get("peer"), owns=False)
        assert 0xc000 in bridge.identity_table
        del handle
        collect()
        assert 0xc000 not in bridge.identity_table
        assert len(bridge.identity_table) == 0

    def test_register_replaces_entry(self, bridge, kinds):
        table = IdentityTable()
        a = bridge.wrap(0xc000, kinds.get("peer"), owns=False)
        b = bridge.wrap(0xc010, kinds.get("peer"), owns=False)
        table.register(0xc000, a)
        table.register(0xc000, b)
        assert table.lookup(0xc000) is b

    def test_discard_only_matching_handle(self, bridge, kinds):
        table = IdentityTable()
        a = bridge.wrap(0xc000, kinds.get("peer"), owns=False)
        b = bridge.wrap(0xc010, kinds.get("peer"), owns=False)
        table.register(0xc000, a)
        assert table.discard(0xc000, b) is False
        assert table.lookup(0xc000) is a
        assert table.discard(0xc000, a) is True
        assert table.lookup(0xc000) is None

    def test_counts_by_kind(self, bridge, kinds):
        handles = [
            bridge.wrap_by_pointer(0xd000, kinds.get("bitmap")),
            bridge.wrap_by_pointer(0xd010, kinds.get("bitmap")),
            bridge.wrap_by_pointer(0xd020, kinds.get("mixer")),
        ]
        assert bridge.identity_table.counts_by_kind() == {"bitmap": 2, "mixer": 1}
        assert set(bridge.identity_table) == set(handles)

    def test_clear(self, bridge, kinds):
        handle = bridge.wrap_by_pointer(0xd000, kinds.get("bitmap"))
        bridge.identity_table.clear()
        assert len(bridge.identity_table) == 0
        assert handle.alive

    def test_stats(self, bridge, kinds, heap):
        owned = bridge.wrap(heap.alloc(), kinds.get("bitmap"), owns=True)
        borrowed = bridge.wrap_by_pointer(0xd000, kinds.get("mixer"))
        stats = bridge.get_stats()
        assert stats['total_handles'] == 2
        assert stats['owning'] == 1
        assert stats['by_kind'] == {"bitmap": 1, "mixer": 1}
        assert stats['pending_finalizers'] == 2
        assert stats['shutdown'] is False
        assert owned.alive and borrowed.alive

    def test_replacing_live_owner_warns(self, bridge, kinds, heap, caplog):
        """Two owners for one address would free it twice; that is reported."""
        address = heap.alloc()
        first = bridge.wrap(address, kinds.get("bitmap"), owns=True)
        caplog.set_level(logging.WARNING)
        second = bridge.wrap(address, kinds.get("bitmap"), owns=True)
        assert bridge.identity_table.lookup(address) is second
        assert any("replaced" in record.getMessage() and record.levelno == logging.WARNING
                   for record in caplog.records)
        bridge.invalidate(first)

    def test_replacing_borrowed_handle_is_quiet(self, bridge, kinds, caplog):
        first = bridge.wrap(0xc000, kinds.get("peer"), owns=False)
        caplog.set_level(logging.WARNING)
        second = bridge.wrap(0xc000, kinds.get("peer"), owns=False)
        assert bridge.identity_table.lookup(0xc000) is second
        assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
        assert first.alive
