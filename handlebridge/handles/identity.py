"""
Weak-valued identity table: native address -> live Handle.

The table decides proxy identity, never resource validity. It holds no
strong reference to any Handle; an entry disappears as soon as CPython
reclaims the Handle it points at.
"""
from __future__ import annotations

import threading
import weakref
from typing import Dict, Iterator, List, Optional

from handlebridge.logging.logger import get_logger, is_verbose_logging

from .handle import Handle

logger = get_logger(__name__)


class IdentityTable:
    """Process-wide address -> Handle map with weak values."""

    def __init__(self):
        self._entries: "weakref.WeakValueDictionary[int, Handle]" = weakref.WeakValueDictionary()
        # Re-entrant: a finalizer can fire during any allocation, including
        # one made while this lock is held.
        self._lock = threading.RLock()

    def lookup(self, key: int) -> Optional[Handle]:
        """Return the live Handle registered for ``key``, if any."""
        with self._lock:
            return self._entries.get(key)

    def register(self, key: int, handle: Handle) -> None:
        """Map ``key`` to ``handle``, replacing any earlier entry."""
        with self._lock:
            previous = self._entries.get(key)
            self._entries[key] = handle
        if previous is None or previous is handle:
            return
        if previous.alive and previous.owns:
            # Both handles will try to free the same native object.
            logger.warning("Owning handle %r replaced by %r for the same address", previous, handle)
        elif is_verbose_logging():
            logger.debug("Identity entry 0x%x replaced (%r -> %r)", key, previous, handle)

    def discard(self, key: int, handle: Handle) -> bool:
        """Remove the entry for ``key`` only if it still maps to ``handle``."""
        with self._lock:
            if self._entries.get(key) is handle:
                del self._entries[key]
                return True
            return False

    def live_handles(self) -> List[Handle]:
        """Snapshot of every Handle currently reachable through the table."""
        with self._lock:
            return list(self._entries.values())

    def counts_by_kind(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for handle in self.live_handles():
            counts[handle.kind.name] = counts.get(handle.kind.name, 0) + 1
        return counts

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: int) -> bool:
        return self.lookup(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Handle]:
        return iter(self.live_handles())
