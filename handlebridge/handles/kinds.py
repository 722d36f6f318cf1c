"""
Registry of resource kinds.

Each wrapper module declares its kinds once at import time, the way a
binding would create one metatable per native type.
"""
from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from handlebridge.logging.logger import get_logger

from .errors import KindRegistrationError
from .types import NativeDestructor, ResourceKind, _no_destructor

logger = get_logger(__name__)


class KindRegistry:
    """Name -> ResourceKind table with duplicate detection."""

    def __init__(self):
        self._kinds: Dict[str, ResourceKind] = {}
        self._lock = threading.RLock()

    def define(
        self,
        name: str,
        destructor: Optional[NativeDestructor] = None,
        auto_finalize: bool = True,
    ) -> ResourceKind:
        """
        Declare a new kind.

        Args:
            name: Diagnostic name, unique within this registry
            destructor: Native free function; None for kinds that are never
                owned by script code
            auto_finalize: Whether the garbage collector may destroy
                handles of this kind

        Raises:
            KindRegistrationError: If ``name`` is already defined
        """
        kind = ResourceKind(
            name=name,
            destructor=destructor if destructor is not None else _no_destructor,
            auto_finalize=auto_finalize,
        )
        return self.add(kind)

    def add(self, kind: ResourceKind) -> ResourceKind:
        with self._lock:
            if kind.name in self._kinds:
                raise KindRegistrationError(f"resource kind '{kind.name}' already defined", kind.name)
            self._kinds[kind.name] = kind
        if not kind.auto_finalize:
            logger.debug("Kind '%s' declared without automatic finalization", kind.name)
        return kind

    def get(self, name: str) -> ResourceKind:
        """Return the kind called ``name``; KeyError if undefined."""
        with self._lock:
            try:
                return self._kinds[name]
            except KeyError:
                raise KeyError(f"unknown resource kind '{name}'") from None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._kinds)

    def __contains__(self, name: Any) -> bool:
        with self._lock:
            return name in self._kinds

    def __len__(self) -> int:
        with self._lock:
            return len(self._kinds)
