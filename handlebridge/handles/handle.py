"""
Host-side proxy for one native resource.

A Handle is split in two: the Handle object itself, which script code holds
and the collector traces, and a HandleCell with the mutable fields. The GC
finalizer can only reference the cell (a finalizer that referenced the Handle
would keep it alive forever), so everything destroy needs lives there.
"""
from __future__ import annotations

import weakref
from typing import Any, Optional

from .pointers import format_address
from .types import HandleState, ResourceKind


class HandleCell:
    """Mutable lifecycle state of a handle."""

    __slots__ = ("serial", "pointer", "key", "kind", "owns", "keep_alive")

    def __init__(
        self,
        serial: int,
        pointer: Any,
        key: int,
        kind: ResourceKind,
        owns: bool,
        keep_alive: Any = None,
    ):
        self.serial = serial
        self.pointer = pointer
        self.key: Optional[int] = key
        self.kind = kind
        self.owns = bool(owns)
        self.keep_alive = keep_alive

    @property
    def alive(self) -> bool:
        return self.pointer is not None

    def clear(self) -> None:
        """Enter the dead state. Idempotent."""
        self.keep_alive = None
        self.pointer = None
        self.key = None
        self.owns = False


class Handle:
    """Stand-in for a natively-owned resource.

    Handles are created by HandleBridge.wrap / wrap_by_pointer only. They
    compare by identity: the bridge guarantees one live Handle per native
    address, so ``a is b`` means "same resource".
    """

    __slots__ = ("_cell", "_finalizer", "__weakref__")

    def __init__(self, cell: HandleCell):
        self._cell = cell
        self._finalizer: Optional[weakref.finalize] = None

    @property
    def kind(self) -> ResourceKind:
        return self._cell.kind

    @property
    def pointer(self) -> Any:
        """Raw pointer as handed to wrap(), or None once dead.

        Wrapper code should call HandleBridge.unwrap instead so that kind
        and liveness are checked.
        """
        return self._cell.pointer

    @property
    def address(self) -> Optional[int]:
        return self._cell.key

    @property
    def owns(self) -> bool:
        return self._cell.owns

    @property
    def keep_alive(self) -> Any:
        return self._cell.keep_alive

    @property
    def alive(self) -> bool:
        return self._cell.alive

    @property
    def serial(self) -> int:
        return self._cell.serial

    @property
    def state(self) -> HandleState:
        if not self._cell.alive:
            return HandleState.DEAD
        if self._cell.owns:
            return HandleState.OWNING_LIVE
        return HandleState.NON_OWNING_LIVE

    @property
    def finalizer_pending(self) -> bool:
        return self._finalizer is not None and self._finalizer.alive

    def __repr__(self) -> str:
        cell = self._cell
        if not cell.alive:
            return f"{cell.kind.name}: (destroyed)"
        marker = "owned" if cell.owns else "borrowed"
        return f"{cell.kind.name}: {format_address(cell.key)} ({marker})"
