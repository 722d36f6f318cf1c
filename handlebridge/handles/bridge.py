"""
Handle lifecycle bridge.

Creates, deduplicates, checks and destroys handles to native resources.
Every wrapper module goes through the five operations here; nothing else
creates or mutates a Handle.

Explicit destroy and GC finalization both funnel through the same
"live and owning" check before calling the native destructor, and both end
in invalidation, so a resource is freed exactly once no matter which path
reaches it first.
"""
from __future__ import annotations

import gc
import itertools
import threading
import weakref
from typing import Any, Dict, Optional, Union

from handlebridge.logging.logger import get_logger
from handlebridge.logging.tags import TAG_FINALIZE, TAG_LEAK, TAG_LIFECYCLE, TAG_SHUTDOWN
from handlebridge.settings.settings_manager import DEFAULT_SETTINGS, BridgeSettings

from .errors import BridgeShutdownError, TypeMismatchError, UseAfterFreeError
from .handle import Handle, HandleCell
from .identity import IdentityTable
from .pointers import format_address, pointer_key
from .types import ResourceKind, WrapFailure

logger = get_logger(__name__)


def _destroyable_pointer(cell: HandleCell) -> Any:
    """The pointer to free, or None when this cell must not be freed."""
    if cell.pointer is not None and cell.owns:
        return cell.pointer
    return None


class HandleBridge:
    """
    Owner of the identity table and of every handle's lifecycle.

    One instance per process (see handlebridge.context); tests create their
    own.
    """

    def __init__(
        self,
        settings: Optional[BridgeSettings] = None,
        identity_table: Optional[IdentityTable] = None,
    ):
        self._settings = settings
        self._table = identity_table if identity_table is not None else IdentityTable()
        self._pending: Dict[int, weakref.finalize] = {}
        self._serials = itertools.count(1)
        self._lock = threading.RLock()
        self._shutdown = False

        self._trace = self._read_bool('lifecycle.trace')
        if settings is not None:
            settings.on_changed('lifecycle.trace', self._on_trace_changed)

        logger.info("HandleBridge initialized")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _read_bool(self, key: str) -> bool:
        default = bool(DEFAULT_SETTINGS[key])
        if self._settings is None:
            return default
        return self._settings.get_bool(key, default)

    def _on_trace_changed(self, new_value: Any, old_value: Any) -> None:
        self._trace = BridgeSettings.to_bool(new_value)

    # ------------------------------------------------------------------
    # Lifetime operations
    # ------------------------------------------------------------------

    def wrap(
        self,
        pointer: Any,
        kind: ResourceKind,
        owns: bool = True,
        dependency: Any = None,
    ) -> Union[Handle, WrapFailure]:
        """
        Create a handle for a pointer fresh from a native constructor.

        Args:
            pointer: Native address; None/0/NULL means the constructor failed.
            kind: Descriptor of the resource.
            owns: Whether this handle is responsible for the native destructor.
            dependency: Host value that must outlive the new handle. Held
                strongly until the handle is invalidated.

        Returns:
            The new Handle, or a falsy WrapFailure when ``pointer`` is NULL.

        Raises:
            BridgeShutdownError: If the bridge has been shut down.
            TypeError: If ``kind`` is not a ResourceKind or ``pointer`` is
                not an address.
            ValueError: If ``pointer`` is a negative integer.
        """
        if not isinstance(kind, ResourceKind):
            raise TypeError(f"kind must be a ResourceKind, got {type(kind).__name__}")
        if self._shutdown:
            raise BridgeShutdownError(f"cannot create '{kind.name}' after shutdown", kind.name)

        key = pointer_key(pointer)
        if key is None:
            logger.debug("Native constructor for '%s' returned NULL", kind.name)
            return WrapFailure(kind.name, f"cannot create object '{kind.name}'")

        with self._lock:
            cell = HandleCell(next(self._serials), pointer, key, kind, owns, dependency)
            handle = Handle(cell)
            self._table.register(key, handle)
            if kind.auto_finalize:
                finalizer = weakref.finalize(handle, self._finalize_cell, cell)
                # Shutdown runs pending finalizers itself, dependents first.
                finalizer.atexit = False
                handle._finalizer = finalizer
                self._pending[cell.serial] = finalizer

        if self._trace:
            logger.debug(f"{TAG_LIFECYCLE} new object: %s (%s)", kind.name, format_address(key))
        return handle

    def wrap_by_pointer(
        self,
        pointer: Any,
        kind: ResourceKind,
        dependency: Any = None,
    ) -> Union[Handle, WrapFailure]:
        """
        Return the handle for a pointer the native layer still owns.

        If a live handle for this address exists it is returned unchanged,
        so repeated queries yield the identical proxy. Otherwise a new
        non-owning handle is created.
        """
        key = pointer_key(pointer)
        if key is not None:
            existing = self._table.lookup(key)
            if existing is not None and existing.alive:
                if existing.kind != kind:
                    logger.debug(
                        "Address %s already wrapped as '%s', requested as '%s'",
                        format_address(key), existing.kind.name, kind.name,
                    )
                return existing
        return self.wrap(pointer, kind, owns=False, dependency=dependency)

    def unwrap(self, handle: Any, expected_kind: ResourceKind) -> Any:
        """
        Return the native pointer behind ``handle`` for a native call.

        Raises:
            TypeMismatchError: If ``handle`` is not a handle of ``expected_kind``.
            UseAfterFreeError: If the handle has been destroyed.
        """
        cell = self._checked_cell(handle, expected_kind)
        if cell.pointer is None:
            raise UseAfterFreeError(expected_kind.name)
        return cell.pointer

    def unwrap_for_destroy(self, handle: Any, expected_kind: ResourceKind) -> Any:
        """
        Return the pointer to free, or None if nothing should be freed.

        None covers both "already destroyed" and "not owned"; neither is an
        error.

        Raises:
            TypeMismatchError: If ``handle`` is not a handle of ``expected_kind``.
        """
        cell = self._checked_cell(handle, expected_kind)
        return _destroyable_pointer(cell)

    def invalidate(self, handle: Handle) -> None:
        """Move ``handle`` into the terminal dead state. Idempotent."""
        if not isinstance(handle, Handle):
            raise TypeMismatchError("handle", type(handle).__name__)
        with self._lock:
            finalizer = handle._finalizer
            if finalizer is not None:
                finalizer.detach()
                handle._finalizer = None
            self._invalidate_cell(handle._cell, handle)

    # ------------------------------------------------------------------
    # Destruction
    # ------------------------------------------------------------------

    def destroy(self, handle: Any, expected_kind: Optional[ResourceKind] = None) -> bool:
        """
        Explicitly destroy ``handle``.

        Calling this twice, or on a non-owning handle, is a no-op.

        Returns:
            True if the native destructor ran.

        Raises:
            TypeMismatchError: On a kind mismatch.
        """
        if expected_kind is None:
            if not isinstance(handle, Handle):
                raise TypeMismatchError("handle", type(handle).__name__)
            expected_kind = handle.kind
        pointer = self.unwrap_for_destroy(handle, expected_kind)
        if pointer is None:
            return False
        try:
            handle.kind.destructor(pointer)
        finally:
            # A destructor that raised leaves the native state unknown;
            # never let a second path free it again.
            self.invalidate(handle)
        return True

    def _finalize_cell(self, cell: HandleCell) -> None:
        """GC finalizer. Runs after the Handle object itself is gone."""
        pointer = _destroyable_pointer(cell)
        try:
            if pointer is not None:
                logger.debug(f"{TAG_FINALIZE} destroying %s (%s)", cell.kind.name, format_address(cell.key))
                cell.kind.destructor(pointer)
        except Exception:
            logger.error(
                f"{TAG_FINALIZE} destructor for '%s' failed", cell.kind.name, exc_info=True
            )
        finally:
            self._invalidate_cell(cell)

    def _invalidate_cell(self, cell: HandleCell, handle: Optional[Handle] = None) -> None:
        with self._lock:
            self._pending.pop(cell.serial, None)
            if not cell.alive:
                return
            key = cell.key
            if handle is not None and key is not None:
                self._table.discard(key, handle)
            # Drops the dependency last: the ancestor may be finalized
            # right here once this was its final reference.
            cell.clear()
        if self._trace:
            logger.debug(f"{TAG_LIFECYCLE} clear object: %s (%s)", cell.kind.name, format_address(key))

    def _checked_cell(self, handle: Any, expected_kind: ResourceKind) -> HandleCell:
        if not isinstance(handle, Handle):
            raise TypeMismatchError(expected_kind.name, type(handle).__name__)
        cell = handle._cell
        if cell.kind != expected_kind:
            raise TypeMismatchError(expected_kind.name, cell.kind.name)
        return cell

    # ------------------------------------------------------------------
    # Shutdown and diagnostics
    # ------------------------------------------------------------------

    @property
    def identity_table(self) -> IdentityTable:
        return self._table

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def shutdown(self) -> None:
        """
        Tear the bridge down.

        Pending finalizers run newest first, so dependents are destroyed
        before the values they depend on. Handles of kinds that forbid
        automatic finalization are left alone and reported.
        """
        if self._shutdown:
            return
        self._shutdown = True
        if self._settings is not None:
            self._settings.off_changed('lifecycle.trace', self._on_trace_changed)

        logger.info(f"{TAG_SHUTDOWN} Shutting down handle bridge...")

        if self._read_bool('shutdown.collect'):
            gc.collect()

        finalized = 0
        if self._read_bool('shutdown.finalize_pending'):
            with self._lock:
                serials = sorted(self._pending, reverse=True)
            for serial in serials:
                finalizer = self._pending.get(serial)
                if finalizer is not None and finalizer.alive:
                    finalizer()
                    finalized += 1

        for handle in self._table.live_handles():
            if handle.owns and not handle.kind.auto_finalize:
                logger.warning(
                    f"{TAG_LEAK} %r still alive at shutdown; '%s' requires explicit destroy",
                    handle, handle.kind.name,
                )

        self._table.clear()
        logger.info(f"{TAG_SHUTDOWN} Handle bridge shut down (%d finalized)", finalized)

    def get_stats(self) -> Dict[str, Any]:
        """Get handle bridge statistics."""
        live = self._table.live_handles()
        return {
            'total_handles': len(live),
            'owning': sum(1 for handle in live if handle.owns),
            'by_kind': self._table.counts_by_kind(),
            'pending_finalizers': len(self._pending),
            'shutdown': self._shutdown,
        }
