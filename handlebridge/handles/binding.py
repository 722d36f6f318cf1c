"""
Per-kind wrapper helper.

Packages the wrapper contract for one resource kind: wrap right after the
native constructor, adopt pointers the native layer keeps, unwrap before
every native call, and destroy through the shared owning check. The GC
finalizer is registered by the bridge itself when the kind allows it.

Example:
    bitmaps = KindBinding(bridge, BITMAP)
    bmp = bitmaps.construct(lib.al_create_bitmap, 64, 64)
    if not bmp:
        return None, str(bmp)
    sub = sub_bitmaps.construct(lib.al_create_sub_bitmap, bitmaps.get(bmp),
                                0, 0, 8, 8, dependency=bmp)
"""
from __future__ import annotations

from typing import Any, Callable, Union

from .bridge import HandleBridge
from .handle import Handle
from .types import ResourceKind, WrapFailure


class KindBinding:
    """Bridge operations pre-bound to one ResourceKind."""

    def __init__(self, bridge: HandleBridge, kind: ResourceKind):
        self.bridge = bridge
        self.kind = kind

    def construct(
        self,
        constructor: Callable[..., Any],
        *args: Any,
        dependency: Any = None,
        owns: bool = True,
    ) -> Union[Handle, WrapFailure]:
        """Call a native constructor and wrap its result."""
        pointer = constructor(*args)
        return self.bridge.wrap(pointer, self.kind, owns=owns, dependency=dependency)

    def adopt(self, pointer: Any, dependency: Any = None) -> Union[Handle, WrapFailure]:
        """Wrap a pointer returned by a native query; never owning."""
        return self.bridge.wrap_by_pointer(pointer, self.kind, dependency=dependency)

    def get(self, handle: Any) -> Any:
        """Checked pointer for a native call."""
        return self.bridge.unwrap(handle, self.kind)

    def destroy(self, handle: Any) -> bool:
        return self.bridge.destroy(handle, self.kind)

    def __repr__(self) -> str:
        return f"KindBinding({self.kind.name!r})"
