"""
Type definitions for native resource handles.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable


class HandleState(Enum):
    """Lifecycle state of a single handle."""
    OWNING_LIVE = auto()
    NON_OWNING_LIVE = auto()
    DEAD = auto()


@runtime_checkable
class NativeDestructor(Protocol):
    """Frees the native resource behind a pointer. Called at most once per pointer."""
    def __call__(self, pointer: Any) -> Any:
        ...


def _no_destructor(pointer: Any) -> None:
    """Destructor for kinds the native layer always owns."""
    return None


@dataclass(frozen=True)
class ResourceKind:
    """Static description of one kind of native resource.

    Two kinds are equal when their names are equal; the name is what
    diagnostics and type checks report.

    Attributes:
        name: Diagnostic name, e.g. "bitmap" or "sample_instance".
        destructor: Native free function for owning handles.
        auto_finalize: Whether the garbage collector may destroy handles
            of this kind. Kinds whose native objects own other live
            objects (a network host owning its peers) set this to False
            and must be torn down explicitly, in caller order.
    """
    name: str
    destructor: NativeDestructor = field(default=_no_destructor, compare=False, repr=False)
    auto_finalize: bool = field(default=True, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("ResourceKind name must be a non-empty string")
        if not isinstance(self.destructor, NativeDestructor):
            raise ValueError(f"destructor for '{self.name}' must be callable")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class WrapFailure:
    """Value returned instead of a handle when the native constructor gave NULL.

    Falsy, so callers can branch with ``if not result``.
    """
    kind_name: str
    message: str

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.message
