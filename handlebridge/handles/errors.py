"""
Exceptions raised by the handle bridge.

Only programmer errors are raised. A native constructor returning NULL is
reported as a WrapFailure value instead (see handles.types).
"""
from typing import Optional


class HandleError(Exception):
    """Base class for handle misuse. Recoverable at a protected-call boundary."""

    def __init__(self, message: str, kind_name: Optional[str] = None):
        super().__init__(message)
        self.kind_name = kind_name


class TypeMismatchError(HandleError, TypeError):
    """A value was passed where a handle of a different kind was expected."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f"{expected} expected, got {actual}", kind_name=expected)
        self.expected = expected
        self.actual = actual


class UseAfterFreeError(HandleError):
    """A native operation was attempted on a destroyed handle."""

    def __init__(self, kind_name: str):
        super().__init__(f"attempt to operate on destroyed '{kind_name}'", kind_name=kind_name)


class KindRegistrationError(HandleError, ValueError):
    """A resource kind was declared twice under the same name."""


class BridgeShutdownError(HandleError, RuntimeError):
    """The bridge no longer accepts new handles."""


class BridgeStateError(RuntimeError):
    """The process-wide bridge was started twice or used before startup."""
