"""Native resource handles for the bridge."""

from .binding import KindBinding
from .bridge import HandleBridge
from .errors import (
    BridgeShutdownError,
    BridgeStateError,
    HandleError,
    KindRegistrationError,
    TypeMismatchError,
    UseAfterFreeError,
)
from .handle import Handle
from .identity import IdentityTable
from .kinds import KindRegistry
from .types import HandleState, NativeDestructor, ResourceKind, WrapFailure

__all__ = [
    'BridgeShutdownError',
    'BridgeStateError',
    'Handle',
    'HandleBridge',
    'HandleError',
    'HandleState',
    'IdentityTable',
    'KindBinding',
    'KindRegistrationError',
    'KindRegistry',
    'NativeDestructor',
    'ResourceKind',
    'TypeMismatchError',
    'UseAfterFreeError',
    'WrapFailure',
]
