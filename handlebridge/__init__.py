"""HandleBridge: native resource handles that survive Python's garbage collector."""

from handlebridge.handles import (
    BridgeShutdownError,
    BridgeStateError,
    Handle,
    HandleBridge,
    HandleError,
    HandleState,
    IdentityTable,
    KindBinding,
    KindRegistrationError,
    KindRegistry,
    ResourceKind,
    TypeMismatchError,
    UseAfterFreeError,
    WrapFailure,
)
from handlebridge.versioning import APP_VERSION as __version__

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
    'ResourceKind',
    'TypeMismatchError',
    'UseAfterFreeError',
    'WrapFailure',
    '__version__',
]
