"""
Process-wide bridge instance.

The embedding application calls startup() once before any wrapper module
creates a handle and shutdown() once at exit (also registered with atexit).
"""
from __future__ import annotations

import atexit
from typing import Optional

from handlebridge.handles.bridge import HandleBridge
from handlebridge.handles.errors import BridgeStateError
from handlebridge.logging.logger import get_logger
from handlebridge.settings.settings_manager import BridgeSettings

logger = get_logger(__name__)

_bridge: Optional[HandleBridge] = None


def startup(settings: Optional[BridgeSettings] = None) -> HandleBridge:
    """Create the process-wide bridge.

    Raises:
        BridgeStateError: If a bridge is already running.
    """
    global _bridge
    if _bridge is not None:
        raise BridgeStateError("handle bridge already started")
    _bridge = HandleBridge(settings=settings)
    atexit.register(shutdown)
    logger.info("Process-wide handle bridge started")
    return _bridge


def get_bridge() -> HandleBridge:
    """Return the running bridge.

    Raises:
        BridgeStateError: If startup() has not been called.
    """
    if _bridge is None:
        raise BridgeStateError("handle bridge not started")
    return _bridge


def is_started() -> bool:
    return _bridge is not None


def shutdown() -> None:
    """Shut the process-wide bridge down. Safe to call more than once."""
    global _bridge
    bridge, _bridge = _bridge, None
    if bridge is None:
        return
    atexit.unregister(shutdown)
    bridge.shutdown()
