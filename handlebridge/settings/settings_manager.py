"""
Settings manager implementation for the handle bridge.

Uses QSettings for persistent storage, either in the platform store keyed by
organization/application or in an explicit INI file.
"""
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import threading

from PySide6.QtCore import QSettings, QObject, Signal

from handlebridge.logging.logger import get_logger, is_verbose_logging

logger = get_logger(__name__)


DEFAULT_SETTINGS: Dict[str, Any] = {
    # Log every wrap/invalidate pair at DEBUG level.
    'lifecycle.trace': False,
    # Run a full collection before finalizing what is left at shutdown.
    'shutdown.collect': True,
    # Destroy owning handles that are still pending at shutdown.
    'shutdown.finalize_pending': True,
}


class BridgeSettings(QObject):
    """
    Bridge configuration backed by QSettings.

    Thread-safe with change notifications through both a Qt signal and
    plain per-key callbacks.
    """

    # Signal emitted when settings change
    settings_changed = Signal(str, object)  # key, new_value

    def __init__(
        self,
        organization: str = "HandleBridge",
        application: str = "Bridge",
        path: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize the settings manager.

        Args:
            organization: Organization name for QSettings
            application: Application name for QSettings
            path: When given, store settings in this INI file instead of the
                platform store.
        """
        super().__init__()

        if path is not None:
            self._settings = QSettings(str(path), QSettings.Format.IniFormat)
        else:
            self._settings = QSettings(organization, application)
        self._organization = organization
        self._application = application
        self._path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._change_handlers: Dict[str, List[Callable[[Any, Any], None]]] = {}

        self._set_defaults()

        logger.info("BridgeSettings initialized (%s)", self._path or f"{organization}/{application}")

    def _set_defaults(self) -> None:
        """Set default values if not already present."""
        with self._lock:
            for key, value in DEFAULT_SETTINGS.items():
                if not self._settings.contains(key):
                    self._settings.setValue(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Setting key in dot notation (e.g., 'lifecycle.trace')
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        with self._lock:
            return self._settings.value(key, default)

    @staticmethod
    def to_bool(value: Any, default: bool = False) -> bool:
        """Normalize a stored setting value to bool.

        INI-backed stores hand booleans back as strings, so the common
        string forms ("true", "1", "yes", "on" / "false", "0", "no", "off")
        are accepted.
        """
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            if v in ("true", "1", "yes", "on"):
                return True
            if v in ("false", "0", "no", "off"):
                return False
            return default
        if value is None:
            return default
        return bool(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Convenience wrapper around get() that normalizes to bool."""
        raw = self.get(key, default)
        return self.to_bool(raw, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Convenience wrapper around get() that normalizes to int."""
        raw = self.get(key, default)
        try:
            return int(raw)
        except (TypeError, ValueError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a setting value.

        Args:
            key: Setting key in dot notation
            value: Value to set
        """
        with self._lock:
            old_value = self._settings.value(key)
            self._settings.setValue(key, value)

            self.settings_changed.emit(key, value)

            for handler in self._change_handlers.get(key, []):
                try:
                    handler(value, old_value)
                except Exception as e:
                    logger.error(f"Error in change handler for {key}: {e}")

        if is_verbose_logging():
            logger.debug("Setting changed: %s: %r -> %r", key, old_value, value)
        else:
            logger.debug("Setting changed: %s", key)

    def on_changed(self, key: str, handler: Callable[[Any, Any], None]) -> None:
        """
        Register a handler for when a specific setting changes.

        Args:
            key: Setting key to watch
            handler: Callback function(new_value, old_value)
        """
        with self._lock:
            self._change_handlers.setdefault(key, []).append(handler)

        logger.debug(f"Registered change handler for {key}")

    def off_changed(self, key: str, handler: Callable[[Any, Any], None]) -> bool:
        """
        Unregister a handler added with on_changed().

        Returns:
            True if the handler was registered for ``key``.
        """
        with self._lock:
            handlers = self._change_handlers.get(key, [])
            try:
                handlers.remove(handler)
            except ValueError:
                return False
            if not handlers:
                self._change_handlers.pop(key, None)
        logger.debug(f"Removed change handler for {key}")
        return True

    def save(self) -> None:
        """Force save settings to persistent storage."""
        with self._lock:
            self._settings.sync()
        logger.debug("Settings saved")

    def get_all_keys(self) -> List[str]:
        """Get all setting keys."""
        with self._lock:
            return self._settings.allKeys()

    def contains(self, key: str) -> bool:
        """Check if a setting key exists."""
        with self._lock:
            return self._settings.contains(key)

    def remove(self, key: str) -> None:
        """Remove a setting key."""
        with self._lock:
            self._settings.remove(key)
        logger.debug(f"Removed setting: {key}")

    def clear(self) -> None:
        """Clear all settings (use with caution)."""
        with self._lock:
            self._settings.clear()
        logger.warning("All settings cleared")

    def reset_to_defaults(self) -> None:
        """Drop every stored value and re-apply DEFAULT_SETTINGS."""
        with self._lock:
            self._settings.clear()
            self._set_defaults()
            self._settings.sync()
        logger.info("Settings reset to defaults")
        self.settings_changed.emit('*', None)

    def get_path(self) -> Optional[Path]:
        """Return the INI file path, or None for the platform store."""
        return self._path
