"""Bridge configuration."""

from .settings_manager import BridgeSettings, DEFAULT_SETTINGS

__all__ = ['BridgeSettings', 'DEFAULT_SETTINGS']
