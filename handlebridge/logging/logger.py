"""
Centralized logging configuration for the handle bridge.

Uses rotating file handler with logs stored in logs/ directory.
Includes colored console output for debug mode.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union


_VERBOSE: bool = False
# Base directory for logs. Defaults to the current working directory and is
# updated by setup_logging() when an explicit log_dir is passed.
_BASE_DIR: Path = Path.cwd()
_LOG_DIR_OVERRIDE: Optional[Path] = None
_INSTALLED_HANDLERS: List[logging.Handler] = []

_env_verbose = os.getenv("HANDLEBRIDGE_VERBOSE")
if _env_verbose is not None:
    if str(_env_verbose).strip().lower() in ("1", "true", "on", "yes"):
        _VERBOSE = True


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    LEAK_COLOR = '\033[38;5;208m'
    FINALIZE_COLOR = '\033[38;5;135m'
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        msg_text = str(record.msg)
        # Leaks and GC-driven destruction get their own colors regardless
        # of level so they stand out in a busy console.
        if '[LEAK]' in msg_text:
            color = self.LEAK_COLOR
        elif '[FINALIZE]' in msg_text:
            color = self.FINALIZE_COLOR
        else:
            color = self.COLORS.get(record.levelname)

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


def _is_stdout_tty() -> bool:
    """Return True if stdout is an interactive terminal."""
    try:
        return sys.stdout is not None and sys.stdout.isatty()
    except Exception:
        return False


def get_log_dir() -> Path:
    """Return the directory used for log files."""

    if _LOG_DIR_OVERRIDE is not None:
        return _LOG_DIR_OVERRIDE
    return _BASE_DIR / "logs"


def _teardown_handlers() -> None:
    """Remove and close every handler installed by setup_logging().

    Safe to call repeatedly; handlers added by other code are left alone.
    """
    root_logger = logging.getLogger()
    while _INSTALLED_HANDLERS:
        handler = _INSTALLED_HANDLERS.pop()
        root_logger.removeHandler(handler)
        try:
            handler.close()
        except Exception:
            # A half-closed stream must not prevent the rest from closing.
            logging.getLogger(__name__).debug("Handler close failed", exc_info=True)


def setup_logging(
    debug: bool = False,
    verbose: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure bridge logging with file rotation.

    Calling this more than once replaces the handlers from the previous
    call instead of stacking new ones.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: Enables high-volume per-handle lifecycle lines. Verbose
            mode also implies debug-level logging.
        log_dir: Directory for handlebridge.log. Defaults to ./logs.
    """
    global _VERBOSE, _LOG_DIR_OVERRIDE

    _teardown_handlers()

    debug_enabled = debug or verbose
    if log_dir is not None:
        _LOG_DIR_OVERRIDE = Path(log_dir)

    resolved_dir = get_log_dir()
    resolved_dir.mkdir(parents=True, exist_ok=True)
    log_file = resolved_dir / "handlebridge.log"

    level = logging.DEBUG if debug_enabled else logging.INFO

    formatter = logging.Formatter(
        '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File handler with rotation (1MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    _INSTALLED_HANDLERS.append(file_handler)

    if debug_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        # ANSI colors only when a terminal will render them.
        if _is_stdout_tty():
            console_formatter = ColoredFormatter(
                '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
                datefmt='%H:%M:%S',
            )
        else:
            console_formatter = logging.Formatter(
                '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s',
                datefmt='%H:%M:%S',
            )
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)
        _INSTALLED_HANDLERS.append(console_handler)

    _VERBOSE = bool(verbose)

    root_logger.info("=" * 60)
    root_logger.info(
        "HandleBridge logging initialized (debug=%s, verbose=%s)",
        debug_enabled,
        _VERBOSE,
    )
    root_logger.info("=" * 60)


_SHORT_NAME_OVERRIDES = {
    "handlebridge.handles.bridge": "handles.bridge",
    "handlebridge.handles.identity": "handles.identity",
    "handlebridge.handles.kinds": "handles.kinds",
    "handlebridge.settings.settings_manager": "settings",
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with optional short-name overrides for noisy modules."""
    actual = _SHORT_NAME_OVERRIDES.get(name, name)
    return logging.getLogger(actual)


def is_verbose_logging() -> bool:
    """Return True when verbose debug logging is enabled globally."""

    return _VERBOSE
