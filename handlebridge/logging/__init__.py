"""Logging setup for the handle bridge."""

from .logger import get_logger, is_verbose_logging, setup_logging

__all__ = ['get_logger', 'is_verbose_logging', 'setup_logging']
