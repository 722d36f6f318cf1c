"""Shared helpers."""

from .decorators import protected, protected_call

__all__ = ['protected', 'protected_call']
