"""Centralised version and naming information for HandleBridge.

Runtime code reads the version from here; pyproject.toml carries the same
string and tests/test_versioning.py keeps the two in step.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


APP_NAME: str = "HandleBridge"
APP_VERSION: str = "0.1.0"
APP_DESCRIPTION: str = "Lifecycle bridge between native resource pointers and Python's garbage collector."


@dataclass(frozen=True)
class VersionInfo:
    major: int
    minor: int
    patch: int

    def to_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.patch)


def parse_version(version_str: str = APP_VERSION) -> VersionInfo:
    """Parse a semantic-ish version string ``MAJOR.MINOR.PATCH``.

    Falls back to ``0.0.0`` on parse errors so callers always receive a
    usable object.
    """

    try:
        parts = [int(p) for p in str(version_str).split(".")[:3]]
        while len(parts) < 3:
            parts.append(0)
        return VersionInfo(*parts)
    except (TypeError, ValueError):
        return VersionInfo(0, 0, 0)


def get_version() -> Tuple[int, int, int]:
    """Return ``(major, minor, patch)`` for the running package."""
    return parse_version(APP_VERSION).to_tuple()
