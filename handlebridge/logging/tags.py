"""Standard logging tags for consistent log filtering.

Usage:
    from handlebridge.logging.tags import TAG_LIFECYCLE
    logger.debug(f"{TAG_LIFECYCLE} new object: {kind} ({address})")
"""

TAG_LIFECYCLE = "[LIFECYCLE]"
"""Handle creation and invalidation (wrap / invalidate)."""

TAG_FINALIZE = "[FINALIZE]"
"""Destruction triggered by the garbage collector rather than by caller code."""

TAG_SHUTDOWN = "[SHUTDOWN]"
"""Ordered teardown of the process-wide bridge."""

TAG_LEAK = "[LEAK]"
"""Owning handles still alive at shutdown that nothing will destroy."""
