"""
Protected-call boundaries for handle misuse.

Use-after-free and wrong-kind access raise HandleError subclasses. Script
entry points catch them here, at the boundary, instead of letting one bad
handle take down the host:

- protected: decorator turning HandleError into a logged return value
- protected_call: pcall-style ``(ok, result_or_error)`` wrapper
"""
from typing import Any, Callable, Optional, ParamSpec, Tuple, TypeVar, Union
from functools import wraps

from handlebridge.handles.errors import HandleError
from handlebridge.logging.logger import get_logger

P = ParamSpec('P')
T = TypeVar('T')

logger = get_logger(__name__)


def protected(
    logger_instance: Optional[Any] = None,
    message: str = "Handle operation failed",
    return_value: Any = None,
    log_level: str = "error"
) -> Callable[[Callable[P, T]], Callable[P, Optional[T]]]:
    """
    Decorator that catches HandleError and logs it.

    Other exceptions propagate unchanged.

    Args:
        logger_instance: Logger to use (defaults to module logger)
        message: Error message prefix
        return_value: Value to return when a HandleError was caught
        log_level: Logging level ('debug', 'info', 'warning', 'error')

    Example:
        @protected(logger, "draw failed")
        def draw(bmp):
            lib.al_draw_bitmap(bitmaps.get(bmp), 0, 0, 0)
    """
    def decorator(func: Callable[P, T]) -> Callable[P, Optional[T]]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except HandleError as e:
                log = logger_instance or logger
                log_method = getattr(log, log_level, log.error)
                log_method(f"{message}: {e}")
                return return_value
        return wrapper
    return decorator


def protected_call(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> Tuple[bool, Union[T, HandleError]]:
    """
    Call ``func`` and report HandleError as a value.

    Returns:
        ``(True, result)`` on success, ``(False, error)`` when ``func``
        raised a HandleError.
    """
    try:
        return True, func(*args, **kwargs)
    except HandleError as e:
        logger.debug(f"Protected call to {getattr(func, '__name__', func)!r} failed: {e}")
        return False, e
