"""
Native pointer normalization.

Wrappers hand the bridge whatever their FFI layer produced: a bare int
address, a ctypes.c_void_p, or a typed ctypes pointer. Identity is always
the integer address.
"""
import ctypes
from typing import Any, Optional


def pointer_key(pointer: Any) -> Optional[int]:
    """Return the integer address of ``pointer``, or None when it is NULL.

    Raises:
        TypeError: If ``pointer`` is not something that carries an address.
        ValueError: If ``pointer`` is a negative integer.
    """
    if pointer is None:
        return None
    if isinstance(pointer, bool):
        raise TypeError("bool is not a native pointer")
    if isinstance(pointer, int):
        if pointer < 0:
            raise ValueError(f"negative address {pointer} is not a native pointer")
        return pointer or None
    if isinstance(pointer, ctypes.c_void_p):
        return pointer.value or None
    if isinstance(pointer, (ctypes._Pointer, ctypes._CFuncPtr)):
        return ctypes.cast(pointer, ctypes.c_void_p).value or None
    raise TypeError(f"{type(pointer).__name__} is not a native pointer")


def format_address(key: Optional[int]) -> str:
    if key is None:
        return "(null)"
    return f"0x{key:x}"
