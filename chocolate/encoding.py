"""
Chocolate Registry Encoding

Fixed-width integer handling and the canonical JSON codec used by the
persistent storage backend.
"""

import json
from typing import Any

from .errors import ArithmeticOverflow

U32_MAX = 2**32 - 1


def checked_add_u32(a: int, b: int) -> int:
    """Add two u32 values, raising ArithmeticOverflow instead of wrapping."""
    if a < 0 or b < 0:
        raise ArithmeticOverflow(f"negative operand: {a} + {b}")
    result = a + b
    if result > U32_MAX:
        raise ArithmeticOverflow(f"u32 overflow: {a} + {b}")
    return result


def u32_be(value: int) -> bytes:
    """Big-endian 4-byte encoding of a u32."""
    if value < 0 or value > U32_MAX:
        raise ArithmeticOverflow(f"value out of u32 range: {value}")
    return value.to_bytes(4, "big")


def canonicalize(obj: Any) -> bytes:
    """
    Convert object to canonical JSON bytes.

    Sorted keys, no whitespace, UTF-8.
    """
    s = json.dumps(obj, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    return s.encode('utf-8')


def decanonicalize(data: bytes) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode('utf-8')
    return json.loads(data)
