"""
Bounded integer types that have no native Python counterpart.

Only U56 lives here: the unsigned 56-bit integer used for byte-string lengths.
Its range is enforced at construction, so anything holding a U56 can always be
encoded.
"""

from __future__ import annotations

from typing import Any

from .config import U56_MAX
from .errors import OverFlowError

__all__ = ["U56", "U56_MAX"]


class U56(int):
    """
    Unsigned integer in ``[0, 2**56 - 1]``.

    >>> U56(7)
    U56(7)
    >>> U56(1 << 56)
    Traceback (most recent call last):
    ...
    cser.errors.OverFlowError: CSER/OVERFLOW: value does not fit in 56 bits [value=72057594037927936]
    """

    __slots__ = ()

    MAX = U56_MAX

    def __new__(cls, value: Any = 0) -> "U56":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"U56 expects int, got {type(value).__name__}")
        if value < 0 or value > U56_MAX:
            raise OverFlowError("value does not fit in 56 bits", value=int(value))
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"U56({int(self)})"
