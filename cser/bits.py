"""
Bit-granular stream used for small tag fields (booleans, size classes).

Fields are packed least-significant-bit first: the first bit written lands in
bit 0 of byte 0, and a field that does not fit in the current byte continues
in bit 0 of the next one. Unwritten high bits of the last byte stay zero, so a
writer that emitted N bits always holds exactly ceil(N / 8) bytes.

    w = BitWriter()
    w.write(3, 0b101)
    w.write(9, 0x1FF)
    w.view_bytes()          # b'\\xfd\\x0f'
    BitReader(b'\\xfd\\x0f').read(3)  # 5
"""

from __future__ import annotations

from typing import Optional

from .bytestream import BytesLike
from .config import load_config
from .errors import MalformedEncoding, ValidationError

__all__ = ["BitWriter", "BitReader"]


def _mask(bits: int) -> int:
    return (1 << bits) - 1


class BitWriter:
    """Append-only bit packer over an owned ``bytearray``."""

    __slots__ = ("_buf", "_bit_offset", "_max_width")

    def __init__(self, *, max_width: Optional[int] = None) -> None:
        self._buf = bytearray()
        # next free bit inside the last byte; 0 means "start a new byte"
        self._bit_offset = 0
        self._max_width = load_config().max_bit_width if max_width is None else max_width

    def write(self, bits: int, value: int) -> None:
        """Append the low ``bits`` bits of ``value``."""
        if bits < 0:
            raise ValueError(f"bit width must be non-negative, got {bits}")
        if self._max_width and bits > self._max_width:
            raise ValueError(f"bit width {bits} exceeds maximum {self._max_width}")
        if value < 0:
            raise ValidationError("bit field value must be non-negative")

        while bits > 0:
            if self._bit_offset == 0:
                self._buf.append(0)
            free = 8 - self._bit_offset
            if bits <= free:
                self._buf[-1] |= (value & _mask(bits)) << self._bit_offset
                self._bit_offset = (self._bit_offset + bits) & 7
                return
            self._buf[-1] |= (value & _mask(free)) << self._bit_offset
            self._bit_offset = 0
            value >>= free
            bits -= free

    def view_bytes(self) -> bytes:
        return bytes(self._buf)

    def bit_len(self) -> int:
        """Number of bits written so far."""
        if self._bit_offset == 0:
            return len(self._buf) * 8
        return (len(self._buf) - 1) * 8 + self._bit_offset

    def __len__(self) -> int:
        return len(self._buf)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitWriter):
            return NotImplemented
        return self._buf == other._buf and self._bit_offset == other._bit_offset

    def __repr__(self) -> str:
        return f"BitWriter(bytes={self._buf.hex()!r}, bit_offset={self._bit_offset})"


class BitReader:
    """Sequential bit reader over a borrowed buffer; mirrors :class:`BitWriter`."""

    __slots__ = ("_buf", "_byte_offset", "_bit_offset", "_max_width")

    def __init__(self, buf: BytesLike, *, max_width: Optional[int] = None) -> None:
        self._buf = buf
        self._byte_offset = 0
        self._bit_offset = 0
        self._max_width = load_config().max_bit_width if max_width is None else max_width

    def read(self, bits: int) -> int:
        """
        Consume ``bits`` bits and return them as an unsigned integer.

        Raises MalformedEncoding (cursor untouched) if fewer bits remain.
        """
        if bits < 0:
            raise ValueError(f"bit width must be non-negative, got {bits}")
        if self._max_width and bits > self._max_width:
            raise ValueError(f"bit width {bits} exceeds maximum {self._max_width}")
        if bits == 0:
            return 0
        remaining = self.non_read_bits()
        if bits > remaining:
            raise MalformedEncoding(
                "bit stream exhausted", wanted=bits, remaining=remaining
            )

        v = 0
        shift = 0
        while True:
            free = 8 - self._bit_offset
            cur = self._buf[self._byte_offset] >> self._bit_offset
            if bits < free:
                v |= (cur & _mask(bits)) << shift
                self._bit_offset += bits
                return v
            v |= cur << shift
            shift += free
            bits -= free
            self._bit_offset = 0
            self._byte_offset += 1
            if bits == 0:
                return v

    def view(self, bits: int) -> int:
        """Peek at the next ``bits`` bits without consuming them."""
        byte_offset, bit_offset = self._byte_offset, self._bit_offset
        try:
            return self.read(bits)
        finally:
            self._byte_offset, self._bit_offset = byte_offset, bit_offset

    def non_read_bytes(self) -> int:
        """Bytes not fully consumed (a partially read byte counts)."""
        return len(self._buf) - self._byte_offset

    def non_read_bits(self) -> int:
        return self.non_read_bytes() * 8 - self._bit_offset

    def __repr__(self) -> str:
        return (
            f"BitReader(byte_offset={self._byte_offset}, bit_offset={self._bit_offset}, "
            f"size={len(self._buf)})"
        )
