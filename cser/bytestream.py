"""
Byte-granular stream used for bulk payload (integer magnitudes, byte strings).

No framing of its own: `ByteWriter.write` is a raw append and every read
length comes from the caller.
"""

from __future__ import annotations

from typing import Union

from .errors import MalformedEncoding

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = ["BytesLike", "ByteWriter", "ByteReader"]


class ByteWriter:
    __slots__ = ("buf",)

    def __init__(self) -> None:
        self.buf = bytearray()

    def write(self, data: BytesLike) -> None:
        self.buf += data

    def write_byte(self, b: int) -> None:
        self.buf.append(b)

    def view_bytes(self) -> bytes:
        return bytes(self.buf)

    def __len__(self) -> int:
        return len(self.buf)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteWriter):
            return NotImplemented
        return self.buf == other.buf

    def __repr__(self) -> str:
        return f"ByteWriter(bytes={self.buf.hex()!r})"


class ByteReader:
    """Bounds-checked sequential reader over a borrowed buffer."""

    __slots__ = ("buf", "_offset")

    def __init__(self, buf: BytesLike) -> None:
        self.buf = buf
        self._offset = 0

    def read(self, n: int) -> bytes:
        """Read ``n`` bytes; MalformedEncoding (cursor untouched) if fewer remain."""
        if n < 0:
            raise ValueError("read length must be non-negative")
        end = self._offset + n
        if end > len(self.buf):
            raise MalformedEncoding(
                "byte stream exhausted", wanted=n, remaining=self.remaining()
            )
        out = bytes(self.buf[self._offset:end])
        self._offset = end
        return out

    def read_byte(self) -> int:
        if self._offset >= len(self.buf):
            raise MalformedEncoding("byte stream exhausted", wanted=1, remaining=0)
        b = self.buf[self._offset]
        self._offset += 1
        return int(b)

    def position(self) -> int:
        return self._offset

    def remaining(self) -> int:
        return len(self.buf) - self._offset

    def empty(self) -> bool:
        """True once the whole buffer is consumed."""
        return self._offset == len(self.buf)

    def __repr__(self) -> str:
        return f"ByteReader(offset={self._offset}, size={len(self.buf)})"
