"""
Composite Reader/Writer and the size-class integer codec.

A `Writer` pairs one BitWriter (tags) with one ByteWriter (payload); a `Reader`
pairs the matching readers over the two regions of a framed buffer. These are
the only objects threaded through codec encode/decode calls.

Size-class codec
----------------
Integers are stored as a minimal little-endian magnitude in the byte stream,
with the byte count (minus a per-type floor) as a small field in the bit
stream:

    type   min_size  bits_for_size  sizes
    u16        1           1         1..2
    u32        1           2         1..4
    u64        1           3         1..8
    U56        0           3         0..7   (0 costs no payload bytes)

A magnitude longer than the floor whose most significant byte is zero is not
minimal and is rejected as NonCanonicalEncoding. For the u16/u32/u64 classes
that means "more than one byte"; for U56 a single 0x00 byte is rejected too,
since zero is spelled with no payload bytes at all.
"""

from __future__ import annotations

from typing import NamedTuple, Tuple

from .bits import BitReader, BitWriter
from .bytestream import ByteReader, BytesLike, ByteWriter
from .errors import NonCanonicalEncoding, TooLargeAlloc, ValidationError
from .types import U56_MAX

__all__ = [
    "SizeClass",
    "U16_SIZE",
    "U32_SIZE",
    "U64_SIZE",
    "U56_SIZE",
    "write_size_class",
    "read_size_class",
    "Writer",
    "Reader",
]


class SizeClass(NamedTuple):
    min_size: int
    bits_for_size: int

    @property
    def max_size(self) -> int:
        return self.min_size + (1 << self.bits_for_size) - 1


U16_SIZE = SizeClass(1, 1)
U32_SIZE = SizeClass(1, 2)
U64_SIZE = SizeClass(1, 3)
U56_SIZE = SizeClass(0, 3)


def _byte_size(v: int, min_size: int) -> int:
    return max(min_size, (v.bit_length() + 7) // 8)


def write_size_class(out: ByteWriter, v: int, min_size: int) -> int:
    """Write the minimal little-endian magnitude of ``v``; return its byte count."""
    size = _byte_size(v, min_size)
    out.write(v.to_bytes(size, "little"))
    return size


def read_size_class(src: ByteReader, size: int, min_size: int = 1) -> int:
    buf = src.read(size)
    if size > min_size and buf[-1] == 0:
        raise NonCanonicalEncoding("superfluous leading zero byte", size=size)
    return int.from_bytes(buf, "little")


class Writer:
    """
    Encoding sink for one serialization call.

    Consumed exactly once by `output()`; any access to the sub-streams
    afterwards raises RuntimeError.
    """

    __slots__ = ("_bits_w", "_bytes_w", "_done")

    def __init__(self) -> None:
        self._bits_w = BitWriter()
        self._bytes_w = ByteWriter()
        self._done = False

    def _check_open(self) -> None:
        if self._done:
            raise RuntimeError("writer already finalized by output()")

    @property
    def bits_w(self) -> BitWriter:
        self._check_open()
        return self._bits_w

    @property
    def bytes_w(self) -> ByteWriter:
        self._check_open()
        return self._bytes_w

    def write_u64_bits(self, min_size: int, bits_for_size: int, v: int) -> None:
        """Size-class encode ``v``: magnitude bytes first, then the size tag."""
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise ValidationError(f"size-class value must be a non-negative int, got {v!r}")
        size = _byte_size(v, min_size)
        tag = size - min_size
        if tag >= (1 << bits_for_size):
            raise ValidationError(
                f"value needs {size} bytes, size class ({min_size}, {bits_for_size}) "
                f"allows at most {min_size + (1 << bits_for_size) - 1}"
            )
        write_size_class(self.bytes_w, v, min_size)
        self.bits_w.write(bits_for_size, tag)

    def write_size(self, cls: SizeClass, v: int) -> None:
        self.write_u64_bits(cls.min_size, cls.bits_for_size, v)

    def write_slice(self, data: BytesLike) -> None:
        """Length-delimited bytes: U56 length, then the raw bytes."""
        n = len(data)
        if n > U56_MAX:
            raise ValidationError(f"byte string too long for a U56 length: {n}")
        self.write_size(U56_SIZE, n)
        self.bytes_w.write(data)

    def view(self) -> Tuple[bytes, bytes]:
        """(bit-stream bytes, byte-stream bytes) written so far."""
        return self.bits_w.view_bytes(), self.bytes_w.view_bytes()

    def output(self) -> bytes:
        """Frame both sub-streams into one flat buffer and close the writer."""
        from .framing import pack

        bits, body = self.view()
        self._done = True
        return pack(bits, body)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Writer):
            return NotImplemented
        return (
            self._bits_w == other._bits_w
            and self._bytes_w == other._bytes_w
            and self._done == other._done
        )

    def __repr__(self) -> str:
        return f"Writer(bits={self._bits_w!r}, bytes={self._bytes_w!r})"


class Reader:
    """Decoding source over the two regions of one framed buffer."""

    __slots__ = ("bits_r", "bytes_r")

    def __init__(self, bits: BytesLike, body: BytesLike) -> None:
        self.bits_r = BitReader(bits)
        self.bytes_r = ByteReader(body)

    def read_u64_bits(self, min_size: int, bits_for_size: int) -> int:
        size = self.bits_r.read(bits_for_size) + min_size
        return read_size_class(self.bytes_r, size, min_size)

    def read_size(self, cls: SizeClass) -> int:
        return self.read_u64_bits(cls.min_size, cls.bits_for_size)

    def slice_bytes(self, max_len: int) -> bytes:
        """
        Bounded length-delimited read: a U56 length, TooLargeAlloc if it exceeds
        ``max_len``, then that many bytes (MalformedEncoding if fewer remain).
        """
        size = self.read_size(U56_SIZE)
        if size > max_len:
            raise TooLargeAlloc("byte string longer than allowed", limit=max_len, size=size)
        return self.bytes_r.read(size)

    def __repr__(self) -> str:
        return f"Reader(bits={self.bits_r!r}, bytes={self.bytes_r!r})"
