"""
Varint7: the housekeeping length encoding used by the framing trailer.

7-bit groups, least-significant group first. Unlike LEB128 the *terminal*
byte carries the stop marker (0x80) and continuation bytes have the top bit
clear, so the encoding can still be parsed after its bytes are reversed and
appended to the end of a buffer.

    encode_varint7(0)       -> b'\\x80'
    encode_varint7(0x3FFF)  -> b'\\x7f\\xff'

Canonical form: after the first byte, a terminal byte with an all-zero payload
is redundant and rejected as NonCanonicalEncoding.
"""

from __future__ import annotations

from typing import Tuple

from .bytestream import ByteReader, BytesLike, ByteWriter
from .errors import NonCanonicalEncoding, OverFlowError, ValidationError

__all__ = [
    "STOP_BIT",
    "MAX_VARINT7_U64_LEN",
    "write_varint7",
    "read_varint7",
    "encode_varint7",
    "decode_varint7",
]

STOP_BIT = 0x80
PAYLOAD_MASK = 0x7F
U64_MAX = (1 << 64) - 1

# ceil(64 / 7)
MAX_VARINT7_U64_LEN = 10


def write_varint7(out: ByteWriter, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError("varint7 value must be int")
    if value < 0 or value > U64_MAX:
        raise ValidationError(f"varint7 value out of u64 range: {value}")
    while True:
        chunk = value & PAYLOAD_MASK
        value >>= 7
        if value == 0:
            out.write_byte(chunk | STOP_BIT)
            return
        out.write_byte(chunk)


def read_varint7(src: ByteReader) -> int:
    """
    Read one Varint7 from ``src``.

    Raises MalformedEncoding if input ends before the stop byte,
    NonCanonicalEncoding for a redundant terminal byte and OverFlowError when
    the value leaves the u64 range.
    """
    v = 0
    i = 0
    while True:
        chunk = src.read_byte()
        word = chunk & PAYLOAD_MASK
        stop = bool(chunk & STOP_BIT)
        if i > 0 and stop and word == 0:
            raise NonCanonicalEncoding("redundant varint7 terminal byte", index=i)
        v |= word << (7 * i)
        i += 1
        if v > U64_MAX or (i >= MAX_VARINT7_U64_LEN and not stop):
            raise OverFlowError("varint7 exceeds u64", groups=i)
        if stop:
            return v


def encode_varint7(value: int) -> bytes:
    w = ByteWriter()
    write_varint7(w, value)
    return w.view_bytes()


def decode_varint7(buf: BytesLike) -> Tuple[int, int]:
    """Decode a Varint7 from the front of ``buf`` → (value, bytes consumed)."""
    r = ByteReader(buf)
    v = read_varint7(r)
    return v, r.position()
