"""
Framing: one flat buffer out of the two sub-streams, and back.

Layout
------
    [ byte-stream payload     : Y bytes ]
    [ bit-stream payload      : B bytes ]
    [ reverse(varint7(B))     : 1..9 bytes ]

The length trailer is stored reversed so a decoder can find it by reading the
buffer from the end: reversing the last (at most) nine bytes puts the Varint7
back in forward order, and its stop bit tells how many of them belong to it.

Format invariant: the bit region is shorter than 2**63 bytes, so its length
always fits in nine 7-bit groups (TRAILER_WINDOW).

Canonical exhaustion
--------------------
After the caller's decode logic has run, `finish()` requires that
  1. at most one bit-stream byte is still (partially) unread,
  2. the unread bits are all zero and fewer than eight,
  3. the byte stream is fully consumed.
Together with the per-codec minimality checks this makes the mapping between
values and accepted buffers one-to-one.
"""

from __future__ import annotations

from typing import Callable, Tuple, TypeVar

from .bytestream import BytesLike
from .errors import MalformedEncoding, NonCanonicalEncoding, ValidationError
from .logging import get_logger
from .stream import Reader
from .varint import decode_varint7, encode_varint7

__all__ = [
    "TRAILER_WINDOW",
    "MAX_BITS_REGION",
    "pack",
    "unpack",
    "finish",
    "deserialize_with",
]

TRAILER_WINDOW = 9
MAX_BITS_REGION = 1 << (7 * TRAILER_WINDOW)

T = TypeVar("T")

log = get_logger(__name__)


def pack(bits: BytesLike, body: BytesLike) -> bytes:
    """Concatenate ``body ++ bits ++ reverse(varint7(len(bits)))``."""
    n = len(bits)
    if n >= MAX_BITS_REGION:
        raise ValidationError(f"bit region too large to frame: {n} bytes")
    out = bytearray(body)
    out += bits
    out += encode_varint7(n)[::-1]
    return bytes(out)


def unpack(raw: BytesLike) -> Tuple[memoryview, memoryview]:
    """
    Split a framed buffer into (bits, body) views over ``raw``.

    Raises MalformedEncoding when the trailer is missing/truncated or declares
    a bit region longer than the buffer.
    """
    mv = memoryview(raw)
    window = bytes(mv[-TRAILER_WINDOW:])[::-1]
    try:
        bits_size, consumed = decode_varint7(window)
    except MalformedEncoding as e:
        log.debug("rejecting buffer", extra={"reason": "trailer", "size": len(mv)})
        raise MalformedEncoding(
            "missing or truncated length trailer", size=len(mv)
        ) from e

    rest = len(mv) - consumed
    if bits_size > rest:
        log.debug(
            "rejecting buffer",
            extra={"reason": "bits_size", "bits_size": bits_size, "available": rest},
        )
        raise MalformedEncoding(
            "declared bit region exceeds buffer", bits_size=bits_size, available=rest
        )
    split = rest - bits_size
    return mv[split:rest], mv[:split]


def _reject(reason: str, message: str, **fields) -> NonCanonicalEncoding:
    log.debug("rejecting buffer", extra={"reason": reason, **fields})
    return NonCanonicalEncoding(message, reason=reason, **fields)


def finish(reader: Reader) -> None:
    """Post-decode check; raises NonCanonicalEncoding on any leftover input."""
    bits_r = reader.bits_r
    unread_bytes = bits_r.non_read_bytes()
    if unread_bytes > 1:
        raise _reject("unread_bits", "unread bit-stream bytes", unread_bytes=unread_bytes)
    unread_bits = bits_r.non_read_bits()
    if unread_bits >= 8:
        raise _reject("pad_byte", "unused bit-stream pad byte", unread_bits=unread_bits)
    if bits_r.read(unread_bits) != 0:
        raise _reject("pad_bits", "non-zero bit-stream padding", unread_bits=unread_bits)
    if not reader.bytes_r.empty():
        raise _reject(
            "unread_bytes",
            "unread byte-stream payload",
            unread_bytes=reader.bytes_r.remaining(),
        )


def deserialize_with(data: BytesLike, callback: Callable[[Reader], T]) -> T:
    """
    Unframe ``data``, run ``callback(reader)`` and verify canonical exhaustion.

    Whatever ``callback`` raises propagates unchanged; the post-decode check
    only runs once it returned.
    """
    bits, body = unpack(data)
    reader = Reader(bits, body)
    out = callback(reader)
    finish(reader)
    return out
