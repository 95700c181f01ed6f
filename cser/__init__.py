"""
cser: canonical split-stream binary serialization.

A value is encoded into two sub-streams that are framed into one flat buffer:
small fields (booleans, size tags) go into a packed bit stream and everything
else into a byte stream. Decoding is strict: every value has exactly one
accepted encoding, and leftover input, non-zero padding or non-minimal integers
are rejected.

    >>> from cser import U64, serialize, deserialize, vec
    >>> serialize([0xAABB, 0xCCDD], vec(U64)).hex()
    '02bbaaddcc2481'
    >>> deserialize(bytes.fromhex('02bbaaddcc2481'), vec(U64))
    [43707, 52445]
"""

from __future__ import annotations

from typing import Any, Optional

from .codecs import (
    BOOL,
    BYTES,
    I64,
    STR,
    U8,
    U16,
    U32,
    U56_CODEC,
    U64,
    U256,
    ByteVec,
    Codec,
    FixedBytes,
    Option,
    Vec,
    array_vec,
    codec_of,
    option,
    vec,
)
from .errors import (
    CserError,
    CserErrorCode,
    CustomError,
    MalformedEncoding,
    NonCanonicalEncoding,
    OverFlowError,
    TooLargeAlloc,
    ValidationError,
)
from .framing import deserialize_with
from .record import record, wrapper
from .stream import Reader, Writer
from .types import U56
from .version import __version__


def serialize(value: Any, codec: Optional[Any] = None) -> bytes:
    """
    Encode ``value`` into one framed buffer.

    ``codec`` defaults to the record codec of ``value``. The whole value is
    validated before anything is written, so a ValidationError never leaves a
    partial encoding behind.
    """
    c = codec_of(value if codec is None else codec)
    value = c.validate(value)
    w = Writer()
    c.encode(w, value)
    return w.output()


def deserialize(data: Any, codec: Any) -> Any:
    """Decode one value of ``codec`` from ``data`` and require canonical exhaustion."""
    return deserialize_with(data, codec_of(codec).decode)


__all__ = [
    "__version__",
    "serialize",
    "deserialize",
    "deserialize_with",
    "Writer",
    "Reader",
    "Codec",
    "codec_of",
    "BOOL",
    "U8",
    "U16",
    "U32",
    "U64",
    "I64",
    "U56_CODEC",
    "U256",
    "BYTES",
    "STR",
    "FixedBytes",
    "ByteVec",
    "Vec",
    "Option",
    "vec",
    "array_vec",
    "option",
    "record",
    "wrapper",
    "U56",
    "CserError",
    "CserErrorCode",
    "NonCanonicalEncoding",
    "MalformedEncoding",
    "TooLargeAlloc",
    "OverFlowError",
    "CustomError",
    "ValidationError",
]
