"""
Per-type codecs: how each Python value maps onto the core primitives.

Every codec is an immutable object with three methods:

    validate(value) -> value     raise ValidationError if `value` cannot be encoded
    encode(writer, value)        write a *validated* value (never fails)
    decode(reader) -> value      read one value or raise a CserError

Wire shapes
-----------
- BOOL:                 1 bit
- U8:                   1 raw byte
- U16 / U32 / U64:      size class (1,1) / (1,2) / (1,3)
- I64:                  sign bit || U64 magnitude   (negative zero rejected)
- U56_CODEC:            size class (0,3)
- U256:                 U56 length || big-endian magnitude without leading zeros (<= 32 bytes)
- FixedBytes(n):        n raw bytes, no prefix
- BYTES / ByteVec:      U56 length || raw bytes
- Vec(elem):            U32 count || elements in order
- ArrayVec(elem, cap):  as Vec, with a capacity bound
- Option(elem):         presence bit || value
- STR:                  UTF-8 as BYTES; invalid UTF-8 on decode raises CustomError

Byte sequences are specialised when the codec is *built*: `vec(U8)` and
`array_vec(U8, cap)` return a `ByteVec`, so a list of bytes is stored as one
length-delimited string rather than element by element.

There is no type tag on the wire: the decoding codec alone determines the
shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from .config import load_config
from .errors import (
    CustomError,
    NonCanonicalEncoding,
    OverFlowError,
    TooLargeAlloc,
    ValidationError,
)
from .stream import U16_SIZE, U32_SIZE, U56_SIZE, U64_SIZE, Reader, SizeClass, Writer
from .types import U56, U56_MAX

__all__ = [
    "Codec",
    "codec_of",
    "BoolCodec",
    "U8Codec",
    "UIntCodec",
    "I64Codec",
    "U56Codec",
    "U256Codec",
    "FixedBytes",
    "ByteVec",
    "Vec",
    "Option",
    "StrCodec",
    "vec",
    "array_vec",
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
]

T = TypeVar("T")

U32_MAX = (1 << 32) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1
U256_BYTES = 32


class Codec(Generic[T]):
    """Base class; subclasses implement validate/encode/decode."""

    def validate(self, value: Any) -> T:
        raise NotImplementedError

    def encode(self, w: Writer, value: T) -> None:
        raise NotImplementedError

    def decode(self, r: Reader) -> T:
        raise NotImplementedError


def codec_of(obj: Any) -> Codec:
    """
    Resolve a codec from a codec instance, a @record/@wrapper class or an
    instance of one.
    """
    if isinstance(obj, Codec):
        return obj
    codec = getattr(obj, "__cser_codec__", None)
    if isinstance(codec, Codec):
        return codec
    raise TypeError(f"no cser codec for {obj!r}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_bytes(value: Any, what: str) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise ValidationError(f"{what} expects bytes-like, got {type(value).__name__}")


# ──────────────────────────────────────────────────────────────────────────────
# Scalars
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BoolCodec(Codec[bool]):
    def validate(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise ValidationError(f"bool expected, got {type(value).__name__}")
        return value

    def encode(self, w: Writer, value: bool) -> None:
        w.bits_w.write(1, 1 if value else 0)

    def decode(self, r: Reader) -> bool:
        return r.bits_r.read(1) != 0


@dataclass(frozen=True)
class U8Codec(Codec[int]):
    def validate(self, value: Any) -> int:
        if not _is_int(value) or not 0 <= value <= 0xFF:
            raise ValidationError(f"u8 out of range: {value!r}")
        return value

    def encode(self, w: Writer, value: int) -> None:
        w.bytes_w.write_byte(value)

    def decode(self, r: Reader) -> int:
        return r.bytes_r.read_byte()


@dataclass(frozen=True)
class UIntCodec(Codec[int]):
    """Unsigned integer of ``bits`` width stored with a size class."""

    bits: int
    size: SizeClass

    def validate(self, value: Any) -> int:
        if not _is_int(value) or value < 0 or value.bit_length() > self.bits:
            raise ValidationError(f"u{self.bits} out of range: {value!r}")
        return value

    def encode(self, w: Writer, value: int) -> None:
        w.write_size(self.size, value)

    def decode(self, r: Reader) -> int:
        v = r.read_size(self.size)
        if v.bit_length() > self.bits:
            raise OverFlowError(f"value does not fit in u{self.bits}", bits=self.bits)
        return v


U16 = UIntCodec(16, U16_SIZE)
U32 = UIntCodec(32, U32_SIZE)
U64 = UIntCodec(64, U64_SIZE)


@dataclass(frozen=True)
class I64Codec(Codec[int]):
    def validate(self, value: Any) -> int:
        if not _is_int(value) or not I64_MIN <= value <= I64_MAX:
            raise ValidationError(f"i64 out of range: {value!r}")
        return value

    def encode(self, w: Writer, value: int) -> None:
        BOOL.encode(w, value < 0)
        U64.encode(w, abs(value))

    def decode(self, r: Reader) -> int:
        neg = BOOL.decode(r)
        mag = U64.decode(r)
        if neg:
            if mag == 0:
                raise NonCanonicalEncoding("negative zero")
            if mag > -I64_MIN:
                raise OverFlowError("magnitude below i64 minimum")
            return -mag
        if mag > I64_MAX:
            raise OverFlowError("magnitude above i64 maximum")
        return mag


@dataclass(frozen=True)
class U56Codec(Codec[U56]):
    def validate(self, value: Any) -> U56:
        if isinstance(value, U56):
            return value
        if not _is_int(value) or not 0 <= value <= U56_MAX:
            raise ValidationError(f"u56 out of range: {value!r}")
        return U56(value)

    def encode(self, w: Writer, value: U56) -> None:
        w.write_size(U56_SIZE, value)

    def decode(self, r: Reader) -> U56:
        return U56(r.read_size(U56_SIZE))


@dataclass(frozen=True)
class U256Codec(Codec[int]):
    """256-bit unsigned integer as a minimal big-endian byte string."""

    def validate(self, value: Any) -> int:
        if not _is_int(value) or value < 0 or value.bit_length() > 8 * U256_BYTES:
            raise ValidationError(f"u256 out of range: {value!r}")
        return value

    def encode(self, w: Writer, value: int) -> None:
        w.write_slice(value.to_bytes((value.bit_length() + 7) // 8, "big"))

    def decode(self, r: Reader) -> int:
        n = r.read_size(U56_SIZE)
        if n > U256_BYTES:
            raise OverFlowError("u256 longer than 32 bytes", size=n)
        data = r.bytes_r.read(n)
        if data[:1] == b"\x00":
            raise NonCanonicalEncoding("u256 with leading zero byte")
        return int.from_bytes(data, "big")


BOOL = BoolCodec()
U8 = U8Codec()
I64 = I64Codec()
U56_CODEC = U56Codec()
U256 = U256Codec()


# ──────────────────────────────────────────────────────────────────────────────
# Byte strings
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FixedBytes(Codec[bytes]):
    """Exactly ``length`` raw bytes, no length prefix."""

    length: int

    def validate(self, value: Any) -> bytes:
        b = _as_bytes(value, f"bytes{self.length}")
        if len(b) != self.length:
            raise ValidationError(f"bytes{self.length} got {len(b)} bytes")
        return b

    def encode(self, w: Writer, value: bytes) -> None:
        w.bytes_w.write(value)

    def decode(self, r: Reader) -> bytes:
        return r.bytes_r.read(self.length)


@dataclass(frozen=True)
class ByteVec(Codec[bytes]):
    """
    Length-delimited byte string.

    ``capacity`` is a hard bound of the type (longer input is OverFlowError);
    ``max_len`` is an allocation guard (TooLargeAlloc), defaulting to
    CSER_MAX_ALLOC.
    """

    max_len: Optional[int] = None
    capacity: Optional[int] = None

    def validate(self, value: Any) -> bytes:
        b = _as_bytes(value, "bytes")
        if self.capacity is not None and len(b) > self.capacity:
            raise ValidationError(f"bytes longer than capacity {self.capacity}")
        if len(b) > U56_MAX:
            raise ValidationError("bytes longer than a U56 length")
        return b

    def encode(self, w: Writer, value: bytes) -> None:
        w.write_slice(value)

    def decode(self, r: Reader) -> bytes:
        limit = load_config().max_alloc if self.max_len is None else self.max_len
        if self.capacity is None:
            return r.slice_bytes(limit)
        n = r.read_size(U56_SIZE)
        if n > self.capacity:
            raise OverFlowError("byte string exceeds capacity", capacity=self.capacity, size=n)
        if n > limit:
            raise TooLargeAlloc("byte string longer than allowed", limit=limit, size=n)
        return r.bytes_r.read(n)


BYTES = ByteVec()


@dataclass(frozen=True)
class StrCodec(Codec[str]):
    max_len: Optional[int] = None

    def validate(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(f"str expected, got {type(value).__name__}")
        try:
            value.encode("utf-8", "strict")
        except UnicodeEncodeError as e:
            raise ValidationError(f"string is not encodable as UTF-8: {e}") from e
        return value

    def encode(self, w: Writer, value: str) -> None:
        w.write_slice(value.encode("utf-8", "strict"))

    def decode(self, r: Reader) -> str:
        data = ByteVec(max_len=self.max_len).decode(r)
        try:
            return data.decode("utf-8", "strict")
        except UnicodeDecodeError as e:
            raise CustomError("invalid utf-8", reason=e.reason, start=e.start) from e


STR = StrCodec()


# ──────────────────────────────────────────────────────────────────────────────
# Containers
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Vec(Codec[List[Any]]):
    """
    Sequence of non-byte elements: U32 count, then each element.

    Build through `vec()` / `array_vec()` so that byte elements get the
    ByteVec representation.
    """

    elem: Codec
    max_items: Optional[int] = None
    capacity: Optional[int] = None

    def validate(self, value: Any) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"sequence expected, got {type(value).__name__}")
        if len(value) > U32_MAX:
            raise ValidationError("sequence longer than a u32 count")
        if self.capacity is not None and len(value) > self.capacity:
            raise ValidationError(f"sequence longer than capacity {self.capacity}")
        return [self.elem.validate(v) for v in value]

    def encode(self, w: Writer, value: Sequence[Any]) -> None:
        U32.encode(w, len(value))
        for item in value:
            self.elem.encode(w, item)

    def decode(self, r: Reader) -> List[Any]:
        n = U32.decode(r)
        if self.capacity is not None and n > self.capacity:
            raise OverFlowError("sequence exceeds capacity", capacity=self.capacity, size=n)
        limit = load_config().max_items if self.max_items is None else self.max_items
        if n > limit:
            raise TooLargeAlloc("sequence longer than allowed", limit=limit, size=n)
        return [self.elem.decode(r) for _ in range(n)]


@dataclass(frozen=True)
class Option(Codec[Optional[Any]]):
    """Presence bit, then the element when present."""

    elem: Codec

    def __post_init__(self) -> None:
        # None would stand for both "absent" and "present but inner absent"
        if isinstance(self.elem, Option):
            raise TypeError("Option of Option has no unique encoding for None")

    def validate(self, value: Any) -> Optional[Any]:
        return None if value is None else self.elem.validate(value)

    def encode(self, w: Writer, value: Optional[Any]) -> None:
        if value is None:
            BOOL.encode(w, False)
        else:
            BOOL.encode(w, True)
            self.elem.encode(w, value)

    def decode(self, r: Reader) -> Optional[Any]:
        if BOOL.decode(r):
            return self.elem.decode(r)
        return None


def vec(elem: Any, *, max_len: Optional[int] = None) -> Codec:
    """Growable sequence codec; ``vec(U8)`` is a plain byte string."""
    elem = codec_of(elem)
    if elem == U8:
        return ByteVec(max_len=max_len)
    return Vec(elem, max_items=max_len)


def array_vec(elem: Any, capacity: int, *, max_len: Optional[int] = None) -> Codec:
    """Fixed-capacity sequence codec; ``array_vec(U8, n)`` is a bounded byte string."""
    if capacity < 0:
        raise ValueError("capacity must be non-negative")
    elem = codec_of(elem)
    if elem == U8:
        return ByteVec(max_len=max_len, capacity=capacity)
    return Vec(elem, max_items=max_len, capacity=capacity)


def option(elem: Any) -> Option:
    return Option(codec_of(elem))
