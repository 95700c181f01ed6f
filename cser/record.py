"""
Record derivation for dataclasses.

    @record
    @dataclass(frozen=True)
    class Transfer:
        to: Annotated[bytes, FixedBytes(20)]
        amount: Annotated[int, U64]
        memo: Annotated[Optional[str], Option(STR)]

Fields are encoded in declaration order with the codec given in their
``Annotated`` metadata; a field typed with another @record/@wrapper class needs
no metadata. Decoding calls the same codecs in the same order and rebuilds the
dataclass with keyword arguments.

`@wrapper` is the single-field variant: the instance is encoded exactly like
its one field, with no extra bytes or bits.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from typing import Any, Tuple, Type, TypeVar

from .codecs import Codec, codec_of
from .errors import ValidationError
from .stream import Reader, Writer

__all__ = ["RecordCodec", "WrapperCodec", "record", "wrapper"]

C = TypeVar("C", bound=type)


def _field_codec(owner: type, name: str, hint: Any) -> Codec:
    if typing.get_origin(hint) is typing.Annotated:
        for meta in hint.__metadata__:
            try:
                return codec_of(meta)
            except TypeError:
                continue
        hint = typing.get_args(hint)[0]
    try:
        return codec_of(hint)
    except TypeError:
        raise TypeError(
            f"{owner.__name__}.{name}: annotate with Annotated[T, <codec>] "
            f"or a @record class, got {hint!r}"
        ) from None


def _resolve_fields(cls: type) -> Tuple[Tuple[str, Codec], ...]:
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"{cls.__name__} must be a dataclass")
    hints = typing.get_type_hints(cls, include_extras=True)
    return tuple(
        (f.name, _field_codec(cls, f.name, hints[f.name]))
        for f in dataclasses.fields(cls)
        if f.init
    )


@dataclass(frozen=True)
class RecordCodec(Codec[Any]):
    cls: type
    fields: Tuple[Tuple[str, Codec], ...]

    def validate(self, value: Any) -> Any:
        if not isinstance(value, self.cls):
            raise ValidationError(
                f"{self.cls.__name__} expected, got {type(value).__name__}"
            )
        for name, codec in self.fields:
            try:
                codec.validate(getattr(value, name))
            except ValidationError as e:
                raise ValidationError(f"{self.cls.__name__}.{name}: {e}") from e
        return value

    def encode(self, w: Writer, value: Any) -> None:
        for name, codec in self.fields:
            codec.encode(w, getattr(value, name))

    def decode(self, r: Reader) -> Any:
        return self.cls(**{name: codec.decode(r) for name, codec in self.fields})

    def __repr__(self) -> str:
        return f"RecordCodec({self.cls.__name__})"


@dataclass(frozen=True)
class WrapperCodec(Codec[Any]):
    cls: type
    name: str
    inner: Codec

    def validate(self, value: Any) -> Any:
        if not isinstance(value, self.cls):
            raise ValidationError(
                f"{self.cls.__name__} expected, got {type(value).__name__}"
            )
        self.inner.validate(getattr(value, self.name))
        return value

    def encode(self, w: Writer, value: Any) -> None:
        self.inner.encode(w, getattr(value, self.name))

    def decode(self, r: Reader) -> Any:
        return self.cls(**{self.name: self.inner.decode(r)})

    def __repr__(self) -> str:
        return f"WrapperCodec({self.cls.__name__})"


def _install(cls: C, codec: Codec) -> C:
    def cser_encode(self: Any, w: Writer) -> None:
        codec.encode(w, self)

    def cser_decode(klass: Type[Any], r: Reader) -> Any:
        return codec.decode(r)

    cls.__cser_codec__ = codec  # type: ignore[attr-defined]
    cls.cser_encode = cser_encode  # type: ignore[attr-defined]
    cls.cser_decode = classmethod(cser_decode)  # type: ignore[attr-defined]
    return cls


def record(cls: C) -> C:
    """Derive field-by-field encode/decode for a dataclass."""
    return _install(cls, RecordCodec(cls, _resolve_fields(cls)))


def wrapper(cls: C) -> C:
    """Derive transparent encode/decode for a single-field dataclass."""
    fields = _resolve_fields(cls)
    if len(fields) != 1:
        raise TypeError(f"@wrapper needs exactly one field, {cls.__name__} has {len(fields)}")
    (name, inner), = fields
    return _install(cls, WrapperCodec(cls, name, inner))
