from __future__ import annotations

import json

import pytest

from cser.errors import (
    CserError,
    CserErrorCode,
    CustomError,
    MalformedEncoding,
    NonCanonicalEncoding,
    OverFlowError,
    TooLargeAlloc,
    ValidationError,
    is_cser_error,
)


@pytest.mark.parametrize(
    "cls,code",
    [
        (NonCanonicalEncoding, CserErrorCode.NON_CANONICAL),
        (MalformedEncoding, CserErrorCode.MALFORMED),
        (TooLargeAlloc, CserErrorCode.TOO_LARGE_ALLOC),
        (OverFlowError, CserErrorCode.OVERFLOW),
        (CustomError, CserErrorCode.CUSTOM),
    ],
)
def test_codes_and_hierarchy(cls, code) -> None:
    err = cls()
    assert isinstance(err, CserError)
    assert is_cser_error(err)
    assert err.code is code
    assert str(err).startswith(code.value)


def test_data_is_json_safe() -> None:
    err = MalformedEncoding("short read", wanted=4, raw=b"\x01\x02", obj=object())
    d = err.to_dict()
    assert d["code"] == "CSER/MALFORMED_ENCODING"
    assert d["message"] == "short read"
    assert d["data"]["wanted"] == 4
    assert d["data"]["raw"] == "0102"
    assert isinstance(d["data"]["obj"], str)
    json.dumps(d)


def test_too_large_alloc_records_limit() -> None:
    err = TooLargeAlloc("too big", limit=16, size=17)
    assert err.data == {"size": 17, "limit": 16}
    assert "limit=16" in str(err)


def test_with_context_returns_new_error() -> None:
    err = NonCanonicalEncoding("pad", reason="pad_bits")
    err2 = err.with_context(schema="Header")
    assert err2 is not err
    assert type(err2) is NonCanonicalEncoding
    assert err2.data == {"reason": "pad_bits", "schema": "Header"}
    assert err.data == {"reason": "pad_bits"}


def test_errors_compare_by_identity() -> None:
    a = CustomError("x")
    b = CustomError("x")
    assert a != b
    assert a == a


def test_validation_error_is_value_error() -> None:
    assert issubclass(ValidationError, ValueError)
    assert not is_cser_error(ValidationError("nope"))
