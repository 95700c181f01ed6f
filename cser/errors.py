"""
cser.errors
-----------

A small, closed error system for the codec.

Design goals
------------
- One root `CserError` with machine-friendly `code` and optional `data`.
- Exactly five decode failures (non-canonical, malformed, too large, overflow,
  custom). Decoding stops at the first one; there is no partial result.
- `ValidationError` for values rejected *before* encoding. Encoding a value
  that passed validation never fails.
- Safe JSON representation (`to_dict`) suitable for logs.

This module uses only stdlib so every other module can import it first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class CserErrorCode(str, Enum):
    NON_CANONICAL = "CSER/NON_CANONICAL_ENCODING"
    MALFORMED = "CSER/MALFORMED_ENCODING"
    TOO_LARGE_ALLOC = "CSER/TOO_LARGE_ALLOC"
    OVERFLOW = "CSER/OVERFLOW"
    CUSTOM = "CSER/CUSTOM"


@dataclass(eq=False)
class CserError(Exception):
    """
    Root error for decode failures.

    Attributes
    ----------
    code: str
        Machine-stable error code (see CserErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional machine data (offsets, sizes). Must be JSON-serializable.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(f"{self.code}: {self.message}")

    def with_context(self, **ctx: Any) -> "CserError":
        """Return a *new* error of the same class with extra context merged."""
        err = type(self).__new__(type(self))
        CserError.__init__(
            err,
            code=self.code,
            message=self.message,
            data={**self.data, **_jsonmap(ctx)},
        )
        return err

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs."""
        return {
            "code": str(self.code.value if isinstance(self.code, Enum) else self.code),
            "message": self.message,
            "data": _jsonmap(self.data),
        }

    def __str__(self) -> str:  # pragma: no cover - human formatting
        code = self.code.value if isinstance(self.code, Enum) else self.code
        parts = [f"{code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


class NonCanonicalEncoding(CserError):
    """Decodable, but not the unique minimal form of the value."""

    def __init__(self, message="non canonical encoding", **data: Any) -> None:
        super().__init__(
            code=CserErrorCode.NON_CANONICAL, message=message, data=_jsonmap(data)
        )


class MalformedEncoding(CserError):
    """Too short or internally inconsistent to decode at all."""

    def __init__(self, message="malformed encoding", **data: Any) -> None:
        super().__init__(
            code=CserErrorCode.MALFORMED, message=message, data=_jsonmap(data)
        )


class TooLargeAlloc(CserError):
    def __init__(
        self, message="too large allocation", limit: Optional[int] = None, **data: Any
    ) -> None:
        d = dict(data)
        if limit is not None:
            d["limit"] = limit
        super().__init__(
            code=CserErrorCode.TOO_LARGE_ALLOC, message=message, data=_jsonmap(d)
        )


class OverFlowError(CserError):
    """A decoded magnitude does not fit the target type."""

    def __init__(self, message="value overflow", **data: Any) -> None:
        super().__init__(
            code=CserErrorCode.OVERFLOW, message=message, data=_jsonmap(data)
        )


class CustomError(CserError):
    """Failure raised by a value mapping (e.g. invalid UTF-8)."""

    def __init__(self, message="custom error", **data: Any) -> None:
        super().__init__(
            code=CserErrorCode.CUSTOM, message=message, data=_jsonmap(data)
        )


class ValidationError(ValueError):
    """Raised when a Python value cannot be encoded by the requested codec."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def is_cser_error(exc: BaseException) -> bool:
    return isinstance(exc, CserError)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; hex-encode bytes; stringify the rest.
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    try:
        return str(v)
    except Exception:
        return "<unprintable>"


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "CserErrorCode",
    "CserError",
    "NonCanonicalEncoding",
    "MalformedEncoding",
    "TooLargeAlloc",
    "OverFlowError",
    "CustomError",
    "ValidationError",
    "is_cser_error",
]
