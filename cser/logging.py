"""
cser.logging
------------

Structured logging for the codec:
- JSON or concise text formats
- Context-local fields via `contextvars` (e.g. `schema`, `component`)
- Safe value coercion (bytes → hex)

The library itself never installs handlers; it only emits records on the
``cser.*`` loggers (rejection reasons at DEBUG). Applications that want to see
them call `configure()` once at process start.

Usage
-----
    from cser import logging as clog

    clog.configure(json=False, level="DEBUG")
    with clog.scope(schema="Header"):
        cser.deserialize(raw, Header)

This module purposefully uses only the stdlib.
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import sys
import traceback
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

from .config import load_config

# ----------------------------
# Context
# ----------------------------

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_CSER_LOG_CONTEXT", default={})

# LogRecord attributes that are never treated as structured extras.
_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    )
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    """Merge fields into the active context."""
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def unbind(*keys: str) -> None:
    cur = dict(_LOG_CONTEXT.get())
    for k in keys:
        cur.pop(k, None)
    _LOG_CONTEXT.set(cur)


def clear_context() -> None:
    _LOG_CONTEXT.set({})


@contextmanager
def scope(**fields: Any):
    """Bind `fields` for the duration of the block; restore prior context on exit."""
    prev = dict(_LOG_CONTEXT.get())
    try:
        bind(**fields)
        yield
    finally:
        _LOG_CONTEXT.set(prev)


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RESERVED
    }


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


# ----------------------------
# Formatters
# ----------------------------


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).rstrip()
        return json.dumps(payload, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2025-01-05T12:34:56.789+00:00 | DEBUG | cser.framing | schema=Header | reason=pad_bits | rejecting buffer
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{_utcnow_iso()} | {record.levelname:<5} | {record.name}"
        ctx = context()
        if ctx:
            line += " | " + " ".join(f"{k}={v}" for k, v in ctx.items())
        extras = {k: v for k, v in _extras(record).items() if k not in ctx}
        if extras:
            line += " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        line += f" | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


# ----------------------------
# Public setup API
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: Optional[str | int] = None,
    stream: io.TextIOBase = sys.stderr,
) -> logging.Handler:
    """
    Attach a console handler to the ``cser`` logger.

    Parameters
    ----------
    json : bool | None
        If None, determined by CSER_LOG_FORMAT (see cser.config).
    level : str | int | None
        Minimum level. If None, CSER_LOG_LEVEL is used.
    stream : TextIO
        Stream for the handler (default: stderr).

    Returns the installed handler so callers (and tests) can remove it.
    """
    cfg = load_config()
    chosen_json = (cfg.log_format == "json") if json is None else json
    lvl = _coerce_level(level if level is not None else cfg.log_level)

    root = logging.getLogger("cser")
    for h in list(root.handlers):
        if getattr(h, "_cser_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(lvl)
    handler.setFormatter(JSONFormatter() if chosen_json else TextFormatter())
    handler._cser_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(lvl)
    return handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the ``cser`` namespace."""
    if not name:
        return logging.getLogger("cser")
    if name == "cser" or name.startswith("cser."):
        return logging.getLogger(name)
    return logging.getLogger(f"cser.{name}")


_LEVEL_TO_INT = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return _LEVEL_TO_INT.get(level.upper(), logging.WARNING)


# The library stays silent unless the application configures logging.
logging.getLogger("cser").addHandler(logging.NullHandler())


__all__ = [
    "bind",
    "unbind",
    "clear_context",
    "context",
    "scope",
    "configure",
    "get_logger",
    "JSONFormatter",
    "TextFormatter",
]
