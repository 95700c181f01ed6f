"""
cser.config: decode limits, bit-field width cap and logging defaults.

This module has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (CSER_*)
  2) Hardcoded safe defaults below

Key env vars:
  - CSER_MAX_BIT_WIDTH  (int)   default: 64          (0 disables the cap)
  - CSER_MAX_ALLOC      (int)   default: 67_108_864  (64 MiB per byte string)
  - CSER_MAX_ITEMS      (int)   default: 16_777_216  (elements per sequence)
  - CSER_LOG_LEVEL      (str)   default: WARNING
  - CSER_LOG_FORMAT     (str)   default: text        (text | json)

Usage:
    from cser.config import load_config
    CFG = load_config()
    if n > CFG.max_alloc: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

# Largest length a U56 can carry.
U56_MAX = (1 << 56) - 1

DEFAULT_MAX_BIT_WIDTH = 64
# Widest size-class tag; nonzero caps are raised to at least this.
MIN_BIT_WIDTH = 3
DEFAULT_MAX_ALLOC = 64 * 1024 * 1024
DEFAULT_MAX_ITEMS = 1 << 24
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "text"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        v = int(raw, 0)
    except Exception:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    for c in choices:
        if raw.lower() == c.lower():
            return c
    return default


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class CserConfig:
    # Widest bit field a BitWriter/BitReader accepts (0 = unbounded).
    max_bit_width: int

    # Default caps for length-delimited reads when a codec has no explicit max.
    max_alloc: int
    max_items: int

    # Logging defaults used by cser.logging.configure()
    log_level: str
    log_format: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_bit_width": self.max_bit_width,
            "max_alloc": self.max_alloc,
            "max_items": self.max_items,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


def _from_env() -> CserConfig:
    max_bit_width = _env_int("CSER_MAX_BIT_WIDTH", DEFAULT_MAX_BIT_WIDTH, min_v=0, max_v=1 << 20)
    if 0 < max_bit_width < MIN_BIT_WIDTH:
        max_bit_width = MIN_BIT_WIDTH
    return CserConfig(
        max_bit_width=max_bit_width,
        max_alloc=_env_int("CSER_MAX_ALLOC", DEFAULT_MAX_ALLOC, min_v=0, max_v=U56_MAX),
        max_items=_env_int(
            "CSER_MAX_ITEMS", DEFAULT_MAX_ITEMS, min_v=0, max_v=(1 << 32) - 1
        ),
        log_level=_env_choice("CSER_LOG_LEVEL", DEFAULT_LOG_LEVEL, _LOG_LEVELS),
        log_format=_env_choice("CSER_LOG_FORMAT", DEFAULT_LOG_FORMAT, ("text", "json")),
    )


@lru_cache(maxsize=1)
def load_config() -> CserConfig:
    """Build the process-wide config from the environment (memoised)."""
    return _from_env()


def reload_config() -> CserConfig:
    """Drop the cached config and read the environment again."""
    load_config.cache_clear()
    return load_config()


__all__ = [
    "CserConfig",
    "load_config",
    "reload_config",
    "U56_MAX",
    "DEFAULT_MAX_BIT_WIDTH",
    "DEFAULT_MAX_ALLOC",
    "DEFAULT_MAX_ITEMS",
]
