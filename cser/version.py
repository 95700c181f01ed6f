"""
Version helpers for cser.

Best-effort detection, in priority order:
    1) CSER_VERSION env var (authoritative override)
    2) installed distribution metadata (`importlib.metadata`)
    3) fallback DEFAULT_VERSION

This module has **no external dependencies** and is safe to import very early.
"""

from __future__ import annotations

import os
from importlib import metadata

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "cser"


def resolve_version() -> str:
    env = os.getenv("CSER_VERSION")
    if env:
        return env.strip()
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


__version__ = resolve_version()


if __name__ == "__main__":
    print(__version__)
