# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Shared configuration for property-based tests (Hypothesis), plus the
value/codec strategies the cser properties are written against.

What this does on import:
- Registers named Hypothesis profiles (dev/ci/fast/stress).
- Selects the active profile using HYPOTHESIS_PROFILE, otherwise "ci" on CI
  (CI env var present/truthy) and "dev" locally.
- Exposes `schema_and_value()`: draws a random codec tree together with a
  value that codec accepts.

Usage in tests:
    from tests.property import given, schema_and_value

    @given(schema_and_value())
    def test_roundtrip(sv):
        codec, value = sv
        ...

Environment knobs:
- HYPOTHESIS_PROFILE=dev|ci|fast|stress
- CI=true (auto-pick the 'ci' profile if HYPOTHESIS_PROFILE not set)
"""
from __future__ import annotations

import os
from typing import Any, Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

from cser import (
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
    Codec,
    FixedBytes,
    Option,
    array_vec,
    option,
    vec,
)
from cser.types import U56

# ---- profile registry --------------------------------------------------------


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


settings.register_profile(
    "dev",
    settings(
        max_examples=100,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
        verbosity=Verbosity.normal,
        derandomize=False,
    ),
)

settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_hc(
            HealthCheck.too_slow,
            HealthCheck.filter_too_much,
            HealthCheck.data_too_large,
        ),
        verbosity=Verbosity.normal,
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    v = os.getenv(name)
    return (v or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or (
    "ci" if _env_truthy("CI") else "dev"
)
settings.load_profile(_active)


def is_ci() -> bool:
    """Return True if we appear to be running under CI."""
    return _env_truthy("CI")


def active_profile() -> str:
    """Return the name of the active Hypothesis profile."""
    return _active


# ---- codec / value strategies ------------------------------------------------

_SCALARS = [
    (BOOL, st.booleans()),
    (U8, st.integers(0, 0xFF)),
    (U16, st.integers(0, 0xFFFF)),
    (U32, st.integers(0, 0xFFFF_FFFF)),
    (U64, st.integers(0, (1 << 64) - 1)),
    (I64, st.integers(-(1 << 63), (1 << 63) - 1)),
    (U56_CODEC, st.integers(0, U56.MAX).map(U56)),
    (U256, st.integers(0, (1 << 256) - 1)),
    (BYTES, st.binary(max_size=64)),
    (STR, st.text(max_size=32)),
]


def _scalar() -> st.SearchStrategy[Tuple[Codec, st.SearchStrategy[Any]]]:
    fixed = st.integers(1, 40).map(lambda n: (FixedBytes(n), st.binary(min_size=n, max_size=n)))
    return st.one_of(st.sampled_from(_SCALARS), fixed)


def _extend(
    children: st.SearchStrategy[Tuple[Codec, st.SearchStrategy[Any]]],
) -> st.SearchStrategy[Tuple[Codec, st.SearchStrategy[Any]]]:
    def _vec(cv):
        c, v = cv
        if c == U8:
            return vec(c), st.binary(max_size=6)
        return vec(c), st.lists(v, max_size=6)

    def _opt(cv):
        c, v = cv
        if isinstance(c, Option):
            return c, v
        return option(c), st.none() | v

    def _arr(cv):
        c, v = cv
        if c == U8:
            return array_vec(c, 4), st.binary(max_size=4)
        return array_vec(c, 4), st.lists(v, max_size=4)

    return st.one_of(children.map(_vec), children.map(_opt), children.map(_arr))


def codec_and_strategy() -> st.SearchStrategy[Tuple[Codec, st.SearchStrategy[Any]]]:
    """A random codec tree (scalars, vec/option/array_vec nesting) with a value strategy."""
    return st.recursive(_scalar(), _extend, max_leaves=6)


@st.composite
def schema_and_value(draw) -> Tuple[Codec, Any]:
    """Draw a codec and one value it accepts."""
    codec, values = draw(codec_and_strategy())
    return codec, draw(values)


__all__ = [
    "st",
    "given",
    "is_ci",
    "active_profile",
    "codec_and_strategy",
    "schema_and_value",
]
