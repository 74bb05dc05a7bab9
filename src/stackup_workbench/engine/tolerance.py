# tolerance.py
"""Tolerance entries and their symmetric equivalents.

A tolerance cell is free-form spreadsheet input. It is classified once, at
ingestion, into one of four variants:

  - ``NumericTolerance``     a real number, read as a +/- half-width
  - ``AsymmetricTolerance``  ``"base +plus/-minus"``, e.g. ``"12.4+0.3/-0.1"``
  - ``RawTolerance``         any other text; a leading number is still honoured
  - ``EmptyTolerance``       blank / falsy

``normalize`` turns any of them into ``(nominal_adj, tol_adj)``. It never
raises: text that cannot be read degrades to zero tolerance.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union
import math
import re

from .stack_utils import parse_leading_float

ASYMMETRIC_PATTERN = re.compile(r"([-+]?\d*\.?\d+)\s*([+-]\d*\.?\d+)/([+-]\d*\.?\d+)")


@dataclass(frozen=True)
class NumericTolerance:
    value: float

    @property
    def raw(self) -> Any:
        return self.value


@dataclass(frozen=True)
class AsymmetricTolerance:
    base: float
    plus: float
    minus: float
    text: str

    @property
    def raw(self) -> Any:
        return self.text


@dataclass(frozen=True)
class RawTolerance:
    text: str

    @property
    def raw(self) -> Any:
        return self.text


@dataclass(frozen=True)
class EmptyTolerance:
    original: Any = None

    @property
    def raw(self) -> Any:
        return self.original


Tolerance = Union[NumericTolerance, AsymmetricTolerance, RawTolerance, EmptyTolerance]
TOLERANCE_TYPES = (NumericTolerance, AsymmetricTolerance, RawTolerance, EmptyTolerance)


@dataclass(frozen=True)
class NormalizedContributor:
    nominal_adj: float
    tol_adj: float


def parse_tolerance(raw: Any) -> Tolerance:
    if isinstance(raw, TOLERANCE_TYPES):
        return raw

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if not math.isfinite(float(raw)) or raw == 0:
            return EmptyTolerance(raw)
        return NumericTolerance(float(raw))

    if not raw:
        return EmptyTolerance(raw)

    text = str(raw)
    if not text.strip():
        return EmptyTolerance(raw)

    m = ASYMMETRIC_PATTERN.search(text.strip())
    if m:
        return AsymmetricTolerance(
            base=float(m.group(1)),
            plus=float(m.group(2)),
            minus=float(m.group(3)),
            text=text,
        )
    return RawTolerance(text)


def normalize(tol: Any, nominal: float) -> NormalizedContributor:
    tol = parse_tolerance(tol)

    if isinstance(tol, NumericTolerance):
        return NormalizedContributor(nominal, abs(tol.value))

    if isinstance(tol, AsymmetricTolerance):
        # Re-centre on the middle of the band; the width is the full band.
        nominal_adj = tol.base + (tol.plus + tol.minus) / 2.0
        tol_adj = abs(tol.plus) + abs(tol.minus)
        return NormalizedContributor(nominal_adj, tol_adj)

    if isinstance(tol, RawTolerance):
        numeric = parse_leading_float(tol.text)
        return NormalizedContributor(nominal, 0.0 if numeric is None else abs(numeric))

    return NormalizedContributor(nominal, 0.0)


def is_unparseable(tol: Any) -> bool:
    """True for text that normalizes to zero only because it could not be read."""
    tol = parse_tolerance(tol)
    return isinstance(tol, RawTolerance) and parse_leading_float(tol.text) is None
