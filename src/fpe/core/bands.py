"""Closed-open band tables shared by every continuous factor calculator.

A :class:`BandTable` is an ordered tuple of :class:`Band` intervals
``[lower, upper)``.  Construction checks once, for every table, that the
bands are ordered, contiguous and non-overlapping and that they cover the
calculator's declared input domain; a table that fails these checks
raises ``ValueError`` at import time.  Lookups therefore match exactly
one band for any value inside the domain.

The table's ``fallback`` is returned only when a value matches no band
(``NaN`` or a value outside the domain that bypassed validation).  It is
logged as a warning because it indicates an invariant violation upstream.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..utils.logging import get_logger

logger = get_logger(__name__)

INF = math.inf


@dataclass(frozen=True)
class Band:
    """A closed-open interval mapped to a constant or a linear segment.

    When ``end_value`` is set the band interpolates linearly from
    ``value`` at ``lower`` towards ``end_value`` at ``upper``.
    """

    lower: float
    upper: float
    value: float
    end_value: Optional[float] = None

    def contains(self, x: float) -> bool:
        return self.lower <= x < self.upper

    def evaluate(self, x: float) -> float:
        if self.end_value is None:
            return self.value
        fraction = (x - self.lower) / (self.upper - self.lower)
        low, high = self.extremes
        # keep rounding from stepping past the segment ends
        return min(max(self.value + (self.end_value - self.value) * fraction, low), high)

    @property
    def extremes(self) -> Tuple[float, float]:
        end = self.value if self.end_value is None else self.end_value
        return (min(self.value, end), max(self.value, end))


@dataclass(frozen=True)
class BandTable:
    """Ordered, exhaustive, non-overlapping band lookup for one variable."""

    name: str
    bands: Tuple[Band, ...]
    fallback: float
    domain: Tuple[float, float]
    _lowers: Tuple[float, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        bands = tuple(self.bands)
        if not bands:
            raise ValueError(f"{self.name}: band table is empty")
        for band in bands:
            if not band.lower < band.upper:
                raise ValueError(f"{self.name}: band [{band.lower}, {band.upper}) is empty")
            if band.end_value is not None and not (
                math.isfinite(band.lower) and math.isfinite(band.upper)
            ):
                raise ValueError(f"{self.name}: linear band [{band.lower}, {band.upper}) must be finite")
        for previous, current in zip(bands, bands[1:]):
            if previous.upper != current.lower:
                raise ValueError(
                    f"{self.name}: bands [{previous.lower}, {previous.upper}) and "
                    f"[{current.lower}, {current.upper}) are not contiguous"
                )
        low, high = self.domain
        if low < bands[0].lower or high >= bands[-1].upper:
            raise ValueError(
                f"{self.name}: bands [{bands[0].lower}, {bands[-1].upper}) do not cover "
                f"domain [{low}, {high}]"
            )
        object.__setattr__(self, "bands", bands)
        object.__setattr__(self, "_lowers", tuple(b.lower for b in bands))

    @classmethod
    def steps(
        cls,
        name: str,
        edges: Sequence[float],
        values: Sequence[float],
        fallback: float,
        domain: Tuple[float, float],
    ) -> "BandTable":
        """Build a step table from ``len(values) + 1`` band edges."""
        if len(edges) != len(values) + 1:
            raise ValueError(f"{name}: expected {len(values) + 1} edges, got {len(edges)}")
        bands = [Band(lo, hi, v) for lo, hi, v in zip(edges, edges[1:], values)]
        return cls(name=name, bands=tuple(bands), fallback=fallback, domain=domain)

    def find(self, x: float) -> Optional[Band]:
        """Return the single band containing ``x``, or ``None``."""
        idx = bisect_right(self._lowers, x) - 1
        if idx < 0:
            return None
        band = self.bands[idx]
        return band if band.contains(x) else None

    def lookup(self, x: float) -> float:
        band = self.find(x)
        if band is None:
            logger.warning(
                "No band matched; using fallback",
                extra={"extra": {"table": self.name, "value": x, "fallback": self.fallback}},
            )
            return self.fallback
        return band.evaluate(x)

    @property
    def output_range(self) -> Tuple[float, float]:
        lows: List[float] = []
        highs: List[float] = []
        for band in self.bands:
            lo, hi = band.extremes
            lows.append(lo)
            highs.append(hi)
        return (min(lows), max(highs))
