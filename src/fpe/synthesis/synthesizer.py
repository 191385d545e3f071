"""Combine factors and interaction corrections into a monthly probability."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..core.factors import FactorAxis, MedicalFactors
from ..interactions.models import InteractionRecord

MONTHLY_FLOOR = 0.005
MONTHLY_CEILING = 0.25
CYCLES_PER_YEAR = 12


def raw_product(factors: MedicalFactors, interactions: Sequence[InteractionRecord] = ()) -> float:
    """Unclamped product of the baseline, every multiplier and every ``(1 - correction)``."""
    probability = factors.age
    for axis, value in factors.items():
        if axis is FactorAxis.AGE:
            continue
        probability *= value
    for record in interactions:
        probability *= 1.0 - record.correction
    return probability


def synthesize(
    factors: MedicalFactors,
    interactions: Sequence[InteractionRecord],
    confidence: float,
) -> Tuple[float, float]:
    """Return ``(monthly, confidence)``.

    The monthly probability is clamped to [0.005, 0.25]: a maximally
    compromised profile keeps a residual chance and no profile exceeds
    the observed population maximum.  Confidence comes from the
    validator's availability analysis and is passed through unchanged.
    """
    monthly = float(np.clip(raw_product(factors, interactions), MONTHLY_FLOOR, MONTHLY_CEILING))
    return monthly, confidence


def annual_probability(monthly: float, cycles: int = CYCLES_PER_YEAR) -> float:
    """Probability of at least one conception over ``cycles`` independent cycles."""
    return 1.0 - (1.0 - monthly) ** cycles
