"""Probability synthesis."""

from .synthesizer import (  # noqa: F401
    CYCLES_PER_YEAR,
    MONTHLY_CEILING,
    MONTHLY_FLOOR,
    annual_probability,
    raw_product,
    synthesize,
)
