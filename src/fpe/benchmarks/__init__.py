"""Benchmark lookup tables.

Static, subgroup-specific outcome rates (by age band, PCOS phenotype,
ovarian reserve, endometriosis stage, BMI band and more) used as
reference data for recommendations and for plausibility checks of the
synthesized probability.

"""

from .lookup import BenchmarkSummary, age_benchmark, benchmarks_for, check_plausibility  # noqa: F401
