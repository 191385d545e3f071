"""Select the benchmark rows that apply to a profile."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..core.errors import ValidationWarning, WarningKind
from ..core.models import ClinicalProfile, HsgResult
from ..factors.pathology import classify_pcos_phenotype
from . import tables as t


class BenchmarkSummary(BaseModel):
    """Matched reference rows for one profile; absent inputs leave entries unset."""

    age: Optional[Dict[str, Any]] = None
    pcos: Optional[Dict[str, Any]] = None
    low_ovarian_reserve: Optional[Dict[str, Any]] = None
    endometriosis: Optional[Dict[str, Any]] = None
    bmi: Optional[Dict[str, Any]] = None
    thyroid: Optional[Dict[str, Any]] = None
    prolactin: Optional[Dict[str, Any]] = None
    homa_ir: Optional[Dict[str, Any]] = None
    tubal: Optional[Dict[str, Any]] = None
    infertility_duration: Optional[Dict[str, Any]] = None


def age_benchmark(age: float) -> Optional[t.AgeBenchmark]:
    for row in t.AGE_BENCHMARKS:
        if row.lower <= age < row.upper:
            return row
    return None


def low_reserve_benchmark(age: float) -> Optional[t.OvarianReserveBenchmark]:
    for row in t.LOW_RESERVE_BENCHMARKS:
        if row.lower_age <= age < row.upper_age:
            return row
    return None


def pcos_benchmark(phenotype: str) -> Optional[t.PcosBenchmark]:
    for row in t.PCOS_BENCHMARKS:
        if row.phenotype == phenotype:
            return row
    return None


def tubal_benchmark(result: HsgResult) -> Optional[t.TubalBenchmark]:
    for row in t.TUBAL_BENCHMARKS:
        if row.condition == result.value:
            return row
    return None


def _dump(row) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    data = asdict(row)
    # Open-ended bands are stored with infinite edges; JSON has no infinity.
    for key in ("lower", "upper", "upper_age"):
        if key in data and data[key] in (float("inf"), float("-inf")):
            data[key] = None
    return data


def benchmarks_for(profile: ClinicalProfile) -> BenchmarkSummary:
    summary = BenchmarkSummary()
    if profile.age is not None:
        summary.age = _dump(age_benchmark(profile.age))
        if profile.amh is not None and profile.amh < 1.0:
            summary.low_ovarian_reserve = _dump(low_reserve_benchmark(profile.age))
    if profile.has_pcos:
        summary.pcos = _dump(pcos_benchmark(classify_pcos_phenotype(profile).value))
    if profile.endometriosis_stage in range(len(t.ENDOMETRIOSIS_BENCHMARKS)):
        summary.endometriosis = _dump(t.ENDOMETRIOSIS_BENCHMARKS[profile.endometriosis_stage])
    if profile.bmi is not None:
        summary.bmi = _dump(t.find_range(t.BMI_BENCHMARKS, profile.bmi))
    if profile.tsh is not None:
        summary.thyroid = _dump(t.find_range(t.THYROID_BENCHMARKS, profile.tsh))
    if profile.prolactin is not None:
        summary.prolactin = _dump(t.find_range(t.PROLACTIN_BENCHMARKS, profile.prolactin))
    if profile.homa_ir is not None:
        summary.homa_ir = _dump(t.find_range(t.HOMA_BENCHMARKS, profile.homa_ir))
    if profile.hsg_result is not None:
        summary.tubal = _dump(tubal_benchmark(profile.hsg_result))
    if profile.infertility_duration is not None:
        summary.infertility_duration = _dump(t.find_range(t.DURATION_BENCHMARKS, profile.infertility_duration))
    return summary


def check_plausibility(monthly: float, age: float, tolerance: float) -> Optional[ValidationWarning]:
    """Warn when the computed probability far exceeds the age-band spontaneous rate."""
    row = age_benchmark(age)
    if row is None:
        return None
    reference = row.spontaneous_monthly / 100.0
    if monthly > reference * tolerance:
        return ValidationWarning(
            kind=WarningKind.BENCHMARK_DEVIATION,
            message=(
                f"Monthly probability {monthly:.3f} exceeds {tolerance:g}x the "
                f"age-band spontaneous rate of {reference:.3f}"
            ),
            values={"monthly": monthly, "reference": reference, "age": age},
        )
    return None
