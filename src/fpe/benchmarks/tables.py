"""Static subgroup outcome tables.

Reference rates (percentages) from registry data and large cohorts,
used for recommendation context and plausibility cross-checks.  They
never enter the probability product.  Every table is an immutable tuple
of frozen rows and may be shared across threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.bands import INF


@dataclass(frozen=True)
class AgeBenchmark:
    lower: float
    upper: float
    spontaneous_monthly: float  # % per cycle
    ivf_live_birth: float  # % per retrieval
    source: str


@dataclass(frozen=True)
class PcosBenchmark:
    phenotype: str
    letrozole_ovulation: float
    iui_pregnancy: float
    source: str


@dataclass(frozen=True)
class OvarianReserveBenchmark:
    lower_age: float
    upper_age: float
    embryos_per_cycle: int
    live_birth_per_cycle: float
    cumulative_live_birth: float
    source: str


@dataclass(frozen=True)
class RangeBenchmark:
    """Outcome for a band of a continuous variable."""

    label: str
    lower: float
    upper: float
    rate: float
    note: str = ""
    source: str = ""


@dataclass(frozen=True)
class EndometriosisBenchmark:
    stage: int
    spontaneous_monthly: float
    ivf_live_birth: float
    source: str


@dataclass(frozen=True)
class TubalBenchmark:
    condition: str
    spontaneous_monthly: float
    source: str


AGE_BENCHMARKS: Tuple[AgeBenchmark, ...] = (
    AgeBenchmark(18, 35, 20.0, 42.5, "SART National Summary 2022"),
    AgeBenchmark(35, 38, 16.5, 37.5, "SART National Summary 2022"),
    AgeBenchmark(38, 41, 12.0, 27.5, "SART National Summary 2022"),
    AgeBenchmark(41, 43, 6.5, 12.5, "SART National Summary 2022"),
    AgeBenchmark(43, INF, 2.0, 4.0, "SART National Summary 2022"),
)

PCOS_BENCHMARKS: Tuple[PcosBenchmark, ...] = (
    PcosBenchmark("A", 77.5, 16.0, "Legro et al., NEJM 2014"),
    PcosBenchmark("B", 72.5, 14.0, "Legro et al., NEJM 2014"),
    PcosBenchmark("C", 67.5, 13.0, "Legro et al., NEJM 2014"),
    PcosBenchmark("D", 55.0, 11.5, "Legro et al., NEJM 2014"),
)

LOW_RESERVE_BENCHMARKS: Tuple[OvarianReserveBenchmark, ...] = (
    OvarianReserveBenchmark(0, 35, 3, 27.5, 42.5, "POSEIDON Group 2016"),
    OvarianReserveBenchmark(35, 40, 2, 20.0, 32.5, "POSEIDON Group 2016"),
    OvarianReserveBenchmark(40, INF, 1, 7.5, 15.0, "POSEIDON Group 2016"),
)

ENDOMETRIOSIS_BENCHMARKS: Tuple[EndometriosisBenchmark, ...] = (
    EndometriosisBenchmark(0, 20.0, 42.5, "ESHRE Endometriosis Guideline 2022"),
    EndometriosisBenchmark(1, 25.0, 40.0, "ESHRE Endometriosis Guideline 2022"),
    EndometriosisBenchmark(2, 15.0, 35.0, "ESHRE Endometriosis Guideline 2022"),
    EndometriosisBenchmark(3, 15.0, 30.0, "ESHRE Endometriosis Guideline 2022"),
    EndometriosisBenchmark(4, 7.5, 22.5, "ESHRE Endometriosis Guideline 2022"),
)

# Spontaneous monthly pregnancy rate (%) by BMI band
BMI_BENCHMARKS: Tuple[RangeBenchmark, ...] = (
    RangeBenchmark("underweight", -INF, 18.5, 14.0, "ovulatory dysfunction", "Rich-Edwards et al., Epidemiology 2002"),
    RangeBenchmark("normal", 18.5, 25.0, 20.0, "", "Rich-Edwards et al., Epidemiology 2002"),
    RangeBenchmark("overweight", 25.0, 30.0, 17.0, "", "Rich-Edwards et al., Epidemiology 2002"),
    RangeBenchmark("obesity I", 30.0, 35.0, 13.0, "", "Gesink Law et al., Hum Reprod 2007"),
    RangeBenchmark("obesity II", 35.0, 40.0, 9.0, "", "Gesink Law et al., Hum Reprod 2007"),
    RangeBenchmark("obesity III", 40.0, INF, 6.0, "", "Gesink Law et al., Hum Reprod 2007"),
)

# Miscarriage rate (%) by TSH band
THYROID_BENCHMARKS: Tuple[RangeBenchmark, ...] = (
    RangeBenchmark("hyperthyroid", -INF, 0.4, 18.0, "miscarriage rate", "ATA Pregnancy Thyroid Guideline 2017"),
    RangeBenchmark("optimal", 0.4, 2.5, 12.0, "miscarriage rate", "ATA Pregnancy Thyroid Guideline 2017"),
    RangeBenchmark("high-normal", 2.5, 4.5, 15.0, "miscarriage rate", "ATA Pregnancy Thyroid Guideline 2017"),
    RangeBenchmark("hypothyroid", 4.5, INF, 22.0, "miscarriage rate", "ATA Pregnancy Thyroid Guideline 2017"),
)

# Ovulation rate (%) by prolactin band
PROLACTIN_BENCHMARKS: Tuple[RangeBenchmark, ...] = (
    RangeBenchmark("normal", -INF, 25.0, 95.0, "ovulation rate", "Endocrine Society Hyperprolactinemia Guideline 2011"),
    RangeBenchmark("mild", 25.0, 50.0, 80.0, "ovulation rate", "Endocrine Society Hyperprolactinemia Guideline 2011"),
    RangeBenchmark("moderate", 50.0, 100.0, 55.0, "ovulation rate", "Endocrine Society Hyperprolactinemia Guideline 2011"),
    RangeBenchmark("severe", 100.0, INF, 25.0, "ovulation rate", "Endocrine Society Hyperprolactinemia Guideline 2011"),
)

# Ovulation rate (%) by HOMA-IR band
HOMA_BENCHMARKS: Tuple[RangeBenchmark, ...] = (
    RangeBenchmark("normal", -INF, 2.5, 85.0, "ovulation rate", "International PCOS Guideline 2023"),
    RangeBenchmark("mild", 2.5, 3.5, 70.0, "ovulation rate", "International PCOS Guideline 2023"),
    RangeBenchmark("moderate", 3.5, 5.0, 55.0, "ovulation rate", "International PCOS Guideline 2023"),
    RangeBenchmark("severe", 5.0, INF, 40.0, "ovulation rate", "International PCOS Guideline 2023"),
)

TUBAL_BENCHMARKS: Tuple[TubalBenchmark, ...] = (
    TubalBenchmark("normal", 20.0, "ASRM Tubal Factor Committee Opinion 2021"),
    TubalBenchmark("unilateral", 15.0, "ASRM Tubal Factor Committee Opinion 2021"),
    TubalBenchmark("bilateral_partial", 2.5, "ASRM Tubal Factor Committee Opinion 2021"),
    TubalBenchmark("bilateral", 1.0, "ASRM Tubal Factor Committee Opinion 2021"),
)

# Cumulative 12-month spontaneous pregnancy rate (%) by years of infertility
DURATION_BENCHMARKS: Tuple[RangeBenchmark, ...] = (
    RangeBenchmark("<1 year", -INF, 1.0, 85.0, "12-month cumulative", "Evers, Lancet 2002"),
    RangeBenchmark("1-2 years", 1.0, 2.0, 50.0, "12-month cumulative", "Evers, Lancet 2002"),
    RangeBenchmark("2-3 years", 2.0, 3.0, 30.0, "12-month cumulative", "Evers, Lancet 2002"),
    RangeBenchmark("3-5 years", 3.0, 5.0, 20.0, "12-month cumulative", "Evers, Lancet 2002"),
    RangeBenchmark(">5 years", 5.0, INF, 10.0, "12-month cumulative", "Evers, Lancet 2002"),
)


def find_range(rows: Tuple[RangeBenchmark, ...], value: float) -> Optional[RangeBenchmark]:
    for row in rows:
        if row.lower <= value < row.upper:
            return row
    return None
