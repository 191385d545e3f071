"""Anatomical and categorical factor calculators.

These are direct lookups from a stage or pathology type to a multiplier.
Myomas are additionally keyed by size within each location, and PCOS is
first classified into a Rotterdam phenotype from the metabolic and
cycle data available on the profile.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ..core.bands import INF, BandTable
from ..core.models import AdenomyosisType, ClinicalProfile, HsgResult, MyomaType, PolypType
from ..core.ranges import domain

ENDOMETRIOSIS_FACTORS: Mapping[int, float] = MappingProxyType(
    {0: 1.0, 1: 0.85, 2: 0.70, 3: 0.50, 4: 0.30}
)

ADENOMYOSIS_FACTORS: Mapping[AdenomyosisType, float] = MappingProxyType(
    {
        AdenomyosisType.NONE: 1.0,
        AdenomyosisType.FOCAL: 0.75,
        AdenomyosisType.DIFFUSE: 0.55,
    }
)

POLYP_FACTORS: Mapping[PolypType, float] = MappingProxyType(
    {
        PolypType.NONE: 1.0,
        PolypType.SINGLE: 0.75,
        PolypType.MULTIPLE: 0.55,
    }
)

HSG_FACTORS: Mapping[HsgResult, float] = MappingProxyType(
    {
        HsgResult.NORMAL: 1.0,
        HsgResult.UNILATERAL: 0.50,
        HsgResult.BILATERAL: 0.01,
    }
)

OTB_FACTOR = 0.01

_SIZE = domain("myoma_size_cm")

MYOMA_SIZE_TABLES: Mapping[MyomaType, BandTable] = MappingProxyType(
    {
        MyomaType.SUBMUCOSAL: BandTable.steps(
            "myoma_submucosal", edges=(-INF, 1.0, INF), values=(0.70, 0.30), fallback=0.30, domain=_SIZE
        ),
        MyomaType.INTRAMURAL: BandTable.steps(
            "myoma_intramural", edges=(-INF, 4.0, 7.0, INF), values=(0.90, 0.75, 0.60), fallback=0.60, domain=_SIZE
        ),
        MyomaType.SUBSEROSAL: BandTable.steps(
            "myoma_subserosal", edges=(-INF, 10.0, INF), values=(0.95, 0.85), fallback=0.85, domain=_SIZE
        ),
    }
)

# Used when the myoma location is known but its size is not.
MYOMA_UNKNOWN_SIZE_FACTORS: Mapping[MyomaType, float] = MappingProxyType(
    {
        MyomaType.NONE: 1.0,
        MyomaType.SUBMUCOSAL: 0.50,
        MyomaType.INTRAMURAL: 0.90,
        MyomaType.SUBSEROSAL: 0.95,
    }
)


class PcosPhenotype(str, Enum):
    """Rotterdam PCOS phenotypes, from most to least severe."""

    A = "A"  # hyperandrogenism + oligo-ovulation + polycystic ovaries
    B = "B"  # hyperandrogenism + oligo-ovulation
    D = "D"  # oligo-ovulation + polycystic ovaries
    C = "C"  # hyperandrogenism + polycystic ovaries, ovulatory


PCOS_PHENOTYPE_FACTORS: Mapping[PcosPhenotype, float] = MappingProxyType(
    {
        PcosPhenotype.A: 0.25,
        PcosPhenotype.B: 0.35,
        PcosPhenotype.D: 0.45,
        PcosPhenotype.C: 0.65,
    }
)


def endometriosis_factor(stage: int) -> float:
    return ENDOMETRIOSIS_FACTORS[stage]


def myoma_factor(myoma_type: MyomaType, size_cm: Optional[float] = None) -> float:
    """Submucosal myomas distort the cavity and weigh most; subserosal barely count."""
    if myoma_type is MyomaType.NONE:
        return 1.0
    if size_cm is None:
        return MYOMA_UNKNOWN_SIZE_FACTORS[myoma_type]
    return MYOMA_SIZE_TABLES[myoma_type].lookup(size_cm)


def adenomyosis_factor(kind: AdenomyosisType) -> float:
    return ADENOMYOSIS_FACTORS[kind]


def polyp_factor(kind: PolypType) -> float:
    return POLYP_FACTORS[kind]


def hsg_factor(result: HsgResult) -> float:
    return HSG_FACTORS[result]


def otb_factor(has_otb: bool) -> float:
    return OTB_FACTOR if has_otb else 1.0


def pcos_severity_score(profile: ClinicalProfile) -> float:
    """Heuristic severity score in [0, 0.75] from metabolic, cycle and AMH data.

    Unknown measurements contribute a moderate amount so that a PCOS
    diagnosis without work-up is not treated as the mildest phenotype.
    """
    score = 0.0

    if profile.homa_ir is None:
        score += 0.15
    elif profile.homa_ir > 3.5:
        score += 0.30
    elif profile.homa_ir > 2.5:
        score += 0.15

    if profile.cycle_length is None:
        score += 0.15
    elif profile.cycle_length > 45:
        score += 0.20
    elif profile.cycle_length > 35:
        score += 0.10

    if profile.bmi is not None and profile.bmi > 30:
        score += 0.10

    if profile.amh is None:
        score += 0.10
    elif profile.amh > 6:
        score += 0.15
    elif profile.amh > 4:
        score += 0.10

    return round(score, 4)


def classify_pcos_phenotype(profile: ClinicalProfile) -> PcosPhenotype:
    score = pcos_severity_score(profile)
    if score >= 0.5:
        return PcosPhenotype.A
    if score >= 0.4:
        return PcosPhenotype.B
    if score >= 0.3:
        return PcosPhenotype.D
    return PcosPhenotype.C


def pcos_factor(profile: ClinicalProfile) -> float:
    if not profile.has_pcos:
        return 1.0
    return PCOS_PHENOTYPE_FACTORS[classify_pcos_phenotype(profile)]
