"""Male-factor classification and multiplier.

Semen parameters are first reduced to a severity using WHO 2021 lower
reference limits, then mapped to a multiplier.  DNA fragmentation,
varicocele and a positive seminal culture act as independent modifiers
on top of that.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ..core.bands import INF, BandTable
from ..core.models import ClinicalProfile
from ..core.ranges import domain

# WHO 2021 lower reference limits
WHO_CONCENTRATION = 16.0  # million/mL
WHO_PROGRESSIVE_MOTILITY = 30.0  # %
WHO_NORMAL_MORPHOLOGY = 4.0  # %

VARICOCELE_FACTOR = 0.80
SEMINAL_CULTURE_FACTOR = 0.75


class MaleSeverity(str, Enum):
    NORMAL = "normal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRYPTOZOOSPERMIA = "cryptozoospermia"
    AZOOSPERMIA = "azoospermia"


SEVERITY_FACTORS: Mapping[MaleSeverity, float] = MappingProxyType(
    {
        MaleSeverity.NORMAL: 1.0,
        MaleSeverity.MILD: 0.85,
        MaleSeverity.MODERATE: 0.60,
        MaleSeverity.SEVERE: 0.35,
        MaleSeverity.CRYPTOZOOSPERMIA: 0.15,
        MaleSeverity.AZOOSPERMIA: 0.05,
    }
)

_BY_ALTERATIONS = (
    MaleSeverity.NORMAL,
    MaleSeverity.MILD,
    MaleSeverity.MODERATE,
    MaleSeverity.SEVERE,
)

DNA_FRAGMENTATION_TABLE = BandTable.steps(
    "sperm_dna_fragmentation",
    edges=(-INF, 15.0, 20.0, 30.0, 50.0, INF),
    values=(1.0, 0.90, 0.75, 0.60, 0.40),
    fallback=0.40,
    domain=domain("sperm_dna_fragmentation"),
)


@dataclass(frozen=True)
class MaleFactorAssessment:
    """Breakdown of the male multiplier."""

    severity: MaleSeverity
    alterations: int
    severity_factor: float
    dna_fragmentation_factor: float
    varicocele_factor: float
    culture_factor: float

    @property
    def multiplier(self) -> float:
        return (
            self.severity_factor
            * self.dna_fragmentation_factor
            * self.varicocele_factor
            * self.culture_factor
        )

    @property
    def is_severe(self) -> bool:
        return self.severity in (
            MaleSeverity.SEVERE,
            MaleSeverity.CRYPTOZOOSPERMIA,
            MaleSeverity.AZOOSPERMIA,
        )


def count_alterations(
    concentration: Optional[float],
    motility: Optional[float],
    morphology: Optional[float],
) -> int:
    """Number of semen parameters below the WHO 2021 limits (unknown counts as normal)."""
    alterations = 0
    if concentration is not None and concentration < WHO_CONCENTRATION:
        alterations += 1
    if motility is not None and motility < WHO_PROGRESSIVE_MOTILITY:
        alterations += 1
    if morphology is not None and morphology < WHO_NORMAL_MORPHOLOGY:
        alterations += 1
    return alterations


def classify_severity(
    concentration: Optional[float],
    motility: Optional[float],
    morphology: Optional[float],
) -> MaleSeverity:
    if concentration is not None:
        if concentration == 0:
            return MaleSeverity.AZOOSPERMIA
        if concentration < 1.0:
            return MaleSeverity.CRYPTOZOOSPERMIA
    return _BY_ALTERATIONS[count_alterations(concentration, motility, morphology)]


def dna_fragmentation_factor(percent: float) -> float:
    return DNA_FRAGMENTATION_TABLE.lookup(percent)


def assess_male_factor(profile: ClinicalProfile) -> MaleFactorAssessment:
    concentration = profile.sperm_concentration
    motility = profile.sperm_progressive_motility
    morphology = profile.sperm_normal_morphology
    severity = classify_severity(concentration, motility, morphology)
    dna = profile.sperm_dna_fragmentation
    return MaleFactorAssessment(
        severity=severity,
        alterations=count_alterations(concentration, motility, morphology),
        severity_factor=SEVERITY_FACTORS[severity],
        dna_fragmentation_factor=dna_fragmentation_factor(dna) if dna is not None else 1.0,
        varicocele_factor=VARICOCELE_FACTOR if profile.has_varicocele else 1.0,
        culture_factor=SEMINAL_CULTURE_FACTOR if profile.seminal_culture_positive else 1.0,
    )


def male_factor(profile: ClinicalProfile) -> float:
    return assess_male_factor(profile).multiplier
