"""Map a monthly probability to category, treatment tier and urgency.

The category is a single total classification of the final probability.
Complexity and urgency start from the same thresholds and are then
raised (never lowered) by specific clinical findings and by critical
interactions that force a change of treatment path, regardless of how
favourable the number itself looks.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from ..core.models import ClinicalProfile, HsgResult
from ..core.tiers import FertilityCategory, TreatmentComplexity, TreatmentPath, UrgencyLevel
from ..factors.male import MaleSeverity, assess_male_factor
from ..interactions.models import InteractionsReport
from .models import Recommendation, TimeEstimate

CATEGORY_THRESHOLDS: Tuple[Tuple[float, FertilityCategory], ...] = (
    (0.20, FertilityCategory.EXCELLENT),
    (0.15, FertilityCategory.GOOD),
    (0.10, FertilityCategory.MODERATE),
    (0.05, FertilityCategory.LOW),
    (0.02, FertilityCategory.VERY_LOW),
)

BASE_COMPLEXITY: Mapping[FertilityCategory, TreatmentComplexity] = MappingProxyType(
    {
        FertilityCategory.EXCELLENT: TreatmentComplexity.LOW,
        FertilityCategory.GOOD: TreatmentComplexity.LOW,
        FertilityCategory.MODERATE: TreatmentComplexity.MEDIUM,
        FertilityCategory.LOW: TreatmentComplexity.HIGH,
        FertilityCategory.VERY_LOW: TreatmentComplexity.HIGH,
        FertilityCategory.CRITICAL: TreatmentComplexity.CRITICAL,
    }
)

BASE_URGENCY: Mapping[FertilityCategory, UrgencyLevel] = MappingProxyType(
    {
        FertilityCategory.EXCELLENT: UrgencyLevel.ROUTINE,
        FertilityCategory.GOOD: UrgencyLevel.ROUTINE,
        FertilityCategory.MODERATE: UrgencyLevel.PRIORITY,
        FertilityCategory.LOW: UrgencyLevel.URGENT,
        FertilityCategory.VERY_LOW: UrgencyLevel.URGENT,
        FertilityCategory.CRITICAL: UrgencyLevel.CRITICAL,
    }
)

TREATMENT_PATHS: Mapping[TreatmentComplexity, TreatmentPath] = MappingProxyType(
    {
        TreatmentComplexity.LOW: TreatmentPath.TIMED_INTERCOURSE,
        TreatmentComplexity.MEDIUM: TreatmentPath.OVULATION_INDUCTION_IUI,
        TreatmentComplexity.HIGH: TreatmentPath.IVF_ICSI,
        TreatmentComplexity.CRITICAL: TreatmentPath.OOCYTE_DONATION,
    }
)

# (months per attempt, per-attempt success floor, preparation months) per tier
_TTP_PARAMS: Mapping[TreatmentComplexity, Tuple[float, float, float]] = MappingProxyType(
    {
        TreatmentComplexity.LOW: (1.0, 0.05, 0.0),
        TreatmentComplexity.MEDIUM: (1.0, 0.12, 2.0),
        TreatmentComplexity.HIGH: (2.0, 0.30, 4.0),
        TreatmentComplexity.CRITICAL: (3.0, 0.45, 6.0),
    }
)
TTP_BOUNDS = (3.0, 36.0)
TTP_SPREAD = 0.25


def categorize(monthly: float) -> FertilityCategory:
    for threshold, category in CATEGORY_THRESHOLDS:
        if monthly >= threshold:
            return category
    return FertilityCategory.CRITICAL


def _raise_to(current, minimum):
    return minimum if minimum > current else current


def _male_severity(profile: ClinicalProfile) -> Optional[MaleSeverity]:
    if not profile.has_male_data:
        return None
    return assess_male_factor(profile).severity


def treatment_complexity(
    monthly: float,
    profile: ClinicalProfile,
    report: InteractionsReport,
) -> TreatmentComplexity:
    complexity = BASE_COMPLEXITY[categorize(monthly)]
    severity = _male_severity(profile)

    if (
        profile.hsg_result is HsgResult.BILATERAL
        or profile.has_otb
        or profile.endometriosis_stage >= 3
        or severity in (MaleSeverity.SEVERE, MaleSeverity.CRYPTOZOOSPERMIA, MaleSeverity.AZOOSPERMIA)
    ):
        complexity = _raise_to(complexity, TreatmentComplexity.HIGH)
    elif (
        profile.hsg_result is HsgResult.UNILATERAL
        or profile.endometriosis_stage >= 1
        or severity is MaleSeverity.MODERATE
        or (profile.amh is not None and profile.amh < 1.0)
        or profile.has_pcos
    ):
        complexity = _raise_to(complexity, TreatmentComplexity.MEDIUM)

    for record in report.interactions:
        if record.overrides_treatment:
            required = record.required_complexity or TreatmentComplexity.HIGH
            complexity = _raise_to(complexity, _raise_to(required, TreatmentComplexity.HIGH))
    return complexity


def treatment_path(complexity: TreatmentComplexity) -> TreatmentPath:
    return TREATMENT_PATHS[complexity]


def urgency(
    monthly: float,
    profile: ClinicalProfile,
    report: InteractionsReport,
    complexity: TreatmentComplexity,
) -> UrgencyLevel:
    level = BASE_URGENCY[categorize(monthly)]
    age = profile.age or 0.0
    if age >= 40:
        level = _raise_to(level, UrgencyLevel.URGENT)
    elif age >= 35:
        level = _raise_to(level, UrgencyLevel.PRIORITY)
    if profile.hsg_result is HsgResult.BILATERAL or profile.has_otb:
        level = _raise_to(level, UrgencyLevel.PRIORITY)
    if report.forces_treatment_change:
        level = _raise_to(level, UrgencyLevel.URGENT)
    if complexity is TreatmentComplexity.CRITICAL:
        level = UrgencyLevel.CRITICAL
    return level


def estimate_time_to_pregnancy(monthly: float, complexity: TreatmentComplexity) -> TimeEstimate:
    """Expected months to pregnancy under the given treatment tier.

    Attempts are treated as independent trials, so the expected number of
    attempts is the reciprocal of the per-attempt success rate.  Assisted
    tiers add preparation time and use their own minimum success rate.
    The estimate is clamped to [3, 36] months with a +/-25% range.
    """
    months_per_attempt, floor, preparation = _TTP_PARAMS[complexity]
    low, high = TTP_BOUNDS
    months = preparation + months_per_attempt / max(floor, monthly)
    months = min(max(months, low), high)
    return TimeEstimate(
        expected_months=round(months, 1),
        min_months=round(max(months * (1 - TTP_SPREAD), low), 1),
        max_months=round(min(months * (1 + TTP_SPREAD), high), 1),
    )


def evidence_sources(
    recommendations: Iterable[Recommendation],
    report: InteractionsReport,
) -> List[str]:
    """Ordered, de-duplicated citations backing the recommendations and interactions."""
    seen: List[str] = []
    for rec in recommendations:
        for citation in rec.citations:
            if citation not in seen:
                seen.append(citation)
    for record in report.interactions:
        for reference in record.references:
            if reference not in seen:
                seen.append(reference)
    return seen
