"""Ordinal tiers shared by the interaction engine and the classifier."""

from __future__ import annotations

from enum import Enum


class OrderedEnum(str, Enum):
    """String enum whose members compare by declaration order."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):  # type: ignore[override]
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):  # type: ignore[override]
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):  # type: ignore[override]
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):  # type: ignore[override]
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank


class FertilityCategory(OrderedEnum):
    """Qualitative band of the monthly probability, best first."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    LOW = "low"
    VERY_LOW = "very_low"
    CRITICAL = "critical"


class TreatmentComplexity(OrderedEnum):
    """Treatment tier, least invasive first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class UrgencyLevel(OrderedEnum):
    ROUTINE = "routine"
    PRIORITY = "priority"
    URGENT = "urgent"
    CRITICAL = "critical"


class TreatmentPath(str, Enum):
    """First-line treatment path implied by a complexity tier."""

    TIMED_INTERCOURSE = "timed_intercourse"
    OVULATION_INDUCTION_IUI = "ovulation_induction_iui"
    IVF_ICSI = "ivf_icsi"
    OOCYTE_DONATION = "oocyte_donation"
