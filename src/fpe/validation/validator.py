"""Validation of clinical profiles before computation.

This module provides a `ProfileValidator` class that checks a
:class:`~fpe.core.models.ClinicalProfile` in the order the pipeline needs
it: the mandatory age first, then every numeric field against its closed
plausibility range, then cross-field medical consistency, and finally a
data-availability analysis that yields the confidence score.

Range problems raise :class:`~fpe.core.errors.RangeValidationError` with
the offending value and bounds.  Consistency problems never raise; they
are collected as warnings and travel with the result.  A separate
`validate_calculation_safety` guard runs after aggregation and raises
:class:`~fpe.core.errors.CalculationOverflowError` when a factor table
produced something outside its declared bounds.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.errors import (
    CalculationOverflowError,
    InsufficientDataError,
    MedicalValidationError,
    RangeValidationError,
    ValidationWarning,
    WarningKind,
)
from ..core.factors import FactorAxis, MedicalFactors, factor_bounds
from ..core.models import ClinicalProfile, MyomaType
from ..core.ranges import CLINICAL_RANGES
from ..utils.logging import get_logger

logger = get_logger(__name__)

CORE_FIELDS = ("age", "amh", "tsh", "bmi")
CRITICAL_FIELDS = ("age", "amh")
SECONDARY_FIELDS = ("tsh", "bmi")
CRITICAL_BONUS = 0.10
SECONDARY_BONUS = 0.05

OPTIONAL_FIELDS = (
    "bmi",
    "cycle_length",
    "infertility_duration",
    "previous_pregnancies",
    "amh",
    "tsh",
    "prolactin",
    "homa_ir",
    "myoma_size_cm",
    "hsg_result",
    "sperm_concentration",
    "sperm_progressive_motility",
    "sperm_normal_morphology",
    "sperm_dna_fragmentation",
)

CORE_PRODUCT_BOUNDS = (0.0001, 1.0)


class DataAvailability(BaseModel):
    """Which inputs were present and how much the result can be trusted."""

    available_core: List[str] = Field(default_factory=list)
    missing_core: List[str] = Field(default_factory=list)
    available_optional: List[str] = Field(default_factory=list)
    missing_optional: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)

    @property
    def completeness(self) -> float:
        """Share of optional fields that were provided."""
        total = len(self.available_optional) + len(self.missing_optional)
        return len(self.available_optional) / total if total else 0.0


class ValidatedProfile(BaseModel):
    """A profile that passed range validation, with its soft findings."""

    profile: ClinicalProfile
    warnings: List[ValidationWarning] = Field(default_factory=list)
    availability: DataAvailability


def validate_range(field: str, value: float, minimum: float, maximum: float, unit: str = "") -> float:
    """Return ``value`` unchanged when it lies in ``[minimum, maximum]``."""
    if not minimum <= value <= maximum:
        raise RangeValidationError(field, value, minimum, maximum, unit)
    return value


def _validate_field(field: str, value: float) -> float:
    r = CLINICAL_RANGES[field]
    return validate_range(field, value, r.minimum, r.maximum, r.unit)


def validate_age(age: float) -> float:
    return _validate_field("age", age)


def validate_amh(amh: float) -> float:
    return _validate_field("amh", amh)


def validate_tsh(tsh: float) -> float:
    return _validate_field("tsh", tsh)


def validate_bmi(bmi: float) -> float:
    return _validate_field("bmi", bmi)


def validate_consistency(age: Optional[float], amh: Optional[float]) -> Optional[MedicalValidationError]:
    """Flag an AMH level that is implausible for the patient's age.

    The error is returned rather than raised: the computation continues
    and the caller decides how to present the inconsistency.
    """
    if age is None or amh is None:
        return None
    if (age > 40 and amh > 3.0) or (age < 25 and amh < 0.5):
        return MedicalValidationError(
            WarningKind.AGE_AMH_INCONSISTENCY,
            f"AMH {amh:g} ng/mL is unusual for age {age:g}; consider repeating the test",
            {"age": age, "amh": amh},
        )
    return None


def validate_minimum_data(profile: ClinicalProfile) -> None:
    if profile.age is None:
        raise InsufficientDataError(["age"])


def validate_available_data(profile: ClinicalProfile) -> DataAvailability:
    """Enumerate present and missing inputs and compute the confidence score."""
    available_core = [f for f in CORE_FIELDS if getattr(profile, f) is not None]
    missing_core = [f for f in CORE_FIELDS if getattr(profile, f) is None]

    confidence = len(available_core) / len(CORE_FIELDS)
    confidence += CRITICAL_BONUS * sum(1 for f in CRITICAL_FIELDS if f in available_core)
    confidence += SECONDARY_BONUS * sum(1 for f in SECONDARY_FIELDS if f in available_core)

    return DataAvailability(
        available_core=available_core,
        missing_core=missing_core,
        available_optional=[f for f in OPTIONAL_FIELDS if getattr(profile, f) is not None],
        missing_optional=[f for f in OPTIONAL_FIELDS if getattr(profile, f) is None],
        confidence=round(min(confidence, 1.0), 4),
    )


def validate_calculation_safety(factors: MedicalFactors) -> None:
    """Raise if a factor table produced a value outside its declared bounds."""
    for axis, value in factors.items():
        low, high = factor_bounds(axis)
        if not low <= value <= high:
            raise CalculationOverflowError(f"{axis.value} factor", value, low, high)

    core_product = (
        factors[FactorAxis.AGE] * factors[FactorAxis.AMH] * factors[FactorAxis.TSH] * factors[FactorAxis.BMI]
    )
    low, high = CORE_PRODUCT_BOUNDS
    if not low <= core_product <= high:
        raise CalculationOverflowError("core factor product", core_product, low, high)


class ProfileValidator:
    """
    Validate a clinical profile for computation.

    Validators accumulate warnings across checks; range failures raise
    immediately because no meaningful result can be computed from them.
    """

    def __init__(self) -> None:
        self.warnings: List[ValidationWarning] = []

    def validate(self, profile: ClinicalProfile) -> ValidatedProfile:
        self.warnings = []
        validate_minimum_data(profile)
        self.validate_ranges(profile)
        self.validate_consistency(profile)
        profile = self._reconcile(profile)
        availability = validate_available_data(profile)
        for warning in self.warnings:
            logger.warning(warning.message, extra={"extra": {"kind": warning.kind.value, **warning.values}})
        return ValidatedProfile(profile=profile, warnings=list(self.warnings), availability=availability)

    def validate_ranges(self, profile: ClinicalProfile) -> None:
        skipped = {"homa_ir"} if profile.homa_ir_is_derived else set()
        for field in CLINICAL_RANGES:
            value = getattr(profile, field)
            if value is not None and field not in skipped:
                _validate_field(field, value)

    def validate_consistency(self, profile: ClinicalProfile) -> None:
        age_amh = validate_consistency(profile.age, profile.amh)
        if age_amh is not None:
            self.warnings.append(age_amh.to_warning())

        if profile.myoma_size_cm is not None and profile.myoma_type is MyomaType.NONE:
            self.warnings.append(
                MedicalValidationError(
                    WarningKind.MYOMA_SIZE_WITHOUT_TYPE,
                    "Myoma size given without a myoma location; the size is ignored",
                    {"myoma_size_cm": profile.myoma_size_cm},
                ).to_warning()
            )

        if profile.pelvic_surgery_count > 0 and not profile.has_pelvic_surgery:
            self.warnings.append(
                MedicalValidationError(
                    WarningKind.SURGERY_COUNT_MISMATCH,
                    "Pelvic surgery count is set but pelvic surgery is not flagged; the count is used",
                    {"pelvic_surgery_count": profile.pelvic_surgery_count},
                ).to_warning()
            )

    @staticmethod
    def _reconcile(profile: ClinicalProfile) -> ClinicalProfile:
        """Return a copy with the surgery flag aligned to the effective count."""
        if profile.pelvic_surgery_count > 0 and not profile.has_pelvic_surgery:
            return profile.model_copy(update={"has_pelvic_surgery": True})
        return profile
