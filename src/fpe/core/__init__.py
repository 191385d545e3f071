"""Core data model, factor axes, error taxonomy and band tables."""

from .bands import Band, BandTable  # noqa: F401
from .errors import (  # noqa: F401
    CalculationOverflowError,
    FertilityEngineError,
    InsufficientDataError,
    MedicalCalculationError,
    MedicalValidationError,
    RangeValidationError,
    ValidationWarning,
    WarningKind,
)
from .factors import FACTOR_LABELS, FactorAxis, MedicalFactors, factor_bounds  # noqa: F401
from .models import (  # noqa: F401
    AdenomyosisType,
    ClinicalProfile,
    HsgResult,
    MyomaType,
    OtbMethod,
    PolypType,
)
from .ranges import CLINICAL_RANGES, ClinicalRange  # noqa: F401
from .tiers import FertilityCategory, TreatmentComplexity, TreatmentPath, UrgencyLevel  # noqa: F401
