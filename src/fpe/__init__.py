"""Fertility probability engine.

Converts a clinical profile into a bounded monthly and annual pregnancy
probability, a qualitative category, a treatment tier and evidence-graded
recommendations, using a multiplicative factor model corrected by
nonlinear interaction terms.  The package is an in-process library: it
performs no I/O and keeps no state between analyses.

"""

from .core.errors import (  # noqa: F401
    CalculationOverflowError,
    FertilityEngineError,
    InsufficientDataError,
    MedicalCalculationError,
    MedicalValidationError,
    RangeValidationError,
)
from .core.models import (  # noqa: F401
    AdenomyosisType,
    ClinicalProfile,
    HsgResult,
    MyomaType,
    OtbMethod,
    PolypType,
)
from .core.tiers import FertilityCategory, TreatmentComplexity, TreatmentPath, UrgencyLevel  # noqa: F401
from .pipeline import (  # noqa: F401
    BatchAnalyzer,
    ComprehensiveFertilityResult,
    FertilityEngine,
    TreatmentSimulator,
    analyze_fertility,
)

__version__ = "0.1.0"
