"""Result models returned by the engine and its boundary helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from ..benchmarks.lookup import BenchmarkSummary
from ..classification.models import AssistedReproductionPlan, Recommendation, TimeEstimate
from ..core.errors import ValidationWarning
from ..core.factors import FactorAxis
from ..core.models import ClinicalProfile
from ..core.tiers import FertilityCategory, TreatmentComplexity, TreatmentPath, UrgencyLevel
from ..interactions.models import InteractionsReport
from ..synthesis.synthesizer import annual_probability
from ..validation.validator import DataAvailability


class ComprehensiveFertilityResult(BaseModel):
    """Everything the display layer needs to render one analysis."""

    monthly_probability: float = Field(..., ge=0.005, le=0.25)
    category: FertilityCategory
    treatment_complexity: TreatmentComplexity
    treatment_path: TreatmentPath
    urgency: UrgencyLevel
    key_factors: Dict[FactorAxis, float] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    availability: DataAvailability
    interactions: InteractionsReport
    warnings: List[ValidationWarning] = Field(default_factory=list)
    time_to_pregnancy: TimeEstimate
    evidence_sources: List[str] = Field(default_factory=list)
    benchmarks: Optional[BenchmarkSummary] = None
    techniques: AssistedReproductionPlan

    @computed_field  # type: ignore[misc]
    @property
    def annual_probability(self) -> float:
        return annual_probability(self.monthly_probability)

    @property
    def forces_treatment_change(self) -> bool:
        return self.interactions.forces_treatment_change


class BatchItem(BaseModel):
    """Outcome of one profile in a batch: a result or the error that stopped it."""

    index: int
    result: Optional[ComprehensiveFertilityResult] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class SimulationOutcome(BaseModel):
    """Difference between a baseline profile and a hypothetical modification."""

    name: str
    changes: Dict[str, Any] = Field(default_factory=dict)
    scenario_profile: ClinicalProfile
    baseline: ComprehensiveFertilityResult
    scenario: ComprehensiveFertilityResult

    @computed_field  # type: ignore[misc]
    @property
    def monthly_delta(self) -> float:
        return self.scenario.monthly_probability - self.baseline.monthly_probability

    @computed_field  # type: ignore[misc]
    @property
    def annual_delta(self) -> float:
        return self.scenario.annual_probability - self.baseline.annual_probability

    @property
    def category_changed(self) -> bool:
        return self.scenario.category is not self.baseline.category
