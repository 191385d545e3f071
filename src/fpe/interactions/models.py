"""Data models for detected nonlinear interactions."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from ..core.tiers import TreatmentComplexity, OrderedEnum


class InteractionPriority(OrderedEnum):
    """Clinical weight of an interaction, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class InteractionRecord(BaseModel):
    """One interaction detected on a profile."""

    name: str
    condition: str = Field(..., description="Human-readable trigger, with the patient's values")
    correction: float = Field(..., gt=0.0, le=1.0, description="Fractional reduction; (1 - correction) is applied")
    priority: InteractionPriority
    forces_treatment_change: bool = False
    mechanism: str = ""
    recommendation: str = ""
    references: List[str] = Field(default_factory=list)
    required_complexity: Optional[TreatmentComplexity] = None

    @property
    def multiplier(self) -> float:
        return 1.0 - self.correction

    @property
    def overrides_treatment(self) -> bool:
        """Critical interactions that force a change of treatment path."""
        return self.forces_treatment_change and self.priority is InteractionPriority.CRITICAL


class InteractionsReport(BaseModel):
    """All interactions detected on a profile and their combined effect."""

    interactions: List[InteractionRecord] = Field(default_factory=list)
    combined_multiplier: float = Field(1.0, ge=0.0, le=1.0)
    counts: Dict[InteractionPriority, int] = Field(default_factory=dict)
    treatment_change_reasons: List[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def forces_treatment_change(self) -> bool:
        return bool(self.treatment_change_reasons)

    @property
    def critical(self) -> List[InteractionRecord]:
        return [r for r in self.interactions if r.priority is InteractionPriority.CRITICAL]

    def names(self) -> List[str]:
        return [r.name for r in self.interactions]
