"""Models for classifier output: recommendations, time estimates and technique plans."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Tuple

from pydantic import BaseModel, Field, model_validator

from ..core.tiers import OrderedEnum, UrgencyLevel


class RecommendationPriority(OrderedEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationCategory(str, Enum):
    PHARMACOLOGICAL = "pharmacological"
    SURGICAL = "surgical"
    LIFESTYLE = "lifestyle"
    DIAGNOSTIC = "diagnostic"
    REPRODUCTIVE = "reproductive"
    GENETIC = "genetic"


class EvidenceLevel(str, Enum):
    """Strength of the supporting evidence (A: RCTs/meta-analyses ... D: expert opinion)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


DEFAULT_CITATIONS: Mapping[RecommendationCategory, Tuple[str, ...]] = MappingProxyType(
    {
        RecommendationCategory.PHARMACOLOGICAL: ("ASRM Practice Guidelines 2024", "Endocrine Society 2022"),
        RecommendationCategory.SURGICAL: ("ASRM Surgical Guidelines 2024", "EAU Guidelines 2023"),
        RecommendationCategory.REPRODUCTIVE: ("ASRM ART Guidelines 2024", "ESHRE 2023"),
        RecommendationCategory.DIAGNOSTIC: ("ASRM Diagnostic Guidelines 2024", "NICE 2024"),
        RecommendationCategory.LIFESTYLE: ("ASRM Lifestyle Guidelines 2023", "Cochrane Reviews 2023"),
        RecommendationCategory.GENETIC: ("ASRM Genetic Guidelines 2024", "ACOG 2023"),
    }
)


class Recommendation(BaseModel):
    """One actionable, evidence-graded recommendation."""

    title: str
    description: str
    priority: RecommendationPriority
    category: RecommendationCategory
    evidence_level: EvidenceLevel
    citations: List[str] = Field(default_factory=list)
    source: str = Field("", description="Factor or interaction that produced this recommendation")

    @model_validator(mode="after")
    def _default_citations(self) -> "Recommendation":
        if not self.citations:
            self.citations = list(DEFAULT_CITATIONS[self.category])
        return self


class TimeEstimate(BaseModel):
    """Expected months to pregnancy under the recommended treatment tier."""

    expected_months: float = Field(..., ge=0)
    min_months: float = Field(..., ge=0)
    max_months: float = Field(..., ge=0)


class StimulationProtocol(str, Enum):
    """Ovarian stimulation for timed intercourse or IUI."""

    LETROZOLE = "letrozole"
    CLOMIPHENE = "clomiphene"
    LETROZOLE_FSH = "letrozole_fsh"  # step-up for resistant PCOS
    FSH = "fsh"  # gonadotropins alone


class IvfProtocol(str, Enum):
    """Controlled ovarian stimulation protocol for an IVF/ICSI cycle."""

    ANTAGONIST = "antagonist"
    MILD_STIMULATION = "mild_stimulation"
    DUOSTIM = "duostim"
    EMBRYO_BANKING = "embryo_banking"
    PRP_ACCUMULATION = "prp_accumulation"
    DUAL_TRIGGER = "dual_trigger"


class FertilizationTechnique(str, Enum):
    IVF = "ivf"
    ICSI = "icsi"
    OOCYTE_DONATION = "oocyte_donation"


class Indication(BaseModel):
    """Whether a technique is indicated, and the finding that decided it."""

    indicated: bool
    reason: str


class StimulationSuccess(BaseModel):
    """Expected outcomes of a stimulated cycle, in percent."""

    ovulation_rate: float = Field(..., ge=0, le=100)
    monthly_pregnancy_rate: float = Field(..., ge=0, le=100)
    multiple_pregnancy_rate: float = Field(..., ge=0, le=100)
    cumulative_3_cycles: float = Field(..., ge=0, le=100)
    cumulative_6_cycles: float = Field(..., ge=0, le=100)


class IvfSuccess(BaseModel):
    """Expected per-cycle IVF outcomes; rates in percent."""

    implantation_rate: float = Field(..., ge=0, le=100)
    clinical_pregnancy_rate: float = Field(..., ge=0, le=100)
    live_birth_rate: float = Field(..., ge=0, le=100)
    cancellation_rate: float = Field(..., ge=0, le=100)
    expected_oocytes: int = Field(..., ge=0)
    expected_blastocysts: int = Field(..., ge=0)


class StimulationPlan(BaseModel):
    """Timed intercourse with ovarian stimulation."""

    indication: Indication
    protocol: StimulationProtocol
    success: StimulationSuccess
    confidence: float = Field(..., ge=0.0, le=1.0)


class IuiPlan(BaseModel):
    """Intrauterine insemination over a stimulated cycle."""

    indication: Indication
    protocol: StimulationProtocol
    success: StimulationSuccess
    recommended_cycles: int = Field(..., ge=1)
    confidence: float = Field(..., ge=0.0, le=1.0)


class IvfPlan(BaseModel):
    """High-complexity treatment: technique, stimulation protocol and expected outcome."""

    technique: FertilizationTechnique
    reason: str
    urgency: UrgencyLevel
    protocol: IvfProtocol
    success: IvfSuccess
    estimated_cycles: int = Field(..., ge=1)
    confidence: float = Field(..., ge=0.0, le=1.0)


class AssistedReproductionPlan(BaseModel):
    """Technique-level assessment for every treatment tier."""

    timed_intercourse: StimulationPlan
    iui: IuiPlan
    ivf: IvfPlan

    @property
    def first_line(self) -> str:
        """Least invasive technique that is indicated for this profile."""
        if self.timed_intercourse.indication.indicated:
            return "timed_intercourse"
        if self.iui.indication.indicated:
            return "iui"
        return self.ivf.technique.value


class OvarianResponse(BaseModel):
    """Ultrasound findings at monitoring of a stimulated cycle."""

    developed_follicles: int = Field(..., ge=0, description="Follicles >= 14 mm")
    dominant_follicles: int = Field(..., ge=0, description="Follicles >= 18 mm")
    endometrial_thickness_mm: float = Field(..., ge=0)
