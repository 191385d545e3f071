"""Core domain model for the clinical profile consumed by the engine.

The profile mixes a mandatory age with roughly two dozen optional
measurements.  Every optional field is either present or ``None``
(unknown); absence is never an error and the aggregator maps it to a
neutral multiplier.  The model enforces types only: plausibility ranges
are checked by :mod:`fpe.validation` so that an out-of-range value is
reported with its bounds instead of a generic schema error.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class MyomaType(str, Enum):
    """Uterine fibroid location (FIGO simplified)."""

    NONE = "none"
    SUBMUCOSAL = "submucosal"
    INTRAMURAL = "intramural"
    SUBSEROSAL = "subserosal"


class AdenomyosisType(str, Enum):
    """Extent of adenomyosis on imaging."""

    NONE = "none"
    FOCAL = "focal"
    DIFFUSE = "diffuse"


class PolypType(str, Enum):
    """Endometrial polyps found on ultrasound or hysteroscopy."""

    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


class HsgResult(str, Enum):
    """Tubal patency on hysterosalpingography."""

    NORMAL = "normal"
    UNILATERAL = "unilateral"  # one tube obstructed
    BILATERAL = "bilateral"  # both tubes obstructed


class OtbMethod(str, Enum):
    """Method used for a prior tubal sterilization (OTB)."""

    CLIPS = "clips"
    RINGS = "rings"
    LIGATION = "ligation"
    SALPINGECTOMY = "salpingectomy"
    UNKNOWN = "unknown"


class ClinicalProfile(BaseModel):
    """Clinical data for one couple, as entered by the patient or clinician."""

    # Demographics and anthropometry
    age: Optional[float] = Field(None, description="Age of the female partner in years")
    height_cm: Optional[float] = Field(None, description="Height in centimetres")
    weight_kg: Optional[float] = Field(None, description="Weight in kilograms")
    bmi: Optional[float] = Field(None, description="Body mass index; derived from height and weight when absent")

    # Reproductive history
    cycle_length: Optional[float] = Field(None, description="Average menstrual cycle length in days")
    infertility_duration: Optional[float] = Field(None, description="Years trying to conceive")
    previous_pregnancies: Optional[int] = Field(None, description="Number of prior pregnancies")

    # Gynecological pathology
    has_pcos: bool = False
    endometriosis_stage: int = Field(0, description="ASRM stage 0 (none) to 4")
    myoma_type: MyomaType = MyomaType.NONE
    myoma_size_cm: Optional[float] = Field(None, description="Largest myoma diameter in cm")
    adenomyosis_type: AdenomyosisType = AdenomyosisType.NONE
    polyp_type: PolypType = PolypType.NONE
    hsg_result: Optional[HsgResult] = None
    has_otb: bool = Field(False, description="Prior bilateral tubal occlusion (sterilization)")
    otb_method: Optional[OtbMethod] = None
    has_pelvic_surgery: bool = False
    pelvic_surgery_count: int = Field(0, description="Number of prior pelvic surgeries")

    # Endocrine
    amh: Optional[float] = Field(None, description="Anti-Mullerian hormone, ng/mL")
    tsh: Optional[float] = Field(None, description="Thyroid-stimulating hormone, mIU/L")
    tpo_ab_positive: bool = Field(False, description="Thyroid peroxidase antibodies detected")
    prolactin: Optional[float] = Field(None, description="Prolactin, ng/mL")
    insulin: Optional[float] = Field(None, description="Fasting insulin, uU/mL")
    glucose: Optional[float] = Field(None, description="Fasting glucose, mg/dL")
    homa_ir: Optional[float] = Field(None, description="HOMA-IR; derived from insulin and glucose when absent")

    # Male factor
    sperm_concentration: Optional[float] = Field(None, description="Million sperm per mL")
    sperm_progressive_motility: Optional[float] = Field(None, description="Progressive motility, %")
    sperm_normal_morphology: Optional[float] = Field(None, description="Normal forms (strict criteria), %")
    sperm_dna_fragmentation: Optional[float] = Field(None, description="DNA fragmentation index, %")
    has_varicocele: bool = False
    seminal_culture_positive: bool = False

    @model_validator(mode="after")
    def _derive_indices(self) -> "ClinicalProfile":
        """Fill BMI and HOMA-IR from their inputs when not given directly."""
        if self.bmi is None and self.height_cm and self.weight_kg:
            height_m = self.height_cm / 100.0
            self.bmi = round(self.weight_kg / (height_m * height_m), 2)
        if self.homa_ir is None and self.insulin is not None and self.glucose is not None:
            self.homa_ir = self.compute_homa_ir(self.insulin, self.glucose)
        return self

    @staticmethod
    def compute_homa_ir(insulin: float, glucose: float) -> float:
        """HOMA-IR from fasting insulin (uU/mL) and glucose (mg/dL)."""
        return round(insulin * glucose / 405.0, 2)

    @property
    def homa_ir_is_derived(self) -> bool:
        """True when ``homa_ir`` is the value computed from insulin and glucose.

        A derived index is not range-checked: its inputs already were, and
        the HOMA-IR factor table extends to infinity.
        """
        if self.homa_ir is None or self.insulin is None or self.glucose is None:
            return False
        return self.homa_ir == self.compute_homa_ir(self.insulin, self.glucose)

    @property
    def pelvic_surgeries(self) -> int:
        """Effective number of pelvic surgeries (a bare flag counts as one)."""
        if self.pelvic_surgery_count > 0:
            return self.pelvic_surgery_count
        return 1 if self.has_pelvic_surgery else 0

    @property
    def has_male_data(self) -> bool:
        """True when any male-factor input was recorded."""
        return (
            self.sperm_concentration is not None
            or self.sperm_progressive_motility is not None
            or self.sperm_normal_morphology is not None
            or self.sperm_dna_fragmentation is not None
            or self.has_varicocele
            or self.seminal_culture_positive
        )
