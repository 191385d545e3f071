"""Assemble per-axis multipliers for a profile.

``aggregate`` calls the calculator of every axis whose input is present
and leaves the rest at the neutral 1.0.  It never clamps or combines
factors; that is the synthesizer's job.
"""

from __future__ import annotations

from ..core.errors import InsufficientDataError
from ..core.factors import MedicalFactors
from ..core.models import ClinicalProfile
from ..utils.logging import get_logger
from . import calculators as calc
from . import pathology
from .male import male_factor

logger = get_logger(__name__)


def aggregate(profile: ClinicalProfile) -> MedicalFactors:
    """Derive a :class:`MedicalFactors` record from a validated profile."""
    if profile.age is None:
        raise InsufficientDataError(["age"])

    factors = MedicalFactors(age=calc.age_factor(profile.age))

    if profile.bmi is not None:
        factors.bmi = calc.bmi_factor(profile.bmi)
    if profile.cycle_length is not None:
        factors.cycle = calc.cycle_factor(profile.cycle_length)
    if profile.infertility_duration is not None:
        factors.infertility_duration = calc.infertility_duration_factor(profile.infertility_duration)
    if profile.amh is not None:
        factors.amh = calc.amh_factor(profile.amh)
    if profile.tsh is not None:
        factors.tsh = calc.tsh_factor(profile.tsh)
    if profile.prolactin is not None:
        factors.prolactin = calc.prolactin_factor(profile.prolactin)
    if profile.homa_ir is not None:
        factors.homa_ir = calc.homa_ir_factor(profile.homa_ir)
    if profile.previous_pregnancies is not None:
        factors.parity = calc.parity_factor(profile.previous_pregnancies)

    factors.pcos = pathology.pcos_factor(profile)
    factors.endometriosis = pathology.endometriosis_factor(profile.endometriosis_stage)
    factors.myoma = pathology.myoma_factor(profile.myoma_type, profile.myoma_size_cm)
    factors.polyp = pathology.polyp_factor(profile.polyp_type)
    factors.adenomyosis = pathology.adenomyosis_factor(profile.adenomyosis_type)
    if profile.hsg_result is not None:
        factors.hsg = pathology.hsg_factor(profile.hsg_result)
    factors.otb = pathology.otb_factor(profile.has_otb)

    surgeries = profile.pelvic_surgeries
    if surgeries > 0:
        factors.pelvic_surgery = calc.pelvic_surgery_factor(surgeries)
    if profile.has_male_data:
        factors.male = male_factor(profile)

    logger.debug(
        "Aggregated medical factors",
        extra={"extra": {"altered": {axis.value: v for axis, v in factors.altered().items()}}},
    )
    return factors
