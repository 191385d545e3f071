"""Assisted-reproduction technique selection.

For each treatment tier this module decides whether the technique is
indicated, which stimulation protocol suits the profile, and what
per-cycle outcome to expect:

* timed intercourse with ovarian stimulation (letrozole, clomiphene,
  letrozole + FSH or FSH alone)
* intrauterine insemination over the same stimulation protocols
* IVF, ICSI or oocyte donation, with an IVF stimulation protocol chosen
  from ovarian reserve, age and uterine findings

Success figures are percentages drawn from ESHRE 2023 and ASRM 2024
tables, scaled by a profile adjustment and capped at the published
ceilings.  The functions read a validated profile and never raise on
missing optional data: unknown values simply skip the rule that needs
them.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..core.models import AdenomyosisType, ClinicalProfile, HsgResult
from ..core.tiers import UrgencyLevel
from ..factors.male import MaleSeverity, classify_severity
from ..utils.logging import get_logger
from .models import (
    AssistedReproductionPlan,
    FertilizationTechnique,
    Indication,
    IuiPlan,
    IvfPlan,
    IvfProtocol,
    IvfSuccess,
    OvarianResponse,
    StimulationPlan,
    StimulationProtocol,
    StimulationSuccess,
)

logger = get_logger(__name__)

# Semen thresholds for choosing between stimulation, IUI and ICSI
NORMAL_CONCENTRATION = 15.0
NORMAL_MOTILITY = 32.0
NORMAL_MORPHOLOGY = 4.0
IUI_MIN_TMSC = 5.0
ICSI_TMSC = 2.0

# (ovulation, monthly, multiple, cumulative 3, cumulative 6) in percent
STIMULATION_RATES: Mapping[StimulationProtocol, Tuple[float, float, float, float, float]] = MappingProxyType(
    {
        StimulationProtocol.LETROZOLE: (80.0, 17.5, 3.0, 45.0, 65.0),
        StimulationProtocol.CLOMIPHENE: (77.5, 12.5, 9.0, 32.0, 50.0),
        StimulationProtocol.LETROZOLE_FSH: (87.5, 21.5, 12.0, 55.0, 75.0),
        StimulationProtocol.FSH: (87.5, 21.5, 20.0, 55.0, 75.0),
    }
)
STIMULATION_CAPS = (95.0, 30.0, 70.0, 85.0)
IUI_GAIN = 1.15
IUI_CAPS = (25.0, 70.0, 85.0)

# (upper age bound, implantation, clinical, live birth, cancellation, oocytes, blastocysts)
IVF_RATES_BY_AGE: Tuple[Tuple[float, float, float, float, float, int, int], ...] = (
    (35.0, 45.0, 50.0, 40.0, 5.0, 12, 6),
    (38.0, 35.0, 40.0, 35.0, 12.0, 10, 4),
    (41.0, 25.0, 30.0, 25.0, 25.0, 8, 3),
    (43.0, 12.0, 15.0, 12.0, 35.0, 5, 1),
    (float("inf"), 3.0, 5.0, 3.0, 50.0, 3, 0),
)
DONATION_SUCCESS = IvfSuccess(
    implantation_rate=60.0,
    clinical_pregnancy_rate=60.0,
    live_birth_rate=50.0,
    cancellation_rate=5.0,
    expected_oocytes=15,
    expected_blastocysts=8,
)


def estimated_tmsc(concentration: float, motility: float) -> float:
    """Total motile sperm count (millions) assuming a 3 mL ejaculate and 50% recovery."""
    return concentration * 3.0 * (motility / 100.0) * 0.5


def _age(profile: ClinicalProfile) -> float:
    return profile.age or 0.0


def _has_normal_semen(profile: ClinicalProfile) -> bool:
    conc = profile.sperm_concentration
    mot = profile.sperm_progressive_motility
    morph = profile.sperm_normal_morphology
    if conc is None or mot is None or morph is None:
        return False
    return conc >= NORMAL_CONCENTRATION and mot >= NORMAL_MOTILITY and morph >= NORMAL_MORPHOLOGY


def _has_suboptimal_semen(profile: ClinicalProfile) -> bool:
    conc = profile.sperm_concentration
    mot = profile.sperm_progressive_motility
    if conc is None or mot is None:
        return False
    return conc < NORMAL_CONCENTRATION or mot < NORMAL_MOTILITY


def _severe_male_reason(profile: ClinicalProfile, tmsc_limit: float, morphology_limit: float) -> Optional[str]:
    """Reason the semen sample cannot be used without ICSI, if any."""
    severity = classify_severity(
        profile.sperm_concentration,
        profile.sperm_progressive_motility,
        profile.sperm_normal_morphology,
    )
    if severity is MaleSeverity.AZOOSPERMIA:
        return "Azoospermia: ICSI with surgical sperm retrieval"
    if severity is MaleSeverity.CRYPTOZOOSPERMIA:
        return "Cryptozoospermia: ICSI required"

    conc = profile.sperm_concentration
    mot = profile.sperm_progressive_motility
    morph = profile.sperm_normal_morphology
    if conc is not None and mot is not None and estimated_tmsc(conc, mot) < tmsc_limit:
        return f"Severe male factor: estimated TMSC below {tmsc_limit:g} million"
    if morph is not None and morph < morphology_limit:
        return f"Severe male factor: normal morphology below {morphology_limit:g}%"
    return None


def timed_intercourse_indication(profile: ClinicalProfile) -> Indication:
    """Decide whether stimulated timed intercourse is a reasonable first step."""
    age = _age(profile)
    cycle = profile.cycle_length
    duration = profile.infertility_duration

    if profile.has_pcos:
        return Indication(indicated=True, reason="PCOS: letrozole ovulation induction is first line")
    if cycle is not None and cycle > 35:
        return Indication(indicated=True, reason="Oligo-ovulation: ovarian stimulation indicated")
    if age < 35 and duration is not None and duration < 3:
        return Indication(indicated=True, reason="Unexplained infertility in a young woman")
    if 1 <= profile.endometriosis_stage <= 2:
        return Indication(indicated=True, reason="Minimal endometriosis (stage I-II)")
    if age < 32 and cycle is not None and cycle < 21:
        return Indication(indicated=True, reason="Young woman with irregular cycles")
    if _has_normal_semen(profile) and age < 37 and duration is not None and duration < 2:
        return Indication(indicated=True, reason="Normal semen analysis: preferred over IUI as first option")

    if age > 40:
        return Indication(indicated=False, reason="Age over 40: consider high-complexity techniques")
    if profile.hsg_result is HsgResult.BILATERAL:
        return Indication(indicated=False, reason="Bilateral tubal obstruction requires IVF")
    if duration is not None and duration > 3:
        return Indication(indicated=False, reason="Infertility over 3 years: consider higher-complexity techniques")
    return Indication(indicated=False, reason="Does not meet the criteria for timed intercourse")


def select_stimulation_protocol(profile: ClinicalProfile) -> StimulationProtocol:
    age = _age(profile)
    if profile.has_pcos and (age > 37 or (profile.homa_ir is not None and profile.homa_ir > 3.5)):
        return StimulationProtocol.LETROZOLE_FSH
    if profile.has_pcos or (profile.cycle_length is not None and profile.cycle_length > 35):
        return StimulationProtocol.LETROZOLE
    if profile.amh is not None and profile.amh < 1.0 and age > 35:
        return StimulationProtocol.FSH
    return StimulationProtocol.CLOMIPHENE


def _stimulation_adjustment(profile: ClinicalProfile, protocol: StimulationProtocol) -> float:
    age = _age(profile)
    factor = 1.0
    if age < 30:
        factor *= 1.15
    elif age < 35:
        factor *= 1.05
    elif age > 40:
        factor *= 0.50
    elif age > 37:
        factor *= 0.75

    if profile.amh is not None:
        if profile.amh > 3.0:
            factor *= 1.10
        elif profile.amh < 1.0:
            factor *= 0.80

    if profile.has_pcos and protocol is StimulationProtocol.LETROZOLE:
        factor *= 1.05
    if _has_suboptimal_semen(profile):
        factor *= 0.85
    return factor


def stimulation_success(profile: ClinicalProfile, protocol: StimulationProtocol) -> StimulationSuccess:
    """Expected outcomes of ``protocol`` for this profile; multiple-pregnancy risk is not adjusted."""
    ovulation, monthly, multiple, cum3, cum6 = STIMULATION_RATES[protocol]
    factor = _stimulation_adjustment(profile, protocol)
    cap_ovulation, cap_monthly, cap_cum3, cap_cum6 = STIMULATION_CAPS
    return StimulationSuccess(
        ovulation_rate=round(min(cap_ovulation, ovulation * factor), 1),
        monthly_pregnancy_rate=round(min(cap_monthly, monthly * factor), 1),
        multiple_pregnancy_rate=multiple,
        cumulative_3_cycles=round(min(cap_cum3, cum3 * factor), 1),
        cumulative_6_cycles=round(min(cap_cum6, cum6 * factor), 1),
    )


def plan_timed_intercourse(profile: ClinicalProfile) -> StimulationPlan:
    indication = timed_intercourse_indication(profile)
    protocol = select_stimulation_protocol(profile)
    confidence = 0.85
    if _age(profile) < 35:
        confidence += 0.10
    if profile.has_pcos and protocol is StimulationProtocol.LETROZOLE:
        confidence += 0.05
    if profile.amh is not None and profile.amh > 2.0:
        confidence += 0.05
    return StimulationPlan(
        indication=indication,
        protocol=protocol,
        success=stimulation_success(profile, protocol),
        confidence=round(min(0.99, confidence) if indication.indicated else 0.95, 2),
    )


def iui_indication(profile: ClinicalProfile) -> Indication:
    """Contraindications are checked before any inclusion criterion."""
    age = _age(profile)
    if age > 42 and profile.amh is not None and profile.amh < 0.7:
        return Indication(indicated=False, reason="Age over 42 with low ovarian reserve (AMH < 0.7): consider IVF")
    if profile.hsg_result is HsgResult.BILATERAL or profile.has_otb:
        return Indication(indicated=False, reason="Bilateral tubal obstruction requires IVF")
    if profile.endometriosis_stage >= 3:
        return Indication(indicated=False, reason="Moderate to severe endometriosis (stage III-IV): consider IVF")
    male = _severe_male_reason(profile, IUI_MIN_TMSC, 1.0)
    if male is not None:
        return Indication(indicated=False, reason=f"{male}; IUI not suitable")

    if profile.has_pcos:
        return Indication(indicated=True, reason="PCOS: IUI with letrozole stimulation")
    if 1 <= profile.endometriosis_stage <= 2:
        return Indication(indicated=True, reason="Mild endometriosis (stage I-II)")
    duration = profile.infertility_duration
    if duration is not None and duration < 3 and age < 38:
        return Indication(indicated=True, reason="Unexplained infertility under 3 years in a woman under 38")
    return Indication(indicated=False, reason="Does not meet the criteria for IUI")


def iui_success(profile: ClinicalProfile, protocol: StimulationProtocol) -> StimulationSuccess:
    """Stimulated-cycle outcomes with the IUI gain over timed intercourse."""
    base = stimulation_success(profile, protocol)
    cap_monthly, cap_cum3, cap_cum6 = IUI_CAPS
    return base.model_copy(
        update={
            "monthly_pregnancy_rate": round(min(cap_monthly, base.monthly_pregnancy_rate * IUI_GAIN), 1),
            "cumulative_3_cycles": round(min(cap_cum3, base.cumulative_3_cycles * IUI_GAIN), 1),
            "cumulative_6_cycles": round(min(cap_cum6, base.cumulative_6_cycles * IUI_GAIN), 1),
        }
    )


def plan_iui(profile: ClinicalProfile) -> IuiPlan:
    indication = iui_indication(profile)
    protocol = select_stimulation_protocol(profile)
    confidence = 0.85
    if _age(profile) < 35:
        confidence += 0.08
    if profile.has_pcos and protocol is StimulationProtocol.LETROZOLE:
        confidence += 0.05
    return IuiPlan(
        indication=indication,
        protocol=protocol,
        success=iui_success(profile, protocol),
        recommended_cycles=2 if _age(profile) > 35 else 3,
        confidence=round(min(0.95, confidence) if indication.indicated else 0.95, 2),
    )


def ivf_indication(profile: ClinicalProfile) -> Tuple[FertilizationTechnique, str, UrgencyLevel]:
    """Choose between oocyte donation, ICSI and conventional IVF.

    Donation criteria are evaluated first, then the male factor, then the
    female indications for conventional IVF.
    """
    age = _age(profile)
    amh = profile.amh
    duration = profile.infertility_duration

    if age > 43:
        return (
            FertilizationTechnique.OOCYTE_DONATION,
            "Age over 43: success with own oocytes is below 5%",
            UrgencyLevel.URGENT,
        )
    if amh is not None and age < 40 and amh < 0.1:
        return FertilizationTechnique.OOCYTE_DONATION, "Premature ovarian insufficiency", UrgencyLevel.URGENT
    if amh is not None and amh < 0.3:
        return (
            FertilizationTechnique.OOCYTE_DONATION,
            "Ovarian insufficiency (AMH < 0.3): consider oocyte donation",
            UrgencyLevel.PRIORITY,
        )

    male = _severe_male_reason(profile, ICSI_TMSC, 1.0)
    if male is not None:
        return FertilizationTechnique.ICSI, male, UrgencyLevel.PRIORITY
    conc = profile.sperm_concentration
    mot = profile.sperm_progressive_motility
    morph = profile.sperm_normal_morphology
    if (
        (conc is not None and conc < 5.0)
        or (mot is not None and mot < 20.0)
        or (morph is not None and morph < 2.0)
    ):
        return FertilizationTechnique.ICSI, "Severe oligoasthenoteratozoospermia", UrgencyLevel.PRIORITY

    if profile.hsg_result is HsgResult.BILATERAL or profile.has_otb:
        return FertilizationTechnique.IVF, "Bilateral tubal obstruction: absolute IVF indication", UrgencyLevel.URGENT
    if profile.endometriosis_stage >= 3:
        return FertilizationTechnique.IVF, "Moderate to severe endometriosis (stage III-IV)", UrgencyLevel.PRIORITY
    if duration is not None and duration > 2 and age > 35:
        return (
            FertilizationTechnique.IVF,
            "Prolonged infertility over age 35 after low-complexity treatment",
            UrgencyLevel.PRIORITY,
        )
    if amh is not None and amh < 1.0:
        return FertilizationTechnique.IVF, "Low ovarian reserve: IVF with an adjusted protocol", UrgencyLevel.PRIORITY
    if age > 38 and duration is not None and duration > 1:
        return (
            FertilizationTechnique.IVF,
            "Age over 38 with infertility over 1 year: limited reproductive window",
            UrgencyLevel.URGENT,
        )
    return FertilizationTechnique.IVF, "IVF as a treatment option", UrgencyLevel.ROUTINE


def select_ivf_protocol(profile: ClinicalProfile) -> IvfProtocol:
    """Pick a stimulation protocol from ovarian reserve first, then uterine findings and age."""
    amh = profile.amh
    if profile.has_pcos or (amh is not None and amh > 3.5):
        return IvfProtocol.MILD_STIMULATION  # OHSS risk
    if amh is not None:
        if amh < 0.5:
            return IvfProtocol.PRP_ACCUMULATION
        if amh < 1.0:
            return IvfProtocol.DUOSTIM if _age(profile) < 35 else IvfProtocol.EMBRYO_BANKING
    if profile.endometriosis_stage > 0 or profile.adenomyosis_type is not AdenomyosisType.NONE:
        return IvfProtocol.DUAL_TRIGGER
    return IvfProtocol.ANTAGONIST if _age(profile) < 38 else IvfProtocol.DUAL_TRIGGER


def ivf_success(profile: ClinicalProfile, technique: FertilizationTechnique) -> IvfSuccess:
    """Per-cycle outcomes by age band; donation outcomes depend on the donor, not the patient."""
    if technique is FertilizationTechnique.OOCYTE_DONATION:
        return DONATION_SUCCESS.model_copy()

    age = _age(profile)
    row = next(r for r in IVF_RATES_BY_AGE if age < r[0])
    _, implantation, clinical, live_birth, cancellation, oocytes, blastocysts = row

    factor = 1.0
    if profile.amh is not None:
        if profile.amh > 3.0:
            factor *= 1.15
        elif profile.amh < 0.5:
            factor *= 0.50
        elif profile.amh < 1.0:
            factor *= 0.75
    if profile.endometriosis_stage >= 3:
        factor *= 0.80
    elif profile.endometriosis_stage > 0:
        factor *= 0.90
    if technique is FertilizationTechnique.ICSI:
        factor *= 0.95

    return IvfSuccess(
        implantation_rate=round(min(70.0, implantation * factor), 1),
        clinical_pregnancy_rate=round(min(70.0, clinical * factor), 1),
        live_birth_rate=round(min(60.0, live_birth * factor), 1),
        cancellation_rate=round(min(100.0, max(5.0, cancellation / factor)), 1),
        expected_oocytes=max(1, int(oocytes * factor)),
        expected_blastocysts=max(0, int(blastocysts * factor)),
    )


def plan_ivf(profile: ClinicalProfile) -> IvfPlan:
    technique, reason, urgency = ivf_indication(profile)
    age = _age(profile)
    confidence = 0.90
    if urgency is UrgencyLevel.URGENT:
        confidence += 0.05
    if profile.amh is not None and profile.amh > 2.0:
        confidence += 0.03
    if age < 35:
        confidence += 0.02
    if technique is FertilizationTechnique.OOCYTE_DONATION:
        cycles = 1
    else:
        cycles = 3 if age > 40 else 2
    return IvfPlan(
        technique=technique,
        reason=reason,
        urgency=urgency,
        protocol=select_ivf_protocol(profile),
        success=ivf_success(profile, technique),
        estimated_cycles=cycles,
        confidence=round(min(0.98, confidence), 2),
    )


def plan_assisted_reproduction(profile: ClinicalProfile) -> AssistedReproductionPlan:
    """Assess every technique tier for a validated profile."""
    plan = AssistedReproductionPlan(
        timed_intercourse=plan_timed_intercourse(profile),
        iui=plan_iui(profile),
        ivf=plan_ivf(profile),
    )
    logger.debug(
        "Assisted reproduction plan",
        extra={
            "extra": {
                "first_line": plan.first_line,
                "stimulation": plan.timed_intercourse.protocol.value,
                "ivf_technique": plan.ivf.technique.value,
                "ivf_protocol": plan.ivf.protocol.value,
            }
        },
    )
    return plan


def evaluate_cycle_cancellation(response: OvarianResponse) -> Indication:
    """Decide at monitoring whether a stimulated IUI or timed cycle should be cancelled.

    ``indicated`` is True when the cycle should be cancelled.
    """
    if response.developed_follicles >= 3:
        return Indication(indicated=True, reason="Three or more follicles >= 14 mm: multiple pregnancy risk")
    if response.endometrial_thickness_mm < 6.0:
        return Indication(indicated=True, reason="Endometrium below 6 mm: consider freezing and deferring")
    if response.dominant_follicles == 0:
        return Indication(indicated=True, reason="No dominant follicle: raise the dose next cycle")
    return Indication(indicated=False, reason="Adequate response: continue the cycle")
