"""Read-only rule set of nonlinear clinical interactions.

Each rule pairs a predicate over two or more profile fields with a fixed
fractional correction.  Rules are independent: several may fire on the
same profile and their corrections compound multiplicatively.  The
``describe`` callable renders the trigger with the patient's own values
so the record explains itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from ..core.models import AdenomyosisType, ClinicalProfile, HsgResult, MyomaType, PolypType
from ..core.tiers import TreatmentComplexity
from ..factors.male import WHO_CONCENTRATION, WHO_NORMAL_MORPHOLOGY, WHO_PROGRESSIVE_MOTILITY
from .models import InteractionPriority, InteractionRecord


@dataclass(frozen=True)
class InteractionRule:
    name: str
    predicate: Callable[[ClinicalProfile], bool]
    describe: Callable[[ClinicalProfile], str]
    correction: float
    priority: InteractionPriority
    forces_treatment_change: bool
    mechanism: str
    recommendation: str
    references: Tuple[str, ...] = field(default_factory=tuple)
    required_complexity: Optional[TreatmentComplexity] = None

    def evaluate(self, profile: ClinicalProfile) -> Optional[InteractionRecord]:
        if not self.predicate(profile):
            return None
        return InteractionRecord(
            name=self.name,
            condition=self.describe(profile),
            correction=self.correction,
            priority=self.priority,
            forces_treatment_change=self.forces_treatment_change,
            mechanism=self.mechanism,
            recommendation=self.recommendation,
            references=list(self.references),
            required_complexity=self.required_complexity,
        )


def _lt(value: Optional[float], limit: float) -> bool:
    return value is not None and value < limit


def _ge(value: Optional[float], limit: float) -> bool:
    return value is not None and value >= limit


def _gt(value: Optional[float], limit: float) -> bool:
    return value is not None and value > limit


def _altered_semen(p: ClinicalProfile) -> bool:
    return (
        _lt(p.sperm_concentration, WHO_CONCENTRATION)
        or _lt(p.sperm_progressive_motility, WHO_PROGRESSIVE_MOTILITY)
        or _lt(p.sperm_normal_morphology, WHO_NORMAL_MORPHOLOGY)
    )


INTERACTION_RULES: Tuple[InteractionRule, ...] = (
    InteractionRule(
        name="age_low_ovarian_reserve",
        predicate=lambda p: _ge(p.age, 38) and _lt(p.amh, 1.0),
        describe=lambda p: f"age {p.age:g} >= 38 and AMH {p.amh:g} < 1.0 ng/mL",
        correction=0.70,
        priority=InteractionPriority.CRITICAL,
        forces_treatment_change=True,
        mechanism="Oocyte quality and quantity decline together; aneuploidy rises with a shrinking follicle pool",
        recommendation="Proceed directly to IVF with an ovarian-reserve-adapted stimulation protocol",
        references=("ESHRE Guideline on Ovarian Stimulation 2020", "Steiner et al., JAMA 2017"),
        required_complexity=TreatmentComplexity.HIGH,
    ),
    InteractionRule(
        name="critical_ovarian_failure",
        predicate=lambda p: _ge(p.age, 42) and _lt(p.amh, 0.5),
        describe=lambda p: f"age {p.age:g} >= 42 and AMH {p.amh:g} < 0.5 ng/mL",
        correction=0.45,
        priority=InteractionPriority.CRITICAL,
        forces_treatment_change=True,
        mechanism="Near-exhausted ovarian reserve at an age with very high oocyte aneuploidy",
        recommendation="Discuss oocyte donation; autologous IVF has very low live-birth rates",
        references=("ASRM Committee Opinion on Oocyte Donation 2023", "SART National Summary 2022"),
        required_complexity=TreatmentComplexity.CRITICAL,
    ),
    InteractionRule(
        name="pcos_insulin_resistance",
        predicate=lambda p: p.has_pcos and _gt(p.homa_ir, 3.5),
        describe=lambda p: f"PCOS with HOMA-IR {p.homa_ir:g} > 3.5",
        correction=0.20,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=False,
        mechanism="Hyperinsulinemia amplifies ovarian androgen production and anovulation",
        recommendation="Start metformin and lifestyle intervention before ovulation induction",
        references=("International PCOS Guideline 2023", "Legro et al., NEJM 2014"),
    ),
    InteractionRule(
        name="prolactin_subclinical_hypothyroidism",
        predicate=lambda p: _gt(p.prolactin, 25) and p.tsh is not None and 2.5 <= p.tsh <= 4.5,
        describe=lambda p: f"prolactin {p.prolactin:g} > 25 ng/mL with TSH {p.tsh:g} in 2.5-4.5 mIU/L",
        correction=0.25,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=True,
        mechanism="TRH elevation in subclinical hypothyroidism stimulates prolactin release",
        recommendation="Correct thyroid function first, then re-measure prolactin before dopamine agonists",
        references=("Endocrine Society Hyperprolactinemia Guideline 2011", "ATA Pregnancy Thyroid Guideline 2017"),
    ),
    InteractionRule(
        name="tubal_obstruction_pelvic_surgery",
        predicate=lambda p: p.hsg_result is HsgResult.BILATERAL and p.pelvic_surgeries >= 1,
        describe=lambda p: f"bilateral tubal obstruction after {p.pelvic_surgeries} pelvic surgery(ies)",
        correction=0.95,
        priority=InteractionPriority.CRITICAL,
        forces_treatment_change=True,
        mechanism="Post-surgical adhesions make tubal repair unlikely to restore function",
        recommendation="IVF is the only effective option; consider salpingectomy for hydrosalpinx first",
        references=("ASRM Tubal Factor Committee Opinion 2021", "Cochrane Review on Tubal Surgery 2020"),
        required_complexity=TreatmentComplexity.HIGH,
    ),
    InteractionRule(
        name="obesity_pcos",
        predicate=lambda p: _ge(p.bmi, 35) and p.has_pcos,
        describe=lambda p: f"PCOS with BMI {p.bmi:g} >= 35",
        correction=0.60,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=False,
        mechanism="Obesity worsens insulin resistance and hyperandrogenism, reducing ovulatory response",
        recommendation="Target at least 5-10% weight loss before ovulation induction",
        references=("International PCOS Guideline 2023", "Legro et al., NEJM 2014"),
    ),
    InteractionRule(
        name="age_prolonged_infertility",
        predicate=lambda p: _ge(p.age, 38) and _ge(p.infertility_duration, 3),
        describe=lambda p: f"age {p.age:g} >= 38 with {p.infertility_duration:g} years of infertility",
        correction=0.28,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=True,
        mechanism="Long unexplained infertility at advanced age signals a low per-cycle chance",
        recommendation="Move to IVF without further expectant management",
        references=("NICE Fertility Guideline CG156", "ASRM Infertility Workup Committee Opinion 2020"),
    ),
    InteractionRule(
        name="endometriosis_low_reserve",
        predicate=lambda p: p.endometriosis_stage >= 3 and _lt(p.amh, 1.0),
        describe=lambda p: f"endometriosis stage {p.endometriosis_stage} with AMH {p.amh:g} < 1.0 ng/mL",
        correction=0.65,
        priority=InteractionPriority.CRITICAL,
        forces_treatment_change=True,
        mechanism="Endometriomas and their surgery further deplete an already reduced follicle pool",
        recommendation="Avoid further ovarian surgery; proceed to IVF and consider oocyte accumulation",
        references=("ESHRE Endometriosis Guideline 2022", "Raffi et al., JCEM 2012"),
        required_complexity=TreatmentComplexity.HIGH,
    ),
    InteractionRule(
        name="pcos_intramural_myoma",
        predicate=lambda p: p.has_pcos and p.myoma_type is MyomaType.INTRAMURAL and _ge(p.myoma_size_cm, 3.0),
        describe=lambda p: f"PCOS with an intramural myoma of {p.myoma_size_cm:g} cm",
        correction=0.25,
        priority=InteractionPriority.MODERATE,
        forces_treatment_change=False,
        mechanism="Hyperestrogenic milieu promotes myoma growth and impairs implantation",
        recommendation="Evaluate myomectomy before ovulation induction",
        references=("Pritts et al., Fertil Steril 2009", "ASRM Myoma Committee Opinion 2017"),
    ),
    InteractionRule(
        name="polyps_advanced_age",
        predicate=lambda p: p.polyp_type is not PolypType.NONE and _ge(p.age, 38),
        describe=lambda p: f"{p.polyp_type.value} endometrial polyp(s) at age {p.age:g}",
        correction=0.20,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=True,
        mechanism="Polyps impair implantation when the remaining window of fertility is short",
        recommendation="Perform hysteroscopic polypectomy promptly before any treatment cycle",
        references=("Perez-Medina et al., Hum Reprod 2005", "AAGL Polyp Practice Guideline 2012"),
    ),
    InteractionRule(
        name="ovarian_surgery_low_reserve",
        predicate=lambda p: p.pelvic_surgeries >= 1 and _lt(p.amh, 1.1),
        describe=lambda p: f"{p.pelvic_surgeries} pelvic surgery(ies) with AMH {p.amh:g} < 1.1 ng/mL",
        correction=0.45,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=True,
        mechanism="Surgical damage to ovarian cortex compounds a low reserve",
        recommendation="Avoid additional ovarian surgery; consider fertility preservation or IVF",
        references=("Raffi et al., JCEM 2012", "ESHRE Endometriosis Guideline 2022"),
    ),
    InteractionRule(
        name="obesity_endometriosis",
        predicate=lambda p: _ge(p.bmi, 35) and p.endometriosis_stage >= 3,
        describe=lambda p: f"endometriosis stage {p.endometriosis_stage} with BMI {p.bmi:g} >= 35",
        correction=0.35,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=False,
        mechanism="Adipose inflammation aggravates the inflammatory pelvic environment",
        recommendation="Combine weight management with endometriosis treatment",
        references=("Holdsworth-Carson et al., Hum Reprod 2018",),
    ),
    InteractionRule(
        name="adenomyosis_advanced_age",
        predicate=lambda p: p.adenomyosis_type is not AdenomyosisType.NONE and _ge(p.age, 38),
        describe=lambda p: f"{p.adenomyosis_type.value} adenomyosis at age {p.age:g}",
        correction=0.30,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=False,
        mechanism="Impaired endometrial receptivity compounds age-related embryo aneuploidy",
        recommendation="Consider GnRH-agonist pretreatment and frozen embryo transfer",
        references=("Vercellini et al., Hum Reprod 2014", "ESHRE Endometriosis Guideline 2022"),
    ),
    InteractionRule(
        name="endometriosis_male_factor",
        predicate=lambda p: p.endometriosis_stage >= 1 and _altered_semen(p),
        describe=lambda p: f"endometriosis stage {p.endometriosis_stage} with altered semen parameters",
        correction=0.30,
        priority=InteractionPriority.MODERATE,
        forces_treatment_change=False,
        mechanism="Peritoneal inflammation reduces sperm function in an already compromised sample",
        recommendation="Consider IVF/ICSI rather than IUI",
        references=("ESHRE Endometriosis Guideline 2022", "WHO Laboratory Manual for Semen 2021"),
    ),
    InteractionRule(
        name="age_sperm_dna_fragmentation",
        predicate=lambda p: _ge(p.age, 40) and _gt(p.sperm_dna_fragmentation, 30),
        describe=lambda p: f"age {p.age:g} >= 40 with sperm DNA fragmentation {p.sperm_dna_fragmentation:g}% > 30%",
        correction=0.45,
        priority=InteractionPriority.HIGH,
        forces_treatment_change=True,
        mechanism="Older oocytes have a reduced capacity to repair paternal DNA damage",
        recommendation="Use ICSI with testicular sperm or microfluidic sperm selection",
        references=("Esteves et al., Fertil Steril 2017", "Agarwal et al., Transl Androl Urol 2016"),
    ),
    InteractionRule(
        name="repeated_surgery_prolonged_infertility",
        predicate=lambda p: p.pelvic_surgeries >= 2 and _ge(p.infertility_duration, 2),
        describe=lambda p: (
            f"{p.pelvic_surgeries} pelvic surgeries with {p.infertility_duration:g} years of infertility"
        ),
        correction=0.25,
        priority=InteractionPriority.MODERATE,
        forces_treatment_change=False,
        mechanism="Adhesive disease accumulates with each surgery and with time",
        recommendation="Prefer assisted reproduction over repeat surgery",
        references=("ASRM Tubal Factor Committee Opinion 2021",),
    ),
)
