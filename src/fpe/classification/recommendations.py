"""Evidence-graded recommendations for actionable findings.

Each rule inspects one clinical factor and emits at most a few
recommendations when that factor is outside its optimal range.  Forcing
interactions contribute their own recommendation, and the treatment tier
contributes the treatment-path recommendation.  The final list is ranked
by priority; rules of equal priority keep their declaration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

from ..core.factors import MedicalFactors
from ..core.models import AdenomyosisType, ClinicalProfile, HsgResult, MyomaType, OtbMethod, PolypType
from ..core.tiers import TreatmentComplexity
from ..factors.male import MaleSeverity, assess_male_factor
from ..factors.pathology import classify_pcos_phenotype
from ..interactions.models import InteractionPriority, InteractionsReport
from .models import (
    AssistedReproductionPlan,
    EvidenceLevel,
    FertilizationTechnique,
    IvfProtocol,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    StimulationProtocol,
)
from .techniques import plan_assisted_reproduction

P = RecommendationPriority
C = RecommendationCategory
E = EvidenceLevel


@dataclass(frozen=True)
class RecommendationContext:
    profile: ClinicalProfile
    factors: MedicalFactors
    report: InteractionsReport
    complexity: TreatmentComplexity
    plan: AssistedReproductionPlan


Rule = Callable[[RecommendationContext], Iterator[Recommendation]]


def _treatment_path(ctx: RecommendationContext) -> Iterator[Recommendation]:
    complexity = ctx.complexity
    plan = ctx.plan
    if complexity is TreatmentComplexity.LOW:
        yield Recommendation(
            title="Timed intercourse with ovulation tracking",
            description="Favourable profile: try for 6-12 cycles with intercourse timed to the fertile window.",
            priority=P.LOW,
            category=C.LIFESTYLE,
            evidence_level=E.B,
            citations=["NICE Fertility Guideline CG156"],
            source="treatment_path",
        )
    elif complexity is TreatmentComplexity.MEDIUM:
        iui = plan.iui
        yield Recommendation(
            title="Ovulation induction with intrauterine insemination",
            description=(
                f"Consider {iui.recommended_cycles} cycles of {_label(iui.protocol)} stimulation with IUI "
                f"(about {iui.success.monthly_pregnancy_rate:g}% per cycle)."
            ),
            priority=P.MEDIUM,
            category=C.REPRODUCTIVE,
            evidence_level=E.B,
            source="treatment_path",
        )
    elif complexity is TreatmentComplexity.HIGH:
        ivf = plan.ivf
        yield Recommendation(
            title="In vitro fertilization (IVF/ICSI)",
            description=(
                f"{_label(ivf.technique)} ({_label(ivf.protocol)} protocol) is the most effective first-line "
                f"option. {ivf.reason}. Expected live birth about {ivf.success.live_birth_rate:g}% per cycle."
            ),
            priority=P.HIGH,
            category=C.REPRODUCTIVE,
            evidence_level=E.A,
            source="treatment_path",
        )
    else:
        yield Recommendation(
            title="IVF with donor oocytes",
            description="Autologous treatment has very low expected success; discuss oocyte donation.",
            priority=P.CRITICAL,
            category=C.REPRODUCTIVE,
            evidence_level=E.A,
            source="treatment_path",
        )


_LABELS = {
    StimulationProtocol.LETROZOLE_FSH: "letrozole + FSH",
    StimulationProtocol.FSH: "gonadotropin (FSH)",
    IvfProtocol.DUOSTIM: "DuoStim",
    IvfProtocol.PRP_ACCUMULATION: "PRP with embryo accumulation",
    FertilizationTechnique.IVF: "IVF",
    FertilizationTechnique.ICSI: "ICSI",
    FertilizationTechnique.OOCYTE_DONATION: "IVF with donor oocytes",
}


def _label(member) -> str:
    return _LABELS.get(member, member.value.replace("_", " "))


def _interactions(ctx: RecommendationContext) -> Iterator[Recommendation]:
    for record in ctx.report.interactions:
        if not record.forces_treatment_change:
            continue
        critical = record.priority is InteractionPriority.CRITICAL
        yield Recommendation(
            title=record.recommendation,
            description=f"{record.condition}. {record.mechanism}.",
            priority=P.CRITICAL if critical else P.HIGH,
            category=C.REPRODUCTIVE,
            evidence_level=E.B,
            citations=list(record.references),
            source=record.name,
        )


def _ovarian_reserve(ctx: RecommendationContext) -> Iterator[Recommendation]:
    amh = ctx.profile.amh
    if amh is None:
        return
    if amh < 1.0:
        yield Recommendation(
            title="Do not delay treatment: diminished ovarian reserve",
            description=f"AMH {amh:g} ng/mL indicates a reduced follicle pool; consider IVF and oocyte banking.",
            priority=P.HIGH,
            category=C.REPRODUCTIVE,
            evidence_level=E.A,
            citations=["ESHRE Guideline on Ovarian Stimulation 2020"],
            source="amh",
        )
    elif amh > 6.0 and not ctx.profile.has_pcos:
        yield Recommendation(
            title="Evaluate for polycystic ovary syndrome",
            description=f"AMH {amh:g} ng/mL is high; assess cycle regularity, androgens and ovarian morphology.",
            priority=P.MEDIUM,
            category=C.DIAGNOSTIC,
            evidence_level=E.B,
            source="amh",
        )


def _pcos(ctx: RecommendationContext) -> Iterator[Recommendation]:
    if not ctx.profile.has_pcos:
        return
    phenotype = classify_pcos_phenotype(ctx.profile)
    yield Recommendation(
        title="Letrozole for ovulation induction",
        description=f"PCOS phenotype {phenotype.value}: letrozole is first-line for ovulation induction.",
        priority=P.HIGH,
        category=C.PHARMACOLOGICAL,
        evidence_level=E.A,
        citations=["International PCOS Guideline 2023", "Legro et al., NEJM 2014"],
        source="pcos",
    )


def _insulin_resistance(ctx: RecommendationContext) -> Iterator[Recommendation]:
    homa = ctx.profile.homa_ir
    if homa is None or ctx.factors.homa_ir >= 1.0:
        return
    yield Recommendation(
        title="Improve insulin sensitivity",
        description=f"HOMA-IR {homa:g}: diet, exercise and metformin or inositol when indicated.",
        priority=P.HIGH if homa > 3.5 else P.MEDIUM,
        category=C.LIFESTYLE,
        evidence_level=E.B,
        source="homa_ir",
    )


def _thyroid(ctx: RecommendationContext) -> Iterator[Recommendation]:
    tsh = ctx.profile.tsh
    if tsh is None:
        return
    if tsh > 2.5:
        tpo = " with positive TPO antibodies" if ctx.profile.tpo_ab_positive else ""
        yield Recommendation(
            title="Levothyroxine to optimise thyroid function",
            description=f"TSH {tsh:g} mIU/L{tpo}; target TSH below 2.5 before conception.",
            priority=P.HIGH if tsh > 4.5 or ctx.profile.tpo_ab_positive else P.MEDIUM,
            category=C.PHARMACOLOGICAL,
            evidence_level=E.B,
            citations=["ATA Pregnancy Thyroid Guideline 2017", "Endocrine Society 2022"],
            source="tsh",
        )
    elif tsh < 0.4:
        yield Recommendation(
            title="Investigate suppressed TSH",
            description=f"TSH {tsh:g} mIU/L suggests hyperthyroidism; measure free T4 and T3.",
            priority=P.MEDIUM,
            category=C.DIAGNOSTIC,
            evidence_level=E.C,
            source="tsh",
        )


def _prolactin(ctx: RecommendationContext) -> Iterator[Recommendation]:
    prl = ctx.profile.prolactin
    if prl is None or prl <= 25:
        return
    yield Recommendation(
        title="Cabergoline for hyperprolactinemia",
        description=f"Prolactin {prl:g} ng/mL; exclude macroprolactin and treat with a dopamine agonist.",
        priority=P.HIGH if prl > 50 else P.MEDIUM,
        category=C.PHARMACOLOGICAL,
        evidence_level=E.A,
        citations=["Endocrine Society Hyperprolactinemia Guideline 2011"],
        source="prolactin",
    )
    if prl > 100:
        yield Recommendation(
            title="Pituitary MRI",
            description="Prolactin above 100 ng/mL warrants imaging to exclude a macroadenoma.",
            priority=P.HIGH,
            category=C.DIAGNOSTIC,
            evidence_level=E.B,
            source="prolactin",
        )


def _weight(ctx: RecommendationContext) -> Iterator[Recommendation]:
    bmi = ctx.profile.bmi
    if bmi is None or ctx.factors.bmi >= 1.0:
        return
    if bmi < 18.5:
        title, description = "Gain weight to a healthy BMI", f"BMI {bmi:g}: low body weight disrupts ovulation."
        priority = P.MEDIUM
    else:
        title = "Structured weight-loss programme"
        description = f"BMI {bmi:g}: a 5-10% weight loss improves ovulation and treatment outcomes."
        priority = P.HIGH if bmi >= 35 else P.MEDIUM if bmi >= 30 else P.LOW
    yield Recommendation(
        title=title,
        description=description,
        priority=priority,
        category=C.LIFESTYLE,
        evidence_level=E.B,
        source="bmi",
    )


def _cycle(ctx: RecommendationContext) -> Iterator[Recommendation]:
    cycle = ctx.profile.cycle_length
    if cycle is None or ctx.factors.cycle >= 1.0:
        return
    yield Recommendation(
        title="Assess ovulatory function",
        description=f"Cycle length {cycle:g} days: confirm ovulation with mid-luteal progesterone.",
        priority=P.HIGH if cycle >= 91 or cycle < 15 else P.MEDIUM,
        category=C.DIAGNOSTIC,
        evidence_level=E.B,
        source="cycle",
    )


def _duration(ctx: RecommendationContext) -> Iterator[Recommendation]:
    years = ctx.profile.infertility_duration
    age = ctx.profile.age or 0.0
    threshold = 0.5 if age >= 35 else 1.0
    if years is None or years < threshold:
        return
    yield Recommendation(
        title="Complete the infertility work-up",
        description=f"{years:g} years trying to conceive: both partners should be evaluated now.",
        priority=P.HIGH if years >= 3 else P.MEDIUM,
        category=C.DIAGNOSTIC,
        evidence_level=E.A,
        citations=["ASRM Infertility Workup Committee Opinion 2020", "NICE Fertility Guideline CG156"],
        source="infertility_duration",
    )


def _endometriosis(ctx: RecommendationContext) -> Iterator[Recommendation]:
    stage = ctx.profile.endometriosis_stage
    if stage == 0:
        return
    if stage <= 2:
        yield Recommendation(
            title="Laparoscopic excision of endometriosis",
            description=f"Stage {stage} endometriosis: surgical treatment improves spontaneous pregnancy rates.",
            priority=P.MEDIUM,
            category=C.SURGICAL,
            evidence_level=E.A,
            citations=["ESHRE Endometriosis Guideline 2022"],
            source="endometriosis",
        )
    else:
        yield Recommendation(
            title="IVF for advanced endometriosis",
            description=f"Stage {stage} endometriosis: prefer IVF over repeat surgery to protect ovarian reserve.",
            priority=P.HIGH,
            category=C.REPRODUCTIVE,
            evidence_level=E.B,
            citations=["ESHRE Endometriosis Guideline 2022"],
            source="endometriosis",
        )


def _myoma(ctx: RecommendationContext) -> Iterator[Recommendation]:
    kind = ctx.profile.myoma_type
    size = ctx.profile.myoma_size_cm
    if kind is MyomaType.SUBMUCOSAL:
        yield Recommendation(
            title="Hysteroscopic myomectomy",
            description="Submucosal myomas distort the cavity and should be resected before conception.",
            priority=P.HIGH,
            category=C.SURGICAL,
            evidence_level=E.A,
            citations=["Pritts et al., Fertil Steril 2009"],
            source="myoma",
        )
    elif kind is MyomaType.INTRAMURAL and size is not None and size >= 4:
        yield Recommendation(
            title="Evaluate myomectomy",
            description=f"Intramural myoma of {size:g} cm may reduce implantation.",
            priority=P.MEDIUM,
            category=C.SURGICAL,
            evidence_level=E.C,
            source="myoma",
        )


def _polyp(ctx: RecommendationContext) -> Iterator[Recommendation]:
    if ctx.profile.polyp_type is PolypType.NONE:
        return
    yield Recommendation(
        title="Hysteroscopic polypectomy",
        description=f"{ctx.profile.polyp_type.value.capitalize()} endometrial polyp(s) impair implantation.",
        priority=P.HIGH if ctx.profile.polyp_type is PolypType.MULTIPLE else P.MEDIUM,
        category=C.SURGICAL,
        evidence_level=E.B,
        citations=["Perez-Medina et al., Hum Reprod 2005"],
        source="polyp",
    )


def _adenomyosis(ctx: RecommendationContext) -> Iterator[Recommendation]:
    kind = ctx.profile.adenomyosis_type
    if kind is AdenomyosisType.NONE:
        return
    yield Recommendation(
        title="GnRH-agonist pretreatment before embryo transfer",
        description=f"{kind.value.capitalize()} adenomyosis: suppress for 2-3 months, then frozen embryo transfer.",
        priority=P.HIGH if kind is AdenomyosisType.DIFFUSE else P.MEDIUM,
        category=C.PHARMACOLOGICAL,
        evidence_level=E.C,
        citations=["Vercellini et al., Hum Reprod 2014"],
        source="adenomyosis",
    )


def _tubal(ctx: RecommendationContext) -> Iterator[Recommendation]:
    hsg = ctx.profile.hsg_result
    if hsg is HsgResult.BILATERAL:
        yield Recommendation(
            title="IVF for bilateral tubal obstruction",
            description="Both tubes are blocked; spontaneous conception is very unlikely.",
            priority=P.CRITICAL,
            category=C.REPRODUCTIVE,
            evidence_level=E.A,
            citations=["ASRM Tubal Factor Committee Opinion 2021"],
            source="hsg",
        )
    elif hsg is HsgResult.UNILATERAL:
        yield Recommendation(
            title="Confirm unilateral tubal obstruction",
            description="Repeat imaging or laparoscopy; IUI on the patent side is an option.",
            priority=P.MEDIUM,
            category=C.DIAGNOSTIC,
            evidence_level=E.B,
            source="hsg",
        )
    if ctx.profile.has_otb:
        method = ctx.profile.otb_method or OtbMethod.UNKNOWN
        reversible = method in (OtbMethod.CLIPS, OtbMethod.RINGS)
        yield Recommendation(
            title="Tubal reanastomosis or IVF" if reversible else "IVF after tubal occlusion",
            description=(
                f"Prior sterilization by {method.value}: microsurgical reversal is feasible."
                if reversible
                else f"Prior sterilization by {method.value}: IVF is the effective option."
            ),
            priority=P.CRITICAL,
            category=C.SURGICAL if reversible else C.REPRODUCTIVE,
            evidence_level=E.B,
            source="otb",
        )


def _pelvic_surgery(ctx: RecommendationContext) -> Iterator[Recommendation]:
    if ctx.profile.pelvic_surgeries < 2:
        return
    yield Recommendation(
        title="Assess pelvic adhesions",
        description=f"{ctx.profile.pelvic_surgeries} prior pelvic surgeries: evaluate tubal function before IUI.",
        priority=P.MEDIUM,
        category=C.DIAGNOSTIC,
        evidence_level=E.C,
        source="pelvic_surgery",
    )


def _male(ctx: RecommendationContext) -> Iterator[Recommendation]:
    profile = ctx.profile
    if not profile.has_male_data:
        return
    assessment = assess_male_factor(profile)
    if assessment.severity is MaleSeverity.AZOOSPERMIA:
        yield Recommendation(
            title="Urological evaluation and surgical sperm retrieval",
            description="Azoospermia: genetic testing (karyotype, Y microdeletions) and TESE/micro-TESE.",
            priority=P.CRITICAL,
            category=C.GENETIC,
            evidence_level=E.A,
            citations=["EAU Guidelines 2023", "ASRM Genetic Guidelines 2024"],
            source="male",
        )
    elif assessment.is_severe:
        yield Recommendation(
            title="ICSI for severe male factor",
            description="Severe semen alteration: intracytoplasmic sperm injection is indicated.",
            priority=P.HIGH,
            category=C.REPRODUCTIVE,
            evidence_level=E.A,
            source="male",
        )
    elif assessment.severity is not MaleSeverity.NORMAL:
        yield Recommendation(
            title="Andrological assessment and antioxidant therapy",
            description=f"{assessment.alterations} semen parameter(s) below WHO 2021 limits.",
            priority=P.MEDIUM,
            category=C.PHARMACOLOGICAL,
            evidence_level=E.C,
            citations=["WHO Laboratory Manual for Semen 2021"],
            source="male",
        )
    dna = profile.sperm_dna_fragmentation
    if dna is not None and dna >= 30:
        yield Recommendation(
            title="Reduce sperm DNA fragmentation",
            description=f"DNA fragmentation {dna:g}%: short abstinence, antioxidants, consider testicular sperm.",
            priority=P.HIGH if dna >= 50 else P.MEDIUM,
            category=C.PHARMACOLOGICAL,
            evidence_level=E.B,
            citations=["Esteves et al., Fertil Steril 2017"],
            source="sperm_dna_fragmentation",
        )
    if profile.has_varicocele:
        yield Recommendation(
            title="Varicocele repair",
            description="Clinical varicocele with an abnormal semen analysis: microsurgical varicocelectomy.",
            priority=P.MEDIUM,
            category=C.SURGICAL,
            evidence_level=E.B,
            source="varicocele",
        )
    if profile.seminal_culture_positive:
        yield Recommendation(
            title="Treat genital tract infection",
            description="Positive seminal culture: targeted antibiotics and repeat semen analysis.",
            priority=P.MEDIUM,
            category=C.PHARMACOLOGICAL,
            evidence_level=E.C,
            source="seminal_culture",
        )


def _genetic(ctx: RecommendationContext) -> Iterator[Recommendation]:
    age = ctx.profile.age
    if age is None or age < 38 or ctx.complexity is TreatmentComplexity.CRITICAL:
        return
    yield Recommendation(
        title="Discuss preimplantation genetic testing",
        description=f"At age {age:g} embryo aneuploidy rates are high; PGT-A may shorten time to pregnancy.",
        priority=P.LOW,
        category=C.GENETIC,
        evidence_level=E.C,
        source="age",
    )


def _preconception(ctx: RecommendationContext) -> Iterator[Recommendation]:
    yield Recommendation(
        title="Preconception care",
        description="Folic acid 400 ug daily, no smoking, limited alcohol and caffeine.",
        priority=P.LOW,
        category=C.LIFESTYLE,
        evidence_level=E.A,
        source="preconception",
    )


RECOMMENDATION_RULES: Tuple[Rule, ...] = (
    _interactions,
    _treatment_path,
    _tubal,
    _ovarian_reserve,
    _male,
    _pcos,
    _insulin_resistance,
    _endometriosis,
    _myoma,
    _polyp,
    _adenomyosis,
    _thyroid,
    _prolactin,
    _weight,
    _cycle,
    _duration,
    _pelvic_surgery,
    _genetic,
    _preconception,
)


def generate_recommendations(
    profile: ClinicalProfile,
    factors: MedicalFactors,
    report: InteractionsReport,
    complexity: TreatmentComplexity,
    limit: Optional[int] = None,
    plan: Optional[AssistedReproductionPlan] = None,
) -> List[Recommendation]:
    """Run every rule and return the recommendations ranked by priority.

    ``plan`` is computed from the profile when the caller has not already
    done so.
    """
    if plan is None:
        plan = plan_assisted_reproduction(profile)
    ctx = RecommendationContext(
        profile=profile, factors=factors, report=report, complexity=complexity, plan=plan
    )
    recommendations: List[Recommendation] = []
    for rule in RECOMMENDATION_RULES:
        recommendations.extend(rule(ctx))
    recommendations.sort(key=lambda r: r.priority.rank)
    if limit is not None:
        recommendations = recommendations[:limit]
    return recommendations
