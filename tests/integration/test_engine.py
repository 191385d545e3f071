"""End-to-end tests for the fertility analysis engine."""

import logging

import pytest
from hypothesis import HealthCheck, given, settings as hyp_settings, strategies as st

from fpe import (
    ClinicalProfile,
    FertilityCategory,
    FertilityEngine,
    RangeValidationError,
    TreatmentComplexity,
    analyze_fertility,
)
from fpe.config import Settings
from fpe.core.factors import FactorAxis
from fpe.core.models import AdenomyosisType, HsgResult, MyomaType, PolypType
from fpe.core.tiers import TreatmentPath, UrgencyLevel
from fpe.factors import aggregate
from fpe.synthesis import synthesize


@pytest.fixture
def engine() -> FertilityEngine:
    return FertilityEngine()


@pytest.mark.integration
class TestReferenceProfiles:
    def test_age_only(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=28))
        assert result.monthly_probability == pytest.approx(0.213)
        assert result.category is FertilityCategory.EXCELLENT
        assert result.confidence == pytest.approx(0.35)
        assert result.treatment_complexity is TreatmentComplexity.LOW
        assert result.treatment_path is TreatmentPath.TIMED_INTERCOURSE
        assert result.urgency is UrgencyLevel.ROUTINE
        assert result.interactions.interactions == []
        assert result.warnings == []

    def test_complete_core_workup(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=30, bmi=22, amh=2.0, tsh=1.5))
        assert result.monthly_probability == pytest.approx(0.195)
        assert result.category is FertilityCategory.GOOD
        assert result.confidence == 1.0
        assert list(result.key_factors) == [FactorAxis.AGE]

    def test_advanced_endometriosis(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=37, endometriosis_stage=3))
        assert result.monthly_probability == pytest.approx((0.15 - 2 * 0.05 / 3) * 0.5)
        assert result.category is FertilityCategory.LOW
        assert result.treatment_complexity is TreatmentComplexity.HIGH
        assert result.treatment_path is TreatmentPath.IVF_ICSI

    def test_critical_ovarian_failure_with_tubal_occlusion(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=42, amh=0.3, has_otb=True))
        assert result.monthly_probability == 0.005
        assert result.category is FertilityCategory.CRITICAL
        assert result.forces_treatment_change
        assert set(result.interactions.names()) == {"age_low_ovarian_reserve", "critical_ovarian_failure"}
        assert result.interactions.combined_multiplier == pytest.approx(0.165)
        assert result.treatment_complexity is TreatmentComplexity.CRITICAL
        assert result.treatment_path is TreatmentPath.OOCYTE_DONATION
        assert result.urgency is UrgencyLevel.CRITICAL
        assert result.recommendations[0].priority.value == "critical"

    def test_out_of_range_age(self, engine) -> None:
        with pytest.raises(RangeValidationError) as exc:
            engine.analyze(ClinicalProfile(age=10))
        assert exc.value.bounds == (18.0, 50.0)

    def test_derived_bmi_used(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=30, height_cm=160, weight_kg=85))
        assert result.key_factors[FactorAxis.BMI] == 0.65

    def test_derived_homa_ir_above_entry_range(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=32, insulin=50.0, glucose=300.0))
        assert result.key_factors[FactorAxis.HOMA_IR] == 0.45
        assert result.benchmarks.homa_ir["label"] == "severe"

    def test_technique_plan_attached(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=30, has_pcos=True, bmi=24))
        assert result.techniques.first_line == "timed_intercourse"
        assert result.techniques.timed_intercourse.protocol.value == "letrozole"

        data = engine.analyze(ClinicalProfile(age=37, amh=0.7)).model_dump(mode="json")
        assert data["techniques"]["ivf"]["protocol"] == "embryo_banking"


@pytest.mark.integration
class TestEngineBehaviour:
    def test_idempotent(self, engine) -> None:
        profile = ClinicalProfile(age=39, amh=0.8, tsh=3.0, prolactin=30, bmi=31, has_pcos=True)
        assert engine.analyze(profile).model_dump() == engine.analyze(profile).model_dump()

    def test_annual_probability(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=30, bmi=22, amh=2.0, tsh=1.5))
        assert result.annual_probability == pytest.approx(1 - (1 - 0.195) ** 12)

    def test_result_serializes(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=42, amh=0.3, has_otb=True))
        data = result.model_dump(mode="json")
        assert data["category"] == "critical"
        assert "annual_probability" in data
        assert data["interactions"]["forces_treatment_change"] is True

    def test_consistency_warning_does_not_abort(self, engine) -> None:
        result = engine.analyze(ClinicalProfile(age=42, amh=3.5))
        assert [w.kind.value for w in result.warnings] == ["age_amh_inconsistency"]

    def test_plausibility_warning_with_low_tolerance(self) -> None:
        engine = FertilityEngine(settings=Settings(benchmark_tolerance=1.01))
        result = engine.analyze(ClinicalProfile(age=28))
        assert [w.kind.value for w in result.warnings] == ["benchmark_deviation"]

    def test_benchmarks_can_be_disabled(self) -> None:
        engine = FertilityEngine(settings=Settings(include_benchmarks=False))
        assert engine.analyze(ClinicalProfile(age=28)).benchmarks is None

    def test_recommendation_limit(self) -> None:
        engine = FertilityEngine(settings=Settings(max_recommendations=1))
        result = engine.analyze(ClinicalProfile(age=39, amh=0.8, tsh=3.2, bmi=31))
        assert len(result.recommendations) == 1

    def test_logging_configured_from_settings(self) -> None:
        engine = FertilityEngine(settings=Settings(log_level="DEBUG", log_format="text"))
        assert engine.logger.level == logging.DEBUG
        assert engine.logger.handlers[0].formatter.__class__ is logging.Formatter

    def test_injected_logger_is_used_as_is(self) -> None:
        logger = logging.getLogger("fpe.test.injected")
        assert FertilityEngine(logger=logger, settings=Settings(log_level="DEBUG")).logger is logger

    def test_module_level_helper(self) -> None:
        assert analyze_fertility(ClinicalProfile(age=28)).category is FertilityCategory.EXCELLENT

    def test_age_only_profiles_have_low_confidence(self, engine) -> None:
        for age in (20, 30, 40, 50):
            assert engine.analyze(ClinicalProfile(age=age)).confidence <= 0.5

    @pytest.mark.asyncio
    async def test_analyze_async(self, engine) -> None:
        result = await engine.analyze_async(ClinicalProfile(age=28))
        assert result.category is FertilityCategory.EXCELLENT


def optional(strategy):
    return st.none() | strategy


@st.composite
def valid_profiles(draw):
    myoma_type = draw(st.sampled_from(MyomaType))
    surgeries = draw(st.integers(min_value=0, max_value=10))
    return ClinicalProfile(
        age=draw(st.floats(min_value=18, max_value=50)),
        bmi=draw(optional(st.floats(min_value=15, max_value=60))),
        amh=draw(optional(st.floats(min_value=0.1, max_value=10))),
        tsh=draw(optional(st.floats(min_value=0.1, max_value=20))),
        prolactin=draw(optional(st.floats(min_value=1, max_value=300))),
        insulin=draw(optional(st.floats(min_value=1, max_value=300))),
        glucose=draw(optional(st.floats(min_value=40, max_value=400))),
        homa_ir=draw(optional(st.floats(min_value=0.1, max_value=30))),
        cycle_length=draw(optional(st.floats(min_value=10, max_value=180))),
        infertility_duration=draw(optional(st.floats(min_value=0, max_value=20))),
        previous_pregnancies=draw(optional(st.integers(min_value=0, max_value=15))),
        has_pcos=draw(st.booleans()),
        endometriosis_stage=draw(st.integers(min_value=0, max_value=4)),
        myoma_type=myoma_type,
        myoma_size_cm=(
            None if myoma_type is MyomaType.NONE
            else draw(optional(st.floats(min_value=0.1, max_value=20)))
        ),
        adenomyosis_type=draw(st.sampled_from(AdenomyosisType)),
        polyp_type=draw(st.sampled_from(PolypType)),
        hsg_result=draw(optional(st.sampled_from(HsgResult))),
        has_otb=draw(st.booleans()),
        has_pelvic_surgery=surgeries > 0,
        pelvic_surgery_count=surgeries,
        tpo_ab_positive=draw(st.booleans()),
        sperm_concentration=draw(optional(st.floats(min_value=0, max_value=300))),
        sperm_progressive_motility=draw(optional(st.floats(min_value=0, max_value=100))),
        sperm_normal_morphology=draw(optional(st.floats(min_value=0, max_value=100))),
        sperm_dna_fragmentation=draw(optional(st.floats(min_value=0, max_value=100))),
        has_varicocele=draw(st.booleans()),
        seminal_culture_positive=draw(st.booleans()),
    )


@pytest.mark.integration
class TestProperties:
    @hyp_settings(deadline=None, max_examples=150, suppress_health_check=[HealthCheck.too_slow])
    @given(profile=valid_profiles())
    def test_bounded_and_well_formed(self, profile) -> None:
        result = FertilityEngine().analyze(profile)
        assert 0.005 <= result.monthly_probability <= 0.25
        assert 0.0 < result.annual_probability < 1.0
        assert 0.0 <= result.confidence <= 1.0
        assert result.interactions.combined_multiplier <= 1.0
        ranks = [r.priority.rank for r in result.recommendations]
        assert ranks == sorted(ranks)
        if result.forces_treatment_change:
            assert result.treatment_complexity >= TreatmentComplexity.HIGH
        assert result.techniques.ivf.success.cancellation_rate >= 5.0

    @hyp_settings(deadline=None, max_examples=100)
    @given(profile=valid_profiles())
    def test_interactions_never_improve(self, profile) -> None:
        result = FertilityEngine().analyze(profile)
        factors = aggregate(profile)
        without_interactions, _ = synthesize(factors, [], result.confidence)
        assert result.monthly_probability <= without_interactions
