"""Tests for the category, treatment and recommendation classifier."""

import pytest

from fpe.classification import (
    DEFAULT_CITATIONS,
    EvidenceLevel,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    categorize,
    estimate_time_to_pregnancy,
    evidence_sources,
    generate_recommendations,
    treatment_complexity,
    treatment_path,
    urgency,
)
from fpe.core.models import ClinicalProfile, HsgResult
from fpe.core.tiers import FertilityCategory, TreatmentComplexity, TreatmentPath, UrgencyLevel
from fpe.factors import aggregate
from fpe.interactions import build_interactions_report, detect_interactions

EMPTY_REPORT = build_interactions_report([])


def report_for(profile: ClinicalProfile):
    return build_interactions_report(detect_interactions(profile))


class TestCategorize:
    @pytest.mark.parametrize(
        "monthly,expected",
        [
            (0.25, FertilityCategory.EXCELLENT),
            (0.20, FertilityCategory.EXCELLENT),
            (0.1999, FertilityCategory.GOOD),
            (0.15, FertilityCategory.GOOD),
            (0.10, FertilityCategory.MODERATE),
            (0.05, FertilityCategory.LOW),
            (0.02, FertilityCategory.VERY_LOW),
            (0.0199, FertilityCategory.CRITICAL),
            (0.005, FertilityCategory.CRITICAL),
        ],
    )
    def test_thresholds(self, monthly, expected) -> None:
        assert categorize(monthly) is expected


class TestTreatmentComplexity:
    def test_from_probability(self) -> None:
        profile = ClinicalProfile(age=30)
        assert treatment_complexity(0.2, profile, EMPTY_REPORT) is TreatmentComplexity.LOW
        assert treatment_complexity(0.12, profile, EMPTY_REPORT) is TreatmentComplexity.MEDIUM
        assert treatment_complexity(0.06, profile, EMPTY_REPORT) is TreatmentComplexity.HIGH
        assert treatment_complexity(0.01, profile, EMPTY_REPORT) is TreatmentComplexity.CRITICAL

    @pytest.mark.parametrize(
        "fields",
        [
            {"hsg_result": HsgResult.BILATERAL},
            {"has_otb": True},
            {"endometriosis_stage": 3},
            {"sperm_concentration": 0},
        ],
    )
    def test_findings_raise_to_high(self, fields) -> None:
        profile = ClinicalProfile(age=30, **fields)
        assert treatment_complexity(0.2, profile, EMPTY_REPORT) is TreatmentComplexity.HIGH

    @pytest.mark.parametrize(
        "fields",
        [
            {"hsg_result": HsgResult.UNILATERAL},
            {"endometriosis_stage": 1},
            {"amh": 0.8},
            {"has_pcos": True},
        ],
    )
    def test_findings_raise_to_medium(self, fields) -> None:
        profile = ClinicalProfile(age=30, **fields)
        assert treatment_complexity(0.2, profile, EMPTY_REPORT) is TreatmentComplexity.MEDIUM

    def test_never_lowered(self) -> None:
        profile = ClinicalProfile(age=30, has_pcos=True)
        assert treatment_complexity(0.01, profile, EMPTY_REPORT) is TreatmentComplexity.CRITICAL

    def test_forcing_interaction_overrides_favourable_probability(self) -> None:
        profile = ClinicalProfile(age=38, amh=0.9)
        assert treatment_complexity(0.2, profile, report_for(profile)) is TreatmentComplexity.HIGH

    def test_ovarian_failure_requires_donation(self) -> None:
        profile = ClinicalProfile(age=42, amh=0.3)
        complexity = treatment_complexity(0.2, profile, report_for(profile))
        assert complexity is TreatmentComplexity.CRITICAL
        assert treatment_path(complexity) is TreatmentPath.OOCYTE_DONATION

    def test_paths(self) -> None:
        assert treatment_path(TreatmentComplexity.LOW) is TreatmentPath.TIMED_INTERCOURSE
        assert treatment_path(TreatmentComplexity.MEDIUM) is TreatmentPath.OVULATION_INDUCTION_IUI
        assert treatment_path(TreatmentComplexity.HIGH) is TreatmentPath.IVF_ICSI


class TestUrgency:
    def test_routine_for_young_good_prognosis(self) -> None:
        level = urgency(0.2, ClinicalProfile(age=28), EMPTY_REPORT, TreatmentComplexity.LOW)
        assert level is UrgencyLevel.ROUTINE

    @pytest.mark.parametrize("age,expected", [(35, UrgencyLevel.PRIORITY), (40, UrgencyLevel.URGENT)])
    def test_age_raises(self, age, expected) -> None:
        assert urgency(0.2, ClinicalProfile(age=age), EMPTY_REPORT, TreatmentComplexity.LOW) is expected

    def test_tubal_occlusion_raises(self) -> None:
        profile = ClinicalProfile(age=28, has_otb=True)
        assert urgency(0.2, profile, EMPTY_REPORT, TreatmentComplexity.HIGH) is UrgencyLevel.PRIORITY

    def test_forced_change_is_urgent(self) -> None:
        profile = ClinicalProfile(age=38, amh=0.9)
        level = urgency(0.2, profile, report_for(profile), TreatmentComplexity.HIGH)
        assert level is UrgencyLevel.URGENT

    def test_critical_complexity_is_critical(self) -> None:
        level = urgency(0.2, ClinicalProfile(age=30), EMPTY_REPORT, TreatmentComplexity.CRITICAL)
        assert level is UrgencyLevel.CRITICAL


class TestTimeToPregnancy:
    @pytest.mark.parametrize(
        "monthly,complexity,expected",
        [
            (0.20, TreatmentComplexity.LOW, 5.0),
            (0.25, TreatmentComplexity.LOW, 4.0),
            (0.005, TreatmentComplexity.LOW, 20.0),
            (0.10, TreatmentComplexity.MEDIUM, 10.3),
            (0.005, TreatmentComplexity.HIGH, 10.7),
            (0.005, TreatmentComplexity.CRITICAL, 12.7),
        ],
    )
    def test_expected_months(self, monthly, complexity, expected) -> None:
        assert estimate_time_to_pregnancy(monthly, complexity).expected_months == expected

    def test_range_clamped_to_minimum(self) -> None:
        estimate = estimate_time_to_pregnancy(0.25, TreatmentComplexity.LOW)
        assert estimate.min_months == 3.0
        assert estimate.max_months == 5.0

    def test_range_brackets_expectation(self) -> None:
        for complexity in TreatmentComplexity:
            for monthly in (0.005, 0.05, 0.15, 0.25):
                estimate = estimate_time_to_pregnancy(monthly, complexity)
                assert 3.0 <= estimate.min_months <= estimate.expected_months <= estimate.max_months <= 36.0

    def test_lower_probability_never_faster(self) -> None:
        for complexity in TreatmentComplexity:
            slow = estimate_time_to_pregnancy(0.02, complexity)
            fast = estimate_time_to_pregnancy(0.2, complexity)
            assert slow.expected_months >= fast.expected_months


class TestRecommendations:
    def run(self, profile: ClinicalProfile, complexity: TreatmentComplexity, limit=None):
        return generate_recommendations(profile, aggregate(profile), report_for(profile), complexity, limit=limit)

    def test_default_citations_filled(self) -> None:
        rec = Recommendation(
            title="t",
            description="d",
            priority=RecommendationPriority.LOW,
            category=RecommendationCategory.GENETIC,
            evidence_level=EvidenceLevel.C,
        )
        assert rec.citations == list(DEFAULT_CITATIONS[RecommendationCategory.GENETIC])

    def test_favourable_profile(self) -> None:
        recs = self.run(ClinicalProfile(age=28), TreatmentComplexity.LOW)
        sources = [r.source for r in recs]
        assert "treatment_path" in sources
        assert "preconception" in sources
        assert all(r.priority is RecommendationPriority.LOW for r in recs)

    def test_ranked_by_priority(self) -> None:
        profile = ClinicalProfile(
            age=39, amh=0.8, tsh=3.2, bmi=31, prolactin=40, hsg_result=HsgResult.BILATERAL
        )
        recs = self.run(profile, TreatmentComplexity.HIGH)
        ranks = [r.priority.rank for r in recs]
        assert ranks == sorted(ranks)
        assert recs[0].priority is RecommendationPriority.CRITICAL

    def test_tubal_occlusion_is_critical(self) -> None:
        recs = self.run(ClinicalProfile(age=30, hsg_result=HsgResult.BILATERAL), TreatmentComplexity.HIGH)
        tubal = [r for r in recs if r.source == "hsg"]
        assert tubal and tubal[0].priority is RecommendationPriority.CRITICAL

    def test_forcing_interaction_contributes_recommendation(self) -> None:
        recs = self.run(ClinicalProfile(age=39, amh=0.8), TreatmentComplexity.HIGH)
        assert "age_low_ovarian_reserve" in [r.source for r in recs]

    def test_limit(self) -> None:
        profile = ClinicalProfile(age=39, amh=0.8, tsh=3.2, bmi=31)
        recs = self.run(profile, TreatmentComplexity.HIGH, limit=2)
        assert len(recs) == 2

    def test_evidence_sources_deduplicated(self) -> None:
        profile = ClinicalProfile(age=39, amh=0.8)
        report = report_for(profile)
        recs = generate_recommendations(profile, aggregate(profile), report, TreatmentComplexity.HIGH)
        sources = evidence_sources(recs, report)
        assert len(sources) == len(set(sources))
        assert "ESHRE Guideline on Ovarian Stimulation 2020" in sources

    def test_ivf_path_names_protocol(self) -> None:
        recs = self.run(ClinicalProfile(age=39, amh=0.8), TreatmentComplexity.HIGH)
        path = next(r for r in recs if r.source == "treatment_path")
        assert "IVF (embryo banking protocol)" in path.description

    def test_iui_path_names_stimulation(self) -> None:
        recs = self.run(ClinicalProfile(age=30, has_pcos=True), TreatmentComplexity.MEDIUM)
        path = next(r for r in recs if r.source == "treatment_path")
        assert "3 cycles of letrozole" in path.description

    def test_azoospermia_path_names_icsi(self) -> None:
        recs = self.run(ClinicalProfile(age=32, sperm_concentration=0), TreatmentComplexity.HIGH)
        path = next(r for r in recs if r.source == "treatment_path")
        assert path.description.startswith("ICSI")
        assert "surgical sperm retrieval" in path.description
