"""Tests for the nonlinear interaction engine."""

import pytest

from fpe.core.models import ClinicalProfile, HsgResult, MyomaType, PolypType
from fpe.core.tiers import TreatmentComplexity
from fpe.interactions import (
    INTERACTION_RULES,
    InteractionPriority,
    build_interactions_report,
    combined_multiplier,
    detect_interactions,
)


def names(profile: ClinicalProfile) -> list:
    return [r.name for r in detect_interactions(profile)]


class TestRuleSet:
    def test_rule_names_unique(self) -> None:
        rule_names = [rule.name for rule in INTERACTION_RULES]
        assert len(rule_names) == len(set(rule_names))

    def test_corrections_in_open_closed_unit_interval(self) -> None:
        for rule in INTERACTION_RULES:
            assert 0.0 < rule.correction <= 1.0

    def test_rule_set_is_immutable(self) -> None:
        assert isinstance(INTERACTION_RULES, tuple)
        with pytest.raises(AttributeError):
            INTERACTION_RULES[0].correction = 0.1  # type: ignore[misc]


class TestDetection:
    def test_healthy_profile_has_none(self) -> None:
        assert detect_interactions(ClinicalProfile(age=30, amh=2.0, tsh=1.5, bmi=22)) == []

    def test_missing_inputs_never_trigger(self) -> None:
        assert detect_interactions(ClinicalProfile(age=44)) == []

    def test_age_low_reserve(self) -> None:
        records = detect_interactions(ClinicalProfile(age=39, amh=0.8))
        assert [r.name for r in records] == ["age_low_ovarian_reserve"]
        record = records[0]
        assert record.correction == 0.70
        assert record.priority is InteractionPriority.CRITICAL
        assert record.forces_treatment_change
        assert "39" in record.condition and "0.8" in record.condition

    def test_critical_ovarian_failure(self) -> None:
        found = names(ClinicalProfile(age=42, amh=0.3))
        assert "age_low_ovarian_reserve" in found
        assert "critical_ovarian_failure" in found

    def test_pcos_insulin_resistance(self) -> None:
        assert "pcos_insulin_resistance" in names(ClinicalProfile(age=30, has_pcos=True, homa_ir=4.0))
        assert "pcos_insulin_resistance" not in names(ClinicalProfile(age=30, has_pcos=True, homa_ir=3.5))

    @pytest.mark.parametrize("tsh,expected", [(2.5, True), (4.5, True), (2.4, False), (4.6, False)])
    def test_prolactin_tsh_window_is_inclusive(self, tsh, expected) -> None:
        found = names(ClinicalProfile(age=30, prolactin=30, tsh=tsh))
        assert ("prolactin_subclinical_hypothyroidism" in found) is expected

    def test_tubal_surgery(self) -> None:
        profile = ClinicalProfile(age=30, hsg_result=HsgResult.BILATERAL, has_pelvic_surgery=True)
        assert "tubal_obstruction_pelvic_surgery" in names(profile)

    def test_obesity_rules(self) -> None:
        found = names(ClinicalProfile(age=30, bmi=36, has_pcos=True, endometriosis_stage=3))
        assert "obesity_pcos" in found
        assert "obesity_endometriosis" in found

    def test_pcos_intramural_myoma_needs_size(self) -> None:
        base = dict(age=30, has_pcos=True, myoma_type=MyomaType.INTRAMURAL)
        assert "pcos_intramural_myoma" in names(ClinicalProfile(myoma_size_cm=3.0, **base))
        assert "pcos_intramural_myoma" not in names(ClinicalProfile(myoma_size_cm=2.0, **base))
        assert "pcos_intramural_myoma" not in names(ClinicalProfile(**base))

    def test_polyps_advanced_age(self) -> None:
        assert "polyps_advanced_age" in names(ClinicalProfile(age=38, polyp_type=PolypType.SINGLE))
        assert "polyps_advanced_age" not in names(ClinicalProfile(age=37, polyp_type=PolypType.SINGLE))

    def test_endometriosis_male_factor(self) -> None:
        profile = ClinicalProfile(age=30, endometriosis_stage=1, sperm_concentration=10)
        assert "endometriosis_male_factor" in names(profile)

    def test_age_dna_fragmentation(self) -> None:
        assert "age_sperm_dna_fragmentation" in names(ClinicalProfile(age=41, sperm_dna_fragmentation=35))

    def test_rules_are_independent(self) -> None:
        profile = ClinicalProfile(
            age=40, amh=0.7, infertility_duration=4, endometriosis_stage=3, pelvic_surgery_count=2,
        )
        found = names(profile)
        for expected in (
            "age_low_ovarian_reserve",
            "age_prolonged_infertility",
            "endometriosis_low_reserve",
            "ovarian_surgery_low_reserve",
            "repeated_surgery_prolonged_infertility",
        ):
            assert expected in found

    def test_sorted_by_priority(self) -> None:
        records = detect_interactions(
            ClinicalProfile(age=40, amh=0.7, infertility_duration=4, endometriosis_stage=3, pelvic_surgery_count=2)
        )
        ranks = [r.priority.rank for r in records]
        assert ranks == sorted(ranks)


class TestReport:
    def test_combined_multiplier_is_product(self) -> None:
        records = detect_interactions(ClinicalProfile(age=42, amh=0.3))
        report = build_interactions_report(records)
        assert report.combined_multiplier == pytest.approx(0.30 * 0.55)
        assert combined_multiplier([]) == 1.0

    def test_critical_forcing_sets_flag(self) -> None:
        report = build_interactions_report(detect_interactions(ClinicalProfile(age=42, amh=0.3)))
        assert report.forces_treatment_change
        assert report.counts[InteractionPriority.CRITICAL] == 2
        assert any(r.required_complexity is TreatmentComplexity.CRITICAL for r in report.critical)

    def test_non_critical_forcing_does_not_override(self) -> None:
        records = detect_interactions(ClinicalProfile(age=30, prolactin=30, tsh=3.0))
        assert records[0].forces_treatment_change
        assert not build_interactions_report(records).forces_treatment_change

    def test_empty_report(self) -> None:
        report = build_interactions_report([])
        assert report.interactions == []
        assert report.combined_multiplier == 1.0
        assert not report.forces_treatment_change
