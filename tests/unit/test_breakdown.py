"""Tests for the pandas factor breakdown."""

import numpy as np
import pytest

from fpe.core.factors import FactorAxis, MedicalFactors
from fpe.core.models import ClinicalProfile
from fpe.factors import aggregate
from fpe.interactions import build_interactions_report, detect_interactions
from fpe.pipeline import factor_breakdown, interactions_frame
from fpe.synthesis import synthesize


class TestFactorBreakdown:
    def test_one_row_per_axis_plus_result(self) -> None:
        df = factor_breakdown(MedicalFactors(age=0.2))
        assert len(df) == len(FactorAxis) + 1
        assert df["step"].iloc[0] == "age"
        assert df["type"].iloc[0] == "baseline"
        assert df["step"].iloc[-1] == "clamped"
        assert np.isnan(df["multiplier"].iloc[-1])

    def test_cumulative_matches_synthesis(self) -> None:
        profile = ClinicalProfile(age=39, amh=0.8, bmi=31, tsh=3.0)
        factors = aggregate(profile)
        records = detect_interactions(profile)
        df = factor_breakdown(factors, records)
        monthly, _ = synthesize(factors, records, 1.0)
        assert df["cumulative"].iloc[-1] == pytest.approx(monthly)
        assert list(df.loc[df["type"] == "interaction", "step"]) == [r.name for r in records]

    def test_clamped_row_applies_floor(self) -> None:
        df = factor_breakdown(MedicalFactors(age=0.04, otb=0.01))
        assert df["cumulative"].iloc[-2] == pytest.approx(0.0004)
        assert df["cumulative"].iloc[-1] == 0.005


class TestInteractionsFrame:
    def test_columns_when_empty(self) -> None:
        df = interactions_frame(build_interactions_report([]))
        assert df.empty
        assert "correction" in df.columns

    def test_rows(self) -> None:
        report = build_interactions_report(detect_interactions(ClinicalProfile(age=42, amh=0.3)))
        df = interactions_frame(report)
        assert set(df["name"]) == {"age_low_ovarian_reserve", "critical_ovarian_failure"}
        assert df["forces_treatment_change"].all()
