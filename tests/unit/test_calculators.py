"""Unit and property tests for the factor calculators."""

import pytest
from hypothesis import given, settings, strategies as st

from fpe.core.ranges import CLINICAL_RANGES
from fpe.factors import calculators as calc
from fpe.factors.male import DNA_FRAGMENTATION_TABLE
from fpe.factors.pathology import MYOMA_SIZE_TABLES

CONTINUOUS_TABLES = [
    (calc.AGE_TABLE, "age", (0.005, 0.25)),
    (calc.BMI_TABLE, "bmi", (0.0, 1.0)),
    (calc.AMH_TABLE, "amh", (0.0, 1.0)),
    (calc.TSH_TABLE, "tsh", (0.0, 1.0)),
    (calc.PROLACTIN_TABLE, "prolactin", (0.0, 1.0)),
    (calc.HOMA_IR_TABLE, "homa_ir", (0.0, 1.0)),
    (calc.CYCLE_TABLE, "cycle_length", (0.0, 1.0)),
    (calc.INFERTILITY_DURATION_TABLE, "infertility_duration", (0.0, 1.0)),
    (calc.PELVIC_SURGERY_TABLE, "pelvic_surgery_count", (0.0, 1.0)),
    (DNA_FRAGMENTATION_TABLE, "sperm_dna_fragmentation", (0.0, 1.0)),
] + [(table, "myoma_size_cm", (0.0, 1.0)) for table in MYOMA_SIZE_TABLES.values()]

unit = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)


class TestRangeTotality:
    """Every in-range value matches exactly one band and never hits the fallback."""

    @pytest.mark.parametrize("table,field,bounds", CONTINUOUS_TABLES, ids=lambda x: getattr(x, "name", None))
    @settings(max_examples=200, deadline=None)
    @given(position=unit)
    def test_in_domain_values_match_one_band(self, table, field, bounds, position) -> None:
        r = CLINICAL_RANGES[field]
        value = r.minimum + (r.maximum - r.minimum) * position
        matches = [band for band in table.bands if band.contains(value)]
        assert len(matches) == 1
        assert table.find(value) is matches[0]
        low, high = bounds
        assert low <= table.lookup(value) <= high

    @pytest.mark.parametrize("table,field,bounds", CONTINUOUS_TABLES, ids=lambda x: getattr(x, "name", None))
    def test_domain_endpoints_covered(self, table, field, bounds) -> None:
        r = CLINICAL_RANGES[field]
        assert table.find(r.minimum) is not None
        assert table.find(r.maximum) is not None

    @pytest.mark.parametrize("count", range(0, 11))
    def test_every_surgery_count_covered(self, count) -> None:
        assert calc.PELVIC_SURGERY_TABLE.find(count) is not None


class TestAgeFactor:
    def test_young_plateau(self) -> None:
        assert calc.age_factor(18) == 0.25
        assert calc.age_factor(21.9) == 0.25

    def test_anchor_points(self) -> None:
        assert calc.age_factor(25) == pytest.approx(0.24)
        assert calc.age_factor(30) == pytest.approx(0.195)
        assert calc.age_factor(35) == pytest.approx(0.15)
        assert calc.age_factor(38) == pytest.approx(0.10)
        assert calc.age_factor(40) == pytest.approx(0.075)

    def test_age_37_in_expected_window(self) -> None:
        assert 0.10 <= calc.age_factor(37) <= 0.12

    def test_floor_from_45(self) -> None:
        assert calc.age_factor(45) == 0.005
        assert calc.age_factor(50) == 0.005

    @settings(max_examples=300, deadline=None)
    @given(
        a=st.floats(min_value=18, max_value=50, allow_nan=False),
        b=st.floats(min_value=18, max_value=50, allow_nan=False),
    )
    def test_non_increasing(self, a, b) -> None:
        young, old = sorted((a, b))
        assert calc.age_factor(young) >= calc.age_factor(old)


class TestBmiFactor:
    @pytest.mark.parametrize(
        "bmi,expected",
        [(17, 0.70), (18.5, 1.0), (24.9, 1.0), (25, 0.85), (32, 0.65), (37, 0.45), (45, 0.30)],
    )
    def test_bands(self, bmi, expected) -> None:
        assert calc.bmi_factor(bmi) == expected

    @settings(max_examples=200, deadline=None)
    @given(
        a=st.floats(min_value=18.5, max_value=60, allow_nan=False),
        b=st.floats(min_value=18.5, max_value=60, allow_nan=False),
    )
    def test_non_increasing_above_optimum(self, a, b) -> None:
        lower, higher = sorted((a, b))
        assert calc.bmi_factor(lower) >= calc.bmi_factor(higher)

    @given(bmi=st.floats(min_value=15, max_value=60, allow_nan=False))
    def test_maximal_at_optimal_band(self, bmi) -> None:
        assert calc.bmi_factor(bmi) <= calc.bmi_factor(22.0)

    @given(
        a=st.floats(min_value=15, max_value=18.49, allow_nan=False),
        b=st.floats(min_value=15, max_value=18.49, allow_nan=False),
    )
    def test_non_increasing_below_optimum(self, a, b) -> None:
        lower, higher = sorted((a, b))
        assert calc.bmi_factor(higher) >= calc.bmi_factor(lower)


class TestHormonalFactors:
    def test_amh_segments(self) -> None:
        assert calc.amh_factor(0.1) == pytest.approx(0.15)
        assert calc.amh_factor(0.3) == pytest.approx(0.275)
        assert calc.amh_factor(0.5) == pytest.approx(0.40)
        assert calc.amh_factor(1.0) == pytest.approx(0.75)
        assert calc.amh_factor(2.0) == 1.0
        assert calc.amh_factor(8.0) == 0.85

    def test_amh_upper_boundary(self) -> None:
        assert calc.amh_factor(9.99) == 0.85
        assert calc.amh_factor(10.0) == 0.70

    @pytest.mark.parametrize(
        "tsh,expected", [(0.2, 0.70), (1.5, 1.0), (3.0, 0.90), (5.0, 0.80), (8.0, 0.65), (12.0, 0.50)]
    )
    def test_tsh(self, tsh, expected) -> None:
        assert calc.tsh_factor(tsh) == expected

    @pytest.mark.parametrize("prl,expected", [(10, 1.0), (25, 0.85), (60, 0.60), (150, 0.35), (250, 0.15)])
    def test_prolactin(self, prl, expected) -> None:
        assert calc.prolactin_factor(prl) == expected

    @pytest.mark.parametrize("homa,expected", [(1.0, 1.0), (3.0, 0.90), (4.0, 0.75), (6.0, 0.60), (9.0, 0.45)])
    def test_homa_ir(self, homa, expected) -> None:
        assert calc.homa_ir_factor(homa) == expected


class TestHistoryFactors:
    @pytest.mark.parametrize(
        "days,expected", [(12, 0.25), (18, 0.70), (28, 1.0), (35, 1.0), (36, 0.80), (90, 0.80), (120, 0.30)]
    )
    def test_cycle(self, days, expected) -> None:
        assert calc.cycle_factor(days) == expected

    @pytest.mark.parametrize(
        "years,expected", [(0.5, 1.0), (1, 0.90), (2.5, 0.80), (4, 0.65), (6, 0.45), (10, 0.25)]
    )
    def test_infertility_duration(self, years, expected) -> None:
        assert calc.infertility_duration_factor(years) == expected

    @pytest.mark.parametrize("count,expected", [(0, 1.0), (1, 0.90), (2, 0.80), (3, 0.65), (4, 0.50), (9, 0.50)])
    def test_pelvic_surgery(self, count, expected) -> None:
        assert calc.pelvic_surgery_factor(count) == expected

    def test_parity(self) -> None:
        assert calc.parity_factor(0) == 1.0
        assert calc.parity_factor(1) == 1.05
        assert calc.parity_factor(4) == 1.05
