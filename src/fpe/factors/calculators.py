"""Continuous-variable factor calculators.

Each calculator maps one validated clinical measurement to a
dimensionless multiplier through a :class:`~fpe.core.bands.BandTable`.
Age is the exception: it maps directly to a monthly fecundability and
forms the baseline every other multiplier scales.
"""

from __future__ import annotations

from ..core.bands import INF, Band, BandTable
from ..core.ranges import domain

AGE_TABLE = BandTable(
    name="age",
    bands=(
        Band(-INF, 22.0, 0.25),
        Band(22.0, 25.0, 0.25, 0.24),
        Band(25.0, 30.0, 0.24, 0.195),
        Band(30.0, 35.0, 0.195, 0.15),
        Band(35.0, 38.0, 0.15, 0.10),
        Band(38.0, 40.0, 0.10, 0.075),
        Band(40.0, 42.0, 0.075, 0.04),
        Band(42.0, 45.0, 0.04, 0.005),
        Band(45.0, INF, 0.005),
    ),
    fallback=0.005,
    domain=domain("age"),
)

BMI_TABLE = BandTable.steps(
    "bmi",
    edges=(-INF, 18.5, 25.0, 30.0, 35.0, 40.0, INF),
    values=(0.70, 1.0, 0.85, 0.65, 0.45, 0.30),
    fallback=0.30,
    domain=domain("bmi"),
)

AMH_TABLE = BandTable(
    name="amh",
    bands=(
        Band(-INF, 0.1, 0.05),  # undetectable
        Band(0.1, 0.5, 0.15, 0.40),
        Band(0.5, 1.0, 0.40, 0.75),
        Band(1.0, 1.5, 0.75, 1.0),
        Band(1.5, 6.0, 1.0),
        Band(6.0, 10.0, 0.85),  # high AMH, PCOS-like pattern
        Band(10.0, INF, 0.70),
    ),
    fallback=0.70,
    domain=domain("amh"),
)

TSH_TABLE = BandTable.steps(
    "tsh",
    edges=(-INF, 0.4, 2.5, 4.0, 6.0, 10.0, INF),
    values=(0.70, 1.0, 0.90, 0.80, 0.65, 0.50),
    fallback=0.50,
    domain=domain("tsh"),
)

PROLACTIN_TABLE = BandTable.steps(
    "prolactin",
    edges=(-INF, 25.0, 50.0, 100.0, 200.0, INF),
    values=(1.0, 0.85, 0.60, 0.35, 0.15),
    fallback=0.15,
    domain=domain("prolactin"),
)

HOMA_IR_TABLE = BandTable.steps(
    "homa_ir",
    edges=(-INF, 2.5, 3.5, 5.0, 7.0, INF),
    values=(1.0, 0.90, 0.75, 0.60, 0.45),
    fallback=0.45,
    domain=domain("homa_ir"),
)

CYCLE_TABLE = BandTable.steps(
    "cycle_length",
    edges=(-INF, 15.0, 21.0, 36.0, 91.0, INF),
    values=(0.25, 0.70, 1.0, 0.80, 0.30),
    fallback=0.30,
    domain=domain("cycle_length"),
)

INFERTILITY_DURATION_TABLE = BandTable.steps(
    "infertility_duration",
    edges=(-INF, 1.0, 2.0, 3.0, 5.0, 8.0, INF),
    values=(1.0, 0.90, 0.80, 0.65, 0.45, 0.25),
    fallback=0.25,
    domain=domain("infertility_duration"),
)

PELVIC_SURGERY_TABLE = BandTable.steps(
    "pelvic_surgery_count",
    edges=(-INF, 1, 2, 3, 4, INF),
    values=(1.0, 0.90, 0.80, 0.65, 0.50),
    fallback=0.50,
    domain=domain("pelvic_surgery_count"),
)


def age_factor(age: float) -> float:
    """Monthly fecundability for a woman of the given age."""
    return AGE_TABLE.lookup(age)


def bmi_factor(bmi: float) -> float:
    return BMI_TABLE.lookup(bmi)


def amh_factor(amh: float) -> float:
    """Ovarian-reserve multiplier; steep below 1.5 ng/mL, penalized above 6 and again from 10."""
    return AMH_TABLE.lookup(amh)


def tsh_factor(tsh: float) -> float:
    return TSH_TABLE.lookup(tsh)


def prolactin_factor(prolactin: float) -> float:
    return PROLACTIN_TABLE.lookup(prolactin)


def homa_ir_factor(homa_ir: float) -> float:
    return HOMA_IR_TABLE.lookup(homa_ir)


def cycle_factor(cycle_length: float) -> float:
    """Regular cycles (21-35 days) are neutral; oligo- and polymenorrhea are penalized."""
    return CYCLE_TABLE.lookup(cycle_length)


def infertility_duration_factor(years: float) -> float:
    return INFERTILITY_DURATION_TABLE.lookup(years)


def pelvic_surgery_factor(count: int) -> float:
    return PELVIC_SURGERY_TABLE.lookup(count)


def parity_factor(previous_pregnancies: int) -> float:
    """A prior pregnancy proves fertility and slightly improves the outlook."""
    return 1.05 if previous_pregnancies >= 1 else 1.0
