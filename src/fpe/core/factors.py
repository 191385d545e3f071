"""Per-axis multipliers derived from a clinical profile."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple


class FactorAxis(str, Enum):
    """Closed set of clinical axes, in synthesis order."""

    AGE = "age"
    BMI = "bmi"
    CYCLE = "cycle"
    INFERTILITY_DURATION = "infertility_duration"
    AMH = "amh"
    TSH = "tsh"
    PROLACTIN = "prolactin"
    HOMA_IR = "homa_ir"
    PARITY = "parity"
    PCOS = "pcos"
    ENDOMETRIOSIS = "endometriosis"
    MYOMA = "myoma"
    POLYP = "polyp"
    ADENOMYOSIS = "adenomyosis"
    HSG = "hsg"
    OTB = "otb"
    PELVIC_SURGERY = "pelvic_surgery"
    MALE = "male"


FACTOR_LABELS: Mapping[FactorAxis, str] = MappingProxyType(
    {
        FactorAxis.AGE: "Age",
        FactorAxis.BMI: "Body mass index",
        FactorAxis.CYCLE: "Cycle regularity",
        FactorAxis.INFERTILITY_DURATION: "Infertility duration",
        FactorAxis.AMH: "Ovarian reserve (AMH)",
        FactorAxis.TSH: "Thyroid function (TSH)",
        FactorAxis.PROLACTIN: "Prolactin",
        FactorAxis.HOMA_IR: "Insulin resistance (HOMA-IR)",
        FactorAxis.PARITY: "Previous pregnancies",
        FactorAxis.PCOS: "Polycystic ovary syndrome",
        FactorAxis.ENDOMETRIOSIS: "Endometriosis",
        FactorAxis.MYOMA: "Uterine myoma",
        FactorAxis.POLYP: "Endometrial polyps",
        FactorAxis.ADENOMYOSIS: "Adenomyosis",
        FactorAxis.HSG: "Tubal patency (HSG)",
        FactorAxis.OTB: "Tubal occlusion (OTB)",
        FactorAxis.PELVIC_SURGERY: "Pelvic surgery",
        FactorAxis.MALE: "Male factor",
    }
)

# Declared output range of each axis; anything else is [0, 1].
AGE_BOUNDS: Tuple[float, float] = (0.005, 0.25)
PARITY_BOUNDS: Tuple[float, float] = (0.0, 1.05)
DEFAULT_BOUNDS: Tuple[float, float] = (0.0, 1.0)


def factor_bounds(axis: FactorAxis) -> Tuple[float, float]:
    if axis is FactorAxis.AGE:
        return AGE_BOUNDS
    if axis is FactorAxis.PARITY:
        return PARITY_BOUNDS
    return DEFAULT_BOUNDS


@dataclass
class MedicalFactors:
    """One multiplier per :class:`FactorAxis`.

    ``age`` is itself a monthly fecundability; every other field is a
    dimensionless multiplier where 1.0 means "no effect".  Field order
    matches :class:`FactorAxis` and is the order used for synthesis.
    """

    age: float
    bmi: float = 1.0
    cycle: float = 1.0
    infertility_duration: float = 1.0
    amh: float = 1.0
    tsh: float = 1.0
    prolactin: float = 1.0
    homa_ir: float = 1.0
    parity: float = 1.0
    pcos: float = 1.0
    endometriosis: float = 1.0
    myoma: float = 1.0
    polyp: float = 1.0
    adenomyosis: float = 1.0
    hsg: float = 1.0
    otb: float = 1.0
    pelvic_surgery: float = 1.0
    male: float = 1.0

    def __getitem__(self, axis: FactorAxis) -> float:
        return getattr(self, FactorAxis(axis).value)

    def items(self) -> Iterator[Tuple[FactorAxis, float]]:
        """Yield ``(axis, multiplier)`` pairs in synthesis order."""
        for f in fields(self):
            yield FactorAxis(f.name), getattr(self, f.name)

    def altered(self) -> Dict[FactorAxis, float]:
        """Axes whose multiplier departs from neutral (age is always included)."""
        return {
            axis: value
            for axis, value in self.items()
            if axis is FactorAxis.AGE or value != 1.0
        }

    def as_dict(self) -> Dict[FactorAxis, float]:
        return dict(self.items())
