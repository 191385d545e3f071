"""Medically plausible closed ranges for every numeric profile field."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple


class ClinicalRange(NamedTuple):
    minimum: float
    maximum: float
    unit: str = ""

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


CLINICAL_RANGES: Mapping[str, ClinicalRange] = MappingProxyType(
    {
        "age": ClinicalRange(18.0, 50.0, "years"),
        "height_cm": ClinicalRange(120.0, 220.0, "cm"),
        "weight_kg": ClinicalRange(30.0, 250.0, "kg"),
        "bmi": ClinicalRange(15.0, 60.0, "kg/m2"),
        "cycle_length": ClinicalRange(10.0, 180.0, "days"),
        "infertility_duration": ClinicalRange(0.0, 20.0, "years"),
        "previous_pregnancies": ClinicalRange(0, 15),
        "endometriosis_stage": ClinicalRange(0, 4),
        "myoma_size_cm": ClinicalRange(0.1, 20.0, "cm"),
        "pelvic_surgery_count": ClinicalRange(0, 10),
        "amh": ClinicalRange(0.1, 10.0, "ng/mL"),
        "tsh": ClinicalRange(0.1, 20.0, "mIU/L"),
        "prolactin": ClinicalRange(1.0, 300.0, "ng/mL"),
        "insulin": ClinicalRange(1.0, 300.0, "uU/mL"),
        "glucose": ClinicalRange(40.0, 400.0, "mg/dL"),
        "homa_ir": ClinicalRange(0.1, 30.0),
        "sperm_concentration": ClinicalRange(0.0, 300.0, "M/mL"),
        "sperm_progressive_motility": ClinicalRange(0.0, 100.0, "%"),
        "sperm_normal_morphology": ClinicalRange(0.0, 100.0, "%"),
        "sperm_dna_fragmentation": ClinicalRange(0.0, 100.0, "%"),
    }
)


def domain(name: str) -> tuple:
    """``(minimum, maximum)`` of a field, for band-table coverage checks."""
    r = CLINICAL_RANGES[name]
    return (r.minimum, r.maximum)
