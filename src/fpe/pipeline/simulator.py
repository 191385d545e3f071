"""What-if simulation of treatable findings.

The simulator re-runs the engine on a modified copy of a profile and
reports how much the probability would move.  The baseline profile is
never mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ..core.models import ClinicalProfile, MyomaType, PolypType
from ..utils.logging import get_logger
from .engine import FertilityEngine
from .models import ComprehensiveFertilityResult, SimulationOutcome

logger = get_logger(__name__)

# Derived fields that must be recomputed when any of their inputs change.
_DERIVED_INPUTS: Dict[str, Tuple[str, ...]] = {
    "bmi": ("height_cm", "weight_kg"),
    "homa_ir": ("insulin", "glucose"),
}


class TreatmentSimulator:
    """Evaluate hypothetical profile changes against a baseline."""

    def __init__(self, engine: Optional[FertilityEngine] = None) -> None:
        self.engine = engine or FertilityEngine()

    @staticmethod
    def apply_changes(profile: ClinicalProfile, changes: Dict[str, Any]) -> ClinicalProfile:
        """Return a re-validated copy of ``profile`` with ``changes`` applied."""
        unknown = set(changes) - set(ClinicalProfile.model_fields)
        if unknown:
            raise ValueError(f"Unknown profile field(s): {', '.join(sorted(unknown))}")
        data = profile.model_dump()
        for derived, inputs in _DERIVED_INPUTS.items():
            if derived not in changes and any(name in changes for name in inputs):
                data[derived] = None
        data.update(changes)
        return ClinicalProfile.model_validate(data)

    def simulate(
        self,
        profile: ClinicalProfile,
        name: str = "custom",
        baseline: Optional[ComprehensiveFertilityResult] = None,
        **changes: Any,
    ) -> SimulationOutcome:
        scenario_profile = self.apply_changes(profile, changes)
        baseline = baseline or self.engine.analyze(profile)
        scenario = self.engine.analyze(scenario_profile)
        outcome = SimulationOutcome(
            name=name,
            changes=changes,
            scenario_profile=scenario_profile,
            baseline=baseline,
            scenario=scenario,
        )
        logger.debug(
            "Simulated scenario",
            extra={"extra": {"scenario": name, "monthly_delta": outcome.monthly_delta}},
        )
        return outcome

    @staticmethod
    def candidate_scenarios(profile: ClinicalProfile) -> Dict[str, Dict[str, Any]]:
        """Modifiable interventions that apply to this profile."""
        scenarios: Dict[str, Dict[str, Any]] = {}
        if profile.bmi is not None:
            if profile.bmi >= 25:
                scenarios["weight_loss"] = {"bmi": 24.0}
            elif profile.bmi < 18.5:
                scenarios["weight_gain"] = {"bmi": 21.0}
        if profile.tsh is not None and profile.tsh > 2.5:
            scenarios["thyroid_optimization"] = {"tsh": 1.5}
        if profile.prolactin is not None and profile.prolactin > 25:
            scenarios["prolactin_normalization"] = {"prolactin": 15.0}
        if profile.homa_ir is not None and profile.homa_ir >= 2.5:
            scenarios["insulin_sensitization"] = {"homa_ir": 2.0}
        if profile.polyp_type is not PolypType.NONE:
            scenarios["polypectomy"] = {"polyp_type": PolypType.NONE}
        if profile.myoma_type is MyomaType.SUBMUCOSAL:
            scenarios["hysteroscopic_myomectomy"] = {"myoma_type": MyomaType.NONE, "myoma_size_cm": None}
        if profile.has_varicocele:
            scenarios["varicocele_repair"] = {"has_varicocele": False}
        if profile.seminal_culture_positive:
            scenarios["infection_treatment"] = {"seminal_culture_positive": False}
        return scenarios

    def standard_scenarios(self, profile: ClinicalProfile) -> List[SimulationOutcome]:
        """Simulate every applicable intervention, largest improvement first."""
        baseline = self.engine.analyze(profile)
        outcomes = [
            self.simulate(profile, name=name, baseline=baseline, **changes)
            for name, changes in self.candidate_scenarios(profile).items()
        ]
        outcomes.sort(key=lambda o: o.monthly_delta, reverse=True)
        return outcomes
