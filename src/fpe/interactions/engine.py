"""Detection of nonlinear interactions between clinical factors."""

from __future__ import annotations

from typing import Dict, List, Sequence

from ..core.models import ClinicalProfile
from ..utils.logging import get_logger
from .models import InteractionPriority, InteractionRecord, InteractionsReport
from .rules import INTERACTION_RULES, InteractionRule

logger = get_logger(__name__)


def detect_interactions(
    profile: ClinicalProfile,
    rules: Sequence[InteractionRule] = INTERACTION_RULES,
) -> List[InteractionRecord]:
    """Evaluate every rule independently and return the ones that fire.

    Records are ordered by priority, most severe first; rules of equal
    priority keep their rule-set order.
    """
    detected: List[InteractionRecord] = []
    for rule in rules:
        record = rule.evaluate(profile)
        if record is not None:
            logger.debug(
                "Interaction detected",
                extra={"extra": {"interaction": record.name, "correction": record.correction}},
            )
            detected.append(record)
    detected.sort(key=lambda r: r.priority.rank)
    return detected


def combined_multiplier(records: Sequence[InteractionRecord]) -> float:
    """Product of ``(1 - correction)`` over all records."""
    result = 1.0
    for record in records:
        result *= record.multiplier
    return result


def build_interactions_report(records: Sequence[InteractionRecord]) -> InteractionsReport:
    counts: Dict[InteractionPriority, int] = {priority: 0 for priority in InteractionPriority}
    for record in records:
        counts[record.priority] += 1
    reasons = [f"{r.name}: {r.recommendation}" for r in records if r.overrides_treatment]
    return InteractionsReport(
        interactions=list(records),
        combined_multiplier=combined_multiplier(records),
        counts=counts,
        treatment_change_reasons=reasons,
    )
