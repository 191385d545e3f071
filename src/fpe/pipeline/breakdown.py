"""Explainability frames for the display and report collaborators."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd  # type: ignore

from ..core.factors import FACTOR_LABELS, MedicalFactors
from ..interactions.models import InteractionRecord, InteractionsReport
from ..synthesis.synthesizer import MONTHLY_CEILING, MONTHLY_FLOOR


def factor_breakdown(factors: MedicalFactors, interactions: Sequence[InteractionRecord] = ()) -> pd.DataFrame:
    """One row per synthesis step with its multiplier and the running product.

    Rows follow the synthesis order: the age baseline, each factor axis,
    then each interaction as ``1 - correction``.  A final ``clamped`` row
    shows the bounded monthly probability.
    """
    rows = []
    for axis, value in factors.items():
        rows.append({
            "step": axis.value,
            "label": FACTOR_LABELS[axis],
            "multiplier": value,
            "type": "baseline" if axis.value == "age" else "factor",
        })
    for record in interactions:
        rows.append({
            "step": record.name,
            "label": record.condition,
            "multiplier": record.multiplier,
            "type": "interaction",
        })
    df = pd.DataFrame(rows)
    df["cumulative"] = np.cumprod(df["multiplier"].to_numpy())
    final = float(np.clip(df["cumulative"].iloc[-1], MONTHLY_FLOOR, MONTHLY_CEILING))
    clamped = pd.DataFrame([{
        "step": "clamped",
        "label": "Monthly probability",
        "multiplier": np.nan,
        "type": "result",
        "cumulative": final,
    }])
    return pd.concat([df, clamped], ignore_index=True)


def interactions_frame(report: InteractionsReport) -> pd.DataFrame:
    """Detected interactions as a table, most severe first."""
    columns = ["name", "priority", "correction", "multiplier", "forces_treatment_change", "condition"]
    rows = [
        {
            "name": r.name,
            "priority": r.priority.value,
            "correction": r.correction,
            "multiplier": r.multiplier,
            "forces_treatment_change": r.forces_treatment_change,
            "condition": r.condition,
        }
        for r in report.interactions
    ]
    return pd.DataFrame(rows, columns=columns)
