"""Analysis pipeline.

The :class:`FertilityEngine` runs validation, factor aggregation,
interaction detection, synthesis and classification for one profile.
Around it sit the boundary helpers: batch analysis over threads or
asyncio tasks, a what-if treatment simulator, and pandas breakdowns of
how each factor contributed to the final probability.

"""

from .batch import BatchAnalyzer  # noqa: F401
from .breakdown import factor_breakdown, interactions_frame  # noqa: F401
from .engine import FertilityEngine, analyze_fertility  # noqa: F401
from .models import BatchItem, ComprehensiveFertilityResult, SimulationOutcome  # noqa: F401
from .simulator import TreatmentSimulator  # noqa: F401
