"""Nonlinear interaction engine.

Some clinical factors compound beyond their independent effects (for
example advanced age with a low ovarian reserve).  This package holds
the read-only rule set describing those combinations, the detector that
evaluates it against a profile, and the report summarizing the combined
correction and any forced change of treatment path.

"""

from .engine import build_interactions_report, combined_multiplier, detect_interactions  # noqa: F401
from .models import InteractionPriority, InteractionRecord, InteractionsReport  # noqa: F401
from .rules import INTERACTION_RULES, InteractionRule  # noqa: F401
