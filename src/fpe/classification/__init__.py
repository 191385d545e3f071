"""Category, treatment tier and recommendation classifier.

Maps the synthesized monthly probability to one of six qualitative
categories, derives treatment complexity and urgency (elevated by
critical forcing interactions and by specific findings such as tubal
occlusion), estimates time to pregnancy, assesses each
assisted-reproduction technique and generates an evidence-graded,
priority-ranked list of recommendations.

"""

from .classifier import (  # noqa: F401
    categorize,
    estimate_time_to_pregnancy,
    evidence_sources,
    treatment_complexity,
    treatment_path,
    urgency,
)
from .models import (  # noqa: F401
    DEFAULT_CITATIONS,
    AssistedReproductionPlan,
    EvidenceLevel,
    FertilizationTechnique,
    Indication,
    IuiPlan,
    IvfPlan,
    IvfProtocol,
    IvfSuccess,
    OvarianResponse,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    StimulationPlan,
    StimulationProtocol,
    StimulationSuccess,
    TimeEstimate,
)
from .recommendations import generate_recommendations  # noqa: F401
from .techniques import (  # noqa: F401
    evaluate_cycle_cancellation,
    iui_indication,
    ivf_indication,
    ivf_success,
    plan_assisted_reproduction,
    select_ivf_protocol,
    select_stimulation_protocol,
    stimulation_success,
    timed_intercourse_indication,
)
