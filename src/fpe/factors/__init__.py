"""Factor calculators.

One pure function per clinical variable, each mapping a validated value
to a multiplier (or, for age, to a monthly fecundability).  Continuous
variables are looked up in closed-open band tables; anatomical findings
are direct lookups; the male factor combines a WHO 2021 severity with
independent modifiers.  :func:`aggregate` assembles all of them into a
:class:`~fpe.core.factors.MedicalFactors` record.

"""

from .aggregator import aggregate  # noqa: F401
from .male import MaleFactorAssessment, MaleSeverity, assess_male_factor  # noqa: F401
from .pathology import PcosPhenotype, classify_pcos_phenotype  # noqa: F401
