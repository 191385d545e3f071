"""Profile validation package.

Range checks against medically plausible bounds, cross-field
consistency warnings, data-availability confidence scoring and the
post-aggregation calculation safety guard.

"""

from .validator import (  # noqa: F401
    DataAvailability,
    ProfileValidator,
    ValidatedProfile,
    validate_age,
    validate_amh,
    validate_available_data,
    validate_bmi,
    validate_calculation_safety,
    validate_consistency,
    validate_minimum_data,
    validate_range,
    validate_tsh,
)
