"""Error taxonomy for the fertility engine.

Fatal problems derive from :class:`MedicalCalculationError`, which is a
``ValueError`` so that callers validating user input can keep catching
the builtin.  Each error carries the offending value and the allowed
bounds as attributes; the message is plain English and callers are free
to build their own localized text from the attributes.

Consistency problems are different: two individually valid values that
make an implausible clinical picture.  They never abort a computation.
The validator returns a :class:`MedicalValidationError` and the engine
attaches it to the result as a :class:`ValidationWarning`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


class FertilityEngineError(Exception):
    """Base class for every error raised by the engine."""


class MedicalCalculationError(FertilityEngineError, ValueError):
    """A fatal error: the computation cannot produce a result."""


class RangeValidationError(MedicalCalculationError):
    """A scalar input lies outside its medically plausible closed range."""

    def __init__(
        self,
        field: str,
        value: float,
        minimum: float,
        maximum: float,
        unit: str = "",
    ) -> None:
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.unit = unit
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"{field}={value:g}{suffix} is outside the valid range "
            f"[{minimum:g}, {maximum:g}]{suffix}"
        )

    @property
    def bounds(self) -> tuple:
        return (self.minimum, self.maximum)


class InsufficientDataError(MedicalCalculationError):
    """A mandatory field is missing."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: List[str] = list(missing)
        super().__init__(f"Missing required field(s): {', '.join(self.missing)}")


class CalculationOverflowError(MedicalCalculationError):
    """A computed value escaped its safe bounds.

    This signals a defect in a factor table, never bad user input.
    """

    def __init__(self, operation: str, value: float, minimum: float, maximum: float) -> None:
        self.operation = operation
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"{operation} produced {value!r}, outside the safe range [{minimum:g}, {maximum:g}]"
        )


class WarningKind(str, Enum):
    """Kinds of non-fatal findings attached to a result."""

    AGE_AMH_INCONSISTENCY = "age_amh_inconsistency"
    MYOMA_SIZE_WITHOUT_TYPE = "myoma_size_without_type"
    SURGERY_COUNT_MISMATCH = "surgery_count_mismatch"
    BENCHMARK_DEVIATION = "benchmark_deviation"


class ValidationWarning(BaseModel):
    """A non-fatal finding surfaced alongside a computed result."""

    kind: WarningKind
    message: str
    values: Dict[str, Any] = Field(default_factory=dict)


class MedicalValidationError(FertilityEngineError):
    """Two valid fields combine into an implausible clinical picture."""

    def __init__(self, kind: WarningKind, message: str, values: Optional[Dict[str, Any]] = None) -> None:
        self.kind = kind
        self.values: Dict[str, Any] = dict(values or {})
        super().__init__(message)

    def to_warning(self) -> ValidationWarning:
        return ValidationWarning(kind=self.kind, message=str(self), values=self.values)
