"""Client-side range checks for the clinical measurements on the form."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from stroke_risk.config import settings
from stroke_risk.schemas import PatientInput, blank_to_none

SUMMARY_MESSAGE = "Please correct the errors in the highlighted fields."

WIRE_NAMES = {
    "age": "age",
    "avg_glucose_level": "avgGlucoseLevel",
    "bmi": "bmi",
}


@dataclass(frozen=True)
class ValidationErrors:
    """One optional message per validated field; ``None`` means the field is fine."""

    age: Optional[str] = None
    avg_glucose_level: Optional[str] = None
    bmi: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return not self.as_dict()

    def as_dict(self) -> Dict[str, str]:
        return {
            WIRE_NAMES[field]: message
            for field, message in asdict(self).items()
            if message is not None
        }

    def without(self, field: str) -> "ValidationErrors":
        if field not in WIRE_NAMES:
            return self
        values = asdict(self)
        values[field] = None
        return ValidationErrors(**values)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _check_range(
    value: Any,
    bounds: Tuple[float, float],
    required_message: str,
    range_message: str,
) -> Optional[str]:
    if value is None or not _is_number(value):
        return required_message
    low, high = bounds
    if value < low or value > high:
        return range_message
    return None


def validate_patient(patient: PatientInput) -> ValidationErrors:
    """Check every numeric measurement independently and report each failure."""

    return ValidationErrors(
        age=_check_range(
            patient.age,
            settings.AGE_RANGE,
            "Age is required.",
            "Please enter a valid age (0-120).",
        ),
        avg_glucose_level=_check_range(
            patient.avg_glucose_level,
            settings.GLUCOSE_RANGE,
            "Glucose level is required.",
            "Value must be between 30 and 600 mg/dL.",
        ),
        bmi=_check_range(
            patient.bmi,
            settings.BMI_RANGE,
            "BMI is required.",
            "Value must be between 10 and 100.",
        ),
    )


def field_ranges() -> Dict[str, Dict[str, float]]:
    return {
        WIRE_NAMES["age"]: {"min": settings.AGE_RANGE[0], "max": settings.AGE_RANGE[1]},
        WIRE_NAMES["avg_glucose_level"]: {
            "min": settings.GLUCOSE_RANGE[0],
            "max": settings.GLUCOSE_RANGE[1],
        },
        WIRE_NAMES["bmi"]: {"min": settings.BMI_RANGE[0], "max": settings.BMI_RANGE[1]},
    }


def validate_form(data: Mapping[str, Any]) -> Tuple[PatientInput, ValidationErrors]:
    """Build a PatientInput from a raw form body and validate it.

    Measurements that are not numbers are reported as missing instead of
    failing body parsing, so every bad field shows up in one error map.
    Invalid choices for the other fields still raise pydantic's ValidationError.
    """

    raw = dict(data)
    for field, wire in WIRE_NAMES.items():
        for key in {field, wire}:
            if key in raw and not _is_number(blank_to_none(raw[key])):
                raw[key] = None

    patient = PatientInput.model_validate(raw)
    return patient, validate_patient(patient)
