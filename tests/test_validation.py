import math

import pytest
from pydantic import ValidationError

from stroke_risk.schemas import PatientInput
from stroke_risk.validation import ValidationErrors, field_ranges, validate_form, validate_patient


def test_default_enums_with_valid_measurements_pass(valid_patient):
    errors = validate_patient(valid_patient)

    assert errors.is_valid
    assert errors.as_dict() == {}


def test_out_of_range_measurements_report_exactly_three_fields():
    patient = PatientInput(age=150, avg_glucose_level=700, bmi=5)

    errors = validate_patient(patient)

    assert not errors.is_valid
    assert errors.as_dict() == {
        "age": "Please enter a valid age (0-120).",
        "avgGlucoseLevel": "Value must be between 30 and 600 mg/dL.",
        "bmi": "Value must be between 10 and 100.",
    }


def test_unset_measurements_are_required():
    errors = validate_patient(PatientInput())

    assert errors == ValidationErrors(
        age="Age is required.",
        avg_glucose_level="Glucose level is required.",
        bmi="BMI is required.",
    )


@pytest.mark.parametrize(
    "age, flagged",
    [(0, False), (120, False), (-0.5, True), (120.1, True), (None, True)],
)
def test_age_bounds_are_inclusive(age, flagged):
    errors = validate_patient(PatientInput(age=age, avg_glucose_level=100, bmi=25))

    assert (errors.age is not None) == flagged
    assert errors.avg_glucose_level is None
    assert errors.bmi is None


@pytest.mark.parametrize("glucose, flagged", [(30, False), (600, False), (29.9, True), (600.5, True)])
def test_glucose_bounds(glucose, flagged):
    errors = validate_patient(PatientInput(age=50, avg_glucose_level=glucose, bmi=25))

    assert (errors.avg_glucose_level is not None) == flagged


@pytest.mark.parametrize("bmi, flagged", [(10, False), (100, False), (9.99, True), (101, True)])
def test_bmi_bounds(bmi, flagged):
    errors = validate_patient(PatientInput(age=50, avg_glucose_level=100, bmi=bmi))

    assert (errors.bmi is not None) == flagged


def test_non_numeric_values_are_treated_as_missing():
    patient = PatientInput.model_construct(age="abc", avg_glucose_level=True, bmi=math.nan)

    errors = validate_patient(patient)

    assert errors.age == "Age is required."
    assert errors.avg_glucose_level == "Glucose level is required."
    assert errors.bmi == "BMI is required."


def test_blank_string_means_unset():
    patient = PatientInput.model_validate({"age": "", "avgGlucoseLevel": " ", "bmi": 22})

    assert patient.age is None
    assert patient.avg_glucose_level is None
    assert set(validate_patient(patient).as_dict()) == {"age", "avgGlucoseLevel"}


def test_validation_is_pure():
    patient = PatientInput(age=200, avg_glucose_level=100, bmi=25)
    before = patient.model_dump()

    first = validate_patient(patient)
    second = validate_patient(patient)

    assert first == second
    assert patient.model_dump() == before


def test_without_clears_a_single_slot():
    errors = validate_patient(PatientInput())

    cleared = errors.without("bmi")

    assert cleared.bmi is None
    assert cleared.age == errors.age
    assert errors.without("gender") is errors


def test_field_ranges_use_wire_names():
    assert field_ranges() == {
        "age": {"min": 0, "max": 120},
        "avgGlucoseLevel": {"min": 30, "max": 600},
        "bmi": {"min": 10, "max": 100},
    }


@pytest.mark.parametrize("value", [True, False, "45"])
def test_measurements_reject_booleans_and_strings(value):
    with pytest.raises(ValidationError):
        PatientInput(age=value, avg_glucose_level=100, bmi=25)


def test_form_reports_non_numeric_alongside_other_bad_fields():
    patient, errors = validate_form({"age": "abc", "avgGlucoseLevel": True, "bmi": 5})

    assert patient.age is None
    assert errors.as_dict() == {
        "age": "Age is required.",
        "avgGlucoseLevel": "Glucose level is required.",
        "bmi": "Value must be between 10 and 100.",
    }


def test_form_accepts_wire_and_field_names():
    patient, errors = validate_form(
        {"age": 45, "avg_glucose_level": 105.5, "bmi": 28.4, "smokingStatus": "smokes"}
    )

    assert errors.is_valid
    assert patient.avg_glucose_level == 105.5
    assert patient.smoking_status.value == "smokes"


def test_form_still_rejects_unknown_choices():
    with pytest.raises(ValidationError):
        validate_form({"age": 45, "avgGlucoseLevel": 105.5, "bmi": 28.4, "gender": "Robot"})
