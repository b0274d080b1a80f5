"""Domain vocabulary and the records exchanged with the prediction service."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator


class _Vocabulary(str, Enum):
    """String enum whose values are the stroke dataset's category names."""

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")

    @classmethod
    def options(cls) -> List[Dict[str, str]]:
        return [{"value": member.value, "label": member.label} for member in cls]


class Gender(_Vocabulary):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class WorkType(_Vocabulary):
    PRIVATE = "Private"
    SELF_EMPLOYED = "Self-employed"
    GOVT_JOB = "Govt_job"
    CHILDREN = "children"
    NEVER_WORKED = "Never_worked"


class ResidenceType(_Vocabulary):
    URBAN = "Urban"
    RURAL = "Rural"


class SmokingStatus(_Vocabulary):
    NEVER_SMOKED = "never smoked"
    FORMERLY_SMOKED = "formerly smoked"
    SMOKES = "smokes"
    UNKNOWN = "Unknown"


class RiskLevel(_Vocabulary):
    LOW = "Low Risk"
    MODERATE = "Moderate Risk"
    HIGH = "High Risk"


NUMERIC_FIELDS = ("age", "avg_glucose_level", "bmi")

# Booleans and numeric strings are not measurements
Measurement = Union[StrictInt, StrictFloat]


def blank_to_none(value: Any) -> Any:
    # HTML number inputs submit "" when cleared
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PatientInput(BaseModel):
    """Form state for one patient. Numeric measurements are ``None`` until entered."""

    model_config = ConfigDict(populate_by_name=True)

    gender: Gender = Gender.MALE
    age: Optional[Measurement] = None
    hypertension: bool = False
    heart_disease: bool = Field(False, alias="heartDisease")
    ever_married: bool = Field(True, alias="everMarried")
    work_type: WorkType = Field(WorkType.PRIVATE, alias="workType")
    residence_type: ResidenceType = Field(ResidenceType.URBAN, alias="residenceType")
    avg_glucose_level: Optional[Measurement] = Field(None, alias="avgGlucoseLevel")
    bmi: Optional[Measurement] = None
    smoking_status: SmokingStatus = Field(SmokingStatus.NEVER_SMOKED, alias="smokingStatus")

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return blank_to_none(value)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class PatientUpdate(BaseModel):
    """Partial form update; only the fields sent by the client are applied."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    gender: Optional[Gender] = None
    age: Optional[Measurement] = None
    hypertension: Optional[bool] = None
    heart_disease: Optional[bool] = Field(None, alias="heartDisease")
    ever_married: Optional[bool] = Field(None, alias="everMarried")
    work_type: Optional[WorkType] = Field(None, alias="workType")
    residence_type: Optional[ResidenceType] = Field(None, alias="residenceType")
    avg_glucose_level: Optional[Measurement] = Field(None, alias="avgGlucoseLevel")
    bmi: Optional[Measurement] = None
    smoking_status: Optional[SmokingStatus] = Field(None, alias="smokingStatus")

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return blank_to_none(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class PredictionResult(BaseModel):
    """Structured stroke-risk output returned by the model."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    stroke_prediction: bool = Field(..., alias="strokePrediction")
    probability: Union[int, float]
    risk_level: RiskLevel = Field(..., alias="riskLevel")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
