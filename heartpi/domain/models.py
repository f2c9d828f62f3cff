"""
Domain models for heart-health risk assessment.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation so out-of-domain survey answers never reach
the scorer.
"""

from collections.abc import Mapping
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from heartpi.domain.errors import ValidationError


class Gender(str, Enum):
    """Gender assigned at birth, as asked by the survey."""

    FEMALE = "female"
    MALE = "male"


class DietType(IntEnum):
    """Average diet, numbered as in the questionnaire."""

    HIGH_PROTEIN = 1
    LOW_CARB = 2
    VEGETARIAN = 3
    WESTERN = 4
    VEGAN = 5
    BALANCED = 6


class FamilyCondition(str, Enum):
    """Conditions that may run in the respondent's family."""

    HEART_DISEASE = "heart_disease"
    DIABETES = "diabetes"
    HIGH_CHOLESTEROL = "high_cholesterol"
    HIGH_BLOOD_PRESSURE = "high_blood_pressure"


class RiskTier(str, Enum):
    """Three-level heart-disease risk classification."""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @property
    def message(self) -> str:
        return _TIER_MESSAGES[self]


_TIER_MESSAGES = {
    RiskTier.LOW: "Low risk of heart disease. You are healthy!",
    RiskTier.MODERATE: "Moderate risk of heart disease.",
    RiskTier.HIGH: "High risk of heart disease.",
}


class SurveyAnswers(BaseModel):
    """One completed lifestyle survey. Bucketed fields hold questionnaire option numbers."""

    model_config = ConfigDict(frozen=True)

    age_group: int = Field(ge=1, le=6, description="1: 18-24 ... 6: 65+")
    gender_at_birth: Gender
    sleep_hours_bucket: int = Field(ge=1, le=5, description="1: <4h ... 5: 8h+")
    exercise_frequency_bucket: int = Field(ge=1, le=4, description="1: never ... 4: 6-7/week")
    diet_type: DietType
    is_smoker: bool
    family_history: frozenset[FamilyCondition] = Field(default_factory=frozenset)

    @classmethod
    def build(cls, data: Mapping[str, Any] | None = None, **fields: Any) -> "SurveyAnswers":
        """Validate raw answers, raising the package ValidationError on bad input."""
        payload = {**(data or {}), **fields}
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid survey answers: {e}") from e


class Readings(BaseModel):
    """Simulated physiological readings for one assessment."""

    model_config = ConfigDict(frozen=True)

    heart_rate: float = Field(description="Beats per minute")
    systolic_bp: float = Field(description="mmHg")
    diastolic_bp: float = Field(description="mmHg")
    cholesterol: float = Field(description="mg/dL")
    ecg: float = Field(description="mV")


class Assessment(BaseModel):
    """Outcome of scoring one survey."""

    model_config = ConfigDict(frozen=True)

    score: int
    tier: RiskTier
    readings: Readings

    @property
    def message(self) -> str:
        return self.tier.message

    def as_display_tuple(self) -> tuple[str, float, float, float, float, float]:
        """(message, heart rate, systolic, diastolic, cholesterol, ecg) for screens."""
        r = self.readings
        return (self.message, r.heart_rate, r.systolic_bp, r.diastolic_bp, r.cholesterol, r.ecg)


class CredentialRow(BaseModel):
    """Registration row of the record store."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class ReadingRow(BaseModel):
    """Heart-rate row of the record store."""

    model_config = ConfigDict(frozen=True)

    username: str
    timestamp: int = Field(description="Unix time in seconds")
    heart_rate: float


class ReadingSample(BaseModel):
    """A user's heart-rate sample as returned by history scans."""

    model_config = ConfigDict(frozen=True)

    timestamp: int
    heart_rate: float


class CaregiverAlert(BaseModel):
    """Alert message composed from a user's stored heart-rate history."""

    model_config = ConfigDict(frozen=True)

    username: str
    subject: str
    body: str
    risk_label: str = Field(description="Low, Moderate, High or Unknown")
    average_bpm: float | None = None
    latest_bpm: float | None = None
    last_timestamp: int | None = None
