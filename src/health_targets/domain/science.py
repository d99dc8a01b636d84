"""Domain models for health target computation."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Sex(StrEnum):
    """Biological sex used by the Mifflin-St Jeor equation."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

    @property
    def bmr_offset(self) -> float:
        """Additive constant applied to the base BMR."""
        return _BMR_OFFSETS[self]


class ActivityLevel(StrEnum):
    """Self-reported activity level."""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTREMELY_ACTIVE = "extremely_active"

    @property
    def multiplier(self) -> float:
        """Factor converting BMR into TDEE."""
        return _ACTIVITY_MULTIPLIERS[self]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class PrimaryGoal(StrEnum):
    """The user's primary goal."""

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"
    IMPROVE_HEALTH = "improve_health"

    @property
    def weekly_rate(self) -> float:
        """Expected weight change in kg per week."""
        return _WEEKLY_RATES[self]

    @property
    def calorie_adjustment(self) -> int:
        """Daily kcal added to TDEE to reach the weekly rate."""
        return _CALORIE_ADJUSTMENTS[self]

    @property
    def protein_per_kg(self) -> float:
        return _PROTEIN_PER_KG[self]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


_BMR_OFFSETS: dict[Sex, float] = {
    Sex.MALE: 5.0,
    Sex.FEMALE: -161.0,
    Sex.OTHER: -78.0,
}

_ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHTLY_ACTIVE: 1.375,
    ActivityLevel.MODERATELY_ACTIVE: 1.55,
    ActivityLevel.VERY_ACTIVE: 1.725,
    ActivityLevel.EXTREMELY_ACTIVE: 1.9,
}

_WEEKLY_RATES: dict[PrimaryGoal, float] = {
    PrimaryGoal.LOSE_WEIGHT: -0.5,
    PrimaryGoal.GAIN_MUSCLE: 0.4,
    PrimaryGoal.MAINTAIN: 0.0,
    PrimaryGoal.IMPROVE_HEALTH: 0.0,
}

_CALORIE_ADJUSTMENTS: dict[PrimaryGoal, int] = {
    PrimaryGoal.LOSE_WEIGHT: -500,
    PrimaryGoal.GAIN_MUSCLE: 400,
    PrimaryGoal.MAINTAIN: 0,
    PrimaryGoal.IMPROVE_HEALTH: 0,
}

_PROTEIN_PER_KG: dict[PrimaryGoal, float] = {
    PrimaryGoal.LOSE_WEIGHT: 2.2,
    PrimaryGoal.GAIN_MUSCLE: 2.4,
    PrimaryGoal.MAINTAIN: 1.8,
    PrimaryGoal.IMPROVE_HEALTH: 1.8,
}

WATER_ML_PER_KG = 35


class ScienceInputs(BaseModel):
    """Validated inputs for target computation."""

    model_config = ConfigDict(frozen=True)

    weight_kg: float = Field(ge=30, le=300)
    height_cm: float = Field(ge=100, le=250)
    age: int = Field(ge=13, le=120)
    sex: Sex
    activity_level: ActivityLevel
    primary_goal: PrimaryGoal
    target_weight_kg: float | None = Field(default=None, ge=30, le=300)


@dataclass(frozen=True)
class Projection:
    """Timeline towards the target weight."""

    estimated_weeks: int
    projected_date: date


@dataclass(frozen=True)
class ComputedTargets:
    """Daily targets derived from a profile."""

    bmr: int
    tdee: int
    calorie_target: int
    protein_target: int
    water_target: int
    weekly_rate: float
    estimated_weeks: int | None = None
    projected_date: date | None = None


@dataclass(frozen=True)
class Explanation:
    """One section of the educational payload."""

    title: str
    explanation: str
    metric: float
    formula: str | None = None


@dataclass(frozen=True)
class WhyItWorks:
    """Educational explanation of every computed target."""

    bmr: Explanation
    tdee: Explanation
    calorie_target: Explanation
    protein_target: Explanation
    water_target: Explanation
    timeline: Explanation


@dataclass(frozen=True)
class MetricsExplanations:
    """Short explanations shown next to the daily metrics."""

    bmi: str
    bmr: str
    tdee: str
