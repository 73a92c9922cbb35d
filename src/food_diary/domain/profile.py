"""User profile domain model."""

from enum import StrEnum

from pydantic import BaseModel, Field


class Gender(StrEnum):
    """Declared gender."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Lifestyle(StrEnum):
    """Baseline activity level of the user's working life."""

    SEDENTARY = "sedentary"
    MODERATELY_ACTIVE = "moderately_active"
    ACTIVE = "active"


class Goal(StrEnum):
    """Nutritional goal."""

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN_WEIGHT = "maintain_weight"
    IMPROVE_PERFORMANCE = "improve_performance"
    EAT_HEALTHIER = "eat_healthier"
    IDENTIFY_ISSUES = "identify_issues"


GOAL_DESCRIPTIONS: dict[Goal, str] = {
    Goal.LOSE_WEIGHT: "Perdere peso (deficit calorico)",
    Goal.GAIN_MUSCLE: "Aumentare la massa muscolare (surplus calorico, focus proteico)",
    Goal.MAINTAIN_WEIGHT: "Mantenere il peso",
    Goal.IMPROVE_PERFORMANCE: "Migliorare la performance sportiva",
    Goal.EAT_HEALTHIER: "Mangiare in modo più sano e consapevole",
    Goal.IDENTIFY_ISSUES: "Identificare cibi che causano problemi",
}

GOAL_LABELS: dict[Goal, str] = {
    Goal.LOSE_WEIGHT: "Perdere peso",
    Goal.GAIN_MUSCLE: "Aumentare massa muscolare",
    Goal.MAINTAIN_WEIGHT: "Mantenere il peso",
    Goal.IMPROVE_PERFORMANCE: "Migliorare performance",
    Goal.EAT_HEALTHIER: "Mangiare più sano",
    Goal.IDENTIFY_ISSUES: "Identificare cibi problematici",
}

LIFESTYLE_DESCRIPTIONS: dict[Lifestyle, str] = {
    Lifestyle.SEDENTARY: "Sedentario (impiegato)",
    Lifestyle.MODERATELY_ACTIVE: "Moderatamente attivo (commesso, cameriere)",
    Lifestyle.ACTIVE: "Attivo (muratore, contadino)",
}

LIFESTYLE_LABELS: dict[Lifestyle, str] = {
    Lifestyle.SEDENTARY: "Sedentario",
    Lifestyle.MODERATELY_ACTIVE: "Moderatamente Attivo",
    Lifestyle.ACTIVE: "Attivo",
}


class UserProfile(BaseModel):
    """Singleton user profile; every field is optional."""

    age: int | None = Field(default=None, ge=0)
    gender: Gender | None = None
    height: float | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)
    lifestyle: Lifestyle | None = None
    goal: Goal | None = None
    conditions: str | None = None

    def is_empty(self) -> bool:
        """Return True when no field carries a value."""
        return not any(
            value for value in self.model_dump(exclude_none=True).values()
        )
