"""Models for AI analysis results."""

from pydantic import BaseModel, Field


class NutrientAnalysis(BaseModel):
    """Structured output for a single day's meals."""

    calories: float
    protein: float
    carbs: float
    fats: float
    summary: str
    micronutrients: list[str] = Field(default_factory=list)


class PeriodAnalysis(BaseModel):
    """Structured output for a weekly, monthly or annual report."""

    summary: str
    strengths: str
    improvements: str
    suggestions: str
    encouragement: str
    micronutrients_analysis: str | None = None

    def to_text(self) -> str:
        """Render the analysis as a plain-text report body."""
        sections = [
            ("Riepilogo generale", self.summary),
            ("Punti di forza", self.strengths),
            ("Aree di miglioramento", self.improvements),
            ("Suggerimenti pratici", self.suggestions),
            ("Nota finale", self.encouragement),
        ]
        if self.micronutrients_analysis:
            sections.append(
                ("Bilancio dei micronutrienti chiave", self.micronutrients_analysis)
            )
        return "\n\n".join(f"{title}\n{body.strip()}" for title, body in sections)
