"""Nutritional analysis via an LLM with structured outputs."""

import asyncio
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError as SchemaValidationError

from food_diary.domain.analysis import NutrientAnalysis, PeriodAnalysis
from food_diary.domain.entries import DailyEntry
from food_diary.domain.errors import ServiceError, ValidationError
from food_diary.domain.periods import Granularity
from food_diary.domain.profile import (
    GOAL_DESCRIPTIONS,
    LIFESTYLE_DESCRIPTIONS,
    UserProfile,
)

_logger = logging.getLogger(__name__)

EMPTY_PERIOD_MESSAGE = (
    "Nessun dato disponibile per questo periodo. "
    "Inizia a registrare i tuoi pasti per ottenere un'analisi."
)
DAILY_FAILURE_MESSAGE = (
    "Impossibile ottenere l'analisi nutrizionale. "
    "Il modello AI potrebbe essere temporaneamente non disponibile."
)
PERIOD_FAILURE_MESSAGE = (
    "Impossibile generare l'analisi del periodo. "
    "Il modello AI potrebbe essere temporaneamente non disponibile."
)
NON_WORKING_DAY_MARKER = "(GIORNATA NON LAVORATIVA)"

DAILY_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {
            "type": "number",
            "description": "Stima delle calorie totali",
        },
        "protein": {
            "type": "number",
            "description": "Stima delle proteine totali in grammi",
        },
        "carbs": {
            "type": "number",
            "description": "Stima dei carboidrati totali in grammi",
        },
        "fats": {
            "type": "number",
            "description": "Stima dei grassi totali in grammi",
        },
        "summary": {
            "type": "string",
            "description": (
                "Breve riassunto incoraggiante della giornata alimentare "
                "rispetto all'attività fisica, al profilo e agli obiettivi."
            ),
        },
        "micronutrients": {
            "type": "array",
            "description": "Principali micronutrienti presenti nei pasti.",
            "items": {"type": "string"},
        },
    },
    "required": ["calories", "protein", "carbs", "fats", "summary", "micronutrients"],
    "additionalProperties": False,
}

_PERIOD_PROPERTIES: dict[str, object] = {
    "summary": {
        "type": "string",
        "description": "Riassunto generale di alimentazione e attività fisica.",
    },
    "strengths": {"type": "string", "description": "Punti di forza."},
    "improvements": {"type": "string", "description": "Aree di miglioramento."},
    "suggestions": {
        "type": "string",
        "description": "Suggerimenti pratici per il prossimo periodo.",
    },
    "encouragement": {"type": "string", "description": "Nota incoraggiante finale."},
}
_MICRONUTRIENTS_PROPERTY: dict[str, object] = {
    "type": "string",
    "description": "Bilancio dei micronutrienti chiave nel periodo.",
}


def period_analysis_schema(granularity: Granularity) -> dict[str, object]:
    """Return the output schema for a period; month and year add micronutrients."""
    properties = dict(_PERIOD_PROPERTIES)
    if granularity is not Granularity.WEEK:
        properties["micronutrients_analysis"] = _MICRONUTRIENTS_PROPERTY
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


class AnalysisClient(Protocol):
    """Interface for structured LLM generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Return a JSON object conforming to the schema."""


@dataclass
class AnalysisService:
    """Builds analysis prompts and validates model output.

    Identical requests issued while one is still in flight share a single
    remote call.
    """

    client: AnalysisClient
    model: str
    reasoning_effort: str | None
    store: bool
    _inflight: dict[str, "asyncio.Future[dict[str, object]]"] = field(
        default_factory=dict, init=False, repr=False
    )

    async def analyze_daily_meals(
        self, entry: DailyEntry, profile: UserProfile
    ) -> NutrientAnalysis:
        """Estimate macros and micronutrients for one day."""
        if not entry.meals.strip():
            raise ValidationError("La descrizione dei pasti non può essere vuota.")

        prompt = build_daily_prompt(entry, profile)
        raw = await self._request(
            prompt,
            schema=DAILY_ANALYSIS_SCHEMA,
            schema_name="daily_analysis",
            failure_message=DAILY_FAILURE_MESSAGE,
        )
        try:
            return NutrientAnalysis.model_validate(raw)
        except SchemaValidationError as exc:
            _logger.warning("Daily analysis failed validation: %s", exc)
            raise ServiceError(DAILY_FAILURE_MESSAGE) from exc

    async def generate_period_analysis(
        self,
        entries: list[DailyEntry],
        granularity: Granularity,
        profile: UserProfile,
    ) -> PeriodAnalysis | str:
        """Return a period report, or a fixed notice when there is no data."""
        if not entries:
            return EMPTY_PERIOD_MESSAGE

        prompt = build_period_prompt(entries, granularity, profile)
        raw = await self._request(
            prompt,
            schema=period_analysis_schema(granularity),
            schema_name=f"{granularity.value}_analysis",
            failure_message=PERIOD_FAILURE_MESSAGE,
        )
        try:
            return PeriodAnalysis.model_validate(raw)
        except SchemaValidationError as exc:
            _logger.warning("Period analysis failed validation: %s", exc)
            raise ServiceError(PERIOD_FAILURE_MESSAGE) from exc

    async def _request(
        self,
        prompt: str,
        *,
        schema: dict[str, object],
        schema_name: str,
        failure_message: str,
    ) -> dict[str, object]:
        key = hashlib.sha256(f"{schema_name}\n{prompt}".encode()).hexdigest()
        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(
                self._call(prompt, schema, schema_name, failure_message)
            )
            self._inflight[key] = pending
            pending.add_done_callback(lambda done: self._forget(key, done))
        else:
            _logger.info("Joining in-flight analysis request: %s", schema_name)
        return await asyncio.shield(pending)

    async def _call(
        self,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        failure_message: str,
    ) -> dict[str, object]:
        try:
            return await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=schema,
                schema_name=schema_name,
            )
        except Exception as exc:
            _logger.exception("Analysis request failed: %s", schema_name)
            raise ServiceError(failure_message) from exc

    def _forget(self, key: str, done: "asyncio.Future[dict[str, object]]") -> None:
        # Retrieve the outcome so a failure nobody awaited is not reported.
        if not done.cancelled():
            done.exception()
        if self._inflight.get(key) is done:
            del self._inflight[key]


def build_profile_block(profile: UserProfile) -> str:
    """Render the profile as prompt lines."""
    if profile.is_empty():
        return "Nessun profilo utente fornito."
    lifestyle = (
        LIFESTYLE_DESCRIPTIONS[profile.lifestyle]
        if profile.lifestyle
        else "Non specificato"
    )
    goal = GOAL_DESCRIPTIONS[profile.goal] if profile.goal else "Non specificato"
    lines = [
        f"- Età: {_or_default(profile.age, 'Non specificata')}",
        f"- Sesso: {_or_default(profile.gender, 'Non specificato')}",
        f"- Altezza: {_or_default(profile.height, 'Non specificata')} cm",
        f"- Peso: {_or_default(profile.weight, 'Non specificato')} kg",
        f"- Stile di vita lavorativo: {lifestyle}",
        f"- Obiettivo: {goal}",
        f"- Condizioni mediche/diete: {profile.conditions or 'Nessuna'}",
    ]
    return "\n".join(lines)


def activity_instruction(is_non_working_day: bool) -> str:
    """Return the day-type modifier for a single day."""
    if is_non_working_day:
        return (
            "ATTENZIONE: questa è una GIORNATA NON LAVORATIVA. Lo \"Stile di vita "
            "lavorativo\" del profilo non si applica: considera il livello di "
            "attività di base di oggi come 'Sedentario' e valuta il dispendio "
            "energetico solo sull'attività fisica registrata."
        )
    return (
        "IMPORTANTE: considera lo \"Stile di vita lavorativo\" del profilo come "
        "livello di attività di base di una giornata tipo. L'\"Attività fisica\" "
        "registrata si aggiunge a quel livello di base, anche quando è nulla."
    )


def build_daily_prompt(entry: DailyEntry, profile: UserProfile) -> str:
    """Build the prompt for a single day's analysis."""
    activity = entry.activity.strip() or "Nessuna attività fisica registrata."
    return "\n\n".join(
        [
            "Analizza i seguenti pasti e l'attività fisica in base al profilo "
            "utente. Rispondi in ITALIANO con un'analisi nutrizionale "
            "personalizzata in formato JSON.",
            activity_instruction(entry.is_non_working_day),
            "Nel campo 'summary' commenta la giornata rispetto all'attività "
            "fisica complessiva (stile di vita di base più attività del giorno) "
            "e soprattutto rispetto a obiettivi e condizioni dell'utente. Sii "
            "incoraggiante e dai un consiglio specifico basato sui dati.",
            f"Profilo utente:\n{build_profile_block(profile)}",
            f"Dati del giorno:\nPasti: {entry.meals.strip()}\n"
            f"Attività fisica: {activity}",
        ]
    )


def build_period_prompt(
    entries: list[DailyEntry], granularity: Granularity, profile: UserProfile
) -> str:
    """Build the prompt for a weekly, monthly or annual analysis."""
    fields = [
        "1. 'summary': riassunto generale delle abitudini alimentari e di "
        "attività fisica, distinguendo giorni lavorativi e non, rispetto agli "
        "obiettivi.",
        "2. 'strengths': punti di forza.",
        "3. 'improvements': aree di miglioramento.",
        "4. 'suggestions': suggerimenti pratici e personalizzati per il "
        "prossimo periodo.",
        "5. 'encouragement': una nota finale che motivi l'utente.",
    ]
    if granularity is not Granularity.WEEK:
        fields.append(
            "6. 'micronutrients_analysis': usando i \"Micronutrienti rilevati\" "
            "giorno per giorno, valuta in funzione del profilo possibili carenze "
            "o eccessi ricorrenti e dai consigli pratici. Se i dati sono scarsi, "
            "dillo e incoraggia l'uso dell'analisi giornaliera."
        )
    return "\n\n".join(
        [
            f"Sulla base del diario alimentare e del profilo utente, fornisci "
            f"un'analisi {granularity.label} dettagliata, costruttiva e "
            f"personalizzata in ITALIANO.",
            f"Profilo utente:\n{build_profile_block(profile)}",
            f"IMPORTANTE: nei giorni segnati {NON_WORKING_DAY_MARKER} lo \"Stile "
            "di vita lavorativo\" del profilo NON si applica e il livello di "
            "attività di base è sedentario. Tienine conto nel valutare la "
            "coerenza dell'attività fisica con gli obiettivi.",
            "Compila i campi del JSON in questo modo:\n" + "\n".join(fields),
            "Diario del periodo:\n" + aggregate_entries(entries),
        ]
    )


def aggregate_entries(entries: list[DailyEntry]) -> str:
    """Concatenate entries into the diary block of a period prompt."""
    blocks = []
    for entry in entries:
        marker = f" {NON_WORKING_DAY_MARKER}" if entry.is_non_working_day else ""
        if entry.analysis and entry.analysis.micronutrients:
            micronutrients = ", ".join(entry.analysis.micronutrients)
        else:
            micronutrients = "Nessuna analisi AI per questo giorno."
        blocks.append(
            f"Data: {entry.key}{marker}\n"
            f"Pasti: {entry.meals or 'Nessuno'}\n"
            f"Attività fisica: {entry.activity or 'Nessuna'}\n"
            f"Micronutrienti rilevati: {micronutrients}"
        )
    return "\n\n".join(blocks)


def _or_default(value: object | None, default: str) -> str:
    if value is None or value == "":
        return default
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)
