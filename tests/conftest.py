"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from food_diary.config import Settings
from food_diary.containers import AppContainer
from food_diary.domain.entries import DailyEntry
from food_diary.domain.profile import UserProfile
from food_diary.services.analysis import AnalysisClient, AnalysisService
from food_diary.services.entries import EntryRepository, EntryService
from food_diary.services.profile import ProfileRepository, ProfileService

DAILY_PAYLOAD: dict[str, object] = {
    "calories": 2150.4,
    "protein": 95.25,
    "carbs": 260.0,
    "fats": 70.8,
    "summary": "Giornata equilibrata.",
    "micronutrients": ["Ferro", "Vitamina C"],
}

PERIOD_PAYLOAD: dict[str, object] = {
    "summary": "Alimentazione regolare.",
    "strengths": "Buon apporto proteico.",
    "improvements": "Troppi dolci nel weekend.",
    "suggestions": "Aggiungi verdure a cena.",
    "encouragement": "Continua così!",
}


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository for tests."""

    entries: list[DailyEntry] = field(default_factory=list)
    saves: int = 0

    def load_entries(self) -> list[DailyEntry]:
        return list(self.entries)

    def save_entries(self, entries: list[DailyEntry]) -> None:
        self.entries = list(entries)
        self.saves += 1


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profile: UserProfile | None = None

    def load_profile(self) -> UserProfile | None:
        return self.profile

    def save_profile(self, profile: UserProfile) -> None:
        self.profile = profile


@dataclass
class InMemoryKeyValueStore:
    """Dictionary-backed key-value store."""

    values: dict[str, object] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        return self.values.get(key)

    def set(self, key: str, value: object) -> None:
        self.values[key] = value


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client that records requests."""

    payload: dict[str, object] = field(default_factory=lambda: dict(DAILY_PAYLOAD))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {"prompt": prompt, "schema": schema, "schema_name": schema_name}
        )
        if self.error is not None:
            raise self.error
        return self.payload


def make_entry(
    day: str,
    meals: str = "Pasta al pomodoro",
    activity: str = "",
    is_non_working_day: bool = False,
) -> DailyEntry:
    return DailyEntry(
        date=date.fromisoformat(day),
        meals=meals,
        activity=activity,
        is_non_working_day=is_non_working_day,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(openai_api_key="openai-key", data_dir=tmp_path / "data")


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def container(settings: Settings, analysis_client: FakeAnalysisClient) -> AppContainer:
    analysis_service = AnalysisService(
        client=analysis_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        entry_service=EntryService(InMemoryEntryRepository()),
        profile_service=ProfileService(InMemoryProfileRepository()),
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
