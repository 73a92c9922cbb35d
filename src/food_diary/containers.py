"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_diary.adapters.json_file_store import JsonFileKeyValueStore
from food_diary.adapters.key_value_repositories import (
    KeyValueEntryRepository,
    KeyValueProfileRepository,
    KeyValueStore,
)
from food_diary.adapters.openai_analysis_client import OpenAIAnalysisClient
from food_diary.adapters.supabase_key_value_store import SupabaseKeyValueStore
from food_diary.config import Settings
from food_diary.services.analysis import AnalysisService
from food_diary.services.entries import EntryService
from food_diary.services.profile import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    entry_service: EntryService
    profile_service: ProfileService
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        entry_service=EntryService(KeyValueEntryRepository(store)),
        profile_service=ProfileService(KeyValueProfileRepository(store)),
        analysis_service=analysis_service,
        close_resources=close_resources,
    )


def build_store(settings: Settings) -> KeyValueStore:
    """Return the key-value store selected by settings."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires SUPABASE_URL and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client)
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(settings.data_dir)
    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")
