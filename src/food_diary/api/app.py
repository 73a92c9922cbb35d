"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import date
from typing import Literal

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, Response

from food_diary.api.schemas import (
    ActionRequest,
    DailyAnalysisExportRequest,
    DailyAnalysisResponse,
    EntryPayload,
    EntryResponse,
    PeriodAnalysisExportRequest,
    PeriodAnalysisResponse,
    StateResponse,
)
from food_diary.app_logging import configure_logging
from food_diary.containers import AppContainer
from food_diary.domain.errors import ServiceError, ValidationError
from food_diary.domain.navigation import AppState, EntrySaved
from food_diary.domain.periods import Granularity
from food_diary.domain.profile import UserProfile
from food_diary.services import exports
from food_diary.services.navigation import reduce, should_block_unload
from food_diary.services.periods import filter_entries, period_title, period_window


def create_app(  # noqa: PLR0915
    container: AppContainer, today: Callable[[], date] = date.today
) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.view_state = AppState(current_date=today())

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.info("Rejected request %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(
        request: Request, exc: ServiceError
    ) -> JSONResponse:
        logger.warning("Analysis failed for %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/entries")
    async def list_entries(
        request: Request, start: date | None = None, end: date | None = None
    ) -> dict[str, list[EntryResponse]]:
        """Return entries, optionally restricted to an inclusive range."""
        state_container: AppContainer = request.app.state.container
        if start is None and end is None:
            entries = state_container.entry_service.list_entries()
        else:
            entries = state_container.entry_service.list_range(
                start or date.min, end or date.max
            )
        return {"entries": [EntryResponse.from_entry(entry) for entry in entries]}

    @app.get("/entries/{day}")
    async def get_entry(day: date, request: Request) -> EntryResponse:
        """Return the entry for a day."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.entry_service.get(day)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return EntryResponse.from_entry(entry)

    @app.put("/entries/{day}")
    async def save_entry(
        day: date, payload: EntryPayload, request: Request
    ) -> EntryResponse:
        """Create or replace the entry for a day."""
        state_container: AppContainer = request.app.state.container
        stored = state_container.entry_service.upsert(payload.to_entry(day))
        _dispatch_saved(request)
        return EntryResponse.from_entry(stored)

    @app.post("/entries/{day}/analysis")
    async def analyze_entry(
        day: date, payload: EntryPayload, request: Request
    ) -> DailyAnalysisResponse:
        """Save the entry, then analyse its meals."""
        state_container: AppContainer = request.app.state.container
        stored = state_container.entry_service.upsert(payload.to_entry(day))
        _dispatch_saved(request)
        analysis = await state_container.analysis_service.analyze_daily_meals(
            stored, state_container.profile_service.get_profile()
        )
        return DailyAnalysisResponse(
            entry=EntryResponse.from_entry(stored), analysis=analysis
        )

    @app.get("/profile")
    async def get_profile(request: Request) -> UserProfile:
        """Return the user profile."""
        state_container: AppContainer = request.app.state.container
        return state_container.profile_service.get_profile()

    @app.put("/profile")
    async def save_profile(profile: UserProfile, request: Request) -> UserProfile:
        """Replace the user profile."""
        state_container: AppContainer = request.app.state.container
        return state_container.profile_service.save_profile(profile)

    @app.get("/analysis/{granularity}")
    async def period_analysis(
        granularity: Granularity,
        request: Request,
        day: date | None = Query(default=None, alias="date"),
    ) -> PeriodAnalysisResponse:
        """Analyse the week, month or year containing the reference day."""
        state_container: AppContainer = request.app.state.container
        reference_date = day or request.app.state.view_state.current_date
        entries = filter_entries(
            state_container.entry_service.list_entries(), reference_date, granularity
        )
        result = await state_container.analysis_service.generate_period_analysis(
            entries, granularity, state_container.profile_service.get_profile()
        )
        window = period_window(reference_date, granularity)
        return PeriodAnalysisResponse(
            granularity=granularity,
            title=period_title(reference_date, granularity),
            start=window.start,
            end=window.end,
            entry_count=len(entries),
            analysis=None if isinstance(result, str) else result,
            message=result if isinstance(result, str) else None,
        )

    @app.get("/exports/entries")
    async def export_entries(
        request: Request,
        start: date,
        end: date,
        file_format: Literal["csv", "pdf"] = Query(default="pdf", alias="format"),
    ) -> Response:
        """Download entries in a date range as CSV or PDF."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.entry_service.list_range(start, end)
        if file_format == "csv":
            artifact = exports.export_entries_csv(entries, start, end)
        else:
            artifact = exports.export_entries_pdf(
                entries, state_container.profile_service.get_profile(), start, end
            )
        return _download(artifact)

    @app.post("/exports/daily-analysis")
    async def export_daily_analysis(payload: DailyAnalysisExportRequest) -> Response:
        """Download a daily analysis as a text report."""
        return _download(exports.export_daily_analysis(payload.date, payload.analysis))

    @app.post("/exports/period-analysis")
    async def export_period_analysis(
        payload: PeriodAnalysisExportRequest,
    ) -> Response:
        """Download a period analysis as a text report."""
        artifact = exports.export_period_analysis(
            payload.date, payload.granularity, payload.analysis
        )
        return _download(artifact)

    @app.get("/state")
    async def get_state(request: Request) -> StateResponse:
        """Return the current view state."""
        state: AppState = request.app.state.view_state
        return StateResponse.from_state(state, should_block_unload(state))

    @app.post("/state/actions")
    async def dispatch_action(
        action: ActionRequest, request: Request
    ) -> StateResponse:
        """Apply a UI action and return the resulting state."""
        state = reduce(request.app.state.view_state, action.to_action())
        request.app.state.view_state = state
        return StateResponse.from_state(state, should_block_unload(state))

    return app


def _dispatch_saved(request: Request) -> None:
    request.app.state.view_state = reduce(request.app.state.view_state, EntrySaved())


def _download(artifact: exports.ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{artifact.filename}"'
        },
    )
