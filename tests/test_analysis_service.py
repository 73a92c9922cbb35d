"""Tests for the analysis service."""

import asyncio
import gc

import pytest

from food_diary.domain.analysis import PeriodAnalysis
from food_diary.domain.errors import ServiceError, ValidationError
from food_diary.domain.periods import Granularity
from food_diary.domain.profile import Goal, Lifestyle, UserProfile
from food_diary.services.analysis import (
    EMPTY_PERIOD_MESSAGE,
    AnalysisService,
    build_profile_block,
    period_analysis_schema,
)
from tests.conftest import PERIOD_PAYLOAD, FakeAnalysisClient, make_entry


def _service(client: FakeAnalysisClient) -> AnalysisService:
    return AnalysisService(
        client=client, model="gpt-5.2", reasoning_effort="low", store=False
    )


def test_blank_meals_fail_before_remote_call() -> None:
    client = FakeAnalysisClient()
    service = _service(client)

    with pytest.raises(ValidationError):
        asyncio.run(
            service.analyze_daily_meals(
                make_entry("2024-03-10", meals="  "), UserProfile()
            )
        )

    assert client.calls == []


def test_daily_analysis_returns_structured_result() -> None:
    client = FakeAnalysisClient()
    service = _service(client)

    result = asyncio.run(
        service.analyze_daily_meals(make_entry("2024-03-10"), UserProfile())
    )

    assert result.calories == pytest.approx(2150.4)
    assert result.micronutrients == ["Ferro", "Vitamina C"]
    assert client.calls[0]["schema_name"] == "daily_analysis"
    assert "Pasta al pomodoro" in str(client.calls[0]["prompt"])


def test_non_working_day_suppresses_lifestyle_baseline() -> None:
    client = FakeAnalysisClient()
    service = _service(client)
    entry = make_entry("2024-03-10", is_non_working_day=True)

    asyncio.run(service.analyze_daily_meals(entry, UserProfile()))

    prompt = str(client.calls[0]["prompt"])
    assert "GIORNATA NON LAVORATIVA" in prompt
    assert "'Sedentario'" in prompt


def test_remote_failure_raises_service_error() -> None:
    client = FakeAnalysisClient(error=RuntimeError("boom"))
    service = _service(client)

    with pytest.raises(ServiceError):
        asyncio.run(
            service.analyze_daily_meals(make_entry("2024-03-10"), UserProfile())
        )


def test_malformed_output_raises_service_error() -> None:
    client = FakeAnalysisClient(payload={"calories": "lots"})
    service = _service(client)

    with pytest.raises(ServiceError):
        asyncio.run(
            service.analyze_daily_meals(make_entry("2024-03-10"), UserProfile())
        )


def test_empty_period_returns_notice_without_remote_call() -> None:
    client = FakeAnalysisClient()
    service = _service(client)

    result = asyncio.run(
        service.generate_period_analysis([], Granularity.MONTH, UserProfile())
    )

    assert result == EMPTY_PERIOD_MESSAGE
    assert client.calls == []


def test_weekly_analysis_marks_non_working_days() -> None:
    client = FakeAnalysisClient(payload=dict(PERIOD_PAYLOAD))
    service = _service(client)
    entries = [
        make_entry("2024-03-09", is_non_working_day=True),
        make_entry("2024-03-10"),
    ]

    result = asyncio.run(
        service.generate_period_analysis(entries, Granularity.WEEK, UserProfile())
    )

    assert isinstance(result, PeriodAnalysis)
    assert result.micronutrients_analysis is None
    prompt = str(client.calls[0]["prompt"])
    assert "Data: 2024-03-09 (GIORNATA NON LAVORATIVA)" in prompt
    assert "Data: 2024-03-10\n" in prompt
    assert "settimanale" in prompt


def test_period_schema_adds_micronutrients_for_month_and_year() -> None:
    weekly = period_analysis_schema(Granularity.WEEK)
    monthly = period_analysis_schema(Granularity.MONTH)
    annual = period_analysis_schema(Granularity.YEAR)

    assert "micronutrients_analysis" not in weekly["properties"]
    assert "micronutrients_analysis" in monthly["required"]
    assert "micronutrients_analysis" in annual["required"]


def test_monthly_analysis_parses_micronutrient_field() -> None:
    payload = dict(PERIOD_PAYLOAD, micronutrients_analysis="Poco ferro.")
    client = FakeAnalysisClient(payload=payload)
    service = _service(client)

    result = asyncio.run(
        service.generate_period_analysis(
            [make_entry("2024-03-10")], Granularity.MONTH, UserProfile()
        )
    )

    assert isinstance(result, PeriodAnalysis)
    assert result.micronutrients_analysis == "Poco ferro."


def test_concurrent_identical_requests_share_one_call() -> None:
    class SlowClient(FakeAnalysisClient):
        async def generate(self, **kwargs):  # type: ignore[no-untyped-def]
            await asyncio.sleep(0.01)
            return await super().generate(**kwargs)

    client = SlowClient()
    service = _service(client)
    entry = make_entry("2024-03-10")

    async def run_both():  # type: ignore[no-untyped-def]
        return await asyncio.gather(
            service.analyze_daily_meals(entry, UserProfile()),
            service.analyze_daily_meals(entry, UserProfile()),
        )

    first, second = asyncio.run(run_both())

    assert first == second
    assert len(client.calls) == 1


def test_failure_after_caller_cancelled_is_not_reported_as_unretrieved() -> None:
    gate_holder: list[asyncio.Event] = []

    class GatedFailingClient(FakeAnalysisClient):
        async def generate(self, **kwargs):  # type: ignore[no-untyped-def]
            await gate_holder[0].wait()
            raise RuntimeError("upstream down")

    service = _service(GatedFailingClient())
    entry = make_entry("2024-03-10")

    async def scenario() -> list[dict[str, object]]:
        loop = asyncio.get_running_loop()
        reported: list[dict[str, object]] = []
        loop.set_exception_handler(lambda _loop, context: reported.append(context))
        gate_holder.append(asyncio.Event())

        caller = asyncio.create_task(service.analyze_daily_meals(entry, UserProfile()))
        await asyncio.sleep(0)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        gate_holder[0].set()
        for _ in range(5):
            await asyncio.sleep(0)
        gc.collect()
        return reported

    reported = asyncio.run(scenario())

    assert reported == []
    assert service._inflight == {}


def test_profile_block_renders_labels() -> None:
    profile = UserProfile(
        age=34,
        height=172.0,
        lifestyle=Lifestyle.ACTIVE,
        goal=Goal.LOSE_WEIGHT,
    )

    block = build_profile_block(profile)

    assert "- Età: 34" in block
    assert "- Altezza: 172 cm" in block
    assert "Attivo (muratore, contadino)" in block
    assert "Perdere peso (deficit calorico)" in block
    assert "- Condizioni mediche/diete: Nessuna" in block


def test_profile_block_for_empty_profile() -> None:
    assert build_profile_block(UserProfile()) == "Nessun profilo utente fornito."
