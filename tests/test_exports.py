"""Tests for report exports."""

import csv
import io
from datetime import date

import pytest

from food_diary.domain.analysis import NutrientAnalysis, PeriodAnalysis
from food_diary.domain.entries import DailyEntry
from food_diary.domain.errors import ValidationError
from food_diary.domain.periods import Granularity
from food_diary.domain.profile import Gender, Goal, UserProfile
from food_diary.services.exports import (
    CSV_HEADERS,
    PAGE_CONTENT_THRESHOLD_MM,
    _DiaryReport,
    _profile_rows,
    entries_to_csv,
    export_daily_analysis,
    export_entries_csv,
    export_entries_pdf,
    export_period_analysis,
)
from tests.conftest import DAILY_PAYLOAD, PERIOD_PAYLOAD, make_entry


def test_csv_escapes_delimiters_and_quotes() -> None:
    meals = 'Pasta, "al pomodoro"'
    text = entries_to_csv([make_entry("2024-03-10", meals=meals)])

    assert '"Pasta, ""al pomodoro"""' in text
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == CSV_HEADERS
    assert rows[1][1] == meals


def test_csv_quotes_line_breaks() -> None:
    text = entries_to_csv([make_entry("2024-03-10", meals="Colazione\nPranzo")])

    assert '"Colazione\nPranzo"' in text
    rows = list(csv.reader(io.StringIO(text, newline="")))
    assert rows[1][1] == "Colazione\nPranzo"


def test_csv_row_formats_analysis_and_flag() -> None:
    entry = DailyEntry(
        date=date(2024, 3, 10),
        meals="Riso",
        activity="Nuoto",
        is_non_working_day=True,
        analysis=NutrientAnalysis.model_validate(DAILY_PAYLOAD),
    )

    rows = list(csv.reader(io.StringIO(entries_to_csv([entry]))))

    assert rows[1] == [
        "2024-03-10",
        "Riso",
        "Nuoto",
        "Sì",
        "2150",
        "95.2",
        "260.0",
        "70.8",
        "Giornata equilibrata.",
        "Ferro; Vitamina C",
    ]


def test_csv_row_without_analysis_leaves_columns_blank() -> None:
    rows = list(csv.reader(io.StringIO(entries_to_csv([make_entry("2024-03-10")]))))

    assert rows[1][3] == "No"
    assert rows[1][4:] == ["", "", "", "", "", ""]


def test_csv_artifact_has_bom_and_range_filename() -> None:
    artifact = export_entries_csv([], date(2024, 3, 1), date(2024, 3, 31))

    assert artifact.filename == "diario_alimentare_2024-03-01_2024-03-31.csv"
    assert artifact.content.startswith("\ufeff".encode())
    assert artifact.content.decode("utf-8-sig").startswith("data,pasti,")


def test_export_rejects_inverted_range() -> None:
    with pytest.raises(ValidationError):
        export_entries_csv([], date(2024, 3, 31), date(2024, 3, 1))


def test_pdf_artifact_is_a_pdf_document() -> None:
    entries = [
        DailyEntry(
            date=date(2024, 3, day),
            meals="Pasta, “al pomodoro”",
            activity="Camminata",
            is_non_working_day=day % 2 == 0,
            analysis=NutrientAnalysis.model_validate(DAILY_PAYLOAD),
        )
        for day in range(1, 15)
    ]
    profile = UserProfile(age=30, gender=Gender.FEMALE, goal=Goal.EAT_HEALTHIER)

    artifact = export_entries_pdf(entries, profile, date(2024, 3, 1), date(2024, 3, 14))

    assert artifact.filename == "diario_alimentare_2024-03-01_2024-03-14.pdf"
    assert artifact.media_type == "application/pdf"
    assert artifact.content.startswith(b"%PDF")


def _rendered_pages(entries: list[DailyEntry]) -> int:
    report = _DiaryReport()
    report.render(entries, UserProfile(), date(2024, 3, 1), date(2024, 3, 31))
    return report.pages_count


def test_pdf_single_entry_fits_on_first_page() -> None:
    assert _rendered_pages([make_entry("2024-03-10")]) == 1


def test_pdf_starts_new_pages_as_entries_fill_the_page() -> None:
    analysis = NutrientAnalysis.model_validate(DAILY_PAYLOAD)
    entries = [
        DailyEntry(date=date(2024, 3, day), meals="Riso", analysis=analysis)
        for day in range(1, 15)
    ]

    assert _rendered_pages(entries) > 1


@pytest.mark.parametrize(
    ("offset_mm", "expected_pages"),
    [(PAGE_CONTENT_THRESHOLD_MM - 60, 1), (PAGE_CONTENT_THRESHOLD_MM + 1, 2)],
)
def test_pdf_entry_past_threshold_starts_new_page(
    offset_mm: int, expected_pages: int
) -> None:
    report = _DiaryReport()
    report.add_page()
    report.set_y(offset_mm)

    report._entry_block(make_entry("2024-03-10"))

    assert report.pages_count == expected_pages


def test_pdf_profile_rows_mark_absent_fields() -> None:
    rows = dict(_profile_rows(UserProfile()))

    for label in (
        "Età",
        "Sesso",
        "Altezza (cm)",
        "Peso (kg)",
        "Stile di Vita",
        "Obiettivo",
    ):
        assert rows[label] == "N/D"
    assert rows["Condizioni/Dieta"] == "Nessuna"


def test_daily_analysis_text_report() -> None:
    analysis = NutrientAnalysis.model_validate(DAILY_PAYLOAD)

    artifact = export_daily_analysis(date(2024, 3, 10), analysis)
    text = artifact.content.decode("utf-8")

    assert artifact.filename == "analisi_giornaliera_2024-03-10.txt"
    assert text.startswith("Analisi Nutrizionale del 10/3/2024")
    assert "- Calorie: 2150 kcal" in text
    assert "Ferro, Vitamina C" in text


def test_period_analysis_text_report() -> None:
    analysis = PeriodAnalysis.model_validate(PERIOD_PAYLOAD)

    artifact = export_period_analysis(date(2024, 3, 10), Granularity.WEEK, analysis)
    text = artifact.content.decode("utf-8")

    assert artifact.filename == "analisi_settimanale_2024-03-10.txt"
    assert text.startswith("Report Settimanale: 4/3/2024 - 10/3/2024")
    assert "Punti di forza\nBuon apporto proteico." in text
