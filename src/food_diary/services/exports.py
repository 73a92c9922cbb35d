"""Downloadable reports built from diary entries and analyses."""

import csv
import io
from dataclasses import dataclass
from datetime import date

from fpdf import FPDF

from food_diary.domain.analysis import NutrientAnalysis, PeriodAnalysis
from food_diary.domain.entries import DailyEntry
from food_diary.domain.errors import ValidationError
from food_diary.domain.periods import Granularity
from food_diary.domain.profile import GOAL_LABELS, LIFESTYLE_LABELS, UserProfile
from food_diary.services.periods import (
    format_long_date,
    format_short_date,
    period_title,
)

CSV_HEADERS = [
    "data",
    "pasti",
    "attività",
    "giorno non lavorativo",
    "calorie",
    "proteine (g)",
    "carboidrati (g)",
    "grassi (g)",
    "riepilogo AI",
    "micronutrienti",
]
UTF8_BOM = "\ufeff"
NOT_AVAILABLE = "N/D"

# Vertical offset (mm) past which the next entry starts on a new page.
PAGE_CONTENT_THRESHOLD_MM = 200
PAGE_MARGIN_MM = 14
ROW_HEIGHT_MM = 7
HEADER_FILL = (75, 85, 99)
MACRO_HEADER_FILL = (99, 102, 241)
LABEL_FILL = (243, 244, 246)


@dataclass(frozen=True)
class ExportArtifact:
    """A named downloadable document."""

    filename: str
    media_type: str
    content: bytes


def export_entries_csv(
    entries: list[DailyEntry], start: date, end: date
) -> ExportArtifact:
    """Render entries as CSV with a UTF-8 byte-order mark."""
    _check_range(start, end)
    return ExportArtifact(
        filename=_entries_filename(start, end, "csv"),
        media_type="text/csv; charset=utf-8",
        content=(UTF8_BOM + entries_to_csv(entries)).encode("utf-8"),
    )


def entries_to_csv(entries: list[DailyEntry]) -> str:
    """Return CSV text, one row per entry, with CRLF line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        writer.writerow(_csv_row(entry))
    return buffer.getvalue()


def _csv_row(entry: DailyEntry) -> list[str]:
    analysis = entry.analysis
    macros = ["", "", "", ""]
    summary = ""
    micronutrients = ""
    if analysis is not None:
        macros = [
            f"{analysis.calories:.0f}",
            f"{analysis.protein:.1f}",
            f"{analysis.carbs:.1f}",
            f"{analysis.fats:.1f}",
        ]
        summary = analysis.summary
        micronutrients = "; ".join(analysis.micronutrients)
    return [
        entry.key,
        entry.meals,
        entry.activity,
        "Sì" if entry.is_non_working_day else "No",
        *macros,
        summary,
        micronutrients,
    ]


def export_entries_pdf(
    entries: list[DailyEntry], profile: UserProfile, start: date, end: date
) -> ExportArtifact:
    """Render entries and the profile as a paginated PDF report."""
    _check_range(start, end)
    report = _DiaryReport()
    report.render(entries, profile, start, end)
    return ExportArtifact(
        filename=_entries_filename(start, end, "pdf"),
        media_type="application/pdf",
        content=bytes(report.output()),
    )


def export_daily_analysis(day: date, analysis: NutrientAnalysis) -> ExportArtifact:
    """Render a single day's analysis as a plain-text report."""
    if analysis.micronutrients:
        micronutrients = ", ".join(analysis.micronutrients)
    else:
        micronutrients = "Nessun dato specifico."
    title = f"Analisi Nutrizionale del {format_short_date(day)}"
    lines = [
        title,
        "=" * len(title),
        "",
        "Riepilogo AI:",
        "-------------",
        analysis.summary,
        "",
        "Dati Macronutrienti:",
        "--------------------",
        f"- Calorie: {analysis.calories:.0f} kcal",
        f"- Proteine: {analysis.protein:.1f} g",
        f"- Carboidrati: {analysis.carbs:.1f} g",
        f"- Grassi: {analysis.fats:.1f} g",
        "",
        "Micronutrienti Chiave:",
        "----------------------",
        micronutrients,
    ]
    return ExportArtifact(
        filename=f"analisi_giornaliera_{day.isoformat()}.txt",
        media_type="text/plain; charset=utf-8",
        content="\n".join(lines).encode("utf-8"),
    )


def export_period_analysis(
    reference_date: date,
    granularity: Granularity,
    analysis: PeriodAnalysis | str,
) -> ExportArtifact:
    """Render a period analysis as a plain-text report."""
    body = analysis if isinstance(analysis, str) else analysis.to_text()
    title = period_title(reference_date, granularity)
    return ExportArtifact(
        filename=f"analisi_{granularity.label}_{reference_date.isoformat()}.txt",
        media_type="text/plain; charset=utf-8",
        content=f"{title}\n\n{body}".encode(),
    )


class _DiaryReport(FPDF):
    """PDF layout for the diary export."""

    def __init__(self) -> None:
        super().__init__(format="A4")
        self.set_margins(PAGE_MARGIN_MM, 20, PAGE_MARGIN_MM)
        self.set_auto_page_break(auto=True, margin=15)

    def footer(self) -> None:
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(128, 128, 128)
        self.cell(0, 10, f"Pagina {self.page_no()}", align="C")

    def render(
        self, entries: list[DailyEntry], profile: UserProfile, start: date, end: date
    ) -> None:
        self.add_page()
        self.set_font("Helvetica", "B", 18)
        self.cell(0, 10, "Report Diario Alimentare", new_x="LMARGIN", new_y="NEXT")
        self.set_font("Helvetica", "", 11)
        self.set_text_color(100)
        self.cell(
            0,
            8,
            f"Periodo: dal {format_short_date(start)} al {format_short_date(end)}",
            new_x="LMARGIN",
            new_y="NEXT",
        )
        self.ln(6)
        self._heading("Profilo Utente")
        self._key_value_table(_profile_rows(profile))
        for entry in entries:
            self._entry_block(entry)

    def _entry_block(self, entry: DailyEntry) -> None:
        if self.get_y() > PAGE_CONTENT_THRESHOLD_MM:
            self.add_page()
        else:
            self.ln(8)
        marker = " (Giorno non lavorativo)" if entry.is_non_working_day else ""
        self._heading(f"{format_long_date(entry.date)}{marker}")
        self._label_row("Pasti")
        self._text_row(entry.meals or "Nessun pasto registrato.")
        self._label_row("Attività Fisica")
        self._text_row(entry.activity or "Nessuna attività registrata.")
        if entry.analysis is None:
            return
        self._macro_table(entry.analysis)
        self._label_row("Riepilogo AI")
        self._text_row(entry.analysis.summary)

    def _heading(self, text: str) -> None:
        self.set_font("Helvetica", "B", 14)
        self.set_text_color(0)
        self.cell(0, 9, _pdf_text(text), new_x="LMARGIN", new_y="NEXT")

    def _key_value_table(self, rows: list[tuple[str, str]]) -> None:
        half = self.epw / 2
        self.set_font("Helvetica", "B", 10)
        self.set_text_color(255)
        self.set_fill_color(*HEADER_FILL)
        self.cell(half, ROW_HEIGHT_MM, "Parametro", border=1, fill=True)
        self.cell(
            half,
            ROW_HEIGHT_MM,
            "Valore",
            border=1,
            fill=True,
            new_x="LMARGIN",
            new_y="NEXT",
        )
        self.set_font("Helvetica", "", 10)
        self.set_text_color(0)
        for label, value in rows:
            self.cell(half, ROW_HEIGHT_MM, _pdf_text(label), border=1)
            self.cell(
                half,
                ROW_HEIGHT_MM,
                _pdf_text(value),
                border=1,
                new_x="LMARGIN",
                new_y="NEXT",
            )

    def _macro_table(self, analysis: NutrientAnalysis) -> None:
        width = self.epw / 4
        headers = ["Calorie (kcal)", "Proteine (g)", "Carboidrati (g)", "Grassi (g)"]
        values = [
            f"{analysis.calories:.0f}",
            f"{analysis.protein:.1f}",
            f"{analysis.carbs:.1f}",
            f"{analysis.fats:.1f}",
        ]
        self.set_font("Helvetica", "B", 10)
        self.set_text_color(255)
        self.set_fill_color(*MACRO_HEADER_FILL)
        for header in headers:
            self.cell(width, ROW_HEIGHT_MM, header, border=1, fill=True)
        self.ln(ROW_HEIGHT_MM)
        self.set_font("Helvetica", "", 10)
        self.set_text_color(0)
        for value in values:
            self.cell(width, ROW_HEIGHT_MM, value, border=1)
        self.ln(ROW_HEIGHT_MM)

    def _label_row(self, text: str) -> None:
        self.set_font("Helvetica", "B", 10)
        self.set_text_color(0)
        self.set_fill_color(*LABEL_FILL)
        self.cell(
            0,
            ROW_HEIGHT_MM,
            _pdf_text(text),
            border=1,
            fill=True,
            new_x="LMARGIN",
            new_y="NEXT",
        )

    def _text_row(self, text: str) -> None:
        self.set_font("Helvetica", "", 10)
        self.set_text_color(0)
        self.multi_cell(
            0, 6, _pdf_text(text), border=1, new_x="LMARGIN", new_y="NEXT"
        )


def _profile_rows(profile: UserProfile) -> list[tuple[str, str]]:
    return [
        ("Età", _or_not_available(profile.age)),
        ("Sesso", _or_not_available(profile.gender)),
        ("Altezza (cm)", _or_not_available(profile.height)),
        ("Peso (kg)", _or_not_available(profile.weight)),
        (
            "Stile di Vita",
            LIFESTYLE_LABELS[profile.lifestyle] if profile.lifestyle else NOT_AVAILABLE,
        ),
        ("Obiettivo", GOAL_LABELS[profile.goal] if profile.goal else NOT_AVAILABLE),
        ("Condizioni/Dieta", profile.conditions or "Nessuna"),
    ]


def _or_not_available(value: object | None) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _pdf_text(text: str) -> str:
    """Replace characters the core PDF fonts cannot encode."""
    return text.encode("latin-1", "replace").decode("latin-1")


def _entries_filename(start: date, end: date, extension: str) -> str:
    return f"diario_alimentare_{start.isoformat()}_{end.isoformat()}.{extension}"


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("La data di inizio deve precedere la data di fine.")
