"""Export rendering: audit PDF, single-record PDF and Excel workbook."""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.schemas.report import WoundReport

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "WEEKLY WOUND REPORT"

# Column header -> report attribute, in sheet order.
EXCEL_COLUMNS: dict[str, str] = {
    "Patient Name": "patient_name",
    "Room No": "room_no",
    "Date of Discovery": "date_of_discovery",
    "Facility/Hospital": "fac_hosp",
    "Type/Stage": "type_stage",
    "Site": "site",
    "Color/Drainage": "color_drainage",
    "Undermining": "undermining",
    "Week 1": "week1",
    "Week 2": "week2",
    "Week 3": "week3",
    "Week 4": "week4",
    "Current Treatment": "current_treatment",
    "Comment": "comment",
}

_HEADER_BG = colors.HexColor("#2563EB")
_ROW_ALT_BG = colors.HexColor("#F1F5F9")
_GRID = colors.HexColor("#CBD5E1")


class NothingToExportError(Exception):
    """Raised when an export is requested for an empty selection."""


def export_filename(stem: str, ext: str, *, today: date | None = None) -> str:
    day = (today or date.today()).isoformat()
    safe = re.sub(r"\s+", "_", stem.strip()) or "Wound_Report"
    return f"{safe}_{day}.{ext}"


def stage_label_text(report: WoundReport) -> str:
    return "NON-STAGED WOUND" if report.is_no_stage else report.type_stage


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "WoundTitle", parent=base["Heading1"], fontSize=16, spaceAfter=4,
            textColor=colors.HexColor("#1D4ED8"),
        ),
        "meta": ParagraphStyle(
            "WoundMeta", parent=base["Normal"], fontSize=8, textColor=colors.gray, spaceAfter=8,
        ),
        "cell": ParagraphStyle("WoundCell", parent=base["Normal"], fontSize=7, leading=9),
        "label": ParagraphStyle(
            "WoundLabel", parent=base["Normal"], fontSize=9, fontName="Helvetica-Bold",
        ),
        "value": ParagraphStyle("WoundValue", parent=base["Normal"], fontSize=9, leading=12),
    }


def _esc(text: str | None) -> str:
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def export_pdf(
    reports: Sequence[WoundReport],
    title: str = DEFAULT_TITLE,
    *,
    generated_at: datetime | None = None,
) -> bytes:
    """Render a landscape audit table of *reports* to PDF bytes."""
    if not reports:
        raise NothingToExportError("No records match your current search/filter. Nothing to export.")

    styles = _styles()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=landscape(letter),
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        leftMargin=0.4 * inch,
        rightMargin=0.4 * inch,
        title=title,
    )
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    story = [
        Paragraph(_esc(title), styles["title"]),
        Paragraph(f"Generated {stamp} &middot; {len(reports)} record(s)", styles["meta"]),
    ]

    header = ["Patient", "Room", "Facility", "Site", "Stage", "Discovery",
              "W1", "W2", "W3", "W4", "Treatment", "Comment"]
    cell = styles["cell"]
    rows = [header]
    for r in reports:
        rows.append([
            Paragraph(_esc(r.patient_name), cell),
            Paragraph(_esc(r.room_no), cell),
            Paragraph(_esc(r.fac_hosp), cell),
            Paragraph(_esc(r.site), cell),
            Paragraph(_esc(stage_label_text(r)), cell),
            Paragraph(_esc(r.date_of_discovery), cell),
            *[Paragraph(_esc(w) or "-", cell) for w in r.weeks],
            Paragraph(_esc(r.current_treatment), cell),
            Paragraph(_esc(r.comment), cell),
        ])

    widths = [1.1, 0.5, 1.0, 0.9, 0.9, 0.7, 0.55, 0.55, 0.55, 0.55, 1.1, 1.1]
    table = LongTable(rows, colWidths=[w * inch for w in widths], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 7),
        ("GRID", (0, 0), (-1, -1), 0.25, _GRID),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, _ROW_ALT_BG]),
    ]))
    story.append(table)

    doc.build(story)
    logger.info("Rendered PDF '%s' with %d records.", title, len(reports))
    return buf.getvalue()


def export_single_pdf(report: WoundReport, *, generated_at: datetime | None = None) -> bytes:
    """Render a one-page clinical sheet for a single wound."""
    styles = _styles()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        title=f"Wound Record - {report.patient_name}",
    )
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    story = [
        Paragraph("PATIENT WOUND RECORD", styles["title"]),
        Paragraph(f"Generated {stamp}", styles["meta"]),
        Spacer(1, 0.1 * inch),
    ]

    pairs = [
        ("Patient", report.patient_name),
        ("Room", report.room_no),
        ("Facility/Hospital", report.fac_hosp),
        ("Anatomical Site", report.site),
        ("Type/Stage", stage_label_text(report)),
        ("Date of Discovery", report.date_of_discovery),
        ("Color/Drainage", report.color_drainage),
        ("Undermining", report.undermining),
        *[(f"Week {i + 1} (cm)", w or "-") for i, w in enumerate(report.weeks)],
        ("Current Treatment", report.current_treatment),
        ("Comment", report.comment),
    ]
    rows = [
        [Paragraph(_esc(k), styles["label"]), Paragraph(_esc(v), styles["value"])]
        for k, v in pairs
    ]
    table = Table(rows, colWidths=[1.8 * inch, 5.0 * inch])
    table.setStyle(TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.25, _GRID),
        ("BACKGROUND", (0, 0), (0, -1), _ROW_ALT_BG),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(table)

    doc.build(story)
    return buf.getvalue()


def reports_frame(reports: Sequence[WoundReport]) -> pd.DataFrame:
    """Tabular view of *reports* with human column headers."""
    records = [
        {
            header: (stage_label_text(r) if attr == "type_stage" else getattr(r, attr))
            for header, attr in EXCEL_COLUMNS.items()
        }
        for r in reports
    ]
    return pd.DataFrame.from_records(records, columns=list(EXCEL_COLUMNS))


def _keep_as_text(ws: Any) -> None:
    """openpyxl binds strings starting with "=" as formulas; store them as text."""
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


def export_excel(reports: Sequence[WoundReport], sheet_name: str = "Wound Reports") -> bytes:
    """Write *reports* to an .xlsx workbook and return its bytes."""
    if not reports:
        raise NothingToExportError("No records match your current search/filter. Nothing to export.")
    df = reports_frame(reports)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        _keep_as_text(writer.sheets[sheet_name])
    logger.info("Rendered Excel workbook with %d records.", len(reports))
    return buf.getvalue()
