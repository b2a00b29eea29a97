from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import matplotlib
from fpdf import FPDF
from fpdf.errors import FPDFException
from matplotlib import font_manager

from goals_survey.core.logging import get_logger
from goals_survey.models.survey import ReportData, SurveyResponse
from goals_survey.services.charts import ChartSeries

logger = get_logger(__name__)

CSV_FILENAME = "survey_responses.csv"
CSV_MIME = "text/csv"
CSV_HEADER = "Question,Answer"
PDF_FILENAME = "survey_report.pdf"
PDF_MIME = "application/pdf"
CAPTURE_BACKGROUND = (0x1E, 0x1E, 0x1E)
CAPTURE_TEXT = (240, 240, 240)
CAPTURE_MUTED_TEXT = (190, 190, 190)

REPORT_FONT = "ReportFont"
DEFAULT_FONT_FILES = {
    "": Path(matplotlib.get_data_path()) / "fonts" / "ttf" / "DejaVuSans.ttf",
    "B": Path(matplotlib.get_data_path()) / "fonts" / "ttf" / "DejaVuSans-Bold.ttf",
}

# Scripts DejaVu Sans does not cover: CJK, Indic and Thai.
FALLBACK_FONT_FAMILIES = (
    "Noto Sans CJK SC",
    "Noto Sans CJK JP",
    "Noto Sans CJK KR",
    "Noto Sans SC",
    "Noto Sans JP",
    "Noto Sans KR",
    "Droid Sans Fallback",
    "WenQuanYi Zen Hei",
    "Noto Sans Devanagari",
    "Noto Sans Bengali",
    "Noto Sans Gurmukhi",
    "Noto Sans Gujarati",
    "Noto Sans Tamil",
    "Noto Sans Telugu",
    "Noto Sans Kannada",
    "Noto Sans Malayalam",
    "Noto Sans Thai",
    "Noto Sans Arabic",
    "Noto Sans Hebrew",
)


@dataclass(frozen=True)
class AnalysisEntry:
    label: str
    answer: str
    insight: str


@dataclass(frozen=True)
class ReportDocument:
    """Display-ready version of a report."""

    title: str
    summary: str
    conclusion: str
    analysis: List[AnalysisEntry] = field(default_factory=list)
    chart: ChartSeries | None = None


def build_document(report: ReportData) -> ReportDocument:
    """Label each analysis item and decide whether a chart is shown."""

    analysis = [
        AnalysisEntry(
            label=f"Q{index}: {item.question}",
            answer=f"A: {item.answer}",
            insight=item.insight,
        )
        for index, item in enumerate(report.detailed_analysis, start=1)
    ]
    chart = ChartSeries.from_chart_data(report.chart_data)
    return ReportDocument(
        title=report.title,
        summary=report.summary,
        conclusion=report.conclusion,
        analysis=analysis,
        chart=chart,
    )


def build_csv(responses: Sequence[SurveyResponse]) -> str:
    """Export responses with every field quoted and inner quotes doubled."""

    buffer = io.StringIO()
    buffer.write(f"{CSV_HEADER}\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for response in responses:
        writer.writerow([response.question, response.answer])
    return buffer.getvalue()


def find_fallback_fonts(entries: Iterable[font_manager.FontEntry] | None = None) -> List[Tuple[str, Path]]:
    """Installed regular-weight fonts from ``FALLBACK_FONT_FAMILIES``, in that order."""

    if entries is None:
        entries = font_manager.fontManager.ttflist
    found = {}
    for entry in entries:
        if entry.name not in FALLBACK_FONT_FAMILIES or entry.name in found:
            continue
        if entry.style != "normal" or entry.weight not in (400, "normal", "regular"):
            continue
        found[entry.name] = Path(entry.fname)
    return [(name, found[name]) for name in FALLBACK_FONT_FAMILIES if name in found]


class _CapturePDF(FPDF):
    def header(self) -> None:
        with self.local_context():
            self.set_fill_color(*CAPTURE_BACKGROUND)
            self.rect(0, 0, self.w, self.h, style="F")


class PdfExporter:
    """Lays a report document out on a dark background and returns PDF bytes.

    Text is set in DejaVu Sans, which ships with matplotlib and covers Latin,
    Greek, Cyrillic, Arabic and Hebrew. Installed Noto fonts are registered as
    fallbacks for the remaining scripts. ``font_path`` replaces DejaVu Sans.
    """

    def __init__(
        self,
        *,
        font_path: Path | None = None,
        fallback_fonts: Sequence[Tuple[str, Path]] | None = None,
    ) -> None:
        self._font_path = font_path if font_path and Path(font_path).is_file() else None
        if font_path and self._font_path is None:
            logger.warning("PDF font not found, using DejaVu Sans", extra={"font_path": str(font_path)})
        self._fallback_fonts = list(find_fallback_fonts() if fallback_fonts is None else fallback_fonts)

    def export(self, document: ReportDocument, *, chart_png: bytes | None = None) -> bytes:
        return bytes(self.build(document, chart_png=chart_png).output())

    def build(self, document: ReportDocument, *, chart_png: bytes | None = None) -> FPDF:
        pdf = _CapturePDF()
        pdf.set_auto_page_break(auto=True, margin=15)
        self._register_fonts(pdf)
        pdf.add_page()
        pdf.set_text_color(*CAPTURE_TEXT)

        pdf.set_font(REPORT_FONT, "B", 20)
        pdf.multi_cell(0, 10, document.title, new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

        self._section(pdf, "Summary", document.summary)

        if document.analysis:
            self._heading(pdf, "Detailed Analysis")
            for entry in document.analysis:
                pdf.set_font(REPORT_FONT, "B", 12)
                pdf.multi_cell(0, 7, entry.label, new_x="LMARGIN", new_y="NEXT")
                pdf.set_font(REPORT_FONT, "", 11)
                pdf.set_text_color(*CAPTURE_MUTED_TEXT)
                pdf.multi_cell(0, 6, entry.answer, new_x="LMARGIN", new_y="NEXT")
                pdf.set_text_color(*CAPTURE_TEXT)
                pdf.multi_cell(0, 6, f"Insight: {entry.insight}", new_x="LMARGIN", new_y="NEXT")
                pdf.ln(3)

        if document.chart is not None and chart_png:
            self._heading(pdf, "Data Visualization")
            pdf.image(io.BytesIO(chart_png), w=pdf.epw)
            pdf.ln(4)

        self._section(pdf, "Conclusion", document.conclusion)
        return pdf

    def _register_fonts(self, pdf: FPDF) -> None:
        if self._font_path is not None:
            for style in DEFAULT_FONT_FILES:
                pdf.add_font(REPORT_FONT, style, str(self._font_path))
        else:
            for style, path in DEFAULT_FONT_FILES.items():
                pdf.add_font(REPORT_FONT, style, str(path))

        fallback_families = []
        for index, (name, path) in enumerate(self._fallback_fonts):
            family = f"ReportFallback{index}"
            try:
                pdf.add_font(family, "", str(path))
            except (OSError, ValueError, FPDFException):
                logger.warning("Skipping unusable fallback font", extra={"font": name, "font_path": str(path)})
                continue
            fallback_families.append(family)
        if fallback_families:
            pdf.set_fallback_fonts(fallback_families, exact_match=False)

        try:
            pdf.set_text_shaping(True)
        except FPDFException:
            # uharfbuzz is the optional "shaping" extra
            logger.debug("Text shaping unavailable, right-to-left and Indic text is laid out unshaped")

    def _heading(self, pdf: FPDF, title: str) -> None:
        pdf.set_font(REPORT_FONT, "B", 15)
        pdf.cell(0, 9, title, new_x="LMARGIN", new_y="NEXT")

    def _section(self, pdf: FPDF, title: str, body: str) -> None:
        self._heading(pdf, title)
        pdf.set_font(REPORT_FONT, "", 11)
        pdf.multi_cell(0, 6, body, new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)


__all__ = [
    "AnalysisEntry",
    "CSV_FILENAME",
    "CSV_HEADER",
    "CSV_MIME",
    "DEFAULT_FONT_FILES",
    "FALLBACK_FONT_FAMILIES",
    "PDF_FILENAME",
    "PDF_MIME",
    "PdfExporter",
    "REPORT_FONT",
    "ReportDocument",
    "build_csv",
    "build_document",
    "find_fallback_fonts",
]
