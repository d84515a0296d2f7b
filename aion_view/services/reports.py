"""
Aion View - Inventory Reports
Exportação do inventário em CSV (Excel) e PDF
"""
import csv
import io
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

# (chave no to_dict(), cabeçalho)
INVENTORY_COLUMNS = [
    ("id", "ID"),
    ("tag", "Tag"),
    ("name", "Equipamento"),
    ("manufacturer", "Fabricante"),
    ("model", "Modelo"),
    ("sector", "Setor"),
    ("criticality", "Criticidade"),
    ("status", "Status"),
    ("acquisition_date", "Aquisição"),
    ("end_of_life", "End of Life"),
    ("end_of_service", "End of Service"),
    ("replacement_cost", "Valor de Substituição"),
]

DATE_FIELDS = {"acquisition_date", "end_of_life", "end_of_service"}


class ReportDesign:
    HEADER_BG = "#1a237e"
    ROW_ALT_BG = "#f1f3f5"
    GRID = "#adb5bd"
    FONT_BOLD = "Helvetica-Bold"
    FONT_REGULAR = "Helvetica"
    FONT_SIZE = 7


def _format_value(key: str, value) -> str:
    if value is None or value == "":
        return ""
    if key in DATE_FIELDS:
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        return value.strftime("%d/%m/%Y")
    if key == "replacement_cost":
        formatted = f"{float(value):,.2f}"
        return "R$ " + formatted.replace(",", "X").replace(".", ",").replace("X", ".")
    return str(value)


def _rows(items: Iterable[dict]) -> List[List[str]]:
    return [[_format_value(key, item.get(key)) for key, _ in INVENTORY_COLUMNS] for item in items]


def inventory_to_csv(items: Iterable[dict]) -> bytes:
    """CSV separado por ';' com BOM UTF-8 (abre direto no Excel)"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";", lineterminator="\r\n")
    writer.writerow([header for _, header in INVENTORY_COLUMNS])
    writer.writerows(_rows(items))
    return buffer.getvalue().encode("utf-8-sig")


def inventory_to_pdf(items: Iterable[dict], title: Optional[str] = None) -> bytes:
    """Relatório A4 paisagem com a tabela do inventário"""
    items = list(items)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=1.2 * cm,
        rightMargin=1.2 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
        title=title or "Inventário de Equipamentos",
    )

    styles = getSampleStyleSheet()
    story = [
        Paragraph(title or "Inventário de Equipamentos", styles["Title"]),
        Paragraph(
            f"Gerado em {datetime.now().strftime('%d/%m/%Y %H:%M')} - {len(items)} equipamento(s)",
            styles["Normal"],
        ),
        Spacer(1, 0.4 * cm),
    ]

    data = [[header for _, header in INVENTORY_COLUMNS]] + _rows(items)
    table = Table(data, repeatRows=1)

    style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(ReportDesign.HEADER_BG)),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), ReportDesign.FONT_BOLD),
        ("FONTNAME", (0, 1), (-1, -1), ReportDesign.FONT_REGULAR),
        ("FONTSIZE", (0, 0), (-1, -1), ReportDesign.FONT_SIZE),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor(ReportDesign.GRID)),
        ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    for row in range(2, len(data), 2):
        style.append(("BACKGROUND", (0, row), (-1, row), colors.HexColor(ReportDesign.ROW_ALT_BG)))
    table.setStyle(TableStyle(style))
    story.append(table)

    doc.build(story)
    logger.info(f"[REPORTS] PDF do inventário gerado ({len(items)} linhas)")
    return buffer.getvalue()
