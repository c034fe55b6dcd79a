# Overview: Renders an EndOfDayReport as the three-sheet "cierre diario" workbook.

from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from ..models import format_decimal
from .end_of_day_service import EndOfDayReport

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

LOW_STOCK_LABEL = "LOW"
OK_STOCK_LABEL = "OK"

# Sheet title -> [(header, width)]. Layout is consumed downstream; do not reorder.
SUMMARY_SHEET = ("Resumen", [("Métrica", 40), ("Valor", 50)])
SALES_SHEET = ("Ventas", [("Producto", 25), ("Cantidad Vendida (kg)", 20), ("Precio Total", 20)])
INVENTORY_SHEET = (
    "Inventario",
    [("Producto", 25), ("Stock Actual (kg)", 20), ("Stock Mínimo", 20), ("Estado", 15)],
)


def export_filename(report: EndOfDayReport) -> str:
    return f"cierre-diario-{report.report_date.isoformat()}.xlsx"


def _money(value) -> str:
    return f"${format_decimal(value)}"


def _add_sheet(wb: Workbook, layout):
    title, columns = layout
    ws = wb.create_sheet(title=title)
    bold_font = Font(bold=True)
    for col_idx, (header, width) in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.value = header
        cell.font = bold_font
        ws.column_dimensions[cell.column_letter].width = width
    return ws


def build_workbook(report: EndOfDayReport) -> Workbook:
    wb = Workbook()
    # Remove the default sheet openpyxl generates so ours are the only three
    del wb[wb.active.title]

    analysis = report.analysis

    summary = _add_sheet(wb, SUMMARY_SHEET)
    summary.append(["Producto Más Vendido", analysis.most_sold_product])
    summary.append(["Valor Total de Ventas", _money(analysis.total_sales_value)])
    summary.append(["Alertas de Stock Crítico", ", ".join(analysis.critical_stock_alerts) or "Ninguna"])
    summary.append(["Análisis de Desempeño", analysis.performance_analysis])
    summary.append(["Recomendaciones Estratégicas", analysis.strategic_recommendations])

    sales = _add_sheet(wb, SALES_SHEET)
    for line in report.sales:
        sales.append([line.product_name, line.quantity, _money(line.total_price)])

    inventory = _add_sheet(wb, INVENTORY_SHEET)
    for line in report.inventory:
        inventory.append([
            line.name,
            line.quantity,
            line.min_stock,
            LOW_STOCK_LABEL if line.is_low_stock else OK_STOCK_LABEL,
        ])

    return wb


def render_report_xlsx(report: EndOfDayReport) -> bytes:
    """Serialize the workbook to bytes; the report itself is left untouched."""
    buffer = BytesIO()
    build_workbook(report).save(buffer)
    return buffer.getvalue()
