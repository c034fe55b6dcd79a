# Overview: End-of-day aggregation: today's sales, inventory snapshot, narrative analysis.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Protocol

from ..models import Product, Sale, format_decimal
from ..models.inventory import QUANTITY_PRECISION, QUANTITY_SCALE
from ..time_utils import local_date, local_day_bounds
from .products_service import get_catalog
from .sales_service import list_sales_between
from .summarizer_service import SummarizerUnavailable

logger = logging.getLogger(__name__)

DELETED_PRODUCT_LABEL = "Producto eliminado"
NO_DATA = "N/A"
MONEY_LIMIT = Decimal(10) ** (QUANTITY_PRECISION - QUANTITY_SCALE)
MONEY_STEP = Decimal(1).scaleb(-QUANTITY_SCALE)

PROMPT_TEMPLATE = """Eres un analista de negocios para una carnicería. Analiza los siguientes datos de ventas e inventario del día y proporciona un informe estructurado en JSON.

VENTAS DE HOY:
{sales}

INVENTARIO ACTUAL:
{inventory}

Por favor, proporciona un análisis en JSON con la siguiente estructura:
{{
  "mostSoldProduct": "nombre del producto más vendido",
  "totalSalesValue": número,
  "criticalStockAlerts": ["producto1", "producto2"],
  "performanceAnalysis": "análisis detallado del desempeño del día",
  "strategicRecommendations": "recomendaciones para mañana"
}}"""


class Summarizer(Protocol):
    def summarize(self, prompt: str) -> Optional[str]: ...


@dataclass(frozen=True)
class SaleLine:
    product_name: str
    quantity: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class InventoryLine:
    name: str
    quantity: Decimal
    min_stock: Decimal
    is_low_stock: bool


@dataclass(frozen=True)
class NarrativeAnalysis:
    most_sold_product: str
    total_sales_value: Decimal
    critical_stock_alerts: tuple[str, ...]
    performance_analysis: str
    strategic_recommendations: str

    def to_dict(self) -> dict:
        return {
            "mostSoldProduct": self.most_sold_product,
            "totalSalesValue": format_decimal(self.total_sales_value),
            "criticalStockAlerts": list(self.critical_stock_alerts),
            "performanceAnalysis": self.performance_analysis,
            "strategicRecommendations": self.strategic_recommendations,
        }


@dataclass(frozen=True)
class EndOfDayReport:
    report_date: date
    sales_count: int
    total_sales_value: Decimal
    sales: tuple[SaleLine, ...]
    inventory: tuple[InventoryLine, ...]
    analysis: NarrativeAnalysis
    # Set when the summarizer could not be reached; numeric fields are still valid
    analysis_error: Optional[str] = None

    def to_dict(self) -> dict:
        body = {
            "todaysSalesCount": self.sales_count,
            "totalSalesValue": format_decimal(self.total_sales_value),
            "analysis": self.analysis.to_dict(),
        }
        if self.analysis_error:
            body["analysisError"] = self.analysis_error
            body["retryable"] = True
        return body


def _sale_line(sale: Sale, catalog: dict[int, Product]) -> SaleLine:
    product = catalog.get(sale.product_id)
    return SaleLine(
        product_name=product.name if product is not None else DELETED_PRODUCT_LABEL,
        quantity=Decimal(sale.quantity),
        total_price=Decimal(sale.total_price),
    )


def _inventory_line(product: Product) -> InventoryLine:
    min_stock = Decimal(product.min_stock) if product.min_stock is not None else Decimal("0")
    return InventoryLine(
        name=product.name,
        quantity=Decimal(product.quantity),
        min_stock=min_stock,
        is_low_stock=product.is_low_stock,
    )


def build_summary_payload(sales: tuple[SaleLine, ...], inventory: tuple[InventoryLine, ...]) -> dict:
    """The fixed-shape data handed to the summarizer."""
    return {
        "sales": [
            {
                "productName": line.product_name,
                "quantitySold": format_decimal(line.quantity),
                "totalPrice": format_decimal(line.total_price),
            }
            for line in sales
        ],
        "inventory": [
            {
                "name": line.name,
                "quantityRemaining": format_decimal(line.quantity),
                "minStock": format_decimal(line.min_stock),
                "isLowStock": line.is_low_stock,
            }
            for line in inventory
        ],
    }


def build_prompt(payload: dict) -> str:
    return PROMPT_TEMPLATE.format(
        sales=json.dumps(payload["sales"], indent=2, ensure_ascii=False),
        inventory=json.dumps(payload["inventory"], indent=2, ensure_ascii=False),
    )


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return NO_DATA


def _decimal_field(data: dict, key: str, fallback: Decimal) -> Decimal:
    value = data.get(key)
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip().lstrip("$").replace(",", ""))
        except InvalidOperation:
            return fallback
        # Model output is untrusted: keep it only if it fits the money column
        if not number.is_finite() or abs(number) >= MONEY_LIMIT:
            return fallback
        return number.quantize(MONEY_STEP, rounding=ROUND_HALF_UP)
    return fallback


def _alerts_field(data: dict, key: str) -> tuple[str, ...]:
    value = data.get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return ()
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def default_analysis(total_sales_value: Decimal) -> NarrativeAnalysis:
    return NarrativeAnalysis(
        most_sold_product=NO_DATA,
        total_sales_value=total_sales_value,
        critical_stock_alerts=(),
        performance_analysis=NO_DATA,
        strategic_recommendations=NO_DATA,
    )


def parse_analysis(raw: Optional[str], *, fallback_total: Decimal) -> NarrativeAnalysis:
    """
    Interpret the summarizer's text field by field.

    Anything missing or of the wrong type takes its default; a response that
    is not a JSON object yields default_analysis().
    """
    if not raw:
        return default_analysis(fallback_total)
    try:
        data: Any = json.loads(raw)
    except ValueError:
        logger.warning("Summarizer returned non-JSON content")
        return default_analysis(fallback_total)
    if not isinstance(data, dict):
        logger.warning("Summarizer returned JSON %s, expected an object", type(data).__name__)
        return default_analysis(fallback_total)

    return NarrativeAnalysis(
        most_sold_product=_text_field(data, "mostSoldProduct"),
        total_sales_value=_decimal_field(data, "totalSalesValue", fallback_total),
        critical_stock_alerts=_alerts_field(data, "criticalStockAlerts"),
        performance_analysis=_text_field(data, "performanceAnalysis"),
        strategic_recommendations=_text_field(data, "strategicRecommendations"),
    )


def build_end_of_day_report(*, now: datetime, tz_name: str, summarizer: Summarizer) -> EndOfDayReport:
    """
    Aggregate the local calendar day containing `now`.

    Sales are joined to the current catalog by id; low-stock flags cover the
    whole catalog, not only products sold today. Summarizer problems never
    abort the report: the numeric fields are always computed from the ledger.
    """
    start, end = local_day_bounds(now, tz_name)
    products = get_catalog()
    by_id = {p.id: p for p in products}

    sales = tuple(_sale_line(s, by_id) for s in list_sales_between(start, end))
    inventory = tuple(_inventory_line(p) for p in products)
    total = sum((line.total_price for line in sales), Decimal("0"))

    analysis_error = None
    try:
        raw = summarizer.summarize(build_prompt(build_summary_payload(sales, inventory)))
        analysis = parse_analysis(raw, fallback_total=total)
    except SummarizerUnavailable as exc:
        analysis_error = str(exc)
        analysis = default_analysis(total)

    return EndOfDayReport(
        report_date=local_date(now, tz_name),
        sales_count=len(sales),
        total_sales_value=total,
        sales=sales,
        inventory=inventory,
        analysis=analysis,
        analysis_error=analysis_error,
    )
