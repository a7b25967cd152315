"""
Presentation helpers for the monthly closing.

Closing rows carry unrounded Decimals; this module is the only place where
amounts are rounded (2 places, ROUND_HALF_UP) for display and export.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Sequence

from core.constants import (
    CLOSING_REPORT_HEADERS,
    CLOSING_REPORT_TITLE,
    CURRENCY_PREFIX,
    MONEY_QUANTUM,
)
from services.closing_types import ClosingRow

MONEY_FIELDS = (
    'room_cost',
    'partnership_revenue',
    'product_cost',
    'shared_expense_share',
    'final_invoice_amount',
)


def round_money(value: Decimal) -> Decimal:
    """Round a monetary value to 2 decimal places."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    """Format an amount as e.g. 'R$ 1234.50'."""
    return f"{CURRENCY_PREFIX} {round_money(value):.2f}"


def serialize_closing_row(row: ClosingRow) -> Dict[str, Any]:
    """Convert a ClosingRow to a dict with amounts rounded for display."""
    result: Dict[str, Any] = {
        'doctor_id': row.doctor_id,
        'doctor_name': row.doctor_name,
        'contract_kind': row.contract_kind.value if row.contract_kind else None,
        'booked_hours': round_money(row.booked_hours),
    }
    for field in MONEY_FIELDS:
        result[field] = round_money(getattr(row, field))
    return result


def summarize_closing(rows: Sequence[ClosingRow]) -> Dict[str, Decimal]:
    """Totals per column across all rows, rounded after summing."""
    totals: Dict[str, Decimal] = {}
    for field in MONEY_FIELDS:
        totals[field] = round_money(sum((getattr(r, field) for r in rows), Decimal('0')))
    return totals


def build_report_title(month: int, year: int) -> str:
    """Title line of the closing report."""
    return CLOSING_REPORT_TITLE.format(month=month, year=year)


def build_report_table(rows: Sequence[ClosingRow], month: int, year: int) -> Dict[str, Any]:
    """
    Build the tabular closing report consumed by the export layer.

    Returns:
        Dict with 'title', 'headers' and 'rows' (one list of strings per doctor:
        name, rental, partnership, products, condominium, final invoice)
    """
    body: List[List[str]] = []
    for row in rows:
        body.append([
            row.doctor_name,
            format_currency(row.room_cost),
            format_currency(row.partnership_revenue),
            format_currency(row.product_cost),
            format_currency(row.shared_expense_share),
            format_currency(row.final_invoice_amount),
        ])
    return {
        'title': build_report_title(month, year),
        'headers': list(CLOSING_REPORT_HEADERS),
        'rows': body,
    }
