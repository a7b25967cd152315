"""
Type definitions for the monthly closing calculation.

Input records are TypedDicts as read from the data source; the output row is
an immutable dataclass. All monetary values are Decimal and unrounded;
rounding to 2 places happens only at presentation time (see closing_report).
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TypedDict, Optional


class ContractKind(str, Enum):
    """How a doctor is billed."""
    HOURLY_RENTAL = "hourly_rental"
    REVENUE_SHARE = "revenue_share"


class PartnershipRevenueMode(str, Enum):
    """Sign convention for partnership revenue in the final invoice."""
    CREDIT = "credit"  # subtracted from the invoice
    CHARGE = "charge"  # added to the invoice


class BillingPeriod(TypedDict):
    """Half-open billing period [start, end) for a calendar month."""
    clinic_id: int
    month: int
    year: int
    start: datetime
    end: datetime


class ContractTerm(TypedDict):
    """Active contract of a doctor."""
    doctor_id: int
    contract_kind: ContractKind
    rate: Decimal  # currency/hour or percentage of revenue


class RoomBookingRecord(TypedDict):
    """Room booking of a doctor."""
    doctor_id: int
    start: datetime
    end: datetime


class ConsumptionRecord(TypedDict):
    """Product consumption event with its frozen unit cost."""
    doctor_id: int
    quantity: int
    frozen_unit_cost: Decimal


class SharedExpenseRecord(TypedDict):
    """Shared clinic expense."""
    amount: Decimal


class ClosingInputs(TypedDict):
    """
    Complete read snapshot for one closing computation.

    gross_revenue holds the ledger figure for each revenue_share doctor.
    """
    period: BillingPeriod
    contracts: list[ContractTerm]
    bookings: list[RoomBookingRecord]
    consumptions: list[ConsumptionRecord]
    shared_expenses: list[SharedExpenseRecord]
    doctor_names: dict[int, str]
    gross_revenue: dict[int, Decimal]


@dataclass(frozen=True)
class ClosingRow:
    """One doctor's line in the monthly closing report."""
    doctor_id: int
    doctor_name: str
    booked_hours: Decimal
    room_cost: Decimal
    partnership_revenue: Decimal
    product_cost: Decimal
    shared_expense_share: Decimal
    final_invoice_amount: Decimal
    contract_kind: Optional[ContractKind] = None
