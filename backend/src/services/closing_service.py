"""
Service for the monthly financial closing.

Validates the requested period, reads a complete snapshot of the clinic's
month through a ClosingDataSource and hands it to MonthlyClosingCalculator.
The operation is read-only and idempotent: any read failure aborts the whole
report, and callers may simply retry.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Union

from sqlalchemy.orm import Session

from core.config import PARTNERSHIP_REVENUE_MODE
from services.closing_calculator import MonthlyClosingCalculator
from services.closing_data_source import ClosingDataSource, SqlAlchemyClosingDataSource
from services.closing_errors import ClosingError, DataUnavailable, InvalidPeriod, TenantNotFound
from services.closing_types import (
    BillingPeriod,
    ClosingInputs,
    ClosingRow,
    ContractKind,
    PartnershipRevenueMode,
)
from utils.datetime_utils import get_month_bounds

logger = logging.getLogger(__name__)


def build_billing_period(clinic_id: int, month: int, year: int) -> BillingPeriod:
    """
    Build the half-open billing period for (month, year).

    Raises:
        InvalidPeriod: If month/year are not integers, month is outside 1-12,
            or year is outside the supported calendar range
    """
    for name, value in (("month", month), ("year", year)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidPeriod(f"{name} must be an integer, got {value!r}")
    try:
        start, end = get_month_bounds(year, month)
    except ValueError as e:
        raise InvalidPeriod(str(e)) from e
    return BillingPeriod(clinic_id=clinic_id, month=month, year=year, start=start, end=end)


class ClosingService:
    """Service for generating monthly closing reports."""

    def __init__(
        self,
        data_source: ClosingDataSource,
        partnership_mode: Optional[Union[PartnershipRevenueMode, str]] = None
    ):
        self.data_source = data_source
        mode = PartnershipRevenueMode(partnership_mode or PARTNERSHIP_REVENUE_MODE)
        self.calculator = MonthlyClosingCalculator(partnership_mode=mode)

    @classmethod
    def for_session(
        cls,
        db: Session,
        partnership_mode: Optional[Union[PartnershipRevenueMode, str]] = None
    ) -> "ClosingService":
        """Create a service reading from the clinic database."""
        return cls(SqlAlchemyClosingDataSource(db), partnership_mode=partnership_mode)

    def compute_closing(self, clinic_id: int, month: int, year: int) -> List[ClosingRow]:
        """
        Compute the monthly closing for a clinic.

        Args:
            clinic_id: Tenant to bill; every read is restricted to it
            month: Month number (1-12)
            year: Calendar year

        Returns:
            One ClosingRow per billed doctor, ordered by doctor name.
            Empty when nothing happened in the period.

        Raises:
            InvalidPeriod: If month/year are invalid
            TenantNotFound: If the clinic does not exist
            DataUnavailable: If any input could not be read
        """
        period = build_billing_period(clinic_id, month, year)
        inputs = self._read_snapshot(period)
        rows = self.calculator.calculate(inputs)

        logger.info(
            f"Closing for clinic {clinic_id} {month:02d}/{year}: {len(rows)} doctor(s), "
            f"{len(inputs['bookings'])} booking(s), {len(inputs['consumptions'])} consumption event(s), "
            f"{len(inputs['shared_expenses'])} shared expense(s)"
        )
        return rows

    def _read_snapshot(self, period: BillingPeriod) -> ClosingInputs:
        """Read every input of the closing before any calculation starts."""
        clinic_id = period['clinic_id']
        start = period['start']
        end = period['end']

        try:
            if not self.data_source.clinic_exists(clinic_id):
                raise TenantNotFound(clinic_id)

            contracts = self.data_source.list_active_contracts(clinic_id)
            bookings = self.data_source.list_room_bookings(clinic_id, start, end)
            consumptions = self.data_source.list_consumption_events(clinic_id, start, end)
            shared_expenses = self.data_source.list_shared_expenses(clinic_id, start, end)

            doctor_ids = sorted({c['doctor_id'] for c in contracts})
            doctor_names = self.data_source.resolve_doctor_names(clinic_id, doctor_ids)

            gross_revenue: Dict[int, Decimal] = {}
            for contract in contracts:
                if contract['contract_kind'] == ContractKind.REVENUE_SHARE:
                    gross_revenue[contract['doctor_id']] = self.data_source.gross_revenue_for_doctor(
                        clinic_id, contract['doctor_id'], start, end
                    )
        except ClosingError:
            raise
        except Exception as e:
            logger.exception(f"Failed to read closing inputs for clinic {clinic_id}: {e}")
            raise DataUnavailable(f"Could not read closing inputs for clinic {clinic_id}") from e

        return ClosingInputs(
            period=period,
            contracts=contracts,
            bookings=bookings,
            consumptions=consumptions,
            shared_expenses=shared_expenses,
            doctor_names=doctor_names,
            gross_revenue=gross_revenue,
        )
