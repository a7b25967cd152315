"""
Monthly closing calculator.

Reduces a read snapshot of a clinic's month (contracts, room bookings, product
consumption, shared expenses, revenue) to one ClosingRow per billed doctor.
The calculation is pure: it never reads storage and never mutates its inputs,
so running it twice on the same snapshot yields identical rows.
"""
import logging
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Set

from core.constants import CALCULATION_TOLERANCE, SECONDS_PER_HOUR
from services.closing_types import (
    ClosingInputs,
    ClosingRow,
    ContractKind,
    ContractTerm,
    PartnershipRevenueMode,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


class CalculationValidationError(Exception):
    """Exception raised when the closing snapshot or result is inconsistent."""
    pass


def duration_to_hours(duration: timedelta) -> Decimal:
    """Convert a timedelta to exact decimal hours (no float conversion)."""
    seconds = Decimal(duration.days * 86400 + duration.seconds)
    seconds += Decimal(duration.microseconds) / Decimal(1_000_000)
    return seconds / SECONDS_PER_HOUR


class MonthlyClosingCalculator:
    """
    Computes the monthly closing rows.

    For each doctor with an active contract:
    - room_cost = rate * booked_hours (hourly_rental only)
    - partnership_revenue = rate% * gross revenue (revenue_share only)
    - product_cost = sum(frozen_unit_cost * quantity)
    - shared_expense_share = total shared expenses / number of billed doctors
    - final_invoice_amount = room_cost + product_cost + shared_expense_share
      -/+ partnership_revenue depending on the partnership revenue mode

    A doctor is billed when they have bookings or consumption in the period,
    or when the period has shared expenses to split. Doctors with nothing to
    bill are omitted, so an idle month yields no rows.
    """

    def __init__(self, partnership_mode: PartnershipRevenueMode = PartnershipRevenueMode.CREDIT):
        self.partnership_mode = PartnershipRevenueMode(partnership_mode)

    def calculate(self, inputs: ClosingInputs) -> List[ClosingRow]:
        """
        Calculate closing rows for the snapshot.

        Args:
            inputs: Complete read snapshot for the billing period

        Returns:
            ClosingRow list ordered by doctor name (case-insensitive), then doctor id

        Raises:
            CalculationValidationError: If a doctor has more than one active contract
                or the shared expense split does not add back up to its total
        """
        contracts = self._index_contracts(inputs['contracts'])

        booked_hours = self._booked_hours_by_doctor(inputs, contracts)
        product_costs = self._product_cost_by_doctor(inputs, contracts)

        total_shared = sum((e['amount'] for e in inputs['shared_expenses']), ZERO)

        billed: Set[int] = set(booked_hours) | set(product_costs)
        if total_shared != ZERO:
            # Every contracted doctor shares the clinic's expenses for the month
            billed |= set(contracts)

        if not billed:
            period = inputs['period']
            if total_shared != ZERO:
                logger.warning(
                    f"Shared expenses of {total_shared} for clinic {period['clinic_id']} "
                    f"{period['month']:02d}/{period['year']} left unallocated: no contracted doctors"
                )
            else:
                logger.debug(f"No billable activity for clinic {period['clinic_id']}")
            return []

        shared_share = total_shared / Decimal(len(billed))

        rows: List[ClosingRow] = []
        for doctor_id in billed:
            contract = contracts[doctor_id]
            hours = booked_hours.get(doctor_id, ZERO)
            product_cost = product_costs.get(doctor_id, ZERO)

            if contract['contract_kind'] == ContractKind.HOURLY_RENTAL:
                room_cost = contract['rate'] * hours
                partnership_revenue = ZERO
            else:
                gross = inputs['gross_revenue'].get(doctor_id, ZERO)
                room_cost = ZERO
                partnership_revenue = contract['rate'] / HUNDRED * gross

            if self.partnership_mode == PartnershipRevenueMode.CREDIT:
                final_amount = room_cost + product_cost + shared_share - partnership_revenue
            else:
                final_amount = room_cost + product_cost + shared_share + partnership_revenue

            rows.append(ClosingRow(
                doctor_id=doctor_id,
                doctor_name=self._doctor_name(inputs['doctor_names'], doctor_id),
                booked_hours=hours,
                room_cost=room_cost,
                partnership_revenue=partnership_revenue,
                product_cost=product_cost,
                shared_expense_share=shared_share,
                final_invoice_amount=final_amount,
                contract_kind=contract['contract_kind'],
            ))

        self._validate_shared_split(rows, total_shared)

        rows.sort(key=lambda r: (r.doctor_name.casefold(), r.doctor_id))
        return rows

    @staticmethod
    def _index_contracts(contracts: List[ContractTerm]) -> Dict[int, ContractTerm]:
        indexed: Dict[int, ContractTerm] = {}
        for contract in contracts:
            doctor_id = contract['doctor_id']
            if doctor_id in indexed:
                raise CalculationValidationError(
                    f"Doctor {doctor_id} has more than one active contract"
                )
            indexed[doctor_id] = contract
        return indexed

    @staticmethod
    def _booked_hours_by_doctor(
        inputs: ClosingInputs,
        contracts: Dict[int, ContractTerm]
    ) -> Dict[int, Decimal]:
        """
        Sum booked hours per contracted doctor.

        A booking belongs to the period when its start falls in [start, end);
        it is counted in full, never prorated.
        """
        period_start = inputs['period']['start']
        period_end = inputs['period']['end']
        hours: Dict[int, Decimal] = defaultdict(Decimal)

        for booking in inputs['bookings']:
            doctor_id = booking['doctor_id']
            if doctor_id not in contracts:
                continue
            if not (period_start <= booking['start'] < period_end):
                continue

            duration = booking['end'] - booking['start']
            if duration <= timedelta(0):
                logger.warning(
                    f"Ignoring booking with non-positive duration for doctor {doctor_id}: "
                    f"{booking['start'].isoformat()} - {booking['end'].isoformat()}"
                )
                continue

            hours[doctor_id] += duration_to_hours(duration)

        return dict(hours)

    @staticmethod
    def _product_cost_by_doctor(
        inputs: ClosingInputs,
        contracts: Dict[int, ContractTerm]
    ) -> Dict[int, Decimal]:
        costs: Dict[int, Decimal] = defaultdict(Decimal)
        for event in inputs['consumptions']:
            doctor_id = event['doctor_id']
            if doctor_id not in contracts:
                continue
            costs[doctor_id] += event['frozen_unit_cost'] * Decimal(event['quantity'])
        return dict(costs)

    @staticmethod
    def _doctor_name(names: Dict[int, str], doctor_id: int) -> str:
        name = names.get(doctor_id)
        if not name:
            logger.warning(f"No display name for doctor {doctor_id}")
            return f"#{doctor_id}"
        return name

    @staticmethod
    def _validate_shared_split(rows: List[ClosingRow], total_shared: Decimal) -> None:
        distributed = sum((r.shared_expense_share for r in rows), ZERO)
        if abs(distributed - total_shared) > CALCULATION_TOLERANCE:
            raise CalculationValidationError(
                f"Shared expense split mismatch: distributed {distributed}, total {total_shared}"
            )
