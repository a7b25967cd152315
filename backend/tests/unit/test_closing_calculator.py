"""
Unit tests for the monthly closing calculator.
"""
import pytest
from unittest.mock import patch
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from services.closing_calculator import (
    CalculationValidationError,
    MonthlyClosingCalculator,
    duration_to_hours,
)
from services.closing_types import (
    BillingPeriod,
    ClosingInputs,
    ConsumptionRecord,
    ContractKind,
    ContractTerm,
    PartnershipRevenueMode,
    RoomBookingRecord,
    SharedExpenseRecord,
)
from utils.datetime_utils import BRAZIL_TZ, get_month_bounds


def march_2024() -> BillingPeriod:
    start, end = get_month_bounds(2024, 3)
    return BillingPeriod(clinic_id=1, month=3, year=2024, start=start, end=end)


def at(day: int, hour: int, minute: int = 0, month: int = 3) -> datetime:
    return datetime(2024, month, day, hour, minute, tzinfo=BRAZIL_TZ)


def hourly(doctor_id: int, rate: str) -> ContractTerm:
    return ContractTerm(doctor_id=doctor_id, contract_kind=ContractKind.HOURLY_RENTAL, rate=Decimal(rate))


def revenue_share(doctor_id: int, rate: str) -> ContractTerm:
    return ContractTerm(doctor_id=doctor_id, contract_kind=ContractKind.REVENUE_SHARE, rate=Decimal(rate))


def make_inputs(
    contracts: List[ContractTerm],
    bookings: Optional[List[RoomBookingRecord]] = None,
    consumptions: Optional[List[ConsumptionRecord]] = None,
    shared_expenses: Optional[List[SharedExpenseRecord]] = None,
    doctor_names: Optional[Dict[int, str]] = None,
    gross_revenue: Optional[Dict[int, Decimal]] = None,
) -> ClosingInputs:
    return ClosingInputs(
        period=march_2024(),
        contracts=contracts,
        bookings=bookings or [],
        consumptions=consumptions or [],
        shared_expenses=shared_expenses or [],
        doctor_names=doctor_names if doctor_names is not None else {c['doctor_id']: f"Doctor {c['doctor_id']}" for c in contracts},
        gross_revenue=gross_revenue or {},
    )


class TestDurationToHours:
    """Test exact hour conversion."""

    def test_whole_hours(self):
        """Two hours convert exactly."""
        assert duration_to_hours(timedelta(hours=2)) == Decimal('2')

    def test_fractional_hours(self):
        """Ninety minutes is 1.5 hours."""
        assert duration_to_hours(timedelta(minutes=90)) == Decimal('1.5')

    def test_multi_day(self):
        """Days are included."""
        assert duration_to_hours(timedelta(days=1, hours=1)) == Decimal('25')


class TestMonthlyClosingCalculator:
    """Test monthly closing calculation."""

    def test_single_hourly_doctor(self):
        """One 2-hour booking at 150.00/hour is billed 300.00."""
        inputs = make_inputs(
            contracts=[hourly(1, '150.00')],
            bookings=[RoomBookingRecord(doctor_id=1, start=at(5, 10), end=at(5, 12))],
            doctor_names={1: 'Dra. Ana'},
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert len(rows) == 1
        row = rows[0]
        assert row.doctor_id == 1
        assert row.doctor_name == 'Dra. Ana'
        assert row.booked_hours == Decimal('2')
        assert row.room_cost == Decimal('300.00')
        assert row.partnership_revenue == Decimal('0')
        assert row.product_cost == Decimal('0')
        assert row.shared_expense_share == Decimal('0')
        assert row.final_invoice_amount == Decimal('300.00')
        assert row.contract_kind == ContractKind.HOURLY_RENTAL

    def test_shared_expense_split_equally(self):
        """A 200.00 expense split across two billed doctors is 100.00 each."""
        inputs = make_inputs(
            contracts=[hourly(1, '100'), hourly(2, '120')],
            bookings=[
                RoomBookingRecord(doctor_id=1, start=at(4, 9), end=at(4, 10)),
                RoomBookingRecord(doctor_id=2, start=at(6, 14), end=at(6, 15)),
            ],
            shared_expenses=[SharedExpenseRecord(amount=Decimal('200.00'))],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert [r.shared_expense_share for r in rows] == [Decimal('100'), Decimal('100')]
        assert rows[0].final_invoice_amount == Decimal('200')
        assert rows[1].final_invoice_amount == Decimal('220')

    def test_shared_expense_bills_contracted_doctors_without_activity(self):
        """With shared expenses, every contracted doctor takes a share."""
        inputs = make_inputs(
            contracts=[hourly(1, '100'), hourly(2, '100')],
            bookings=[RoomBookingRecord(doctor_id=1, start=at(4, 9), end=at(4, 10))],
            shared_expenses=[SharedExpenseRecord(amount=Decimal('90'))],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert {r.doctor_id for r in rows} == {1, 2}
        idle = next(r for r in rows if r.doctor_id == 2)
        assert idle.booked_hours == Decimal('0')
        assert idle.shared_expense_share == Decimal('45')
        assert idle.final_invoice_amount == Decimal('45')

    def test_booking_starting_at_period_end_is_excluded(self):
        """A booking that starts exactly at the end of the period contributes nothing."""
        _, period_end = get_month_bounds(2024, 3)
        inputs = make_inputs(
            contracts=[hourly(1, '150')],
            bookings=[RoomBookingRecord(doctor_id=1, start=period_end, end=period_end + timedelta(hours=2))],
        )

        assert MonthlyClosingCalculator().calculate(inputs) == []

    def test_booking_starting_at_period_start_is_included(self):
        """The start of the period is inclusive."""
        period_start, _ = get_month_bounds(2024, 3)
        inputs = make_inputs(
            contracts=[hourly(1, '150')],
            bookings=[RoomBookingRecord(doctor_id=1, start=period_start, end=period_start + timedelta(hours=1))],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].booked_hours == Decimal('1')

    def test_booking_crossing_period_end_is_not_prorated(self):
        """A booking starting inside the period counts in full."""
        _, period_end = get_month_bounds(2024, 3)
        inputs = make_inputs(
            contracts=[hourly(1, '100')],
            bookings=[RoomBookingRecord(
                doctor_id=1,
                start=period_end - timedelta(hours=1),
                end=period_end + timedelta(hours=2)
            )],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].booked_hours == Decimal('3')
        assert rows[0].room_cost == Decimal('300')

    def test_non_positive_booking_is_ignored(self):
        """Bookings ending before they start are skipped."""
        inputs = make_inputs(
            contracts=[hourly(1, '100')],
            bookings=[
                RoomBookingRecord(doctor_id=1, start=at(5, 12), end=at(5, 10)),
                RoomBookingRecord(doctor_id=1, start=at(6, 10), end=at(6, 11)),
            ],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].booked_hours == Decimal('1')

    def test_empty_period(self):
        """No bookings, consumption or expenses yields no rows."""
        inputs = make_inputs(contracts=[hourly(1, '150'), revenue_share(2, '30')])

        assert MonthlyClosingCalculator().calculate(inputs) == []

    def test_no_contracts(self):
        """Activity from doctors without an active contract is not billed."""
        inputs = make_inputs(
            contracts=[],
            bookings=[RoomBookingRecord(doctor_id=7, start=at(5, 10), end=at(5, 12))],
            consumptions=[ConsumptionRecord(doctor_id=7, quantity=1, frozen_unit_cost=Decimal('10'))],
        )

        assert MonthlyClosingCalculator().calculate(inputs) == []

    def test_unallocated_shared_expenses_are_logged(self):
        """Shared expenses with no contracted doctor to split them are reported."""
        inputs = make_inputs(
            contracts=[],
            shared_expenses=[SharedExpenseRecord(amount=Decimal('150')), SharedExpenseRecord(amount=Decimal('50'))],
        )

        with patch('services.closing_calculator.logger') as mock_logger:
            rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows == []
        mock_logger.warning.assert_called_once()
        message = mock_logger.warning.call_args.args[0]
        assert "200" in message
        assert "03/2024" in message

    def test_idle_month_does_not_warn(self):
        inputs = make_inputs(contracts=[hourly(1, '150')])

        with patch('services.closing_calculator.logger') as mock_logger:
            MonthlyClosingCalculator().calculate(inputs)

        mock_logger.warning.assert_not_called()

    def test_product_cost_uses_frozen_unit_cost(self):
        """Product cost is frozen unit cost times quantity, summed."""
        inputs = make_inputs(
            contracts=[hourly(1, '100')],
            consumptions=[
                ConsumptionRecord(doctor_id=1, quantity=2, frozen_unit_cost=Decimal('105.00')),
                ConsumptionRecord(doctor_id=1, quantity=1, frozen_unit_cost=Decimal('52.50')),
            ],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].product_cost == Decimal('262.50')
        assert rows[0].room_cost == Decimal('0')
        assert rows[0].final_invoice_amount == Decimal('262.50')

    def test_revenue_share_credit_mode(self):
        """Partnership revenue is subtracted in credit mode."""
        inputs = make_inputs(
            contracts=[revenue_share(1, '30')],
            consumptions=[ConsumptionRecord(doctor_id=1, quantity=1, frozen_unit_cost=Decimal('50'))],
            gross_revenue={1: Decimal('1000')},
        )

        rows = MonthlyClosingCalculator(PartnershipRevenueMode.CREDIT).calculate(inputs)

        assert rows[0].room_cost == Decimal('0')
        assert rows[0].partnership_revenue == Decimal('300')
        assert rows[0].final_invoice_amount == Decimal('-250')

    def test_revenue_share_charge_mode(self):
        """Partnership revenue is added in charge mode."""
        inputs = make_inputs(
            contracts=[revenue_share(1, '30')],
            consumptions=[ConsumptionRecord(doctor_id=1, quantity=1, frozen_unit_cost=Decimal('50'))],
            gross_revenue={1: Decimal('1000')},
        )

        rows = MonthlyClosingCalculator(PartnershipRevenueMode.CHARGE).calculate(inputs)

        assert rows[0].partnership_revenue == Decimal('300')
        assert rows[0].final_invoice_amount == Decimal('350')

    def test_revenue_share_ignores_room_bookings_for_cost(self):
        """Revenue-share doctors pay no room rental."""
        inputs = make_inputs(
            contracts=[revenue_share(1, '20')],
            bookings=[RoomBookingRecord(doctor_id=1, start=at(5, 10), end=at(5, 12))],
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].booked_hours == Decimal('2')
        assert rows[0].room_cost == Decimal('0')
        assert rows[0].partnership_revenue == Decimal('0')

    def test_rows_ordered_by_name(self):
        """Rows are ordered by doctor name, case-insensitively."""
        inputs = make_inputs(
            contracts=[hourly(1, '100'), hourly(2, '100'), hourly(3, '100')],
            shared_expenses=[SharedExpenseRecord(amount=Decimal('30'))],
            doctor_names={1: 'carla', 2: 'Bruno', 3: 'Ana'},
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert [r.doctor_name for r in rows] == ['Ana', 'Bruno', 'carla']

    def test_missing_name_falls_back_to_id(self):
        """Doctors without a display name are labelled by id."""
        inputs = make_inputs(
            contracts=[hourly(9, '100')],
            bookings=[RoomBookingRecord(doctor_id=9, start=at(5, 10), end=at(5, 11))],
            doctor_names={},
        )

        rows = MonthlyClosingCalculator().calculate(inputs)

        assert rows[0].doctor_name == '#9'

    def test_duplicate_contracts_rejected(self):
        """A doctor can only have one active contract."""
        inputs = make_inputs(contracts=[hourly(1, '100'), revenue_share(1, '30')])

        with pytest.raises(CalculationValidationError):
            MonthlyClosingCalculator().calculate(inputs)

    def test_inputs_not_mutated(self):
        """Calculating twice on the same snapshot gives identical rows."""
        inputs = make_inputs(
            contracts=[hourly(1, '150'), revenue_share(2, '25')],
            bookings=[RoomBookingRecord(doctor_id=1, start=at(5, 10), end=at(5, 12))],
            consumptions=[ConsumptionRecord(doctor_id=2, quantity=3, frozen_unit_cost=Decimal('10.50'))],
            shared_expenses=[SharedExpenseRecord(amount=Decimal('100'))],
            gross_revenue={2: Decimal('800')},
        )
        calculator = MonthlyClosingCalculator()

        first = calculator.calculate(inputs)
        second = calculator.calculate(inputs)

        assert first == second
        assert len(inputs['bookings']) == 1
