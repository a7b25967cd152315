"""
Data source for the monthly closing.

ClosingDataSource is the read contract the closing service depends on.
SqlAlchemyClosingDataSource implements it on top of the clinic tables; every
query is restricted to the requested clinic. Database failures are reported
as DataUnavailable so the caller never sees a partial snapshot.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Dict, Generator, Iterable, List, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import (
    Clinic,
    ClinicExpense,
    DoctorContract,
    ProductConsumption,
    RevenueEntry,
    RoomBooking,
    UserClinicAssociation,
)
from services.closing_errors import DataUnavailable
from services.closing_types import (
    ConsumptionRecord,
    ContractKind,
    ContractTerm,
    RoomBookingRecord,
    SharedExpenseRecord,
)
from utils.datetime_utils import ensure_brazil

logger = logging.getLogger(__name__)


class ClosingDataSource(Protocol):
    """Reads required by the monthly closing, all scoped to one clinic."""

    def clinic_exists(self, clinic_id: int) -> bool: ...

    def list_active_contracts(self, clinic_id: int) -> List[ContractTerm]: ...

    def list_room_bookings(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[RoomBookingRecord]: ...

    def list_consumption_events(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[ConsumptionRecord]: ...

    def list_shared_expenses(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[SharedExpenseRecord]: ...

    def resolve_doctor_names(self, clinic_id: int, doctor_ids: Iterable[int]) -> Dict[int, str]: ...

    def gross_revenue_for_doctor(
        self, clinic_id: int, doctor_id: int, period_start: datetime, period_end: datetime
    ) -> Decimal: ...


@contextmanager
def _reading(what: str, clinic_id: int) -> Generator[None, None, None]:
    """Translate database errors raised while reading into DataUnavailable."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception(f"Failed to read {what} for clinic {clinic_id}: {e}")
        raise DataUnavailable(f"Could not read {what} for clinic {clinic_id}") from e


class SqlAlchemyClosingDataSource:
    """ClosingDataSource backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def clinic_exists(self, clinic_id: int) -> bool:
        with _reading("clinic", clinic_id):
            clinic = self.db.query(Clinic.id).filter(
                Clinic.id == clinic_id,
                Clinic.is_active == True
            ).first()
        return clinic is not None

    def list_active_contracts(self, clinic_id: int) -> List[ContractTerm]:
        with _reading("contracts", clinic_id):
            contracts = self.db.query(DoctorContract).filter(
                DoctorContract.clinic_id == clinic_id,
                DoctorContract.is_active == True
            ).all()

        result: List[ContractTerm] = []
        for contract in contracts:
            try:
                kind = ContractKind(contract.contract_kind)
            except ValueError as e:
                raise DataUnavailable(
                    f"Contract {contract.id} has unknown kind '{contract.contract_kind}'"
                ) from e
            result.append(ContractTerm(
                doctor_id=contract.user_id,
                contract_kind=kind,
                rate=Decimal(str(contract.rate)),
            ))
        return result

    def list_room_bookings(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[RoomBookingRecord]:
        with _reading("room bookings", clinic_id):
            bookings = self.db.query(RoomBooking).filter(
                RoomBooking.clinic_id == clinic_id,
                RoomBooking.start_time >= period_start,
                RoomBooking.start_time < period_end
            ).order_by(RoomBooking.start_time, RoomBooking.id).all()

        records: List[RoomBookingRecord] = []
        for booking in bookings:
            start = ensure_brazil(booking.start_time)
            end = ensure_brazil(booking.end_time)
            assert start is not None and end is not None
            records.append(RoomBookingRecord(doctor_id=booking.user_id, start=start, end=end))
        return records

    def list_consumption_events(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[ConsumptionRecord]:
        # Attributed by creation time, not by appointment date
        with _reading("product consumption", clinic_id):
            events = self.db.query(ProductConsumption).filter(
                ProductConsumption.clinic_id == clinic_id,
                ProductConsumption.created_at >= period_start,
                ProductConsumption.created_at < period_end
            ).order_by(ProductConsumption.created_at, ProductConsumption.id).all()

        return [
            ConsumptionRecord(
                doctor_id=event.user_id,
                quantity=event.quantity,
                frozen_unit_cost=Decimal(str(event.frozen_unit_cost)),
            )
            for event in events
        ]

    def list_shared_expenses(
        self, clinic_id: int, period_start: datetime, period_end: datetime
    ) -> List[SharedExpenseRecord]:
        with _reading("shared expenses", clinic_id):
            expenses = self.db.query(ClinicExpense).filter(
                ClinicExpense.clinic_id == clinic_id,
                ClinicExpense.expense_date >= period_start.date(),
                ClinicExpense.expense_date < period_end.date()
            ).order_by(ClinicExpense.expense_date, ClinicExpense.id).all()

        return [SharedExpenseRecord(amount=Decimal(str(expense.amount))) for expense in expenses]

    def resolve_doctor_names(self, clinic_id: int, doctor_ids: Iterable[int]) -> Dict[int, str]:
        ids = list(doctor_ids)
        if not ids:
            return {}
        with _reading("doctor names", clinic_id):
            associations = self.db.query(UserClinicAssociation).filter(
                UserClinicAssociation.clinic_id == clinic_id,
                UserClinicAssociation.user_id.in_(ids)
            ).all()
        return {a.user_id: a.full_name for a in associations}

    def gross_revenue_for_doctor(
        self, clinic_id: int, doctor_id: int, period_start: datetime, period_end: datetime
    ) -> Decimal:
        with _reading("revenue ledger", clinic_id):
            total = self.db.query(func.sum(RevenueEntry.amount)).filter(
                RevenueEntry.clinic_id == clinic_id,
                RevenueEntry.user_id == doctor_id,
                RevenueEntry.revenue_date >= period_start.date(),
                RevenueEntry.revenue_date < period_end.date()
            ).scalar()
        return Decimal(str(total)) if total is not None else Decimal('0')
