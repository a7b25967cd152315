"""
Services for the clinic's shared expense ledger and the doctors' revenue ledger.

Shared expenses are split among the doctors billed in the month of the
expense; revenue entries feed revenue-share contracts.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import ClinicExpense, RevenueEntry, UserClinicAssociation

logger = logging.getLogger(__name__)


class ExpenseService:
    """Service for shared clinic expenses."""

    @staticmethod
    def add_expense(
        db: Session,
        clinic_id: int,
        description: str,
        amount: Decimal,
        expense_date: date
    ) -> ClinicExpense:
        """
        Record a shared expense.

        Raises:
            ValueError: If the description is blank or the amount is not positive
        """
        description = (description or "").strip()
        if not description:
            raise ValueError("description is required")
        if amount <= 0:
            raise ValueError("amount must be positive")

        expense = ClinicExpense(
            clinic_id=clinic_id,
            description=description,
            amount=amount,
            expense_date=expense_date
        )
        db.add(expense)
        db.flush()
        logger.info(f"Recorded expense {expense.id} for clinic {clinic_id}: {description} ({amount})")
        return expense

    @staticmethod
    def list_expenses(
        db: Session,
        clinic_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[ClinicExpense]:
        """
        List a clinic's expenses, newest first.

        Args:
            start_date: Optional inclusive lower bound
            end_date: Optional exclusive upper bound
        """
        query = db.query(ClinicExpense).filter(ClinicExpense.clinic_id == clinic_id)
        if start_date:
            query = query.filter(ClinicExpense.expense_date >= start_date)
        if end_date:
            query = query.filter(ClinicExpense.expense_date < end_date)
        return query.order_by(ClinicExpense.expense_date.desc(), ClinicExpense.id.desc()).all()

    @staticmethod
    def total_expenses(
        db: Session,
        clinic_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Decimal:
        """Sum of a clinic's expenses in [start_date, end_date)."""
        query = db.query(func.sum(ClinicExpense.amount)).filter(ClinicExpense.clinic_id == clinic_id)
        if start_date:
            query = query.filter(ClinicExpense.expense_date >= start_date)
        if end_date:
            query = query.filter(ClinicExpense.expense_date < end_date)
        total = query.scalar()
        return Decimal(str(total)) if total is not None else Decimal('0')


class RevenueService:
    """Service for the doctors' gross revenue ledger."""

    @staticmethod
    def add_revenue_entry(
        db: Session,
        clinic_id: int,
        user_id: int,
        amount: Decimal,
        revenue_date: date,
        description: Optional[str] = None
    ) -> RevenueEntry:
        """
        Record gross revenue generated by a doctor.

        Raises:
            ValueError: If the amount is not positive or the user is not a member of the clinic
        """
        if amount <= 0:
            raise ValueError("amount must be positive")

        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.user_id == user_id
        ).first()
        if not association:
            raise ValueError("Doctor not found in clinic")

        entry = RevenueEntry(
            clinic_id=clinic_id,
            user_id=user_id,
            amount=amount,
            revenue_date=revenue_date,
            description=description
        )
        db.add(entry)
        db.flush()
        logger.info(f"Recorded revenue entry {entry.id} for doctor {user_id} in clinic {clinic_id}")
        return entry
