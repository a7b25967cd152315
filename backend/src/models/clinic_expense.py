"""
Clinic expense model.

Shared (condominium) expenses of a clinic, split equally among the doctors
billed in the month of the expense.
"""

from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import String, TIMESTAMP, Date, ForeignKey, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class ClinicExpense(Base):
    """Clinic-wide expense entry (e.g., electricity bill, condominium fee)."""

    __tablename__ = "clinic_expenses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"))

    description: Mapped[str] = mapped_column(String(255))

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    expense_date: Mapped[date] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    clinic = relationship("Clinic", back_populates="expenses")

    __table_args__ = (
        Index('idx_clinic_expenses_clinic_date', 'clinic_id', 'expense_date'),
    )
