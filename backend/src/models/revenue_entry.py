"""
Revenue entry model.

Gross revenue generated by a doctor, as recorded in the billing ledger.
Revenue-share contracts are billed on the sum of entries in the period.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Date, ForeignKey, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class RevenueEntry(Base):
    """Gross revenue line attributed to a doctor on a given date."""

    __tablename__ = "revenue_entries"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))

    revenue_date: Mapped[date] = mapped_column(Date)

    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_revenue_entries_clinic_user_date', 'clinic_id', 'user_id', 'revenue_date'),
    )
