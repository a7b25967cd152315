"""
Doctor contract model.

A contract defines how a doctor is billed at the monthly closing:
- hourly_rental: the clinic charges `rate` per booked room hour
- revenue_share: the clinic takes `rate` percent of the doctor's gross revenue

Each doctor has at most one contract per clinic. A doctor without an active
contract is not billed.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, TIMESTAMP, Boolean, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class DoctorContract(Base):
    """Billing contract between a clinic and one of its doctors."""

    __tablename__ = "doctor_contracts"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"), index=True)
    """Reference to the clinic that holds the contract."""

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    """Reference to the doctor (User)."""

    contract_kind: Mapped[str] = mapped_column(String(20))
    """Either 'hourly_rental' or 'revenue_share' (see services.closing_types.ContractKind)."""

    rate: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    """Currency per hour for hourly_rental; percentage of revenue for revenue_share."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive contracts are kept for history but excluded from billing."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    clinic = relationship("Clinic", back_populates="doctor_contracts")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint('user_id', 'clinic_id', name='uq_doctor_contract_user_clinic'),
    )
