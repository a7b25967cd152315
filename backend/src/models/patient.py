"""
Patient model representing individuals who receive treatment at clinics.

Patients are referenced by room bookings and product consumption events, and
carry a log of contact interactions (calls, messages, visits).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Patient(Base):
    """Patient entity. Each patient belongs to exactly one clinic."""

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the patient."""

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"), index=True)
    """Reference to the clinic where this patient receives treatment."""

    full_name: Mapped[str] = mapped_column(String(255))

    cpf: Mapped[Optional[str]] = mapped_column(String(14), nullable=True)
    """Brazilian taxpayer number, as typed by the clinic."""

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    is_deleted: Mapped[bool] = mapped_column(default=False)
    """Soft delete flag. Deleted patients keep their booking and consumption history."""

    deleted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the patient was soft deleted (if applicable)."""

    # Relationships
    clinic = relationship("Clinic", back_populates="patients")
    interactions = relationship(
        "PatientInteraction",
        back_populates="patient",
        cascade="all, delete-orphan"
    )
