"""
Clinic model representing a tenant of the system.

A clinic is the top-level entity that owns all doctors, rooms, patients,
products, contracts and expenses. Every query in the application is scoped
to a single clinic.
"""

from datetime import datetime

from sqlalchemy import String, TIMESTAMP, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import MAX_STRING_LENGTH


class Clinic(Base):
    """
    Clinic (tenant) entity.

    Represents a clinic that uses the system. Each clinic has:
    - Doctors with clinic-specific names and contracts
    - Rooms booked by doctors
    - A product inventory consumed during appointments
    - A ledger of shared (condominium) expenses
    """

    __tablename__ = "clinics"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the clinic."""

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Human-readable name of the clinic."""

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Whether the clinic is active. Inactive clinics are not billed."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the clinic was created."""

    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Timestamp when the clinic was last updated."""

    # Relationships
    user_associations = relationship("UserClinicAssociation", back_populates="clinic", cascade="all, delete-orphan")
    doctor_contracts = relationship("DoctorContract", back_populates="clinic", cascade="all, delete-orphan")
    rooms = relationship("Room", back_populates="clinic", cascade="all, delete-orphan")
    patients = relationship("Patient", back_populates="clinic", cascade="all, delete-orphan")
    products = relationship("Product", back_populates="clinic", cascade="all, delete-orphan")
    expenses = relationship("ClinicExpense", back_populates="clinic", cascade="all, delete-orphan")
