"""
Room model representing a bookable consulting room of a clinic.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Room(Base):
    """
    Room entity. Doctors book rooms by the hour; hourly_rental contracts are
    billed on the total booked time.
    """

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the room."""

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"), index=True)
    """Reference to the clinic that owns this room."""

    name: Mapped[str] = mapped_column(String(255))
    """Name of the room (e.g., "Sala 1"). Unique within the clinic."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional description of the room."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    clinic = relationship("Clinic", back_populates="rooms")
    bookings = relationship("RoomBooking", back_populates="room", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint('clinic_id', 'name', name='uq_room_clinic_name'),
    )
