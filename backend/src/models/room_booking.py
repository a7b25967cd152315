"""
Room booking model.

A booking reserves a room for a doctor over [start_time, end_time). Bookings
are attributed to a billing period by their start time.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import TIMESTAMP, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class RoomBooking(Base):
    """Reservation of a room by a doctor, optionally for a patient."""

    __tablename__ = "room_bookings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"))
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """The doctor holding the booking."""

    patient_id: Mapped[Optional[int]] = mapped_column(ForeignKey("patients.id", ondelete="SET NULL"), nullable=True)

    start_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    end_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    room = relationship("Room", back_populates="bookings")
    user = relationship("User")
    patient = relationship("Patient")

    __table_args__ = (
        Index('idx_room_bookings_clinic_start', 'clinic_id', 'start_time'),
    )
