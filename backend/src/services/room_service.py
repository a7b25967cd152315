"""
Service for rooms and room bookings.

Bookings are what hourly_rental contracts are billed on, so a room cannot be
double-booked and rooms with bookings cannot be deleted.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from core.config import DEFAULT_BOOKING_MINUTES
from models import Patient, Room, RoomBooking, UserClinicAssociation
from utils.datetime_utils import ensure_brazil

logger = logging.getLogger(__name__)


class RoomService:
    """Service for room and booking operations."""

    @staticmethod
    def create_room(db: Session, clinic_id: int, name: str, description: Optional[str] = None) -> Room:
        """
        Create a room.

        Raises:
            ValueError: If the name is blank or already used in the clinic
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("name is required")

        existing = db.query(Room).filter(
            Room.clinic_id == clinic_id,
            Room.name == name
        ).first()
        if existing:
            raise ValueError(f"Room '{name}' already exists")

        room = Room(clinic_id=clinic_id, name=name, description=description)
        db.add(room)
        db.flush()
        return room

    @staticmethod
    def list_rooms(db: Session, clinic_id: int) -> List[Room]:
        """List a clinic's rooms in creation order."""
        return db.query(Room).filter(
            Room.clinic_id == clinic_id
        ).order_by(Room.created_at, Room.id).all()

    @staticmethod
    def delete_room(db: Session, clinic_id: int, room_id: int) -> None:
        """
        Delete a room without bookings.

        Raises:
            ValueError: If the room does not exist or has bookings
        """
        room = RoomService._get_room(db, clinic_id, room_id)
        has_bookings = db.query(RoomBooking.id).filter(RoomBooking.room_id == room.id).first()
        if has_bookings:
            raise ValueError("Room has bookings and cannot be deleted")
        db.delete(room)
        db.flush()

    @staticmethod
    def book_room(
        db: Session,
        clinic_id: int,
        room_id: int,
        user_id: int,
        start_time: datetime,
        end_time: Optional[datetime] = None,
        patient_id: Optional[int] = None
    ) -> RoomBooking:
        """
        Book a room for a doctor.

        Args:
            start_time: Booking start
            end_time: Booking end (defaults to start + DEFAULT_BOOKING_MINUTES)
            patient_id: Optional patient seen during the booking

        Raises:
            ValueError: If the interval is empty, the room/doctor/patient does not
                belong to the clinic, or the room is already booked in the interval
        """
        start = ensure_brazil(start_time)
        end = ensure_brazil(end_time) if end_time else None
        assert start is not None
        if end is None:
            end = start + timedelta(minutes=DEFAULT_BOOKING_MINUTES)
        if end <= start:
            raise ValueError("end_time must be after start_time")

        room = RoomService._get_room(db, clinic_id, room_id)

        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.user_id == user_id,
            UserClinicAssociation.is_active == True
        ).first()
        if not association:
            raise ValueError("Doctor not found in clinic")

        if patient_id is not None:
            patient = db.query(Patient).filter(
                Patient.id == patient_id,
                Patient.clinic_id == clinic_id,
                Patient.is_deleted == False
            ).first()
            if not patient:
                raise ValueError("Patient not found")

        conflict = db.query(RoomBooking.id).filter(
            RoomBooking.room_id == room.id,
            RoomBooking.start_time < end,
            RoomBooking.end_time > start
        ).first()
        if conflict:
            raise ValueError(f"Room {room.name} is already booked in this interval")

        booking = RoomBooking(
            clinic_id=clinic_id,
            room_id=room.id,
            user_id=user_id,
            patient_id=patient_id,
            start_time=start,
            end_time=end
        )
        db.add(booking)
        db.flush()
        logger.info(f"Booked room {room.id} for doctor {user_id} from {start.isoformat()} to {end.isoformat()}")
        return booking

    @staticmethod
    def list_bookings(
        db: Session,
        clinic_id: int,
        start: datetime,
        end: datetime,
        user_id: Optional[int] = None
    ) -> List[RoomBooking]:
        """List bookings starting in [start, end), optionally for one doctor."""
        query = db.query(RoomBooking).options(joinedload(RoomBooking.room)).filter(
            RoomBooking.clinic_id == clinic_id,
            RoomBooking.start_time >= start,
            RoomBooking.start_time < end
        )
        if user_id is not None:
            query = query.filter(RoomBooking.user_id == user_id)
        return query.order_by(RoomBooking.start_time, RoomBooking.id).all()

    @staticmethod
    def _get_room(db: Session, clinic_id: int, room_id: int) -> Room:
        room = db.query(Room).filter(
            Room.id == room_id,
            Room.clinic_id == clinic_id
        ).first()
        if not room:
            raise ValueError("Room not found")
        return room
