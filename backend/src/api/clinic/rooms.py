# pyright: reportMissingTypeStubs=false
"""
Room and room booking API endpoints.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, service_error_to_http
from core.database import get_db
from models import Clinic, Room, RoomBooking
from services.room_service import RoomService
from utils.datetime_utils import ensure_brazil, get_month_bounds

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class RoomCreateRequest(BaseModel):
    """Request model for creating a room."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class RoomResponse(BaseModel):
    """Response model for a room."""
    id: int
    name: str
    description: Optional[str] = None


class RoomListResponse(BaseModel):
    """Response model for the room list."""
    rooms: List[RoomResponse]


class BookingCreateRequest(BaseModel):
    """Request model for booking a room. end_time defaults to a one-hour slot."""
    room_id: int
    user_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    patient_id: Optional[int] = None


class BookingResponse(BaseModel):
    """Response model for a room booking."""
    id: int
    room_id: int
    room_name: Optional[str] = None
    user_id: int
    patient_id: Optional[int] = None
    start_time: datetime
    end_time: datetime


class BookingListResponse(BaseModel):
    """Response model for the booking list."""
    bookings: List[BookingResponse]


def _booking_response(booking: RoomBooking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        room_id=booking.room_id,
        room_name=booking.room.name if booking.room else None,
        user_id=booking.user_id,
        patient_id=booking.patient_id,
        start_time=ensure_brazil(booking.start_time),
        end_time=ensure_brazil(booking.end_time)
    )


def _room_response(room: Room) -> RoomResponse:
    return RoomResponse(id=room.id, name=room.name, description=room.description)


# ===== API Endpoints =====

@router.get("/rooms", summary="List rooms")
async def list_rooms(
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> RoomListResponse:
    """List the clinic's rooms."""
    try:
        rooms = RoomService.list_rooms(db, clinic.id)
        return RoomListResponse(rooms=[_room_response(r) for r in rooms])
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list rooms for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar as salas"
        )


@router.post("/rooms", summary="Create a room", status_code=http_status.HTTP_201_CREATED)
async def create_room(
    request: RoomCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> RoomResponse:
    """Create a room; names are unique per clinic."""
    try:
        room = RoomService.create_room(db, clinic.id, request.name, request.description)
        db.commit()
        return _room_response(room)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create room for clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível criar a sala"
        )


@router.delete("/rooms/{room_id}", summary="Delete a room", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> None:
    """Delete a room that has never been booked."""
    try:
        RoomService.delete_room(db, clinic.id, room_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to delete room {room_id} in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível excluir a sala"
        )


@router.get("/bookings", summary="List room bookings for a month")
async def list_bookings(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1),
    user_id: Optional[int] = Query(None, description="Only this doctor's bookings"),
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> BookingListResponse:
    """List bookings starting in the month, optionally for one doctor."""
    try:
        try:
            start, end = get_month_bounds(year, month)
        except ValueError:
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail="Mês ou ano inválido"
            )
        bookings = RoomService.list_bookings(db, clinic.id, start, end, user_id=user_id)
        return BookingListResponse(bookings=[_booking_response(b) for b in bookings])
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list bookings for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar as reservas"
        )


@router.post("/bookings", summary="Book a room", status_code=http_status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> BookingResponse:
    """Book a room for a doctor; overlapping bookings of the same room are rejected."""
    try:
        booking = RoomService.book_room(
            db,
            clinic.id,
            request.room_id,
            request.user_id,
            request.start_time,
            end_time=request.end_time,
            patient_id=request.patient_id
        )
        db.commit()
        db.refresh(booking)
        return _booking_response(booking)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to book room in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível reservar a sala"
        )
