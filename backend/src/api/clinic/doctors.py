# pyright: reportMissingTypeStubs=false
"""
Doctor membership API endpoints.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, service_error_to_http
from core.database import get_db
from models import Clinic, UserClinicAssociation
from services.doctor_service import DoctorService

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class DoctorCreateRequest(BaseModel):
    """Request model for adding a doctor to the clinic."""
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)


class DoctorResponse(BaseModel):
    """Response model for a doctor of the clinic."""
    user_id: int
    email: str
    full_name: str
    roles: List[str]
    is_active: bool


def _doctor_response(association: UserClinicAssociation) -> DoctorResponse:
    return DoctorResponse(
        user_id=association.user_id,
        email=association.user.email,
        full_name=association.full_name,
        roles=list(association.roles or []),
        is_active=association.is_active
    )


# ===== API Endpoints =====

@router.post("/doctors", summary="Add a doctor", status_code=http_status.HTTP_201_CREATED)
async def create_doctor(
    request: DoctorCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> DoctorResponse:
    """Add a doctor to the clinic, creating the user when the e-mail is new."""
    try:
        association = DoctorService.create_doctor(db, clinic.id, request.email, request.full_name)
        db.commit()
        return _doctor_response(association)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to add doctor to clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível cadastrar o médico"
        )


@router.delete("/doctors/{user_id}", summary="Remove a doctor")
async def delete_doctor(
    user_id: int,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> DoctorResponse:
    """Remove the doctor from the clinic and deactivate their contract."""
    try:
        association = DoctorService.deactivate_doctor(db, clinic.id, user_id)
        db.commit()
        return _doctor_response(association)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to remove doctor {user_id} from clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível remover o médico"
        )
