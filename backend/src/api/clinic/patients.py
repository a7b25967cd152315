# pyright: reportMissingTypeStubs=false
"""
Patient register and contact log API endpoints.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, service_error_to_http
from core.constants import DEFAULT_PATIENT_INTERACTION_TYPE
from core.database import get_db
from models import Clinic, Patient, PatientInteraction
from services.patient_service import PatientService
from utils.datetime_utils import ensure_brazil

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class PatientCreateRequest(BaseModel):
    """Request model for registering a patient."""
    full_name: str = Field(..., min_length=1, max_length=255)
    cpf: Optional[str] = Field(None, max_length=14)
    phone_number: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class PatientResponse(BaseModel):
    """Response model for a patient."""
    id: int
    full_name: str
    cpf: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class PatientListResponse(BaseModel):
    """Response model for the patient list."""
    patients: List[PatientResponse]


class InteractionCreateRequest(BaseModel):
    """Request model for logging a contact with a patient."""
    interaction_type: str = DEFAULT_PATIENT_INTERACTION_TYPE
    summary: str = Field(..., min_length=1)
    handled_by_user_id: Optional[int] = None


class InteractionResponse(BaseModel):
    """Response model for a patient interaction."""
    id: int
    patient_id: int
    interaction_type: str
    summary: str
    handled_by_user_id: Optional[int] = None
    created_at: datetime


class InteractionListResponse(BaseModel):
    """Response model for a patient's contact log."""
    interactions: List[InteractionResponse]


def _patient_response(patient: Patient) -> PatientResponse:
    return PatientResponse(
        id=patient.id,
        full_name=patient.full_name,
        cpf=patient.cpf,
        phone_number=patient.phone_number,
        email=patient.email,
        notes=patient.notes,
        created_at=ensure_brazil(patient.created_at)
    )


def _interaction_response(interaction: PatientInteraction) -> InteractionResponse:
    return InteractionResponse(
        id=interaction.id,
        patient_id=interaction.patient_id,
        interaction_type=interaction.interaction_type,
        summary=interaction.summary,
        handled_by_user_id=interaction.handled_by_user_id,
        created_at=ensure_brazil(interaction.created_at)
    )


# ===== API Endpoints =====

@router.get("/patients", summary="List patients")
async def list_patients(
    search: Optional[str] = Query(None, description="Name, CPF, phone or e-mail fragment"),
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> PatientListResponse:
    """List the clinic's patients ordered by name, optionally filtered."""
    try:
        patients = PatientService.list_patients_for_clinic(db, clinic.id, search)
        return PatientListResponse(patients=[_patient_response(p) for p in patients])
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list patients for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar os pacientes"
        )


@router.post("/patients", summary="Register a patient", status_code=http_status.HTTP_201_CREATED)
async def create_patient(
    request: PatientCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> PatientResponse:
    """Register a patient in the clinic."""
    try:
        patient = PatientService.create_patient(
            db,
            clinic.id,
            request.full_name,
            phone_number=request.phone_number,
            email=request.email,
            cpf=request.cpf,
            notes=request.notes
        )
        db.commit()
        return _patient_response(patient)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create patient for clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível cadastrar o paciente"
        )


@router.delete("/patients/{patient_id}", summary="Delete a patient", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: int,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> None:
    """Delete a patient; their booking and consumption history is kept."""
    try:
        PatientService.delete_patient(db, clinic.id, patient_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to delete patient {patient_id} in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível excluir o paciente"
        )


@router.get("/patients/{patient_id}/interactions", summary="A patient's contact log")
async def list_interactions(
    patient_id: int,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> InteractionListResponse:
    """List the patient's interactions, newest first."""
    try:
        interactions = PatientService.list_interactions(db, clinic.id, patient_id)
        return InteractionListResponse(interactions=[_interaction_response(i) for i in interactions])
    except ValueError as e:
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list interactions for patient {patient_id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar as interações"
        )


@router.post(
    "/patients/{patient_id}/interactions",
    summary="Log a contact with a patient",
    status_code=http_status.HTTP_201_CREATED
)
async def create_interaction(
    patient_id: int,
    request: InteractionCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> InteractionResponse:
    """Record a call, message or visit with the patient."""
    try:
        interaction = PatientService.add_interaction(
            db,
            clinic.id,
            patient_id,
            request.interaction_type,
            request.summary,
            handled_by_user_id=request.handled_by_user_id
        )
        db.commit()
        return _interaction_response(interaction)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to record interaction for patient {patient_id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível registrar a interação"
        )
