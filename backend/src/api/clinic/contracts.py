# pyright: reportMissingTypeStubs=false
"""
Doctor contract API endpoints.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, money, service_error_to_http
from core.database import get_db
from models import Clinic
from services.closing_types import ContractKind
from services.contract_service import ContractService

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class ContractUpsertRequest(BaseModel):
    """Request model for creating or replacing a doctor's contract."""
    contract_kind: ContractKind
    rate: Decimal = Field(..., gt=0, description="Hourly price, or revenue percentage")


class ContractResponse(BaseModel):
    """Response model for a doctor contract."""
    user_id: int
    contract_kind: str
    rate: float
    is_active: bool


class DoctorContractResponse(BaseModel):
    """A doctor of the clinic with their contract, if any."""
    user_id: int
    full_name: str
    contract_kind: Optional[str] = None
    rate: Optional[float] = None
    is_active: bool


class DoctorContractListResponse(BaseModel):
    """Response model for the doctor/contract list."""
    doctors: List[DoctorContractResponse]


# ===== API Endpoints =====

@router.get("/contracts", summary="List doctors and their contracts")
async def list_contracts(
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> DoctorContractListResponse:
    """List the clinic's active doctors with their contract terms."""
    try:
        doctors = ContractService.list_doctors_with_contracts(db, clinic.id)
        return DoctorContractListResponse(
            doctors=[
                DoctorContractResponse(
                    user_id=d['user_id'],
                    full_name=d['full_name'],
                    contract_kind=d['contract_kind'],
                    rate=money(d['rate']),
                    is_active=d['is_active']
                )
                for d in doctors
            ]
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list contracts for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar os contratos"
        )


@router.put("/contracts/{user_id}", summary="Create or replace a doctor's contract")
async def upsert_contract(
    user_id: int,
    request: ContractUpsertRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ContractResponse:
    """Save the doctor's contract; an existing contract is replaced."""
    try:
        contract = ContractService.upsert_contract(
            db, clinic.id, user_id, request.contract_kind, request.rate
        )
        db.commit()
        return ContractResponse(
            user_id=contract.user_id,
            contract_kind=contract.contract_kind,
            rate=money(contract.rate),
            is_active=contract.is_active
        )
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to save contract for doctor {user_id} in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível salvar o contrato"
        )


@router.delete("/contracts/{user_id}", summary="Deactivate a doctor's contract")
async def deactivate_contract(
    user_id: int,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ContractResponse:
    """Deactivate the contract; the doctor is no longer billed."""
    try:
        contract = ContractService.deactivate_contract(db, clinic.id, user_id)
        db.commit()
        return ContractResponse(
            user_id=contract.user_id,
            contract_kind=contract.contract_kind,
            rate=money(contract.rate),
            is_active=contract.is_active
        )
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to deactivate contract for doctor {user_id} in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível desativar o contrato"
        )
