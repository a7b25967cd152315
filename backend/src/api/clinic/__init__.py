# pyright: reportMissingTypeStubs=false
"""
Clinic API modules.

Endpoints are organized by domain and mounted together under
/api/clinics/{clinic_id}.
"""

from fastapi import APIRouter

from api.clinic.contracts import router as contracts_router
from api.clinic.doctors import router as doctors_router
from api.clinic.finance import router as finance_router
from api.clinic.inventory import router as inventory_router
from api.clinic.patients import router as patients_router
from api.clinic.rooms import router as rooms_router

router = APIRouter()
router.include_router(finance_router, tags=["finance"])
router.include_router(doctors_router, tags=["doctors"])
router.include_router(contracts_router, tags=["contracts"])
router.include_router(patients_router, tags=["patients"])
router.include_router(inventory_router, tags=["inventory"])
router.include_router(rooms_router, tags=["rooms"])

__all__ = [
    'router',
    'finance_router',
    'doctors_router',
    'contracts_router',
    'patients_router',
    'inventory_router',
    'rooms_router',
]
