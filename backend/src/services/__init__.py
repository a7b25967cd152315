"""
Services package for shared business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .closing_service import ClosingService
from .contract_service import ContractService
from .doctor_service import DoctorService
from .expense_service import ExpenseService, RevenueService
from .inventory_service import InventoryService
from .patient_service import PatientService
from .room_service import RoomService

__all__ = [
    "ClosingService",
    "ContractService",
    "DoctorService",
    "ExpenseService",
    "RevenueService",
    "InventoryService",
    "PatientService",
    "RoomService",
]
