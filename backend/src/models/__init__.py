# Package initialization
# Import all models to ensure relationships are properly established
from .clinic import Clinic
from .user import User
from .user_clinic_association import UserClinicAssociation
from .doctor_contract import DoctorContract
from .patient import Patient
from .patient_interaction import PatientInteraction
from .room import Room
from .room_booking import RoomBooking
from .product import Product
from .product_consumption import ProductConsumption
from .clinic_expense import ClinicExpense
from .revenue_entry import RevenueEntry

__all__ = [
    "Clinic",
    "User",
    "UserClinicAssociation",
    "DoctorContract",
    "Patient",
    "PatientInteraction",
    "Room",
    "RoomBooking",
    "Product",
    "ProductConsumption",
    "ClinicExpense",
    "RevenueEntry",
]
