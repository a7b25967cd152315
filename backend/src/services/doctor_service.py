"""
Service for adding doctors to a clinic and removing them.

A doctor is a User with an active UserClinicAssociation carrying the "doctor"
role. Users are global (unique e-mail), so the same person can work at several
clinics with a different display name in each. Removing a doctor deactivates
the association and the contract; bookings and consumption stay on record.
"""

import logging

from sqlalchemy.orm import Session

from core.constants import ROLE_DOCTOR
from models import DoctorContract, User, UserClinicAssociation

logger = logging.getLogger(__name__)


class DoctorService:
    """Service for doctor membership operations."""

    @staticmethod
    def create_doctor(db: Session, clinic_id: int, email: str, full_name: str) -> UserClinicAssociation:
        """
        Add a doctor to a clinic.

        Creates the user when the e-mail is new. A previously removed doctor is
        reactivated with the new display name.

        Args:
            db: Database session
            clinic_id: ID of the clinic
            email: Doctor's e-mail (case-insensitive, globally unique)
            full_name: Display name in this clinic

        Returns:
            The active association

        Raises:
            ValueError: If the e-mail or name is invalid, or the user is already
                an active doctor of the clinic
        """
        email = (email or "").strip().lower()
        full_name = (full_name or "").strip()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValueError("Invalid email")
        if not full_name:
            raise ValueError("full_name is required")

        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(email=email)
            db.add(user)
            db.flush()

        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.user_id == user.id,
            UserClinicAssociation.clinic_id == clinic_id
        ).first()

        if association:
            if association.is_active and association.has_role(ROLE_DOCTOR):
                raise ValueError("Doctor already exists in clinic")
            # JSON column: assign a new list so the change is tracked
            roles = list(association.roles or [])
            if ROLE_DOCTOR not in roles:
                roles.append(ROLE_DOCTOR)
            association.roles = roles
            association.full_name = full_name
            association.is_active = True
        else:
            association = UserClinicAssociation(
                user_id=user.id,
                clinic_id=clinic_id,
                roles=[ROLE_DOCTOR],
                full_name=full_name,
                is_active=True
            )
            db.add(association)

        db.flush()
        logger.info(f"Added doctor {user.id} to clinic {clinic_id}")
        return association

    @staticmethod
    def deactivate_doctor(db: Session, clinic_id: int, user_id: int) -> UserClinicAssociation:
        """
        Remove a doctor from a clinic.

        The doctor's contract is deactivated as well, so later closings no
        longer bill them.

        Raises:
            ValueError: If the user is not an active doctor of the clinic
        """
        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.user_id == user_id,
            UserClinicAssociation.is_active == True
        ).first()
        if not association or not association.has_role(ROLE_DOCTOR):
            raise ValueError("Doctor not found")

        association.is_active = False

        contract = db.query(DoctorContract).filter(
            DoctorContract.clinic_id == clinic_id,
            DoctorContract.user_id == user_id,
            DoctorContract.is_active == True
        ).first()
        if contract:
            contract.is_active = False

        db.flush()
        logger.info(f"Removed doctor {user_id} from clinic {clinic_id}")
        return association
