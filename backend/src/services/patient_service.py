"""
Patient service for shared patient business logic.

Covers the clinic's patient register and its contact log. Deleting a patient
is a soft delete: bookings and consumption events that name the patient stay
intact, while the patient disappears from lists and can no longer be booked.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.constants import PATIENT_INTERACTION_TYPES
from models import Patient, PatientInteraction, UserClinicAssociation
from utils.datetime_utils import brazil_now

logger = logging.getLogger(__name__)


class PatientService:
    """
    Service class for patient operations.

    Every lookup is restricted to the clinic, so a patient id from another
    clinic behaves as if it did not exist.
    """

    @staticmethod
    def create_patient(
        db: Session,
        clinic_id: int,
        full_name: str,
        phone_number: Optional[str] = None,
        email: Optional[str] = None,
        cpf: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Patient:
        """
        Create a new patient record.

        Args:
            db: Database session
            clinic_id: Clinic ID the patient belongs to
            full_name: Patient's full name (required)
            phone_number: Optional phone number
            email: Optional e-mail
            cpf: Optional CPF
            notes: Optional free-text notes

        Returns:
            Created Patient object

        Raises:
            ValueError: If the name is blank
        """
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValueError("full_name is required")

        patient = Patient(
            clinic_id=clinic_id,
            full_name=full_name,
            phone_number=phone_number or None,
            email=email or None,
            cpf=cpf or None,
            notes=notes or None
        )
        db.add(patient)
        db.flush()

        logger.info(f"Created patient {patient.id} for clinic {clinic_id}")
        return patient

    @staticmethod
    def list_patients_for_clinic(db: Session, clinic_id: int, search: Optional[str] = None) -> List[Patient]:
        """
        List all active patients for a clinic, ordered by name.

        Args:
            db: Database session
            clinic_id: Clinic ID
            search: Optional text matched against name, CPF, phone and e-mail

        Returns:
            List of active Patient objects for the clinic
        """
        query = db.query(Patient).filter(
            Patient.clinic_id == clinic_id,
            Patient.is_deleted == False
        )

        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.filter(or_(
                Patient.full_name.ilike(pattern),
                Patient.cpf.ilike(pattern),
                Patient.phone_number.ilike(pattern),
                Patient.email.ilike(pattern),
            ))

        patients = query.all()
        return sorted(patients, key=lambda p: (p.full_name.casefold(), p.id))

    @staticmethod
    def get_patient(db: Session, clinic_id: int, patient_id: int) -> Patient:
        """
        Get an active patient of the clinic.

        Raises:
            ValueError: If the patient does not exist, belongs to another
                clinic or was deleted
        """
        patient = db.query(Patient).filter(
            Patient.id == patient_id,
            Patient.clinic_id == clinic_id,
            Patient.is_deleted == False
        ).first()
        if not patient:
            raise ValueError("Patient not found")
        return patient

    @staticmethod
    def delete_patient(db: Session, clinic_id: int, patient_id: int) -> None:
        """Soft delete a patient, keeping their booking and consumption history."""
        patient = PatientService.get_patient(db, clinic_id, patient_id)
        patient.is_deleted = True
        patient.deleted_at = brazil_now()
        db.flush()
        logger.info(f"Deleted patient {patient_id} in clinic {clinic_id}")

    @staticmethod
    def add_interaction(
        db: Session,
        clinic_id: int,
        patient_id: int,
        interaction_type: str,
        summary: str,
        handled_by_user_id: Optional[int] = None
    ) -> PatientInteraction:
        """
        Record a contact with a patient.

        Args:
            db: Database session
            clinic_id: Clinic ID
            patient_id: Patient contacted
            interaction_type: One of PATIENT_INTERACTION_TYPES
            summary: What was discussed
            handled_by_user_id: Staff member who handled the contact

        Raises:
            ValueError: If the type is unknown, the summary is blank, or the
                patient or staff member is not part of the clinic
        """
        if interaction_type not in PATIENT_INTERACTION_TYPES:
            raise ValueError(f"Unknown interaction type: {interaction_type}")
        summary = (summary or "").strip()
        if not summary:
            raise ValueError("summary is required")

        patient = PatientService.get_patient(db, clinic_id, patient_id)

        if handled_by_user_id is not None:
            member = db.query(UserClinicAssociation.id).filter(
                UserClinicAssociation.clinic_id == clinic_id,
                UserClinicAssociation.user_id == handled_by_user_id,
                UserClinicAssociation.is_active == True
            ).first()
            if not member:
                raise ValueError("Staff member not found")

        interaction = PatientInteraction(
            clinic_id=clinic_id,
            patient_id=patient.id,
            interaction_type=interaction_type,
            summary=summary,
            handled_by_user_id=handled_by_user_id
        )
        db.add(interaction)
        db.flush()

        logger.info(f"Recorded {interaction_type} interaction {interaction.id} for patient {patient.id}")
        return interaction

    @staticmethod
    def list_interactions(db: Session, clinic_id: int, patient_id: int) -> List[PatientInteraction]:
        """List a patient's interactions, newest first."""
        patient = PatientService.get_patient(db, clinic_id, patient_id)
        return db.query(PatientInteraction).filter(
            PatientInteraction.clinic_id == clinic_id,
            PatientInteraction.patient_id == patient.id
        ).order_by(PatientInteraction.created_at.desc(), PatientInteraction.id.desc()).all()
