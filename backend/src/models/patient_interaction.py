"""
Patient interaction model: the clinic's contact log with a patient.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, ForeignKey, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class PatientInteraction(Base):
    """A single contact with a patient (call, e-mail, WhatsApp, visit)."""

    __tablename__ = "patient_interactions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"))
    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id", ondelete="CASCADE"))
    interaction_type: Mapped[str] = mapped_column(String(50))  # See PATIENT_INTERACTION_TYPES
    summary: Mapped[str] = mapped_column(Text)
    handled_by_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    patient = relationship("Patient", back_populates="interactions")
    handled_by = relationship("User")

    __table_args__ = (
        Index('idx_patient_interactions_patient_created', 'patient_id', 'created_at'),
    )
