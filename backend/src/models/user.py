"""
User model for clinic personnel.

All clinic personnel (admins, doctors) are stored in this single table.
Roles and display names are clinic-specific and live in UserClinicAssociation.
"""

from datetime import datetime

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class User(Base):
    """User model for all clinic personnel (admins, doctors)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    email: Mapped[str] = mapped_column(String(255), unique=True)  # Globally unique (not per-clinic)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    clinic_associations = relationship(
        "UserClinicAssociation",
        back_populates="user",
        cascade="all, delete-orphan"
    )
    """User-clinic associations for multi-clinic support. Roles and names are clinic-specific."""

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
