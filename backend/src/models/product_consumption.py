"""
Product consumption model.

Each row records a doctor using a quantity of a product. The unit cost is
frozen when the row is created and is the authoritative cost for billing,
regardless of later changes to Product.distributor_cost.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import TIMESTAMP, Integer, ForeignKey, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class ProductConsumption(Base):
    """Consumption event of a product by a doctor, optionally for a patient."""

    __tablename__ = "product_consumptions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    """The doctor who consumed the product."""

    patient_id: Mapped[Optional[int]] = mapped_column(ForeignKey("patients.id", ondelete="SET NULL"), nullable=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"))

    quantity: Mapped[int] = mapped_column(Integer)

    frozen_unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    """Unit cost at the moment of consumption (distributor cost with markup)."""

    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 4))
    """frozen_unit_cost * quantity, stored for listing."""

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    """Attribution timestamp for billing periods."""

    # Relationships
    product = relationship("Product", back_populates="consumptions")
    patient = relationship("Patient")
    user = relationship("User")

    __table_args__ = (
        Index('idx_product_consumptions_clinic_created', 'clinic_id', 'created_at'),
    )
