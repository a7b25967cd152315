"""
Product model for the clinic inventory.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, TIMESTAMP, Integer, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Product(Base):
    """Inventory product consumed by doctors during appointments."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    clinic_id: Mapped[int] = mapped_column(ForeignKey("clinics.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String(255))

    distributor_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    """Current purchase cost per unit. Repricing never affects past consumption."""

    stock_quantity: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    # Relationships
    clinic = relationship("Clinic", back_populates="products")
    consumptions = relationship("ProductConsumption", back_populates="product")
