"""
Service for the product inventory and consumption log.

When a doctor consumes a product, its cost is frozen on the consumption row
(distributor cost plus markup). Later repricing of the product never changes
what was already consumed; the monthly closing bills the frozen cost.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from core.config import CONSUMPTION_MARKUP
from models import Patient, Product, ProductConsumption, UserClinicAssociation
from utils.datetime_utils import ensure_brazil

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for inventory operations."""

    @staticmethod
    def create_product(
        db: Session,
        clinic_id: int,
        name: str,
        distributor_cost: Decimal,
        stock_quantity: int = 0
    ) -> Product:
        """
        Register a product.

        Raises:
            ValueError: If the name is blank, the cost is negative or the stock is negative
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("name is required")
        if distributor_cost < 0:
            raise ValueError("distributor_cost must not be negative")
        if stock_quantity < 0:
            raise ValueError("stock_quantity must not be negative")

        product = Product(
            clinic_id=clinic_id,
            name=name,
            distributor_cost=distributor_cost,
            stock_quantity=stock_quantity
        )
        db.add(product)
        db.flush()
        return product

    @staticmethod
    def list_products(db: Session, clinic_id: int) -> List[Product]:
        """List a clinic's products by name."""
        return db.query(Product).filter(
            Product.clinic_id == clinic_id
        ).order_by(Product.name, Product.id).all()

    @staticmethod
    def update_product_cost(db: Session, clinic_id: int, product_id: int, distributor_cost: Decimal) -> Product:
        """
        Reprice a product. Existing consumption rows keep their frozen cost.

        Raises:
            ValueError: If the product does not exist or the cost is negative
        """
        if distributor_cost < 0:
            raise ValueError("distributor_cost must not be negative")
        product = InventoryService._get_product(db, clinic_id, product_id)
        product.distributor_cost = distributor_cost
        db.flush()
        return product

    @staticmethod
    def frozen_unit_cost(distributor_cost: Decimal) -> Decimal:
        """Unit cost charged to doctors: distributor cost plus markup."""
        return Decimal(str(distributor_cost)) * CONSUMPTION_MARKUP

    @staticmethod
    def log_consumption(
        db: Session,
        clinic_id: int,
        user_id: int,
        product_id: int,
        quantity: int,
        patient_id: Optional[int] = None,
        consumed_at: Optional[datetime] = None
    ) -> ProductConsumption:
        """
        Record a doctor consuming a product and take it out of stock.

        Args:
            consumed_at: Optional attribution time (defaults to now)

        Raises:
            ValueError: If the quantity is not positive, the doctor, product or
                patient does not belong to the clinic, or the stock is insufficient
        """
        if quantity <= 0:
            raise ValueError("quantity must be positive")

        association = db.query(UserClinicAssociation).filter(
            UserClinicAssociation.clinic_id == clinic_id,
            UserClinicAssociation.user_id == user_id
        ).first()
        if not association:
            raise ValueError("Doctor not found in clinic")

        product = InventoryService._get_product(db, clinic_id, product_id)

        if patient_id is not None:
            patient = db.query(Patient).filter(
                Patient.id == patient_id,
                Patient.clinic_id == clinic_id,
                Patient.is_deleted == False
            ).first()
            if not patient:
                raise ValueError("Patient not found")

        if product.stock_quantity < quantity:
            raise ValueError(
                f"Insufficient stock for product {product.name}: "
                f"{product.stock_quantity} available, {quantity} requested"
            )

        unit_cost = InventoryService.frozen_unit_cost(product.distributor_cost)
        consumption = ProductConsumption(
            clinic_id=clinic_id,
            user_id=user_id,
            patient_id=patient_id,
            product_id=product.id,
            quantity=quantity,
            frozen_unit_cost=unit_cost,
            total_cost=unit_cost * Decimal(quantity),
            created_at=ensure_brazil(consumed_at)
        )
        product.stock_quantity -= quantity
        db.add(consumption)
        db.flush()

        logger.info(
            f"Logged consumption of {quantity}x product {product.id} by doctor {user_id} "
            f"in clinic {clinic_id} (unit cost {unit_cost})"
        )
        return consumption

    @staticmethod
    def list_consumption_for_doctor(db: Session, clinic_id: int, user_id: int) -> List[Dict[str, Any]]:
        """
        A doctor's consumption history, newest first.

        Returns:
            List of dicts with product and patient names resolved
        """
        events = db.query(ProductConsumption).options(
            joinedload(ProductConsumption.product),
            joinedload(ProductConsumption.patient)
        ).filter(
            ProductConsumption.clinic_id == clinic_id,
            ProductConsumption.user_id == user_id
        ).order_by(ProductConsumption.created_at.desc(), ProductConsumption.id.desc()).all()

        return [
            {
                'id': event.id,
                'created_at': event.created_at,
                'product_name': event.product.name if event.product else None,
                'patient_name': event.patient.full_name if event.patient else None,
                'quantity': event.quantity,
                'frozen_unit_cost': Decimal(str(event.frozen_unit_cost)),
                'total_cost': Decimal(str(event.total_cost)),
            }
            for event in events
        ]

    @staticmethod
    def _get_product(db: Session, clinic_id: int, product_id: int) -> Product:
        product = db.query(Product).filter(
            Product.id == product_id,
            Product.clinic_id == clinic_id
        ).first()
        if not product:
            raise ValueError("Product not found")
        return product
