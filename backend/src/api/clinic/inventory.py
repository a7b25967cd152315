# pyright: reportMissingTypeStubs=false
"""
Inventory API endpoints: products and product consumption.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, money, service_error_to_http
from core.database import get_db
from models import Clinic, Product
from services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class ProductCreateRequest(BaseModel):
    """Request model for registering a product."""
    name: str = Field(..., min_length=1, max_length=255)
    distributor_cost: Decimal = Field(..., ge=0)
    stock_quantity: int = Field(0, ge=0)


class ProductCostUpdateRequest(BaseModel):
    """Request model for repricing a product."""
    distributor_cost: Decimal = Field(..., ge=0)


class ProductResponse(BaseModel):
    """Response model for a product."""
    id: int
    name: str
    distributor_cost: float
    stock_quantity: int


class ProductListResponse(BaseModel):
    """Response model for the product list."""
    products: List[ProductResponse]


class ConsumptionCreateRequest(BaseModel):
    """Request model for logging a product consumption."""
    user_id: int
    product_id: int
    quantity: int = Field(..., ge=1)
    patient_id: Optional[int] = None
    consumed_at: Optional[datetime] = None


class ConsumptionResponse(BaseModel):
    """Response model for a consumption event."""
    id: int
    created_at: datetime
    product_name: Optional[str] = None
    patient_name: Optional[str] = None
    quantity: int
    frozen_unit_cost: float
    total_cost: float


class ConsumptionListResponse(BaseModel):
    """Response model for a doctor's consumption history."""
    consumptions: List[ConsumptionResponse]


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        distributor_cost=money(product.distributor_cost),
        stock_quantity=product.stock_quantity
    )


# ===== API Endpoints =====

@router.get("/products", summary="List products")
async def list_products(
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ProductListResponse:
    """List the clinic's products with stock."""
    try:
        products = InventoryService.list_products(db, clinic.id)
        return ProductListResponse(products=[_product_response(p) for p in products])
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list products for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar os produtos"
        )


@router.post("/products", summary="Register a product", status_code=http_status.HTTP_201_CREATED)
async def create_product(
    request: ProductCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ProductResponse:
    """Register a product in the clinic's inventory."""
    try:
        product = InventoryService.create_product(
            db, clinic.id, request.name, request.distributor_cost, request.stock_quantity
        )
        db.commit()
        return _product_response(product)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create product for clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível cadastrar o produto"
        )


@router.patch("/products/{product_id}", summary="Reprice a product")
async def update_product_cost(
    product_id: int,
    request: ProductCostUpdateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ProductResponse:
    """Change the distributor cost. Past consumption keeps its frozen cost."""
    try:
        product = InventoryService.update_product_cost(db, clinic.id, product_id, request.distributor_cost)
        db.commit()
        return _product_response(product)
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update product {product_id} in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível atualizar o produto"
        )


@router.post("/consumptions", summary="Log a product consumption", status_code=http_status.HTTP_201_CREATED)
async def log_consumption(
    request: ConsumptionCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ConsumptionResponse:
    """Record a doctor using a product; its cost is frozen and billed in the closing."""
    try:
        consumption = InventoryService.log_consumption(
            db,
            clinic.id,
            request.user_id,
            request.product_id,
            request.quantity,
            patient_id=request.patient_id,
            consumed_at=request.consumed_at
        )
        db.commit()
        db.refresh(consumption)
        return ConsumptionResponse(
            id=consumption.id,
            created_at=consumption.created_at,
            product_name=consumption.product.name if consumption.product else None,
            patient_name=consumption.patient.full_name if consumption.patient else None,
            quantity=consumption.quantity,
            frozen_unit_cost=money(consumption.frozen_unit_cost),
            total_cost=money(consumption.total_cost)
        )
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to log consumption in clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível registrar o consumo"
        )


@router.get("/consumptions", summary="A doctor's consumption history")
async def list_consumptions(
    user_id: int = Query(..., description="Doctor user ID"),
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ConsumptionListResponse:
    """List a doctor's product consumption, newest first."""
    try:
        events = InventoryService.list_consumption_for_doctor(db, clinic.id, user_id)
        return ConsumptionListResponse(
            consumptions=[
                ConsumptionResponse(
                    id=event['id'],
                    created_at=event['created_at'],
                    product_name=event['product_name'],
                    patient_name=event['patient_name'],
                    quantity=event['quantity'],
                    frozen_unit_cost=money(event['frozen_unit_cost']),
                    total_cost=money(event['total_cost'])
                )
                for event in events
            ]
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list consumption for doctor {user_id} in clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar o consumo"
        )
