# pyright: reportMissingTypeStubs=false
"""
Financial API endpoints: monthly closing, shared expenses and revenue entries.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.clinic.shared import get_active_clinic, money, parse_optional_month, service_error_to_http
from core.database import get_db
from models import Clinic
from services.closing_errors import ClosingError
from services.closing_report import build_report_table, serialize_closing_row, summarize_closing
from services.closing_service import ClosingService
from services.expense_service import ExpenseService, RevenueService

logger = logging.getLogger(__name__)

router = APIRouter()


# ===== Request/Response Models =====

class ClosingRowResponse(BaseModel):
    """One doctor's line of the monthly closing."""
    doctor_id: int
    doctor_name: str
    contract_kind: Optional[str] = None
    booked_hours: float
    room_cost: float
    partnership_revenue: float
    product_cost: float
    shared_expense_share: float
    final_invoice_amount: float


class ClosingTotalsResponse(BaseModel):
    """Column totals of the monthly closing."""
    room_cost: float
    partnership_revenue: float
    product_cost: float
    shared_expense_share: float
    final_invoice_amount: float


class ClosingResponse(BaseModel):
    """Response model for the monthly closing."""
    clinic_id: int
    month: int
    year: int
    rows: List[ClosingRowResponse]
    totals: ClosingTotalsResponse


class ClosingTableResponse(BaseModel):
    """Closing report laid out for export."""
    title: str
    headers: List[str]
    rows: List[List[str]]


class ExpenseCreateRequest(BaseModel):
    """Request model for recording a shared expense."""
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0)
    expense_date: date


class ExpenseResponse(BaseModel):
    """Response model for a shared expense."""
    id: int
    description: str
    amount: float
    expense_date: date
    created_at: datetime


class ExpenseListResponse(BaseModel):
    """Response model for the expense list."""
    expenses: List[ExpenseResponse]
    total: float


class RevenueEntryCreateRequest(BaseModel):
    """Request model for recording a doctor's gross revenue."""
    user_id: int
    amount: Decimal = Field(..., gt=0)
    revenue_date: date
    description: Optional[str] = Field(None, max_length=255)


class RevenueEntryResponse(BaseModel):
    """Response model for a revenue entry."""
    id: int
    user_id: int
    amount: float
    revenue_date: date
    description: Optional[str] = None
    created_at: datetime


# ===== API Endpoints =====

@router.get("/closing", summary="Compute the monthly closing")
async def get_monthly_closing(
    clinic_id: int,
    month: int = Query(..., description="Month number (1-12)"),
    year: int = Query(..., description="Calendar year"),
    db: Session = Depends(get_db)
) -> ClosingResponse:
    """
    Compute what each doctor owes the clinic for the month.

    Invalid periods, unknown clinics and unreadable data are reported by the
    application-level closing error handlers.
    """
    try:
        rows = ClosingService.for_session(db).compute_closing(clinic_id, month, year)
        totals = summarize_closing(rows)
        return ClosingResponse(
            clinic_id=clinic_id,
            month=month,
            year=year,
            rows=[
                ClosingRowResponse(**{
                    key: (money(value) if isinstance(value, Decimal) else value)
                    for key, value in serialize_closing_row(row).items()
                })
                for row in rows
            ],
            totals=ClosingTotalsResponse(**{key: money(value) for key, value in totals.items()})
        )
    except (HTTPException, ClosingError):
        raise
    except Exception as e:
        logger.exception(f"Failed to compute closing for clinic {clinic_id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível gerar o fechamento"
        )


@router.get("/closing/table", summary="Monthly closing laid out for export")
async def get_monthly_closing_table(
    clinic_id: int,
    month: int = Query(..., description="Month number (1-12)"),
    year: int = Query(..., description="Calendar year"),
    db: Session = Depends(get_db)
) -> ClosingTableResponse:
    """Title, headers and formatted rows of the closing report."""
    try:
        rows = ClosingService.for_session(db).compute_closing(clinic_id, month, year)
        return ClosingTableResponse(**build_report_table(rows, month, year))
    except (HTTPException, ClosingError):
        raise
    except Exception as e:
        logger.exception(f"Failed to build closing table for clinic {clinic_id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível gerar o relatório de fechamento"
        )


@router.get("/expenses", summary="List shared expenses")
async def list_expenses(
    month: Optional[int] = Query(None, description="Filter by month (requires year)"),
    year: Optional[int] = Query(None, description="Filter by year (requires month)"),
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ExpenseListResponse:
    """List the clinic's shared expenses, newest first."""
    bounds = parse_optional_month(month, year)
    start_date = bounds[0].date() if bounds else None
    end_date = bounds[1].date() if bounds else None
    try:
        expenses = ExpenseService.list_expenses(db, clinic.id, start_date, end_date)
        total = ExpenseService.total_expenses(db, clinic.id, start_date, end_date)
        return ExpenseListResponse(
            expenses=[
                ExpenseResponse(
                    id=e.id,
                    description=e.description,
                    amount=money(e.amount),
                    expense_date=e.expense_date,
                    created_at=e.created_at
                )
                for e in expenses
            ],
            total=money(total)
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to list expenses for clinic {clinic.id}: {e}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível listar as despesas"
        )


@router.post("/expenses", summary="Record a shared expense", status_code=http_status.HTTP_201_CREATED)
async def create_expense(
    request: ExpenseCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> ExpenseResponse:
    """Record a shared expense; it is split among the doctors billed that month."""
    try:
        expense = ExpenseService.add_expense(
            db, clinic.id, request.description, request.amount, request.expense_date
        )
        db.commit()
        db.refresh(expense)
        return ExpenseResponse(
            id=expense.id,
            description=expense.description,
            amount=money(expense.amount),
            expense_date=expense.expense_date,
            created_at=expense.created_at
        )
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create expense for clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível registrar a despesa"
        )


@router.post("/revenue-entries", summary="Record a doctor's gross revenue", status_code=http_status.HTTP_201_CREATED)
async def create_revenue_entry(
    request: RevenueEntryCreateRequest,
    clinic: Clinic = Depends(get_active_clinic),
    db: Session = Depends(get_db)
) -> RevenueEntryResponse:
    """Record gross revenue used by revenue-share contracts."""
    try:
        entry = RevenueService.add_revenue_entry(
            db, clinic.id, request.user_id, request.amount, request.revenue_date, request.description
        )
        db.commit()
        db.refresh(entry)
        return RevenueEntryResponse(
            id=entry.id,
            user_id=entry.user_id,
            amount=money(entry.amount),
            revenue_date=entry.revenue_date,
            description=entry.description,
            created_at=entry.created_at
        )
    except ValueError as e:
        db.rollback()
        raise service_error_to_http(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to create revenue entry for clinic {clinic.id}: {e}")
        db.rollback()
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Não foi possível registrar a receita"
        )
