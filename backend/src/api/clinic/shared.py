# pyright: reportMissingTypeStubs=false
"""
Shared dependencies and helpers for clinic API endpoints.
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Path
from fastapi import status as http_status
from sqlalchemy.orm import Session

from core.database import get_db
from models import Clinic
from utils.datetime_utils import get_month_bounds

logger = logging.getLogger(__name__)


def get_active_clinic(
    clinic_id: int = Path(..., description="Clinic ID"),
    db: Session = Depends(get_db)
) -> Clinic:
    """Resolve the clinic in the path, 404 when it does not exist or is inactive."""
    clinic = db.query(Clinic).filter(
        Clinic.id == clinic_id,
        Clinic.is_active == True
    ).first()
    if not clinic:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail="Clínica não encontrada"
        )
    return clinic


def service_error_to_http(e: ValueError) -> HTTPException:
    """
    Map a service-layer ValueError to an HTTP error.

    Lookups that fail ("... not found") become 404, everything else is a 400.
    """
    message = str(e)
    if message.lower().endswith("not found"):
        return HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail=message)
    return HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail=message)


def parse_optional_month(month: Optional[int], year: Optional[int]) -> Optional[Tuple]:
    """
    Turn optional month/year query params into month bounds.

    Returns:
        (start, end) datetimes, or None when neither is given

    Raises:
        HTTPException: If only one is given or they do not form a valid month
    """
    if month is None and year is None:
        return None
    if month is None or year is None:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Informe mês e ano juntos"
        )
    try:
        return get_month_bounds(year, month)
    except ValueError:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail="Mês ou ano inválido"
        )


def money(value: Optional[Decimal]) -> Optional[float]:
    """Decimal amount as a JSON number."""
    if value is None:
        return None
    return float(Decimal(str(value)))
