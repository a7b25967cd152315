# pyright: reportMissingTypeStubs=false
"""
Clinic Management Backend API

A FastAPI application for multi-tenant clinics that rent rooms to doctors.

Features:
- Monthly financial closing per doctor (room rental, partnership revenue,
  product consumption, shared expenses)
- Doctor contracts, rooms and bookings, inventory and expense ledgers
- PostgreSQL database with SQLAlchemy ORM
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import clinic
from core.config import PARTNERSHIP_REVENUE_MODE
from core.constants import CORS_ORIGINS
from services.closing_errors import ClosingError, DataUnavailable, InvalidPeriod, TenantNotFound

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)
logger.info("🏥 Clinic Management API starting...")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("🚀 Starting Clinic Management Backend API")
    logger.info(f"Partnership revenue mode: {PARTNERSHIP_REVENUE_MODE}")

    yield

    logger.info("🛑 Shutting down Clinic Management Backend API")


# Create FastAPI application
app = FastAPI(
    title="Clinic Management Backend",
    description="Room rental, inventory and monthly closing for multi-tenant clinics",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    clinic.router,
    prefix="/api/clinics/{clinic_id}",
    responses={
        400: {"description": "Bad request"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
        503: {"description": "Data unavailable"},
    },
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Clinic Management Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Global exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Erro interno do servidor", "type": "internal_error"},
    )


@app.exception_handler(ClosingError)
async def closing_error_handler(request: Request, exc: ClosingError):
    """Handle monthly closing errors, tagged by kind."""
    if isinstance(exc, InvalidPeriod):
        status_code = 400
        logger.warning(f"Invalid closing period: {exc}")
    elif isinstance(exc, TenantNotFound):
        status_code = 404
        logger.warning(f"Closing requested for unknown clinic: {exc}")
    elif isinstance(exc, DataUnavailable):
        status_code = 503
        logger.error(f"Closing data unavailable: {exc}")
    else:
        status_code = 500
        logger.error(f"Closing failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "type": exc.error_type},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"},
    )
