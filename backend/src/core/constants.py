"""Application constants and configuration values."""

from decimal import Decimal

from core.config import FRONTEND_URL

# Database field lengths
MAX_STRING_LENGTH = 255

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# CORS origins for development and production
# Note: production URLs should be added via FRONTEND_URL environment variable
_CORS_ORIGINS_RAW = [
    "http://localhost:5173",      # React dev server (Vite) - localhost
    FRONTEND_URL,
]

# Filter out None values and empty strings to avoid CORS errors
CORS_ORIGINS = [origin for origin in _CORS_ORIGINS_RAW if origin and origin.strip()]

# Roles stored in UserClinicAssociation.roles
ROLE_ADMIN = "admin"
ROLE_DOCTOR = "doctor"

# Money
MONEY_QUANTUM = Decimal('0.01')  # Presentation rounding (2 decimal places)
CALCULATION_TOLERANCE = Decimal('0.01')  # Tolerance for split/sum checks (1 cent)
CURRENCY_PREFIX = "R$"

# Contracts
MAX_REVENUE_SHARE_PERCENTAGE = Decimal('100')

# Closing report
CLOSING_REPORT_TITLE = "Relatório de Fechamento - {month}/{year}"
CLOSING_REPORT_HEADERS = ['Médico', 'Aluguel', 'Parceria', 'Produtos', 'Condomínio', 'FATURA FINAL']

# Seconds per hour, for booked-hours conversion
SECONDS_PER_HOUR = Decimal('3600')

# Patient relationship log
PATIENT_INTERACTION_TYPES = ('Ligação', 'Email', 'WhatsApp', 'Consulta', 'Outro')
DEFAULT_PATIENT_INTERACTION_TYPE = 'Ligação'
