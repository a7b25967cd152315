"""
Errors raised by the monthly closing.

Each error carries an error_type tag that the API uses in its response body.
"""


class ClosingError(Exception):
    """Base class for monthly closing errors."""
    error_type = "closing_error"


class InvalidPeriod(ClosingError, ValueError):
    """Month outside 1-12 or year outside the supported calendar range."""
    error_type = "invalid_period"


class TenantNotFound(ClosingError):
    """The clinic does not exist (or is inactive)."""
    error_type = "tenant_not_found"

    def __init__(self, clinic_id: int):
        super().__init__(f"Clinic {clinic_id} not found")
        self.clinic_id = clinic_id


class DataUnavailable(ClosingError):
    """A required input could not be read. Safe to retry the whole closing."""
    error_type = "data_unavailable"
