"""Custom exceptions shared by the ETL steps, the pipeline and the API."""

from typing import Any, Dict, List, Optional


class ChurnAnalyticsError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class SchemaMismatchError(ChurnAnalyticsError):
    """Raised when the raw file does not carry the expected columns."""

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing required columns: {', '.join(missing)}", status_code=422)
        self.missing = missing


class DataQualityError(ChurnAnalyticsError):
    """Raised when a hard data-quality assertion fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422)
        self.details = details or {}


class NotFoundError(ChurnAnalyticsError):
    """Raised when a requested analysis or customer is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)
