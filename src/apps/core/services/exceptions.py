# src/apps/core/services/exceptions.py
"""
PIREP Service Exceptions

Custom exceptions for PIREP service operations.
"""

from typing import Optional, Dict, Any


class PirepServiceError(Exception):
    """Base exception for PIREP service errors."""

    def __init__(
        self,
        message: str,
        code: str = "PIREP_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class PirepNotFoundError(PirepServiceError):
    """Raised when a PIREP is not found."""

    def __init__(
        self,
        pirep_id: str = None,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"PIREP not found: {pirep_id}"
        super().__init__(
            message=msg,
            code="PIREP_NOT_FOUND",
            details=details or {"pirep_id": pirep_id}
        )


class PirepValidationError(PirepServiceError):
    """Raised when PIREP data validation fails."""

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code="PIREP_VALIDATION_ERROR",
            details=error_details
        )


class RankError(PirepServiceError):
    """Raised when rank administration fails."""

    def __init__(
        self,
        message: str,
        rank_id: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if rank_id:
            error_details["rank_id"] = rank_id
        super().__init__(
            message=message,
            code="RANK_ERROR",
            details=error_details
        )
