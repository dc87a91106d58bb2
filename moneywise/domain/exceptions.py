"""Domain-specific exceptions"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainException):
    """Input is malformed or out of range"""

    pass


class NotFoundError(DomainException):
    """Entity is missing or not owned by the caller"""

    pass


class ConflictError(DomainException):
    """Entity clashes with an existing one"""

    pass


class InsufficientFundsError(DomainException):
    """Savings Goal balance cannot cover a transfer"""

    pass


class UpstreamError(DomainException):
    """An external collaborator failed"""

    pass


class CurrencyConversionError(UpstreamError):
    """Exchange rate API returned an error or is unavailable"""

    pass


class NotificationDeliveryError(UpstreamError):
    """Email webhook rejected the message after all retries"""

    pass


class ReportRenderingError(UpstreamError):
    """PDF rendering failed"""

    pass
