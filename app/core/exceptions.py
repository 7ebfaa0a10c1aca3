"""
NDC Fare Engine - Custom Exceptions
Centralized exception classes for consistent error handling
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base application exception.
    All custom exceptions should inherit from this.
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# === Validation Errors ===

class ValidationError(AppException):
    """Validation error"""

    def __init__(
        self,
        message: str = "Validation error",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if field:
            message = f"Validation error for field '{field}': {message}"
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )


# === Document Errors ===

class DocumentError(AppException):
    """Provider document could not be accepted"""

    def __init__(
        self,
        message: str = "Invalid provider document",
        status_code: int = 400,
        error_code: str = "DOCUMENT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class DocumentParseError(DocumentError):
    """Payload is empty or not well-formed XML"""

    def __init__(
        self,
        message: str = "XML parsing failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=422,
            error_code="DOCUMENT_PARSE_ERROR",
            details=details
        )


class PayloadTooLargeError(DocumentError):
    """Payload exceeds the configured size limit"""

    def __init__(
        self,
        max_size: int,
        details: Optional[Dict[str, Any]] = None
    ):
        max_mb = max_size / (1024 * 1024)
        super().__init__(
            message=f"Document exceeds maximum size of {max_mb:.1f}MB",
            status_code=413,
            error_code="PAYLOAD_TOO_LARGE",
            details=details
        )
