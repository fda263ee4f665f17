from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": message,
                "error_code": error_code,
                "details": self.details,
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class ValidationError(BaseAPIException):
    """Missing or malformed input"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found errors"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND_001",
            message=message,
            details=details
        )


class MethodNotAllowedError(BaseAPIException):
    """Verb and action combination is not supported"""
    def __init__(self, message: str = "Method not allowed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            error_code="METHOD_001",
            message=message,
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict errors"""
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="CONFLICT_001",
            message=message,
            details=details
        )


class StorageError(BaseAPIException):
    """The database was unavailable or rejected the statement"""
    def __init__(
        self,
        message: str = "Storage operation failed",
        cause: Optional[BaseException] = None,
        details: Optional[Dict] = None,
    ):
        self.cause = cause
        details = dict(details or {})
        if cause is not None:
            details.setdefault("cause", type(cause).__name__)
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_001",
            message=message,
            details=details
        )


class InternalServerError(BaseAPIException):
    """Internal server errors"""
    def __init__(self, message: str = "Internal server error", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_001",
            message=message,
            details=details
        )
