"""
API exceptions for the Twin Hill Payroll Service.

Every exception carries an HTTP status, a machine-readable ``error_code`` and
optional ``error_data``; ``error_handlers`` turns them into the JSON error
envelope.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "API_ERROR"
    default_detail = "Request failed"
    bearer_challenge = False

    def __init__(
        self,
        detail: Optional[str] = None,
        error_data: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        if self.bearer_challenge:
            headers = {"WWW-Authenticate": "Bearer", **(headers or {})}

        super().__init__(
            status_code=status_code or self.http_status,
            detail=detail or self.default_detail,
            headers=headers
        )
        self.error_code = error_code or self.default_code
        self.error_data = error_data or {}


# Auth
class AuthenticationError(BaseAPIException):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTH_FAILED"
    default_detail = "Authentication failed"
    bearer_challenge = True


class InvalidTokenError(BaseAPIException):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = "INVALID_TOKEN"
    default_detail = "Invalid or expired token"
    bearer_challenge = True


class InsufficientPermissionsError(BaseAPIException):
    http_status = status.HTTP_403_FORBIDDEN
    default_code = "INSUFFICIENT_PERMISSIONS"
    default_detail = "Insufficient permissions"


class InvalidOTPError(BaseAPIException):
    """One-time password missing, expired or wrong."""
    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_OTP"
    default_detail = "Invalid or expired code"


# Resources
class ResourceNotFoundError(BaseAPIException):
    http_status = status.HTTP_404_NOT_FOUND
    default_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} not found"
        if resource_id:
            detail += f" (ID: {resource_id})"
        super().__init__(
            detail,
            {"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


class ResourceAlreadyExistsError(BaseAPIException):
    http_status = status.HTTP_409_CONFLICT
    default_code = "RESOURCE_ALREADY_EXISTS"

    def __init__(self, resource_type: str, field: str = None, value: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} already exists"
        if field and value:
            detail += f" with {field}: {value}"
        super().__init__(
            detail,
            {"resource_type": resource_type, "field": field, "value": value, **(error_data or {})}
        )


class ValidationError(BaseAPIException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field: str = None, error_data: Optional[Dict[str, Any]] = None):
        data = dict(error_data or {})
        if field:
            data["field"] = field
        super().__init__(detail, data)


# Uploads
class InvalidFileError(BaseAPIException):
    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "INVALID_FILE"
    default_detail = "Invalid file"

    def __init__(self, detail: str = None, file_type: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(detail, {"file_type": file_type, **(error_data or {})})


class FileTooLargeError(BaseAPIException):
    http_status = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_code = "FILE_TOO_LARGE"

    def __init__(self, max_size: int, actual_size: int = None):
        detail = f"File size exceeds maximum limit of {max_size} bytes"
        if actual_size:
            detail += f" (uploaded: {actual_size} bytes)"
        super().__init__(detail, {"max_size": max_size, "actual_size": actual_size})


# Infrastructure
class DatabaseError(BaseAPIException):
    default_code = "DATABASE_ERROR"
    default_detail = "Database operation failed"


class RedisConnectionError(BaseAPIException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "REDIS_CONNECTION_ERROR"
    default_detail = "Redis service unavailable"


# Payroll
class InvalidAmountError(BaseAPIException):
    """Monetary input is negative, non-finite, not a number or inconsistent."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "INVALID_AMOUNT"

    def __init__(self, field: str, value: Any = None, detail: Optional[str] = None):
        super().__init__(
            detail or f"Invalid amount for {field}: must be a finite, non-negative number",
            {"field": field, "value": str(value)}
        )
        self.field = field
        self.value = value


class ExtractionFailedError(BaseAPIException):
    """Document understanding service failed to produce salary inputs."""
    http_status = status.HTTP_502_BAD_GATEWAY
    default_code = "EXTRACTION_FAILED"
    default_detail = "Payroll document extraction failed"

    def __init__(self, detail: str = None, file_name: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(detail, {"file_name": file_name, **(error_data or {})})
