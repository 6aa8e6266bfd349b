from typing import Any, Dict, List, Optional
from starlette import status

class AppError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = "bad_request",
        field: Optional[str] = None,
        errors: Optional[List[dict]] = None,  # [{'code':..., 'message':..., 'field':...}]
        details: Optional[Dict[str, Any]] = None,  # Additional details for the error
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.field = field
        self.errors = errors
        self.details = details


class ValidationFailed(AppError):
    """Input rejected before any storage or database call"""

    def __init__(self, message: str, *, field: Optional[str] = None, code: str = "validation_error"):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, code=code, field=field)


class PermissionDenied(AppError):
    def __init__(self, message: str, *, code: str = "permission_denied"):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, code=code)


class NotFound(AppError):
    def __init__(self, message: str, *, code: str = "not_found"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, code=code)


class Conflict(AppError):
    def __init__(self, message: str, *, code: str = "conflict"):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, code=code)


class ShareExpired(AppError):
    def __init__(self, message: str = "This share link has expired"):
        super().__init__(message, status_code=status.HTTP_410_GONE, code="share_expired")


class StorageUnavailable(AppError):
    """Transport failure talking to the object store or the metadata store"""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY, code="storage_unavailable", details=details)
