from typing import Generic, List, Optional, TypeVar
from datetime import datetime, timezone

from pydantic import BaseModel, Field, ConfigDict


T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper for all endpoints"""
    success: bool = Field(True, description="Indicates if the request was successful")
    message: Optional[str] = Field(None, description="Human-readable message about the operation")
    data: Optional[T] = Field(None, description="Response data payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Operation completed successfully",
                "data": {"path": "3f0c.../1718000000000_financial_Bank_Statement.pdf"},
            }
        }
    )


class ErrorDetail(BaseModel):
    """Detailed error information for validation and business logic errors"""
    code: str = Field(..., description="Error code identifier")
    message: str = Field(..., description="Human-readable error message")
    field: Optional[str] = Field(None, description="Field name that caused the error (for validation errors)")


class ApiError(BaseModel):
    """Error response wrapper for failed operations"""
    success: bool = Field(False, description="Always false for error responses")
    message: str = Field(..., description="Main error message")
    code: Optional[str] = Field(None, description="Machine-readable error code")
    errors: Optional[List[ErrorDetail]] = Field(None, description="Detailed error information")
    timestamp: datetime = Field(default_factory=_now, description="Error timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "Private documents cannot be shared",
                "code": "private_document",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
    )


class Advisory(BaseModel):
    """A non-critical side effect that failed without failing the operation"""
    operation: str = Field(..., description="Side effect that was attempted")
    message: str = Field(..., description="Why it failed")


class OperationResult(BaseModel, Generic[T]):
    """Critical-path outcome plus any advisory (best-effort) failures"""
    result: T
    advisories: List[Advisory] = Field(default_factory=list)

    def advise(self, operation: str, error: Exception | str) -> None:
        self.advisories.append(Advisory(operation=operation, message=str(error)))
