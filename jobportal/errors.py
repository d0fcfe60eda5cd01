"""Application error types shared by the storage and web layers."""
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        message: Human readable description
        status_code: HTTP status to answer with
        code: Stable machine readable error code
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error into a response body."""
        return {
            'success': False,
            'code': self.code,
            'message': self.message,
        }


class ValidationError(AppError):
    """Raised when a request body or record fails validation."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.errors:
            body['errors'] = self.errors
        return body


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """Raised when an operation clashes with the current state of a record."""

    status_code = 400
    code = "CONFLICT"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"


class StorageError(AppError):
    """Raised when the database layer fails."""

    status_code = 500
    code = "DATABASE_ERROR"
