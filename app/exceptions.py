"""
Name: Custom Exceptions

Responsibilities:
  - Define the service's error taxonomy (validation, not found, conflict, database)
  - Generate unique error IDs for log correlation

Collaborators:
  - exception_handlers.py: maps each exception to an HTTP status
  - infrastructure.repositories: raise NotFoundError/ConflictError/ValidationError
  - infrastructure.db: raises DatabaseError subclasses

Notes:
  - error_id is a UUID that appears in both the log line and the 500 body
  - ValidationError here is the service's own error, not pydantic's
"""

from uuid import uuid4


class EmployeeAPIError(Exception):
    """Base exception for the employee service."""

    error_code: str = "EMPLOYEE_API_ERROR"

    def __init__(self, message: str, error_id: str | None = None):
        self.message = message
        self.error_id = error_id or str(uuid4())
        super().__init__(message)


class ValidationError(EmployeeAPIError):
    """Malformed or missing input."""

    error_code: str = "VALIDATION_ERROR"


class NotFoundError(EmployeeAPIError):
    """No row matched the requested identifier."""

    error_code: str = "NOT_FOUND"


class ConflictError(EmployeeAPIError):
    """The database rejected a write because of a uniqueness constraint."""

    error_code: str = "CONFLICT"


class DatabaseError(EmployeeAPIError):
    """Database connection or query error."""

    error_code: str = "DATABASE_ERROR"


class SessionStoreError(EmployeeAPIError):
    """The session backend could not be read or written."""

    error_code: str = "SESSION_STORE_ERROR"
