"""
Custom Exceptions for the Hostel Allotment Service

This module defines the exception classes raised by the allotment core and
the persistence adapters. Every exception carries an error code and the HTTP
status class the route layer should answer with.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    FOREIGN_KEY_VIOLATION = "FOREIGN_KEY_VIOLATION"

    # Allotment rules
    STATE_CONFLICT = "STATE_CONFLICT"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    ROOM_FULL = "ROOM_FULL"
    STUDENT_ALREADY_ALLOCATED = "STUDENT_ALREADY_ALLOCATED"
    APPLICATION_PENDING = "APPLICATION_PENDING"

    # Specific resources
    HOSTEL_NOT_FOUND = "HOSTEL_NOT_FOUND"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    ALLOTMENT_NOT_FOUND = "ALLOTMENT_NOT_FOUND"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Not Found
# ========================================

class NotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, error_code, details, 404)
        self.resource_type = resource_type
        self.resource_id = resource_id


class HostelNotFoundError(NotFoundError):
    def __init__(self, hostel_id: Optional[Any] = None):
        super().__init__("Hostel", hostel_id, error_code=ErrorCode.HOSTEL_NOT_FOUND)


class RoomNotFoundError(NotFoundError):
    def __init__(self, room_id: Optional[Any] = None):
        super().__init__("Room", room_id, error_code=ErrorCode.ROOM_NOT_FOUND)


class StudentNotFoundError(NotFoundError):
    def __init__(self, student_id: Optional[Any] = None):
        super().__init__("Student", student_id, error_code=ErrorCode.STUDENT_NOT_FOUND)


class AllotmentNotFoundError(NotFoundError):
    """Raised when no allotment in the expected state exists"""

    def __init__(self, allotment_id: Optional[Any] = None, state: Optional[str] = None):
        resource_type = f"{state} allotment" if state else "Allotment"
        super().__init__(resource_type, allotment_id, error_code=ErrorCode.ALLOTMENT_NOT_FOUND)
        self.details["state"] = state


# ========================================
# Conflicts
# ========================================

class ConflictError(BaseAppException):
    """Exception raised when an operation conflicts with current state"""

    def __init__(
        self,
        message: str = "Operation conflicts with current state",
        error_code: ErrorCode = ErrorCode.STATE_CONFLICT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details, 409)


class RoomUnavailableError(ConflictError):
    """Room is under maintenance and accepts no new allotments"""

    def __init__(self, room_id: Optional[Any] = None, status: Optional[str] = None):
        super().__init__(
            "room unavailable",
            ErrorCode.ROOM_UNAVAILABLE,
            {"room_id": room_id, "status": status},
        )


class RoomFullError(ConflictError):
    def __init__(
        self,
        room_id: Optional[Any] = None,
        capacity: Optional[int] = None,
        occupants: Optional[int] = None,
    ):
        super().__init__(
            "room full",
            ErrorCode.ROOM_FULL,
            {"room_id": room_id, "capacity": capacity, "occupants": occupants},
        )


class StudentAlreadyAllocatedError(ConflictError):
    def __init__(self, student_id: Optional[Any] = None):
        super().__init__(
            "student already allocated",
            ErrorCode.STUDENT_ALREADY_ALLOCATED,
            {"student_id": student_id},
        )


class PendingApplicationExistsError(ConflictError):
    def __init__(self, student_id: Optional[Any] = None):
        super().__init__(
            "student already has a pending application",
            ErrorCode.APPLICATION_PENDING,
            {"student_id": student_id},
        )


class DuplicateEntryError(ConflictError):
    """Exception raised when a storage uniqueness constraint rejects a write"""

    def __init__(
        self,
        message: str = "Duplicate entry",
        table: Optional[str] = None,
    ):
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, {"table": table})


class ForeignKeyViolationError(ConflictError):
    def __init__(
        self,
        message: str = "Foreign key constraint violation",
        table: Optional[str] = None,
    ):
        super().__init__(message, ErrorCode.FOREIGN_KEY_VIOLATION, {"table": table})


# ========================================
# Persistence
# ========================================

class PersistenceError(BaseAppException):
    """Exception raised when the persistence substrate fails a read or write"""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500
    ):
        details = {
            "operation": operation,
            "table": table
        }
        super().__init__(message, error_code, details, status_code)


class DatabaseConnectionError(PersistenceError):
    """Exception raised when the substrate cannot be reached"""

    def __init__(
        self,
        message: str = "Database connection failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
    ):
        super().__init__(
            message,
            operation=operation,
            table=table,
            error_code=ErrorCode.CONNECTION_ERROR,
            status_code=503,
        )


class ConfigurationError(BaseAppException):
    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, {}, 500)


# ========================================
# Utility Functions
# ========================================

def handle_database_exception(
    exc: Exception,
    operation: Optional[str] = None,
    table: Optional[str] = None,
) -> BaseAppException:
    """Convert driver or client exceptions to application exceptions"""
    error_message = str(exc)
    lowered = error_message.lower()

    if "duplicate" in lowered or "unique constraint" in lowered or "23505" in lowered:
        return DuplicateEntryError(f"Duplicate entry: {error_message}", table=table)
    elif "foreign key" in lowered or "23503" in lowered:
        return ForeignKeyViolationError(f"Foreign key violation: {error_message}", table=table)
    elif "connection" in lowered:
        return DatabaseConnectionError(
            f"Database connection error: {error_message}",
            operation=operation,
            table=table,
        )
    else:
        return PersistenceError(
            f"Database error: {error_message}",
            operation=operation,
            table=table,
        )


__all__ = [
    'ErrorCode',
    'BaseAppException',
    'NotFoundError',
    'HostelNotFoundError',
    'RoomNotFoundError',
    'StudentNotFoundError',
    'AllotmentNotFoundError',
    'ConflictError',
    'RoomUnavailableError',
    'RoomFullError',
    'StudentAlreadyAllocatedError',
    'PendingApplicationExistsError',
    'DuplicateEntryError',
    'ForeignKeyViolationError',
    'PersistenceError',
    'DatabaseConnectionError',
    'ConfigurationError',
    'handle_database_exception',
]
