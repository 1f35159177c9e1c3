"""Custom exception hierarchy for TeamSync."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Not-found errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Writing assistant
    ASSIST_UNAVAILABLE = "ASSIST_UNAVAILABLE"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TeamSyncException(Exception):
    """
    Base exception for all TeamSync errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class StorageError(TeamSyncException):
    """A persistence call failed (backend unreachable, I/O error, corrupt data)."""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        original_error: Optional[Exception] = None,
        error_code: ErrorCode = ErrorCode.STORAGE_ERROR,
    ):
        details: Dict[str, Any] = {}
        if collection:
            details["collection"] = collection
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, error_code, status_code=500, details=details)


class DuplicateRecordError(StorageError):
    """A create was issued for an id that is already stored."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            f"Record already exists: {collection}/{record_id}",
            collection=collection,
            error_code=ErrorCode.DUPLICATE_RECORD,
        )
        self.details["record_id"] = record_id


class NotFoundError(TeamSyncException):
    """Operation targeted an id that is no longer present."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RECORD_NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, status_code=404, details=details)


class RecordNotFoundError(NotFoundError):
    """Stored record missing from a collection."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(
            f"Record not found: {collection}/{record_id}",
            details={"collection": collection, "record_id": record_id},
        )


class DocumentNotFoundError(NotFoundError):
    """Document not found in the workspace."""

    def __init__(self, doc_id: str):
        super().__init__(
            f"Document not found: {doc_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            details={"doc_id": doc_id}
        )


class FolderNotFoundError(NotFoundError):
    """Folder not found in the workspace."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            details={"folder_id": folder_id}
        )


class TaskNotFoundError(NotFoundError):
    """Task not found."""

    def __init__(self, task_id: str):
        super().__init__(
            f"Task not found: {task_id}",
            ErrorCode.TASK_NOT_FOUND,
            details={"task_id": task_id}
        )


class ValidationError(TeamSyncException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class AuthenticationError(TeamSyncException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(TeamSyncException):
    """Authenticated user lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class AssistUnavailableError(TeamSyncException):
    """The writing assistant produced no usable text (unconfigured or provider failure)."""

    def __init__(self, message: str):
        super().__init__(
            message,
            ErrorCode.ASSIST_UNAVAILABLE,
            status_code=503,
        )
