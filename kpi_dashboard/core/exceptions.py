from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class InvalidPositionError(AppException):
    def __init__(self, position: Any):
        super().__init__(
            message=f'Invalid position "{position}". Must be: Sourcer, Rekruter, or TAC',
            status_code=400,
            error_code="INVALID_POSITION"
        )

class DuplicateEmployeeError(AppException):
    def __init__(self, name: str):
        super().__init__(
            message="Employee with this name already exists",
            status_code=400,
            error_code="DUPLICATE_EMPLOYEE",
            details={"name": name}
        )

class UploadRejectedError(AppException):
    """The uploaded file was refused before any row was read."""
    def __init__(self, message: str):
        super().__init__(
            message=message,
            status_code=400,
            error_code="UPLOAD_REJECTED"
        )

class RowValidationError(ValueError):
    """A single spreadsheet row failed validation. Collected, never returned as an HTTP error."""

class AIError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="AI_SERVICE_UNAVAILABLE",
            details=details
        )

class AIKillSwitchError(AppException):
    def __init__(self):
        super().__init__(
            message="AI services are currently offline for maintenance.",
            status_code=503,
            error_code="AI_KILL_SWITCH_ACTIVE"
        )
