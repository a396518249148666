"""
Error taxonomy for the upload workflow.

Services raise these; the exception handlers registered in ``filedrop.main``
turn them into JSON responses. The message is safe to show to clients,
anything more detailed belongs in the logs.
"""
from typing import Optional


class FiledropError(Exception):
    """Base error carrying a client-safe message and an HTTP status."""
    
    status_code = 500
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
    
    def __str__(self) -> str:
        return self.message


class ValidationError(FiledropError):
    """Malformed or missing input. Always the client's fault."""
    
    status_code = 400
    
    def __init__(self, message: str = "Validation failed", details: Optional[list[str]] = None):
        super().__init__(message)
        self.details = list(details or [])


class NotFoundError(FiledropError):
    """Referenced file record does not exist."""
    
    status_code = 404


class ConflictError(FiledropError):
    """Request is well formed but the record is in the wrong state."""
    
    status_code = 409


class UploadExpiredError(ConflictError):
    """Confirmation arrived for a record the sweeper already expired."""


class UploadNotVerifiedError(ConflictError):
    """Upload verification is on and the object is not in storage."""


class BackendUnavailableError(FiledropError):
    """Object store or metadata store call failed or timed out. Retryable."""
    
    status_code = 500
