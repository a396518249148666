"""
Pydantic schemas for API request/response validation.
"""
from typing import Any, Iterable, Mapping

from filedrop.schemas.file_record import FileRecordResponse
from filedrop.schemas.upload import (
    UploadRequest,
    PresignedUploadResponse,
    ConfirmUploadRequest,
    ConfirmUploadResponse,
    DirectUploadResponse,
    ReadUrlResponse,
)


def format_errors(errors: Iterable[Mapping[str, Any]]) -> list[str]:
    """
    Flatten pydantic error dicts into one "field: message" string each.
    
    The leading "body"/"query" location FastAPI adds is dropped, and the
    "Value error, " prefix pydantic puts on custom validator messages is
    stripped.
    """
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "form")]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return details


__all__ = [
    "FileRecordResponse",
    "UploadRequest",
    "PresignedUploadResponse",
    "ConfirmUploadRequest",
    "ConfirmUploadResponse",
    "DirectUploadResponse",
    "ReadUrlResponse",
    "format_errors",
]
