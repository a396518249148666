"""
Pydantic schemas for the upload endpoints.

Wire format is camelCase (``fileName``, ``fileId``); Python code uses
snake_case. Both are accepted on input.
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from filedrop.models.file_record import Exposure
from filedrop.schemas.file_record import FileRecordResponse


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class UploadRequest(CamelModel):
    """Request schema for presigned upload URL generation."""
    file_name: str = Field(..., description="Name used to build the object key")
    original_name: str = Field(..., description="Display name shown to users")
    size: StrictInt = Field(..., description="Declared size in bytes")
    exposure: Optional[Exposure] = Field(None, description="public or private, defaults to server setting")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fileName": "photo.png",
                "originalName": "photo.png",
                "size": 204800,
                "exposure": "public"
            }
        }
    )
    
    @field_validator("file_name")
    @classmethod
    def file_name_required(cls, value: str) -> str:
        if not value:
            raise ValueError("File name is required")
        return value
    
    @field_validator("original_name")
    @classmethod
    def original_name_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Original name is required")
        return value
    
    @field_validator("size")
    @classmethod
    def size_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Size must be a positive number")
        return value


class PresignedUploadResponse(CamelModel):
    """Response schema for presigned upload URL."""
    url: str = Field(..., description="Presigned PUT URL for direct upload")
    method: str = Field("PUT", description="HTTP method the client must use")
    object_name: str = Field(..., description="Object key in the storage bucket")
    file_id: str = Field(..., description="File record ID for the confirm call")
    expires_in: int = Field(..., description="URL expiration time in seconds")
    success: bool = True


class ConfirmUploadRequest(CamelModel):
    """Request schema for upload confirmation."""
    file_id: UUID = Field(..., description="File record ID from the presign response")
    content_type: Optional[str] = Field(None, description="MIME type of the uploaded file")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fileId": "660e8400-e29b-41d4-a716-446655440000",
                "contentType": "image/png"
            }
        }
    )
    
    @field_validator("file_id", mode="before")
    @classmethod
    def file_id_format(cls, value):
        if isinstance(value, UUID):
            return value
        try:
            return UUID(str(value))
        except ValueError:
            raise ValueError("Invalid file ID")


class ConfirmUploadResponse(CamelModel):
    """Response schema for upload confirmation."""
    success: bool = True
    data: FileRecordResponse


class DirectUploadResponse(CamelModel):
    """Response schema for uploads proxied through the API."""
    success: bool = True
    file_name: str
    url: Optional[str] = None
    data: FileRecordResponse


class ReadUrlResponse(BaseModel):
    """Response schema for presigned read URL."""
    url: str
