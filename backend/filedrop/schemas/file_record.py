"""
Pydantic schemas for file records.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from filedrop.models.file_record import Exposure, FileStatus


class FileRecordResponse(BaseModel):
    """Schema for a file record as returned to clients."""
    id: str
    file_name: str
    url: Optional[str] = None
    size: int
    bucket: str
    original_name: str
    status: FileStatus
    exposure: Exposure
    content_type: Optional[str] = None
    created_at: datetime
    uploaded_at: Optional[datetime] = None
    
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
