"""
File record listing.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from filedrop.api.dependencies import get_catalog
from filedrop.models.file_record import FileStatus
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.schemas.file_record import FileRecordResponse

router = APIRouter()


@router.get("", response_model=List[FileRecordResponse])
async def list_files(
    status: Optional[FileStatus] = Query(None, description="Only records in this status"),
    catalog: FileRecordRepository = Depends(get_catalog)
):
    """
    List every file record, newest first.
    
    Records with exposure="private" have no url; fetch one from
    /uploads/read-url before displaying them.
    """
    records = await catalog.list_all(status=status)
    return [FileRecordResponse.model_validate(record) for record in records]
