"""
Upload endpoints.

Implements the direct-to-storage upload flow:
1. POST /uploads/presigned - Get presigned PUT URL, creates a pending record
2. PUT /uploads/presigned - Confirm the upload completed

Plus:
- POST /uploads - Upload through the API (multipart), stored immediately
- GET /uploads/read-url - Presigned GET URL for private objects

Errors raised by the upload components are turned into JSON responses by
the handlers registered in filedrop.main.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from filedrop.api.dependencies import get_access_broker, get_upload_coordinator
from filedrop.errors import ValidationError
from filedrop.models.file_record import Exposure
from filedrop.schemas.file_record import FileRecordResponse
from filedrop.schemas.upload import (
    ConfirmUploadRequest,
    ConfirmUploadResponse,
    DirectUploadResponse,
    PresignedUploadResponse,
    ReadUrlResponse,
    UploadRequest,
)
from filedrop.storage.access import AccessBroker
from filedrop.storage.presign import UploadCoordinator

router = APIRouter()


@router.post("/presigned", response_model=PresignedUploadResponse, status_code=status.HTTP_201_CREATED)
async def request_upload(
    request: UploadRequest,
    coordinator: UploadCoordinator = Depends(get_upload_coordinator)
):
    """
    Generate a presigned URL for direct upload to storage.
    
    Client then:
    1. PUTs the file bytes to the returned url
    2. Calls PUT /uploads/presigned with fileId when done
    """
    upload = await coordinator.request_upload(request)
    
    return PresignedUploadResponse(
        url=upload.url,
        method=upload.method,
        object_name=upload.object_key,
        file_id=upload.file_id,
        expires_in=upload.expires_in
    )


@router.put("/presigned", response_model=ConfirmUploadResponse)
async def confirm_upload(
    request: ConfirmUploadRequest,
    coordinator: UploadCoordinator = Depends(get_upload_coordinator)
):
    """
    Confirm that an upload has completed.
    
    Moves the record from "pending" to "uploaded". Safe to call again for
    a record that is already uploaded.
    """
    record = await coordinator.confirm_upload(request)
    
    return ConfirmUploadResponse(data=FileRecordResponse.model_validate(record))


@router.post("", response_model=DirectUploadResponse, status_code=status.HTTP_201_CREATED)
async def direct_upload(
    file: Optional[UploadFile] = File(None),
    exposure: Optional[Exposure] = Form(None),
    coordinator: UploadCoordinator = Depends(get_upload_coordinator)
):
    """
    Upload a file through the API.
    
    Bytes are stored in the bucket and the record is created as uploaded
    straight away.
    """
    if file is None:
        raise ValidationError("No file", details=["file: Field required"])
    
    body = await file.read()
    record = await coordinator.store_upload(
        file_name=file.filename or "",
        body=body,
        content_type=file.content_type,
        exposure=exposure
    )
    
    return DirectUploadResponse(
        file_name=record.file_name,
        url=record.url,
        data=FileRecordResponse.model_validate(record)
    )


@router.get("/read-url", response_model=ReadUrlResponse)
def get_read_url(
    bucket: Optional[str] = Query(None),
    object_key: Optional[str] = Query(None, alias="object"),
    broker: AccessBroker = Depends(get_access_broker)
):
    """
    Generate a presigned GET URL for a private object.
    
    No existence check is made; a URL is returned even for a missing key.
    """
    return ReadUrlResponse(url=broker.get_read_url(bucket or "", object_key or ""))
