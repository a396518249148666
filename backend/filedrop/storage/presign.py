"""
Upload coordination: presigned upload URLs and the file record lifecycle.

Flow:
1. Client requests a presigned URL with fileName, originalName, size
2. Backend derives a unique object key and signs a PUT URL for it
3. Backend creates the file record with status="pending"
4. Client uploads directly to storage using the presigned URL
5. Client confirms, backend marks the record status="uploaded"

The URL is signed before the record is written. If the write fails the URL
is dropped and simply expires; it only grants access to storage, never to
metadata.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from filedrop.config import Settings
from filedrop.errors import NotFoundError, UploadExpiredError, UploadNotVerifiedError, ValidationError
from filedrop.models.file_record import Exposure, FileRecord, FileStatus
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.schemas.upload import ConfirmUploadRequest, UploadRequest
from filedrop.storage.object_store import ObjectStore
from filedrop.utils.logging import log_upload_confirmed, log_upload_requested
from filedrop.utils.metrics import direct_uploads_total, upload_urls_issued_total, uploads_confirmed_total

logger = logging.getLogger(__name__)

UPLOAD_METHOD = "PUT"


class MillisecondClock:
    """
    Wall-clock milliseconds that never repeat within a process.
    
    Two calls in the same millisecond get consecutive values, so object keys
    built from the same file name stay distinct.
    """
    
    def __init__(self, now=time.time):
        self._now = now
        self._last = 0
        self._lock = threading.Lock()
    
    def __call__(self) -> int:
        with self._lock:
            current = int(self._now() * 1000)
            if current <= self._last:
                current = self._last + 1
            self._last = current
            return current


_key_clock = MillisecondClock()


def generate_object_key(file_name: str, clock: MillisecondClock = _key_clock) -> str:
    """
    Build the object key for an upload.
    
    Pattern: {milliseconds}-{file_name}
    
    The timestamp prefix keeps keys unique and sorts them roughly by
    creation time.
    """
    return f"{clock()}-{file_name}"


@dataclass(frozen=True)
class PresignedUpload:
    """A signed upload URL and the record it belongs to."""
    url: str
    method: str
    object_key: str
    file_id: str
    expires_in: int


class UploadCoordinator:
    """
    Issues presigned upload URLs and owns the file record lifecycle.
    
    Responsibilities:
    - Derive unique object keys
    - Sign upload URLs
    - Create pending records and confirm them
    - Store bytes for uploads that come through the API
    """
    
    def __init__(self, settings: Settings, store: ObjectStore, catalog: FileRecordRepository):
        self.settings = settings
        self.store = store
        self.catalog = catalog
    
    @property
    def bucket(self) -> str:
        return self.settings.storage_bucket
    
    def _record_url(self, object_key: str, exposure: Exposure) -> Optional[str]:
        if exposure == Exposure.PUBLIC:
            return self.store.public_url(self.bucket, object_key)
        return None
    
    async def request_upload(self, request: UploadRequest) -> PresignedUpload:
        """
        Sign an upload URL and create the pending record for it.
        
        Args:
            request: Validated upload request
            
        Returns:
            PresignedUpload with the URL, method, object key and record id
        
        Raises:
            BackendUnavailableError: if signing or persisting fails
        """
        start_time = time.time()
        exposure = request.exposure or Exposure(self.settings.default_exposure)
        object_key = generate_object_key(request.file_name)
        expires_in = self.settings.upload_url_expiration
        
        upload_url = self.store.generate_presigned_upload_url(self.bucket, object_key, expires_in)
        
        record = await self.catalog.create(
            file_name=object_key,
            bucket=self.bucket,
            original_name=request.original_name,
            size=request.size,
            url=self._record_url(object_key, exposure),
            exposure=exposure,
            status=FileStatus.PENDING,
        )
        
        upload_urls_issued_total.labels(exposure=exposure.value).inc()
        log_upload_requested(
            logger,
            file_id=record.id,
            object_key=object_key,
            duration_ms=(time.time() - start_time) * 1000,
            exposure=exposure.value,
            declared_size=request.size
        )
        
        return PresignedUpload(
            url=upload_url,
            method=UPLOAD_METHOD,
            object_key=object_key,
            file_id=record.id,
            expires_in=expires_in,
        )
    
    async def confirm_upload(self, request: ConfirmUploadRequest) -> FileRecord:
        """
        Mark an upload as completed.
        
        Confirming an already uploaded record is allowed and leaves it
        uploaded. With verify_uploads on, the object must exist in storage
        and its real size replaces the declared one.
        
        Raises:
            NotFoundError: no record with that id
            UploadExpiredError: the record was swept before confirmation
            UploadNotVerifiedError: verification is on and the object is missing
            BackendUnavailableError: database or storage failure
        """
        start_time = time.time()
        file_id = str(request.file_id)
        
        record = await self.catalog.get(file_id)
        if record is None:
            raise NotFoundError("File not found")
        
        if record.status == FileStatus.EXPIRED:
            raise UploadExpiredError("Upload expired before it was confirmed")
        
        verified = False
        size = None
        if self.settings.verify_uploads and record.status == FileStatus.PENDING:
            size = await self.store.get_object_size(record.bucket, record.file_name)
            if size is None:
                raise UploadNotVerifiedError("Uploaded object not found in storage")
            if size != record.size:
                logger.warning(
                    f"Stored size differs from declared size for {file_id}: "
                    f"declared={record.size}, stored={size}"
                )
            verified = True
        
        record = await self.catalog.mark_uploaded(
            file_id,
            content_type=request.content_type,
            size=size
        )
        # Swept between the read above and the conditional write
        if record is None:
            raise UploadExpiredError("Upload expired before it was confirmed")
        
        uploads_confirmed_total.labels(verified=str(verified).lower()).inc()
        log_upload_confirmed(
            logger,
            file_id=file_id,
            object_key=record.file_name,
            duration_ms=(time.time() - start_time) * 1000,
            verified=verified
        )
        
        return record
    
    async def store_upload(
        self,
        file_name: str,
        body: bytes,
        content_type: Optional[str] = None,
        exposure: Optional[Exposure] = None,
    ) -> FileRecord:
        """
        Store bytes received by the API and record them as uploaded.
        
        Raises:
            ValidationError: missing name or empty body
            BackendUnavailableError: storage or database failure
        """
        violations = []
        if not file_name or not file_name.strip():
            violations.append("file: File name is required")
        if not body:
            violations.append("file: File is empty")
        if violations:
            raise ValidationError("No file", details=violations)
        
        exposure = exposure or Exposure(self.settings.default_exposure)
        object_key = generate_object_key(file_name)
        
        await self.store.put_object(self.bucket, object_key, body, content_type)
        
        record = await self.catalog.create(
            file_name=object_key,
            bucket=self.bucket,
            original_name=file_name,
            size=len(body),
            url=self._record_url(object_key, exposure),
            exposure=exposure,
            status=FileStatus.UPLOADED,
            content_type=content_type,
        )
        
        direct_uploads_total.inc()
        logger.info(
            f"Stored direct upload: file_id={record.id}, key={object_key}, size={len(body)}",
            extra={"event": "direct_upload_stored", "file_id": record.id, "object_key": object_key}
        )
        
        return record
