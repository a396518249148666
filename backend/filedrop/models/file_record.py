"""
FileRecord model for tracking objects in storage.

Stores metadata about objects uploaded to the S3-compatible store.
The actual bytes live in the bucket, never in the database.

Lifecycle:
1. Client requests presigned URL -> status="pending"
2. Client uploads to storage directly
3. Client confirms upload -> status="uploaded"
4. Pending records that outlive their upload URL are swept -> status="expired"
"""
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Enum, BigInteger, DateTime, Index
from sqlalchemy.sql import func

from filedrop.models.base import Base, generate_uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileStatus(str, enum.Enum):
    """Upload status of a file record."""
    PENDING = "pending"      # Presigned URL issued, awaiting confirmation
    UPLOADED = "uploaded"    # Client confirmed the upload
    EXPIRED = "expired"      # Never confirmed before the upload URL ran out


class Exposure(str, enum.Enum):
    """Visibility of the stored object."""
    PUBLIC = "public"
    PRIVATE = "private"


class FileRecord(Base):
    """
    File metadata model.
    
    Attributes:
        id: Unique identifier (UUID), the handle clients confirm with
        file_name: Object key in the bucket (<ms-timestamp>-<name>)
        bucket: Bucket the object lives in
        original_name: Client supplied display name
        size: Byte length (declared by the client, or measured)
        url: Durable URL for public objects, NULL for private ones
        exposure: public or private, fixed at creation
        status: pending, uploaded or expired
        content_type: MIME type when known
        created_at: When the record was created (listing order)
        uploaded_at: When the upload was first confirmed
    """
    __tablename__ = "files"
    
    id = Column(String, primary_key=True, default=generate_uuid)
    
    # Object key; uniqueness comes from the timestamp prefix
    file_name = Column(String, nullable=False, unique=True)
    
    bucket = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False)
    url = Column(String, nullable=True)
    
    exposure = Column(
        Enum(Exposure),
        nullable=False,
        default=Exposure.PUBLIC
    )
    status = Column(
        Enum(FileStatus),
        nullable=False,
        default=FileStatus.PENDING
    )
    
    content_type = Column(String, nullable=True)
    
    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False
    )
    uploaded_at = Column(DateTime(timezone=True), nullable=True)
    
    __table_args__ = (
        # Listing order
        Index('ix_files_created_at', 'created_at'),
        # Finding stale pending uploads (sweeper)
        Index('ix_files_status_created_at', 'status', 'created_at'),
    )
    
    def __repr__(self):
        return (
            f"<FileRecord(id={self.id}, file_name={self.file_name}, "
            f"exposure={self.exposure.value}, status={self.status.value})>"
        )
