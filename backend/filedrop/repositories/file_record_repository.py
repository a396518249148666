"""
Repository for file record operations.

This is the only code that reads or writes the ``files`` table. Every call is
bounded by the configured backend timeout, and database failures come out as
BackendUnavailableError so callers never see driver exceptions.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, List, Optional, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from filedrop.errors import BackendUnavailableError
from filedrop.models.file_record import FileRecord, FileStatus, Exposure
from filedrop.utils.logging import log_backend_failure
from filedrop.utils.metrics import backend_failures_total

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FileRecordRepository:
    """Repository for FileRecord database operations."""
    
    def __init__(self, db: AsyncSession, timeout: float):
        self.db = db
        self.timeout = timeout
    
    async def _run(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            backend_failures_total.labels(backend="database", operation=operation).inc()
            log_backend_failure(logger, backend="database", operation=operation, error=repr(e))
            await self._rollback()
            raise BackendUnavailableError("Metadata store unavailable") from e
    
    async def _rollback(self):
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after failed database call also failed", exc_info=True)
    
    async def create(
        self,
        file_name: str,
        bucket: str,
        original_name: str,
        size: int,
        url: Optional[str],
        exposure: Exposure,
        status: FileStatus = FileStatus.PENDING,
        content_type: Optional[str] = None,
    ) -> FileRecord:
        """
        Persist a new file record and return it with its generated id.
        
        Records created directly as uploaded get their uploaded_at stamped
        at the same time.
        """
        record = FileRecord(
            file_name=file_name,
            bucket=bucket,
            original_name=original_name,
            size=size,
            url=url,
            exposure=exposure,
            status=status,
            content_type=content_type,
        )
        if status == FileStatus.UPLOADED:
            record.uploaded_at = datetime.now(timezone.utc)
        
        async def _create():
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
            return record
        
        return await self._run("create", _create())
    
    async def get(self, file_id: str) -> Optional[FileRecord]:
        """Fetch a record by id, or None."""
        async def _get():
            result = await self.db.execute(
                select(FileRecord)
                .where(FileRecord.id == file_id)
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()
        
        return await self._run("get", _get())
    
    async def mark_uploaded(
        self,
        file_id: str,
        content_type: Optional[str] = None,
        size: Optional[int] = None,
    ) -> Optional[FileRecord]:
        """
        Move a record to "uploaded".
        
        The write is conditional on the row still being pending or uploaded,
        so a record expired by a concurrent sweep is never revived.
        Re-applying to an already uploaded record keeps the first uploaded_at.
        
        Returns:
            The refreshed record, or None if the row was not in a confirmable state
        """
        values = {
            "status": FileStatus.UPLOADED,
            "uploaded_at": func.coalesce(FileRecord.uploaded_at, datetime.now(timezone.utc)),
        }
        if content_type:
            values["content_type"] = content_type
        if size is not None:
            values["size"] = size
        
        async def _update():
            result = await self.db.execute(
                update(FileRecord)
                .where(
                    FileRecord.id == file_id,
                    FileRecord.status.in_([FileStatus.PENDING, FileStatus.UPLOADED]),
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount
        
        updated = await self._run("mark_uploaded", _update())
        if not updated:
            return None
        return await self.get(file_id)
    
    async def list_all(self, status: Optional[FileStatus] = None) -> List[FileRecord]:
        """
        List records, newest first.
        
        Args:
            status: Optional status filter
        """
        query = select(FileRecord)
        if status is not None:
            query = query.where(FileRecord.status == status)
        query = query.order_by(FileRecord.created_at.desc(), FileRecord.id.desc())
        
        async def _list():
            result = await self.db.execute(query)
            return list(result.scalars().all())
        
        return await self._run("list_all", _list())
    
    async def list_stale_pending(self, created_before: datetime) -> List[FileRecord]:
        """Pending records created before the cutoff, oldest first."""
        async def _list():
            result = await self.db.execute(
                select(FileRecord)
                .where(
                    FileRecord.status == FileStatus.PENDING,
                    FileRecord.created_at < created_before,
                )
                .order_by(FileRecord.created_at)
            )
            return list(result.scalars().all())
        
        return await self._run("list_stale_pending", _list())
    
    async def expire(self, file_ids: List[str]) -> int:
        """
        Mark the given records expired.
        
        Only records still pending are touched, so a confirmation that lands
        between listing and expiring wins.
        
        Returns:
            Number of records expired
        """
        if not file_ids:
            return 0
        
        async def _expire():
            result = await self.db.execute(
                update(FileRecord)
                .where(
                    FileRecord.id.in_(file_ids),
                    FileRecord.status == FileStatus.PENDING,
                )
                .values(status=FileStatus.EXPIRED)
            )
            await self.db.commit()
            return result.rowcount
        
        return await self._run("expire", _expire())
