"""
Expiry of abandoned uploads.

A client that asks for an upload URL and never confirms leaves a pending
record behind. Once the upload URL has expired (plus a grace period for slow
confirmations) nothing can complete that upload, so the record is marked
"expired". Records are never deleted.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from filedrop.config import Settings
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.utils.logging import log_uploads_expired
from filedrop.utils.metrics import uploads_expired_total

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Outcome of one sweeper run."""
    cutoff: datetime
    candidates: List[str] = field(default_factory=list)
    expired: int = 0
    dry_run: bool = False


class UploadSweeper:
    """Marks stale pending records as expired."""
    
    def __init__(self, settings: Settings, catalog: FileRecordRepository):
        self.settings = settings
        self.catalog = catalog
    
    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Pending records created before this instant are stale."""
        now = now or datetime.now(timezone.utc)
        max_age = self.settings.upload_url_expiration + self.settings.sweep_grace_seconds
        return now - timedelta(seconds=max_age)
    
    async def expire_stale_pending(self, now: Optional[datetime] = None, dry_run: bool = False) -> SweepResult:
        """
        Expire every pending record older than the upload URL lifetime plus grace.
        
        Args:
            now: Reference time (defaults to current UTC time)
            dry_run: Only report candidates, change nothing
        
        Returns:
            SweepResult with the candidate ids and the number expired
        """
        start_time = time.time()
        result = SweepResult(cutoff=self.cutoff(now), dry_run=dry_run)
        
        stale = await self.catalog.list_stale_pending(result.cutoff)
        result.candidates = [record.id for record in stale]
        
        if not dry_run:
            result.expired = await self.catalog.expire(result.candidates)
            uploads_expired_total.inc(result.expired)
        
        log_uploads_expired(
            logger,
            count=result.expired,
            dry_run=dry_run,
            duration_ms=(time.time() - start_time) * 1000,
            candidates=len(result.candidates),
            cutoff=result.cutoff.isoformat()
        )
        return result
