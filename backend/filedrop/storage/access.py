"""
Presigned read access for private objects.

Stateless: nothing about an issued URL is stored, and no file record is
consulted. Callers decide which objects need a read URL (those with
exposure="private") and know their bucket and key.
"""
import logging

from filedrop.config import Settings
from filedrop.errors import ValidationError
from filedrop.storage.object_store import ObjectStore
from filedrop.utils.logging import log_read_url_issued
from filedrop.utils.metrics import read_urls_issued_total

logger = logging.getLogger(__name__)


class AccessBroker:
    """Issues short-lived read URLs."""
    
    def __init__(self, settings: Settings, store: ObjectStore):
        self.settings = settings
        self.store = store
    
    def get_read_url(self, bucket: str, object_key: str) -> str:
        """
        Sign a GET URL for bucket/object_key.
        
        Raises:
            ValidationError: bucket or object key missing, before any storage call
            BackendUnavailableError: signing failed
        """
        violations = []
        if not bucket or not bucket.strip():
            violations.append("bucket: Bucket is required")
        if not object_key or not object_key.strip():
            violations.append("object: Object is required")
        if violations:
            raise ValidationError("bucket and object are required", details=violations)
        
        expires_in = self.settings.read_url_expiration
        url = self.store.generate_presigned_read_url(bucket, object_key, expires_in)
        
        read_urls_issued_total.inc()
        log_read_url_issued(logger, bucket=bucket, object_key=object_key, expires_in=expires_in)
        return url
