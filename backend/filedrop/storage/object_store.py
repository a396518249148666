"""
S3-compatible object store client.

Uses boto3 against any S3-compatible service (MinIO, Cloudflare R2, AWS S3).

Presigned URL generation is a local signing operation and stays synchronous.
Calls that hit the network (HEAD, PUT) run in a worker thread so they do not
block the event loop, and are bounded by botocore connect/read timeouts with
retries disabled.
"""
import asyncio
import logging
import time
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from filedrop.config import Settings, settings as app_settings
from filedrop.errors import BackendUnavailableError
from filedrop.utils.logging import log_backend_failure
from filedrop.utils.metrics import backend_failures_total, storage_latency_seconds

logger = logging.getLogger(__name__)

# Error codes S3-compatible backends use for a missing object on HEAD
MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class ObjectStore:
    """
    S3-compatible object store.
    
    Provides presigned URL generation for direct uploads and reads,
    plus the handful of server-side calls the upload workflow needs.
    """
    
    def __init__(self, settings: Settings, client=None):
        """
        Initialize the store with boto3.
        
        Args:
            settings: Application settings (endpoint, credentials, timeouts)
            client: Optional pre-built boto3 S3 client
        
        Missing credentials leave the store unconfigured; every call then
        raises BackendUnavailableError instead of failing at startup.
        """
        self.settings = settings
        self._client = client
        
        if self._client is not None:
            return
        
        if not all([
            settings.storage_endpoint,
            settings.storage_access_key,
            settings.storage_secret_key
        ]):
            logger.warning(
                "Object storage not configured. "
                "Set STORAGE_ENDPOINT, STORAGE_ACCESS_KEY, and STORAGE_SECRET_KEY."
            )
            return
        
        self._client = boto3.client(
            's3',
            endpoint_url=settings.storage_endpoint,
            aws_access_key_id=settings.storage_access_key,
            aws_secret_access_key=settings.storage_secret_key,
            region_name=settings.storage_region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'},  # MinIO and R2 want path-style
                connect_timeout=settings.backend_timeout_seconds,
                read_timeout=settings.backend_timeout_seconds,
                retries={'total_max_attempts': 1, 'mode': 'standard'}
            )
        )
        logger.info(f"Object store client initialized for endpoint: {settings.storage_endpoint}")
    
    @property
    def is_configured(self) -> bool:
        """Check if the S3 client is available."""
        return self._client is not None
    
    @property
    def bucket(self) -> str:
        """Deployment bucket for new uploads."""
        return self.settings.storage_bucket
    
    def _require_client(self, operation: str):
        if not self.is_configured:
            logger.error(f"Cannot run {operation}: object storage not configured")
            raise BackendUnavailableError("Storage service not configured")
        return self._client
    
    def _failure(self, operation: str, object_key: str, error: Exception) -> BackendUnavailableError:
        backend_failures_total.labels(backend="storage", operation=operation).inc()
        log_backend_failure(
            logger,
            backend="storage",
            operation=operation,
            error=repr(error),
            object_key=object_key
        )
        return BackendUnavailableError("Storage service unavailable")
    
    def generate_presigned_upload_url(self, bucket: str, object_key: str, expiration: int) -> str:
        """
        Generate a presigned PUT URL for direct upload.
        
        Args:
            bucket: Bucket to write into
            object_key: The object key (path in bucket)
            expiration: URL expiration in seconds
            
        Returns:
            Presigned URL string
        
        Raises:
            BackendUnavailableError: if the client is missing or signing fails
        """
        client = self._require_client("presign_put")
        
        try:
            url = client.generate_presigned_url(
                ClientMethod='put_object',
                Params={
                    'Bucket': bucket,
                    'Key': object_key,
                },
                ExpiresIn=expiration
            )
        except (ClientError, BotoCoreError) as e:
            raise self._failure("presign_put", object_key, e) from e
        
        logger.debug(f"Generated presigned upload URL for {object_key}")
        return url
    
    def generate_presigned_read_url(self, bucket: str, object_key: str, expiration: int) -> str:
        """
        Generate a presigned GET URL for reading an object.
        
        No existence check is made; most backends happily sign a URL for a
        key that is not there, and the fetch fails later.
        """
        client = self._require_client("presign_get")
        
        try:
            url = client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': bucket,
                    'Key': object_key,
                },
                ExpiresIn=expiration
            )
        except (ClientError, BotoCoreError) as e:
            raise self._failure("presign_get", object_key, e) from e
        
        logger.debug(f"Generated presigned read URL for {object_key} (expires in {expiration}s)")
        return url
    
    async def get_object_size(self, bucket: str, object_key: str) -> Optional[int]:
        """
        HEAD an object.
        
        Returns:
            Size in bytes, or None if the object does not exist
        
        Raises:
            BackendUnavailableError: on any other failure (timeouts included)
        """
        client = self._require_client("head_object")
        start_time = time.time()
        
        try:
            response = await asyncio.to_thread(client.head_object, Bucket=bucket, Key=object_key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in MISSING_OBJECT_CODES:
                return None
            raise self._failure("head_object", object_key, e) from e
        except BotoCoreError as e:
            raise self._failure("head_object", object_key, e) from e
        finally:
            storage_latency_seconds.labels(operation="head_object").observe(time.time() - start_time)
        
        return response.get('ContentLength')
    
    async def put_object(self, bucket: str, object_key: str, body: bytes, content_type: Optional[str] = None):
        """
        Store bytes under the given key.
        
        Raises:
            BackendUnavailableError: if the write fails
        """
        client = self._require_client("put_object")
        params = {
            'Bucket': bucket,
            'Key': object_key,
            'Body': body,
            'ContentLength': len(body),
        }
        if content_type:
            params['ContentType'] = content_type
        
        start_time = time.time()
        try:
            await asyncio.to_thread(client.put_object, **params)
        except (ClientError, BotoCoreError) as e:
            raise self._failure("put_object", object_key, e) from e
        finally:
            storage_latency_seconds.labels(operation="put_object").observe(time.time() - start_time)
        
        logger.debug(f"Stored {len(body)} bytes at {bucket}/{object_key}")
    
    def public_url(self, bucket: str, object_key: str) -> str:
        """Durable, non-expiring URL for an object in a public bucket."""
        return f"{self.settings.public_base_url}/{bucket}/{object_key}"


# Singleton instance
_object_store: Optional[ObjectStore] = None


def get_object_store() -> ObjectStore:
    """
    Get the singleton object store built from the process settings.
    
    Returns:
        ObjectStore instance (may or may not be configured)
    """
    global _object_store
    if _object_store is None:
        _object_store = ObjectStore(app_settings)
    return _object_store
