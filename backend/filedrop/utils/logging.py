"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- file_id
- object_key
- duration_ms

Usage:
    from filedrop.utils.logging import configure_logging, log_upload_requested
    
    configure_logging('filedrop-api', 'INFO')
    log_upload_requested(logger, file_id='123', object_key='1700000000000-a.png', duration_ms=12.5)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""
    
    _service_name = None
    _configured = False
    
    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.
        
        Args:
            service_name: Service identifier (filedrop-api or filedrop-sweeper)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured
        
        cls._service_name = service_name
        
        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []
        
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )
        
        # Console handler (for docker logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        
        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True
        
        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    file_id: Optional[str] = None,
    object_key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.
    
    Args:
        event: Event name (mandatory)
        file_id: Optional file record ID
        object_key: Optional object key in the bucket
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
        
    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }
    
    if file_id:
        extra["file_id"] = file_id
    if object_key:
        extra["object_key"] = object_key
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
    
    return extra


# Upload event functions

def log_upload_requested(
    logger: logging.Logger,
    file_id: str,
    object_key: str,
    duration_ms: Optional[float] = None,
    exposure: Optional[str] = None,
    **kwargs
):
    """
    Log presigned upload issuance.
    
    Args:
        logger: Logger instance
        file_id: File record ID (required)
        object_key: Object key the URL is scoped to (required)
        duration_ms: Optional duration in milliseconds
        exposure: Optional exposure of the new record
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_requested",
        file_id=file_id,
        object_key=object_key,
        duration_ms=duration_ms,
        **kwargs
    )
    if exposure:
        extra["exposure"] = exposure
    
    logger.info(f"Upload requested: {file_id}", extra=extra)


def log_upload_confirmed(
    logger: logging.Logger,
    file_id: str,
    object_key: Optional[str] = None,
    duration_ms: Optional[float] = None,
    verified: bool = False,
    **kwargs
):
    """
    Log upload confirmation.
    
    Args:
        logger: Logger instance
        file_id: File record ID (required)
        object_key: Optional object key
        duration_ms: Optional duration in milliseconds
        verified: Whether the object was checked in storage first
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_confirmed",
        file_id=file_id,
        object_key=object_key,
        duration_ms=duration_ms,
        verified=verified,
        **kwargs
    )
    
    logger.info(f"Upload confirmed: {file_id}", extra=extra)


def log_read_url_issued(
    logger: logging.Logger,
    bucket: str,
    object_key: str,
    expires_in: int,
    **kwargs
):
    """Log presigned read URL issuance."""
    extra = _build_log_extra(
        event="read_url_issued",
        object_key=object_key,
        bucket=bucket,
        expires_in=expires_in,
        **kwargs
    )
    
    logger.info(f"Read URL issued: {bucket}/{object_key}", extra=extra)


def log_uploads_expired(
    logger: logging.Logger,
    count: int,
    dry_run: bool = False,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a sweeper run."""
    extra = _build_log_extra(
        event="uploads_expired",
        duration_ms=duration_ms,
        count=count,
        dry_run=dry_run,
        **kwargs
    )
    
    logger.info(f"Expired {count} pending uploads", extra=extra)


# Backend event functions

def log_backend_failure(
    logger: logging.Logger,
    backend: str,
    operation: str,
    error: str,
    object_key: Optional[str] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log a failed call to the database or object store.
    
    Args:
        logger: Logger instance
        backend: "database" or "storage" (required)
        operation: Operation name (required)
        error: Error message (required)
        object_key: Optional object key involved
        include_traceback: Whether to include stack trace
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="backend_failure",
        object_key=object_key,
        backend=backend,
        operation=operation,
        error=str(error),
        **kwargs
    )
    
    message = f"Backend failure: {backend}.{operation} - {error}"
    
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
            return
    logger.error(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
