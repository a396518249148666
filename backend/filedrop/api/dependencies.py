"""
FastAPI dependencies wiring settings, database and storage into the
upload components. Tests override ``get_db``, ``get_object_store`` and
``get_settings``.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from filedrop.config import Settings, settings as app_settings
from filedrop.database import get_db
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.storage.access import AccessBroker
from filedrop.storage.object_store import ObjectStore, get_object_store
from filedrop.storage.presign import UploadCoordinator


def get_settings() -> Settings:
    """Process-wide settings."""
    return app_settings


def get_catalog(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> FileRecordRepository:
    return FileRecordRepository(db, timeout=settings.backend_timeout_seconds)


def get_upload_coordinator(
    catalog: FileRecordRepository = Depends(get_catalog),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings)
) -> UploadCoordinator:
    return UploadCoordinator(settings, store, catalog)


def get_access_broker(
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings)
) -> AccessBroker:
    return AccessBroker(settings, store)
