"""
Storage module for S3-compatible object storage.

Clients upload and read bytes directly against the bucket using presigned
URLs; the API only signs URLs and keeps the metadata.
"""
from filedrop.storage.object_store import get_object_store, ObjectStore
from filedrop.storage.presign import UploadCoordinator, PresignedUpload, generate_object_key
from filedrop.storage.access import AccessBroker

__all__ = [
    "get_object_store",
    "ObjectStore",
    "UploadCoordinator",
    "PresignedUpload",
    "generate_object_key",
    "AccessBroker",
]
