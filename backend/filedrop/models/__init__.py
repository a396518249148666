"""
Database models package.
"""
from filedrop.models.base import Base
from filedrop.models.file_record import FileRecord, FileStatus, Exposure

__all__ = [
    "Base",
    "FileRecord",
    "FileStatus",
    "Exposure",
]
