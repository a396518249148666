"""
Repository layer for database operations.
"""
from filedrop.repositories.file_record_repository import FileRecordRepository

__all__ = ["FileRecordRepository"]
