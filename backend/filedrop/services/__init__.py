"""
Background maintenance services.
"""
from filedrop.services.upload_sweeper import UploadSweeper, SweepResult

__all__ = [
    "UploadSweeper",
    "SweepResult",
]
