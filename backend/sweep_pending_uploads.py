#!/usr/bin/env python3
"""
Script to expire abandoned uploads.

Marks every "pending" file record whose upload URL has expired (plus the
configured grace period) as "expired". Records are never deleted.

Usage:
    # From inside the Docker container:
    docker exec filedrop-api python sweep_pending_uploads.py
    
    # Only list what would be expired:
    docker exec filedrop-api python sweep_pending_uploads.py --dry-run
    
    # Or locally with environment variables:
    DATABASE_URL=postgresql+asyncpg://... python sweep_pending_uploads.py
"""
import argparse
import asyncio
import sys

from filedrop.config import settings
from filedrop.database import AsyncSessionLocal, engine
from filedrop.errors import BackendUnavailableError
from filedrop.repositories.file_record_repository import FileRecordRepository
from filedrop.services.upload_sweeper import UploadSweeper
from filedrop.utils.logging import configure_logging


async def run(dry_run: bool) -> int:
    try:
        async with AsyncSessionLocal() as db:
            catalog = FileRecordRepository(db, timeout=settings.backend_timeout_seconds)
            sweeper = UploadSweeper(settings, catalog)
            result = await sweeper.expire_stale_pending(dry_run=dry_run)
    finally:
        await engine.dispose()
    
    print(f"Cutoff: {result.cutoff.isoformat()}")
    print(f"Stale pending records: {len(result.candidates)}")
    if dry_run:
        for file_id in result.candidates[:20]:
            print(f"  {file_id}")
        if len(result.candidates) > 20:
            print(f"  ... and {len(result.candidates) - 20} more")
        print("Dry run, nothing changed.")
    else:
        print(f"Expired: {result.expired}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Expire pending uploads that were never confirmed")
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='List stale records without changing them'
    )
    args = parser.parse_args()
    
    configure_logging('filedrop-sweeper', settings.log_level)
    
    try:
        sys.exit(asyncio.run(run(args.dry_run)))
    except BackendUnavailableError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
