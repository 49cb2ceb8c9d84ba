from __future__ import annotations

import logging
import time
from pathlib import Path

from sqlalchemy.orm import Session

from careers.models.application_file import ApplicationFile
from careers.services.file_store import FileStore

logger = logging.getLogger(__name__)

# files younger than this may belong to a submission whose transaction has not committed yet
DEFAULT_GRACE_SECONDS = 3600


def _key(path: str) -> str:
    return str(Path(path).resolve())


def find_orphaned_uploads(db: Session, store: FileStore, grace_seconds: int = DEFAULT_GRACE_SECONDS) -> list[str]:
    """Files in the upload directory that no committed application_files row points at."""
    referenced = {_key(row.file_path) for row in db.query(ApplicationFile.file_path)}
    cutoff = time.time() - grace_seconds
    orphans = []
    for path in store.list_files():
        if _key(path) in referenced:
            continue
        try:
            if Path(path).stat().st_mtime > cutoff:
                continue
        except FileNotFoundError:
            continue
        orphans.append(path)
    return orphans


def sweep_orphaned_uploads(db: Session, store: FileStore, grace_seconds: int = DEFAULT_GRACE_SECONDS) -> list[str]:
    orphans = find_orphaned_uploads(db, store, grace_seconds=grace_seconds)
    deleted = [path for path in orphans if store.delete(path)]
    if orphans:
        logger.info("Orphan sweep removed %d of %d unreferenced upload(s)", len(deleted), len(orphans))
    return deleted
