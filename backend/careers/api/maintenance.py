from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from careers.auth import require_admin
from careers.database import get_db
from careers.schemas.maintenance import OrphanedUploadsOut, SweepResultOut
from careers.services.file_store import FileStore, get_file_store
from careers.services.reconcile import DEFAULT_GRACE_SECONDS, find_orphaned_uploads, sweep_orphaned_uploads


router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/orphaned-uploads", response_model=OrphanedUploadsOut)
def list_orphaned_uploads(
    grace_seconds: int = Query(DEFAULT_GRACE_SECONDS, ge=0),
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
) -> OrphanedUploadsOut:
    return OrphanedUploadsOut(files=find_orphaned_uploads(db, store, grace_seconds=grace_seconds))


@router.delete("/orphaned-uploads", response_model=SweepResultOut)
def delete_orphaned_uploads(
    grace_seconds: int = Query(DEFAULT_GRACE_SECONDS, ge=0),
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
) -> SweepResultOut:
    return SweepResultOut(deleted=sweep_orphaned_uploads(db, store, grace_seconds=grace_seconds))
