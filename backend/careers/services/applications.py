from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from careers.errors import NotFoundError, PersistenceError, ValidationError
from careers.models.application import APPLICATION_STATUSES, Application
from careers.models.application_file import ApplicationFile
from careers.services.file_store import FileStore

logger = logging.getLogger(__name__)

# largest value a signed 64-bit INTEGER primary key can hold
MAX_APPLICATION_ID = 2**63 - 1


def _ensure_valid_id(application_id: int) -> None:
    if not 1 <= application_id <= MAX_APPLICATION_ID:
        raise NotFoundError("Application not found")


def _with_files():
    # one LEFT OUTER JOIN; applications without files come back with files == []
    return (
        select(Application)
        .outerjoin(Application.files)
        .options(contains_eager(Application.files))
        .execution_options(populate_existing=True)
    )


def list_applications(
    db: Session,
    status: str | None = None,
    position: str | None = None,
    search: str | None = None,
) -> list[Application]:
    stmt = _with_files()
    if status:
        stmt = stmt.where(Application.status == status)
    if position:
        stmt = stmt.where(Application.position == position)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Application.name).like(term),
                func.lower(Application.email).like(term),
                func.lower(Application.position).like(term),
            )
        )
    stmt = stmt.order_by(Application.created_at.desc(), Application.id.desc(), ApplicationFile.id)
    return list(db.scalars(stmt).unique().all())


def get_application(db: Session, application_id: int) -> Application:
    _ensure_valid_id(application_id)
    stmt = _with_files().where(Application.id == application_id).order_by(ApplicationFile.id)
    application = db.scalars(stmt).unique().one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    return application


def application_stats(db: Session) -> dict[str, int]:
    rows = db.query(Application.status, func.count(Application.id)).group_by(Application.status).all()
    counts = {status: count for status, count in rows}
    stats = {status: int(counts.get(status, 0)) for status in APPLICATION_STATUSES}
    stats["total"] = sum(int(count) for count in counts.values())
    return stats


def set_status(db: Session, application_id: int, new_status: str) -> Application:
    if new_status not in APPLICATION_STATUSES:
        raise ValidationError("Invalid status")
    _ensure_valid_id(application_id)

    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFoundError("Application not found")

    if application.status != new_status:
        application.status = new_status
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to update status of application %s", application_id)
            raise PersistenceError(f"Failed to update status: {exc}") from exc
        logger.info("Application %s marked %s", application_id, new_status)

    return get_application(db, application_id)


def delete_application(db: Session, store: FileStore, application_id: int) -> int:
    """Delete an application and its file rows, then unlink its files.

    Returns the number of files removed from disk. Unlinking happens after the
    commit and never fails the delete.
    """
    _ensure_valid_id(application_id)
    paths = [
        row.file_path
        for row in db.query(ApplicationFile.file_path).filter(ApplicationFile.application_id == application_id)
    ]

    try:
        deleted = (
            db.query(Application)
            .filter(Application.id == application_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Application not found")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete application %s", application_id)
        raise PersistenceError(f"Failed to delete application: {exc}") from exc

    removed = sum(1 for path in paths if store.delete(path))
    logger.info("Deleted application %s (%d of %d file(s) removed)", application_id, removed, len(paths))
    return removed
