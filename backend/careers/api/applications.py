from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from careers.auth import require_admin
from careers.config import settings
from careers.database import get_db
from careers.models.application import Application
from careers.schemas.application import (
    ApplicationCreated,
    ApplicationOut,
    ApplicationStatsOut,
    ApplicationStatusUpdate,
    MessageOut,
)
from careers.services import applications as service
from careers.services.file_store import FileStore, get_file_store
from careers.services.submission import IncomingFile, SubmissionForm, submit_application


router = APIRouter()


def _read_uploads(field_name: str, uploads: list[UploadFile] | None) -> list[IncomingFile]:
    # read one byte past the limit so oversize files are detected without buffering them whole
    limit = settings.max_upload_bytes + 1
    return [
        IncomingFile(
            field_name=field_name,
            filename=Path(upload.filename or "").name,
            content_type=upload.content_type,
            data=upload.file.read(limit),
        )
        for upload in uploads or []
    ]


@router.post("", response_model=ApplicationCreated, status_code=201)
def create_application(
    name: str | None = Form(None),
    email: str | None = Form(None),
    phone: str | None = Form(None),
    position: str | None = Form(None),
    cover_letter: str | None = Form(None),
    resume: list[UploadFile] | None = File(None),
    cover_letter_file: list[UploadFile] | None = File(None),
    additional_docs: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
) -> ApplicationCreated:
    form = SubmissionForm(name=name, email=email, position=position, phone=phone, cover_letter=cover_letter)
    files = {
        "resume": _read_uploads("resume", resume),
        "cover_letter_file": _read_uploads("cover_letter_file", cover_letter_file),
        "additional_docs": _read_uploads("additional_docs", additional_docs),
    }
    application = submit_application(db, store, form, files)
    return ApplicationCreated(id=application.id)


@router.get("", response_model=list[ApplicationOut], dependencies=[Depends(require_admin)])
def list_applications(
    status: str | None = None,
    position: str | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
) -> list[Application]:
    return service.list_applications(db, status=status, position=position, search=search)


@router.get("/stats", response_model=ApplicationStatsOut, dependencies=[Depends(require_admin)])
def application_stats(db: Session = Depends(get_db)) -> ApplicationStatsOut:
    return ApplicationStatsOut(**service.application_stats(db))


@router.get("/{app_id}", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def get_application(app_id: int, db: Session = Depends(get_db)) -> Application:
    return service.get_application(db, app_id)


@router.patch("/{app_id}/status", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def update_application_status(
    app_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
) -> Application:
    return service.set_status(db, app_id, payload.status)


@router.delete("/{app_id}", response_model=MessageOut, dependencies=[Depends(require_admin)])
def delete_application(
    app_id: int,
    db: Session = Depends(get_db),
    store: FileStore = Depends(get_file_store),
) -> MessageOut:
    service.delete_application(db, store, app_id)
    return MessageOut(message="Application deleted successfully")
