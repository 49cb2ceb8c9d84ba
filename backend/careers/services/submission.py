from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careers.config import settings
from careers.errors import PersistenceError, StorageError, ValidationError
from careers.models.application import POSITIONS, STATUS_PENDING, Application
from careers.models.application_file import (
    CATEGORY_ADDITIONAL,
    CATEGORY_COVER_LETTER,
    CATEGORY_RESUME,
    ApplicationFile,
)
from careers.services.file_store import FileStore, StoredFile

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png"}
ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "image/jpeg",
    "image/png",
}

# form field -> file category
FILE_FIELDS = {
    "resume": CATEGORY_RESUME,
    "cover_letter_file": CATEGORY_COVER_LETTER,
    "additional_docs": CATEGORY_ADDITIONAL,
}

_FIELD_LIMITS = {"name": 100, "email": 100, "phone": 15}


@dataclass
class IncomingFile:
    field_name: str
    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        return not self.filename and not self.data


@dataclass
class SubmissionForm:
    name: str | None
    email: str | None
    position: str | None
    phone: str | None = None
    cover_letter: str | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_form(form: SubmissionForm) -> SubmissionForm:
    cleaned = SubmissionForm(
        name=_clean(form.name),
        email=_clean(form.email),
        position=_clean(form.position),
        phone=_clean(form.phone),
        cover_letter=_clean(form.cover_letter),
    )

    missing = [field for field in ("name", "email", "position") if getattr(cleaned, field) is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    for field, limit in _FIELD_LIMITS.items():
        value = getattr(cleaned, field)
        if value is not None and len(value) > limit:
            raise ValidationError(f"Field '{field}' must be at most {limit} characters")

    if cleaned.position not in POSITIONS:
        raise ValidationError(f"Unknown position '{cleaned.position}'")
    return cleaned


def _normalize_mime(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_file(upload: IncomingFile, max_bytes: int) -> None:
    suffix = Path(upload.filename).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS or _normalize_mime(upload.content_type) not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            f"File '{upload.filename}' is not allowed. Only PDF, DOC, DOCX, TXT, JPG, JPEG, PNG files are allowed"
        )
    if upload.size > max_bytes:
        raise ValidationError(
            f"File '{upload.filename}' is too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )


def validate_files(
    files: dict[str, list[IncomingFile]],
    max_bytes: int | None = None,
    max_additional: int | None = None,
) -> list[tuple[str, IncomingFile]]:
    """Check every upload slot and return ``(category, file)`` pairs in form order."""
    max_bytes = settings.max_upload_bytes if max_bytes is None else max_bytes
    max_additional = settings.max_additional_docs if max_additional is None else max_additional

    unknown = set(files) - set(FILE_FIELDS)
    if unknown:
        raise ValidationError(f"Unexpected file field(s): {', '.join(sorted(unknown))}")

    present = {field: [f for f in files.get(field, []) if not f.is_empty] for field in FILE_FIELDS}

    if not present["resume"]:
        raise ValidationError("Resume file is required")
    if len(present["resume"]) > 1:
        raise ValidationError("Only one resume file is allowed")
    if len(present["cover_letter_file"]) > 1:
        raise ValidationError("Only one cover letter file is allowed")
    if len(present["additional_docs"]) > max_additional:
        raise ValidationError(f"At most {max_additional} additional documents are allowed")

    accepted: list[tuple[str, IncomingFile]] = []
    for field, category in FILE_FIELDS.items():
        for upload in present[field]:
            validate_file(upload, max_bytes)
            accepted.append((category, upload))
    return accepted


def _store_all(store: FileStore, accepted: list[tuple[str, IncomingFile]]) -> list[StoredFile]:
    stored: list[StoredFile] = []
    try:
        for _, upload in accepted:
            stored.append(store.store(upload.field_name, upload.filename, upload.data))
    except StorageError:
        # nothing has reached the database yet, so this submission's files are unreferenced
        for item in stored:
            store.delete(item.path)
        raise
    return stored


def submit_application(
    db: Session,
    store: FileStore,
    form: SubmissionForm,
    files: dict[str, list[IncomingFile]],
    max_bytes: int | None = None,
    max_additional: int | None = None,
) -> Application:
    """Validate a submission, write its files, then insert the application and file rows atomically.

    Files are written before the transaction opens. If the transaction fails the
    rows are rolled back but the files stay on disk until the orphan sweep in
    ``careers.services.reconcile`` removes them.
    """
    cleaned = validate_form(form)
    accepted = validate_files(files, max_bytes=max_bytes, max_additional=max_additional)
    stored = _store_all(store, accepted)

    application = Application(
        name=cleaned.name,
        email=cleaned.email,
        phone=cleaned.phone,
        position=cleaned.position,
        cover_letter=cleaned.cover_letter,
        status=STATUS_PENDING,
    )
    application.files = [
        ApplicationFile(
            file_name=upload.filename,
            file_path=stored_file.path,
            file_type=_normalize_mime(upload.content_type),
            file_size=stored_file.size,
            category=category,
        )
        for (category, upload), stored_file in zip(accepted, stored)
    ]

    try:
        db.add(application)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Rolled back application for %s; %d stored file(s) left for the orphan sweep",
            cleaned.email,
            len(stored),
        )
        raise PersistenceError(f"Failed to save application: {exc}") from exc

    db.refresh(application)
    logger.info(
        "Application %s submitted for position %s with %d file(s)",
        application.id,
        application.position,
        len(stored),
    )
    return application
