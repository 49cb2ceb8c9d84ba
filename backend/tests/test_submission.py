from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from careers.errors import PersistenceError, StorageError, ValidationError
from careers.models.application import Application
from careers.models.application_file import ApplicationFile
from careers.services.file_store import FileStore
from careers.services.reconcile import find_orphaned_uploads
from careers.services.submission import submit_application
from conftest import make_file, make_form

MAX_BYTES = 5 * 1024 * 1024


def test_submission_persists_application_and_files(db, store):
    files = {
        "resume": [make_file("resume", "resume.txt")],
        "cover_letter_file": [make_file("cover_letter_file", "letter.pdf", content_type="application/pdf")],
        "additional_docs": [make_file("additional_docs", "portfolio.png", content_type="image/png")],
    }

    application = submit_application(db, store, make_form(), files)

    assert isinstance(application.id, int)
    assert application.status == "pending"
    assert application.created_at is not None
    assert [f.category for f in application.files] == ["resume", "cover_letter", "additional"]
    assert [f.file_name for f in application.files] == ["resume.txt", "letter.pdf", "portfolio.png"]
    for row in application.files:
        assert Path(row.file_path).exists()
        assert row.file_size == 2048


def test_optional_fields_are_stored_as_null_when_blank(db, store):
    application = submit_application(
        db,
        store,
        make_form(phone="  ", cover_letter=""),
        {"resume": [make_file("resume", "cv.pdf", content_type="application/pdf")]},
    )
    assert application.phone is None
    assert application.cover_letter is None


@pytest.mark.parametrize("field", ["name", "email", "position"])
def test_missing_required_field_is_rejected(db, store, field):
    with pytest.raises(ValidationError):
        submit_application(db, store, make_form(**{field: "   "}), {"resume": [make_file("resume", "cv.txt")]})
    assert db.query(Application).count() == 0
    assert store.list_files() == []


def test_unknown_position_is_rejected(db, store):
    with pytest.raises(ValidationError):
        submit_application(db, store, make_form(position="astronaut"), {"resume": [make_file("resume", "cv.txt")]})


def test_resume_is_required(db, store):
    empty_part = make_file("resume", "", size=0, content_type="application/octet-stream")
    with pytest.raises(ValidationError, match="Resume"):
        submit_application(db, store, make_form(), {"resume": [empty_part]})


def test_size_limit_is_inclusive(db, store):
    exact = {"resume": [make_file("resume", "cv.txt", size=MAX_BYTES)]}
    assert submit_application(db, store, make_form(), exact, max_bytes=MAX_BYTES).id

    over = {"resume": [make_file("resume", "cv.txt", size=MAX_BYTES + 1)]}
    with pytest.raises(ValidationError, match="too large"):
        submit_application(db, store, make_form(), over, max_bytes=MAX_BYTES)
    assert db.query(Application).count() == 1


def test_at_most_three_additional_documents(db, store):
    three = [make_file("additional_docs", f"doc{i}.txt") for i in range(3)]
    application = submit_application(
        db, store, make_form(), {"resume": [make_file("resume", "cv.txt")], "additional_docs": three}
    )
    assert len(application.files) == 4

    four = [make_file("additional_docs", f"doc{i}.txt") for i in range(4)]
    with pytest.raises(ValidationError, match="additional"):
        submit_application(db, store, make_form(), {"resume": [make_file("resume", "cv.txt")], "additional_docs": four})


@pytest.mark.parametrize("slot", ["resume", "cover_letter_file", "additional_docs"])
@pytest.mark.parametrize("content_type", ["application/pdf", "application/x-msdownload"])
def test_executable_rejected_in_any_slot(db, store, slot, content_type):
    files = {"resume": [make_file("resume", "cv.txt")]}
    files[slot] = [make_file(slot, "setup.exe", content_type=content_type)]

    with pytest.raises(ValidationError, match="not allowed"):
        submit_application(db, store, make_form(), files)
    assert store.list_files() == []


def test_disallowed_mime_type_is_rejected(db, store):
    files = {"resume": [make_file("resume", "cv.pdf", content_type="application/zip")]}
    with pytest.raises(ValidationError):
        submit_application(db, store, make_form(), files)


def test_second_resume_is_rejected(db, store):
    files = {"resume": [make_file("resume", "cv.txt"), make_file("resume", "cv2.txt")]}
    with pytest.raises(ValidationError, match="one resume"):
        submit_application(db, store, make_form(), files)


def test_storage_failure_aborts_before_database_write(db, tmp_path):
    class FlakyStore(FileStore):
        calls = 0

        def store(self, field_name, original_name, data):
            self.calls += 1
            if self.calls == 2:
                raise StorageError("disk full")
            return super().store(field_name, original_name, data)

    store = FlakyStore(tmp_path / "uploads")
    files = {
        "resume": [make_file("resume", "cv.txt")],
        "additional_docs": [make_file("additional_docs", "extra.txt")],
    }

    with pytest.raises(StorageError):
        submit_application(db, store, make_form(), files)
    assert db.query(Application).count() == 0
    assert store.list_files() == []


def test_database_failure_rolls_back_everything(db, store, monkeypatch):
    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "commit", failing_commit)
    files = {
        "resume": [make_file("resume", "cv.txt")],
        "additional_docs": [make_file("additional_docs", "extra.txt")],
    }

    with pytest.raises(PersistenceError):
        submit_application(db, store, make_form(), files)

    monkeypatch.undo()
    assert db.query(Application).count() == 0
    assert db.query(ApplicationFile).count() == 0
    # stored files stay behind for the orphan sweep
    assert len(find_orphaned_uploads(db, store, grace_seconds=0)) == 2


def test_storage_rejects_duplicate_resume_rows(db, store):
    application = submit_application(db, store, make_form(), {"resume": [make_file("resume", "cv.txt")]})

    db.add(ApplicationFile(application_id=application.id, file_name="x.txt", file_path="x", category="resume"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    db.add(ApplicationFile(application_id=application.id, file_name="a.txt", file_path="a", category="additional"))
    db.add(ApplicationFile(application_id=application.id, file_name="b.txt", file_path="b", category="additional"))
    db.commit()
