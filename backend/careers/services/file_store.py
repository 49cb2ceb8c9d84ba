from __future__ import annotations

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from careers.config import settings
from careers.errors import StorageError

logger = logging.getLogger(__name__)

_FIELD_NAME_RE = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class StoredFile:
    path: str
    filename: str
    size: int


class FileStore:
    """Uploaded documents on local disk, one file per upload, never overwritten."""

    def __init__(self, upload_dir: str | Path) -> None:
        self.upload_dir = Path(upload_dir)

    def generate_filename(self, field_name: str, original_name: str) -> str:
        prefix = _FIELD_NAME_RE.sub("_", field_name) or "file"
        suffix = Path(original_name).suffix.lower()
        return f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    def store(self, field_name: str, original_name: str, data: bytes) -> StoredFile:
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Upload directory {self.upload_dir} is not writable: {exc}") from exc

        # retry on the off chance two uploads land on the same millisecond and random suffix
        for _ in range(3):
            filename = self.generate_filename(field_name, original_name)
            target = self.upload_dir / filename
            try:
                with target.open("xb") as fh:
                    fh.write(data)
            except FileExistsError:
                continue
            except OSError as exc:
                target.unlink(missing_ok=True)
                raise StorageError(f"Failed to write {target}: {exc}") from exc
            logger.debug("Stored %s (%d bytes) as %s", original_name, len(data), target)
            return StoredFile(path=str(target), filename=filename, size=len(data))

        raise StorageError(f"Could not generate a unique filename for {original_name}")

    def delete(self, path: str | Path) -> bool:
        target = Path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("File %s already absent, nothing to delete", target)
            return False
        except OSError:
            logger.exception("Failed to delete file %s", target)
            return False
        logger.debug("Deleted %s", target)
        return True

    def list_files(self) -> list[str]:
        if not self.upload_dir.is_dir():
            return []
        return sorted(str(path) for path in self.upload_dir.iterdir() if path.is_file())


def get_file_store() -> FileStore:
    return FileStore(settings.upload_dir)
