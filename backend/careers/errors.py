from __future__ import annotations


class IntakeError(Exception):
    """Base class for errors raised by the intake services."""

    status_code = 500
    public_message: str | None = None

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def client_message(self) -> str:
        return self.public_message or self.message


class ValidationError(IntakeError):
    """Bad or missing input. Raised before anything is written."""

    status_code = 400


class NotFoundError(IntakeError):
    status_code = 404


class StorageError(IntakeError):
    """An upload could not be written to disk."""

    public_message = "Failed to store uploaded file"


class PersistenceError(IntakeError):
    """The database transaction failed and was rolled back."""

    public_message = "Failed to save application"
