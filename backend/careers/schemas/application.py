from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, computed_field


class ApplicationFileOut(BaseModel):
    id: int
    file_name: str
    file_path: str
    file_type: str | None = None
    file_size: int | None = None
    category: str
    uploaded_at: datetime | None = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def url(self) -> str:
        return "/uploads/" + self.file_path.replace("\\", "/").rsplit("/", 1)[-1]


class ApplicationOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    position: str
    cover_letter: str | None = None
    status: str
    created_at: datetime | None = None
    files: list[ApplicationFileOut] = []

    class Config:
        from_attributes = True


class ApplicationCreated(BaseModel):
    id: int
    message: str = "Application submitted successfully"


class ApplicationStatusUpdate(BaseModel):
    status: str


class ApplicationStatsOut(BaseModel):
    pending: int = 0
    reviewed: int = 0
    total: int = 0


class MessageOut(BaseModel):
    message: str
