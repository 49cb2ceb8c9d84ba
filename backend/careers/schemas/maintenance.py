from __future__ import annotations

from pydantic import BaseModel


class OrphanedUploadsOut(BaseModel):
    files: list[str]


class SweepResultOut(BaseModel):
    deleted: list[str]
