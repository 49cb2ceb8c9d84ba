from careers.schemas.application import (
    ApplicationCreated,
    ApplicationFileOut,
    ApplicationOut,
    ApplicationStatsOut,
    ApplicationStatusUpdate,
    MessageOut,
)
from careers.schemas.maintenance import OrphanedUploadsOut, SweepResultOut

__all__ = [
    "ApplicationFileOut",
    "ApplicationOut",
    "ApplicationCreated",
    "ApplicationStatusUpdate",
    "ApplicationStatsOut",
    "MessageOut",
    "OrphanedUploadsOut",
    "SweepResultOut",
]
