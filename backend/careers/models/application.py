from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from careers.database import Base

STATUS_PENDING = "pending"
STATUS_REVIEWED = "reviewed"
APPLICATION_STATUSES = (STATUS_PENDING, STATUS_REVIEWED)

POSITIONS = {
    "developer": "Software Developer",
    "designer": "UI/UX Designer",
    "manager": "Project Manager",
    "analyst": "Business Analyst",
}


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'reviewed')", name="ck_application_status"),
        Index("idx_applications_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    phone = Column(String(15))
    position = Column(String(100), nullable=False)
    cover_letter = Column(Text)
    status = Column(String(20), default=STATUS_PENDING, server_default=STATUS_PENDING, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    files = relationship(
        "ApplicationFile",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ApplicationFile.id",
    )
