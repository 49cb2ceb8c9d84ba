from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import relationship

from careers.database import Base

CATEGORY_RESUME = "resume"
CATEGORY_COVER_LETTER = "cover_letter"
CATEGORY_ADDITIONAL = "additional"
FILE_CATEGORIES = (CATEGORY_RESUME, CATEGORY_COVER_LETTER, CATEGORY_ADDITIONAL)

_SINGLE_CATEGORY_CLAUSE = text("category IN ('resume', 'cover_letter')")


class ApplicationFile(Base):
    __tablename__ = "application_files"
    __table_args__ = (
        CheckConstraint("category IN ('resume', 'cover_letter', 'additional')", name="ck_application_file_category"),
        # one resume and one cover letter per application; additional docs are unrestricted
        Index(
            "uq_application_single_category",
            "application_id",
            "category",
            unique=True,
            sqlite_where=_SINGLE_CATEGORY_CLAUSE,
            postgresql_where=_SINGLE_CATEGORY_CLAUSE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(
        Integer,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_type = Column(String(100))
    file_size = Column(Integer)
    category = Column(String(50), nullable=False)
    uploaded_at = Column(DateTime, server_default=func.now())

    application = relationship("Application", back_populates="files")
