"""SQLAlchemy ORM models for the catalog store.

Separate from the Pydantic models in course.py, which describe the in-memory
``Course`` record passed between the jobs. This layer manages persistence
concerns only.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import Boolean, String, DateTime, Text

Base = declarative_base()


class CatalogCourseRecord(Base):
    """Mirror of one source course plus its publish cursor."""

    __tablename__ = "courses"

    course_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=False)
    course_name: Mapped[str] = mapped_column(String(255), default="")
    code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_modified: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    available_to_all_organizations: Mapped[bool] = mapped_column(
        Boolean, default=False
    )
    available_instructor_led: Mapped[bool] = mapped_column(Boolean, default=False)
    available_self_paced: Mapped[bool] = mapped_column(Boolean, default=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    is_file_updated: Mapped[bool] = mapped_column(
        Boolean, default=False, index=True
    )
    outline_objective: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    outline_overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    outline_target_audience: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )
    outline_lessons: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    organization_ids: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

