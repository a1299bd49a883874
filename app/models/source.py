"""Read-only ORM mapping of the authoritative LMS tables.

Table and column names follow the LMS schema, which this service does not
own; attribute names are the snake_case equivalents used everywhere else.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import Boolean, Integer, String, DateTime, Text

SourceBase = declarative_base()


class SourceCourse(SourceBase):
    __tablename__ = "Courses"

    course_id: Mapped[int] = mapped_column("CourseId", primary_key=True)
    course_name: Mapped[str] = mapped_column("Name", String(255), default="")
    code: Mapped[Optional[str]] = mapped_column("Code", String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(
        "Description", Text, nullable=True
    )
    created: Mapped[Optional[datetime]] = mapped_column(
        "Created", DateTime, nullable=True
    )
    last_modified: Mapped[Optional[datetime]] = mapped_column(
        "LastModified", DateTime, nullable=True
    )
    available_to_all_organizations: Mapped[bool] = mapped_column(
        "AvailableToAllOrganizations", Boolean, default=False
    )
    available_instructor_led: Mapped[bool] = mapped_column(
        "AvailableInstructorLed", Boolean, default=False
    )
    available_self_paced: Mapped[bool] = mapped_column(
        "AvailableSelfPaced", Boolean, default=False
    )
    archived: Mapped[bool] = mapped_column("Archived", Boolean, default=False)
    outline_objective: Mapped[Optional[str]] = mapped_column(
        "Objective", Text, nullable=True
    )
    outline_overview: Mapped[Optional[str]] = mapped_column(
        "Overview", Text, nullable=True
    )
    outline_target_audience: Mapped[Optional[str]] = mapped_column(
        "TargetAudience", Text, nullable=True
    )


class SourceCourseLesson(SourceBase):
    __tablename__ = "CourseLessons"

    id: Mapped[int] = mapped_column("Id", primary_key=True)
    course_id: Mapped[int] = mapped_column("CourseId", Integer, index=True)
    lesson_id: Mapped[int] = mapped_column("LessonId", Integer)
    lesson_title: Mapped[Optional[str]] = mapped_column(
        "LessonTitle", Text, nullable=True
    )
    lesson_description: Mapped[Optional[str]] = mapped_column(
        "LessonDescription", Text, nullable=True
    )


class SourceCourseOrganization(SourceBase):
    __tablename__ = "Courses_Organizations"

    course_id: Mapped[int] = mapped_column("CourseId", Integer, primary_key=True)
    organization_id: Mapped[int] = mapped_column(
        "OrganizationId", Integer, primary_key=True
    )
