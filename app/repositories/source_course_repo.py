"""Read access to the authoritative LMS course tables.

Assembles denormalized ``Course`` records: every unarchived course joined with
its formatted lesson outline and, for courses that are not globally
available, the sorted list of organizations that may see it.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import false, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.course import Course
from app.models.source import (
    SourceCourse,
    SourceCourseLesson,
    SourceCourseOrganization,
)
from app.repositories.results import StoreResult

logger = logging.getLogger(__name__)


def format_lesson(title: Optional[str], description: Optional[str]) -> str:
    """Render one lesson as ``"title: description"``.

    Falls back to whichever half is present; returns ``""`` when both are
    blank so the caller can drop the lesson.
    """
    title = (title or "").strip()
    description = (description or "").strip()
    if not title and not description:
        return ""
    if not description:
        return title
    if not title:
        return description
    return f"{title}: {description}"


class SourceCourseReader:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_courses(self) -> StoreResult[List[Course]]:
        try:
            async with self.session_factory() as session:
                lessons = await self._lessons_by_course(session)
                organizations = await self._organizations_by_course(session)
                result = await session.execute(
                    select(SourceCourse)
                    .where(SourceCourse.archived == false())
                    .order_by(SourceCourse.course_id)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Error while fetching courses from source store: %s", exc)
            return StoreResult.unavailable(
                f"Source store unavailable: {exc}", cause=exc
            )

        courses = []
        for row in rows:
            course = Course(
                course_id=row.course_id,
                course_name=row.course_name or "",
                code=row.code,
                description=row.description,
                created=row.created,
                last_modified=row.last_modified,
                available_to_all_organizations=bool(
                    row.available_to_all_organizations
                ),
                available_instructor_led=bool(row.available_instructor_led),
                available_self_paced=bool(row.available_self_paced),
                archived=bool(row.archived),
                outline_objective=row.outline_objective,
                outline_overview=row.outline_overview,
                outline_target_audience=row.outline_target_audience,
                outline_lessons=lessons.get(row.course_id),
            )
            if not course.available_to_all_organizations:
                course.organization_ids = organizations.get(row.course_id)
            courses.append(course)
        return StoreResult.success(courses)

    async def _lessons_by_course(self, session: AsyncSession) -> Dict[int, str]:
        result = await session.execute(
            select(SourceCourseLesson).order_by(
                SourceCourseLesson.course_id, SourceCourseLesson.lesson_id
            )
        )
        grouped: Dict[int, List[str]] = defaultdict(list)
        for lesson in result.scalars().all():
            # Keep the key even when every lesson is blank
            lines = grouped[lesson.course_id]
            line = format_lesson(lesson.lesson_title, lesson.lesson_description)
            if line:
                lines.append(line)
        return {course_id: "\n".join(lines) for course_id, lines in grouped.items()}

    async def _organizations_by_course(
        self, session: AsyncSession
    ) -> Dict[int, str]:
        result = await session.execute(
            select(
                SourceCourseOrganization.course_id,
                SourceCourseOrganization.organization_id,
            )
        )
        grouped: Dict[int, set] = defaultdict(set)
        for course_id, organization_id in result.all():
            grouped[course_id].add(organization_id)
        return {
            course_id: ",".join(str(org) for org in sorted(org_ids))
            for course_id, org_ids in grouped.items()
        }
