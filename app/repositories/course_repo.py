"""Repository layer for the catalog store.

Provides an abstraction over direct SQLAlchemy session usage so that the jobs
and routers remain thin and testable. Each operation opens its own session
from the injected factory, which keeps background ticks from holding a
session open between runs.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import false, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.course import Course
from app.models.persisted_course import CatalogCourseRecord
from app.repositories.results import StoreResult

logger = logging.getLogger(__name__)

# Columns copied verbatim from a source Course on every upsert
_SYNCED_FIELDS = (
    "course_name",
    "code",
    "description",
    "created",
    "last_modified",
    "available_to_all_organizations",
    "available_instructor_led",
    "available_self_paced",
    "archived",
    "outline_objective",
    "outline_overview",
    "outline_target_audience",
    "outline_lessons",
    "organization_ids",
)


@dataclass
class UpsertSummary:
    inserted: int = 0
    updated: int = 0


class CourseCatalogRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # WRITE ------------------------------------------------------------------
    async def upsert(self, courses: Iterable[Course]) -> StoreResult[UpsertSummary]:
        """Insert or fully overwrite each course, clearing its publish cursor."""
        summary = UpsertSummary()
        async with self.session_factory() as session:
            try:
                for course in courses:
                    result = await session.execute(
                        select(CatalogCourseRecord).where(
                            CatalogCourseRecord.course_id == course.course_id
                        )
                    )
                    record = result.scalar_one_or_none()
                    if record is None:
                        record = CatalogCourseRecord(course_id=course.course_id)
                        session.add(record)
                        summary.inserted += 1
                    else:
                        summary.updated += 1
                    for field in _SYNCED_FIELDS:
                        setattr(record, field, getattr(course, field))
                    record.is_file_updated = False
                    await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.error("Catalog upsert conflict: %s", exc)
                return StoreResult.conflict(exc)
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Catalog store unavailable during upsert: %s", exc)
                return StoreResult.unavailable(
                    f"Catalog store unavailable: {exc}", cause=exc
                )
        return StoreResult.success(summary)

    async def mark_published(self, course_id: int) -> StoreResult[None]:
        """Set the publish cursor once the course document is live."""
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(CatalogCourseRecord).where(
                        CatalogCourseRecord.course_id == course_id
                    )
                )
                record = result.scalar_one_or_none()
                if record is None:
                    return StoreResult.not_found(f"Course {course_id} not found")
                record.is_file_updated = True
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                return StoreResult.unavailable(
                    f"Catalog store unavailable: {exc}", cause=exc
                )
        return StoreResult.success()

    # READ -------------------------------------------------------------------
    async def get_unpublished(self, limit: int) -> StoreResult[List[Course]]:
        """Courses whose document is stale, lowest course id first."""
        return await self._select(
            select(CatalogCourseRecord)
            .where(CatalogCourseRecord.is_file_updated == false())
            .order_by(CatalogCourseRecord.course_id)
            .limit(limit)
        )

    async def get_courses(
        self, course_ids: Optional[Sequence[int]] = None
    ) -> StoreResult[List[Course]]:
        """Courses by id; every course when ``course_ids`` is empty."""
        query = select(CatalogCourseRecord).order_by(CatalogCourseRecord.course_id)
        if course_ids:
            query = query.where(CatalogCourseRecord.course_id.in_(course_ids))
        return await self._select(query)

    async def get(self, course_id: int) -> StoreResult[Course]:
        result = await self.get_courses([course_id])
        if not result.ok:
            return StoreResult(result.status, error=result.error)
        if not result.value:
            return StoreResult.not_found(f"Course {course_id} not found")
        return StoreResult.success(result.value[0])

    async def _select(self, query) -> StoreResult[List[Course]]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Catalog store unavailable during read: %s", exc)
            return StoreResult.unavailable(
                f"Catalog store unavailable: {exc}", cause=exc
            )
        return StoreResult.success([Course.model_validate(r) for r in records])
