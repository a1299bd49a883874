"""Mirror unarchived source courses into the catalog store."""
from __future__ import annotations
import asyncio
import logging
from dataclasses import asdict, dataclass

from app.repositories.course_repo import CourseCatalogRepository
from app.repositories.source_course_repo import SourceCourseReader

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "already running"


@dataclass
class MetadataSyncReport:
    status: str = "completed"
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    detail: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class MetadataSyncJob:
    def __init__(
        self, reader: SourceCourseReader, catalog: CourseCatalogRepository
    ):
        self.reader = reader
        self.catalog = catalog
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self) -> MetadataSyncReport:
        """Run one sync; skipped when another run of this job is in flight."""
        if self._lock.locked():
            logger.warning("Course metadata sync already running; tick skipped.")
            return MetadataSyncReport(status="skipped", detail=ALREADY_RUNNING)
        async with self._lock:
            return await self._sync()

    async def _sync(self) -> MetadataSyncReport:
        fetched = await self.reader.get_courses()
        if not fetched.ok:
            logger.error("Course metadata sync skipped: %s", fetched.detail)
            return MetadataSyncReport(status="skipped", detail=fetched.detail)

        courses = fetched.value or []
        if not courses:
            # An empty read is treated as transient; the catalog is left as is
            logger.warning("No courses available for syncing.")
            return MetadataSyncReport(status="skipped", detail="no courses")

        written = await self.catalog.upsert(courses)
        if not written.ok:
            logger.error("Course metadata sync failed: %s", written.detail)
            return MetadataSyncReport(
                status="failed", fetched=len(courses), detail=written.detail
            )

        report = MetadataSyncReport(
            fetched=len(courses),
            inserted=written.value.inserted,
            updated=written.value.updated,
        )
        logger.info(
            "Course metadata sync completed: %d fetched, %d inserted, %d updated.",
            report.fetched,
            report.inserted,
            report.updated,
        )
        return report
