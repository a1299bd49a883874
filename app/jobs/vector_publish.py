"""Publish stale catalog courses as documents in the vector store.

Each course is its own unit of work: upload, attach, then flip the publish
cursor. A course that fails at any step keeps its cursor cleared and is
retried on the next tick; the rest of the page carries on.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import List

from app.jobs.metadata_sync import ALREADY_RUNNING
from app.models.course import Course
from app.repositories.course_repo import CourseCatalogRepository
from app.services.course_document import create_course_document
from app.services.vector_store_client import PublishError, VectorStoreClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5000


@dataclass
class VectorPublishReport:
    status: str = "completed"
    selected: int = 0
    published: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    detail: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


class VectorPublishJob:
    def __init__(
        self,
        catalog: CourseCatalogRepository,
        client: VectorStoreClient,
        vector_store_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        dedup: bool = False,
        purge: bool = False,
    ):
        self.catalog = catalog
        self.client = client
        self.vector_store_id = vector_store_id
        self.page_size = page_size
        self.dedup = dedup
        self.purge = purge
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self) -> VectorPublishReport:
        """Publish one page; skipped when another run of this job is in flight."""
        if self._lock.locked():
            logger.warning("Vector store publish already running; tick skipped.")
            return VectorPublishReport(status="skipped", detail=ALREADY_RUNNING)
        async with self._lock:
            return await self._publish_page()

    async def _publish_page(self) -> VectorPublishReport:
        if self.purge:
            # PublishError here fails the whole tick; the scheduler logs it
            await self.client.remove_all_from_vector_store(self.vector_store_id)
            await self.client.remove_all_files()

        selected = await self.catalog.get_unpublished(self.page_size)
        if not selected.ok:
            logger.error("Vector store publish skipped: %s", selected.detail)
            return VectorPublishReport(status="skipped", detail=selected.detail)

        courses = selected.value or []
        report = VectorPublishReport(selected=len(courses))
        for course in courses:
            if await self._publish(course):
                report.published.append(course.course_id)
            else:
                report.failed.append(course.course_id)

        if report.failed:
            report.status = "partial"
        logger.info(
            "Course metadata to vector store sync completed: %d published, %d failed.",
            len(report.published),
            len(report.failed),
        )
        return report

    async def _publish(self, course: Course) -> bool:
        filename, content = create_course_document(course)
        try:
            if self.dedup:
                await self.client.remove_existing_from_vector_store(
                    self.vector_store_id, filename
                )
                await self.client.remove_existing_from_files(filename)
            file_id = await self.client.upload_file(filename, content)
            await self.client.attach_file(self.vector_store_id, file_id)
        except PublishError as exc:
            logger.error("Publishing course %s failed: %s", course.course_id, exc)
            return False
        except Exception:
            logger.exception("Publishing course %s failed unexpectedly", course.course_id)
            return False

        marked = await self.catalog.mark_published(course.course_id)
        if not marked.ok:
            logger.error(
                "Course %s published but cursor not updated: %s",
                course.course_id,
                marked.detail,
            )
            return False
        return True
