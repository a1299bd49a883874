"""Vector store publishing job."""

import asyncio

import pytest

from app.jobs.vector_publish import VectorPublishJob
from app.models.course import Course
from app.repositories.results import StoreResult
from app.services.vector_store_client import PublishError, VectorStoreClient


def course(course_id, name=""):
    return Course(course_id=course_id, course_name=name or f"Course {course_id}")


@pytest.fixture
def client(api_http):
    return VectorStoreClient(api_http)


def make_job(catalog_repo, client, **kw):
    return VectorPublishJob(catalog_repo, client, "vs_test", **kw)


async def test_publishes_each_stale_course(catalog_repo, client, fake_api):
    await catalog_repo.upsert([course(1, "Fire: Basics"), course(2)])

    report = await make_job(catalog_repo, client).run()

    assert report.status == "completed"
    assert report.published == [1, 2]
    names = sorted(f["filename"] for f in fake_api.files.values())
    assert names == ["1-Fire_ Basics.txt", "2-Course 2.txt"]
    assert len(fake_api.vector_store_files) == 2
    assert (await catalog_repo.get_unpublished(10)).value == []


async def test_published_courses_are_not_uploaded_again(catalog_repo, client, fake_api):
    await catalog_repo.upsert([course(1)])
    job = make_job(catalog_repo, client)
    await job.run()

    report = await job.run()

    assert report.selected == 0
    assert len(fake_api.uploads()) == 1


async def test_failed_course_is_retried_and_others_continue(catalog_repo, client, fake_api):
    await catalog_repo.upsert([course(1, "Good"), course(2, "Bad"), course(3, "Fine")])
    fake_api.fail_upload_names.add("2-Bad")

    report = await make_job(catalog_repo, client).run()

    assert report.status == "partial"
    assert report.published == [1, 3]
    assert report.failed == [2]
    pending = (await catalog_repo.get_unpublished(10)).value
    assert [c.course_id for c in pending] == [2]


async def test_attach_failure_keeps_course_pending(catalog_repo, client, fake_api):
    await catalog_repo.upsert([course(1)])
    fake_api.fail_status[("POST", "vector_stores/vs_test/files")] = (503, "busy")

    report = await make_job(catalog_repo, client).run()

    assert report.failed == [1]
    assert (await catalog_repo.get(1)).value.is_file_updated is False


async def test_page_size_limits_selection(catalog_repo, client):
    await catalog_repo.upsert([course(i) for i in range(1, 6)])

    report = await make_job(catalog_repo, client, page_size=2).run()

    assert report.published == [1, 2]


async def test_without_dedup_old_copies_are_left_in_place(catalog_repo, client, fake_api):
    old = fake_api.seed_file("1-Course 1.txt")
    await catalog_repo.upsert([course(1)])

    await make_job(catalog_repo, client).run()

    assert old in fake_api.vector_store_files
    assert len(fake_api.vector_store_files) == 2


async def test_dedup_replaces_previous_copy(catalog_repo, client, fake_api):
    old_attached = fake_api.seed_file("1-COURSE 1.txt")
    old_loose = fake_api.seed_file("1-Course 1.txt", attached=False)
    other = fake_api.seed_file("2-Other.txt")
    await catalog_repo.upsert([course(1)])

    report = await make_job(catalog_repo, client, dedup=True).run()

    assert report.published == [1]
    assert old_attached not in fake_api.files
    assert old_loose not in fake_api.files
    assert other in fake_api.vector_store_files
    assert len(fake_api.vector_store_files) == 2


async def test_purge_empties_the_store_first(catalog_repo, client, fake_api):
    fake_api.seed_file("7-Gone.txt")
    fake_api.seed_file("8-Gone.txt", attached=False)
    await catalog_repo.upsert([course(1)])

    await make_job(catalog_repo, client, purge=True).run()

    assert [f["filename"] for f in fake_api.files.values()] == ["1-Course 1.txt"]
    assert len(fake_api.vector_store_files) == 1


async def test_purge_failure_aborts_the_tick(catalog_repo, client, fake_api):
    fake_api.fail_status[("GET", "vector_stores/vs_test/files")] = (500, "down")
    await catalog_repo.upsert([course(1)])

    with pytest.raises(PublishError):
        await make_job(catalog_repo, client, purge=True).run()
    assert fake_api.uploads() == []


class UnavailableCatalog:
    async def get_unpublished(self, limit):
        return StoreResult.unavailable("catalog down")


async def test_unavailable_catalog_skips(client, fake_api):
    report = await VectorPublishJob(UnavailableCatalog(), client, "vs_test").run()

    assert report.status == "skipped"
    assert fake_api.requests == []


class CursorFailingCatalog:
    def __init__(self):
        self.course = course(4)

    async def get_unpublished(self, limit):
        return StoreResult.success([self.course])

    async def mark_published(self, course_id):
        return StoreResult.unavailable("write failed")


async def test_cursor_write_failure_counts_as_failed(client, fake_api):
    report = await VectorPublishJob(CursorFailingCatalog(), client, "vs_test").run()

    assert report.failed == [4]
    assert len(fake_api.vector_store_files) == 1


async def test_concurrent_runs_publish_each_course_once(catalog_repo, client, fake_api):
    await catalog_repo.upsert([course(1)])
    job = make_job(catalog_repo, client)

    reports = await asyncio.gather(job.run(), job.run())

    assert sum(len(r.published) for r in reports) == 1
    assert len(fake_api.uploads()) == 1
    assert len(fake_api.vector_store_files) == 1


class GatedCatalog:
    def __init__(self):
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def get_unpublished(self, limit):
        self.entered.set()
        await self.release.wait()
        return StoreResult.success([])


async def test_run_while_running_is_skipped(client, fake_api):
    catalog = GatedCatalog()
    job = VectorPublishJob(catalog, client, "vs_test")

    first = asyncio.create_task(job.run())
    await catalog.entered.wait()
    assert job.is_running

    second = await job.run()
    assert second.status == "skipped"
    assert second.detail == "already running"

    catalog.release.set()
    assert (await first).status == "completed"
    assert not job.is_running
