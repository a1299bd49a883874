"""
Pytest configuration and fixtures for backend testing
"""

import json
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import NullPool

# Set test environment before the app reads it
_TEST_DIR = Path(tempfile.mkdtemp(prefix="training-buddy-tests-"))
os.environ["ENVIRONMENT"] = "test"
os.environ["CATALOG_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'catalog.db'}"
os.environ["SOURCE_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'source.db'}"
os.environ["ERROR_LOG_DIR"] = str(_TEST_DIR / "errors")
os.environ["AUTO_MIGRATE"] = "false"
os.environ["FEATURE_BACKGROUND_SYNC"] = "false"
os.environ["SYNC_INTERVAL_MINUTES"] = "10"
for _name in ("VECTOR_STORE_API_KEY", "VECTOR_STORE_ID", "AI_ANSWER_API_KEY", "AI_ANSWER_ASSISTANT_ID"):
    os.environ[_name] = ""

from app.main import app
from app.models.course import Course
from app.models.persisted_course import Base as CatalogBase
from app.models.source import (
    SourceBase,
    SourceCourse,
    SourceCourseLesson,
    SourceCourseOrganization,
)
from app.repositories.course_repo import CourseCatalogRepository
from app.repositories.source_course_repo import SourceCourseReader
from app.services.http_client import build_http_client

API_BASE_URL = "https://api.test/v1/"


@pytest.fixture(scope="session")
def test_client():
    """Create a test client for FastAPI application"""
    with TestClient(app) as client:
        yield client


# Databases ------------------------------------------------------------------


async def _sessions_for(url: str, metadata):
    engine = create_async_engine(url, future=True, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return engine, async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest.fixture
async def catalog_sessions(tmp_path):
    engine, sessions = await _sessions_for(
        f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}", CatalogBase.metadata
    )
    yield sessions
    await engine.dispose()


@pytest.fixture
async def source_sessions(tmp_path):
    engine, sessions = await _sessions_for(
        f"sqlite+aiosqlite:///{tmp_path / 'source.db'}", SourceBase.metadata
    )
    yield sessions
    await engine.dispose()


@pytest.fixture
def catalog_repo(catalog_sessions):
    return CourseCatalogRepository(catalog_sessions)


@pytest.fixture
def source_reader(source_sessions):
    return SourceCourseReader(source_sessions)


@pytest.fixture
def add_source_rows(source_sessions):
    """Insert LMS rows: ``await add_source_rows(course, lesson, org, ...)``"""
    async def _add(*rows):
        async with source_sessions() as session:
            session.add_all(rows)
            await session.commit()
    return _add


def make_source_course(course_id: int, name: str = "", **overrides) -> SourceCourse:
    values = dict(
        course_id=course_id,
        course_name=name or f"Course {course_id}",
        code=f"C-{course_id}",
        description=f"Description of course {course_id}",
        created=datetime(2024, 1, 1, 9, 0, 0),
        last_modified=datetime(2024, 6, 1, 9, 0, 0),
        available_to_all_organizations=False,
        available_instructor_led=True,
        available_self_paced=False,
        archived=False,
        outline_objective="Learn the basics",
        outline_overview=None,
        outline_target_audience="New starters",
    )
    values.update(overrides)
    return SourceCourse(**values)


def make_lesson(pk: int, course_id: int, lesson_id: int, title=None, description=None):
    return SourceCourseLesson(
        id=pk,
        course_id=course_id,
        lesson_id=lesson_id,
        lesson_title=title,
        lesson_description=description,
    )


def make_org(course_id: int, organization_id: int):
    return SourceCourseOrganization(course_id=course_id, organization_id=organization_id)


@pytest.fixture
def sample_course():
    return Course(
        course_id=42,
        course_name="Fire Safety: Level 1/2",
        description="Basic fire safety",
        available_to_all_organizations=False,
        outline_objective="Stay safe",
        outline_lessons="Intro: Why it matters\nExtinguishers",
        organization_ids="3,7",
    )


# External API fake ----------------------------------------------------------


class FakeOpenAIApi:
    """In-memory stand-in for the files / vector store / threads endpoints."""

    def __init__(self, vector_store_id: str = "vs_test"):
        self.vector_store_id = vector_store_id
        self.files = {}
        self.vector_store_files = []
        self.requests = []
        self.fail_upload_names = set()
        self.fail_status = {}
        self.answer_text = "Use the CO2 extinguisher."
        self._next_id = 0

    def _id(self, prefix: str) -> str:
        self._next_id += 1
        return f"{prefix}_{self._next_id}"

    def calls(self, method: str, path_fragment: str = ""):
        return [
            r for r in self.requests
            if r.method == method and path_fragment in r.url.path
        ]

    def uploads(self):
        """File upload requests only; attach calls also end in ``/files``."""
        return [
            r for r in self.requests
            if r.method == "POST" and r.url.path == "/v1/files"
        ]

    def seed_file(self, filename: str, attached: bool = True) -> str:
        file_id = self._id("file")
        self.files[file_id] = {"id": file_id, "filename": filename, "content": b""}
        if attached:
            self.vector_store_files.append(file_id)
        return file_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v1/")
        key = (request.method, path)
        if key in self.fail_status:
            status, body = self.fail_status[key]
            return httpx.Response(status, text=body)

        parts = path.split("/")
        if parts[0] == "files":
            return self._files(request, parts)
        if parts[0] == "vector_stores":
            return self._vector_store(request, parts)
        if parts[0] == "threads":
            return self._threads(request, parts)
        return httpx.Response(404, json={"error": "unknown route"})

    def _files(self, request, parts):
        if request.method == "POST":
            body = request.content
            filename = re.search(rb'filename="([^"]+)"', body).group(1).decode()
            assert b'name="purpose"\r\n\r\nassistants' in body
            if any(name in filename for name in self.fail_upload_names):
                return httpx.Response(500, text='{"error": "upload rejected"}')
            content = re.search(
                rb"Content-Type: text/plain\r\n\r\n(.*?)\r\n--", body, re.S
            ).group(1)
            file_id = self._id("file")
            self.files[file_id] = {"id": file_id, "filename": filename, "content": content}
            return httpx.Response(200, json={"id": file_id, "filename": filename})
        if len(parts) == 1:
            return httpx.Response(200, json={
                "data": [{"id": f["id"], "filename": f["filename"]} for f in self.files.values()]
            })
        file_id = parts[1]
        if file_id not in self.files:
            return httpx.Response(404, text='{"error": "no such file"}')
        if request.method == "DELETE":
            del self.files[file_id]
            return httpx.Response(200, json={"id": file_id, "deleted": True})
        f = self.files[file_id]
        return httpx.Response(200, json={"id": f["id"], "filename": f["filename"]})

    def _vector_store(self, request, parts):
        if parts[1] != self.vector_store_id:
            return httpx.Response(404, text='{"error": "no such vector store"}')
        if request.method == "POST":
            file_id = json.loads(request.content)["file_id"]
            self.vector_store_files.append(file_id)
            return httpx.Response(200, json={"id": file_id, "status": "in_progress"})
        if len(parts) == 3:
            return httpx.Response(200, json={
                "data": [{"id": fid} for fid in self.vector_store_files]
            })
        self.vector_store_files.remove(parts[3])
        return httpx.Response(200, json={"id": parts[3], "deleted": True})

    def _threads(self, request, parts):
        if len(parts) == 1:
            return httpx.Response(200, json={"id": self._id("thread")})
        if parts[2] == "messages":
            return httpx.Response(200, json={"id": self._id("msg")})
        message = {
            "id": "msg_answer",
            "content": [{"type": "text", "text": {"value": self.answer_text, "annotations": []}}],
        }
        stream = (
            "event: thread.run.created\n"
            'data: {"id": "run_1"}\n\n'
            "event: thread.message.delta\n"
            'data: {"delta": {}}\n\n'
            "event: thread.message.completed\n"
            f"data: {json.dumps(message)}\n\n"
            "event: done\n"
            "data: [DONE]\n\n"
        )
        return httpx.Response(
            200, text=stream, headers={"content-type": "text/event-stream"}
        )


@pytest.fixture
def fake_api():
    return FakeOpenAIApi()


@pytest.fixture
async def api_http(fake_api):
    client = build_http_client(
        API_BASE_URL,
        "sk-test",
        extra_headers={"OpenAI-Beta": "assistants=v2"},
        transport=httpx.MockTransport(fake_api.handler),
    )
    yield client
    await client.aclose()


async def lines_of(*lines):
    """Async iterator over ``lines`` for feeding the stream parser."""
    for line in lines:
        yield line


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
