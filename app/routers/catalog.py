"""Catalog router providing read access to the mirrored course metadata."""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.config import get_catalog_sessions
from app.repositories.course_repo import CourseCatalogRepository
from app.repositories.results import StoreResult, StoreStatus

router = APIRouter(prefix="/catalog", tags=["Catalog"])


class CourseOut(BaseModel):
    courseId: int
    courseName: str
    code: Optional[str]
    description: Optional[str]
    created: Optional[str]
    lastModified: Optional[str]
    availableToAllOrganizations: bool
    availableInstructorLed: bool
    availableSelfPaced: bool
    archived: bool
    isFileUpdated: bool
    outlineObjective: Optional[str]
    outlineOverview: Optional[str]
    outlineTargetAudience: Optional[str]
    outlineLessons: Optional[str]
    organizationIds: Optional[str]

# Helpers ------------------------------------------------------------------


async def _get_repo(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_catalog_sessions),
) -> CourseCatalogRepository:
    return CourseCatalogRepository(sessions)


def _unwrap(result: StoreResult):
    if result.status is StoreStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Course not found")
    if not result.ok:
        raise HTTPException(status_code=503, detail="Catalog store unavailable")
    return result.value


def _parse_ids(raw: Optional[str]) -> List[int]:
    if not raw:
        return []
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="courseIds must be integers")

# Routes -------------------------------------------------------------------


@router.get("/courses", response_model=List[CourseOut])
async def list_courses(
    pending: bool = Query(False, description="Only courses awaiting publish"),
    courseIds: Optional[str] = Query(None, description="Comma-separated ids"),
    limit: int = Query(5000, ge=1, le=5000),
    repo: CourseCatalogRepository = Depends(_get_repo),
):
    if pending:
        courses = _unwrap(await repo.get_unpublished(limit))
    else:
        courses = _unwrap(await repo.get_courses(_parse_ids(courseIds)))
    return [c.to_dict() for c in courses]


@router.get("/courses/{course_id}", response_model=CourseOut)
async def get_course(
    course_id: int, repo: CourseCatalogRepository = Depends(_get_repo)
):
    course = _unwrap(await repo.get(course_id))
    return course.to_dict()
