"""
Pydantic Models for Course Data

These models carry course metadata between the source reader, the catalog
repository and the publishing job, and describe the assistant API payloads.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class Course(BaseModel):
    """Denormalized course record as mirrored into the catalog"""
    model_config = ConfigDict(from_attributes=True)

    course_id: int = Field(..., description="Stable course identifier")
    course_name: str = Field(default="", description="Course display name")
    code: Optional[str] = Field(None, description="Course code")
    description: Optional[str] = Field(None, description="Course description")
    created: Optional[datetime] = Field(None, description="Creation timestamp in the LMS")
    last_modified: Optional[datetime] = Field(None, description="Last modification in the LMS")
    available_to_all_organizations: bool = Field(default=False)
    available_instructor_led: bool = Field(default=False)
    available_self_paced: bool = Field(default=False)
    archived: bool = Field(default=False)
    is_file_updated: bool = Field(
        default=False, description="True once the course document is current in the vector store"
    )
    outline_objective: Optional[str] = None
    outline_overview: Optional[str] = None
    outline_target_audience: Optional[str] = None
    outline_lessons: Optional[str] = Field(None, description="One formatted line per lesson")
    organization_ids: Optional[str] = Field(
        None, description="Comma-joined organization ids; empty when available to all"
    )

    def to_dict(self) -> dict:
        return {
            "courseId": self.course_id,
            "courseName": self.course_name,
            "code": self.code,
            "description": self.description,
            "created": self.created.isoformat() if self.created else None,
            "lastModified": (
                self.last_modified.isoformat() if self.last_modified else None
            ),
            "availableToAllOrganizations": self.available_to_all_organizations,
            "availableInstructorLed": self.available_instructor_led,
            "availableSelfPaced": self.available_self_paced,
            "archived": self.archived,
            "isFileUpdated": self.is_file_updated,
            "outlineObjective": self.outline_objective,
            "outlineOverview": self.outline_overview,
            "outlineTargetAudience": self.outline_target_audience,
            "outlineLessons": self.outline_lessons,
            "organizationIds": self.organization_ids,
        }


class CourseContentChunk(BaseModel):
    """Retrievable text unit; ``score`` is only set on search results"""
    chunk_id: str
    course_id: str
    module_id: Optional[str] = None
    lesson_id: Optional[str] = None
    client_id: Optional[str] = None
    language: Optional[str] = None
    text: str
    embedding: Optional[List[float]] = None
    score: float = 0.0


# API Request/Response Models
class AiAnswerRequest(BaseModel):
    """Inbound question for the assistant"""
    userId: str = Field(..., description="Caller identifier")
    question: str = Field(..., description="Natural-language question")
    threadId: Optional[str] = Field(None, description="Existing assistant thread to continue")
    organizationIds: Optional[str] = Field(
        None, description="Comma-joined organization ids the caller may see"
    )


class AiAnswerResponse(BaseModel):
    answer: str
    sources: List[str] = Field(default_factory=list)
    threadId: Optional[str] = None
    classification: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Current environment")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    uptime: Optional[float] = Field(None, description="Uptime in seconds")
