"""
Course document serialization

Turns a catalog ``Course`` into the plain-text document uploaded to the vector
store: one ``Key = "value"`` line per populated field, joined by ``",\\n"``.
Empty fields are left out so the assistant only sees what the LMS filled in.
"""

from typing import Tuple

from ..models.course import Course

# Characters no filename may contain on any platform the files end up on
INVALID_FILENAME_CHARS = frozenset(
    [chr(code) for code in range(32)] + ['"', '<', '>', '|', ':', '*', '?', '\\', '/']
)

# Document key -> Course attribute, in output order
_TEXT_FIELDS = (
    ("CourseName", "course_name"),
    ("Description", "description"),
)
_OUTLINE_FIELDS = (
    ("OutlineObjective", "outline_objective"),
    ("OutlineOverview", "outline_overview"),
    ("OutlineTargetAudience", "outline_target_audience"),
    ("OutlineLessons", "outline_lessons"),
    ("OrganizationIds", "organization_ids"),
)


def sanitize_filename(name: str) -> str:
    """Replace every character that is illegal in a filename with ``_``."""
    return "".join("_" if ch in INVALID_FILENAME_CHARS else ch for ch in name or "")


def course_filename(course: Course) -> str:
    return f"{course.course_id}-{sanitize_filename(course.course_name)}.txt"


def _has_text(value) -> bool:
    return value is not None and str(value).strip() != ""


def build_course_document(course: Course) -> str:
    parts = [f'CourseId = "{course.course_id}"']

    for key, attr in _TEXT_FIELDS:
        value = getattr(course, attr)
        if _has_text(value):
            parts.append(f'{key} = "{value}"')

    if course.available_to_all_organizations:
        parts.append('AvailableToAllOrganizations = "True"')

    for key, attr in _OUTLINE_FIELDS:
        value = getattr(course, attr)
        if _has_text(value):
            parts.append(f'{key} = "{value}"')

    return ",\n".join(parts)


def create_course_document(course: Course) -> Tuple[str, bytes]:
    """Return ``(filename, utf-8 content)`` ready for upload."""
    return course_filename(course), build_course_document(course).encode("utf-8")
