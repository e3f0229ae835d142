'''
Reputation API models.
'''
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TutorStats(BaseModel):
    """
    Derived rollup for a tutor. Always recomputed, never stored.
    """
    total_verified_hours: float = Field(..., ge=0)
    verified_lessons: int = Field(..., ge=0)
    active_students_count: int = Field(..., ge=0)
    average_rating: float = Field(..., ge=0)
    total_lessons: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class StudentStatsRead(BaseModel):
    """A tutor's student with their own verified-hours rollup."""
    id: UUID
    parent_id: UUID
    name: str
    active: bool
    grade_level: str | None = None
    total_verified_hours: float
    total_lessons: int
