from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TutorSummary(BaseModel):
    """Lean tutor representation embedded in lesson payloads."""
    id: UUID
    display_name: str
    public_slug: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StudentRead(BaseModel):
    """
    Pydantic model for reading a student record.
    Corresponds to db_models.Students.
    """
    id: UUID
    tutor_id: UUID
    parent_id: UUID
    name: str
    active: bool
    grade_level: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
