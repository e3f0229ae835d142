'''
Lesson and confirmation API models.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, computed_field, field_validator

from ..common.time_utils import ensure_aware
from ..database.db_enums import LessonStatusEnum, ConfirmationStatusEnum
from .user import StudentRead, TutorSummary


# --- 1. API Input Models ---

class LessonCreate(BaseModel):
    """
    Validates the payload for scheduling a lesson.
    'tutor_id' is excluded and is taken from the authenticated tutor.
    Ordering of the two timestamps is checked by the service so that it
    surfaces as an InvalidTimeRange error.
    """
    student_id: UUID
    scheduled_start_at: AwareDatetime
    scheduled_end_at: AwareDatetime
    notes: Optional[str] = None


class LessonConfirm(BaseModel):
    """
    The parent's verdict on a completed lesson.
    """
    lesson_id: UUID
    confirmed: bool
    dispute_note: Optional[str] = Field(None, max_length=2000)


# --- 2. API Output Models ---

class ConfirmationRead(BaseModel):
    id: UUID
    lesson_id: UUID
    tutor_confirmed: bool
    tutor_confirmed_at: Optional[datetime] = None
    parent_confirmed: Optional[bool] = None
    parent_confirmed_at: Optional[datetime] = None
    final_status: ConfirmationStatusEnum
    dispute_note: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('tutor_confirmed_at', 'parent_confirmed_at')
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(value) if value is not None else None


class LessonRead(BaseModel):
    """
    A lesson together with its one-to-one confirmation record.
    """
    id: UUID
    tutor_id: UUID
    student_id: UUID
    scheduled_start_at: datetime
    scheduled_end_at: datetime
    status: LessonStatusEnum
    notes: Optional[str] = None
    confirmation: Optional[ConfirmationRead] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('scheduled_start_at', 'scheduled_end_at')
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return int((self.scheduled_end_at - self.scheduled_start_at).total_seconds() // 60)


class LessonWithDetailsRead(LessonRead):
    """
    Lesson payload for dashboards, with the student and tutor eager-loaded.
    """
    student: StudentRead
    tutor: TutorSummary
