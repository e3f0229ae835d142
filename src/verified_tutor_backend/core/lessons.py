'''
Read-only lesson snapshots used by the aggregation functions.
'''
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..common.time_utils import ensure_aware
from ..database.db_enums import LessonStatusEnum, ConfirmationStatusEnum

SECONDS_PER_HOUR = Decimal(3600)


class LessonSnapshot(BaseModel):
    """
    A point-in-time, immutable copy of one lesson and its confirmation status.
    """
    id: UUID
    tutor_id: UUID
    student_id: UUID
    scheduled_start_at: datetime
    scheduled_end_at: datetime
    status: LessonStatusEnum
    final_status: ConfirmationStatusEnum = ConfirmationStatusEnum.UNCONFIRMED

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_orm_lesson(cls, lesson) -> 'LessonSnapshot':
        """Builds a snapshot from a db_models.Lessons row with its confirmation loaded."""
        confirmation = lesson.confirmation
        final_status: Optional[str] = confirmation.final_status if confirmation else None
        return cls(
            id=lesson.id,
            tutor_id=lesson.tutor_id,
            student_id=lesson.student_id,
            scheduled_start_at=ensure_aware(lesson.scheduled_start_at),
            scheduled_end_at=ensure_aware(lesson.scheduled_end_at),
            status=lesson.status,
            final_status=final_status or ConfirmationStatusEnum.UNCONFIRMED,
        )

    @property
    def is_verified(self) -> bool:
        """Cancelled lessons never count, whatever their confirmation row says."""
        return (
            self.final_status == ConfirmationStatusEnum.VERIFIED
            and self.status != LessonStatusEnum.CANCELLED
        )

    @property
    def duration_hours(self) -> Decimal:
        seconds = Decimal(str((self.scheduled_end_at - self.scheduled_start_at).total_seconds()))
        return seconds / SECONDS_PER_HOUR
