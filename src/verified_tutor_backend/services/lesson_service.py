'''
Lesson lifecycle and parent confirmation.

This is the only place that changes Lessons.status or
LessonConfirmations.final_status. Every transition is a conditional UPDATE
whose WHERE clause carries the expected current state, so two concurrent
requests can never both succeed.
'''
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID, uuid4

from fastapi import Depends, HTTPException, status
from sqlalchemy import select, update, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole, LessonStatusEnum, ConfirmationStatusEnum
from ..models import lessons as lesson_models
from ..common.config import settings
from ..common.exceptions import (
    InvalidTimeRange,
    ForbiddenRelationship,
    InvalidTransition,
    AlreadyConfirmed,
    NotFound,
)
from ..common.logger import log
from ..common.time_utils import get_zone, utc_now
from .user_service import UserService


class LessonService:
    """
    Service for scheduling lessons and moving them through their lifecycle.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    # --- Authorization Helpers ---

    def _authorize_tutor_owner(self, lesson: db_models.Lessons, current_user: db_models.Users):
        if not (current_user.role == UserRole.TUTOR.value and lesson.tutor_id == current_user.id):
            log.warning(f"SECURITY: User {current_user.id} tried to modify lesson {lesson.id} owned by {lesson.tutor_id}.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the tutor who scheduled this lesson can do this."
            )

    def _authorize_parent_of_student(self, lesson: db_models.Lessons, current_user: db_models.Users):
        if not (current_user.role == UserRole.PARENT.value and lesson.student.parent_id == current_user.id):
            log.warning(f"SECURITY: User {current_user.id} tried to act as parent on lesson {lesson.id}.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the student's parent can do this."
            )

    # --- Internal Fetchers ---

    def _lesson_query(self):
        return select(db_models.Lessons).options(
            selectinload(db_models.Lessons.confirmation),
            selectinload(db_models.Lessons.student),
            selectinload(db_models.Lessons.tutor)
        ).execution_options(populate_existing=True)

    async def _get_lesson_internal(self, lesson_id: UUID) -> db_models.Lessons:
        """
        Fetches a single lesson with its confirmation, student and tutor,
        always re-reading the row from the database.
        Raises NotFound if it does not exist.
        """
        stmt = self._lesson_query().filter(db_models.Lessons.id == lesson_id)
        result = await self.db.execute(stmt)
        lesson = result.scalars().first()
        if lesson is None:
            log.warning(f"Tried to fetch non-existing lesson: {lesson_id}")
            raise NotFound("Lesson not found.")
        return lesson

    async def _get_confirmation_internal(self, lesson_id: UUID) -> db_models.LessonConfirmations:
        stmt = select(db_models.LessonConfirmations).filter(
            db_models.LessonConfirmations.lesson_id == lesson_id
        ).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        confirmation = result.scalars().first()
        if confirmation is None:
            # Confirmations are inserted together with their lesson.
            log.error(f"INTEGRITY: Lesson {lesson_id} has no confirmation record.")
            raise NotFound("Lesson confirmation not found.")
        return confirmation

    # --- Transitions ---

    async def schedule_lesson(
        self,
        tutor_id: UUID,
        student_id: UUID,
        start: datetime,
        end: datetime,
        notes: Optional[str] = None
    ) -> db_models.Lessons:
        """
        Creates a lesson in 'scheduled' status together with its
        'unconfirmed' confirmation record, in the same flush.
        """
        log.info(f"Tutor {tutor_id} scheduling lesson for student {student_id} ({start} -> {end}).")
        if start.tzinfo is None or end.tzinfo is None:
            raise InvalidTimeRange("Lesson times must be timezone-aware.")
        if end <= start:
            log.warning(f"Rejected lesson for student {student_id}: end {end} is not after start {start}.")
            raise InvalidTimeRange("Lesson end time must be after its start time.")

        student = await self.user_service.get_student(student_id)
        if student is None or student.tutor_id != tutor_id:
            log.warning(f"Rejected lesson: student {student_id} does not belong to tutor {tutor_id}.")
            raise ForbiddenRelationship("This student does not belong to you.")

        lesson_id = uuid4()
        lesson = db_models.Lessons(
            id=lesson_id,
            tutor_id=tutor_id,
            student_id=student_id,
            scheduled_start_at=start.astimezone(timezone.utc),
            scheduled_end_at=end.astimezone(timezone.utc),
            status=LessonStatusEnum.SCHEDULED.value,
            notes=notes,
        )
        lesson.confirmation = db_models.LessonConfirmations(
            id=uuid4(),
            lesson_id=lesson_id,
            tutor_confirmed=False,
            final_status=ConfirmationStatusEnum.UNCONFIRMED.value,
        )
        self.db.add(lesson)
        await self.db.flush()
        log.info(f"Lesson {lesson_id} scheduled with unconfirmed confirmation record.")
        return await self._get_lesson_internal(lesson_id)

    async def mark_completed(self, lesson_id: UUID) -> db_models.Lessons:
        """
        scheduled -> completed, and records the tutor-side confirmation.
        A second call fails with InvalidTransition and keeps the first timestamp.
        """
        now = utc_now()
        result = await self.db.execute(
            update(db_models.Lessons)
            .where(
                db_models.Lessons.id == lesson_id,
                db_models.Lessons.status == LessonStatusEnum.SCHEDULED.value
            )
            .values(status=LessonStatusEnum.COMPLETED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            lesson = await self._get_lesson_internal(lesson_id)
            log.warning(f"Rejected completion of lesson {lesson_id}: current status is '{lesson.status}'.")
            raise InvalidTransition(f"Lesson is already {lesson.status}.")

        result = await self.db.execute(
            update(db_models.LessonConfirmations)
            .where(db_models.LessonConfirmations.lesson_id == lesson_id)
            .values(tutor_confirmed=True, tutor_confirmed_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            log.error(f"INTEGRITY: Lesson {lesson_id} completed but has no confirmation record.")
            raise NotFound("Lesson confirmation not found.")

        log.info(f"Lesson {lesson_id} marked completed by tutor.")
        return await self._get_lesson_internal(lesson_id)

    async def cancel_lesson(self, lesson_id: UUID) -> db_models.Lessons:
        """
        scheduled -> cancelled. The confirmation stays 'unconfirmed' forever.
        """
        result = await self.db.execute(
            update(db_models.Lessons)
            .where(
                db_models.Lessons.id == lesson_id,
                db_models.Lessons.status == LessonStatusEnum.SCHEDULED.value
            )
            .values(status=LessonStatusEnum.CANCELLED.value, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            lesson = await self._get_lesson_internal(lesson_id)
            log.warning(f"Rejected cancellation of lesson {lesson_id}: current status is '{lesson.status}'.")
            raise InvalidTransition(f"Lesson is already {lesson.status}.")

        log.info(f"Lesson {lesson_id} cancelled.")
        return await self._get_lesson_internal(lesson_id)

    async def confirm_by_parent(
        self,
        lesson_id: UUID,
        confirmed: bool,
        dispute_note: Optional[str] = None
    ) -> db_models.Lessons:
        """
        Records the parent's verdict exactly once.

        The UPDATE only matches while parent_confirmed IS NULL and the lesson
        is completed, so the verdict cannot be overwritten by a concurrent or
        repeated request.
        """
        final_status = ConfirmationStatusEnum.VERIFIED if confirmed else ConfirmationStatusEnum.DISPUTED
        values = {
            'parent_confirmed': confirmed,
            'parent_confirmed_at': utc_now(),
            'final_status': final_status.value,
        }
        if not confirmed and dispute_note:
            values['dispute_note'] = dispute_note

        lesson_is_completed = exists().where(
            db_models.Lessons.id == lesson_id,
            db_models.Lessons.status == LessonStatusEnum.COMPLETED.value
        )
        result = await self.db.execute(
            update(db_models.LessonConfirmations)
            .where(
                db_models.LessonConfirmations.lesson_id == lesson_id,
                db_models.LessonConfirmations.parent_confirmed.is_(None),
                db_models.LessonConfirmations.final_status == ConfirmationStatusEnum.UNCONFIRMED.value,
                lesson_is_completed
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            await self._raise_confirmation_rejected(lesson_id)

        log.info(f"Lesson {lesson_id} confirmed by parent: final status '{final_status.value}'.")
        return await self._get_lesson_internal(lesson_id)

    async def _raise_confirmation_rejected(self, lesson_id: UUID):
        """Works out why the conditional confirmation write matched no row."""
        lesson = await self._get_lesson_internal(lesson_id)
        confirmation = await self._get_confirmation_internal(lesson_id)

        if confirmation.parent_confirmed is not None or confirmation.final_status != ConfirmationStatusEnum.UNCONFIRMED.value:
            log.warning(f"Rejected parent confirmation of lesson {lesson_id}: already '{confirmation.final_status}'.")
            raise AlreadyConfirmed(f"This lesson has already been marked {confirmation.final_status}.")

        log.warning(f"Rejected parent confirmation of lesson {lesson_id}: lesson status is '{lesson.status}'.")
        raise InvalidTransition(f"Only completed lessons can be confirmed; this lesson is {lesson.status}.")

    # --- Public Write Methods (API-Facing) ---

    async def schedule_lesson_for_api(
        self,
        data: lesson_models.LessonCreate,
        current_user: db_models.Users
    ) -> lesson_models.LessonRead:
        self.user_service.authorize_role(current_user, [UserRole.TUTOR])
        lesson = await self.schedule_lesson(
            tutor_id=current_user.id,
            student_id=data.student_id,
            start=data.scheduled_start_at,
            end=data.scheduled_end_at,
            notes=data.notes,
        )
        return lesson_models.LessonRead.model_validate(lesson)

    async def mark_completed_for_api(self, lesson_id: UUID, current_user: db_models.Users) -> lesson_models.LessonRead:
        lesson = await self._get_lesson_internal(lesson_id)
        self._authorize_tutor_owner(lesson, current_user)
        lesson = await self.mark_completed(lesson_id)
        return lesson_models.LessonRead.model_validate(lesson)

    async def cancel_lesson_for_api(self, lesson_id: UUID, current_user: db_models.Users) -> lesson_models.LessonRead:
        """Either the owning tutor or the student's parent may cancel."""
        lesson = await self._get_lesson_internal(lesson_id)
        if current_user.role == UserRole.PARENT.value:
            self._authorize_parent_of_student(lesson, current_user)
        else:
            self._authorize_tutor_owner(lesson, current_user)
        lesson = await self.cancel_lesson(lesson_id)
        return lesson_models.LessonRead.model_validate(lesson)

    async def confirm_by_parent_for_api(
        self,
        data: lesson_models.LessonConfirm,
        current_user: db_models.Users
    ) -> lesson_models.LessonRead:
        lesson = await self._get_lesson_internal(data.lesson_id)
        self._authorize_parent_of_student(lesson, current_user)
        lesson = await self.confirm_by_parent(data.lesson_id, data.confirmed, data.dispute_note)
        return lesson_models.LessonRead.model_validate(lesson)

    # --- Public Read Methods (API-Facing) ---

    async def get_today_lessons_for_api(self, current_user: db_models.Users) -> list[lesson_models.LessonWithDetailsRead]:
        """
        The tutor's lessons starting on today's date in the tutor's timezone.
        """
        self.user_service.authorize_role(current_user, [UserRole.TUTOR])
        tz = get_zone(current_user.timezone)
        today = datetime.now(tz).date()
        day_start = datetime(today.year, today.month, today.day, tzinfo=tz)
        day_end = day_start + timedelta(days=1)

        stmt = self._lesson_query().filter(
            db_models.Lessons.tutor_id == current_user.id,
            db_models.Lessons.scheduled_start_at >= day_start.astimezone(timezone.utc),
            db_models.Lessons.scheduled_start_at < day_end.astimezone(timezone.utc)
        ).order_by(db_models.Lessons.scheduled_start_at.asc())
        result = await self.db.execute(stmt)
        return [lesson_models.LessonWithDetailsRead.model_validate(lesson) for lesson in result.scalars().all()]

    async def get_pending_confirmations_for_api(self, current_user: db_models.Users) -> list[lesson_models.LessonWithDetailsRead]:
        """
        Completed lessons of the parent's children still waiting for a verdict.
        """
        self.user_service.authorize_role(current_user, [UserRole.PARENT])
        stmt = self._lesson_query().join(
            db_models.Students, db_models.Students.id == db_models.Lessons.student_id
        ).join(
            db_models.LessonConfirmations, db_models.LessonConfirmations.lesson_id == db_models.Lessons.id
        ).filter(
            db_models.Students.parent_id == current_user.id,
            db_models.Lessons.status == LessonStatusEnum.COMPLETED.value,
            db_models.LessonConfirmations.parent_confirmed.is_(None),
            db_models.LessonConfirmations.final_status == ConfirmationStatusEnum.UNCONFIRMED.value
        ).order_by(db_models.Lessons.scheduled_start_at.desc())
        result = await self.db.execute(stmt)
        return [lesson_models.LessonWithDetailsRead.model_validate(lesson) for lesson in result.scalars().all()]

    async def get_lesson_history_for_api(self, current_user: db_models.Users) -> list[lesson_models.LessonWithDetailsRead]:
        """
        The parent's children's verified lessons, newest first.
        """
        self.user_service.authorize_role(current_user, [UserRole.PARENT])
        stmt = self._lesson_query().join(
            db_models.Students, db_models.Students.id == db_models.Lessons.student_id
        ).join(
            db_models.LessonConfirmations, db_models.LessonConfirmations.lesson_id == db_models.Lessons.id
        ).filter(
            db_models.Students.parent_id == current_user.id,
            db_models.Lessons.status != LessonStatusEnum.CANCELLED.value,
            db_models.LessonConfirmations.final_status == ConfirmationStatusEnum.VERIFIED.value
        ).order_by(
            db_models.Lessons.scheduled_start_at.desc()
        ).limit(settings.PARENT_HISTORY_LIMIT)
        result = await self.db.execute(stmt)
        return [lesson_models.LessonWithDetailsRead.model_validate(lesson) for lesson in result.scalars().all()]
