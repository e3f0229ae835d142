'''
Reputation statistics and activity heatmap for tutors.

Nothing here writes. Every call re-reads the tutor's lessons and recomputes
from scratch, so it is safe to run concurrently for any number of tutors.
'''
from collections import defaultdict
from datetime import datetime, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole, LessonStatusEnum, ConfirmationStatusEnum
from ..models import stats as stats_models
from ..models import lessons as lesson_models
from ..core.lessons import LessonSnapshot
from ..core.reputation import compute_tutor_stats, verified_hours
from ..core.heatmap import build_heatmap
from ..common.logger import log
from ..common.time_utils import get_zone
from .user_service import UserService


class ReputationService:
    """
    Read-only service computing a tutor's public trust signals.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    # --- Internal Data-Fetching ---

    async def _get_lesson_snapshots(self, *criteria) -> list[LessonSnapshot]:
        stmt = select(db_models.Lessons).options(
            selectinload(db_models.Lessons.confirmation)
        ).filter(*criteria).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return [LessonSnapshot.from_orm_lesson(lesson) for lesson in result.scalars().all()]

    async def _get_public_ratings(self, tutor_id: UUID) -> list[int]:
        stmt = select(db_models.Testimonials.rating).filter(
            db_models.Testimonials.tutor_id == tutor_id,
            db_models.Testimonials.is_public.is_(True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    def _verified_lessons_query(self, tutor_id: UUID):
        return select(db_models.Lessons).join(
            db_models.LessonConfirmations,
            db_models.LessonConfirmations.lesson_id == db_models.Lessons.id
        ).options(
            selectinload(db_models.Lessons.confirmation)
        ).filter(
            db_models.Lessons.tutor_id == tutor_id,
            db_models.Lessons.status != LessonStatusEnum.CANCELLED.value,
            db_models.LessonConfirmations.final_status == ConfirmationStatusEnum.VERIFIED.value
        ).execution_options(populate_existing=True)

    # --- Public Methods ---

    async def get_tutor_stats(self, tutor_id: UUID, as_of: Optional[datetime] = None) -> stats_models.TutorStats:
        """
        Recomputes the TutorStats rollup from the tutor's current lessons,
        public testimonials and active students.
        Every lesson counts unless an explicit `as_of` cutoff is given.
        """
        log.info(f"Computing reputation stats for tutor {tutor_id}.")
        await self.user_service.get_tutor(tutor_id)

        lessons = await self._get_lesson_snapshots(db_models.Lessons.tutor_id == tutor_id)
        ratings = await self._get_public_ratings(tutor_id)
        active_students = await self.user_service.count_active_students(tutor_id)

        return compute_tutor_stats(lessons, ratings, active_students, as_of=as_of)

    async def get_heatmap(self, tutor_id: UUID, year: int) -> dict[str, int]:
        """
        Verified lessons per calendar date of `year`, in the tutor's timezone.
        """
        log.info(f"Building heatmap for tutor {tutor_id}, year {year}.")
        tutor = await self.user_service.get_tutor(tutor_id)
        tz = get_zone(tutor.timezone)

        year_start = datetime(year, 1, 1, tzinfo=tz).astimezone(timezone.utc)
        next_year_start = datetime(year + 1, 1, 1, tzinfo=tz).astimezone(timezone.utc)

        stmt = self._verified_lessons_query(tutor_id).filter(
            db_models.Lessons.scheduled_start_at >= year_start,
            db_models.Lessons.scheduled_start_at < next_year_start
        )
        result = await self.db.execute(stmt)
        lessons = [LessonSnapshot.from_orm_lesson(lesson) for lesson in result.scalars().all()]
        return build_heatmap(lessons, year, tz)

    async def get_verified_lessons_for_api(
        self,
        tutor_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> list[lesson_models.LessonRead]:
        """Verified lessons of a tutor, optionally within an inclusive start-time window."""
        await self.user_service.get_tutor(tutor_id)
        stmt = self._verified_lessons_query(tutor_id)
        if start is not None:
            stmt = stmt.filter(db_models.Lessons.scheduled_start_at >= start.astimezone(timezone.utc))
        if end is not None:
            stmt = stmt.filter(db_models.Lessons.scheduled_start_at <= end.astimezone(timezone.utc))
        stmt = stmt.order_by(db_models.Lessons.scheduled_start_at.asc())

        result = await self.db.execute(stmt)
        return [lesson_models.LessonRead.model_validate(lesson) for lesson in result.scalars().all()]

    async def get_student_stats_for_api(self, current_user: db_models.Users) -> list[stats_models.StudentStatsRead]:
        """
        The calling tutor's students, each with their verified hours and lesson count.
        """
        self.user_service.authorize_role(current_user, [UserRole.TUTOR])
        students = await self.user_service.get_students_for_tutor(current_user.id)
        if not students:
            return []

        lessons = await self._get_lesson_snapshots(
            db_models.Lessons.student_id.in_([student.id for student in students])
        )
        lessons_by_student: dict[UUID, list[LessonSnapshot]] = defaultdict(list)
        for lesson in lessons:
            lessons_by_student[lesson.student_id].append(lesson)

        return [
            stats_models.StudentStatsRead(
                id=student.id,
                parent_id=student.parent_id,
                name=student.name,
                active=student.active,
                grade_level=student.grade_level,
                total_verified_hours=verified_hours(lessons_by_student[student.id]),
                total_lessons=len(lessons_by_student[student.id]),
            )
            for student in students
        ]
