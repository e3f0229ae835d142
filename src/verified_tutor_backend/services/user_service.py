'''

'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..common.exceptions import NotFound
from ..common.logger import log


class UserService:
    """
    Read access to users and the student directory.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Authorization Helper ---

    def authorize_role(self, current_user: db_models.Users, allowed_roles: list[UserRole]):
        """Helper to check general role permissions."""
        allowed_role_values = [role.value for role in allowed_roles]
        if current_user.role not in allowed_role_values:
            log.warning(f"Unauthorized action by user {current_user.id} (Role: {current_user.role}). Required one of: {allowed_role_values}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action."
            )

    # --- Users ---

    async def get_user_by_email(self, email: str) -> db_models.Users | None:
        """
        Fetches the polymorphic user (Tutor or Parent) by email.
        """
        log.info(f"Fetching user profile for email: {email}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.email == email)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by email {email}: {e}", exc_info=True)
            raise

    async def get_user_by_id(self, user_id: UUID) -> db_models.Users | None:
        log.info(f"Fetching user profile for ID: {user_id}")
        try:
            return await self.db.get(db_models.Users, user_id)
        except Exception as e:
            log.error(f"Database error fetching user by ID {user_id}: {e}", exc_info=True)
            raise

    async def get_tutor(self, tutor_id: UUID) -> db_models.Tutors:
        """Fetches a tutor or raises NotFound."""
        tutor = await self.db.get(db_models.Tutors, tutor_id)
        if tutor is None:
            log.warning(f"Tried to fetch non-existing tutor: {tutor_id}")
            raise NotFound("Tutor not found.")
        return tutor

    # --- Student Directory ---

    async def get_student(self, student_id: UUID) -> db_models.Students | None:
        return await self.db.get(db_models.Students, student_id)

    async def get_students_for_tutor(self, tutor_id: UUID) -> list[db_models.Students]:
        """All students of a tutor, active ones first, newest first."""
        stmt = select(db_models.Students).filter(
            db_models.Students.tutor_id == tutor_id
        ).order_by(
            db_models.Students.active.desc(),
            db_models.Students.created_at.desc()
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_active_students(self, tutor_id: UUID) -> int:
        stmt = select(func.count(db_models.Students.id)).filter(
            db_models.Students.tutor_id == tutor_id,
            db_models.Students.active.is_(True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()
