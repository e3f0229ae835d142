'''
API endpoints for the lesson lifecycle and parent confirmations.
'''
from typing import Annotated, Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, status

from ..database import models as db_models
from ..models import lessons as lesson_models
from ..services.security import verify_token_and_get_user
from ..services.lesson_service import LessonService


class LessonsAPI:
    """
    A class to encapsulate the lesson lifecycle endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/lessons",
            tags=["Lessons"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        # Static paths are registered before the '/{lesson_id}/...' ones.
        self.router.add_api_route(
                "/today",
                self.list_today_lessons,
                methods=["GET"],
                response_model=List[lesson_models.LessonWithDetailsRead])

        self.router.add_api_route(
                "/pending",
                self.list_pending_confirmations,
                methods=["GET"],
                response_model=List[lesson_models.LessonWithDetailsRead])

        self.router.add_api_route(
                "/history",
                self.list_lesson_history,
                methods=["GET"],
                response_model=List[lesson_models.LessonWithDetailsRead])

        self.router.add_api_route(
                "/",
                self.schedule_lesson,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/confirm",
                self.confirm_lesson,
                methods=["POST"],
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/{lesson_id}/complete",
                self.complete_lesson,
                methods=["POST"],
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/{lesson_id}/cancel",
                self.cancel_lesson,
                methods=["POST"],
                response_model=lesson_models.LessonRead)

    async def schedule_lesson(
        self,
        lesson_data: lesson_models.LessonCreate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> Any:
        """
        Schedules a lesson for one of the tutor's students. Restricted to Tutors.
        """
        return await lesson_service.schedule_lesson_for_api(lesson_data, current_user)

    async def complete_lesson(
        self,
        lesson_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> Any:
        """
        Marks a scheduled lesson as completed. Restricted to the owning Tutor.
        """
        return await lesson_service.mark_completed_for_api(lesson_id, current_user)

    async def cancel_lesson(
        self,
        lesson_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> Any:
        """
        Cancels a scheduled lesson. Allowed for the owning Tutor or the student's Parent.
        """
        return await lesson_service.cancel_lesson_for_api(lesson_id, current_user)

    async def confirm_lesson(
        self,
        confirmation_data: lesson_models.LessonConfirm,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> Any:
        """
        Records the parent's verdict (confirm or dispute) on a completed lesson.
        """
        return await lesson_service.confirm_by_parent_for_api(confirmation_data, current_user)

    async def list_today_lessons(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> List[Any]:
        return await lesson_service.get_today_lessons_for_api(current_user)

    async def list_pending_confirmations(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> List[Any]:
        return await lesson_service.get_pending_confirmations_for_api(current_user)

    async def list_lesson_history(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ) -> List[Any]:
        return await lesson_service.get_lesson_history_for_api(current_user)

# Instantiate the class and export its router
lessons_api = LessonsAPI()
router = lessons_api.router
