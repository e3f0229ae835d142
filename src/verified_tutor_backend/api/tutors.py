'''
Public reputation endpoints for tutors.
'''
from datetime import datetime
from typing import Annotated, Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from pydantic import AwareDatetime

from ..database import models as db_models
from ..models import stats as stats_models
from ..models import lessons as lesson_models
from ..services.security import verify_token_and_get_user
from ..services.reputation_service import ReputationService


class TutorsAPI:
    """
    A class to encapsulate the tutor statistics endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/tutors",
            tags=["Tutors"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/me/students",
                self.list_my_students,
                methods=["GET"],
                response_model=List[stats_models.StudentStatsRead])

        self.router.add_api_route(
                "/{tutor_id}/stats",
                self.get_stats,
                methods=["GET"],
                response_model=stats_models.TutorStats)

        self.router.add_api_route(
                "/{tutor_id}/heatmap",
                self.get_heatmap,
                methods=["GET"],
                response_model=dict[str, int])

        self.router.add_api_route(
                "/{tutor_id}/verified-lessons",
                self.list_verified_lessons,
                methods=["GET"],
                response_model=List[lesson_models.LessonRead])

    async def get_stats(
        self,
        tutor_id: UUID,
        reputation_service: Annotated[ReputationService, Depends(ReputationService)],
        as_of: Annotated[Optional[AwareDatetime], Query(description="Only count lessons starting at or before this instant")] = None
    ) -> Any:
        """
        Verified hours, verified lesson count, active students and average rating.
        """
        return await reputation_service.get_tutor_stats(tutor_id, as_of)

    async def get_heatmap(
        self,
        tutor_id: UUID,
        reputation_service: Annotated[ReputationService, Depends(ReputationService)],
        year: Annotated[int, Query(ge=1970, le=9998, description="Calendar year in the tutor's timezone")]
    ) -> Any:
        """
        Sparse map of ISO date -> number of verified lessons on that date.
        """
        return await reputation_service.get_heatmap(tutor_id, year)

    async def list_verified_lessons(
        self,
        tutor_id: UUID,
        reputation_service: Annotated[ReputationService, Depends(ReputationService)],
        start: Annotated[Optional[datetime], Query(description="Inclusive lower bound on lesson start")] = None,
        end: Annotated[Optional[datetime], Query(description="Inclusive upper bound on lesson start")] = None
    ) -> List[Any]:
        return await reputation_service.get_verified_lessons_for_api(tutor_id, start, end)

    async def list_my_students(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        reputation_service: Annotated[ReputationService, Depends(ReputationService)]
    ) -> List[Any]:
        """
        The calling tutor's students with per-student verified hours.
        """
        return await reputation_service.get_student_stats_for_api(current_user)

# Instantiate the class and export its router
tutors_api = TutorsAPI()
router = tutors_api.router
